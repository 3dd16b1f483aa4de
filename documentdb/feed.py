"""
Feed iterator.

Lazily enumerates a read-feed or query result page by page, following the
server's opaque continuation tokens until the feed is exhausted.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from .constants import HttpHeaders, OperationType
from .exceptions import QueryError
from .executor import Request, RequestExecutor
from .links import FeedLink, ResourceType
from .models import Query, query_body
from .options import ConsistencyLevel, FeedOptions, compose_feed_headers

logger = logging.getLogger(__name__)


# Body key holding the page items, per feed type.
FEED_BODY_KEYS: Dict[ResourceType, str] = {
    ResourceType.DATABASE: "Databases",
    ResourceType.COLLECTION: "DocumentCollections",
    ResourceType.DOCUMENT: "Documents",
    ResourceType.ATTACHMENT: "Attachments",
    ResourceType.STORED_PROCEDURE: "StoredProcedures",
    ResourceType.TRIGGER: "Triggers",
    ResourceType.USER_DEFINED_FUNCTION: "UserDefinedFunctions",
    ResourceType.USER: "Users",
    ResourceType.PERMISSION: "Permissions",
    ResourceType.CONFLICT: "Conflicts",
    ResourceType.OFFER: "Offers",
}


class FeedState(str, Enum):
    """Iterator lifecycle."""
    READY = "ready"
    FETCHING = "fetching"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass
class FeedPage:
    """One page of results."""

    items: List[Any]
    headers: Dict[str, str] = field(default_factory=dict)
    continuation: Optional[str] = None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def request_charge(self) -> Optional[float]:
        for key, value in self.headers.items():
            if key.lower() == HttpHeaders.REQUEST_CHARGE:
                return float(value)
        return None


def extract_items(resource_type: ResourceType, body: Any) -> List[Any]:
    """Pull the item list out of a feed response body."""
    if body is None:
        return []
    if isinstance(body, list):
        return body
    if not isinstance(body, dict):
        raise QueryError(200, str(body), message="Unexpected feed response body")

    key = FEED_BODY_KEYS.get(resource_type)
    if key and key in body:
        return list(body[key] or [])
    for name, value in body.items():
        if not name.startswith("_") and isinstance(value, list):
            return list(value)
    return []


class FeedIterator:
    """
    Forward-only, non-restartable enumeration of one feed.

    Starts READY with the caller's continuation (usually none). Each fetch
    sends the previous page's continuation; a page without one moves the
    iterator to EXHAUSTED. The first unrecovered error moves it to FAILED and
    is re-raised by every later call without further I/O. Not safe for
    concurrent use from several tasks.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        feed: FeedLink,
        query: Optional[Query] = None,
        options: Optional[FeedOptions] = None,
        default_consistency: Optional[ConsistencyLevel] = None,
        on_page: Optional[Callable[[FeedPage], None]] = None
    ) -> None:
        self._executor = executor
        self._feed = feed
        self._body = query_body(query) if query is not None else None
        self._options = options or FeedOptions()
        self._default_consistency = default_consistency
        self._on_page = on_page

        self._continuation: Optional[str] = self._options.continuation
        self._state = FeedState.READY
        self._error: Optional[QueryError] = None
        self._pages_fetched = 0

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def continuation(self) -> Optional[str]:
        """Token to resume after the last fetched page (None once exhausted)."""
        return self._continuation

    @property
    def feed_link(self) -> FeedLink:
        return self._feed

    @property
    def pages_fetched(self) -> int:
        return self._pages_fetched

    def _build_request(self) -> Request:
        tracked = self._executor.session_tracker.lookup(self._feed.session_scope())
        headers = compose_feed_headers(
            self._default_consistency,
            self._options,
            self._continuation,
            tracked,
        )
        operation = OperationType.QUERY if self._body is not None else OperationType.READ_FEED
        return Request.for_feed(operation, self._feed, headers=headers, body=self._body)

    async def fetch_next_page(self) -> Optional[FeedPage]:
        """
        Fetch the next page.

        Returns:
            The page, or None once the feed is exhausted

        Raises:
            QueryError: The classified failure; repeated on later calls
        """
        if self._error is not None:
            raise self._error
        if self._state == FeedState.EXHAUSTED:
            return None
        if self._state == FeedState.FETCHING:
            raise RuntimeError("FeedIterator does not support concurrent fetches")

        self._state = FeedState.FETCHING
        try:
            result = await self._executor.execute(self._build_request())
        except BaseException:
            # cancelled or local failure before a classified result; the cursor is unchanged
            self._state = FeedState.READY
            raise

        if result.error is not None:
            self._state = FeedState.FAILED
            self._error = result.error
            logger.debug(f"Feed {self._feed} failed after {self._pages_fetched} pages: {result.error}")
            raise result.error

        response = result.unwrap()
        try:
            items = extract_items(self._feed.resource_type, response.resource)
        except QueryError as e:
            self._state = FeedState.FAILED
            self._error = e
            raise

        continuation = response.header(HttpHeaders.CONTINUATION) or None
        page = FeedPage(items=items, headers=response.headers, continuation=continuation)

        self._pages_fetched += 1
        self._continuation = continuation
        self._state = FeedState.READY if continuation else FeedState.EXHAUSTED

        if self._executor.metrics:
            self._executor.metrics.track_page(self._feed.resource_type.value)
        if self._on_page:
            self._on_page(page)

        return page

    def has_more_results(self) -> bool:
        return self._state in (FeedState.READY, FeedState.FETCHING)

    async def pages(self) -> AsyncIterator[FeedPage]:
        """Yield the remaining pages."""
        while True:
            page = await self.fetch_next_page()
            if page is None:
                return
            if page.items or page.continuation:
                yield page

    def __aiter__(self) -> AsyncIterator[Any]:
        return self._iterate_items()

    async def _iterate_items(self) -> AsyncIterator[Any]:
        async for page in self.pages():
            for item in page.items:
                yield item

    async def drain(self) -> List[Any]:
        """Fetch every remaining page and return all items in server order."""
        items: List[Any] = []
        async for page in self.pages():
            items.extend(page.items)
        return items

    to_list = drain
