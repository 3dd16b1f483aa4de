"""
Shared plumbing for the per-resource operation tables.

Each table composes its calls through the option composer and the link
model, then hands a ``Request`` to the shared executor. Tables hold no
state of their own beyond the executor reference.
"""

from typing import Any, Dict, Optional, Union

from ..constants import OperationType
from ..exceptions import InvalidLinkFormat
from ..executor import Request, RequestExecutor
from ..feed import FeedIterator
from ..links import FeedLink, ResourceLink, ResourceType, parse, parse_expected
from ..models import Query, ResourceResponse
from ..options import ConsistencyLevel, FeedOptions, RequestOptions, compose_headers

LinkLike = Union[str, ResourceLink]


class ResourceTable:
    """
    Base table: read, delete, read-all and query for one resource kind.

    Subclasses set ``resource_type`` and ``parent_type`` (None for kinds that
    live directly under the account).
    """

    resource_type: ResourceType
    parent_type: Optional[ResourceType] = None

    def __init__(self, executor: RequestExecutor, default_consistency: Optional[ConsistencyLevel] = None):
        self._executor = executor
        self._default_consistency = default_consistency

    # ---- link helpers ----

    def _parent(self, parent_link: Optional[LinkLike]) -> ResourceLink:
        if self.parent_type is None:
            if parent_link is not None and not parse(parent_link).is_root:
                raise InvalidLinkFormat(str(parent_link), f"{self.resource_type.value} live under the account root")
            return ResourceLink()
        if parent_link is None:
            raise TypeError(f"a '{self.parent_type.value}' link is required")
        return parse_expected(parent_link, self.parent_type)

    def _link(self, link: LinkLike) -> ResourceLink:
        return parse_expected(link, self.resource_type)

    def _feed(self, parent_link: Optional[LinkLike]) -> FeedLink:
        return self._parent(parent_link).feed(self.resource_type)

    # ---- request helpers ----

    def _headers(self, options: Optional[RequestOptions], operation: OperationType, scope: str) -> Dict[str, str]:
        tracked = self._executor.session_tracker.lookup(scope)
        return compose_headers(self._default_consistency, options, operation, tracked)

    async def _send(self, request: Request) -> ResourceResponse:
        result = await self._executor.execute(request)
        return result.unwrap()

    async def _create(
        self,
        parent_link: Optional[LinkLike],
        body: Any,
        options: Optional[RequestOptions],
        operation: OperationType = OperationType.CREATE,
        extra_headers: Optional[Dict[str, str]] = None
    ) -> ResourceResponse:
        feed = self._feed(parent_link)
        options = options or RequestOptions()
        headers = self._headers(options, operation, feed.session_scope())
        headers.update(extra_headers or {})
        return await self._send(Request.for_feed(
            operation,
            feed,
            headers=headers,
            body=body,
            disable_automatic_id_generation=options.disable_automatic_id_generation,
        ))

    async def _on_resource(
        self,
        operation: OperationType,
        link: LinkLike,
        options: Optional[RequestOptions],
        body: Any = None,
        extra_headers: Optional[Dict[str, str]] = None,
        raw_response: bool = False
    ) -> ResourceResponse:
        parsed = self._link(link)
        headers = self._headers(options, operation, parsed.session_scope())
        headers.update(extra_headers or {})
        return await self._send(Request.for_resource(
            operation, parsed, headers=headers, body=body, raw_response=raw_response
        ))

    # ---- public operations ----

    async def read(self, link: LinkLike, options: Optional[RequestOptions] = None) -> ResourceResponse:
        """Read one resource by its link."""
        return await self._on_resource(OperationType.READ, link, options)

    def read_all(self, parent_link: Optional[LinkLike] = None, options: Optional[FeedOptions] = None) -> FeedIterator:
        """Iterator over every child of this kind under ``parent_link``."""
        return FeedIterator(
            self._executor,
            self._feed(parent_link),
            options=options,
            default_consistency=self._default_consistency,
        )

    def query(
        self,
        parent_link: Optional[LinkLike],
        query: Query,
        options: Optional[FeedOptions] = None
    ) -> FeedIterator:
        """Iterator over the results of a query against this kind's feed."""
        return FeedIterator(
            self._executor,
            self._feed(parent_link),
            query=query,
            options=options,
            default_consistency=self._default_consistency,
        )


class DeletableTable(ResourceTable):
    """Table whose resources can be deleted."""

    async def delete(self, link: LinkLike, options: Optional[RequestOptions] = None) -> ResourceResponse:
        """Delete one resource. The response carries no resource body."""
        return await self._on_resource(OperationType.DELETE, link, options)


class CrudTable(DeletableTable):
    """Table supporting create and replace as well."""

    async def create(
        self,
        parent_link: LinkLike,
        body: Dict[str, Any],
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """Create a child resource under ``parent_link``."""
        return await self._create(parent_link, self._validate_body(body), options)

    async def replace(
        self,
        link: LinkLike,
        body: Dict[str, Any],
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """Replace a resource. Use an IfMatch access condition for optimistic concurrency."""
        return await self._on_resource(OperationType.REPLACE, link, options, body=self._validate_body(body))

    def _validate_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(body, dict):
            raise TypeError(f"{self.resource_type.name.lower()} body must be a dict")
        return body
