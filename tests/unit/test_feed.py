"""
Unit tests for the feed iterator.
"""

import pytest

from documentdb.constants import HttpHeaders
from documentdb.exceptions import NotFound, QueryError, ServiceUnavailable
from documentdb.feed import FeedIterator, FeedPage, FeedState, extract_items
from documentdb.links import ResourceLink, ResourceType, parse
from documentdb.models import SqlParameter, SqlQuerySpec
from documentdb.options import ConsistencyLevel, FeedOptions

DATABASES = ResourceLink().feed(ResourceType.DATABASE)


def seed_databases(service, count):
    service.seed("dbs", *({"id": f"db{i:02d}"} for i in range(count)))


class TestExtractItems:
    """Tests for pulling items out of feed bodies."""

    def test_known_key(self):
        """Test extraction using the per-type body key."""
        body = {"_rid": "", "Documents": [{"id": "a"}], "_count": 1}
        assert extract_items(ResourceType.DOCUMENT, body) == [{"id": "a"}]

    def test_fallback_to_first_list(self):
        """Test extraction from an unexpected key."""
        assert extract_items(ResourceType.DOCUMENT, {"_rid": "", "Values": [1, 2]}) == [1, 2]

    def test_empty_and_bare_list(self):
        """Test empty bodies and list bodies."""
        assert extract_items(ResourceType.DATABASE, None) == []
        assert extract_items(ResourceType.DATABASE, [{"id": "a"}]) == [{"id": "a"}]

    def test_unexpected_body(self):
        """Test that a scalar body is a classified failure."""
        with pytest.raises(QueryError):
            extract_items(ResourceType.DATABASE, "oops")


class TestPaging:
    """Tests for page-by-page enumeration."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count,page_size,expected_pages", [
        (0, 3, 0),
        (1, 3, 1),
        (3, 3, 1),
        (7, 3, 3),
        (9, 3, 3),
    ])
    async def test_page_count(self, executor, service, count, page_size, expected_pages):
        """Test that N items in pages of k yield ceil(N/k) pages in order."""
        seed_databases(service, count)
        feed = FeedIterator(executor, DATABASES, options=FeedOptions(max_item_count=page_size))

        pages = [page async for page in feed.pages()]

        assert len(pages) == expected_pages
        ids = [item["id"] for page in pages for item in page.items]
        assert ids == [f"db{i:02d}" for i in range(count)]
        assert feed.state == FeedState.EXHAUSTED

    @pytest.mark.asyncio
    async def test_continuation_resent_verbatim(self, executor, service):
        """Test that each page request carries the previous page's token."""
        seed_databases(service, 5)
        feed = FeedIterator(executor, DATABASES, options=FeedOptions(max_item_count=2))

        first = await feed.fetch_next_page()
        assert first.continuation == "2"
        assert service.requests[-1].header(HttpHeaders.CONTINUATION) is None

        await feed.fetch_next_page()
        assert service.requests[-1].header(HttpHeaders.CONTINUATION) == "2"
        assert feed.continuation == "4"

    @pytest.mark.asyncio
    async def test_exhausted_iterator_does_no_io(self, executor, service):
        """Test that fetching past the end returns None without requests."""
        seed_databases(service, 2)
        feed = FeedIterator(executor, DATABASES)

        assert len(await feed.fetch_next_page()) == 2
        sent = len(service.requests)

        assert await feed.fetch_next_page() is None
        assert await feed.fetch_next_page() is None
        assert len(service.requests) == sent
        assert not feed.has_more_results()

    @pytest.mark.asyncio
    async def test_resume_from_continuation(self, executor, service):
        """Test starting a new iterator from a saved continuation."""
        seed_databases(service, 5)
        first = FeedIterator(executor, DATABASES, options=FeedOptions(max_item_count=2))
        await first.fetch_next_page()

        resumed = FeedIterator(
            executor,
            DATABASES,
            options=FeedOptions(max_item_count=2, continuation=first.continuation),
        )
        items = await resumed.drain()

        assert [item["id"] for item in items] == ["db02", "db03", "db04"]

    @pytest.mark.asyncio
    async def test_async_iteration_yields_items(self, executor, service):
        """Test iterating items across page boundaries."""
        seed_databases(service, 4)
        feed = FeedIterator(executor, DATABASES, options=FeedOptions(max_item_count=3))

        ids = [item["id"] async for item in feed]

        assert ids == ["db00", "db01", "db02", "db03"]
        assert feed.pages_fetched == 2

    @pytest.mark.asyncio
    async def test_on_page_callback(self, executor, service):
        """Test that every fetched page is reported."""
        seed_databases(service, 3)
        seen = []
        feed = FeedIterator(
            executor, DATABASES, options=FeedOptions(max_item_count=2), on_page=seen.append
        )

        await feed.to_list()

        assert [len(page) for page in seen] == [2, 1]
        assert all(isinstance(page, FeedPage) for page in seen)
        assert seen[0].request_charge == 1.0


class TestQueries:
    """Tests for query enumeration."""

    @pytest.mark.asyncio
    async def test_query_is_posted(self, executor, service):
        """Test that queries are sent as query+json POSTs."""
        seed_databases(service, 3)
        spec = SqlQuerySpec(
            query="SELECT * FROM root r WHERE r.id = @id",
            parameters=[SqlParameter(name="@id", value="db01")],
        )
        feed = FeedIterator(executor, DATABASES, query=spec)

        items = await feed.drain()

        assert [item["id"] for item in items] == ["db01"]
        sent = service.requests[-1]
        assert sent.method == "POST"
        assert sent.header(HttpHeaders.IS_QUERY) == "True"
        assert sent.header(HttpHeaders.CONTENT_TYPE) == "application/query+json"
        assert sent.json() == {
            "query": "SELECT * FROM root r WHERE r.id = @id",
            "parameters": [{"name": "@id", "value": "db01"}],
        }

    @pytest.mark.asyncio
    async def test_plain_string_query(self, executor, service):
        """Test that a bare query string is wrapped with no parameters."""
        seed_databases(service, 2)
        feed = FeedIterator(executor, DATABASES, query="SELECT * FROM root")

        assert len(await feed.drain()) == 2
        assert service.requests[-1].json() == {"query": "SELECT * FROM root", "parameters": []}


class TestFailures:
    """Tests for the FAILED state."""

    @pytest.mark.asyncio
    async def test_failure_is_sticky(self, executor, service):
        """Test that a failed iterator re-raises without more I/O."""
        feed = FeedIterator(executor, parse("dbs/missing").feed(ResourceType.COLLECTION))

        with pytest.raises(NotFound):
            await feed.fetch_next_page()
        sent = len(service.requests)

        with pytest.raises(NotFound):
            await feed.fetch_next_page()
        assert len(service.requests) == sent
        assert feed.state == FeedState.FAILED

    @pytest.mark.asyncio
    async def test_transient_page_failure_retried(self, executor, service, sleep):
        """Test that a page fetch recovers from a 503 through the executor."""
        seed_databases(service, 2)
        service.fail_next(503)

        items = await FeedIterator(executor, DATABASES).drain()

        assert len(items) == 2
        assert len(sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_failure_mid_feed_keeps_earlier_pages(self, executor, service):
        """Test that pages fetched before a failure stay with the caller."""
        seed_databases(service, 4)
        feed = FeedIterator(executor, DATABASES, options=FeedOptions(max_item_count=2))
        first = await feed.fetch_next_page()

        service.fail_next(503, times=10)
        with pytest.raises(ServiceUnavailable):
            await feed.fetch_next_page()

        assert len(first) == 2
        assert feed.state == FeedState.FAILED


class TestSessionReplay:
    """Tests for session tokens on feed reads."""

    @pytest.mark.asyncio
    async def test_session_token_replayed(self, executor, service):
        """Test that Session feeds send the tracked token for their scope."""
        executor.session_tracker.record("", "0:17")
        feed = FeedIterator(executor, DATABASES, default_consistency=ConsistencyLevel.SESSION)

        await feed.drain()

        assert service.requests[-1].header(HttpHeaders.SESSION_TOKEN) == "0:17"
        assert service.requests[-1].header(HttpHeaders.CONSISTENCY_LEVEL) == "Session"
