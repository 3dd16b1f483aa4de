"""
Shared fixtures for the client test suite.
"""

from typing import List

import pytest
from fakes import TEST_ENDPOINT, TEST_MASTER_KEY, FakeDocumentService

from documentdb.auth.signer import MasterKeySigner
from documentdb.client import DocumentClient
from documentdb.core.config import ConnectionPolicy, RetryOptions
from documentdb.executor import RequestExecutor
from documentdb.retry import RetryPolicy


class RecordingSleep:
    """Stands in for asyncio.sleep; remembers requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def service():
    """Fresh in-memory document service."""
    return FakeDocumentService()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def executor(service, sleep):
    """Executor signing with the test key, sending to the fake service."""
    return RequestExecutor(
        TEST_ENDPOINT,
        MasterKeySigner(TEST_MASTER_KEY),
        service,
        retry_policy=RetryPolicy(max_attempts=4, initial_backoff=0.1, max_backoff=1.0),
        sleep=sleep,
        clock=lambda: "Mon, 19 Oct 2026 12:00:00 GMT",
    )


@pytest.fixture
async def client(service):
    """Client over the fake service with zero-delay retries."""
    policy = ConnectionPolicy(retry=RetryOptions(max_attempts=4, initial_backoff=0.0, max_backoff=0.0))
    async with DocumentClient(
        TEST_ENDPOINT,
        master_key=TEST_MASTER_KEY,
        connection_policy=policy,
        transport=service,
    ) as documentdb_client:
        yield documentdb_client
