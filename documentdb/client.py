"""
DocumentDB Client.

Facade wiring credentials, transport, session tracking and retries into the
per-resource operation tables.

Author: documentdb-client contributors
Date: 2026-10-19
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from .auth.signer import select_signer
from .constants import OperationType
from .core.config import ClientConfig, ConnectionPolicy
from .executor import Request, RequestExecutor
from .links import ResourceLink, parse
from .metrics import ClientMetrics
from .models import ResourceResponse
from .options import ConsistencyLevel
from .resources import (
    AttachmentTable,
    CollectionTable,
    ConflictTable,
    DatabaseTable,
    DocumentTable,
    MediaTable,
    OfferTable,
    PermissionTable,
    StoredProcedureTable,
    TriggerTable,
    UserDefinedFunctionTable,
    UserTable,
)
from .session import SessionTracker
from .transport import AiohttpTransport, Transport

logger = logging.getLogger(__name__)


class DocumentClient:
    """
    Async client for one database account.

    Operations are grouped by resource kind::

        async with DocumentClient(endpoint, master_key=key) as client:
            db = await client.databases.create({"id": "db1"})
            coll = await client.collections.create("dbs/db1", {"id": "c1"})
            async for doc in client.documents.query("dbs/db1/colls/c1", "SELECT * FROM c"):
                ...

    All tables share one executor, so session tokens observed by writes in
    one table are replayed by Session-consistency reads in another.

    Attributes:
        endpoint: Account endpoint without trailing slash
        consistency_level: Client-wide default consistency (None: account default)
        session_tracker: Session tokens per scope
        metrics: Prometheus collectors, when enabled
    """

    def __init__(
        self,
        endpoint: str,
        master_key: Optional[str] = None,
        resource_tokens: Optional[Mapping[str, str]] = None,
        permission_feed: Optional[Iterable[Mapping[str, Any]]] = None,
        connection_policy: Optional[ConnectionPolicy] = None,
        consistency_level: Optional[ConsistencyLevel] = None,
        transport: Optional[Transport] = None,
        metrics: Optional[ClientMetrics] = None
    ) -> None:
        """
        Initialize the client.

        Args:
            endpoint: Account endpoint URL
            master_key: Base64 account master key
            resource_tokens: Resource link (or id) to resource token
            permission_feed: Permission resources whose tokens to use
            connection_policy: Timeouts, pool size and retry policy
            consistency_level: Default consistency for reads
            transport: Transport override (tests, custom HTTP stacks)
            metrics: Prometheus collectors to record into

        Raises:
            Unauthorized: No credentials, both kinds, or a malformed master key
        """
        self.endpoint = endpoint.rstrip("/")
        self.connection_policy = connection_policy or ConnectionPolicy()
        self.consistency_level = ConsistencyLevel(consistency_level) if consistency_level else None
        self.metrics = metrics

        signer = select_signer(master_key, resource_tokens, permission_feed)
        self._owns_transport = transport is None
        self.transport: Transport = transport or AiohttpTransport(
            timeout=self.connection_policy.request_timeout,
            connection_limit=self.connection_policy.connection_limit,
            verify_ssl=self.connection_policy.verify_ssl,
        )
        self.session_tracker = SessionTracker()
        self._executor = RequestExecutor(
            self.endpoint,
            signer,
            self.transport,
            session_tracker=self.session_tracker,
            retry_policy=self.connection_policy.retry.to_policy(),
            metrics=metrics,
        )

        default = self.consistency_level
        self.databases = DatabaseTable(self._executor, default)
        self.collections = CollectionTable(self._executor, default)
        self.documents = DocumentTable(self._executor, default)
        self.attachments = AttachmentTable(self._executor, default)
        self.media = MediaTable(self._executor, default)
        self.stored_procedures = StoredProcedureTable(self._executor, default)
        self.triggers = TriggerTable(self._executor, default)
        self.user_defined_functions = UserDefinedFunctionTable(self._executor, default)
        self.users = UserTable(self._executor, default)
        self.permissions = PermissionTable(self._executor, default)
        self.offers = OfferTable(self._executor, default)
        self.conflicts = ConflictTable(self._executor, default)

        logger.info(f"DocumentDB client created for {self.endpoint}")

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        metrics: Optional[ClientMetrics] = None
    ) -> "DocumentClient":
        """Build a client from a loaded ClientConfig."""
        return cls(
            config.endpoint,
            master_key=config.master_key,
            resource_tokens=config.resource_tokens or None,
            permission_feed=config.permission_feed or None,
            connection_policy=config.connection_policy,
            consistency_level=config.consistency_level,
            transport=transport,
            metrics=metrics,
        )

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    async def get_database_account(self) -> ResourceResponse:
        """Read the account resource (addressable storage, consistency policy, media links)."""
        root = ResourceLink()
        result = await self._executor.execute(Request(
            operation=OperationType.READ,
            resource_type="",
            path=str(root),
            auth_resource_id=str(root),
        ))
        return result.unwrap()

    def session_token(self, link: str) -> Optional[str]:
        """Session token a Session-consistency read of ``link`` would send, or None."""
        return self.session_tracker.lookup(parse(link).session_scope())

    async def close(self) -> None:
        """Close the transport if the client created it."""
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self) -> "DocumentClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"DocumentClient(endpoint={self.endpoint!r}, consistency_level={self.consistency_level})"
