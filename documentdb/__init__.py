"""
documentdb: async client for DocumentDB-style document databases

Hierarchical resource addressing, signed requests with bounded retries,
continuation-token paging and session-consistency tracking.
"""

__version__ = "0.1.0"

from .client import DocumentClient
from .core.config import ClientConfig, ConfigManager, ConnectionPolicy, RetryOptions
from .exceptions import (
    BadRequest,
    Conflict,
    DocumentDBError,
    InvalidLinkFormat,
    NotFound,
    PreconditionFailed,
    QueryError,
    RateLimited,
    RequestEntityTooLarge,
    ServiceUnavailable,
    TransportFailure,
    Unauthorized,
)
from .feed import FeedIterator, FeedPage
from .links import FeedLink, ResourceLink, ResourceType
from .models import ResourceResponse, Result, SqlParameter, SqlQuerySpec
from .options import (
    AccessCondition,
    AccessConditionType,
    ConsistencyLevel,
    FeedOptions,
    IndexingDirective,
    MediaOptions,
    RequestOptions,
)

__all__ = [
    "AccessCondition",
    "AccessConditionType",
    "BadRequest",
    "ClientConfig",
    "ConfigManager",
    "Conflict",
    "ConnectionPolicy",
    "ConsistencyLevel",
    "DocumentClient",
    "DocumentDBError",
    "FeedIterator",
    "FeedLink",
    "FeedOptions",
    "FeedPage",
    "IndexingDirective",
    "InvalidLinkFormat",
    "MediaOptions",
    "NotFound",
    "PreconditionFailed",
    "QueryError",
    "RateLimited",
    "RequestEntityTooLarge",
    "RequestOptions",
    "ResourceLink",
    "ResourceResponse",
    "ResourceType",
    "Result",
    "RetryOptions",
    "ServiceUnavailable",
    "SqlParameter",
    "SqlQuerySpec",
    "TransportFailure",
    "Unauthorized",
    "__version__",
]
