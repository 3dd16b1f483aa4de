"""
Wire-level constants: header names, API version and operation kinds.
"""

from enum import Enum

API_VERSION = "2015-12-16"
USER_AGENT = "documentdb-python-client/0.1.0"

QUERY_CONTENT_TYPE = "application/query+json"
JSON_CONTENT_TYPE = "application/json"
DEFAULT_MEDIA_CONTENT_TYPE = "application/octet-stream"


class HttpHeaders:
    """Request and response header names."""

    AUTHORIZATION = "authorization"
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    USER_AGENT = "User-Agent"
    IF_MATCH = "If-Match"
    IF_NONE_MATCH = "If-None-Match"
    SLUG = "Slug"
    RETRY_AFTER = "Retry-After"

    X_DATE = "x-ms-date"
    VERSION = "x-ms-version"
    CONSISTENCY_LEVEL = "x-ms-consistency-level"
    SESSION_TOKEN = "x-ms-session-token"
    CONTINUATION = "x-ms-continuation"
    MAX_ITEM_COUNT = "x-ms-max-item-count"
    PRE_TRIGGER_INCLUDE = "x-ms-documentdb-pre-trigger-include"
    POST_TRIGGER_INCLUDE = "x-ms-documentdb-post-trigger-include"
    INDEXING_DIRECTIVE = "x-ms-indexing-directive"
    RESOURCE_TOKEN_EXPIRY = "x-ms-documentdb-expiry-seconds"
    IS_QUERY = "x-ms-documentdb-isquery"
    IS_UPSERT = "x-ms-documentdb-is-upsert"
    RETRY_AFTER_MS = "x-ms-retry-after-ms"
    REQUEST_CHARGE = "x-ms-request-charge"
    ACTIVITY_ID = "x-ms-activity-id"
    ITEM_COUNT = "x-ms-item-count"


class OperationType(str, Enum):
    """Logical operation kinds issued by the executor."""

    CREATE = "create"
    UPSERT = "upsert"
    READ = "read"
    REPLACE = "replace"
    DELETE = "delete"
    EXECUTE = "execute"
    READ_FEED = "read_feed"
    QUERY = "query"

    @property
    def method(self) -> str:
        """HTTP method used for the operation."""
        return _METHODS[self]

    @property
    def is_read(self) -> bool:
        return self in (OperationType.READ, OperationType.READ_FEED, OperationType.QUERY)


_METHODS = {
    OperationType.CREATE: "POST",
    OperationType.UPSERT: "POST",
    OperationType.READ: "GET",
    OperationType.REPLACE: "PUT",
    OperationType.DELETE: "DELETE",
    OperationType.EXECUTE: "POST",
    OperationType.READ_FEED: "GET",
    OperationType.QUERY: "POST",
}
