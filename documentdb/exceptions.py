"""
DocumentDB Client Exception Hierarchy

Classified error types for link parsing, request composition and
server responses.

Author: documentdb-client contributors
Date: 2026-10-19
"""

import json
from typing import Any, Dict, Mapping, Optional


class DocumentDBError(Exception):
    """
    Base exception for all client errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g. 'NotFound')
        details: Additional context
    """

    error_code: str = "DocumentDBError"
    is_transient: bool = False

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# ========== Local Errors ==========

class InvalidLinkFormat(DocumentDBError):
    """Raised when a resource link cannot be parsed or violates the hierarchy."""
    error_code = "InvalidLinkFormat"

    def __init__(self, link: str, reason: str):
        super().__init__(
            f"Invalid resource link '{link}': {reason}",
            details={"link": link, "reason": reason}
        )
        self.link = link
        self.reason = reason


class ConfigurationError(DocumentDBError):
    """Raised when client configuration is invalid."""
    error_code = "InvalidConfiguration"


# ========== Response Errors ==========

class QueryError(DocumentDBError):
    """
    Terminal classification of a failed exchange.

    Attributes:
        code: HTTP status code (0 for transport failures)
        body: Raw error body as returned by the service
        headers: Response headers, if a response was received
    """

    error_code = "QueryError"

    def __init__(
        self,
        code: int,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        message: Optional[str] = None
    ):
        message = message or _message_from_body(body) or f"Request failed with status {code}"
        super().__init__(message, details={"code": code})
        self.code = code
        self.body = body
        self.headers = dict(headers or {})

    @property
    def activity_id(self) -> Optional[str]:
        """Server activity id, if the response carried one."""
        return _get_header(self.headers, "x-ms-activity-id")


class BadRequest(QueryError):
    """Request was rejected as malformed (400) or failed local validation."""
    error_code = "BadRequest"

    def __init__(self, body: str = "", headers: Optional[Mapping[str, str]] = None, message: Optional[str] = None):
        super().__init__(400, body, headers, message)


class Unauthorized(QueryError):
    """Signer or credential error (401/403). Never retried."""
    error_code = "Unauthorized"

    def __init__(
        self,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        message: Optional[str] = None,
        code: int = 401
    ):
        super().__init__(code, body, headers, message)


class NotFound(QueryError):
    """Resource does not exist (404)."""
    error_code = "NotFound"

    def __init__(self, body: str = "", headers: Optional[Mapping[str, str]] = None, message: Optional[str] = None):
        super().__init__(404, body, headers, message)


class Conflict(QueryError):
    """Resource already exists or id-uniqueness violation (409)."""
    error_code = "Conflict"

    def __init__(self, body: str = "", headers: Optional[Mapping[str, str]] = None, message: Optional[str] = None):
        super().__init__(409, body, headers, message)


class PreconditionFailed(QueryError):
    """Entity tag mismatch on a conditional operation (412)."""
    error_code = "PreconditionFailed"

    def __init__(self, body: str = "", headers: Optional[Mapping[str, str]] = None, message: Optional[str] = None):
        super().__init__(412, body, headers, message)


class RequestEntityTooLarge(QueryError):
    """Request body exceeds the service limit (413)."""
    error_code = "RequestEntityTooLarge"

    def __init__(self, body: str = "", headers: Optional[Mapping[str, str]] = None, message: Optional[str] = None):
        super().__init__(413, body, headers, message)


class RateLimited(QueryError):
    """
    Request rate too large (429).

    Attributes:
        retry_after: Server-suggested delay in seconds, if any
    """
    error_code = "RateLimited"
    is_transient = True

    def __init__(
        self,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        retry_after: Optional[float] = None,
        message: Optional[str] = None
    ):
        super().__init__(429, body, headers, message)
        self.retry_after = retry_after
        self.details["retry_after"] = retry_after


class ServiceUnavailable(QueryError):
    """Server-side failure (5xx)."""
    error_code = "ServiceUnavailable"
    is_transient = True

    def __init__(
        self,
        code: int = 503,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        retry_after: Optional[float] = None,
        message: Optional[str] = None
    ):
        super().__init__(code, body, headers, message)
        self.retry_after = retry_after


class TransportFailure(QueryError):
    """Connection-level failure (refused, timeout, DNS). Reported with code 0."""
    error_code = "TransportFailure"
    is_transient = True

    def __init__(self, message: str):
        super().__init__(0, message, message=message)
        self.retry_after: Optional[float] = None


# ========== Classification ==========

def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def _message_from_body(body: str) -> Optional[str]:
    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return body
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("Message")
    return None


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """
    Extract the server-suggested retry delay in seconds.

    `x-ms-retry-after-ms` takes precedence over `Retry-After`.

    Args:
        headers: Response headers

    Returns:
        Delay in seconds, or None when the response carries no usable hint
    """
    retry_after_ms = _get_header(headers, "x-ms-retry-after-ms")
    if retry_after_ms:
        try:
            return max(0.0, float(retry_after_ms) / 1000.0)
        except ValueError:
            pass

    retry_after = _get_header(headers, "retry-after")
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            return None

    return None


def classify_response(status: int, headers: Mapping[str, str], body: str) -> QueryError:
    """
    Map a non-success HTTP status to a classified error.

    Args:
        status: HTTP status code
        headers: Response headers
        body: Raw response body

    Returns:
        QueryError subclass instance for the status
    """
    if status == 400:
        return BadRequest(body, headers)
    if status in (401, 403):
        return Unauthorized(body, headers, code=status)
    if status == 404:
        return NotFound(body, headers)
    if status == 409:
        return Conflict(body, headers)
    if status == 412:
        return PreconditionFailed(body, headers)
    if status == 413:
        return RequestEntityTooLarge(body, headers)
    if status == 429:
        return RateLimited(body, headers, retry_after=parse_retry_after(headers))
    if status >= 500:
        return ServiceUnavailable(status, body, headers, retry_after=parse_retry_after(headers))
    return QueryError(status, body, headers)


def is_transient_error(error: Exception) -> bool:
    """
    Determine if an error is transient and can be retried.

    Args:
        error: Exception to check

    Returns:
        True if error is transient and operation should be retried
    """
    if isinstance(error, DocumentDBError):
        return getattr(error, "is_transient", False)

    if isinstance(error, (
        ConnectionError,
        ConnectionRefusedError,
        ConnectionResetError,
        TimeoutError,
    )):
        return True

    return False
