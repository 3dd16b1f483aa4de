"""
Request executor.

Issues one logical operation against the transport: signs each attempt,
classifies the response, retries transient failures within a bounded
policy and forwards session tokens to the tracker.

Author: documentdb-client contributors
Date: 2026-10-19
"""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from email.utils import formatdate
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import quote

from .auth.signer import CredentialSigner
from .constants import (
    API_VERSION,
    JSON_CONTENT_TYPE,
    QUERY_CONTENT_TYPE,
    USER_AGENT,
    HttpHeaders,
    OperationType,
)
from .exceptions import (
    BadRequest,
    QueryError,
    RateLimited,
    TransportFailure,
    Unauthorized,
    classify_response,
)
from .links import FeedLink, ResourceLink, ResourceType
from .metrics import ClientMetrics
from .models import Result
from .retry import RetryPolicy
from .session import SessionTracker
from .transport import HttpResponse, Transport, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Request:
    """
    One logical operation, fully composed.

    Attributes:
        operation: Operation kind (decides the HTTP method)
        resource_type: Type keyword used for signing and metrics
        path: URL path relative to the endpoint
        auth_resource_id: Resource id (link) bound into the signature
        session_scope: Tracker key for session tokens
        headers: Option-derived headers
        body: JSON-serialisable payload, raw bytes, or None
        disable_automatic_id_generation: Reject document creates without id
        raw_response: Return the body bytes undecoded (media)
    """

    operation: OperationType
    resource_type: str
    path: str
    auth_resource_id: str
    session_scope: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    disable_automatic_id_generation: bool = False
    raw_response: bool = False

    @classmethod
    def for_resource(cls, operation: OperationType, link: ResourceLink, **kwargs: Any) -> "Request":
        """Request addressing an existing resource (read, replace, delete, execute)."""
        return cls(
            operation=operation,
            resource_type=link.resource_type.value if link.resource_type else "",
            path=str(link),
            auth_resource_id=str(link),
            session_scope=link.session_scope(),
            **kwargs
        )

    @classmethod
    def for_feed(cls, operation: OperationType, feed: FeedLink, **kwargs: Any) -> "Request":
        """Request addressing a feed (create, upsert, read feed, query)."""
        return cls(
            operation=operation,
            resource_type=feed.resource_type.value,
            path=str(feed),
            auth_resource_id=str(feed.parent),
            session_scope=feed.session_scope(),
            **kwargs
        )


def _utc_date() -> str:
    return formatdate(timeval=None, localtime=False, usegmt=True)


class RequestExecutor:
    """
    Executes composed requests with signing, classification and retries.

    Attributes:
        endpoint: Service base URL without trailing slash
        session_tracker: Shared session token store
        retry_policy: Policy for transient failures
    """

    def __init__(
        self,
        endpoint: str,
        signer: CredentialSigner,
        transport: Transport,
        session_tracker: Optional[SessionTracker] = None,
        retry_policy: Optional[RetryPolicy] = None,
        metrics: Optional[ClientMetrics] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], str] = _utc_date
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.signer = signer
        self.transport = transport
        self.session_tracker = session_tracker if session_tracker is not None else SessionTracker()
        self.retry_policy = retry_policy or RetryPolicy()
        self.metrics = metrics
        self._sleep = sleep
        self._clock = clock

    def url_for(self, path: str) -> str:
        if not path:
            return f"{self.endpoint}/"
        return f"{self.endpoint}/{quote(path, safe='/')}"

    def _prepare_body(self, request: Request) -> Request:
        """Assign a document id once, before any attempt, so retries resend the same one."""
        if request.operation not in (OperationType.CREATE, OperationType.UPSERT):
            return request
        if request.resource_type != ResourceType.DOCUMENT.value or not isinstance(request.body, dict):
            return request
        if request.body.get("id"):
            return request
        if request.disable_automatic_id_generation:
            raise BadRequest(message="Document is missing 'id' and automatic id generation is disabled")
        return replace(request, body={**request.body, "id": str(uuid.uuid4())})

    def _encode_body(self, request: Request) -> Optional[bytes]:
        if request.body is None:
            return None
        if isinstance(request.body, (bytes, bytearray)):
            return bytes(request.body)
        return json.dumps(request.body, separators=(",", ":")).encode("utf-8")

    def _base_headers(self, request: Request, has_body: bool) -> Dict[str, str]:
        headers = {
            HttpHeaders.VERSION: API_VERSION,
            HttpHeaders.USER_AGENT: USER_AGENT,
            HttpHeaders.ACCEPT: JSON_CONTENT_TYPE,
        }
        if request.operation == OperationType.QUERY:
            headers[HttpHeaders.IS_QUERY] = "True"
            headers[HttpHeaders.CONTENT_TYPE] = QUERY_CONTENT_TYPE
        elif has_body:
            headers[HttpHeaders.CONTENT_TYPE] = JSON_CONTENT_TYPE
        if request.operation == OperationType.UPSERT:
            headers[HttpHeaders.IS_UPSERT] = "True"
        headers.update(request.headers)
        return headers

    def _sign(self, request: Request, headers: Dict[str, str]) -> Dict[str, str]:
        """Fresh date and authorization for one attempt."""
        date = self._clock()
        signed = dict(headers)
        signed[HttpHeaders.X_DATE] = date
        signed[HttpHeaders.AUTHORIZATION] = self.signer.sign(
            request.operation.method,
            request.resource_type,
            request.auth_resource_id,
            date,
        )
        return signed

    def _decode(self, request: Request, response: HttpResponse) -> Union[bytes, Any]:
        if request.raw_response:
            return response.body
        if not response.body:
            return None
        try:
            return json.loads(response.text)
        except ValueError:
            return response.text

    def _record_session(self, request: Request, response: HttpResponse) -> None:
        token = response.header(HttpHeaders.SESSION_TOKEN)
        if token:
            self.session_tracker.record(request.session_scope, token)

    async def _attempt(self, request: Request, headers: Dict[str, str], body: Optional[bytes]) -> Result:
        method = request.operation.method
        url = self.url_for(request.path)
        started = time.perf_counter()
        try:
            signed = self._sign(request, headers)
        except Unauthorized as e:
            return Result.failure(e)

        try:
            response = await self.transport.send(method, url, signed, body)
        except TransportError as e:
            if self.metrics:
                self.metrics.track_request(request.operation.value, request.resource_type, 0, time.perf_counter() - started)
            return Result.failure(TransportFailure(str(e)))

        if self.metrics:
            self.metrics.track_request(
                request.operation.value, request.resource_type, response.status, time.perf_counter() - started
            )
        logger.debug(f"{method} {request.path or '/'} -> {response.status}")

        self._record_session(request, response)

        if 200 <= response.status < 300:
            return Result.success(self._decode(request, response), dict(response.headers))
        return Result.failure(classify_response(response.status, response.headers, response.text))

    async def execute(self, request: Request) -> Result:
        """
        Run a request to completion.

        Transient failures (rate limiting, 5xx, transport) are retried up to
        the policy's attempt budget; anything else is returned at once.
        A RateLimited that exhausts the budget is returned only after its
        retry-after has elapsed.
        Cancelling the calling task during a backoff prevents further attempts.

        Args:
            request: Composed request

        Returns:
            Result carrying the decoded resource and headers, or the
            classified error
        """
        try:
            request = self._prepare_body(request)
        except QueryError as e:
            return Result.failure(e)

        body = self._encode_body(request)
        headers = self._base_headers(request, body is not None)

        attempt = 0
        while True:
            attempt += 1
            result = await self._attempt(request, headers, body)
            error = result.error
            if error is None:
                if attempt > 1:
                    logger.info(
                        f"{request.operation.value} {request.path or '/'} succeeded after {attempt} attempts"
                    )
                return result

            if not self.retry_policy.should_retry(error, attempt):
                if self.metrics:
                    self.metrics.track_error(request.operation.value, type(error).__name__)
                if error.is_transient:
                    logger.warning(
                        f"{request.operation.value} {request.path or '/'} failed after {attempt} attempts: "
                        f"{type(error).__name__} ({error.code})"
                    )
                if isinstance(error, RateLimited) and error.retry_after:
                    # a 429 is never surfaced before its retry-after
                    await self._sleep(error.retry_after)
                return result

            delay = self.retry_policy.delay(error, attempt)
            if self.metrics:
                self.metrics.track_retry(request.resource_type, type(error).__name__)
            logger.warning(
                f"{request.operation.value} {request.path or '/'} got {type(error).__name__} "
                f"({error.code}), retrying in {delay:.3f}s (attempt {attempt}/{self.retry_policy.max_attempts})"
            )
            await self._sleep(delay)
