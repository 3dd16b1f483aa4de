"""
Per-call request options and the header composer.

Per-call options override client-wide defaults field by field. There is no
deep merge: an access condition given per call replaces any default wholesale.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import HttpHeaders, OperationType


class ConsistencyLevel(str, Enum):
    """Read consistency levels."""
    STRONG = "Strong"
    BOUNDED_STALENESS = "BoundedStaleness"
    SESSION = "Session"
    EVENTUAL = "Eventual"
    CONSISTENT_PREFIX = "ConsistentPrefix"


class IndexingDirective(str, Enum):
    """Per-document indexing directives."""
    DEFAULT = "Default"
    INCLUDE = "Include"
    EXCLUDE = "Exclude"


class AccessConditionType(str, Enum):
    """Conditional header kinds."""
    IF_MATCH = "IfMatch"
    IF_NONE_MATCH = "IfNoneMatch"


class AccessCondition(BaseModel):
    """Conditional header: type plus the entity tag it compares against."""

    type: AccessConditionType
    condition: str

    model_config = ConfigDict(frozen=True)

    @property
    def header(self) -> str:
        if self.type == AccessConditionType.IF_MATCH:
            return HttpHeaders.IF_MATCH
        return HttpHeaders.IF_NONE_MATCH


TriggerInclude = Union[str, List[str]]


class RequestOptions(BaseModel):
    """
    Options affecting a single invocation.

    Attributes:
        pre_trigger_include: Trigger(s) to run before the operation
        post_trigger_include: Trigger(s) to run after the operation
        access_condition: Conditional header (etag precondition)
        indexing_directive: Include or exclude the document from indexing
        consistency_level: Consistency level for this call
        session_token: Explicit session token for this call
        resource_token_expiry_seconds: Expiry of permission resource tokens
        disable_automatic_id_generation: Fail creates that lack an id instead
            of generating one
    """

    pre_trigger_include: Optional[TriggerInclude] = Field(default=None, alias="preTriggerInclude")
    post_trigger_include: Optional[TriggerInclude] = Field(default=None, alias="postTriggerInclude")
    access_condition: Optional[AccessCondition] = Field(default=None, alias="accessCondition")
    indexing_directive: Optional[IndexingDirective] = Field(default=None, alias="indexingDirective")
    consistency_level: Optional[ConsistencyLevel] = Field(default=None, alias="consistencyLevel")
    session_token: Optional[str] = Field(default=None, alias="sessionToken")
    resource_token_expiry_seconds: Optional[int] = Field(
        default=None, ge=1, alias="resourceTokenExpirySeconds"
    )
    disable_automatic_id_generation: bool = Field(default=False, alias="disableAutomaticIdGeneration")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def if_match(cls, etag: str, **kwargs: Any) -> "RequestOptions":
        """Options carrying an If-Match precondition on the given etag."""
        return cls(
            access_condition=AccessCondition(type=AccessConditionType.IF_MATCH, condition=etag),
            **kwargs
        )


class FeedOptions(BaseModel):
    """
    Options for read-feed and query enumeration.

    The continuation token is opaque: it is stored and resent verbatim.
    """

    max_item_count: Optional[int] = Field(default=None, alias="maxItemCount")
    continuation: Optional[str] = None
    session_token: Optional[str] = Field(default=None, alias="sessionToken")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("max_item_count")
    @classmethod
    def validate_max_item_count(cls, v: Optional[int]) -> Optional[int]:
        """Allow -1 (server decides) or a positive page size."""
        if v is not None and v != -1 and v < 1:
            raise ValueError("max_item_count must be positive or -1")
        return v


class MediaOptions(BaseModel):
    """Options for attachment media upload."""

    slug: Optional[str] = None
    content_type: Optional[str] = Field(default=None, alias="contentType")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def _join_triggers(value: TriggerInclude) -> str:
    if isinstance(value, str):
        return value
    return ",".join(value)


def _session_header(
    default_level: Optional[ConsistencyLevel],
    requested_level: Optional[ConsistencyLevel],
    explicit_token: Optional[str],
    tracked_token: Optional[str],
    is_read: bool
) -> Optional[str]:
    if explicit_token:
        return explicit_token
    effective = requested_level or default_level
    if effective == ConsistencyLevel.SESSION and is_read:
        return tracked_token
    return None


def compose_headers(
    default_consistency: Optional[ConsistencyLevel],
    options: Optional[RequestOptions],
    operation: OperationType,
    tracked_session_token: Optional[str] = None
) -> Dict[str, str]:
    """
    Build the option-derived headers for a single call.

    Args:
        default_consistency: Client-wide consistency level
        options: Per-call options (None means no customization)
        operation: Operation being issued
        tracked_session_token: Token recorded for the target's scope

    Returns:
        Header name -> value
    """
    options = options or RequestOptions()
    headers: Dict[str, str] = {}

    consistency = options.consistency_level or default_consistency
    if consistency is not None:
        headers[HttpHeaders.CONSISTENCY_LEVEL] = ConsistencyLevel(consistency).value

    session_token = _session_header(
        default_consistency,
        options.consistency_level,
        options.session_token,
        tracked_session_token,
        operation.is_read,
    )
    if session_token:
        headers[HttpHeaders.SESSION_TOKEN] = session_token

    if options.access_condition is not None:
        headers[options.access_condition.header] = options.access_condition.condition

    if options.pre_trigger_include:
        headers[HttpHeaders.PRE_TRIGGER_INCLUDE] = _join_triggers(options.pre_trigger_include)
    if options.post_trigger_include:
        headers[HttpHeaders.POST_TRIGGER_INCLUDE] = _join_triggers(options.post_trigger_include)

    if options.indexing_directive is not None:
        headers[HttpHeaders.INDEXING_DIRECTIVE] = options.indexing_directive.value

    if options.resource_token_expiry_seconds is not None:
        headers[HttpHeaders.RESOURCE_TOKEN_EXPIRY] = str(options.resource_token_expiry_seconds)

    return headers


def compose_feed_headers(
    default_consistency: Optional[ConsistencyLevel],
    options: Optional[FeedOptions],
    continuation: Optional[str],
    tracked_session_token: Optional[str] = None
) -> Dict[str, str]:
    """
    Build the headers for one page fetch.

    Args:
        default_consistency: Client-wide consistency level
        options: Feed options for the enumeration
        continuation: Continuation from the previous page (None on the first)
        tracked_session_token: Token recorded for the feed's scope

    Returns:
        Header name -> value
    """
    options = options or FeedOptions()
    headers: Dict[str, str] = {}

    if default_consistency is not None:
        headers[HttpHeaders.CONSISTENCY_LEVEL] = ConsistencyLevel(default_consistency).value

    if options.max_item_count is not None:
        headers[HttpHeaders.MAX_ITEM_COUNT] = str(options.max_item_count)

    if continuation:
        headers[HttpHeaders.CONTINUATION] = continuation

    session_token = _session_header(
        default_consistency, None, options.session_token, tracked_session_token, True
    )
    if session_token:
        headers[HttpHeaders.SESSION_TOKEN] = session_token

    return headers
