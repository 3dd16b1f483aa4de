"""
DocumentDB Models.

Resource envelope, query specs and the explicit result types returned by
the executor. Only the fields the addressing and paging engine interprets
are modelled; everything else on a resource is preserved as-is.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .constants import HttpHeaders
from .exceptions import QueryError


class ResourceMeta(BaseModel):
    """
    Common server-owned envelope of every stored resource.

    Attributes:
        id: User-assigned or generated id
        _self: Self link
        _rid: Server resource id (immutable)
        _etag: Entity tag, changes on every mutation
        _ts: Last modification timestamp
        _attachments: Attachments feed link, when present
    """

    id: Optional[str] = None
    self_link: str = Field(default="", alias="_self")
    rid: str = Field(default="", alias="_rid")
    etag: str = Field(default="", alias="_etag")
    ts: Optional[Union[int, str]] = Field(default=None, alias="_ts")
    attachments: Optional[str] = Field(default=None, alias="_attachments")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class PermissionMode(str, Enum):
    """Access granted by a permission."""
    NONE = "None"
    READ = "Read"
    ALL = "All"


class TriggerType(str, Enum):
    PRE = "pre"
    POST = "post"


class TriggerOperation(str, Enum):
    ALL = "all"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    REPLACE = "replace"


class SqlParameter(BaseModel):
    """Named query parameter, e.g. ``@id``."""

    name: str
    value: Any = None


class SqlQuerySpec(BaseModel):
    """Parameterized query."""

    query: str
    parameters: List[SqlParameter] = Field(default_factory=list)

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


Query = Union[str, SqlQuerySpec, Dict[str, Any]]


def query_body(query: Query) -> Dict[str, Any]:
    """Normalize a query string, spec or dict into the request body."""
    if isinstance(query, SqlQuerySpec):
        return query.to_body()
    if isinstance(query, dict):
        return SqlQuerySpec.model_validate(query).to_body()
    return SqlQuerySpec(query=query).to_body()


@dataclass
class ResourceResponse:
    """
    Successful single-resource outcome.

    Attributes:
        resource: Decoded body (dict for resources, any JSON for sproc results,
                  None for deletes)
        headers: Response headers
    """

    resource: Any
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    @property
    def meta(self) -> ResourceMeta:
        """Typed view of the resource envelope."""
        if not isinstance(self.resource, dict):
            return ResourceMeta()
        return ResourceMeta.model_validate(self.resource)

    @property
    def etag(self) -> Optional[str]:
        if isinstance(self.resource, dict) and self.resource.get("_etag"):
            return self.resource["_etag"]
        return self.header("etag")

    @property
    def session_token(self) -> Optional[str]:
        return self.header(HttpHeaders.SESSION_TOKEN)

    @property
    def request_charge(self) -> Optional[float]:
        charge = self.header(HttpHeaders.REQUEST_CHARGE)
        return float(charge) if charge else None


@dataclass
class Result:
    """Either a ResourceResponse or the classified error of one operation."""

    response: Optional[ResourceResponse] = None
    error: Optional[QueryError] = None

    @classmethod
    def success(cls, resource: Any, headers: Dict[str, str]) -> "Result":
        return cls(response=ResourceResponse(resource, headers))

    @classmethod
    def failure(cls, error: QueryError) -> "Result":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ResourceResponse:
        """Return the response or raise the classified error."""
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise RuntimeError("Result carries neither a response nor an error")
        return self.response
