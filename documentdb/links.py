"""
Resource link model.

Parses and builds hierarchical self-links such as
``dbs/{id}/colls/{id}/docs/{id}`` and derives a resource's type, parent and
session scope from its link. Nothing here touches the network.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterator, Optional, Tuple, Union

from .exceptions import InvalidLinkFormat


class ResourceType(str, Enum):
    """Resource kinds, valued by their path keyword."""

    DATABASE = "dbs"
    COLLECTION = "colls"
    DOCUMENT = "docs"
    ATTACHMENT = "attachments"
    STORED_PROCEDURE = "sprocs"
    TRIGGER = "triggers"
    USER_DEFINED_FUNCTION = "udfs"
    USER = "users"
    PERMISSION = "permissions"
    CONFLICT = "conflicts"
    OFFER = "offers"
    MEDIA = "media"

    @property
    def keyword(self) -> str:
        return self.value


# Allowed children per container; None is the account root.
CONTAINMENT: Dict[Optional[ResourceType], FrozenSet[ResourceType]] = {
    None: frozenset({ResourceType.DATABASE, ResourceType.OFFER, ResourceType.MEDIA}),
    ResourceType.DATABASE: frozenset({ResourceType.COLLECTION, ResourceType.USER}),
    ResourceType.COLLECTION: frozenset({
        ResourceType.DOCUMENT,
        ResourceType.STORED_PROCEDURE,
        ResourceType.TRIGGER,
        ResourceType.USER_DEFINED_FUNCTION,
        ResourceType.CONFLICT,
    }),
    ResourceType.DOCUMENT: frozenset({ResourceType.ATTACHMENT}),
    ResourceType.USER: frozenset({ResourceType.PERMISSION}),
}

_KEYWORDS: Dict[str, ResourceType] = {t.value: t for t in ResourceType}


def _check_child(parent_type: Optional[ResourceType], child_type: ResourceType, link: str) -> None:
    allowed = CONTAINMENT.get(parent_type, frozenset())
    if child_type not in allowed:
        where = parent_type.name.lower() if parent_type else "the account root"
        raise InvalidLinkFormat(link, f"'{child_type.value}' cannot be contained in {where}")


def _check_id(resource_id: str, link: str) -> None:
    if not resource_id:
        raise InvalidLinkFormat(link, "resource id cannot be empty")
    if "/" in resource_id:
        raise InvalidLinkFormat(link, f"resource id '{resource_id}' cannot contain '/'")


def _split(link: str) -> Tuple[str, ...]:
    stripped = link.strip().strip("/")
    if not stripped:
        return ()
    return tuple(stripped.split("/"))


@dataclass(frozen=True)
class ResourceLink:
    """
    Immutable ordered sequence of (ResourceType, id) segments.

    The empty link addresses the account root.
    """

    segments: Tuple[Tuple[ResourceType, str], ...] = ()

    def __post_init__(self) -> None:
        parent_type: Optional[ResourceType] = None
        for resource_type, resource_id in self.segments:
            _check_child(parent_type, resource_type, self._render())
            _check_id(resource_id, self._render())
            parent_type = resource_type

    def _render(self) -> str:
        return "/".join(f"{t.value}/{i}" for t, i in self.segments)

    def __str__(self) -> str:
        return self._render()

    def __iter__(self) -> Iterator[Tuple[ResourceType, str]]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def resource_type(self) -> Optional[ResourceType]:
        """Type of the addressed resource, None for the account root."""
        return self.segments[-1][0] if self.segments else None

    @property
    def id(self) -> Optional[str]:
        return self.segments[-1][1] if self.segments else None

    @property
    def parent(self) -> "ResourceLink":
        if not self.segments:
            raise InvalidLinkFormat("", "the account root has no parent")
        return ResourceLink(self.segments[:-1])

    def child(self, resource_type: ResourceType, resource_id: str) -> "ResourceLink":
        """Link to a child resource of this one."""
        return ResourceLink(self.segments + ((ResourceType(resource_type), resource_id),))

    def feed(self, resource_type: ResourceType) -> "FeedLink":
        """Link to the feed of children of the given type."""
        return FeedLink(self, ResourceType(resource_type))

    def ancestor(self, resource_type: ResourceType) -> Optional["ResourceLink"]:
        """Nearest link (self included) whose last segment has the given type."""
        for index in range(len(self.segments), 0, -1):
            if self.segments[index - 1][0] == resource_type:
                return ResourceLink(self.segments[:index])
        return None

    def container_scope(self) -> str:
        """Scope of the children of this link: nearest collection, else database, else ""."""
        scope = self.ancestor(ResourceType.COLLECTION) or self.ancestor(ResourceType.DATABASE)
        return str(scope) if scope is not None else ""

    def session_scope(self) -> str:
        """
        Key under which session tokens for this resource are tracked.

        Always the container scope of the parent, so a resource shares its
        key with the feed it was created through. Documents, scripts and
        attachments map to their collection. Collections, users and
        permissions map to their database. Databases, offers and media map
        to the account.
        """
        if self.is_root:
            return ""
        return self.parent.container_scope()


@dataclass(frozen=True)
class FeedLink:
    """Feed of children of one type under a parent link, e.g. ``dbs/d1/colls``."""

    parent: ResourceLink
    resource_type: ResourceType

    def __post_init__(self) -> None:
        _check_child(self.parent.resource_type, self.resource_type, str(self))

    def __str__(self) -> str:
        if self.parent.is_root:
            return self.resource_type.value
        return f"{self.parent}/{self.resource_type.value}"

    def child(self, resource_id: str) -> ResourceLink:
        return self.parent.child(self.resource_type, resource_id)

    def session_scope(self) -> str:
        return self.parent.container_scope()


def parse(link: Union[str, ResourceLink]) -> ResourceLink:
    """
    Parse a resource link string.

    Args:
        link: Link such as ``dbs/d1/colls/c1``; leading and trailing
              slashes are tolerated

    Returns:
        Parsed ResourceLink

    Raises:
        InvalidLinkFormat: On odd segment count, unknown keyword, empty id,
                           or a containment hierarchy violation
    """
    if isinstance(link, ResourceLink):
        return link
    if not isinstance(link, str):
        raise InvalidLinkFormat(repr(link), "link must be a string")

    parts = _split(link)
    if len(parts) % 2 != 0:
        raise InvalidLinkFormat(link, "odd number of path segments")

    segments = []
    for index in range(0, len(parts), 2):
        keyword, resource_id = parts[index], parts[index + 1]
        resource_type = _KEYWORDS.get(keyword)
        if resource_type is None:
            raise InvalidLinkFormat(link, f"unrecognized segment type '{keyword}'")
        segments.append((resource_type, resource_id))

    try:
        return ResourceLink(tuple(segments))
    except InvalidLinkFormat as e:
        raise InvalidLinkFormat(link, e.reason) from None


def parse_feed(link: Union[str, FeedLink]) -> FeedLink:
    """Parse a feed link such as ``dbs/d1/colls``."""
    if isinstance(link, FeedLink):
        return link
    parts = _split(link)
    if len(parts) % 2 != 1:
        raise InvalidLinkFormat(link, "a feed link must end with a segment type")
    resource_type = _KEYWORDS.get(parts[-1])
    if resource_type is None:
        raise InvalidLinkFormat(link, f"unrecognized segment type '{parts[-1]}'")
    parent = parse("/".join(parts[:-1]))
    try:
        return FeedLink(parent, resource_type)
    except InvalidLinkFormat as e:
        raise InvalidLinkFormat(link, e.reason) from None


def child(parent: Union[str, ResourceLink], resource_type: ResourceType, resource_id: str) -> ResourceLink:
    """Build the link of a child resource."""
    return parse(parent).child(resource_type, resource_id)


def resource_type(link: Union[str, ResourceLink]) -> Optional[ResourceType]:
    """Resource type addressed by a link (None for the account root)."""
    return parse(link).resource_type


def parse_expected(link: Union[str, ResourceLink], expected: ResourceType) -> ResourceLink:
    """Parse a link and require that it addresses a resource of the given type."""
    parsed = parse(link)
    if parsed.resource_type != expected:
        found = parsed.resource_type.value if parsed.resource_type else "account root"
        raise InvalidLinkFormat(str(link), f"expected a '{expected.value}' link, got '{found}'")
    return parsed
