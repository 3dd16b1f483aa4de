"""
Operation tables for account- and database-level resources: databases,
collections, users, permissions and offers.
"""

from typing import Any, Dict, Optional

from ..constants import OperationType
from ..feed import FeedIterator
from ..links import ResourceType
from ..models import PermissionMode, Query, ResourceResponse
from ..options import FeedOptions, RequestOptions
from .base import CrudTable, DeletableTable, LinkLike, ResourceTable


class DatabaseTable(DeletableTable):
    """Databases live directly under the account; they cannot be replaced."""

    resource_type = ResourceType.DATABASE

    async def create(self, body: Dict[str, Any], options: Optional[RequestOptions] = None) -> ResourceResponse:
        """Create a database. ``body`` needs at least an ``id``."""
        if not isinstance(body, dict) or not body.get("id"):
            raise TypeError("database body must be a dict with an 'id'")
        return await self._create(None, body, options)

    def read_all(self, options: Optional[FeedOptions] = None) -> FeedIterator:  # type: ignore[override]
        return super().read_all(None, options)

    def query(self, query: Query, options: Optional[FeedOptions] = None) -> FeedIterator:  # type: ignore[override]
        return super().query(None, query, options)


class CollectionTable(CrudTable):
    """Collections under a database."""

    resource_type = ResourceType.COLLECTION
    parent_type = ResourceType.DATABASE


class UserTable(CrudTable):
    """Users under a database."""

    resource_type = ResourceType.USER
    parent_type = ResourceType.DATABASE


class PermissionTable(CrudTable):
    """
    Permissions under a user.

    A permission grants a user access to one resource link; reading it back
    returns the resource token (``_token``) for that grant.
    """

    resource_type = ResourceType.PERMISSION
    parent_type = ResourceType.USER

    def _validate_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        body = super()._validate_body(body)
        mode = body.get("permissionMode")
        if mode is not None:
            # raises ValueError for unknown modes
            body = {**body, "permissionMode": PermissionMode(mode).value}
        return body


class OfferTable(ResourceTable):
    """Throughput offers: readable and replaceable, never created or deleted by clients."""

    resource_type = ResourceType.OFFER

    async def replace(
        self,
        link: LinkLike,
        body: Dict[str, Any],
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        return await self._on_resource(OperationType.REPLACE, link, options, body=body)

    def read_all(self, options: Optional[FeedOptions] = None) -> FeedIterator:  # type: ignore[override]
        return super().read_all(None, options)

    def query(self, query: Query, options: Optional[FeedOptions] = None) -> FeedIterator:  # type: ignore[override]
        return super().query(None, query, options)
