"""
Operation tables for collection contents: documents, attachments, media
and conflicts.
"""

from typing import Any, Dict, Optional

from ..constants import DEFAULT_MEDIA_CONTENT_TYPE, HttpHeaders, OperationType
from ..links import ResourceType
from ..models import ResourceResponse
from ..options import MediaOptions, RequestOptions
from .base import CrudTable, DeletableTable, LinkLike, ResourceTable


def _media_headers(media_options: Optional[MediaOptions]) -> Dict[str, str]:
    media_options = media_options or MediaOptions()
    headers = {HttpHeaders.CONTENT_TYPE: media_options.content_type or DEFAULT_MEDIA_CONTENT_TYPE}
    if media_options.slug:
        headers[HttpHeaders.SLUG] = media_options.slug
    return headers


def _check_content(content: Any) -> bytes:
    if not isinstance(content, (bytes, bytearray)):
        raise TypeError("media content must be bytes")
    return bytes(content)


class DocumentTable(CrudTable):
    """
    Documents in a collection.

    Creates and upserts assign a generated id when the body has none, unless
    ``disable_automatic_id_generation`` is set on the options.
    """

    resource_type = ResourceType.DOCUMENT
    parent_type = ResourceType.COLLECTION

    async def upsert(
        self,
        collection_link: LinkLike,
        body: Dict[str, Any],
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """Create the document, or replace it if one with the same id exists."""
        return await self._create(
            collection_link, self._validate_body(body), options, operation=OperationType.UPSERT
        )


class AttachmentTable(CrudTable):
    """Attachments on a document."""

    resource_type = ResourceType.ATTACHMENT
    parent_type = ResourceType.DOCUMENT

    async def upsert(
        self,
        document_link: LinkLike,
        body: Dict[str, Any],
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        return await self._create(
            document_link, self._validate_body(body), options, operation=OperationType.UPSERT
        )

    async def create_and_upload_media(
        self,
        document_link: LinkLike,
        content: bytes,
        media_options: Optional[MediaOptions] = None,
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """
        Upload raw bytes as managed media and create the attachment for them.

        Args:
            document_link: Owning document
            content: Media bytes
            media_options: Slug (attachment id) and content type

        Returns:
            The attachment resource, whose ``media`` field links to the upload
        """
        return await self._create(
            document_link,
            _check_content(content),
            options,
            extra_headers=_media_headers(media_options),
        )


class MediaTable(ResourceTable):
    """Raw attachment media, addressed as ``media/{id}``."""

    resource_type = ResourceType.MEDIA

    async def read(self, link: LinkLike, options: Optional[RequestOptions] = None) -> ResourceResponse:
        """Read media; ``resource`` on the response is the raw bytes."""
        return await self._on_resource(OperationType.READ, link, options, raw_response=True)

    async def update(
        self,
        link: LinkLike,
        content: bytes,
        media_options: Optional[MediaOptions] = None,
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """Replace the media bytes in place."""
        return await self._on_resource(
            OperationType.REPLACE,
            link,
            options,
            body=_check_content(content),
            extra_headers=_media_headers(media_options),
        )

    def read_all(self, *args: Any, **kwargs: Any):  # type: ignore[override]
        raise TypeError("media has no feed")

    def query(self, *args: Any, **kwargs: Any):  # type: ignore[override]
        raise TypeError("media cannot be queried")


class ConflictTable(DeletableTable):
    """Replication conflicts in a collection: read, list, query and delete."""

    resource_type = ResourceType.CONFLICT
    parent_type = ResourceType.COLLECTION
