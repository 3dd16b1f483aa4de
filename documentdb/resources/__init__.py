"""
Per-resource operation tables.
"""

from .base import CrudTable, DeletableTable, ResourceTable
from .databases import CollectionTable, DatabaseTable, OfferTable, PermissionTable, UserTable
from .documents import AttachmentTable, ConflictTable, DocumentTable, MediaTable
from .scripts import StoredProcedureTable, TriggerTable, UserDefinedFunctionTable

__all__ = [
    "AttachmentTable",
    "CollectionTable",
    "ConflictTable",
    "CrudTable",
    "DatabaseTable",
    "DeletableTable",
    "DocumentTable",
    "MediaTable",
    "OfferTable",
    "PermissionTable",
    "ResourceTable",
    "StoredProcedureTable",
    "TriggerTable",
    "UserDefinedFunctionTable",
    "UserTable",
]
