"""
Operation tables for server-side scripts: stored procedures, triggers and
user-defined functions.
"""

from typing import Any, Dict, List, Optional

from ..constants import OperationType
from ..exceptions import BadRequest
from ..links import ResourceType
from ..models import ResourceResponse, TriggerOperation, TriggerType
from ..options import RequestOptions
from .base import CrudTable, LinkLike


class ScriptTable(CrudTable):
    """Scripts live in a collection and carry their source text in ``body``."""

    parent_type = ResourceType.COLLECTION

    def _validate_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        body = super()._validate_body(body)
        if "body" in body and not isinstance(body["body"], str):
            raise BadRequest(message=f"{self.resource_type.name.lower()} 'body' must be script source text")
        return body


class StoredProcedureTable(ScriptTable):
    resource_type = ResourceType.STORED_PROCEDURE

    async def execute(
        self,
        link: LinkLike,
        params: Optional[List[Any]] = None,
        options: Optional[RequestOptions] = None
    ) -> ResourceResponse:
        """
        Execute a stored procedure.

        Args:
            link: Stored procedure link
            params: Positional arguments passed to the procedure

        Returns:
            Response whose ``resource`` is the procedure's return value
        """
        if params is not None and not isinstance(params, list):
            params = [params]
        return await self._on_resource(OperationType.EXECUTE, link, options, body=params or [])


class TriggerTable(ScriptTable):
    resource_type = ResourceType.TRIGGER

    def _validate_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        body = super()._validate_body(body)
        normalized = dict(body)
        if "triggerType" in body:
            normalized["triggerType"] = TriggerType(str(body["triggerType"]).lower()).value
        if "triggerOperation" in body:
            normalized["triggerOperation"] = TriggerOperation(str(body["triggerOperation"]).lower()).value
        return normalized


class UserDefinedFunctionTable(ScriptTable):
    resource_type = ResourceType.USER_DEFINED_FUNCTION
