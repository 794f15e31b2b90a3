"""
Payload tools. Points are selected by ids, by a filter, or both.
"""

from __future__ import annotations

from typing import Optional, Union

from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import (
    ClearPayloadOperation,
    DeletePayloadOperation,
    OverwritePayloadOperation,
    SetPayloadOperation,
)
from core.validators import (
    validate_collection_name,
    validate_mapping,
    validate_points_selector,
    validate_string_list,
)

PointIdArg = Union[int, str]


def _update_result(message: str, result: Optional[dict]) -> str:
    result = result or {}
    return success(message, status=result.get("status"), operation_id=result.get("operation_id"))


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_set_payload(
    collection_name: str,
    payload: dict,
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Merge fields into the payload of the selected points."""
    try:
        validate_collection_name(collection_name)
        validate_mapping(payload, "payload", required=True)
        validate_points_selector(ids, filter)
        request = SetPayloadOperation(payload=payload, points=ids, filter=filter)
        result = await tenant_client().set_payload(collection_name, request, wait=wait)
        return _update_result("Payload set", result)
    except Exception as exc:
        raise tool_error("qdrant_set_payload", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_overwrite_payload(
    collection_name: str,
    payload: dict,
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Replace the whole payload of the selected points."""
    try:
        validate_collection_name(collection_name)
        validate_mapping(payload, "payload", required=True)
        validate_points_selector(ids, filter)
        request = OverwritePayloadOperation(payload=payload, points=ids, filter=filter)
        result = await tenant_client().overwrite_payload(collection_name, request, wait=wait)
        return _update_result("Payload overwritten", result)
    except Exception as exc:
        raise tool_error("qdrant_overwrite_payload", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_payload(
    collection_name: str,
    keys: list[str],
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Remove the given payload keys from the selected points."""
    try:
        validate_collection_name(collection_name)
        validate_string_list(keys, "keys", required=True)
        validate_points_selector(ids, filter)
        request = DeletePayloadOperation(keys=keys, points=ids, filter=filter)
        result = await tenant_client().delete_payload(collection_name, request, wait=wait)
        return _update_result(f"Deleted payload keys: {', '.join(keys)}", result)
    except Exception as exc:
        raise tool_error("qdrant_delete_payload", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_clear_payload(
    collection_name: str,
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Drop the entire payload of the selected points, keeping their vectors."""
    try:
        validate_collection_name(collection_name)
        validate_points_selector(ids, filter)
        request = ClearPayloadOperation(points=ids, filter=filter)
        result = await tenant_client().clear_payload(collection_name, request, wait=wait)
        return _update_result("Payload cleared", result)
    except Exception as exc:
        raise tool_error("qdrant_clear_payload", exc) from exc
