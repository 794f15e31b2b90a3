"""
Vector tools for points that already exist.
"""

from __future__ import annotations

from typing import Optional, Union

from core.errors import ValidationIssue
from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import DeleteVectorsOperation, PointStruct, UpdateVectorsOperation
from core.validators import (
    validate_collection_name,
    validate_list,
    validate_mapping,
    validate_point_id,
    validate_points_selector,
    validate_string_list,
)

PointIdArg = Union[int, str]


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_update_vectors(collection_name: str, points: list[dict], wait: bool = True) -> str:
    """
    Replace vectors of existing points without touching their payload.

    Each entry is {"id": ..., "vector": [...] or {"<name>": [...]}}.
    """
    try:
        validate_collection_name(collection_name)
        validate_list(points, "points", required=True)
        structs = []
        for point in points:
            validate_mapping(point, "points")
            if "id" not in point or "vector" not in point:
                raise ValidationIssue("each point needs an id and a vector", field="points", error_type="required")
            validate_point_id(point["id"], "points.id")
            structs.append(PointStruct(id=point["id"], vector=point["vector"]))
        request = UpdateVectorsOperation(points=structs)
        result = await tenant_client().update_vectors(collection_name, request, wait=wait) or {}
        return success(
            f"Updated vectors for {len(structs)} points",
            status=result.get("status"),
            operation_id=result.get("operation_id"),
        )
    except Exception as exc:
        raise tool_error("qdrant_update_vectors", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_vectors(
    collection_name: str,
    vector_names: list[str],
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Remove the named vectors from the selected points, keeping the rest."""
    try:
        validate_collection_name(collection_name)
        validate_string_list(vector_names, "vector_names", required=True)
        validate_points_selector(ids, filter)
        request = DeleteVectorsOperation(vector=vector_names, points=ids, filter=filter)
        result = await tenant_client().delete_vectors(collection_name, request, wait=wait) or {}
        return success(
            f"Deleted vectors: {', '.join(vector_names)}",
            status=result.get("status"),
            operation_id=result.get("operation_id"),
        )
    except Exception as exc:
        raise tool_error("qdrant_delete_vectors", exc) from exc
