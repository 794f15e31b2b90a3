"""
Point tools: upsert, retrieve, delete, scroll and count.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from core.config import DEFAULT_PAGE_SIZE
from core.errors import ValidationIssue
from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    READ_ONLY_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    json_text,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import OrderByQuery, PointStruct, compact
from core.services.formatters import format_response
from core.validators import (
    validate_collection_name,
    validate_limit,
    validate_list,
    validate_mapping,
    validate_point_id,
    validate_point_ids,
    validate_points_selector,
    validate_required_text,
    validate_response_format,
)

PointIdArg = Union[int, str]


def _to_point(raw: Any) -> PointStruct:
    validate_mapping(raw, "points")
    if "id" not in raw or "vector" not in raw:
        raise ValidationIssue("each point needs an id and a vector", field="points", error_type="required")
    validate_point_id(raw["id"], "points.id")
    validate_mapping(raw.get("payload"), "points.payload")
    return PointStruct(id=raw["id"], vector=raw["vector"], payload=raw.get("payload"))


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_upsert_points(collection_name: str, points: list[dict], wait: bool = True) -> str:
    """
    Insert or overwrite points.

    Each point has an id (integer or UUID string), a vector (a list of floats
    or an object of named dense/sparse vectors) and an optional payload.
    """
    try:
        validate_collection_name(collection_name)
        validate_list(points, "points", required=True)
        structs = [_to_point(point) for point in points]
        result = await tenant_client().upsert_points(collection_name, structs, wait=wait)
        result = result or {}
        return success(
            f"Upserted {len(structs)} points",
            status=result.get("status"),
            operation_id=result.get("operation_id"),
        )
    except Exception as exc:
        raise tool_error("qdrant_upsert_points", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_points(
    collection_name: str,
    ids: list[PointIdArg],
    with_payload: bool = True,
    with_vector: bool = False,
    format: str = "json",
) -> str:
    """Retrieve several points by id."""
    try:
        validate_collection_name(collection_name)
        validate_point_ids(ids, "ids", required=True)
        validate_response_format(format)
        result = await tenant_client().get_points(collection_name, ids, with_payload, with_vector)
        return format_response(result, format, "points")
    except Exception as exc:
        raise tool_error("qdrant_get_points", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_point(collection_name: str, id: PointIdArg, format: str = "json") -> str:
    """Retrieve one point by id."""
    try:
        validate_collection_name(collection_name)
        validate_point_id(id)
        validate_response_format(format)
        result = await tenant_client().get_point(collection_name, id)
        return format_response(result, format, "point")
    except Exception as exc:
        raise tool_error("qdrant_get_point", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_points(
    collection_name: str,
    ids: Optional[list[PointIdArg]] = None,
    filter: Optional[dict] = None,
    wait: bool = True,
) -> str:
    """Delete points selected by ids, by a filter, or both."""
    try:
        validate_collection_name(collection_name)
        validate_points_selector(ids, filter)
        request = compact({"points": ids, "filter": filter})
        result = await tenant_client().delete_points(collection_name, request, wait=wait)
        result = result or {}
        return success("Points deleted", status=result.get("status"), operation_id=result.get("operation_id"))
    except Exception as exc:
        raise tool_error("qdrant_delete_points", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_scroll_points(
    collection_name: str,
    filter: Optional[dict] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: Optional[PointIdArg] = None,
    with_payload: bool = True,
    with_vector: bool = False,
    order_by: Optional[dict] = None,
    format: str = "json",
) -> str:
    """
    Page through points, optionally filtered or ordered by a payload field.

    Pass next_page_offset from the previous page as offset to continue.
    order_by is {"key": <field>, "direction": "asc" | "desc"}.
    """
    try:
        validate_collection_name(collection_name)
        validate_mapping(filter, "filter")
        validate_limit(limit)
        if offset is not None:
            validate_point_id(offset, "offset")
        validate_response_format(format)
        order = None
        if order_by is not None:
            validate_mapping(order_by, "order_by")
            validate_required_text(order_by.get("key"), "order_by.key")
            order = OrderByQuery(key=order_by.get("key"), direction=order_by.get("direction")).to_wire()["order_by"]
        request = compact(
            {
                "filter": filter,
                "limit": limit,
                "offset": offset,
                "with_payload": with_payload,
                "with_vector": with_vector,
                "order_by": order,
            }
        )
        result = await tenant_client().scroll_points(collection_name, request) or {}
        points = result.get("points") or []
        page = {
            "points": points,
            "next_page_offset": result.get("next_page_offset"),
            "count": len(points),
        }
        if format == "markdown":
            next_offset = page["next_page_offset"]
            table = format_response(points, format, "points")
            return f"{table}\n\n**Next Page Offset:** {'-' if next_offset is None else next_offset}"
        return format_response(page, format, "points")
    except Exception as exc:
        raise tool_error("qdrant_scroll_points", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_count_points(collection_name: str, filter: Optional[dict] = None, exact: bool = True) -> str:
    """Count all points, or the points matching a filter."""
    try:
        validate_collection_name(collection_name)
        validate_mapping(filter, "filter")
        result = await tenant_client().count_points(collection_name, compact({"filter": filter, "exact": exact}))
        return json_text({"collection_name": collection_name, "count": (result or {}).get("count"), "exact": exact})
    except Exception as exc:
        raise tool_error("qdrant_count_points", exc) from exc
