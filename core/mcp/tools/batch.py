"""
Batch update tool.
"""

from __future__ import annotations

from core.config import MAX_BATCH_OPERATIONS
from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import batch_operation_from_dict
from core.validators import validate_collection_name, validate_list


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_batch_update(collection_name: str, operations: list[dict], wait: bool = True) -> str:
    """
    Run several point operations in one request, in order.

    Each operation is an object with exactly one key: upsert, delete,
    set_payload, overwrite_payload, delete_payload, clear_payload,
    update_vectors or delete_vectors. For example
    {"delete": {"points": [1, 2]}} or
    {"set_payload": {"payload": {"tag": "a"}, "points": [3]}}.
    One result is returned per operation, in the same order.
    """
    try:
        validate_collection_name(collection_name)
        validate_list(operations, "operations", max_items=MAX_BATCH_OPERATIONS, required=True)
        parsed = [batch_operation_from_dict(operation) for operation in operations]
        results = await tenant_client().batch_update(collection_name, parsed, wait=wait)
        return success(f"Executed {len(parsed)} batch operations", results=results)
    except Exception as exc:
        raise tool_error("qdrant_batch_update", exc) from exc
