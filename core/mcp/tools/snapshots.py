"""
Collection and full-storage snapshot tools.
"""

from __future__ import annotations

from typing import Optional

from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    READ_ONLY_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import SnapshotRecoverRequest
from core.services.formatters import format_response
from core.validators import (
    validate_collection_name,
    validate_optional_text,
    validate_required_text,
    validate_response_format,
)


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_list_snapshots(collection_name: str, format: str = "json") -> str:
    """List snapshots of a collection with their sizes and creation times."""
    try:
        validate_collection_name(collection_name)
        validate_response_format(format)
        result = await tenant_client().list_snapshots(collection_name)
        return format_response(result or [], format, "snapshots")
    except Exception as exc:
        raise tool_error("qdrant_list_snapshots", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_snapshot(collection_name: str, wait: bool = True) -> str:
    """Create a point-in-time snapshot of a collection."""
    try:
        validate_collection_name(collection_name)
        snapshot = await tenant_client().create_snapshot(collection_name, wait=wait)
        return success("Snapshot created", snapshot=snapshot)
    except Exception as exc:
        raise tool_error("qdrant_create_snapshot", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_snapshot(collection_name: str, snapshot_name: str, wait: bool = True) -> str:
    try:
        validate_collection_name(collection_name)
        validate_required_text(snapshot_name, "snapshot_name")
        await tenant_client().delete_snapshot(collection_name, snapshot_name, wait=wait)
        return success(f"Snapshot '{snapshot_name}' deleted from collection '{collection_name}'")
    except Exception as exc:
        raise tool_error("qdrant_delete_snapshot", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_recover_snapshot(
    collection_name: str,
    location: str,
    priority: str = "replica",
    checksum: Optional[str] = None,
    wait: bool = True,
) -> str:
    """
    Recover a collection from a snapshot URL or file:// path.

    priority is snapshot, replica or no_sync.
    """
    try:
        validate_collection_name(collection_name)
        validate_required_text(location, "location", max_len=4096)
        validate_optional_text(checksum, "checksum")
        request = SnapshotRecoverRequest(location=location, priority=priority, checksum=checksum)
        await tenant_client().recover_snapshot(collection_name, request, wait=wait)
        return success(f"Collection '{collection_name}' recovered from snapshot", location=location)
    except Exception as exc:
        raise tool_error("qdrant_recover_snapshot", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_list_full_snapshots(format: str = "json") -> str:
    """List full-storage snapshots (all collections and aliases)."""
    try:
        validate_response_format(format)
        result = await tenant_client().list_full_snapshots()
        return format_response(result or [], format, "snapshots")
    except Exception as exc:
        raise tool_error("qdrant_list_full_snapshots", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_full_snapshot(wait: bool = True) -> str:
    """Create a snapshot of the whole storage, including every collection and alias."""
    try:
        snapshot = await tenant_client().create_full_snapshot(wait=wait)
        return success("Full storage snapshot created", snapshot=snapshot)
    except Exception as exc:
        raise tool_error("qdrant_create_full_snapshot", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_full_snapshot(snapshot_name: str, wait: bool = True) -> str:
    try:
        validate_required_text(snapshot_name, "snapshot_name")
        await tenant_client().delete_full_snapshot(snapshot_name, wait=wait)
        return success(f"Full snapshot '{snapshot_name}' deleted")
    except Exception as exc:
        raise tool_error("qdrant_delete_full_snapshot", exc) from exc
