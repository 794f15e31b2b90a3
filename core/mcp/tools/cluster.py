"""
Cluster and shard management tools for distributed deployments.
"""

from __future__ import annotations

from typing import Optional, Union

from core.errors import ValidationIssue
from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    READ_ONLY_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import (
    AbortTransfer,
    CreateShardingKey,
    DeleteShardingKey,
    DropReplica,
    MoveShard,
    ReplicateShard,
)
from core.services.formatters import format_response
from core.validators import validate_collection_name, validate_non_negative, validate_response_format


def _validate_peer_ids(**ids: int) -> None:
    for field, value in ids.items():
        validate_non_negative(value, field)
        if value is None:
            raise ValidationIssue(f"{field} is required", field=field, error_type="required")


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_cluster_status(format: str = "json") -> str:
    """Cluster status, peers and raft state."""
    try:
        validate_response_format(format)
        result = await tenant_client().get_cluster_status()
        return format_response(result, format, "cluster")
    except Exception as exc:
        raise tool_error("qdrant_get_cluster_status", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_recover_cluster() -> str:
    """Ask the cluster to recover from an inconsistent state."""
    try:
        await tenant_client().recover_cluster()
        return success("Cluster recovery initiated")
    except Exception as exc:
        raise tool_error("qdrant_recover_cluster", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_remove_peer(peer_id: int, force: bool = False) -> str:
    """Remove a peer from the cluster; force removes it even if it still holds shards."""
    try:
        _validate_peer_ids(peer_id=peer_id)
        await tenant_client().remove_peer(peer_id, force=force)
        return success(f"Peer {peer_id} removed from cluster")
    except Exception as exc:
        raise tool_error("qdrant_remove_peer", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_collection_cluster_info(collection_name: str, format: str = "json") -> str:
    """Shard distribution and replication state of a collection."""
    try:
        validate_collection_name(collection_name)
        validate_response_format(format)
        result = await tenant_client().get_collection_cluster_info(collection_name)
        return format_response(result, format, "collection_cluster")
    except Exception as exc:
        raise tool_error("qdrant_get_collection_cluster_info", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_move_shard(
    collection_name: str,
    shard_id: int,
    from_peer_id: int,
    to_peer_id: int,
    method: Optional[str] = None,
) -> str:
    """Move a shard between peers. method is stream_records, snapshot or wal_delta."""
    try:
        validate_collection_name(collection_name)
        _validate_peer_ids(shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id)
        operation = MoveShard(shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id, method=method)
        await tenant_client().update_collection_cluster(collection_name, operation)
        return success(f"Shard {shard_id} move initiated from peer {from_peer_id} to {to_peer_id}")
    except Exception as exc:
        raise tool_error("qdrant_move_shard", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_replicate_shard(
    collection_name: str,
    shard_id: int,
    from_peer_id: int,
    to_peer_id: int,
    method: Optional[str] = None,
) -> str:
    """Copy a shard to another peer as a new replica."""
    try:
        validate_collection_name(collection_name)
        _validate_peer_ids(shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id)
        operation = ReplicateShard(
            shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id, method=method
        )
        await tenant_client().update_collection_cluster(collection_name, operation)
        return success(f"Shard {shard_id} replication initiated to peer {to_peer_id}")
    except Exception as exc:
        raise tool_error("qdrant_replicate_shard", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_drop_replica(collection_name: str, shard_id: int, peer_id: int) -> str:
    try:
        validate_collection_name(collection_name)
        _validate_peer_ids(shard_id=shard_id, peer_id=peer_id)
        await tenant_client().update_collection_cluster(
            collection_name, DropReplica(shard_id=shard_id, peer_id=peer_id)
        )
        return success(f"Replica of shard {shard_id} dropped from peer {peer_id}")
    except Exception as exc:
        raise tool_error("qdrant_drop_replica", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_abort_shard_transfer(
    collection_name: str,
    shard_id: int,
    from_peer_id: int,
    to_peer_id: int,
) -> str:
    try:
        validate_collection_name(collection_name)
        _validate_peer_ids(shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id)
        operation = AbortTransfer(shard_id=shard_id, from_peer_id=from_peer_id, to_peer_id=to_peer_id)
        await tenant_client().update_collection_cluster(collection_name, operation)
        return success(f"Shard {shard_id} transfer aborted")
    except Exception as exc:
        raise tool_error("qdrant_abort_shard_transfer", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_shard_key(
    collection_name: str,
    shard_key: Union[str, int],
    shards_number: Optional[int] = None,
    replication_factor: Optional[int] = None,
    placement: Optional[list[int]] = None,
) -> str:
    """Create a custom shard key, e.g. one per tenant of a shared collection."""
    try:
        validate_collection_name(collection_name)
        request = CreateShardingKey(
            shard_key=shard_key,
            shards_number=shards_number,
            replication_factor=replication_factor,
            placement=placement,
        )
        await tenant_client().create_shard_key(collection_name, request)
        return success(f"Shard key '{shard_key}' created for collection '{collection_name}'")
    except Exception as exc:
        raise tool_error("qdrant_create_shard_key", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_shard_key(collection_name: str, shard_key: Union[str, int]) -> str:
    """Delete a custom shard key and every point stored under it."""
    try:
        validate_collection_name(collection_name)
        await tenant_client().delete_shard_key(collection_name, DeleteShardingKey(shard_key=shard_key))
        return success(f"Shard key '{shard_key}' deleted from collection '{collection_name}'")
    except Exception as exc:
        raise tool_error("qdrant_delete_shard_key", exc) from exc
