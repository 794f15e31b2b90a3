"""
Collection and alias management tools.
"""

from __future__ import annotations

from typing import Optional

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
from core.models import CollectionConfig, CreateAlias, DeleteAlias, RenameAlias, VectorParams
from core.services.formatters import format_response
from core.validators import (
    validate_collection_name,
    validate_list,
    validate_mapping,
    validate_required_text,
    validate_response_format,
)


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_list_collections(format: str = "json") -> str:
    """List all collections in the Qdrant database."""
    try:
        validate_response_format(format)
        result = await tenant_client().list_collections()
        return format_response((result or {}).get("collections", []), format, "collections")
    except Exception as exc:
        raise tool_error("qdrant_list_collections", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_collection(collection_name: str, format: str = "json") -> str:
    """Get configuration, status, and point counts for a collection."""
    try:
        validate_collection_name(collection_name)
        validate_response_format(format)
        result = await tenant_client().get_collection(collection_name)
        return format_response(result, format, "collection")
    except Exception as exc:
        raise tool_error("qdrant_get_collection", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_collection_exists(collection_name: str) -> str:
    """Check whether a collection exists."""
    try:
        validate_collection_name(collection_name)
        exists = await tenant_client().collection_exists(collection_name)
        return json_text({"exists": exists, "collection_name": collection_name})
    except Exception as exc:
        raise tool_error("qdrant_collection_exists", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_collection(
    collection_name: str,
    vector_size: int,
    distance: str = "Cosine",
    on_disk_payload: Optional[bool] = None,
    shard_number: Optional[int] = None,
    replication_factor: Optional[int] = None,
) -> str:
    """
    Create a collection with a single unnamed dense vector.

    distance is one of Cosine, Euclid, Dot, Manhattan.
    """
    try:
        validate_collection_name(collection_name)
        collection_config = CollectionConfig(
            vectors=VectorParams(size=vector_size, distance=distance),
            on_disk_payload=on_disk_payload,
            shard_number=shard_number,
            replication_factor=replication_factor,
        )
        await tenant_client().create_collection(collection_name, collection_config)
        return success(f"Collection '{collection_name}' created", collection_name=collection_name)
    except Exception as exc:
        raise tool_error("qdrant_create_collection", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_collection_multi_vector(
    collection_name: str,
    vectors: list[dict],
    on_disk_payload: Optional[bool] = None,
) -> str:
    """
    Create a collection with several named vectors.

    Each entry of vectors needs name, size and distance.
    """
    try:
        validate_collection_name(collection_name)
        validate_list(vectors, "vectors", required=True)
        vectors_config = {}
        for entry in vectors:
            validate_mapping(entry, "vectors")
            validate_required_text(entry.get("name"), "vectors.name")
            vectors_config[entry["name"]] = VectorParams(
                size=entry.get("size"),
                distance=entry.get("distance", "Cosine"),
            )
        collection_config = CollectionConfig(vectors=vectors_config, on_disk_payload=on_disk_payload)
        await tenant_client().create_collection(collection_name, collection_config)
        return success(
            f"Collection '{collection_name}' created with {len(vectors)} named vectors",
            collection_name=collection_name,
            vectors=list(vectors_config),
        )
    except Exception as exc:
        raise tool_error("qdrant_create_collection_multi_vector", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_update_collection(
    collection_name: str,
    optimizers_config: Optional[dict] = None,
    hnsw_config: Optional[dict] = None,
) -> str:
    """Update optimizer or HNSW parameters of a collection."""
    try:
        validate_collection_name(collection_name)
        validate_mapping(optimizers_config, "optimizers_config")
        validate_mapping(hnsw_config, "hnsw_config")
        if optimizers_config is None and hnsw_config is None:
            raise ValidationIssue(
                "provide optimizers_config or hnsw_config",
                field="optimizers_config",
                error_type="required",
            )
        params = CollectionConfig(optimizers_config=optimizers_config, hnsw_config=hnsw_config)
        await tenant_client().update_collection(collection_name, params)
        return success(f"Collection '{collection_name}' updated")
    except Exception as exc:
        raise tool_error("qdrant_update_collection", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_collection(collection_name: str) -> str:
    """Delete a collection and all of its points. This cannot be undone."""
    try:
        validate_collection_name(collection_name)
        await tenant_client().delete_collection(collection_name)
        return success(f"Collection '{collection_name}' deleted")
    except Exception as exc:
        raise tool_error("qdrant_delete_collection", exc) from exc


# =============================================================================
# Aliases
# =============================================================================


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_list_aliases(format: str = "json") -> str:
    """List all collection aliases."""
    try:
        validate_response_format(format)
        result = await tenant_client().list_aliases()
        return format_response((result or {}).get("aliases", []), format, "aliases")
    except Exception as exc:
        raise tool_error("qdrant_list_aliases", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_collection_aliases(collection_name: str, format: str = "json") -> str:
    """List the aliases that point at one collection."""
    try:
        validate_collection_name(collection_name)
        validate_response_format(format)
        result = await tenant_client().get_collection_aliases(collection_name)
        return format_response((result or {}).get("aliases", []), format, "aliases")
    except Exception as exc:
        raise tool_error("qdrant_get_collection_aliases", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_alias(alias_name: str, collection_name: str) -> str:
    """Create an alternative name for a collection."""
    try:
        validate_required_text(alias_name, "alias_name")
        validate_collection_name(collection_name)
        await tenant_client().update_aliases(
            [CreateAlias(collection_name=collection_name, alias_name=alias_name)]
        )
        return success(f"Alias '{alias_name}' created for collection '{collection_name}'")
    except Exception as exc:
        raise tool_error("qdrant_create_alias", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_alias(alias_name: str) -> str:
    try:
        validate_required_text(alias_name, "alias_name")
        await tenant_client().update_aliases([DeleteAlias(alias_name=alias_name)])
        return success(f"Alias '{alias_name}' deleted")
    except Exception as exc:
        raise tool_error("qdrant_delete_alias", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_rename_alias(old_alias_name: str, new_alias_name: str) -> str:
    try:
        validate_required_text(old_alias_name, "old_alias_name")
        validate_required_text(new_alias_name, "new_alias_name")
        await tenant_client().update_aliases(
            [RenameAlias(old_alias_name=old_alias_name, new_alias_name=new_alias_name)]
        )
        return success(f"Alias renamed from '{old_alias_name}' to '{new_alias_name}'")
    except Exception as exc:
        raise tool_error("qdrant_rename_alias", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_switch_alias(alias_name: str, new_collection_name: str) -> str:
    """
    Point an alias at another collection in one atomic update.

    Deleting and re-creating happen in the same request, so readers never
    see the alias missing.
    """
    try:
        validate_required_text(alias_name, "alias_name")
        validate_collection_name(new_collection_name)
        await tenant_client().update_aliases(
            [
                DeleteAlias(alias_name=alias_name),
                CreateAlias(collection_name=new_collection_name, alias_name=alias_name),
            ]
        )
        return success(f"Alias '{alias_name}' switched to collection '{new_collection_name}'")
    except Exception as exc:
        raise tool_error("qdrant_switch_alias", exc) from exc
