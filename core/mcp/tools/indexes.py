"""
Payload field index tools.
"""

from __future__ import annotations

from typing import Optional

from core.mcp.registry import (
    DESTRUCTIVE_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import IntegerIndexParams, TextIndexParams
from core.validators import validate_collection_name, validate_required_text


def _index_result(message: str, result: Optional[dict]) -> str:
    result = result or {}
    return success(message, status=result.get("status"), operation_id=result.get("operation_id"))


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_field_index(
    collection_name: str,
    field_name: str,
    field_schema: Optional[str] = None,
    wait: bool = True,
) -> str:
    """
    Index a payload field for faster filtering.

    field_schema is keyword, integer, float, bool, geo, datetime, text or uuid.
    """
    try:
        validate_collection_name(collection_name)
        validate_required_text(field_name, "field_name")
        result = await tenant_client().create_field_index(collection_name, field_name, field_schema, wait=wait)
        return _index_result(f"Index created on field '{field_name}'", result)
    except Exception as exc:
        raise tool_error("qdrant_create_field_index", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_text_index(
    collection_name: str,
    field_name: str,
    tokenizer: str = "word",
    min_token_len: Optional[int] = None,
    max_token_len: Optional[int] = None,
    lowercase: bool = True,
    wait: bool = True,
) -> str:
    """Full-text index. tokenizer is prefix, whitespace, word or multilingual."""
    try:
        validate_collection_name(collection_name)
        validate_required_text(field_name, "field_name")
        schema = TextIndexParams(
            tokenizer=tokenizer,
            min_token_len=min_token_len,
            max_token_len=max_token_len,
            lowercase=lowercase,
        )
        result = await tenant_client().create_field_index(collection_name, field_name, schema, wait=wait)
        return _index_result(f"Text index created on field '{field_name}'", result)
    except Exception as exc:
        raise tool_error("qdrant_create_text_index", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_create_integer_index(
    collection_name: str,
    field_name: str,
    lookup: bool = True,
    range: bool = True,
    wait: bool = True,
) -> str:
    """Integer index with exact-match lookup and/or range support."""
    try:
        validate_collection_name(collection_name)
        validate_required_text(field_name, "field_name")
        schema = IntegerIndexParams(lookup=lookup, range=range)
        result = await tenant_client().create_field_index(collection_name, field_name, schema, wait=wait)
        return _index_result(f"Integer index created on field '{field_name}'", result)
    except Exception as exc:
        raise tool_error("qdrant_create_integer_index", exc) from exc


@mcp_tool(annotations=DESTRUCTIVE_TOOL_ANNOTATIONS)
async def qdrant_delete_field_index(collection_name: str, field_name: str, wait: bool = True) -> str:
    try:
        validate_collection_name(collection_name)
        validate_required_text(field_name, "field_name")
        result = await tenant_client().delete_field_index(collection_name, field_name, wait=wait)
        return _index_result(f"Index removed from field '{field_name}'", result)
    except Exception as exc:
        raise tool_error("qdrant_delete_field_index", exc) from exc
