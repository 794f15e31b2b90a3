"""
Service-level tools: version, telemetry, metrics, locks and connectivity.
"""

from __future__ import annotations

from typing import Optional

from core.mcp.registry import (
    READ_ONLY_TOOL_ANNOTATIONS,
    WRITE_TOOL_ANNOTATIONS,
    json_text,
    mcp_tool,
    success,
    tenant_client,
    tool_error,
)
from core.models import LocksOption
from core.services.formatters import format_response, truncate
from core.validators import validate_optional_text, validate_response_format


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_test_connection() -> str:
    """Check that the Qdrant URL and API key of this request work."""
    return json_text(await tenant_client().test_connection())


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_version() -> str:
    """Qdrant version and build information."""
    try:
        return json_text(await tenant_client().get_version())
    except Exception as exc:
        raise tool_error("qdrant_get_version", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_telemetry(anonymize: bool = True, format: str = "json") -> str:
    """Telemetry about collections, cluster state and request statistics."""
    try:
        validate_response_format(format)
        result = await tenant_client().get_telemetry(anonymize=anonymize)
        return format_response(result, format, "telemetry")
    except Exception as exc:
        raise tool_error("qdrant_get_telemetry", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_metrics() -> str:
    """Prometheus/OpenMetrics text exposition."""
    try:
        return truncate(await tenant_client().get_metrics() or "")
    except Exception as exc:
        raise tool_error("qdrant_get_metrics", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_get_locks() -> str:
    """Whether write operations are currently locked."""
    try:
        return json_text(await tenant_client().get_locks())
    except Exception as exc:
        raise tool_error("qdrant_get_locks", exc) from exc


@mcp_tool(annotations=WRITE_TOOL_ANNOTATIONS)
async def qdrant_set_locks(write: bool, error_message: Optional[str] = None) -> str:
    """Lock or unlock write operations, e.g. during maintenance."""
    try:
        validate_optional_text(error_message, "error_message", max_len=1024)
        locks = await tenant_client().set_locks(LocksOption(write=write, error_message=error_message))
        return success("Write operations locked" if write else "Write operations unlocked", locks=locks)
    except Exception as exc:
        raise tool_error("qdrant_set_locks", exc) from exc
