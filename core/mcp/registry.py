"""
FastMCP instance, tool registration, and helpers shared by the tool modules.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

import core.config as config
from core.errors import GatewayError, ValidationIssue
from core.mcp.auth_middleware import get_current_context
from core.services.formatters import format_error
from core.services.gateway_client import GatewayClient

READ_ONLY_TOOL_ANNOTATIONS = {"readOnlyHint": True}
WRITE_TOOL_ANNOTATIONS = {"readOnlyHint": False, "destructiveHint": False}
DESTRUCTIVE_TOOL_ANNOTATIONS = {"destructiveHint": True}

mcp = FastMCP(config.SERVER_NAME)

_REGISTERED_TOOLS: list[tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]] = []


def mcp_tool(*args, **kwargs):
    """Register a tool with FastMCP and keep a local registry for rebinding."""
    def decorator(fn: Callable[..., Any]):
        _REGISTERED_TOOLS.append((fn, args, kwargs))
        mcp.tool(*args, **kwargs)(fn)
        return fn
    return decorator


def registered_tools() -> list[tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]]:
    return list(_REGISTERED_TOOLS)


def tenant_client() -> GatewayClient:
    """Gateway client bound to the credentials of the current request."""
    return GatewayClient(get_current_context().credentials)


def json_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def success(message: str, **fields: Any) -> str:
    return json_text({"success": True, "message": message, **fields})


def tool_error(tool_name: str, exc: Exception) -> ToolError:
    """Log a failed tool call and wrap it for the MCP caller."""
    payload = {
        "tool": tool_name,
        "error_type": type(exc).__name__,
        "retryable": getattr(exc, "retryable", False),
    }
    if isinstance(exc, (GatewayError, ValidationIssue)):
        config.logger.info("tool_call_failed", extra=payload)
    else:
        config.logger.warning("tool_call_failed", extra=payload)
    return ToolError(format_error(exc))
