"""
Shared configuration for the Qdrant MCP gateway.

Only deployment-wide knobs live here. Tenant credentials (API key and base
URL) always arrive per request via headers and are never read from the
environment.
"""

from __future__ import annotations

import logging
import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger("qdrant-gateway")


def _get_bool(env_name: str, default: bool) -> bool:
    value = os.environ.get(env_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(env_name: str, default: int) -> int:
    value = os.environ.get(env_name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(env_name: str, default: float) -> float:
    value = os.environ.get(env_name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# Server identity
SERVER_NAME = "qdrant-mcp-gateway"
SERVER_VERSION = "1.0.0"
INSTANCE_ID = os.environ.get("GATEWAY_INSTANCE_ID", "qdrant-gateway-1")
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = _get_int("PORT", 8080)

# Tenant credential headers
QDRANT_API_KEY_HEADER = "X-Qdrant-API-Key"
QDRANT_BASE_URL_HEADER = "X-Qdrant-Base-URL"
REQUIRED_TENANT_HEADERS = (QDRANT_API_KEY_HEADER, QDRANT_BASE_URL_HEADER)
REQUIRE_TENANT_CREDENTIALS = _get_bool("REQUIRE_TENANT_CREDENTIALS", True)

# Upstream HTTP transport
QDRANT_TIMEOUT_SECONDS = _get_float("QDRANT_TIMEOUT_SECONDS", 30.0)
QDRANT_MAX_CONNECTIONS = _get_int("QDRANT_MAX_CONNECTIONS", 100)
QDRANT_MAX_KEEPALIVE_CONNECTIONS = _get_int("QDRANT_MAX_KEEPALIVE_CONNECTIONS", 10)
DEFAULT_RETRY_AFTER_SECONDS = 60

# Tool output and paging limits
CHARACTER_LIMIT = _get_int("CHARACTER_LIMIT", 50000)
DEFAULT_PAGE_SIZE = _get_int("DEFAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE = _get_int("MAX_PAGE_SIZE", 100)
MAX_BATCH_OPERATIONS = _get_int("MAX_BATCH_OPERATIONS", 1000)
TOOL_INVENTORY_RETRY_SECONDS = _get_int("TOOL_INVENTORY_RETRY_SECONDS", 5)


def validate_and_prepare_config() -> None:
    """Validate configuration at startup."""
    errors = []
    if QDRANT_TIMEOUT_SECONDS <= 0:
        errors.append("QDRANT_TIMEOUT_SECONDS must be positive")
    if QDRANT_MAX_CONNECTIONS <= 0:
        errors.append("QDRANT_MAX_CONNECTIONS must be positive")
    if QDRANT_MAX_KEEPALIVE_CONNECTIONS < 0:
        errors.append("QDRANT_MAX_KEEPALIVE_CONNECTIONS must not be negative")
    if CHARACTER_LIMIT <= 0:
        errors.append("CHARACTER_LIMIT must be positive")
    if MAX_PAGE_SIZE <= 0:
        errors.append("MAX_PAGE_SIZE must be positive")
    if DEFAULT_PAGE_SIZE <= 0 or DEFAULT_PAGE_SIZE > MAX_PAGE_SIZE:
        errors.append("DEFAULT_PAGE_SIZE must be between 1 and MAX_PAGE_SIZE")

    if not REQUIRE_TENANT_CREDENTIALS:
        logger.warning(
            "REQUIRE_TENANT_CREDENTIALS=false; requests without tenant headers will reach tools."
        )

    if errors:
        raise RuntimeError("Configuration invalid: " + "; ".join(errors))
