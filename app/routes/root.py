"""
Root endpoint with service metadata.
"""

from __future__ import annotations

from fastapi import APIRouter

import core.config as config
from core.mcp import tool_inventory_status


router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with service info."""
    tool_inventory = await tool_inventory_status()
    return {
        "name": config.SERVER_NAME,
        "version": config.SERVER_VERSION,
        "description": "Multi-tenant MCP gateway for the Qdrant vector database",
        "endpoints": {
            "health": "/health",
            "health_tools": "/health/tools",
            "mcp": "/mcp",
        },
        "authentication": {
            "required_headers": list(config.REQUIRED_TENANT_HEADERS),
            "example": {
                config.QDRANT_API_KEY_HEADER: "your-qdrant-api-key",
                config.QDRANT_BASE_URL_HEADER: "https://your-cluster.qdrant.io:6333",
            },
        },
        "tool_count": tool_inventory["tool_count"],
        "tools": tool_inventory["tools"],
    }
