"""
Health endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

import core.config as config
from core.mcp import tool_inventory_status


router = APIRouter()


@router.get("/health")
async def health():
    """Liveness check. Never contacts an upstream Qdrant instance."""
    return {"status": "ok", "server": config.SERVER_NAME}


@router.get("/health/tools")
async def health_tools():
    """Tool inventory health check."""
    tool_inventory = await tool_inventory_status()
    if tool_inventory.get("tool_count", 0) == 0:
        raise HTTPException(status_code=503, detail={"tool_inventory": tool_inventory})

    return {
        "status": "ok",
        "server": config.SERVER_NAME,
        "instance_id": config.INSTANCE_ID,
        "tool_inventory": tool_inventory,
    }
