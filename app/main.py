"""
Standalone FastAPI app wiring for the Qdrant MCP gateway.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

import core.config as config
from core.mcp import mcp_stream_app, MCPRouteNormalizerASGI
from core.services import http
from app.middleware import configure_middleware
from app.routes.health import router as health_router
from app.routes.root import router as root_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    config.validate_and_prepare_config()
    http.init_http_client()
    config.logger.info(
        "gateway_started",
        extra={"server": config.SERVER_NAME, "version": config.SERVER_VERSION},
    )
    try:
        async with mcp_stream_app.lifespan(mcp_stream_app):
            yield
    finally:
        await http.cleanup_http_client()


app = FastAPI(title="Qdrant MCP Gateway", redirect_slashes=False, lifespan=lifespan)
configure_middleware(app)

# Health and root endpoints
app.include_router(health_router)
app.include_router(root_router)

# MCP endpoint; tenant credentials are checked by the wrapped app itself
app.mount("/mcp/", mcp_stream_app)


# =============================================================================
# ASGI Application (module-level for production deployment)
# =============================================================================

asgi_app = MCPRouteNormalizerASGI(app)
