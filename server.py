"""
Qdrant MCP Gateway - multi-tenant MCP server in front of Qdrant REST APIs.

Tenants pass their own Qdrant URL and API key on every request; the gateway
holds no credentials of its own.
"""

import uvicorn

import core.config as config
from app.main import asgi_app

app = asgi_app


# =============================================================================
# Main
# =============================================================================

if __name__ == "__main__":
    config.logger.info("gateway_starting", extra={"host": config.HOST, "port": config.PORT})
    uvicorn.run(app, host=config.HOST, port=config.PORT)
