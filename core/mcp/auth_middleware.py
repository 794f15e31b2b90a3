"""
Tenant credential middleware for the MCP endpoint.

Reads the Qdrant API key and base URL from the request headers, validates
them, and sets the request context for the duration of the request using
contextvars (async-safe). Credentials are never logged.
"""

from __future__ import annotations

import json
import uuid

import core.config as config
from core.context import (
    RequestContext,
    get_current_request_context,
    reset_current_request_context,
    resolve_tenant_credentials,
    set_current_request_context,
    validate_tenant_credentials,
)
from core.errors import ConfigurationError


def get_current_context() -> RequestContext:
    """Get current request context, or an empty one if not set."""
    ctx = get_current_request_context()
    if ctx is not None:
        return ctx
    return RequestContext()


class TenantCredentialsMiddleware:
    """
    ASGI middleware that binds per-request tenant credentials.

    Wraps the MCP app so every tool call sees the credentials of the request
    that carried it and never those of another tenant.
    """

    def __init__(self, app, require_credentials: bool | None = None):
        self.app = app
        if require_credentials is None:
            require_credentials = config.REQUIRE_TENANT_CREDENTIALS
        self.require_credentials = require_credentials

    def __getattr__(self, name):
        return getattr(self.app, name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        # ASGI headers are bytes tuples
        headers = {}
        for header_name, header_value in scope.get("headers", []):
            headers[header_name.decode("latin1").lower()] = header_value.decode("latin1")

        credentials = resolve_tenant_credentials(headers)
        if self.require_credentials:
            try:
                validate_tenant_credentials(credentials)
            except ConfigurationError as exc:
                config.logger.info(
                    "tenant_credentials_missing",
                    extra={"missing_headers": list(exc.missing_headers)},
                )
                await self._send_error(send, 401, exc.message)
                return

        req_ctx = RequestContext(
            credentials=credentials,
            request_id=headers.get("x-request-id") or uuid.uuid4().hex,
            source="mcp",
        )
        token = set_current_request_context(req_ctx)
        try:
            await self.app(scope, receive, send)
        finally:
            reset_current_request_context(token)

    async def _send_error(self, send, status_code: int, message: str):
        """Send JSON error response."""
        body = json.dumps(
            {
                "error": "Unauthorized",
                "message": message,
                "required_headers": list(config.REQUIRED_TENANT_HEADERS),
            }
        ).encode("utf-8")

        await send({
            "type": "http.response.start",
            "status": status_code,
            "headers": [
                [b"content-type", b"application/json"],
                [b"content-length", str(len(body)).encode("latin1")],
            ],
        })

        await send({
            "type": "http.response.body",
            "body": body,
        })
