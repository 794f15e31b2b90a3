"""
Pooled HTTP transport shared by every tenant's gateway client.

The pool carries no tenant headers; credentials are attached per request.
"""

from __future__ import annotations

from typing import Optional

import httpx

import core.config as config
from core.config import logger

http_client: Optional[httpx.AsyncClient] = None


def init_http_client() -> httpx.AsyncClient:
    """Initialize the pooled client for upstream Qdrant calls."""
    global http_client
    # Redirects are not followed: the api-key header must never reach another host.
    http_client = httpx.AsyncClient(
        follow_redirects=False,
        timeout=httpx.Timeout(config.QDRANT_TIMEOUT_SECONDS),
        limits=httpx.Limits(
            max_keepalive_connections=config.QDRANT_MAX_KEEPALIVE_CONNECTIONS,
            max_connections=config.QDRANT_MAX_CONNECTIONS,
        ),
    )
    logger.info("HTTP client initialized")
    return http_client


async def cleanup_http_client() -> None:
    """Close the pooled client on shutdown."""
    global http_client
    if http_client:
        await http_client.aclose()
        http_client = None
        logger.info("HTTP client closed")


def get_http_client() -> httpx.AsyncClient:
    if http_client is None:
        return init_http_client()
    return http_client
