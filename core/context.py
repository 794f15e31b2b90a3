"""
Request-scoped context objects: tenant credentials and the current request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional
import contextvars

import core.config as config
from core.errors import ConfigurationError


@dataclass(frozen=True)
class TenantCredentials:
    api_key: Optional[str] = None
    base_url: Optional[str] = None

    def __repr__(self) -> str:
        # Never render the key itself.
        key_state = "unset" if self.api_key is None else "set"
        url_state = "unset" if self.base_url is None else "set"
        return f"TenantCredentials(api_key=<{key_state}>, base_url=<{url_state}>)"

    __str__ = __repr__


@dataclass(frozen=True)
class RequestContext:
    credentials: TenantCredentials = field(default_factory=TenantCredentials)
    request_id: Optional[str] = None
    source: Optional[str] = None


_CURRENT_REQUEST_CONTEXT: contextvars.ContextVar[Optional["RequestContext"]] = contextvars.ContextVar(
    "qdrant_gateway_request_context",
    default=None,
)


def get_current_request_context() -> Optional["RequestContext"]:
    return _CURRENT_REQUEST_CONTEXT.get()


def set_current_request_context(context: Optional["RequestContext"]) -> contextvars.Token:
    return _CURRENT_REQUEST_CONTEXT.set(context)


def reset_current_request_context(token: contextvars.Token) -> None:
    _CURRENT_REQUEST_CONTEXT.reset(token)


def _lookup_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    target = name.lower()
    for key, value in headers.items():
        if key.lower() == target:
            return value
    return None


def resolve_tenant_credentials(headers: Mapping[str, str]) -> TenantCredentials:
    """
    Read tenant credentials from inbound header-like metadata.

    A header that is not present at all resolves to None; a header that is
    present but empty resolves to "" so callers can tell the two apart.
    """
    return TenantCredentials(
        api_key=_lookup_header(headers, config.QDRANT_API_KEY_HEADER),
        base_url=_lookup_header(headers, config.QDRANT_BASE_URL_HEADER),
    )


def validate_tenant_credentials(credentials: TenantCredentials) -> None:
    """Raise ConfigurationError naming every missing tenant header."""
    missing = []
    if not (credentials.api_key or "").strip():
        missing.append(config.QDRANT_API_KEY_HEADER)
    if not (credentials.base_url or "").strip():
        missing.append(config.QDRANT_BASE_URL_HEADER)
    if not missing:
        return
    if missing == [config.QDRANT_API_KEY_HEADER]:
        message = f"Missing credentials. Provide {config.QDRANT_API_KEY_HEADER} header."
    elif missing == [config.QDRANT_BASE_URL_HEADER]:
        message = (
            f"Missing Qdrant URL. Provide {config.QDRANT_BASE_URL_HEADER} header "
            "(e.g., https://your-cluster.qdrant.io:6333)."
        )
    else:
        message = "Missing credentials. Provide " + " and ".join(missing) + " headers."
    raise ConfigurationError(message, missing_headers=missing)


__all__ = [
    "TenantCredentials",
    "RequestContext",
    "get_current_request_context",
    "set_current_request_context",
    "reset_current_request_context",
    "resolve_tenant_credentials",
    "validate_tenant_credentials",
]
