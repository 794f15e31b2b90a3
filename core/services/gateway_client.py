"""
Per-tenant Qdrant REST client.

Every endpoint method resolves to an entry of ``ENDPOINTS`` and goes through
``_request``, the single place where an outbound call is made and where HTTP
failures are classified. A ``GatewayClient`` is bound to one tenant's
credentials and is built fresh for each tool invocation.
"""

from __future__ import annotations

import asyncio
import json
import re
from typing import Any, Mapping, Optional, Sequence

import httpx

import core.config as config
from core.config import logger
from core.context import TenantCredentials
from core.errors import ApiError, AuthenticationError, ConfigurationError, RateLimitError
from core.models import (
    AliasAction,
    BatchOperation,
    ClusterOperation,
    FieldSchema,
    TaggedVariant,
    batch_operation_from_dict,
    cluster_operation_from_dict,
    field_schema_to_wire,
    to_wire,
)
from core.services.endpoints import (
    ENDPOINTS,
    RESULT_ACKNOWLEDGE,
    RESULT_EXISTS,
    RequestDescriptor,
    build_request,
)
from core.services.http import get_http_client

_RETRY_AFTER_PATTERN = re.compile(r"^\s*([+-]?\d+)")

AUTH_FAILED_MESSAGE = "Authentication failed. Check your API key."
RATE_LIMITED_MESSAGE = "Rate limit exceeded"
NO_BASE_URL_MESSAGE = f"No Qdrant URL provided. Set {config.QDRANT_BASE_URL_HEADER} header."
UNEXPECTED_VERSION_MESSAGE = "Unexpected response from Qdrant: no version reported"


def parse_retry_after(value: Optional[str]) -> int:
    """Leading integer of a Retry-After header, or the default when absent or unparseable."""
    if not value:
        return config.DEFAULT_RETRY_AFTER_SECONDS
    match = _RETRY_AFTER_PATTERN.match(value)
    if not match:
        return config.DEFAULT_RETRY_AFTER_SECONDS
    return int(match.group(1))


def extract_error_message(body_text: str, default: str) -> str:
    """Pick ``status.error``, then ``message``, then ``error`` from a JSON error body."""
    try:
        data = json.loads(body_text)
    except ValueError:
        return default
    if not isinstance(data, dict):
        return default
    status = data.get("status")
    candidates = (
        status.get("error") if isinstance(status, dict) else None,
        data.get("message"),
        data.get("error"),
    )
    for candidate in candidates:
        if candidate:
            return candidate if isinstance(candidate, str) else json.dumps(candidate)
    return default


def serialize_body(body: Any) -> Any:
    """
    Render a request body.

    Dicts keep every key they were given. Models are rendered with unset
    fields dropped; a tagged variant sent on its own endpoint contributes only
    its parameters.
    """
    if isinstance(body, TaggedVariant):
        return body.body()
    return to_wire(body)


class GatewayClient:
    def __init__(self, credentials: TenantCredentials, http_client: Optional[httpx.AsyncClient] = None):
        self.credentials = credentials
        self.base_url = (credentials.base_url or "").rstrip("/")
        self._http_client = http_client

    def __repr__(self) -> str:
        return f"GatewayClient(credentials={self.credentials!r})"

    def _auth_headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.credentials.api_key:
            headers["api-key"] = self.credentials.api_key
        return headers

    # =========================================================================
    # Shared request routine
    # =========================================================================

    async def _request(self, descriptor: RequestDescriptor, headers: Optional[Mapping[str, str]] = None) -> Any:
        if not self.base_url:
            raise ConfigurationError(NO_BASE_URL_MESSAGE, missing_headers=[config.QDRANT_BASE_URL_HEADER])

        client = self._http_client or get_http_client()
        request_headers = self._auth_headers()
        request_headers.update(headers or {})
        content = None
        if descriptor.body is not None:
            content = json.dumps(serialize_body(descriptor.body)).encode("utf-8")
        request = client.build_request(
            descriptor.method,
            f"{self.base_url}{descriptor.path}",
            params=list(descriptor.query) or None,
            headers=request_headers,
            content=content,
        )

        response = await client.send(request, stream=True)
        try:
            logger.debug(
                "qdrant_request",
                extra={
                    "http_method": descriptor.method,
                    "http_path": descriptor.path,
                    "status_code": response.status_code,
                },
            )
            return await self._handle_response(response, descriptor.envelope)
        finally:
            await response.aclose()

    async def _handle_response(self, response: httpx.Response, envelope: bool = True) -> Any:
        status = response.status_code
        if status == 429:
            raise RateLimitError(RATE_LIMITED_MESSAGE, parse_retry_after(response.headers.get("Retry-After")))
        if status in (401, 403):
            raise AuthenticationError(AUTH_FAILED_MESSAGE)
        if not 200 <= status < 300:
            await response.aread()
            message = extract_error_message(response.text, f"API error: {status}")
            raise ApiError(message, status)
        if status == 204:
            return None

        await response.aread()
        content_type = response.headers.get("Content-Type", "")
        if "text/plain" in content_type:
            return response.text
        data = json.loads(response.text)
        if not isinstance(data, dict):
            return None
        if envelope:
            return data.get("result")
        return data.get("result", data)

    async def _dispatch(
        self,
        name: str,
        path_params: Optional[Mapping[str, Any]] = None,
        body: Any = None,
        **flags: Any,
    ) -> Any:
        endpoint = ENDPOINTS[name]
        descriptor = build_request(endpoint, path_params, body, flags)
        result = await self._request(descriptor)
        if endpoint.result == RESULT_EXISTS:
            return bool(result.get("exists")) if isinstance(result, dict) else bool(result)
        if endpoint.result == RESULT_ACKNOWLEDGE:
            return True
        return result

    # =========================================================================
    # Connection
    # =========================================================================

    async def test_connection(self) -> dict:
        try:
            version = await self.get_version()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            return {"connected": False, "message": str(exc) or "Connection failed"}
        label = version.get("version") if isinstance(version, dict) else None
        if not label:
            return {"connected": False, "message": UNEXPECTED_VERSION_MESSAGE}
        return {"connected": True, "message": f"Connected to Qdrant {label}"}

    # =========================================================================
    # Service
    # =========================================================================

    async def get_version(self) -> dict:
        return await self._dispatch("get_version")

    async def get_telemetry(self, anonymize: bool = True) -> dict:
        return await self._dispatch("get_telemetry", anonymize=anonymize)

    async def get_metrics(self) -> str:
        return await self._dispatch("get_metrics")

    async def get_locks(self) -> dict:
        return await self._dispatch("get_locks")

    async def set_locks(self, locks: Any) -> dict:
        return await self._dispatch("set_locks", body=locks)

    # =========================================================================
    # Collections
    # =========================================================================

    async def list_collections(self) -> dict:
        return await self._dispatch("list_collections")

    async def get_collection(self, collection_name: str) -> dict:
        return await self._dispatch("get_collection", {"collection": collection_name})

    async def collection_exists(self, collection_name: str) -> bool:
        return await self._dispatch("collection_exists", {"collection": collection_name})

    async def create_collection(self, collection_name: str, collection_config: Any) -> bool:
        return await self._dispatch("create_collection", {"collection": collection_name}, body=collection_config)

    async def update_collection(self, collection_name: str, params: Any) -> bool:
        return await self._dispatch("update_collection", {"collection": collection_name}, body=params)

    async def delete_collection(self, collection_name: str) -> bool:
        return await self._dispatch("delete_collection", {"collection": collection_name})

    # =========================================================================
    # Aliases
    # =========================================================================

    async def list_aliases(self) -> dict:
        return await self._dispatch("list_aliases")

    async def get_collection_aliases(self, collection_name: str) -> dict:
        return await self._dispatch("get_collection_aliases", {"collection": collection_name})

    async def update_aliases(self, actions: Sequence[AliasAction]) -> bool:
        return await self._dispatch("update_aliases", body={"actions": [to_wire(action) for action in actions]})

    # =========================================================================
    # Points
    # =========================================================================

    async def upsert_points(self, collection_name: str, points: Sequence[Any], wait: bool = True) -> dict:
        body = {"points": [to_wire(point) for point in points]}
        return await self._dispatch("upsert_points", {"collection": collection_name}, body=body, wait=wait)

    async def get_points(
        self,
        collection_name: str,
        ids: Sequence[Any],
        with_payload: Any = True,
        with_vector: Any = False,
    ) -> list:
        body = {"ids": list(ids), "with_payload": with_payload, "with_vector": with_vector}
        return await self._dispatch("get_points", {"collection": collection_name}, body=body)

    async def get_point(self, collection_name: str, point_id: Any) -> dict:
        return await self._dispatch("get_point", {"collection": collection_name, "point_id": point_id})

    async def delete_points(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("delete_points", {"collection": collection_name}, body=request, wait=wait)

    async def scroll_points(self, collection_name: str, request: Any) -> dict:
        return await self._dispatch("scroll_points", {"collection": collection_name}, body=request)

    async def count_points(self, collection_name: str, request: Any = None) -> dict:
        return await self._dispatch(
            "count_points", {"collection": collection_name}, body=request if request is not None else {}
        )

    # =========================================================================
    # Vectors
    # =========================================================================

    async def update_vectors(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("update_vectors", {"collection": collection_name}, body=request, wait=wait)

    async def delete_vectors(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("delete_vectors", {"collection": collection_name}, body=request, wait=wait)

    # =========================================================================
    # Payload
    # =========================================================================

    async def set_payload(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("set_payload", {"collection": collection_name}, body=request, wait=wait)

    async def overwrite_payload(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("overwrite_payload", {"collection": collection_name}, body=request, wait=wait)

    async def delete_payload(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("delete_payload", {"collection": collection_name}, body=request, wait=wait)

    async def clear_payload(self, collection_name: str, request: Any, wait: bool = True) -> dict:
        return await self._dispatch("clear_payload", {"collection": collection_name}, body=request, wait=wait)

    # =========================================================================
    # Batch
    # =========================================================================

    async def batch_update(
        self,
        collection_name: str,
        operations: Sequence[BatchOperation | Mapping[str, Any]],
        wait: bool = True,
    ) -> list:
        """Apply several point operations in one call; results keep the input order."""
        body = {"operations": [to_wire(batch_operation_from_dict(op)) for op in operations]}
        return await self._dispatch("batch_update", {"collection": collection_name}, body=body, wait=wait)

    # =========================================================================
    # Search family
    # =========================================================================

    async def search(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("search", {"collection": collection_name}, body=request)

    async def search_batch(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("search_batch", {"collection": collection_name}, body=request)

    async def query(self, collection_name: str, request: Any) -> Any:
        return await self._dispatch("query", {"collection": collection_name}, body=request)

    async def query_batch(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("query_batch", {"collection": collection_name}, body=request)

    async def query_groups(self, collection_name: str, request: Any) -> dict:
        return await self._dispatch("query_groups", {"collection": collection_name}, body=request)

    async def recommend(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("recommend", {"collection": collection_name}, body=request)

    async def recommend_batch(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("recommend_batch", {"collection": collection_name}, body=request)

    async def recommend_groups(self, collection_name: str, request: Any) -> dict:
        return await self._dispatch("recommend_groups", {"collection": collection_name}, body=request)

    async def discover(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("discover", {"collection": collection_name}, body=request)

    async def discover_batch(self, collection_name: str, request: Any) -> list:
        return await self._dispatch("discover_batch", {"collection": collection_name}, body=request)

    async def search_matrix_pairs(self, collection_name: str, request: Any) -> dict:
        return await self._dispatch("search_matrix_pairs", {"collection": collection_name}, body=request)

    async def search_matrix_offsets(self, collection_name: str, request: Any) -> dict:
        return await self._dispatch("search_matrix_offsets", {"collection": collection_name}, body=request)

    # =========================================================================
    # Snapshots
    # =========================================================================

    async def list_snapshots(self, collection_name: str) -> list:
        return await self._dispatch("list_snapshots", {"collection": collection_name})

    async def create_snapshot(self, collection_name: str, wait: bool = True) -> dict:
        return await self._dispatch("create_snapshot", {"collection": collection_name}, wait=wait)

    async def delete_snapshot(self, collection_name: str, snapshot_name: str, wait: bool = True) -> bool:
        return await self._dispatch(
            "delete_snapshot", {"collection": collection_name, "snapshot": snapshot_name}, wait=wait
        )

    async def recover_snapshot(self, collection_name: str, request: Any, wait: bool = True) -> bool:
        return await self._dispatch("recover_snapshot", {"collection": collection_name}, body=request, wait=wait)

    async def list_full_snapshots(self) -> list:
        return await self._dispatch("list_full_snapshots")

    async def create_full_snapshot(self, wait: bool = True) -> dict:
        return await self._dispatch("create_full_snapshot", wait=wait)

    async def delete_full_snapshot(self, snapshot_name: str, wait: bool = True) -> bool:
        return await self._dispatch("delete_full_snapshot", {"snapshot": snapshot_name}, wait=wait)

    # =========================================================================
    # Cluster
    # =========================================================================

    async def get_cluster_status(self) -> dict:
        return await self._dispatch("get_cluster_status")

    async def recover_cluster(self) -> bool:
        return await self._dispatch("recover_cluster")

    async def remove_peer(self, peer_id: int, force: bool = False) -> bool:
        return await self._dispatch("remove_peer", {"peer_id": peer_id}, force=force)

    async def get_collection_cluster_info(self, collection_name: str) -> dict:
        return await self._dispatch("get_collection_cluster_info", {"collection": collection_name})

    async def update_collection_cluster(
        self, collection_name: str, operation: ClusterOperation | Mapping[str, Any]
    ) -> bool:
        body = to_wire(cluster_operation_from_dict(operation))
        return await self._dispatch("update_collection_cluster", {"collection": collection_name}, body=body)

    async def create_shard_key(self, collection_name: str, request: Any) -> bool:
        return await self._dispatch("create_shard_key", {"collection": collection_name}, body=request)

    async def delete_shard_key(self, collection_name: str, request: Any) -> bool:
        return await self._dispatch("delete_shard_key", {"collection": collection_name}, body=request)

    # =========================================================================
    # Payload indexes
    # =========================================================================

    async def create_field_index(
        self,
        collection_name: str,
        field_name: str,
        field_schema: Optional[FieldSchema] = None,
        wait: bool = True,
    ) -> dict:
        body = {"field_name": field_name}
        schema = field_schema_to_wire(field_schema)
        if schema is not None:
            body["field_schema"] = schema
        return await self._dispatch("create_field_index", {"collection": collection_name}, body=body, wait=wait)

    async def delete_field_index(self, collection_name: str, field_name: str, wait: bool = True) -> dict:
        return await self._dispatch(
            "delete_field_index", {"collection": collection_name, "field_name": field_name}, wait=wait
        )
