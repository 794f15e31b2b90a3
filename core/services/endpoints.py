"""
Declarative table of Qdrant REST endpoints.

Each entry names the HTTP verb, the path template (``{placeholders}`` are
percent-encoded path segments), the query flags the call accepts together with
their defaults, and how the unwrapped ``result`` is post-processed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

# Characters encodeURIComponent leaves alone besides [A-Za-z0-9_.~-].
_SEGMENT_SAFE = "!*'()"

RESULT_RAW = "raw"
RESULT_EXISTS = "exists"
RESULT_ACKNOWLEDGE = "acknowledge"


@dataclass(frozen=True)
class QueryFlag:
    name: str
    default: Optional[bool] = None
    # Only sent when true; false means "leave it off the URL".
    omit_when_false: bool = False


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str
    query: tuple[QueryFlag, ...] = ()
    result: str = RESULT_RAW
    # False for bodies Qdrant sends without the {"result": ...} envelope.
    envelope: bool = True


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    query: tuple[tuple[str, str], ...] = ()
    body: Any = None
    envelope: bool = True


def encode_segment(value: Any) -> str:
    return quote(str(value), safe=_SEGMENT_SAFE)


def format_query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_request(
    endpoint: Endpoint,
    path_params: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    flags: Optional[Mapping[str, Any]] = None,
) -> RequestDescriptor:
    """Fill in an endpoint's path and query for one call."""
    encoded = {key: encode_segment(value) for key, value in (path_params or {}).items()}
    path = endpoint.path.format(**encoded)
    flags = dict(flags or {})
    unknown = set(flags) - {flag.name for flag in endpoint.query}
    if unknown:
        raise TypeError(f"unexpected query flags for {endpoint.path}: {sorted(unknown)}")

    query = []
    for flag in endpoint.query:
        value = flags.get(flag.name, flag.default)
        if value is None:
            continue
        if flag.omit_when_false and not value:
            continue
        query.append((flag.name, format_query_value(value)))
    return RequestDescriptor(
        method=endpoint.method, path=path, query=tuple(query), body=body, envelope=endpoint.envelope
    )


WAIT = QueryFlag("wait", default=True)

_C = "/collections/{collection}"
_P = _C + "/points"

ENDPOINTS: dict[str, Endpoint] = {
    # Service
    "get_version": Endpoint("GET", "/", envelope=False),
    "get_telemetry": Endpoint("GET", "/telemetry", (QueryFlag("anonymize", default=True, omit_when_false=True),)),
    "get_metrics": Endpoint("GET", "/metrics"),
    "get_locks": Endpoint("GET", "/locks"),
    "set_locks": Endpoint("POST", "/locks"),
    # Collections
    "list_collections": Endpoint("GET", "/collections"),
    "get_collection": Endpoint("GET", _C),
    "collection_exists": Endpoint("GET", _C + "/exists", result=RESULT_EXISTS),
    "create_collection": Endpoint("PUT", _C, result=RESULT_ACKNOWLEDGE),
    "update_collection": Endpoint("PATCH", _C, result=RESULT_ACKNOWLEDGE),
    "delete_collection": Endpoint("DELETE", _C, result=RESULT_ACKNOWLEDGE),
    # Aliases
    "list_aliases": Endpoint("GET", "/aliases"),
    "get_collection_aliases": Endpoint("GET", _C + "/aliases"),
    "update_aliases": Endpoint("POST", "/collections/aliases", result=RESULT_ACKNOWLEDGE),
    # Points
    "upsert_points": Endpoint("PUT", _P, (WAIT,)),
    "get_points": Endpoint("POST", _P),
    "get_point": Endpoint("GET", _P + "/{point_id}"),
    "delete_points": Endpoint("POST", _P + "/delete", (WAIT,)),
    "scroll_points": Endpoint("POST", _P + "/scroll"),
    "count_points": Endpoint("POST", _P + "/count"),
    # Vectors
    "update_vectors": Endpoint("PUT", _P + "/vectors", (WAIT,)),
    "delete_vectors": Endpoint("POST", _P + "/vectors/delete", (WAIT,)),
    # Payload
    "set_payload": Endpoint("POST", _P + "/payload", (WAIT,)),
    "overwrite_payload": Endpoint("PUT", _P + "/payload", (WAIT,)),
    "delete_payload": Endpoint("POST", _P + "/payload/delete", (WAIT,)),
    "clear_payload": Endpoint("POST", _P + "/payload/clear", (WAIT,)),
    # Batch
    "batch_update": Endpoint("POST", _P + "/batch", (WAIT,)),
    # Search family
    "search": Endpoint("POST", _P + "/search"),
    "search_batch": Endpoint("POST", _P + "/search/batch"),
    "query": Endpoint("POST", _P + "/query"),
    "query_batch": Endpoint("POST", _P + "/query/batch"),
    "query_groups": Endpoint("POST", _P + "/query/groups"),
    "recommend": Endpoint("POST", _P + "/recommend"),
    "recommend_batch": Endpoint("POST", _P + "/recommend/batch"),
    "recommend_groups": Endpoint("POST", _P + "/recommend/groups"),
    "discover": Endpoint("POST", _P + "/discover"),
    "discover_batch": Endpoint("POST", _P + "/discover/batch"),
    "search_matrix_pairs": Endpoint("POST", _P + "/search/matrix/pairs"),
    "search_matrix_offsets": Endpoint("POST", _P + "/search/matrix/offsets"),
    # Snapshots
    "list_snapshots": Endpoint("GET", _C + "/snapshots"),
    "create_snapshot": Endpoint("POST", _C + "/snapshots", (WAIT,)),
    "delete_snapshot": Endpoint("DELETE", _C + "/snapshots/{snapshot}", (WAIT,), RESULT_ACKNOWLEDGE),
    "recover_snapshot": Endpoint("PUT", _C + "/snapshots/recover", (WAIT,), RESULT_ACKNOWLEDGE),
    "list_full_snapshots": Endpoint("GET", "/snapshots"),
    "create_full_snapshot": Endpoint("POST", "/snapshots", (WAIT,)),
    "delete_full_snapshot": Endpoint("DELETE", "/snapshots/{snapshot}", (WAIT,), RESULT_ACKNOWLEDGE),
    # Cluster
    "get_cluster_status": Endpoint("GET", "/cluster"),
    "recover_cluster": Endpoint("POST", "/cluster/recover", result=RESULT_ACKNOWLEDGE),
    "remove_peer": Endpoint("DELETE", "/cluster/peer/{peer_id}", (QueryFlag("force", default=False),), RESULT_ACKNOWLEDGE),
    "get_collection_cluster_info": Endpoint("GET", _C + "/cluster"),
    "update_collection_cluster": Endpoint("POST", _C + "/cluster", result=RESULT_ACKNOWLEDGE),
    "create_shard_key": Endpoint("PUT", _C + "/shards", result=RESULT_ACKNOWLEDGE),
    "delete_shard_key": Endpoint("POST", _C + "/shards/delete", result=RESULT_ACKNOWLEDGE),
    # Payload indexes
    "create_field_index": Endpoint("PUT", _C + "/index", (WAIT,)),
    "delete_field_index": Endpoint("DELETE", _C + "/index/{field_name}", (WAIT,)),
}
