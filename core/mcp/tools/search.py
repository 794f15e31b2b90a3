"""
Search tools: nearest-neighbour search, the universal query API,
recommendations, discovery and distance matrices.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from core.config import MAX_PAGE_SIZE
from core.errors import ValidationIssue
from core.mcp.registry import (
    READ_ONLY_TOOL_ANNOTATIONS,
    json_text,
    mcp_tool,
    tenant_client,
    tool_error,
)
from core.models import (
    ContextPair,
    DiscoverQuery,
    DistanceMatrixRequest,
    RecommendQuery,
    compact,
    query_from_value,
)
from core.services.formatters import format_response
from core.validators import (
    validate_collection_name,
    validate_limit,
    validate_list,
    validate_mapping,
    validate_non_negative,
    validate_optional_limit,
    validate_point_ids,
    validate_required_text,
    validate_response_format,
    validate_score_threshold,
    validate_vector,
)

PointIdArg = Union[int, str]
Example = Union[int, str, list[float]]


def _scored_points(result: Any) -> Any:
    # /points/query wraps its hits in {"points": [...]}
    if isinstance(result, dict) and isinstance(result.get("points"), list):
        return result["points"]
    return result


def _check_example(value: Any, field: str) -> None:
    if isinstance(value, list):
        validate_vector(value, field)
    else:
        validate_point_ids([value], field)


def _check_examples(values: Optional[list], field: str, required: bool = False) -> None:
    validate_list(values, field, required=required)
    for value in values or ():
        _check_example(value, field)


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_search(
    collection_name: str,
    vector: list[float],
    limit: int = 10,
    filter: Optional[dict] = None,
    with_payload: bool = True,
    with_vector: bool = False,
    score_threshold: Optional[float] = None,
    params: Optional[dict] = None,
    format: str = "json",
) -> str:
    """
    Approximate nearest-neighbour search with a dense vector.

    params accepts hnsw_ef, exact and indexed_only.
    """
    try:
        validate_collection_name(collection_name)
        validate_vector(vector)
        validate_limit(limit)
        validate_mapping(filter, "filter")
        validate_score_threshold(score_threshold)
        validate_mapping(params, "params")
        validate_response_format(format)
        request = compact(
            {
                "vector": vector,
                "limit": limit,
                "filter": filter,
                "with_payload": with_payload,
                "with_vector": with_vector,
                "score_threshold": score_threshold,
                "params": params,
            }
        )
        result = await tenant_client().search(collection_name, request)
        return format_response(result, format, "search_results")
    except Exception as exc:
        raise tool_error("qdrant_search", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_search_named_vector(
    collection_name: str,
    vector_name: str,
    vector: list[float],
    limit: int = 10,
    filter: Optional[dict] = None,
    with_payload: bool = True,
    format: str = "json",
) -> str:
    """Search one named vector of a multi-vector collection."""
    try:
        validate_collection_name(collection_name)
        validate_required_text(vector_name, "vector_name")
        validate_vector(vector)
        validate_limit(limit)
        validate_mapping(filter, "filter")
        validate_response_format(format)
        request = compact(
            {
                "vector": {"name": vector_name, "vector": vector},
                "limit": limit,
                "filter": filter,
                "with_payload": with_payload,
            }
        )
        result = await tenant_client().search(collection_name, request)
        return format_response(result, format, "search_results")
    except Exception as exc:
        raise tool_error("qdrant_search_named_vector", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_search_batch(collection_name: str, searches: list[dict], format: str = "json") -> str:
    """
    Run several searches in one request.

    Each search is {"vector": [...], "limit": 10, "filter": {...}}.
    Results come back in the same order.
    """
    try:
        validate_collection_name(collection_name)
        validate_list(searches, "searches", required=True)
        validate_response_format(format)
        requests = []
        for search in searches:
            validate_mapping(search, "searches")
            validate_vector(search.get("vector"), "searches.vector")
            limit = search.get("limit", 10)
            validate_limit(limit, "searches.limit")
            validate_mapping(search.get("filter"), "searches.filter")
            requests.append(compact({"vector": search["vector"], "limit": limit, "filter": search.get("filter")}))
        result = await tenant_client().search_batch(collection_name, {"searches": requests})
        return format_response(result, format, "batch_results")
    except Exception as exc:
        raise tool_error("qdrant_search_batch", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_query(
    collection_name: str,
    query: Any,
    using: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    filter: Optional[dict] = None,
    with_payload: bool = True,
    with_vector: bool = False,
    format: str = "json",
) -> str:
    """
    Universal query endpoint.

    query may be a dense vector, a point id (nearest to that point), a sparse
    vector {"indices", "values"}, or a single-key query object such as
    {"recommend": {...}}, {"fusion": "rrf"} or {"order_by": "field"}.
    """
    try:
        validate_collection_name(collection_name)
        validate_limit(limit)
        validate_non_negative(offset, "offset")
        validate_mapping(filter, "filter")
        validate_response_format(format)
        request = compact(
            {
                "query": query_from_value(query).to_wire(),
                "using": using,
                "limit": limit,
                "offset": offset,
                "filter": filter,
                "with_payload": with_payload,
                "with_vector": with_vector,
            }
        )
        result = await tenant_client().query(collection_name, request)
        return format_response(_scored_points(result), format, "search_results")
    except Exception as exc:
        raise tool_error("qdrant_query", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_query_groups(
    collection_name: str,
    query: list[float],
    group_by: str,
    group_size: int = 3,
    limit: int = 10,
    filter: Optional[dict] = None,
    format: str = "json",
) -> str:
    """Query with hits grouped by a payload field."""
    try:
        validate_collection_name(collection_name)
        validate_vector(query, "query")
        validate_required_text(group_by, "group_by")
        validate_limit(group_size, "group_size")
        validate_limit(limit)
        validate_mapping(filter, "filter")
        validate_response_format(format)
        request = compact(
            {
                "query": query,
                "group_by": group_by,
                "group_size": group_size,
                "limit": limit,
                "filter": filter,
            }
        )
        result = await tenant_client().query_groups(collection_name, request)
        return format_response(result, format, "groups")
    except Exception as exc:
        raise tool_error("qdrant_query_groups", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_recommend(
    collection_name: str,
    positive: list[Example],
    negative: Optional[list[Example]] = None,
    strategy: str = "average_vector",
    limit: int = 10,
    filter: Optional[dict] = None,
    with_payload: bool = True,
    format: str = "json",
) -> str:
    """
    Recommend points similar to the positive examples and unlike the negative ones.

    Examples are point ids or vectors. strategy is average_vector or best_score.
    """
    try:
        validate_collection_name(collection_name)
        _check_examples(positive, "positive", required=True)
        _check_examples(negative, "negative")
        validate_limit(limit)
        validate_mapping(filter, "filter")
        validate_response_format(format)
        recommendation = RecommendQuery(positive=positive, negative=negative or (), strategy=strategy)
        body = recommendation.to_wire()["recommend"]
        request = compact({**body, "limit": limit, "filter": filter, "with_payload": with_payload})
        result = await tenant_client().recommend(collection_name, request)
        return format_response(result, format, "search_results")
    except Exception as exc:
        raise tool_error("qdrant_recommend", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_recommend_groups(
    collection_name: str,
    positive: list[PointIdArg],
    group_by: str,
    group_size: int = 3,
    limit: int = 10,
    format: str = "json",
) -> str:
    """Recommendations grouped by a payload field."""
    try:
        validate_collection_name(collection_name)
        validate_point_ids(positive, "positive", required=True)
        validate_required_text(group_by, "group_by")
        validate_limit(group_size, "group_size")
        validate_limit(limit)
        validate_response_format(format)
        request = {"positive": positive, "group_by": group_by, "group_size": group_size, "limit": limit}
        result = await tenant_client().recommend_groups(collection_name, request)
        return format_response(result, format, "groups")
    except Exception as exc:
        raise tool_error("qdrant_recommend_groups", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_discover(
    collection_name: str,
    target: Example,
    context: list[dict],
    limit: int = 10,
    filter: Optional[dict] = None,
    format: str = "json",
) -> str:
    """
    Find points close to a target inside the region described by context pairs.

    Each context pair is {"positive": <id or vector>, "negative": <id or vector>}.
    """
    try:
        validate_collection_name(collection_name)
        _check_example(target, "target")
        validate_list(context, "context", required=True)
        pairs = []
        for pair in context:
            validate_mapping(pair, "context")
            if "positive" not in pair or "negative" not in pair:
                raise ValidationIssue(
                    "each context pair needs positive and negative",
                    field="context",
                    error_type="required",
                )
            _check_example(pair["positive"], "context.positive")
            _check_example(pair["negative"], "context.negative")
            pairs.append(ContextPair(positive=pair["positive"], negative=pair["negative"]))
        validate_limit(limit)
        validate_mapping(filter, "filter")
        validate_response_format(format)
        body = DiscoverQuery(target=target, context=pairs).to_wire()["discover"]
        request = compact({**body, "limit": limit, "filter": filter})
        result = await tenant_client().discover(collection_name, request)
        return format_response(result, format, "search_results")
    except Exception as exc:
        raise tool_error("qdrant_discover", exc) from exc


def _matrix_request(sample: Optional[int], limit: Optional[int], filter: Optional[dict]) -> DistanceMatrixRequest:
    validate_optional_limit(sample, "sample", max_value=10000)
    validate_optional_limit(limit, "limit", max_value=MAX_PAGE_SIZE)
    validate_mapping(filter, "filter")
    return DistanceMatrixRequest(sample=sample, limit=limit, filter=filter)


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_search_matrix_pairs(
    collection_name: str,
    sample: Optional[int] = None,
    limit: Optional[int] = None,
    filter: Optional[dict] = None,
) -> str:
    """Distance matrix between sampled points, as (a, b, score) pairs."""
    try:
        validate_collection_name(collection_name)
        request = _matrix_request(sample, limit, filter)
        return json_text(await tenant_client().search_matrix_pairs(collection_name, request))
    except Exception as exc:
        raise tool_error("qdrant_search_matrix_pairs", exc) from exc


@mcp_tool(annotations=READ_ONLY_TOOL_ANNOTATIONS)
async def qdrant_search_matrix_offsets(
    collection_name: str,
    sample: Optional[int] = None,
    limit: Optional[int] = None,
    filter: Optional[dict] = None,
) -> str:
    """Distance matrix between sampled points, as sparse offset arrays."""
    try:
        validate_collection_name(collection_name)
        request = _matrix_request(sample, limit, filter)
        return json_text(await tenant_client().search_matrix_offsets(collection_name, request))
    except Exception as exc:
        raise tool_error("qdrant_search_matrix_offsets", exc) from exc
