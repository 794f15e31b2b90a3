import json

import pytest
from fastmcp.exceptions import ToolError

from core.config import DEFAULT_PAGE_SIZE
from core.mcp.tools.batch import qdrant_batch_update
from core.mcp.tools.collections import (
    qdrant_create_collection,
    qdrant_create_collection_multi_vector,
    qdrant_list_collections,
    qdrant_switch_alias,
)
from core.mcp.tools.points import qdrant_get_point, qdrant_scroll_points, qdrant_upsert_points
from core.mcp.tools.search import qdrant_query, qdrant_recommend, qdrant_search
from core.mcp.tools.service import qdrant_get_metrics, qdrant_test_connection


def _error_payload(exc_info) -> dict:
    return json.loads(str(exc_info.value))


async def test_list_collections_markdown(fake_qdrant, tenant_context):
    fake_qdrant.ok({"collections": [{"name": "docs"}, {"name": "images"}]})
    text = await qdrant_list_collections(format="markdown")

    assert "**Count:** 2" in text
    assert "| docs |" in text
    assert fake_qdrant.last.headers["api-key"] == "test-key-123"


async def test_create_collection_builds_vector_params(fake_qdrant, tenant_context):
    fake_qdrant.ok(True)
    result = json.loads(await qdrant_create_collection("docs", vector_size=384, distance="Euclid"))

    assert result["success"] is True
    assert fake_qdrant.last_json() == {"vectors": {"size": 384, "distance": "Euclid"}}


async def test_create_collection_rejects_bad_distance_before_any_request(fake_qdrant, tenant_context):
    with pytest.raises(ToolError) as exc_info:
        await qdrant_create_collection("docs", vector_size=8, distance="Hamming")

    assert _error_payload(exc_info)["details"]["field"] == "distance"
    assert fake_qdrant.requests == []


async def test_create_multi_vector_collection(fake_qdrant, tenant_context):
    fake_qdrant.ok(True)
    await qdrant_create_collection_multi_vector(
        "media",
        vectors=[{"name": "text", "size": 384}, {"name": "image", "size": 512, "distance": "Dot"}],
    )
    assert fake_qdrant.last_json()["vectors"] == {
        "text": {"size": 384, "distance": "Cosine"},
        "image": {"size": 512, "distance": "Dot"},
    }


async def test_switch_alias_is_one_atomic_request(fake_qdrant, tenant_context):
    fake_qdrant.ok(True)
    await qdrant_switch_alias("prod", "docs_v2")

    assert len(fake_qdrant.requests) == 1
    assert fake_qdrant.last_json() == {
        "actions": [
            {"delete_alias": {"alias_name": "prod"}},
            {"create_alias": {"collection_name": "docs_v2", "alias_name": "prod"}},
        ]
    }


async def test_upsert_requires_id_and_vector(fake_qdrant, tenant_context):
    with pytest.raises(ToolError):
        await qdrant_upsert_points("docs", points=[{"id": 1}])
    assert fake_qdrant.requests == []


async def test_get_missing_point_surfaces_api_error(fake_qdrant, tenant_context):
    fake_qdrant.reply(404, json_body={"status": {"error": "Not found"}})
    with pytest.raises(ToolError) as exc_info:
        await qdrant_get_point("docs", 42)

    payload = _error_payload(exc_info)
    assert payload["error"] == "Error: Not found"
    assert payload["details"]["status_code"] == 404


async def test_scroll_markdown_shows_next_offset(fake_qdrant, tenant_context):
    fake_qdrant.ok({"points": [{"id": 1, "payload": {"a": 1}}], "next_page_offset": 2})
    text = await qdrant_scroll_points("docs", limit=1, format="markdown")

    assert "**Next Page Offset:** 2" in text
    assert fake_qdrant.last_json() == {"limit": 1, "with_payload": True, "with_vector": False}


async def test_search_sends_filter_and_threshold(fake_qdrant, tenant_context):
    fake_qdrant.ok([{"id": 5, "score": 0.5, "payload": {}}])
    result = json.loads(
        await qdrant_search(
            "docs",
            vector=[0.1, 0.2],
            limit=3,
            filter={"must": [{"key": "city", "match": {"value": "Berlin"}}]},
            score_threshold=0.2,
        )
    )

    assert result == [{"id": 5, "score": 0.5, "payload": {}}]
    body = fake_qdrant.last_json()
    assert body["limit"] == 3
    assert body["score_threshold"] == 0.2
    assert body["filter"]["must"][0]["key"] == "city"


async def test_search_rejects_out_of_range_limit(fake_qdrant, tenant_context):
    with pytest.raises(ToolError):
        await qdrant_search("docs", vector=[0.1], limit=0)
    assert fake_qdrant.requests == []


async def test_query_unwraps_points(fake_qdrant, tenant_context):
    fake_qdrant.ok({"points": [{"id": 9, "score": 1.0}]})
    result = json.loads(await qdrant_query("docs", query={"fusion": "rrf"}))

    assert result == [{"id": 9, "score": 1.0}]
    assert fake_qdrant.last_json()["query"] == {"fusion": "rrf"}


async def test_recommend_body(fake_qdrant, tenant_context):
    fake_qdrant.ok([])
    await qdrant_recommend("docs", positive=[1, 2], negative=[3], strategy="best_score", limit=5)

    assert fake_qdrant.last_json() == {
        "positive": [1, 2],
        "negative": [3],
        "strategy": "best_score",
        "limit": 5,
        "with_payload": True,
    }


async def test_batch_update_returns_results_in_order(fake_qdrant, tenant_context):
    results = [{"operation_id": i, "status": "completed"} for i in range(3)]
    fake_qdrant.ok(results)
    payload = json.loads(
        await qdrant_batch_update(
            "docs",
            operations=[
                {"delete": {"points": [1]}},
                {"clear_payload": {"points": [2]}},
                {"delete_vectors": {"vector": ["image"], "points": [3]}},
            ],
        )
    )

    assert payload["results"] == results
    assert [list(op) for op in fake_qdrant.last_json()["operations"]] == [
        ["delete"],
        ["clear_payload"],
        ["delete_vectors"],
    ]


async def test_batch_update_rejects_two_keys_in_one_operation(fake_qdrant, tenant_context):
    with pytest.raises(ToolError):
        await qdrant_batch_update("docs", operations=[{"delete": {"points": [1]}, "upsert": {"points": []}}])
    assert fake_qdrant.requests == []


async def test_rate_limit_error_reaches_caller(fake_qdrant, tenant_context):
    fake_qdrant.reply(429, json_body={}, headers={"Retry-After": "7"})
    with pytest.raises(ToolError) as exc_info:
        await qdrant_get_metrics()

    payload = _error_payload(exc_info)
    assert payload["details"]["type"] == "RateLimitError"
    assert payload["details"]["retry_after"] == 7


async def test_connection_tool_reports_failure_as_data(fake_qdrant, tenant_context):
    fake_qdrant.reply(403, json_body={})
    result = json.loads(await qdrant_test_connection())

    assert result == {"connected": False, "message": "Authentication failed. Check your API key."}


async def test_missing_url_never_leaves_the_gateway(fake_qdrant):
    with pytest.raises(ToolError) as exc_info:
        await qdrant_list_collections()

    assert "X-Qdrant-Base-URL" in _error_payload(exc_info)["error"]
    assert fake_qdrant.requests == []


async def test_bad_format_names_the_format_argument(fake_qdrant, tenant_context):
    with pytest.raises(ToolError) as exc_info:
        await qdrant_list_collections(format="yaml")

    payload = _error_payload(exc_info)
    assert payload["details"]["field"] == "format"
    assert payload["error"].startswith("Error: format must be one of")
    assert fake_qdrant.requests == []


async def test_scroll_defaults_to_configured_page_size(fake_qdrant, tenant_context):
    fake_qdrant.ok({"points": [], "next_page_offset": None})
    await qdrant_scroll_points("docs")

    assert fake_qdrant.last_json()["limit"] == DEFAULT_PAGE_SIZE
