import httpx
import pytest

from core.context import TenantCredentials
from core.errors import ApiError, AuthenticationError, ConfigurationError, RateLimitError
from core.models import CollectionConfig, DeleteOperation, VectorParams
from core.services.gateway_client import GatewayClient, extract_error_message, parse_retry_after


def _path(request: httpx.Request) -> str:
    return request.url.raw_path.decode("ascii").split("?")[0]


async def test_create_collection_sends_config_and_credentials(fake_qdrant, credentials):
    fake_qdrant.ok(True)
    client = GatewayClient(credentials)
    config = CollectionConfig(vectors=VectorParams(size=4, distance="Dot"), shard_number=2)

    assert await client.create_collection("docs", config) is True

    request = fake_qdrant.last
    assert request.method == "PUT"
    assert str(request.url) == "https://tenant-a.qdrant.example:6333/collections/docs"
    assert request.headers["api-key"] == "test-key-123"
    assert request.headers["content-type"] == "application/json"
    assert fake_qdrant.last_json() == {"vectors": {"size": 4, "distance": "Dot"}, "shard_number": 2}


async def test_trailing_slash_on_base_url_is_ignored(fake_qdrant):
    fake_qdrant.ok({"collections": []})
    client = GatewayClient(TenantCredentials(api_key="k", base_url="https://q.example:6333/"))
    await client.list_collections()
    assert str(fake_qdrant.last.url) == "https://q.example:6333/collections"


async def test_path_segments_are_percent_encoded(fake_qdrant, credentials):
    fake_qdrant.ok({"exists": True})
    client = GatewayClient(credentials)
    assert await client.collection_exists("my docs/v1") is True
    assert _path(fake_qdrant.last) == "/collections/my%20docs%2Fv1/exists"


async def test_rate_limit_uses_retry_after_header(fake_qdrant, credentials):
    fake_qdrant.reply(429, json_body={}, headers={"Retry-After": "30"})
    with pytest.raises(RateLimitError) as exc_info:
        await GatewayClient(credentials).list_collections()
    assert exc_info.value.retry_after == 30
    assert exc_info.value.retryable is True


async def test_rate_limit_defaults_to_sixty_seconds(fake_qdrant, credentials):
    fake_qdrant.reply(429, json_body={})
    with pytest.raises(RateLimitError) as exc_info:
        await GatewayClient(credentials).list_collections()
    assert exc_info.value.retry_after == 60


@pytest.mark.parametrize("status_code", [401, 403])
async def test_auth_failures_are_classified(fake_qdrant, credentials, status_code):
    fake_qdrant.reply(status_code, json_body={"status": {"error": "forbidden"}})
    with pytest.raises(AuthenticationError) as exc_info:
        await GatewayClient(credentials).list_collections()
    assert str(exc_info.value) == "Authentication failed. Check your API key."
    assert "test-key-123" not in str(exc_info.value)


async def test_not_found_point_raises_api_error(fake_qdrant, credentials):
    fake_qdrant.reply(404, json_body={"status": {"error": "Not found"}, "time": 0.0})
    with pytest.raises(ApiError) as exc_info:
        await GatewayClient(credentials).get_point("docs", 42)
    assert exc_info.value.message == "Not found"
    assert exc_info.value.status_code == 404
    assert exc_info.value.retryable is False
    assert _path(fake_qdrant.last) == "/collections/docs/points/42"


async def test_server_error_is_retryable(fake_qdrant, credentials):
    fake_qdrant.reply(503, text="upstream unavailable")
    with pytest.raises(ApiError) as exc_info:
        await GatewayClient(credentials).get_version()
    assert exc_info.value.message == "API error: 503"
    assert exc_info.value.retryable is True


async def test_text_plain_is_returned_verbatim(fake_qdrant, credentials):
    metrics = "# HELP app_info info\napp_info 1\n"
    fake_qdrant.reply(200, text=metrics, headers={"Content-Type": "text/plain; version=0.0.4"})
    assert await GatewayClient(credentials).get_metrics() == metrics


async def test_non_object_json_yields_none(fake_qdrant, credentials):
    fake_qdrant.reply(200, json_body=[1, 2, 3])
    assert await GatewayClient(credentials).get_locks() is None


class _ExplodingStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        raise AssertionError("204 body must not be read")
        yield b""  # pragma: no cover

    async def aclose(self):
        pass


async def test_no_content_response_body_is_not_read(credentials):
    def handler(request):
        return httpx.Response(204, stream=_ExplodingStream())

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = GatewayClient(credentials, http_client=http_client)
        assert await client.get_version() is None


async def test_missing_base_url_makes_no_request(fake_qdrant):
    client = GatewayClient(TenantCredentials(api_key="k", base_url=""))
    with pytest.raises(ConfigurationError) as exc_info:
        await client.list_collections()
    assert exc_info.value.missing_headers == ("X-Qdrant-Base-URL",)
    assert fake_qdrant.requests == []


async def test_wait_flag_defaults_to_true(fake_qdrant, credentials):
    fake_qdrant.ok({"operation_id": 1, "status": "completed"})
    await GatewayClient(credentials).upsert_points("docs", [{"id": 1, "vector": [0.1, 0.2]}])
    assert fake_qdrant.last.url.params["wait"] == "true"
    assert fake_qdrant.last_json() == {"points": [{"id": 1, "vector": [0.1, 0.2]}]}


async def test_anonymize_false_is_left_off_the_url(fake_qdrant, credentials):
    fake_qdrant.ok({}).ok({})
    client = GatewayClient(credentials)
    await client.get_telemetry(anonymize=True)
    assert fake_qdrant.last.url.params["anonymize"] == "true"
    await client.get_telemetry(anonymize=False)
    assert "anonymize" not in fake_qdrant.last.url.params


async def test_batch_update_keeps_operation_order(fake_qdrant, credentials):
    results = [
        {"operation_id": 7, "status": "completed"},
        {"operation_id": 8, "status": "completed"},
        {"operation_id": 9, "status": "completed"},
    ]
    fake_qdrant.ok(results)
    operations = [
        {"upsert": {"points": [{"id": 1, "vector": [0.5]}]}},
        {"set_payload": {"payload": {"tag": "a"}, "points": [1]}},
        DeleteOperation(points=[2]),
    ]

    assert await GatewayClient(credentials).batch_update("docs", operations) == results
    assert fake_qdrant.last_json() == {
        "operations": [
            {"upsert": {"points": [{"id": 1, "vector": [0.5]}]}},
            {"set_payload": {"payload": {"tag": "a"}, "points": [1]}},
            {"delete": {"points": [2]}},
        ]
    }
    assert _path(fake_qdrant.last) == "/collections/docs/points/batch"


async def test_cluster_operation_is_sent_tagged(fake_qdrant, credentials):
    fake_qdrant.ok(True)
    await GatewayClient(credentials).update_collection_cluster(
        "docs", {"move_shard": {"shard_id": 0, "from_peer_id": 1, "to_peer_id": 2}}
    )
    assert fake_qdrant.last_json() == {"move_shard": {"shard_id": 0, "from_peer_id": 1, "to_peer_id": 2}}


async def test_create_field_index_with_bare_schema(fake_qdrant, credentials):
    fake_qdrant.ok({"operation_id": 3, "status": "acknowledged"})
    await GatewayClient(credentials).create_field_index("docs", "city", "keyword")
    assert fake_qdrant.last_json() == {"field_name": "city", "field_schema": "keyword"}
    assert _path(fake_qdrant.last) == "/collections/docs/index"


async def test_connection_check_reports_success(fake_qdrant, credentials):
    fake_qdrant.ok({"title": "qdrant", "version": "1.12.0"})
    result = await GatewayClient(credentials).test_connection()
    assert result == {"connected": True, "message": "Connected to Qdrant 1.12.0"}


async def test_connection_check_absorbs_errors(fake_qdrant, credentials):
    fake_qdrant.reply(401, json_body={})
    result = await GatewayClient(credentials).test_connection()
    assert result["connected"] is False
    assert result["message"] == "Authentication failed. Check your API key."


def test_parse_retry_after():
    assert parse_retry_after(None) == 60
    assert parse_retry_after("") == 60
    assert parse_retry_after("12") == 12
    assert parse_retry_after("5 seconds") == 5
    assert parse_retry_after("Wed, 21 Oct 2026 07:28:00 GMT") == 60


def test_extract_error_message_precedence():
    assert extract_error_message('{"status": {"error": "a"}, "message": "b"}', "d") == "a"
    assert extract_error_message('{"message": "b", "error": "c"}', "d") == "b"
    assert extract_error_message('{"error": "c"}', "d") == "c"
    assert extract_error_message("not json", "d") == "d"
    assert extract_error_message("[]", "d") == "d"


async def test_connection_check_reads_bare_version_document(fake_qdrant, credentials):
    fake_qdrant.reply(200, json_body={"title": "qdrant - vector search engine", "version": "1.12.0", "commit": "abc"})
    result = await GatewayClient(credentials).test_connection()
    assert result == {"connected": True, "message": "Connected to Qdrant 1.12.0"}


@pytest.mark.parametrize("json_body", [{"title": "qdrant"}, {"result": None}, [1, 2]])
async def test_connection_check_fails_without_a_version(fake_qdrant, credentials, json_body):
    fake_qdrant.reply(200, json_body=json_body)
    result = await GatewayClient(credentials).test_connection()
    assert result == {"connected": False, "message": "Unexpected response from Qdrant: no version reported"}


async def test_connection_check_fails_on_empty_version_response(fake_qdrant, credentials):
    fake_qdrant.reply(204)
    result = await GatewayClient(credentials).test_connection()
    assert result["connected"] is False


async def test_redirect_is_reported_not_followed(fake_qdrant, credentials):
    fake_qdrant.reply(307, headers={"Location": "https://elsewhere.example/collections"})
    with pytest.raises(ApiError) as exc_info:
        await GatewayClient(credentials).list_collections()
    assert exc_info.value.status_code == 307
    assert exc_info.value.message == "API error: 307"
    assert len(fake_qdrant.requests) == 1


async def test_pooled_client_does_not_follow_redirects(monkeypatch):
    from core.services import http

    monkeypatch.setattr(http, "http_client", None)
    client = http.init_http_client()
    try:
        assert client.follow_redirects is False
    finally:
        await http.cleanup_http_client()


@pytest.mark.parametrize(
    "call",
    [
        lambda client: client.upsert_points("docs", [{"id": 1, "vector": [0.1]}]),
        lambda client: client.delete_collection("docs"),
    ],
    ids=["upsert_points", "delete_collection"],
)
async def test_mutations_without_base_url_make_no_request(fake_qdrant, call):
    client = GatewayClient(TenantCredentials(api_key="k", base_url=None))
    with pytest.raises(ConfigurationError):
        await call(client)
    assert fake_qdrant.requests == []
