import pytest

from core.services.endpoints import ENDPOINTS, build_request, encode_segment, format_query_value


def test_encode_segment_matches_uri_component_rules():
    assert encode_segment("docs") == "docs"
    assert encode_segment("a b/c?d") == "a%20b%2Fc%3Fd"
    assert encode_segment("it's(ok)!*") == "it's(ok)!*"
    assert encode_segment(42) == "42"
    assert encode_segment("550e8400-e29b-41d4-a716-446655440000") == "550e8400-e29b-41d4-a716-446655440000"


def test_format_query_value_lowercases_booleans():
    assert format_query_value(True) == "true"
    assert format_query_value(False) == "false"
    assert format_query_value(3) == "3"


def test_build_request_fills_path_and_default_flags():
    descriptor = build_request(
        ENDPOINTS["delete_snapshot"],
        {"collection": "docs", "snapshot": "docs-2026.snapshot"},
    )
    assert descriptor.method == "DELETE"
    assert descriptor.path == "/collections/docs/snapshots/docs-2026.snapshot"
    assert descriptor.query == (("wait", "true"),)
    assert descriptor.body is None


def test_build_request_respects_explicit_flags():
    descriptor = build_request(ENDPOINTS["remove_peer"], {"peer_id": 7}, flags={"force": True})
    assert descriptor.path == "/cluster/peer/7"
    assert descriptor.query == (("force", "true"),)

    descriptor = build_request(ENDPOINTS["upsert_points"], {"collection": "c"}, flags={"wait": False})
    assert descriptor.query == (("wait", "false"),)


def test_build_request_rejects_unknown_flags():
    with pytest.raises(TypeError):
        build_request(ENDPOINTS["list_collections"], flags={"wait": True})


def test_every_path_starts_with_a_slash():
    for name, endpoint in ENDPOINTS.items():
        assert endpoint.path.startswith("/"), name
        assert endpoint.method in {"GET", "POST", "PUT", "PATCH", "DELETE"}, name
