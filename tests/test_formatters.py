import json

from core.errors import ApiError, RateLimitError
from core.services.formatters import (
    format_bytes,
    format_error,
    format_key,
    format_response,
    truncate,
)


def test_json_is_default():
    assert json.loads(format_response({"a": 1})) == {"a": 1}


def test_truncate_appends_notice():
    text = truncate("x" * 20, limit=10)
    assert text.startswith("x" * 10)
    assert text.endswith("[truncated: response exceeded 10 characters]")
    assert truncate("short", limit=10) == "short"


def test_collections_table():
    text = format_response([{"name": "docs"}, {"name": "images"}], "markdown", "collections")
    assert "## Collections" in text
    assert "**Count:** 2" in text
    assert "| docs |" in text
    assert "| images |" in text


def test_search_results_table_shows_scores():
    hits = [{"id": 1, "score": 0.91234, "payload": {"title": "hello"}}]
    text = format_response(hits, "markdown", "search_results")
    assert "| ID | Score | Payload Preview |" in text
    assert '| 1 | 0.9123 | {"title":"hello"}... |' in text


def test_empty_list_markdown():
    assert format_response([], "markdown", "points") == "## Points\n\n_No items found._"


def test_collection_info_markdown():
    info = {"status": "green", "points_count": 1234567, "segments_count": 2, "config": {"params": {}}}
    text = format_response(info, "markdown", "collection")
    assert "**Status:** green" in text
    assert "**Points Count:** 1,234,567" in text
    assert "### Configuration" in text


def test_snapshots_table_formats_sizes():
    snaps = [{"name": "s1", "size": 2048, "creation_time": "2026-10-01T00:00:00"}]
    text = format_response(snaps, "markdown", "snapshots")
    assert "| s1 | 2 KB | 2026-10-01T00:00:00 |" in text


def test_format_bytes():
    assert format_bytes(0) == "0 Bytes"
    assert format_bytes(0.5) == "0.5 Bytes"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(5 * 1024 ** 3) == "5 GB"


def test_format_key():
    assert format_key("points_count") == "Points count"
    assert format_key("vectorsCount") == "Vectors Count"


def test_format_error_marks_retryable_api_errors():
    payload = json.loads(format_error(ApiError("boom", 502)))
    assert payload["error"] == "Error: boom (retryable)"
    assert payload["details"]["status_code"] == 502

    payload = json.loads(format_error(ApiError("Not found", 404)))
    assert payload["error"] == "Error: Not found"


def test_format_error_includes_retry_after():
    payload = json.loads(format_error(RateLimitError("Rate limit exceeded", 12)))
    assert payload["details"]["retry_after"] == 12
