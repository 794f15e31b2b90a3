from starlette.testclient import TestClient

from app.main import app


def test_health_never_needs_credentials():
    client = TestClient(app)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "server": "qdrant-mcp-gateway"}


def test_health_tools_reports_inventory():
    client = TestClient(app)
    response = client.get("/health/tools")

    assert response.status_code == 200
    inventory = response.json()["tool_inventory"]
    assert inventory["tool_count"] == 63
    assert "qdrant_search" in inventory["tools"]
    assert inventory["retry_after_seconds"] is None


def test_root_lists_required_headers():
    client = TestClient(app)
    body = client.get("/").json()

    assert body["name"] == "qdrant-mcp-gateway"
    assert body["authentication"]["required_headers"] == ["X-Qdrant-API-Key", "X-Qdrant-Base-URL"]
    assert body["endpoints"]["mcp"] == "/mcp"
    assert body["tool_count"] == len(body["tools"])


def test_mcp_endpoint_rejects_missing_credentials():
    client = TestClient(app)
    response = client.post(
        "/mcp/",
        json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"},
        headers={"Accept": "application/json, text/event-stream"},
    )

    assert response.status_code == 401
    assert response.json()["required_headers"] == ["X-Qdrant-API-Key", "X-Qdrant-Base-URL"]
