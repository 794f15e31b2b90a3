import json

import httpx
import pytest

from core.context import (
    RequestContext,
    TenantCredentials,
    reset_current_request_context,
    set_current_request_context,
)
from core.services import http

TEST_API_KEY = "test-key-123"
TEST_BASE_URL = "https://tenant-a.qdrant.example:6333"


class FakeQdrant:
    """Records outbound requests and answers them from a queue of responses."""

    def __init__(self):
        self.requests = []
        self.responses = []

    def reply(self, status_code=200, json_body=None, text=None, headers=None):
        self.responses.append((status_code, json_body, text, headers))
        return self

    def ok(self, result):
        return self.reply(json_body={"result": result, "status": "ok", "time": 0.001})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(200, json={"result": None, "status": "ok"})
        status_code, json_body, text, headers = self.responses.pop(0)
        if text is not None:
            return httpx.Response(status_code, text=text, headers=headers)
        if json_body is not None:
            return httpx.Response(status_code, json=json_body, headers=headers)
        return httpx.Response(status_code, headers=headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_qdrant(monkeypatch):
    fake = FakeQdrant()
    monkeypatch.setattr(http, "http_client", fake.client())
    return fake


@pytest.fixture
def credentials():
    return TenantCredentials(api_key=TEST_API_KEY, base_url=TEST_BASE_URL)


@pytest.fixture
def tenant_context(credentials):
    token = set_current_request_context(
        RequestContext(credentials=credentials, request_id="req-test", source="test")
    )
    yield credentials
    reset_current_request_context(token)
