"""
API Tests: HTTP routes and the progress WebSocket
"""

import time
import pytest
from fastapi.testclient import TestClient

from toolsmith.main import create_app
from toolsmith.services.compliance import BLOCKED_REASON

from conftest import make_settings


API = "/api/v1"


def wait_for_terminal(client, request_id, timeout: float = 5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"{API}/generations/{request_id}").json()
        if body["status"] in ("completed", "failed"):
            return body
        time.sleep(0.01)
    raise AssertionError(f"request {request_id} did not finish")


@pytest.fixture
def seeded_client():
    app = create_app(make_settings(SEED_DEFAULT_CATALOG=True))
    with TestClient(app) as test_client:
        yield test_client


class TestService:
    """Service info, health and middleware headers"""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["api_base"] == API

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["generation_provider"] == "template"

    def test_request_headers(self, client):
        response = client.get("/health")

        assert "X-Request-ID" in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestGenerations:
    """Test suite for the generation endpoints"""

    def test_submit_and_complete(self, client):
        response = client.post(f"{API}/generations", json={"spec": "password generator"})

        assert response.status_code == 202
        request_id = response.json()["requestId"]

        final = wait_for_terminal(client, request_id)
        assert final["status"] == "completed"
        assert final["progress"] == 100

        tool = client.get(f"{API}/tools/{final['artifact_id']}").json()
        assert tool["name"] == "Password Generator"
        assert tool["category"] == "security"
        assert client.get(f"{API}/analytics").json()["tools_generated"] == 1

    def test_blocked_spec_fails_after_acceptance(self, client):
        response = client.post(f"{API}/generations", json={"spec": "youtube video downloader"})

        assert response.status_code == 202
        final = wait_for_terminal(client, response.json()["requestId"])
        assert final["status"] == "failed"
        assert final["error_message"] == BLOCKED_REASON
        assert client.get(f"{API}/tools").json() == []

    @pytest.mark.parametrize("payload", [{"spec": ""}, {"spec": "   "}, {}])
    def test_invalid_spec_is_rejected(self, client, payload):
        response = client.post(f"{API}/generations", json=payload)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_SPEC"

    def test_submission_uses_camel_case(self, client):
        response = client.post(f"{API}/generations", json={"spec": "pdf merger", "requesterId": 9})

        body = response.json()
        assert set(body) == {"requestId", "status", "progress"}
        final = wait_for_terminal(client, body["requestId"])
        assert final["requester_id"] == 9

    def test_unknown_request_is_404(self, client):
        response = client.get(f"{API}/generations/999")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_list_by_requester(self, client):
        client.post(f"{API}/generations", json={"spec": "password generator", "requesterId": 3})
        client.post(f"{API}/generations", json={"spec": "pdf merger", "requester_id": 4})

        listed = client.get(f"{API}/generations", params={"requester_id": 3}).json()

        assert [item["spec"] for item in listed] == ["password generator"]


class TestTools:
    """Tool catalog queries and use recording"""

    def test_featured_and_recent_limits(self, seeded_client):
        featured = seeded_client.get(f"{API}/tools/featured").json()
        recent = seeded_client.get(f"{API}/tools/recent", params={"limit": 3}).json()

        assert len(featured) == 6
        assert len(recent) == 3

    def test_record_use_moves_tool_to_featured_top(self, seeded_client):
        tools = seeded_client.get(f"{API}/tools").json()
        target = tools[-1]

        for _ in range(2):
            response = seeded_client.post(f"{API}/tools/{target['id']}/use")
            assert response.json() == {"artifactId": target["id"], "recorded": True}

        featured = seeded_client.get(f"{API}/tools/featured").json()
        assert featured[0]["id"] == target["id"]
        assert featured[0]["usage_count"] == 2

    def test_record_use_on_unknown_tool(self, client):
        response = client.post(f"{API}/tools/4242/use")

        assert response.status_code == 200
        assert response.json()["recorded"] is False

    def test_category_and_search(self, seeded_client):
        pdf_tools = seeded_client.get(f"{API}/tools/category/pdf").json()
        found = seeded_client.get(f"{API}/tools/search", params={"q": "subtitle"}).json()

        assert pdf_tools and all(tool["category"] == "pdf" for tool in pdf_tools)
        assert [tool["name"] for tool in found] == ["Auto Subtitle Generator"]

    def test_unknown_tool_is_404(self, client):
        assert client.get(f"{API}/tools/777").status_code == 404

    def test_categories_include_counts(self, seeded_client):
        categories = {item["name"]: item for item in seeded_client.get(f"{API}/categories").json()}

        assert len(categories) == 8
        assert categories["pdf"]["count"] == 5
        assert categories["security"]["count"] == 0
        assert categories["unique"]["icon"] == "✨"


class TestCatalogEndpoints:
    """Compliance probe, integrations and system status"""

    def test_compliance_probe(self, client):
        blocked = client.post(f"{API}/compliance/check", json={"name": "Netflix downloader"}).json()
        allowed = client.post(f"{API}/compliance/check", json={"name": "pdf merger"}).json()

        assert blocked == {"permitted": False, "reason": BLOCKED_REASON}
        assert allowed == {"permitted": True, "reason": None}

    def test_integrations(self, client):
        integrations = client.get(f"{API}/integrations").json()

        assert set(integrations) == {"pdf", "image", "video", "ai"}
        assert integrations["video"]["name"] == "FFmpeg"

    def test_system_status(self, client):
        status = client.get(f"{API}/system/status").json()

        assert status["generation_provider"] == "template"
        assert status["compliance"]["active"] is True
        assert status["integrations"] == 4


class TestProgressStream:
    """Progress frames over the WebSocket"""

    def test_streams_frames_for_a_generation(self, client):
        with client.websocket_connect("/ws") as websocket:
            assert client.get(f"{API}/analytics").json()["active_sessions"] == 1

            response = client.post(f"{API}/generations", json={"spec": "password generator"})
            request_id = response.json()["requestId"]

            frames = []
            while True:
                frame = websocket.receive_json()
                frames.append(frame)
                if frame["progress"]["step"] in ("completed", "error"):
                    break

        assert all(frame["type"] == "progress" for frame in frames)
        assert all(frame["requestId"] == request_id for frame in frames)
        assert [frame["progress"]["step"] for frame in frames] == [
            "analyzing", "planning", "validating", "generating", "testing", "deploying", "completed"
        ]

    def test_request_filter(self, client):
        first = client.post(f"{API}/generations", json={"spec": "pdf merger"}).json()["requestId"]
        wait_for_terminal(client, first)

        with client.websocket_connect(f"/ws?request_id={first + 1}") as websocket:
            client.post(f"{API}/generations", json={"spec": "video trimmer"})
            frame = websocket.receive_json()

        assert frame["requestId"] == first + 1

    def test_disconnect_releases_the_session(self, client):
        with client.websocket_connect("/ws") as websocket:
            client.post(f"{API}/generations", json={"spec": "password generator"})
            websocket.receive_json()

        container = client.app.state.container
        assert client.get(f"{API}/analytics").json()["active_sessions"] == 0
        assert container.broadcaster.subscriber_count == 0
