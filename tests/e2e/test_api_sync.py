"""
test_api_sync.py - Sync API E2E 테스트

엔드포인트:
- GET /health
- POST /api/events/saved
- POST /api/template-sets/load
- POST /api/styles/load
- POST /api/config

에러 매핑: 404 없음, 503 DB 연결 실패, 502 캐시 갱신 실패, 400 그 외
"""

from pathlib import Path
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from mybbbridge.app.main import create_app
from mybbbridge.app.runtime import BridgeRuntime

pytestmark = pytest.mark.e2e


# =============================================================================
# Fixtures
# =============================================================================

class ForumStub:
    """cachecss.php / log.php 대역."""

    def __init__(self):
        self.success = True
        self.calls = 0
        self.log_messages: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/log.php"):
            self.log_messages.append(parse_qs(request.content.decode())["message"][0])
            return httpx.Response(200, text="OK")
        self.calls += 1
        message = "Stylesheet cache refreshed" if self.success else "Cache directory not writable"
        return httpx.Response(200, json={"success": self.success, "message": message})


@pytest.fixture
def forum() -> ForumStub:
    return ForumStub()


@pytest.fixture
def client(workspace, engine_factory, forum):
    """설정 없는 워크스페이스에 붙은 TestClient."""
    runtime = BridgeRuntime(
        workspace,
        engine_factory=engine_factory,
        http_client=httpx.Client(transport=httpx.MockTransport(forum)),
    )
    with TestClient(create_app(runtime)) as client:
        yield client


@pytest.fixture
def configured_client(client, write_config):
    write_config()
    return client


# =============================================================================
# Health
# =============================================================================

class TestHealth:
    """헬스 체크."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


# =============================================================================
# Save Event
# =============================================================================

class TestSavedEvent:
    """POST /api/events/saved 테스트."""

    def test_template_saved(self, configured_client):
        response = configured_client.post(
            "/api/events/saved",
            json={
                "path": "template_sets/Default Templates/Navigation Templates/header_welcome.html",
                "content": "<div>from editor</div>",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["detail"]["action"] == "created_custom"

    def test_absolute_path(self, configured_client, workspace: Path, forum):
        response = configured_client.post(
            "/api/events/saved",
            json={"path": str(workspace / "styles" / "Default" / "global.css"), "content": "a{}"},
        )

        assert response.status_code == 200
        assert response.json()["detail"]["action"] == "updated_stylesheet"
        assert forum.calls == 1
        assert forum.log_messages == ['Updated stylesheet "global.css" for theme "Default"']

    def test_unknown_theme_404(self, configured_client):
        response = configured_client.post(
            "/api/events/saved",
            json={"path": "styles/Missing/global.css", "content": "a{}"},
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "NOT_FOUND"

    def test_refresh_failure_502(self, configured_client, forum):
        forum.success = False

        response = configured_client.post(
            "/api/events/saved",
            json={"path": "styles/Default/global.css", "content": "a{}"},
        )

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "REFRESH_FAILED"
        assert "Cache directory not writable" in detail["message"]

    def test_missing_config_404(self, client):
        response = client.post(
            "/api/events/saved",
            json={"path": "styles/Default/global.css", "content": "a{}"},
        )

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "CONFIG_NOT_FOUND"

    def test_invalid_retry_config_400(self, client, write_config):
        write_config(database={"prefix": "mybb_", "connectRetries": 0})

        response = client.post(
            "/api/events/saved",
            json={"path": "styles/Default/global.css", "content": "a{}"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "CONFIG_INVALID"

    def test_invalid_body_422(self, configured_client):
        response = configured_client.post("/api/events/saved", json={"path": "x.html"})

        assert response.status_code == 422


class TestDatabaseUnavailable:
    """DB 연결 실패 → 503."""

    def test_503(self, workspace, write_config, forum):
        write_config()

        class DownEngine:
            def connect(self):
                raise OperationalError("SELECT 1", {}, Exception("Connection refused"))

            def dispose(self):
                pass

        runtime = BridgeRuntime(
            workspace,
            engine_factory=lambda db: DownEngine(),
            http_client=httpx.Client(transport=httpx.MockTransport(forum)),
        )

        with TestClient(create_app(runtime)) as client:
            response = client.post("/api/template-sets/load", json={"name": "Default Templates"})

        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "DB_CONNECTION_FAILED"


# =============================================================================
# Load
# =============================================================================

class TestLoad:
    """load 엔드포인트 테스트."""

    def test_load_template_set(self, configured_client, workspace: Path):
        response = configured_client.post(
            "/api/template-sets/load", json={"name": "Default Templates"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["detail"]["total"] == 5
        assert (
            workspace / "template_sets" / "Default Templates"
            / "Navigation Templates" / "header_welcome.html"
        ).exists()

    def test_load_style(self, configured_client, workspace: Path):
        response = configured_client.post("/api/styles/load", json={"name": "Default"})

        assert response.status_code == 200
        assert (workspace / "styles" / "Default" / "global.css").exists()

    def test_unknown_set_404(self, configured_client):
        response = configured_client.post("/api/template-sets/load", json={"name": "Nope"})

        assert response.status_code == 404

    def test_unsafe_name_400(self, configured_client):
        response = configured_client.post("/api/styles/load", json={"name": "../etc"})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PATH"


# =============================================================================
# Config
# =============================================================================

class TestCreateConfig:
    """POST /api/config 테스트."""

    def test_create_then_exists(self, client, workspace: Path):
        first = client.post("/api/config")
        second = client.post("/api/config")

        assert first.status_code == 200
        assert (workspace / ".vscode" / "mbbb.json").exists()
        assert second.status_code == 400
        assert second.json()["detail"]["code"] == "CONFIG_EXISTS"
