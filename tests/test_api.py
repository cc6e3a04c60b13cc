"""Tests for the document API, with the backend replaced by dependency overrides."""

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.dependencies import get_dashboard_flow, get_session_verifier
from src.auth import AuthMissingError, AuthSession
from src.orchestrator import DashboardFlow
from src.services.storage import FetchError, InMemoryFnaStorage


SESSION = AuthSession(access_token="token-123", user_id="agent-1", email="agent@example.com")


class StubVerifier:
    """Accepts exactly one token."""

    def verify(self, access_token):
        if access_token != SESSION.access_token:
            raise AuthMissingError("No active session")
        return SESSION


class BrokenSessionStorage(InMemoryFnaStorage):
    async def get_session(self, session_id):
        raise FetchError("JWT expired")


@pytest.fixture
def app(storage):
    app = create_app(check_settings=False)
    app.dependency_overrides[get_session_verifier] = StubVerifier
    app.dependency_overrides[get_dashboard_flow] = lambda: DashboardFlow(storage)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestPdfEndpoint:
    """Tests for GET /fna/{id}/pdf."""

    def test_pdf_with_bearer_token(self, client):
        response = client.get(
            "/fna/abc123/pdf",
            headers={"Authorization": "Bearer token-123"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'inline; filename="fna-abc123.pdf"'
        assert response.headers["cache-control"] == "no-store"
        assert response.content.startswith(b"%PDF-")

    def test_pdf_with_session_cookie(self, app):
        client = TestClient(app, cookies={"sb-access-token": "token-123"})

        response = client.get("/fna/abc123/pdf")

        assert response.status_code == 200

    def test_no_session_redirects_to_auth(self, client):
        response = client.get("/fna/abc123/pdf", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/auth"

    def test_rejected_token_redirects_to_auth(self, client):
        response = client.get(
            "/fna/abc123/pdf",
            headers={"Authorization": "Bearer stale"},
            follow_redirects=False,
        )

        assert response.status_code == 307

    def test_long_id_renders(self, client):
        response = client.get(
            "/fna/" + "x" * 600 + "/pdf",
            headers={"Authorization": "Bearer token-123"},
        )

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF-")

    def test_long_id_without_session_redirects(self, client):
        response = client.get("/fna/" + "x" * 600 + "/pdf", follow_redirects=False)

        assert response.status_code == 307

    def test_render_failure_is_500_without_partial_body(self, app):
        app.dependency_overrides[get_dashboard_flow] = lambda: DashboardFlow(BrokenSessionStorage())
        client = TestClient(app)

        response = client.get(
            "/fna/abc123/pdf",
            headers={"Authorization": "Bearer token-123"},
        )

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert "JWT expired" in response.json()["error"]


class TestHealth:
    def test_health_is_not_guarded(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
