"""
Tests for health and readiness endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from dealflow.api.main import app
from dealflow.api.routes.health import API_VERSION
from dealflow.core.task_router import TaskRouter
from dealflow.models.task import ProviderName
from dealflow.providers import GeminiAdapter, OpenAIAdapter


@pytest.fixture
def client():
    """Create test client."""
    yield TestClient(app)
    app.state.router = None


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_200(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "dealflow-ai"
        assert data["version"] == API_VERSION


class TestReadinessEndpoint:
    """Tests for /ready endpoint."""

    def test_ready_with_configured_providers(self, client, stub_router):
        app.state.router = stub_router

        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["providers"] == {"configured": ["gemini", "openai"], "missing": []}

    def test_ready_with_one_provider(self, client):
        app.state.router = TaskRouter({
            ProviderName.OPENAI: OpenAIAdapter(api_key=""),
            ProviderName.GEMINI: GeminiAdapter(api_key="gm-key"),
        })

        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["providers"] == {"configured": ["gemini"], "missing": ["openai"]}

    def test_not_ready_without_credentials(self, client):
        app.state.router = TaskRouter({
            ProviderName.OPENAI: OpenAIAdapter(api_key=""),
            ProviderName.GEMINI: GeminiAdapter(api_key=""),
        })

        response = client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["reason"] == "No AI provider configured"
        assert data["missing"] == ["gemini", "openai"]

    def test_not_ready_without_router(self, client):
        app.state.router = None

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


def test_root_lists_endpoints(client):
    response = client.get("/")

    assert response.status_code == 200
    endpoints = response.json()["endpoints"]
    assert endpoints["routing"] == "/routing"
    assert endpoints["enrich"] == "/enrich/{contact|company|deal} (POST)"
