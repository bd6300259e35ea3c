from fastapi.testclient import TestClient

from solchat import __version__
from solchat.config import settings
from solchat.main import app


def test_health_endpoint_reports_every_dependency(monkeypatch):
    monkeypatch.setattr(settings, "anthropic_api_key", "")
    client = TestClient(app)

    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert set(data["providers"]) == {"llm", "solana_rpc", "helius", "jupiter", "dexscreener", "coingecko"}
    assert data["total_providers"] == 6
    assert data["providers"]["llm"]["status"] == "unavailable"
    assert data["status"] == "degraded"
    assert data["available_providers"] < data["total_providers"]


def test_health_llm_configured(monkeypatch):
    monkeypatch.setattr(settings, "anthropic_api_key", "sk-test")
    monkeypatch.setattr(settings, "llm_provider", "claude")
    client = TestClient(app)

    llm = client.get("/healthz").json()["providers"]["llm"]

    assert llm == {"status": "configured", "provider": "anthropic", "model": settings.llm_model}


def test_root_endpoint():
    response = TestClient(app).get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Solchat API"
    assert data["version"] == __version__
    assert data["health"] == "/healthz"
