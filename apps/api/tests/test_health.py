import pytest

from config import settings


@pytest.mark.asyncio
async def test_liveness_and_readiness(ideahub_client, monkeypatch):
    client, _ = ideahub_client

    live = await client.get("/health/live")
    assert live.json() == {"alive": True}

    monkeypatch.setattr(settings, "JWT_SECRET", "change_me_in_production")
    not_ready = await client.get("/health/ready")
    assert not_ready.status_code == 503
    assert not_ready.json()["ready"] is False

    monkeypatch.setattr(settings, "JWT_SECRET", "a-long-enough-test-secret-value-123")
    ready = await client.get("/health/ready")
    assert ready.json() == {"ready": True}


@pytest.mark.asyncio
async def test_root_reports_service_name(ideahub_client):
    client, _ = ideahub_client
    response = await client.get("/")
    assert response.json()["name"] == "AI Ideas Hub API"


def test_run_serves_app_on_configured_address(monkeypatch):
    import main

    calls = []
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setattr(settings, "API_HOST", "127.0.0.1")
    monkeypatch.setattr(settings, "API_PORT", 8123)

    main.run()

    assert calls == [(main.app, {"host": "127.0.0.1", "port": 8123, "log_level": settings.LOG_LEVEL.lower()})]
