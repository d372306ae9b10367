"""Pruebas del endpoint `/api/health`."""

from httpx import AsyncClient


async def test_health_returns_ok_without_session(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "sofia-panel"}


async def test_info_reports_unconfigured_collaborators(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/api/info")
    assert response.status_code == 200
    payload = response.json()
    assert payload["prompt_store"] == "local"
    assert payload["chatwoot_configured"] is False
    assert payload["hetzner_configured"] is False
