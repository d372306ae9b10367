"""Fixtures compartidas para las pruebas."""

import pytest
from httpx import ASGITransport, AsyncClient

from sofia_panel.core.config import settings
from sofia_panel.main import app
from sofia_panel.services.prompt_store import get_prompt_store


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Evita que el entorno local (.env) afecte las pruebas."""
    monkeypatch.setattr(settings, "environment", "test")
    monkeypatch.setattr(settings, "dashboard_user", "admin")
    monkeypatch.setattr(settings, "dashboard_password", "gps2026")
    monkeypatch.setattr(settings, "display_timezone", "America/Argentina/Buenos_Aires")
    monkeypatch.setattr(settings, "chatwoot_base_url", None)
    monkeypatch.setattr(settings, "chatwoot_account_id", None)
    monkeypatch.setattr(settings, "chatwoot_access_token", None)
    monkeypatch.setattr(settings, "chatwoot_public_url", None)
    monkeypatch.setattr(settings, "hetzner_api_token", None)
    monkeypatch.setattr(settings, "prompt_store", "local")
    monkeypatch.setattr(settings, "default_model", "gpt-4o-mini")
    get_prompt_store.cache_clear()
    yield
    get_prompt_store.cache_clear()
    app.dependency_overrides.clear()


@pytest.fixture
def chatwoot_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "chatwoot_base_url", "https://chatwoot.test")
    monkeypatch.setattr(settings, "chatwoot_account_id", "2")
    monkeypatch.setattr(settings, "chatwoot_access_token", "cw-token")


@pytest.fixture(name="async_client")
async def fixture_async_client() -> AsyncClient:
    """Cliente sin cookie de sesión contra la app principal."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(name="auth_client")
async def fixture_auth_client() -> AsyncClient:
    """Cliente con la cookie de sesión ya emitida."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", cookies={"auth": "admin"}
    ) as client:
        yield client
