"""Pruebas del acceso con cookie y del login/logout."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from sofia_panel.core import security


@pytest.mark.parametrize(
    "path",
    [
        "/login",
        "/login/",
        "/api/auth/login",
        "/api/health",
        "/static/app.js",
        "/favicon.ico",
        "/a.css",
    ],
)
def test_public_paths(path: str) -> None:
    assert security.is_public_path(path)


@pytest.mark.parametrize("path", ["/", "/sessions", "/api/prompt", "/loginx", "/api/auth/logout"])
def test_protected_paths(path: str) -> None:
    assert not security.is_public_path(path)


def test_session_accepts_any_non_empty_cookie() -> None:
    assert security.has_session("admin")
    assert not security.has_session("")
    assert security.has_session("   ")
    assert not security.has_session(None)


async def test_missing_cookie_redirects_to_login(async_client: AsyncClient) -> None:
    for path in ("/", "/api/prompt", "/api/hetzner"):
        response = await async_client.get(path)
        assert response.status_code == 307
        assert response.headers["location"] == "/login"


async def test_empty_cookie_redirects_to_login(async_client: AsyncClient) -> None:
    async_client.cookies.set("auth", "")
    response = await async_client.get("/api/info")
    assert response.status_code == 307


async def test_any_cookie_value_passes_through(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/api/info")
    assert response.status_code == 200
    assert "x-request-id" in response.headers


async def test_login_page_is_public(async_client: AsyncClient) -> None:
    response = await async_client.get("/login/")
    assert response.status_code == 200
    assert "/api/auth/login" in response.text


async def test_dashboard_served_with_session(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/")
    assert response.status_code == 200
    assert "/api/chatwoot/stats" in response.text


async def test_sessions_screen_served_with_session(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/sessions/")
    assert response.status_code == 200
    assert "/api/chatwoot/conversations?status=" in response.text
    assert "Ver en Chatwoot" in response.text


async def test_prompt_screen_served_with_session(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/prompt/")
    assert response.status_code == 200
    assert "/api/prompt" in response.text
    assert "/api/reload-prompt" in response.text
    assert 'id="model-section" hidden' in response.text


async def test_screens_redirect_without_session(async_client: AsyncClient) -> None:
    for path in ("/sessions/", "/prompt/"):
        response = await async_client.get(path)
        assert response.status_code == 307
        assert response.headers["location"] == "/login"


async def test_login_sets_session_cookie(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/api/auth/login", json={"username": "admin", "password": "gps2026"}
    )
    assert response.status_code == 200
    assert response.json() == {"success": True}
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("auth=admin")
    assert "HttpOnly" in cookie
    assert "Max-Age=604800" in cookie
    assert "Path=/" in cookie
    assert "secure" not in cookie.lower()

    follow_up = await async_client.get("/api/info")
    assert follow_up.status_code == 200


async def test_login_rejects_bad_credentials(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/api/auth/login", json={"username": "admin", "password": "otra"}
    )
    assert response.status_code == 401
    assert response.json() == {"error": "Credenciales incorrectas"}
    assert "set-cookie" not in response.headers


async def test_login_rejects_malformed_body(async_client: AsyncClient) -> None:
    response = await async_client.post("/api/auth/login", json={"username": "admin"})
    assert response.status_code == 400
    assert response.json()["error"] == "Solicitud inválida"


async def test_logout_clears_cookie(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/api/auth/logout")
    assert response.status_code == 200
    cookie = response.headers["set-cookie"]
    assert cookie.startswith("auth=")
    assert "Max-Age=0" in cookie
