"""Cliente del inbox Chatwoot donde conversa Sofía."""

from __future__ import annotations

from typing import Any

import httpx

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger
from sofia_panel.services.pagination import PAGE_SIZE, collect_pages

logger = get_logger("sofia_panel.upstream.chatwoot")


class ChatwootError(RuntimeError):
    """Errores al consultar Chatwoot."""


class ChatwootNotConfiguredError(ChatwootError):
    """Faltan CHATWOOT_BASE_URL, CHATWOOT_ACCOUNT_ID o CHATWOOT_ACCESS_TOKEN."""


def _page_items(payload: Any) -> list[dict[str, Any]]:
    # Según la versión, la lista llega en `data.payload` o directamente en `payload`.
    items: Any = None
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict):
            items = data.get("payload")
        if not items:
            items = payload.get("payload")
    if not isinstance(items, list):
        return []
    return [row for row in items if isinstance(row, dict)]


class ChatwootClient:
    """Acceso de solo lectura al listado paginado de conversaciones."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        account_id: str | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = base_url or settings.chatwoot_base_url
        account_id = account_id or settings.chatwoot_account_id
        access_token = access_token or settings.chatwoot_access_token
        if not base_url or not account_id or not access_token:
            raise ChatwootNotConfiguredError("Chatwoot no configurado")
        self._base_url = base_url.rstrip("/")
        self._account_id = account_id
        self._access_token = access_token
        self._transport = transport

    @property
    def conversations_url(self) -> str:
        return f"{self._base_url}/api/v1/accounts/{self._account_id}/conversations"

    async def fetch_page(self, *, status: str = "all", page: int = 1) -> list[dict[str, Any]]:
        """Una página (25 conversaciones como máximo) del listado filtrado por estado."""
        params = {"status": status, "page": str(page)}
        headers = {"Api-Access-Token": self._access_token, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(self.conversations_url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.exception("chatwoot.request_failed", extra={"page": page, "error": str(exc)})
            raise ChatwootError(f"Error al conectar a Chatwoot: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "chatwoot.response_error",
                extra={"page": page, "status": response.status_code, "body": response.text[:500]},
            )
            raise ChatwootError(f"Chatwoot API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ChatwootError(f"Respuesta inválida de Chatwoot: {exc}") from exc
        return _page_items(payload)

    async def fetch_conversations(
        self, *, status: str = "all", limit: int | None = None
    ) -> list[dict[str, Any]]:
        """Todas las conversaciones del filtro, recorriendo páginas hasta el techo."""

        async def fetch(page: int) -> list[dict[str, Any]]:
            return await self.fetch_page(status=status, page=page)

        rows = await collect_pages(fetch, limit=limit, page_size=PAGE_SIZE)
        logger.debug(
            "chatwoot.conversations_fetched",
            extra={"status_filter": status, "count": len(rows), "limit": limit},
        )
        return rows
