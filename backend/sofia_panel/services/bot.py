"""Llamadas directas al bot Sofía."""

from __future__ import annotations

from typing import Any

import httpx

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger

logger = get_logger("sofia_panel.upstream.bot")


class BotError(RuntimeError):
    """El bot no respondió o respondió con error."""


async def reload_prompt(*, transport: httpx.AsyncBaseTransport | None = None) -> dict[str, Any]:
    """Pide al bot que vuelva a cargar su prompt y retorna su respuesta."""
    url = f"{settings.bot_url.rstrip('/')}/api/v1/reload-prompt"
    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            response = await client.post(url, json={})
    except httpx.HTTPError as exc:
        logger.exception("bot.request_failed", extra={"url": url, "error": str(exc)})
        raise BotError("Error conectando con el bot") from exc

    if response.status_code >= 400:
        logger.error(
            "bot.response_error",
            extra={"status": response.status_code, "body": response.text[:500]},
        )
        details = response.text.strip() or str(response.status_code)
        raise BotError(f"Error recargando prompt en el bot: {details}")

    try:
        data = response.json()
    except ValueError:
        return {"success": True}
    return data if isinstance(data, dict) else {"success": True, "result": data}
