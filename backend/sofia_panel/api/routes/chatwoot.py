"""Rutas de conversaciones y estadísticas del inbox Chatwoot.

Ningún error de Chatwoot sale como excepción: se responde 200 con listas
vacías o conteos en cero y un campo `error` para el banner del panel.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Query

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger
from sofia_panel.models.conversation import Conversation, ConversationStats
from sofia_panel.services import chatwoot
from sofia_panel.services.conversations import compute_stats, transform_conversations
from sofia_panel.services.timestamps import format_timestamp

router = APIRouter(prefix="/api/chatwoot", tags=["chatwoot"])

logger = get_logger(__name__)

StatusFilter = Literal["all", "open", "pending", "resolved", "snoozed"]


def _conversation_link(conversation_id: int | None) -> str | None:
    public_url = settings.chatwoot_public_url
    if not public_url or conversation_id is None or not settings.chatwoot_account_id:
        return None
    return (
        f"{public_url.rstrip('/')}/app/accounts/{settings.chatwoot_account_id}"
        f"/conversations/{conversation_id}"
    )


def _conversation_payload(conversation: Conversation) -> dict[str, Any]:
    item = conversation.model_dump(by_alias=True)
    item["lastActivityLabel"] = format_timestamp(conversation.last_activity_at)
    item["createdLabel"] = format_timestamp(conversation.created_at)
    item["link"] = _conversation_link(conversation.id)
    return item


@router.get("/conversations", summary="Conversaciones normalizadas del inbox")
async def list_conversations(
    status: StatusFilter = Query(default="all"),
    limit: int = Query(default=20, ge=1, le=500),
) -> dict[str, Any]:
    try:
        client = chatwoot.ChatwootClient()
        rows = await client.fetch_conversations(status=status, limit=limit)
    except chatwoot.ChatwootError as exc:
        logger.warning("chatwoot.conversations_degraded", extra={"error": str(exc)})
        return {"conversations": [], "total": 0, "error": str(exc)}

    conversations = transform_conversations(rows)
    return {
        "conversations": [_conversation_payload(conv) for conv in conversations],
        "total": len(conversations),
    }


@router.get("/stats", summary="Totales por estado y resueltas hoy")
async def conversation_stats() -> dict[str, Any]:
    try:
        client = chatwoot.ChatwootClient()
        rows = await client.fetch_conversations(status="all")
    except chatwoot.ChatwootError as exc:
        logger.warning("chatwoot.stats_degraded", extra={"error": str(exc)})
        stats = ConversationStats(error=str(exc))
    else:
        stats = compute_stats(transform_conversations(rows))
    return stats.model_dump(by_alias=True, exclude_none=True)
