"""Transformación de conversaciones crudas de Chatwoot y cálculo de estadísticas.

El esquema de Chatwoot anida distinto según el tipo de inbox, así que cada
campo se resuelve con una lista ordenada de reglas; gana la primera que
encuentre un valor y, si ninguna lo hace, se usa el valor por defecto.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sofia_panel.models.conversation import Conversation, ConversationStats
from sofia_panel.services.timestamps import day_bounds, parse_timestamp

Rule = Callable[[dict[str, Any]], Any]

DEFAULT_CONTACT_NAME = "Sin nombre"
DEFAULT_PHONE = "N/A"
DEFAULT_INBOX_NAME = "Inbox"

KNOWN_STATUSES = frozenset({"open", "pending", "resolved"})
# Estados de Chatwoot fuera del conjunto del panel ("snoozed") quedan como pendientes.
FALLBACK_STATUS = "pending"


def path(*keys: str | int) -> Rule:
    """Regla que recorre claves de dict o índices de lista; None si algo falta."""

    def rule(raw: dict[str, Any]) -> Any:
        current: Any = raw
        for key in keys:
            if isinstance(key, int):
                if not isinstance(current, list) or not -len(current) <= key < len(current):
                    return None
                current = current[key]
            elif isinstance(current, dict):
                current = current.get(key)
            else:
                return None
        return current

    return rule


@dataclass(frozen=True, slots=True)
class FieldSpec:
    rules: tuple[Rule, ...]
    default: Any = None
    absent: tuple[Any, ...] = (None, "")

    def resolve(self, raw: dict[str, Any]) -> Any:
        for rule in self.rules:
            value = rule(raw)
            if value not in self.absent:
                return value
        return self.default


FIELD_SPECS: dict[str, FieldSpec] = {
    "id": FieldSpec((path("id"),)),
    "contact_name": FieldSpec(
        (path("meta", "sender", "name"), path("contact", "name")), DEFAULT_CONTACT_NAME
    ),
    "phone_number": FieldSpec(
        (path("meta", "sender", "phone_number"), path("contact", "phone_number")),
        DEFAULT_PHONE,
    ),
    "status": FieldSpec((path("status"),), FALLBACK_STATUS),
    "last_message": FieldSpec(
        (path("last_non_activity_message", "content"), path("messages", 0, "content")), ""
    ),
    # Un epoch 0 equivale a "sin actividad" y cae a updated_at.
    "last_activity_at": FieldSpec(
        (path("last_activity_at"), path("updated_at")), absent=(None, "", 0)
    ),
    "created_at": FieldSpec((path("created_at"),)),
    "messages_count": FieldSpec((path("messages_count"),), 0),
    "inbox_id": FieldSpec((path("inbox_id"),)),
    "inbox_name": FieldSpec((path("meta", "inbox", "name"),), DEFAULT_INBOX_NAME),
    "assignee": FieldSpec((path("meta", "assignee", "name"),)),
}


def _as_int(value: Any, default: int | None) -> int | None:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_key(value: Any) -> int | str | None:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        return None
    return value


def _as_moment(value: Any) -> str | int | float | None:
    """Deja pasar solo valores que el normalizador de fechas sabe leer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value if isinstance(value, (str, int, float)) else None


def transform_conversation(raw: dict[str, Any]) -> Conversation:
    """Convierte un registro de Chatwoot en `Conversation` sin lanzar por faltantes."""
    values = {name: spec.resolve(raw) for name, spec in FIELD_SPECS.items()}

    status = str(values["status"]).lower()
    values["status"] = status if status in KNOWN_STATUSES else FALLBACK_STATUS
    values["id"] = _as_int(values["id"], None)
    values["messages_count"] = max(_as_int(values["messages_count"], 0) or 0, 0)
    values["inbox_id"] = _as_key(values["inbox_id"])
    values["last_activity_at"] = _as_moment(values["last_activity_at"])
    values["created_at"] = _as_moment(values["created_at"])
    for name in ("contact_name", "phone_number", "last_message", "inbox_name"):
        values[name] = str(values[name])
    if values["assignee"] is not None:
        values["assignee"] = str(values["assignee"])
    return Conversation(**values)


def transform_conversations(rows: Iterable[Any]) -> list[Conversation]:
    return [transform_conversation(row) for row in rows if isinstance(row, dict)]


def resolved_on_day(conversation: Conversation, start: datetime, end: datetime) -> bool:
    if conversation.status != "resolved":
        return False
    moment = parse_timestamp(conversation.last_activity_at)
    return moment is not None and start <= moment < end


def compute_stats(
    conversations: Sequence[Conversation], *, now: datetime | None = None
) -> ConversationStats:
    """Totales por estado y resueltas hoy (medianoche local a medianoche local)."""
    start, end = day_bounds(now)
    return ConversationStats(
        total_conversations=len(conversations),
        open_conversations=sum(1 for conv in conversations if conv.status == "open"),
        pending_conversations=sum(1 for conv in conversations if conv.status == "pending"),
        resolved_today=sum(1 for conv in conversations if resolved_on_day(conv, start, end)),
    )
