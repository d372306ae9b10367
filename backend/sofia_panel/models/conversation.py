"""Vistas derivadas de las conversaciones del inbox."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ConversationStatus = Literal["open", "pending", "resolved"]


class Conversation(BaseModel):
    """Conversación normalizada; se arma en cada request y no se guarda."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int | None
    contact_name: str
    phone_number: str
    status: ConversationStatus
    last_message: str = ""
    last_activity_at: Any = None
    created_at: Any = None
    messages_count: int = Field(default=0, ge=0)
    inbox_id: int | str | None = None
    inbox_name: str = "Inbox"
    assignee: str | None = None


class ConversationStats(BaseModel):
    """Conteos calculados sobre el conjunto de conversaciones de un request."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_conversations: int = 0
    open_conversations: int = 0
    pending_conversations: int = 0
    resolved_today: int = 0
    error: str | None = None
