"""Configuración del prompt y modelo del bot."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PromptSource = Literal["local", "langfuse"]

VALID_MODELS: tuple[str, ...] = (
    "gpt-4o-mini",
    "gpt-4o",
    "gpt-4.1",
    "gpt-4.1-mini",
    "gpt-5.2",
    "gpt-5-mini",
)


class PromptConfig(BaseModel):
    """Prompt vigente; `model` solo existe en el backend en memoria."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str
    model: str | None = None
    source: PromptSource
    version: int | None = None
    name: str | None = None
    last_updated: datetime | None = None


class PromptUpdatePayload(BaseModel):
    """Body de PUT /api/prompt; ambos campos son opcionales."""

    model_config = ConfigDict(extra="ignore")

    prompt: str | None = Field(default=None, description="Texto completo del prompt.")
    model: str | None = Field(default=None, description=f"Uno de: {', '.join(VALID_MODELS)}.")


class PromptUpdateResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    source: PromptSource
    model: str | None = None
    version: int | None = None
    prompt_length: int
    message: str
