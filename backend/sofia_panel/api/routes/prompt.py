"""Lectura y actualización del prompt/modelo del bot."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from sofia_panel.core.logging import get_logger
from sofia_panel.models.prompt import PromptUpdatePayload
from sofia_panel.services import bot
from sofia_panel.services.prompt_store import (
    PromptStore,
    PromptStoreError,
    PromptValidationError,
    get_prompt_store,
)

router = APIRouter(prefix="/api", tags=["prompt"])

logger = get_logger(__name__)


@router.get("/prompt", summary="Prompt vigente del bot")
async def read_prompt(store: PromptStore = Depends(get_prompt_store)) -> dict[str, Any]:
    try:
        config = await store.read()
    except PromptStoreError as exc:
        logger.error("prompt.read_failed", extra={"source": store.source, "error": str(exc)})
        return {"prompt": "", "source": store.source, "error": str(exc)}
    return config.model_dump(by_alias=True, exclude_none=True, mode="json")


@router.put("/prompt", summary="Actualiza prompt y/o modelo")
async def update_prompt(
    payload: PromptUpdatePayload, store: PromptStore = Depends(get_prompt_store)
) -> Any:
    try:
        result = await store.update(prompt=payload.prompt, model=payload.model)
    except PromptValidationError as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    except PromptStoreError as exc:
        logger.error("prompt.update_failed", extra={"source": store.source, "error": str(exc)})
        return {"success": False, "source": store.source, "error": str(exc)}
    return result.model_dump(by_alias=True, exclude_none=True)


@router.post("/reload-prompt", summary="Pide al bot recargar su prompt")
async def reload_bot_prompt() -> dict[str, Any]:
    try:
        return await bot.reload_prompt()
    except bot.BotError as exc:
        return {"success": False, "error": str(exc)}
