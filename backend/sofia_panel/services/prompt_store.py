"""Almacenes del prompt del bot.

Hay dos backends con el mismo contrato `read()` / `update()`:

- `InMemoryPromptStore`: prompt y modelo viven en memoria del proceso y se
  pierden al reiniciar. Las actualizaciones concurrentes se pisan (gana la
  última); no hay bloqueo ni control de versiones.
- `LangfusePromptStore`: cada actualización crea una versión nueva con la
  etiqueta `production` y la lectura trae siempre la versión etiquetada. No
  maneja selección de modelo.

`settings.prompt_store` elige cuál usa la aplicación.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger
from sofia_panel.core.security import mask_secret
from sofia_panel.data import read_text
from sofia_panel.models.prompt import VALID_MODELS, PromptConfig, PromptUpdateResult

logger = get_logger(__name__)

PRODUCTION_LABEL = "production"


class PromptStoreError(RuntimeError):
    """Errores del backend de prompts."""


class PromptStoreNotConfiguredError(PromptStoreError):
    """Faltan credenciales o host del servicio de versiones."""


class PromptValidationError(ValueError):
    """Datos inválidos para actualizar el prompt."""


class PromptStore(Protocol):
    source: str

    async def read(self) -> PromptConfig: ...

    async def update(
        self, *, prompt: str | None = None, model: str | None = None
    ) -> PromptUpdateResult: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPromptStore:
    """Prompt y modelo en memoria del proceso."""

    source = "local"

    def __init__(self, *, prompt: str, model: str) -> None:
        if model not in VALID_MODELS:
            raise PromptValidationError(_invalid_model_message())
        self._prompt = prompt
        self._model = model
        self._updated_at = _now()

    async def read(self) -> PromptConfig:
        return PromptConfig(
            prompt=self._prompt,
            model=self._model,
            source="local",
            last_updated=self._updated_at,
        )

    async def update(
        self, *, prompt: str | None = None, model: str | None = None
    ) -> PromptUpdateResult:
        # Se valida todo antes de mutar para no dejar cambios a medias.
        if model is not None and model not in VALID_MODELS:
            raise PromptValidationError(_invalid_model_message())
        if prompt is not None:
            self._prompt = prompt
        if model is not None:
            self._model = model
        self._updated_at = _now()
        logger.info(
            "prompt.updated",
            extra={"source": self.source, "model": self._model, "prompt_length": len(self._prompt)},
        )
        return PromptUpdateResult(
            source="local",
            model=self._model,
            prompt_length=len(self._prompt),
            message="Configuración actualizada (en memoria)",
        )


class LangfusePromptStore:
    """Prompt versionado en Langfuse (API pública v2, basic auth)."""

    source = "langfuse"

    def __init__(
        self,
        *,
        host: str | None,
        public_key: str | None,
        secret_key: str | None,
        prompt_name: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._host = host.rstrip("/") if host else None
        self._public_key = public_key
        self._secret_key = secret_key
        self._prompt_name = prompt_name
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._host and self._public_key and self._secret_key)

    async def read(self) -> PromptConfig:
        path = f"/api/public/v2/prompts/{quote(self._prompt_name, safe='')}"
        data = await self._request("GET", path, params={"label": PRODUCTION_LABEL})
        prompt = data.get("prompt")
        if not isinstance(prompt, str):
            raise PromptStoreError("Langfuse devolvió un prompt que no es de texto")
        try:
            return PromptConfig(
                prompt=prompt,
                source="langfuse",
                version=data.get("version"),
                name=data.get("name") or self._prompt_name,
                last_updated=data.get("updatedAt"),
            )
        except ValidationError as exc:
            logger.error("langfuse.invalid_prompt", extra={"error": str(exc)})
            raise PromptStoreError("Respuesta inesperada de Langfuse") from exc

    async def update(
        self, *, prompt: str | None = None, model: str | None = None
    ) -> PromptUpdateResult:
        if prompt is None:
            raise PromptValidationError("Prompt requerido")
        if model is not None:
            logger.warning("prompt.model_ignored", extra={"source": self.source, "model": model})
        body = {
            "type": "text",
            "name": self._prompt_name,
            "prompt": prompt,
            "labels": [PRODUCTION_LABEL],
            "commitMessage": "Actualizado desde el panel",
        }
        data = await self._request("POST", "/api/public/v2/prompts", json=body)
        version = data.get("version")
        logger.info(
            "prompt.updated",
            extra={"source": self.source, "version": version, "prompt_length": len(prompt)},
        )
        try:
            return PromptUpdateResult(
                source="langfuse",
                version=version,
                prompt_length=len(prompt),
                message=f"Nueva versión {version} publicada en Langfuse",
            )
        except ValidationError as exc:
            logger.error("langfuse.invalid_version", extra={"error": str(exc)})
            raise PromptStoreError("Respuesta inesperada de Langfuse") from exc

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        if not self.configured:
            raise PromptStoreNotConfiguredError("Langfuse no configurado")
        url = f"{self._host}{path}"
        auth = httpx.BasicAuth(self._public_key or "", self._secret_key or "")
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.request(method, url, params=params, json=json, auth=auth)
        except httpx.HTTPError as exc:
            logger.exception(
                "langfuse.request_failed",
                extra={
                    "path": path,
                    "public_key": mask_secret(self._public_key),
                    "error": str(exc),
                },
            )
            raise PromptStoreError(f"Error al conectar a Langfuse: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "langfuse.response_error",
                extra={"path": path, "status": response.status_code, "body": response.text[:500]},
            )
            raise PromptStoreError(f"Langfuse API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise PromptStoreError(f"Respuesta inválida de Langfuse: {exc}") from exc
        if not isinstance(data, dict):
            raise PromptStoreError("Respuesta inesperada de Langfuse")
        return data


def _invalid_model_message() -> str:
    return f"Modelo inválido. Opciones: {', '.join(VALID_MODELS)}"


@lru_cache(maxsize=1)
def get_prompt_store() -> PromptStore:
    """Backend elegido por configuración; el de memoria es único por proceso."""
    if settings.prompt_store == "langfuse":
        return LangfusePromptStore(
            host=settings.langfuse_host,
            public_key=settings.langfuse_public_key,
            secret_key=settings.langfuse_secret_key,
            prompt_name=settings.langfuse_prompt_name,
        )
    return InMemoryPromptStore(prompt=read_text("default_prompt.txt"), model=settings.default_model)
