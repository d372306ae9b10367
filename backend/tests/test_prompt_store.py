"""Pruebas de los almacenes del prompt."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from sofia_panel.core.config import settings
from sofia_panel.services.prompt_store import (
    InMemoryPromptStore,
    LangfusePromptStore,
    PromptStoreError,
    PromptStoreNotConfiguredError,
    PromptValidationError,
    get_prompt_store,
)


def _memory_store() -> InMemoryPromptStore:
    return InMemoryPromptStore(prompt="Eres Sofía.", model="gpt-4o-mini")


async def test_memory_store_reads_local_values() -> None:
    config = await _memory_store().read()
    assert config.prompt == "Eres Sofía."
    assert config.model == "gpt-4o-mini"
    assert config.source == "local"


async def test_memory_store_rejects_unknown_model_without_changes() -> None:
    store = _memory_store()

    with pytest.raises(PromptValidationError) as exc_info:
        await store.update(prompt="Otro prompt", model="not-a-real-model")

    assert "gpt-4o" in str(exc_info.value)
    config = await store.read()
    assert config.model == "gpt-4o-mini"
    assert config.prompt == "Eres Sofía."


async def test_memory_store_updates_prompt_and_model() -> None:
    store = _memory_store()

    result = await store.update(prompt="Nuevo prompt", model="gpt-4.1")

    assert result.model == "gpt-4.1"
    assert result.prompt_length == len("Nuevo prompt")
    config = await store.read()
    assert (config.prompt, config.model) == ("Nuevo prompt", "gpt-4.1")


async def test_memory_store_partial_update_keeps_other_field() -> None:
    store = _memory_store()
    await store.update(model="gpt-5-mini")
    config = await store.read()
    assert config.prompt == "Eres Sofía."
    assert config.model == "gpt-5-mini"


def test_default_store_is_a_process_singleton() -> None:
    store = get_prompt_store()
    assert isinstance(store, InMemoryPromptStore)
    assert get_prompt_store() is store


def test_langfuse_selected_by_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "prompt_store", "langfuse")
    get_prompt_store.cache_clear()
    assert isinstance(get_prompt_store(), LangfusePromptStore)


def _langfuse(handler, **overrides) -> LangfusePromptStore:
    options = {
        "host": "https://langfuse.test/",
        "public_key": "pk-lf-123",
        "secret_key": "sk-lf-456",
        "prompt_name": "sofia-system-prompt",
        "transport": httpx.MockTransport(handler),
    }
    options.update(overrides)
    return LangfusePromptStore(**options)


async def test_langfuse_reads_production_label() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "name": "sofia-system-prompt",
                "version": 4,
                "prompt": "Prompt v4",
                "labels": ["production", "latest"],
                "updatedAt": "2025-06-01T10:00:00.000Z",
            },
        )

    config = await _langfuse(handler).read()

    assert config.prompt == "Prompt v4"
    assert config.version == 4
    assert config.model is None
    assert config.source == "langfuse"
    request = seen[0]
    assert request.url.path == "/api/public/v2/prompts/sofia-system-prompt"
    assert request.url.params["label"] == "production"
    expected = base64.b64encode(b"pk-lf-123:sk-lf-456").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"


async def test_langfuse_update_creates_labeled_version() -> None:
    bodies: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        assert request.method == "POST"
        assert request.url.path == "/api/public/v2/prompts"
        return httpx.Response(201, json={"name": "sofia-system-prompt", "version": 5})

    result = await _langfuse(handler).update(prompt="Prompt v5", model="gpt-4o")

    assert result.version == 5
    assert result.model is None
    assert result.source == "langfuse"
    assert bodies[0]["labels"] == ["production"]
    assert bodies[0]["prompt"] == "Prompt v5"
    assert bodies[0]["type"] == "text"


async def test_langfuse_update_requires_prompt() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - no se llama
        raise AssertionError("no debería llamar a Langfuse")

    with pytest.raises(PromptValidationError):
        await _langfuse(handler).update(model="gpt-4o")


async def test_langfuse_not_configured_short_circuits() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - no se llama
        raise AssertionError("no debería llamar a Langfuse")

    store = _langfuse(handler, secret_key=None)
    with pytest.raises(PromptStoreNotConfiguredError, match="Langfuse no configurado"):
        await store.read()


async def test_langfuse_unreachable_fails_loudly() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timeout", request=request)

    with pytest.raises(PromptStoreError, match="Error al conectar a Langfuse"):
        await _langfuse(handler).read()


async def test_langfuse_error_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Prompt not found"})

    with pytest.raises(PromptStoreError, match="Langfuse API error: 404"):
        await _langfuse(handler).read()


async def test_langfuse_unexpected_fields_raise_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"name": "sofia-system-prompt", "prompt": "Hola", "updatedAt": "ayer"}
        )

    with pytest.raises(PromptStoreError, match="Respuesta inesperada de Langfuse"):
        await _langfuse(handler).read()


async def test_langfuse_update_with_odd_version_raises_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"version": {"n": 5}})

    with pytest.raises(PromptStoreError, match="Respuesta inesperada de Langfuse"):
        await _langfuse(handler).update(prompt="Nuevo")
