"""Configuración central basada en variables de entorno."""

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    """Acepta `SOFIA_<NAME>` y el nombre histórico sin prefijo."""
    return AliasChoices(f"SOFIA_{name}", name)


class Settings(BaseSettings):
    """Valores globales leídos desde `.env` o el entorno."""

    environment: str = "development"
    log_level: str | None = Field(
        default=None,
        description="Nivel de logging global (ej. debug, info, warning). Cuando no se define, usa un valor por ambiente.",
    )
    log_file_path: str | None = Field(
        default=None,
        description="Archivo rotativo para logs JSON; sin valor solo se escribe a stderr.",
    )
    request_log_skip_prefixes: tuple[str, ...] = Field(
        default=("/static", "/favicon", "/docs", "/openapi"),
        description="Prefijos de ruta para los que no se registrarán eventos de request.started/completed.",
    )
    cors_allow_origins: list[str] = Field(default_factory=list)

    dashboard_user: str = Field(default="admin", validation_alias=_env("DASHBOARD_USER"))
    dashboard_password: str = Field(
        default="gps2026", validation_alias=_env("DASHBOARD_PASSWORD")
    )
    auth_cookie_name: str = "auth"
    auth_cookie_max_age: int = Field(
        default=60 * 60 * 24 * 7, description="Vigencia de la cookie de sesión en segundos."
    )
    display_timezone: str = Field(
        default="America/Argentina/Buenos_Aires",
        description="Zona horaria IANA usada para mostrar fechas y calcular 'hoy'.",
    )

    chatwoot_base_url: str | None = Field(default=None, validation_alias=_env("CHATWOOT_BASE_URL"))
    chatwoot_account_id: str | None = Field(
        default=None, validation_alias=_env("CHATWOOT_ACCOUNT_ID")
    )
    chatwoot_access_token: str | None = Field(
        default=None, validation_alias=_env("CHATWOOT_ACCESS_TOKEN")
    )
    chatwoot_public_url: str | None = Field(
        default=None,
        validation_alias=_env("CHATWOOT_PUBLIC_URL"),
        description="URL pública del inbox para enlazar conversaciones desde el panel.",
    )

    hetzner_api_token: str | None = Field(default=None, validation_alias=_env("HETZNER_API_TOKEN"))
    hetzner_api_url: str = Field(
        default="https://api.hetzner.cloud/v1", validation_alias=_env("HETZNER_API_URL")
    )

    prompt_store: Literal["local", "langfuse"] = Field(
        default="local",
        validation_alias=_env("PROMPT_STORE"),
        description="Backend del prompt: memoria del proceso o versiones en Langfuse.",
    )
    default_model: str = Field(default="gpt-4o-mini", validation_alias=_env("DEFAULT_MODEL"))
    langfuse_host: str | None = Field(default=None, validation_alias=_env("LANGFUSE_HOST"))
    langfuse_public_key: str | None = Field(
        default=None, validation_alias=_env("LANGFUSE_PUBLIC_KEY")
    )
    langfuse_secret_key: str | None = Field(
        default=None, validation_alias=_env("LANGFUSE_SECRET_KEY")
    )
    langfuse_prompt_name: str = Field(
        default="sofia-system-prompt", validation_alias=_env("LANGFUSE_PROMPT_NAME")
    )

    bot_url: str = Field(
        default="https://gps-bot-231066423024.us-central1.run.app",
        validation_alias=_env("BOT_URL"),
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="SOFIA_", extra="allow", populate_by_name=True
    )


settings = Settings()
