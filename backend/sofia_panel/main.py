"""Punto de entrada principal del panel de Sofía."""

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.staticfiles import StaticFiles

from sofia_panel.api.routes.auth import router as auth_router
from sofia_panel.api.routes.chatwoot import router as chatwoot_router
from sofia_panel.api.routes.health import router as health_router
from sofia_panel.api.routes.hetzner import router as hetzner_router
from sofia_panel.api.routes.prompt import router as prompt_router
from sofia_panel.core.config import settings
from sofia_panel.core.logging import configure_logging, get_logger, resolve_log_level
from sofia_panel.core.middleware import RequestLoggingMiddleware, SessionGateMiddleware
from sofia_panel.core.security import mask_secret


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"error": "Solicitud inválida", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


def create_app() -> FastAPI:
    """Crea y configura la instancia de FastAPI."""
    default_log_level = logging.DEBUG if settings.environment != "production" else logging.INFO
    log_level = resolve_log_level(settings.log_level, default=default_log_level)
    per_logger_files = None
    if settings.log_file_path:
        log_dir = Path(settings.log_file_path).parent
        per_logger_files = {
            "sofia_panel.request": str(log_dir / "request.log"),
            "sofia_panel.upstream": str(log_dir / "upstream.log"),
        }
    configure_logging(
        level=log_level,
        log_file=settings.log_file_path,
        per_logger_files=per_logger_files,
    )

    app = FastAPI(title="Sofía Panel", version="0.1.0")
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.add_middleware(SessionGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(chatwoot_router)
    app.include_router(hetzner_router)
    app.include_router(prompt_router)

    @app.get("/api/info", tags=["info"])
    def info() -> dict[str, object]:
        return {
            "environment": settings.environment,
            "prompt_store": settings.prompt_store,
            "chatwoot_configured": bool(
                settings.chatwoot_base_url
                and settings.chatwoot_account_id
                and settings.chatwoot_access_token
            ),
            "hetzner_configured": bool(settings.hetzner_api_token),
            "langfuse_configured": bool(
                settings.langfuse_host
                and settings.langfuse_public_key
                and settings.langfuse_secret_key
            ),
        }

    log = get_logger("sofia_panel")
    log.info(
        "app.configured",
        extra={
            "environment": settings.environment,
            "prompt_store": settings.prompt_store,
            "chatwoot_token": mask_secret(settings.chatwoot_access_token),
            "hetzner_token": mask_secret(settings.hetzner_api_token),
        },
    )

    # Pantallas estáticas (login y tablero); se montan al final para no tapar /api.
    public_root = Path(__file__).resolve().parent / "public"
    if public_root.exists():
        app.mount("/", StaticFiles(directory=str(public_root), html=True), name="public")
        log.info("public.static_mounted", extra={"path": str(public_root)})
    else:
        log.warning("public.static_missing", extra={"expected_path": str(public_root)})

    return app


app = create_app()
