"""Middlewares del panel: registro de requests y cookie de sesión."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from sofia_panel.core import security
from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger

logger = get_logger("sofia_panel.request")


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Registra información básica de cada request entrante."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path.startswith(settings.request_log_skip_prefixes):
            return await call_next(request)

        request_id = uuid4().hex
        start = time.perf_counter()
        base_extra = {
            "request_id": request_id,
            "method": request.method,
            "path": path,
            "client_ip": _client_ip(request),
        }
        logger.info(
            "request.started",
            extra={**base_extra, "user_agent": request.headers.get("user-agent")},
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(
                "request.failed", extra={**base_extra, "duration_ms": round(duration_ms, 2)}
            )
            raise

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["x-request-id"] = request_id
        logger.info(
            "request.completed",
            extra={
                **base_extra,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Redirige a /login cualquier request sin cookie de sesión."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if security.is_public_path(path):
            return await call_next(request)

        if not security.has_session(request.cookies.get(settings.auth_cookie_name)):
            logger.info("session.redirect_login", extra={"path": path})
            return RedirectResponse(url=security.LOGIN_PATH, status_code=307)

        return await call_next(request)
