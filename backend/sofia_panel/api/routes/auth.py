"""Login y logout del panel con la cookie de sesión compartida."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sofia_panel.core import security
from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger

router = APIRouter(prefix="/api/auth", tags=["auth"])

logger = get_logger(__name__)


class LoginPayload(BaseModel):
    username: str = Field(..., max_length=200)
    password: str = Field(..., max_length=200)


@router.post("/login", summary="Valida credenciales y emite la cookie de sesión")
async def login(payload: LoginPayload) -> JSONResponse:
    if not security.check_credentials(payload.username, payload.password):
        logger.warning("auth.login_failed", extra={"username": payload.username})
        return JSONResponse({"error": "Credenciales incorrectas"}, status_code=401)

    response = JSONResponse({"success": True})
    response.set_cookie(
        settings.auth_cookie_name,
        payload.username,
        max_age=settings.auth_cookie_max_age,
        path="/",
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
    )
    logger.info("auth.login_ok", extra={"username": payload.username})
    return response


@router.post("/logout", summary="Elimina la cookie de sesión")
async def logout() -> JSONResponse:
    response = JSONResponse({"success": True})
    response.delete_cookie(settings.auth_cookie_name, path="/")
    return response
