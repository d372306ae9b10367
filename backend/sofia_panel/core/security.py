"""Control de acceso del panel: credenciales fijas y cookie compartida.

No hay identidad por usuario ni firma de la cookie: cualquier valor no vacío
en la cookie configurada habilita el acceso hasta que expire su max-age.
"""

import hmac

from sofia_panel.core.config import settings

LOGIN_PATH = "/login"
PUBLIC_PATHS: tuple[str, ...] = (LOGIN_PATH, "/api/auth/login", "/api/health")
STATIC_PREFIXES: tuple[str, ...] = ("/static/", "/favicon.ico")


def is_public_path(path: str) -> bool:
    """Rutas que no requieren cookie: login, health y archivos estáticos."""
    if any(path == public or path.startswith(f"{public}/") for public in PUBLIC_PATHS):
        return True
    if path.startswith(STATIC_PREFIXES):
        return True
    # Cualquier archivo con extensión (css, js, png...) se considera estático.
    return "." in path.rsplit("/", 1)[-1]


def has_session(cookie_value: str | None) -> bool:
    return bool(cookie_value)


def check_credentials(username: str, password: str) -> bool:
    """Compara contra el usuario y la contraseña configurados."""
    user_ok = hmac.compare_digest(username.encode(), settings.dashboard_user.encode())
    password_ok = hmac.compare_digest(password.encode(), settings.dashboard_password.encode())
    return user_ok and password_ok


def mask_secret(value: str | None) -> str | None:
    """Enmascara secretos para logging seguro."""
    if not value:
        return value
    if len(value) <= 4:
        return "***"
    return f"{value[:2]}***{value[-2:]}"
