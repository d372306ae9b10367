"""Normalización de fechas heterogéneas provenientes de los servicios externos.

Chatwoot y compañía entregan fechas como ISO, epoch en segundos, epoch en
milisegundos o cadenas numéricas. Todo pasa por `parse_timestamp`, que nunca
lanza excepciones: lo que no se puede interpretar se muestra como `SENTINEL`.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger

logger = get_logger(__name__)

SENTINEL = "-"
DISPLAY_FORMAT = "%d/%m/%Y, %H:%M"

# Por debajo de este valor un epoch se interpreta en segundos.
EPOCH_MILLIS_THRESHOLD = 10_000_000_000
MIN_VALID_YEAR = 2000

_INTEGER_RE = re.compile(r"-?\d+")
_FALLBACK_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%b %d, %Y %H:%M:%S",
    "%b %d, %Y",
    "%B %d, %Y",
)


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("timestamps.unknown_timezone", extra={"display_timezone": name})
        return timezone.utc


def display_timezone() -> tzinfo:
    """Zona horaria configurada para mostrar fechas y calcular el día actual."""
    return _zone(settings.display_timezone)


def local_now() -> datetime:
    return datetime.now(display_timezone())


def day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Medianoche local de hoy (inclusive) y de mañana (exclusiva)."""
    current = (now or local_now()).astimezone(display_timezone())
    start = current.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _is_integer_text(value: str) -> bool:
    return bool(_INTEGER_RE.fullmatch(value)) and str(int(value)) == value


def _from_epoch(value: int | float) -> datetime:
    millis = value * 1000 if value < EPOCH_MILLIS_THRESHOLD else value
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def _parse_date_string(text: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None

    if parsed is None:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            parsed = None

    if parsed is None:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=display_timezone())
    return parsed


def parse_timestamp(value: Any) -> datetime | None:
    """Interpreta `value` como instante, o retorna None si no es una fecha válida.

    - None, cadenas vacías y booleanos no son fechas.
    - Números y cadenas enteras exactas son epoch: segundos si el valor es menor
      a `EPOCH_MILLIS_THRESHOLD`, milisegundos en otro caso.
    - Cualquier otra cadena se intenta como ISO 8601, RFC 2822 o formatos comunes.
    - Fechas anteriores al año 2000 se descartan (epoch mal interpretado).
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float)):
            moment = _from_epoch(value)
        elif isinstance(value, str):
            if not value.strip():
                return None
            if _is_integer_text(value):
                moment = _from_epoch(int(value))
            else:
                moment = _parse_date_string(value.strip())
        else:
            return None
    except (ValueError, OverflowError, OSError):
        return None

    if moment is None:
        return None
    try:
        moment = moment.astimezone(display_timezone())
    except (ValueError, OverflowError):
        return None
    return moment if moment.year >= MIN_VALID_YEAR else None


def format_timestamp(value: Any) -> str:
    """Representación para pantalla (`dd/mm/aaaa, hh:mm`) o `SENTINEL`."""
    moment = parse_timestamp(value)
    if moment is None:
        return SENTINEL
    return moment.strftime(DISPLAY_FORMAT)
