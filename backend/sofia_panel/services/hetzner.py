"""Costos de los servidores en Hetzner Cloud."""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from sofia_panel.core.config import settings
from sofia_panel.core.logging import get_logger
from sofia_panel.models.server import Server
from sofia_panel.services.pagination import PAGE_SIZE, collect_pages

logger = get_logger("sofia_panel.upstream.hetzner")

CURRENCY = "EUR"
PROVIDER = "Hetzner Cloud"

# Código de ubicación del datacenter -> código de la tabla de precios.
LOCATION_PRICE_CODES: dict[str, str] = {
    "ash": "ash",  # Ashburn
    "hil": "hil",  # Hillsboro
    "fsn1": "fsn1",  # Falkenstein
    "nbg1": "nbg1",  # Nuremberg
    "hel1": "hel1",  # Helsinki
    "sin": "sin",  # Singapur
}


class HetznerError(RuntimeError):
    """Errores al consultar la API de Hetzner."""


class HetznerNotConfiguredError(HetznerError):
    """Falta HETZNER_API_TOKEN."""


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _decimal(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_text(value: Any) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value)


def resolve_monthly_price(prices: Any, location_code: str) -> Decimal:
    """Precio bruto mensual para la ubicación; sin coincidencia usa la primera entrada."""
    if not isinstance(prices, list):
        return Decimal("0")
    prices = [entry for entry in prices if isinstance(entry, dict)]
    if not prices:
        return Decimal("0")
    code = location_code.lower()
    price_location = LOCATION_PRICE_CODES.get(code, code)
    entry = next((p for p in prices if p.get("location") == price_location), prices[0])
    return _decimal(_dig(entry, "price_monthly", "gross"))


def build_server(raw: dict[str, Any]) -> Server:
    """Aplana un servidor del catálogo; los valores con tipo inesperado quedan en None."""
    location_code = _as_text(_dig(raw, "datacenter", "location", "name")) or ""
    return Server(
        id=_as_int(raw.get("id")),
        name=_as_text(raw.get("name")),
        status="running" if raw.get("status") == "running" else "other",
        type=_as_text(_dig(raw, "server_type", "description") or _dig(raw, "server_type", "name")),
        type_name=_as_text(_dig(raw, "server_type", "name")),
        cores=_as_int(_dig(raw, "server_type", "cores")),
        memory=_as_float(_dig(raw, "server_type", "memory")),
        disk=_as_float(_dig(raw, "server_type", "disk")),
        location=_as_text(
            _dig(raw, "datacenter", "location", "city") or _dig(raw, "datacenter", "name")
        ),
        country=_as_text(_dig(raw, "datacenter", "location", "country")),
        ip=_as_text(_dig(raw, "public_net", "ipv4", "ip")),
        monthly_price=resolve_monthly_price(_dig(raw, "server_type", "prices"), location_code),
        currency=CURRENCY,
        created=_as_text(raw.get("created")),
    )


def total_monthly_cost(servers: list[Server]) -> Decimal:
    return sum((server.monthly_price for server in servers), Decimal("0"))


class HetznerClient:
    """Lectura del catálogo de servidores del proyecto."""

    def __init__(
        self,
        *,
        api_token: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        api_token = api_token or settings.hetzner_api_token
        if not api_token:
            raise HetznerNotConfiguredError("Hetzner API token no configurado")
        self._api_token = api_token
        self._base_url = (base_url or settings.hetzner_api_url).rstrip("/")
        self._transport = transport

    async def fetch_page(self, page: int) -> list[dict[str, Any]]:
        url = f"{self._base_url}/servers"
        params = {"page": str(page), "per_page": str(PAGE_SIZE)}
        headers = {"Authorization": f"Bearer {self._api_token}"}
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.exception("hetzner.request_failed", extra={"page": page, "error": str(exc)})
            raise HetznerError(f"Error al conectar a Hetzner: {exc}") from exc

        if response.status_code >= 400:
            logger.error(
                "hetzner.response_error",
                extra={"page": page, "status": response.status_code, "body": response.text[:500]},
            )
            raise HetznerError(f"Hetzner API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise HetznerError(f"Respuesta inválida de Hetzner: {exc}") from exc
        servers = payload.get("servers") if isinstance(payload, dict) else None
        if not isinstance(servers, list):
            return []
        return [row for row in servers if isinstance(row, dict)]

    async def list_servers(self) -> list[Server]:
        rows = await collect_pages(self.fetch_page)
        return [build_server(row) for row in rows]
