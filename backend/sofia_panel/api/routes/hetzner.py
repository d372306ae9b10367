"""Ruta de costos de servidores."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from sofia_panel.core.logging import get_logger
from sofia_panel.services import hetzner

router = APIRouter(prefix="/api/hetzner", tags=["hetzner"])

logger = get_logger(__name__)


@router.get("", summary="Servidores y costo mensual total")
async def list_servers() -> dict[str, Any]:
    try:
        client = hetzner.HetznerClient()
        servers = await client.list_servers()
    except hetzner.HetznerError as exc:
        logger.warning("hetzner.servers_degraded", extra={"error": str(exc)})
        return {
            "error": str(exc),
            "servers": [],
            "totalMonthlyCost": 0,
            "currency": hetzner.CURRENCY,
        }

    return {
        "servers": [server.model_dump(by_alias=True) for server in servers],
        "totalMonthlyCost": float(hetzner.total_monthly_cost(servers)),
        "currency": hetzner.CURRENCY,
        "provider": hetzner.PROVIDER,
        "fetchedAt": datetime.now(timezone.utc).isoformat(),
    }
