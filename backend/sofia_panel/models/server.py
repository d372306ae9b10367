"""Servidores cloud y su costo mensual."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_serializer
from pydantic.alias_generators import to_camel

ServerStatus = Literal["running", "other"]


class Server(BaseModel):
    """Servidor del catálogo con el precio mensual resuelto para su ubicación."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    name: str | None = None
    status: ServerStatus = "other"
    type: str | None = None
    type_name: str | None = None
    cores: int | None = None
    memory: float | None = None
    disk: float | None = None
    location: str | None = None
    country: str | None = None
    ip: str | None = None
    monthly_price: Decimal = Decimal("0")
    currency: str = "EUR"
    created: str | None = None

    @field_serializer("monthly_price")
    def _serialize_price(self, value: Decimal) -> float:
        return float(value)
