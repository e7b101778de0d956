"""Schemas for the price quote endpoint."""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from ._strict_base import StrictModel, StrictRequestModel
from .booking import parse_service_selection


class QuoteRequest(StrictRequestModel):
    package_id: Optional[int] = Field(None, gt=0)
    services: Dict[int, int] = Field(
        default_factory=dict,
        description="Selected services: {service_id: true|false|quantity}",
    )

    @field_validator("services", mode="before")
    @classmethod
    def _normalize_services(cls, value: object) -> object:
        return parse_service_selection(value)


class QuoteLineResponse(StrictModel):
    service_id: int
    name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


class QuoteResponse(StrictModel):
    total: Decimal
    package_id: Optional[int] = None
    package_name: Optional[str] = None
    lines: List[QuoteLineResponse] = Field(default_factory=list)

    @classmethod
    def from_quote(cls, quote) -> "QuoteResponse":
        return cls(
            total=quote.total,
            package_id=quote.package_id,
            package_name=quote.package_name,
            lines=[
                QuoteLineResponse(
                    service_id=line.service_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    subtotal=line.subtotal,
                )
                for line in quote.lines
            ],
        )
