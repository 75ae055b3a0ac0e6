"""Core record types for the sales log.

Records are immutable once created; stores replace collections, never fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .utils import parse_timestamp

# shown for a sale whose location is unset or has been deleted
PLACEHOLDER_NAME = "-"


@dataclass(frozen=True)
class SaleRecord:
    id: str
    name: str
    unit_price: float
    quantity: int
    created_at: datetime
    location_id: Optional[str] = None  # weak reference to ShippingLocation.id

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_raw(self) -> Dict[str, Any]:
        raw: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.unit_price,
            "quantity": self.quantity,
            "timestamp": self.created_at,
        }
        if self.location_id is not None:
            raw["locationId"] = self.location_id
        return raw

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "SaleRecord":
        ts = raw["timestamp"]
        if not isinstance(ts, datetime):
            ts = parse_timestamp(ts)
        location_id = raw.get("locationId")
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            unit_price=float(raw["price"]),
            quantity=int(raw["quantity"]),
            created_at=ts,
            location_id=str(location_id) if location_id else None,
        )


@dataclass(frozen=True)
class ShippingLocation:
    id: str
    name: str
    address: str = ""

    def to_raw(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "address": self.address}

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "ShippingLocation":
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            address=str(raw.get("address", "")),
        )
