"""Derived views over store snapshots. Stateless, recomputed on every call."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from ..core.types import PLACEHOLDER_NAME, SaleRecord, ShippingLocation


def line_total(record: SaleRecord) -> float:
    return record.line_total


def total_amount(records: Sequence[SaleRecord]) -> float:
    return sum((line_total(r) for r in records), 0.0)


def count(records: Sequence[object]) -> int:
    return len(records)


def location_name(locations: Sequence[ShippingLocation], location_id: Optional[str]) -> str:
    """Name of the location with ``location_id``, or the placeholder when absent or deleted."""
    if location_id:
        for loc in locations:
            if loc.id == location_id:
                return loc.name
    return PLACEHOLDER_NAME


@dataclass(frozen=True)
class DashboardSummary:
    total_amount: float
    sale_count: int
    location_count: int


@dataclass(frozen=True)
class HistoryRow:
    id: str
    created_at: datetime
    name: str
    location_name: str
    unit_price: float
    quantity: int
    line_total: float


def summarize(
    sales: Sequence[SaleRecord], locations: Sequence[ShippingLocation]
) -> DashboardSummary:
    return DashboardSummary(
        total_amount=total_amount(sales),
        sale_count=count(sales),
        location_count=count(locations),
    )


def history(
    sales: Sequence[SaleRecord], locations: Sequence[ShippingLocation]
) -> List[HistoryRow]:
    """One row per sale in the order given, with its location resolved."""
    return [
        HistoryRow(
            id=r.id,
            created_at=r.created_at,
            name=r.name,
            location_name=location_name(locations, r.location_id),
            unit_price=r.unit_price,
            quantity=r.quantity,
            line_total=line_total(r),
        )
        for r in sales
    ]
