"""App bootstrap: wire a backend, the persistence bridge and both stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.types import ShippingLocation
from ..io.backend import JsonFileBackend, KeyValueBackend, MemoryBackend
from ..io.persistence import PersistenceBridge
from ..report.aggregation import DashboardSummary, summarize
from ..state.locations import DEFAULT_LOCATION, ShippingLocationsStore
from ..state.sales import SaleRecordsStore
from .config import Settings


@dataclass
class Ledger:
    bridge: PersistenceBridge
    sales: SaleRecordsStore
    locations: ShippingLocationsStore

    def summary(self) -> DashboardSummary:
        return summarize(self.sales.list(), self.locations.list())


def build_backend(settings: Settings) -> KeyValueBackend:
    if settings.backend == "memory":
        return MemoryBackend()
    return JsonFileBackend(settings.data_dir)


def build_ledger(
    settings: Optional[Settings] = None, backend: Optional[KeyValueBackend] = None
) -> Ledger:
    settings = settings or Settings()
    bridge = PersistenceBridge(backend or build_backend(settings))
    default = ShippingLocation(
        id=DEFAULT_LOCATION.id,
        name=settings.default_location_name,
        address=settings.default_location_address,
    )
    return Ledger(
        bridge=bridge,
        sales=SaleRecordsStore(bridge),
        locations=ShippingLocationsStore(bridge, default=default),
    )
