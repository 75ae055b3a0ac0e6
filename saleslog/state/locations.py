"""Shipping locations store: insertion ordered, seeded on first run."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, Tuple

from ..core.types import ShippingLocation
from ..core.utils import new_id, require_text
from ..io.metrics import inc_mutation
from ..io.persistence import LOCATIONS_KEY, PersistenceBridge
from ..report.aggregation import location_name

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = ShippingLocation(id="1", name="Storefront", address="Main branch")


class ShippingLocationsStore:
    collection = "locations"

    def __init__(
        self,
        bridge: PersistenceBridge,
        default: Optional[ShippingLocation] = DEFAULT_LOCATION,
        id_factory: Callable[[], str] = new_id,
        key: str = LOCATIONS_KEY,
    ):
        self.bridge = bridge
        self.id_factory = id_factory
        self.key = key
        result = bridge.load(key, ShippingLocation.from_raw)
        self._locations: List[ShippingLocation] = list(result.records)
        # only a missing entry seeds; a stored empty list is authoritative
        if result.is_missing and default is not None:
            logger.info("no stored locations, seeding default %r", default.name)
            self._locations = [default]
            self._changed("seed")

    def add(self, name: str, address: str) -> ShippingLocation:
        location = ShippingLocation(
            id=self.id_factory(),
            name=require_text(name, "name"),
            address=require_text(address, "address"),
        )
        self._locations.append(location)
        logger.info("added location %s: %s", location.id, location.name)
        self._changed("add")
        return location

    def remove(self, location_id: str) -> None:
        # sale records keep their location_id; resolve_name falls back to the placeholder
        self._locations = [loc for loc in self._locations if loc.id != location_id]
        self._changed("remove")

    def list(self) -> Tuple[ShippingLocation, ...]:
        return tuple(self._locations)

    def get(self, location_id: Optional[str]) -> Optional[ShippingLocation]:
        if not location_id:
            return None
        for loc in self._locations:
            if loc.id == location_id:
                return loc
        return None

    def resolve_name(self, location_id: Optional[str] = None) -> str:
        return location_name(self._locations, location_id)

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[ShippingLocation]:
        return iter(self.list())

    def _changed(self, op: str) -> None:
        inc_mutation(self.collection, op)
        self.bridge.write_through(self.key, self._locations)
