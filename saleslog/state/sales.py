"""Sale records store: newest record first, written through on every change."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, List, Optional, Tuple

from ..core.clock import SystemClock
from ..core.types import SaleRecord
from ..core.utils import new_id, parse_price, parse_quantity, require_text
from ..io.metrics import inc_mutation, set_sales_total
from ..io.persistence import SALES_KEY, PersistenceBridge

logger = logging.getLogger(__name__)


class SaleRecordsStore:
    collection = "sales"

    def __init__(
        self,
        bridge: PersistenceBridge,
        clock: Optional[Any] = None,
        id_factory: Callable[[], str] = new_id,
        key: str = SALES_KEY,
    ):
        self.bridge = bridge
        self.clock = clock or SystemClock()
        self.id_factory = id_factory
        self.key = key
        result = bridge.load(key, SaleRecord.from_raw)
        self._records: List[SaleRecord] = list(result.records)
        set_sales_total(self._total())

    def add(
        self,
        name: str,
        unit_price: Any,
        quantity: Any = 1,
        location_id: Optional[str] = None,
    ) -> SaleRecord:
        # validate everything before touching the collection
        name = require_text(name, "name")
        price = parse_price(unit_price)
        qty = parse_quantity(quantity)
        record = SaleRecord(
            id=self.id_factory(),
            name=name,
            unit_price=price,
            quantity=qty,
            created_at=self.clock.now(),
            location_id=location_id or None,
        )
        self._records.insert(0, record)
        logger.info("added sale %s: %s x%d @ %.2f", record.id, name, qty, price)
        self._changed("add")
        return record

    def remove(self, record_id: str) -> None:
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        if len(self._records) == before:
            logger.debug("remove: no sale with id %s", record_id)
        self._changed("remove")

    def clear(self) -> None:
        logger.info("clearing %d sale records", len(self._records))
        self._records = []
        self._changed("clear")

    def list(self) -> Tuple[SaleRecord, ...]:
        return tuple(self._records)

    def get(self, record_id: str) -> Optional[SaleRecord]:
        for r in self._records:
            if r.id == record_id:
                return r
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SaleRecord]:
        return iter(self.list())

    def _total(self) -> float:
        return sum(r.line_total for r in self._records)

    def _changed(self, op: str) -> None:
        inc_mutation(self.collection, op)
        set_sales_total(self._total())
        self.bridge.write_through(self.key, self._records)
