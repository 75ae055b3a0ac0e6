import json
from datetime import datetime, timezone

import pytest
from prometheus_client import REGISTRY

from saleslog.core.errors import PersistenceError
from saleslog.core.types import SaleRecord, ShippingLocation
from saleslog.io.backend import JsonFileBackend, MemoryBackend
from saleslog.io.persistence import (
    LOCATIONS_KEY,
    SALES_KEY,
    Empty,
    EmptyReason,
    Parsed,
    PersistenceBridge,
)
from saleslog.state.sales import SaleRecordsStore


class BrokenBackend(MemoryBackend):
    def get(self, key):
        raise OSError("disk on fire")

    def set(self, key, value):
        raise OSError("read-only filesystem")


def _sales():
    t0 = datetime(2024, 5, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)
    return [
        SaleRecord("b", "Gadget", 4.25, 2, t0, location_id="loc-1"),
        SaleRecord("a", "Widget", 10.5, 3, t0),
    ]


def test_missing_key_is_empty_missing():
    result = PersistenceBridge(MemoryBackend()).load(SALES_KEY)
    assert isinstance(result, Empty)
    assert result.is_missing
    assert result.records == []


def test_round_trip_sales():
    bridge = PersistenceBridge(MemoryBackend())
    records = _sales()
    bridge.save(SALES_KEY, records)
    result = bridge.load(SALES_KEY, SaleRecord.from_raw)
    assert isinstance(result, Parsed)
    assert result.records == records
    assert isinstance(result.records[0].created_at, datetime)


def test_round_trip_locations_on_disk(tmp_path):
    bridge = PersistenceBridge(JsonFileBackend(tmp_path / "data"))
    locs = [ShippingLocation("1", "Storefront", ""), ShippingLocation("2", "Warehouse A", "123 St")]
    bridge.save(LOCATIONS_KEY, locs)
    assert (tmp_path / "data" / "shipping_locations.json").exists()
    assert bridge.load(LOCATIONS_KEY, ShippingLocation.from_raw).records == locs


def test_saved_layout():
    backend = MemoryBackend()
    PersistenceBridge(backend).save(SALES_KEY, _sales())
    data = json.loads(backend.get(SALES_KEY))
    assert data[0] == {
        "id": "b",
        "name": "Gadget",
        "price": 4.25,
        "quantity": 2,
        "timestamp": "2024-05-01T12:00:00.250000Z",
        "locationId": "loc-1",
    }
    assert "locationId" not in data[1]


def test_load_reads_timestamps_without_decoder():
    backend = MemoryBackend({SALES_KEY: '[{"id": "x", "timestamp": "2024-01-01T00:00:00.000Z"}]'})
    result = PersistenceBridge(backend).load(SALES_KEY)
    assert result.records[0]["timestamp"] == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_corrupt_json_degrades_to_empty():
    backend = MemoryBackend({SALES_KEY: "{not json"})
    result = PersistenceBridge(backend).load(SALES_KEY, SaleRecord.from_raw)
    assert isinstance(result, Empty)
    assert result.reason is EmptyReason.UNPARSEABLE
    assert not result.is_missing
    assert result.records == []


def test_wrong_shape_degrades_to_empty():
    huge_qty = (
        '[{"id": "a", "name": "W", "price": 1, "quantity": 1e999,'
        ' "timestamp": "2024-01-01T00:00:00.000Z"}]'
    )
    deeply_nested = "[" * 100000
    for text in [
        '{"id": 1}',
        "[1, 2]",
        '[{"id": "a"}]',
        '[{"timestamp": "yesterday"}]',
        huge_qty,
        deeply_nested,
    ]:
        backend = MemoryBackend({SALES_KEY: text})
        result = PersistenceBridge(backend).load(SALES_KEY, SaleRecord.from_raw)
        assert isinstance(result, Empty), text[:40]
        assert result.reason is EmptyReason.UNPARSEABLE


def test_store_starts_empty_on_overflowing_entry():
    backend = MemoryBackend(
        {
            SALES_KEY: '[{"id": "a", "name": "W", "price": 1, "quantity": 1e999,'
            ' "timestamp": "2024-01-01T00:00:00.000Z"}]'
        }
    )
    assert SaleRecordsStore(PersistenceBridge(backend)).list() == ()


def test_unreadable_backend_degrades_to_empty():
    result = PersistenceBridge(BrokenBackend()).load(SALES_KEY)
    assert result.reason is EmptyReason.UNREADABLE
    assert "disk on fire" in result.error


def test_save_failure_raises_persistence_error():
    bridge = PersistenceBridge(BrokenBackend())
    with pytest.raises(PersistenceError) as exc:
        bridge.save(SALES_KEY, _sales())
    assert exc.value.code == "write_failed"
    assert exc.value.details == {"key": SALES_KEY}


def test_write_through_swallows_and_counts_failure():
    bridge = PersistenceBridge(BrokenBackend())
    labels = {"key": SALES_KEY}
    before = REGISTRY.get_sample_value("saleslog_persist_failures_total", labels) or 0.0
    assert bridge.write_through(SALES_KEY, _sales()) is False
    assert isinstance(bridge.last_error, PersistenceError)
    assert REGISTRY.get_sample_value("saleslog_persist_failures_total", labels) == before + 1


def test_file_backend_keys_and_delete(tmp_path):
    backend = JsonFileBackend(tmp_path)
    assert list(backend.keys()) == []
    backend.set("sales_items", "[]")
    assert "sales_items" in backend
    assert list(backend.keys()) == ["sales_items"]
    backend.delete("sales_items")
    assert backend.get("sales_items") is None
