"""Persistence bridge between the in-memory stores and a key-value backend.

Each collection lives under its own key as a JSON array. Loading never raises:
a missing key, unparseable text or a failing backend all come back as an
``Empty`` result carrying the reason, so callers decide explicitly what an
empty collection means (e.g. whether to seed defaults).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from ..core.errors import PersistenceError
from ..core.utils import format_timestamp, parse_timestamp
from .backend import KeyValueBackend
from .metrics import inc_persist_failure

logger = logging.getLogger(__name__)

SALES_KEY = "sales_items"
LOCATIONS_KEY = "shipping_locations"

# persisted fields held in memory as datetime
TIMESTAMP_FIELDS = ("timestamp",)

T = TypeVar("T")
Decoder = Callable[[Dict[str, Any]], T]


class EmptyReason(str, Enum):
    MISSING = "missing"
    UNPARSEABLE = "unparseable"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class Parsed(Generic[T]):
    records: List[T]

    @property
    def is_missing(self) -> bool:
        return False


@dataclass(frozen=True)
class Empty:
    reason: EmptyReason
    error: Optional[str] = None
    records: List[Any] = field(default_factory=list)

    @property
    def is_missing(self) -> bool:
        return self.reason is EmptyReason.MISSING


LoadResult = Union[Parsed[T], Empty]


def _encode_default(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return format_timestamp(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _to_raw(record: Any) -> Dict[str, Any]:
    to_raw = getattr(record, "to_raw", None)
    if to_raw is not None:
        return to_raw()
    if isinstance(record, dict):
        return record
    raise TypeError(f"cannot persist {type(record).__name__}")


def encode(records: Iterable[Any]) -> str:
    return json.dumps([_to_raw(r) for r in records], default=_encode_default, ensure_ascii=False)


def decode(text: str) -> List[Dict[str, Any]]:
    """Parse a stored JSON array, reconstituting timestamp fields.

    Raises ValueError when the text is not an array of objects or a
    timestamp field is not a valid timestamp.
    """
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    out: List[Dict[str, Any]] = []
    for item in data:
        if not isinstance(item, dict):
            raise ValueError(f"expected JSON objects in array, got {type(item).__name__}")
        for name in TIMESTAMP_FIELDS:
            if name in item:
                item[name] = parse_timestamp(item[name])
        out.append(item)
    return out


class PersistenceBridge:
    def __init__(self, backend: KeyValueBackend):
        self.backend = backend
        self.last_error: Optional[PersistenceError] = None

    def load(self, key: str, decoder: Optional[Decoder] = None) -> LoadResult:
        try:
            text = self.backend.get(key)
        except Exception as e:
            logger.warning("failed to read %r from %s backend: %s", key, self.backend.name, e)
            return Empty(EmptyReason.UNREADABLE, error=str(e))
        if text is None:
            logger.debug("no stored entry for %r", key)
            return Empty(EmptyReason.MISSING)
        try:
            raw = decode(text)
            records = [decoder(r) for r in raw] if decoder is not None else raw
        except Exception as e:
            # any decode failure (bad JSON, wrong shape, overflow, nesting) means no data
            logger.warning("discarding unparseable entry %r: %s", key, e)
            return Empty(EmptyReason.UNPARSEABLE, error=str(e))
        logger.debug("loaded %d records from %r", len(records), key)
        return Parsed(records)

    def save(self, key: str, records: Iterable[Any]) -> None:
        """Overwrite ``key`` with the whole collection. Raises PersistenceError."""
        text = encode(records)
        try:
            self.backend.set(key, text)
        except Exception as e:
            raise PersistenceError(
                f"failed to write {key!r} to {self.backend.name} backend: {e}",
                code="write_failed",
                details={"key": key},
            ) from e

    def write_through(self, key: str, records: Iterable[Any]) -> bool:
        """Save, logging and recording a failure instead of raising it."""
        try:
            self.save(key, records)
        except PersistenceError as e:
            self.last_error = e
            inc_persist_failure(key)
            logger.error("%s; keeping in-memory state", e)
            return False
        return True
