"""Small utilities."""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import ValidationError


def new_id() -> str:
    return str(uuid.uuid4())


def require_text(value: Optional[str], field: str) -> str:
    """Return ``value`` stripped, raising ValidationError when it is blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", code="required", details={"field": field})
    return value.strip()


def parse_price(value: Any) -> float:
    """Parse a unit price from a number or its text form. Must be finite and >= 0."""
    if isinstance(value, bool):
        raise ValidationError("price must be a number", code="invalid", details={"field": "price"})
    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"price must be a number, got {value!r}", code="invalid", details={"field": "price"}
        ) from None
    if not math.isfinite(price) or price < 0:
        raise ValidationError(
            f"price must be zero or more, got {value!r}", code="range", details={"field": "price"}
        )
    return price


def parse_quantity(value: Any) -> int:
    """Parse a quantity. Accepts ints, integral floats and digit strings; must be >= 1."""
    if isinstance(value, bool):
        raise ValidationError("quantity must be a whole number", code="invalid", details={"field": "quantity"})
    qty: Optional[int] = None
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float) and value.is_integer():
        qty = int(value)
    elif isinstance(value, str):
        try:
            qty = int(value.strip())
        except ValueError:
            qty = None
    if qty is None:
        raise ValidationError(
            f"quantity must be a whole number, got {value!r}",
            code="invalid",
            details={"field": "quantity"},
        )
    if qty < 1:
        raise ValidationError(
            f"quantity must be at least 1, got {value!r}", code="range", details={"field": "quantity"}
        )
    return qty


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Canonical text form: ISO-8601 UTC with microseconds and a ``Z`` suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(text: str) -> datetime:
    """Inverse of format_timestamp; also reads ``Date.toJSON()`` text and offsets.

    Naive values are taken as UTC. Raises ValueError on anything else.
    """
    if not isinstance(text, str):
        raise ValueError(f"timestamp must be text, got {type(text).__name__}")
    s = text.strip()
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    ts = datetime.fromisoformat(s)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)
