"""Clock used to stamp new sale records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from .utils import utc_now


@dataclass
class SystemClock:
    def now(self) -> datetime:
        return utc_now()


@dataclass
class ManualClock:
    """Deterministic clock for tests; advances by ``step`` on each read."""

    start: datetime = field(default_factory=utc_now)
    step: timedelta = timedelta(seconds=1)
    _current: Optional[datetime] = field(default=None, repr=False)

    def now(self) -> datetime:
        if self._current is None:
            self._current = self.start
        else:
            self._current = self._current + self.step
        return self._current
