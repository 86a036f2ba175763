"""Per-column generator of unique values."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from dbtoolkit.importer.rand import ALPHABET

DEFAULT_STEP = 1


def _add_years(t: datetime, years: int) -> datetime:
    try:
        return t.replace(year=t.year + years)
    except ValueError:
        # 29 February in a non-leap year rolls over to 1 March.
        return t.replace(year=t.year + years, month=3, day=1)


@dataclass
class Datum:
    """Thread-safe source of increasing values for a unique column."""

    int_value: int = -1
    min_int_value: int = 0
    max_int_value: int = 0
    time_value: datetime | None = None
    step: int = DEFAULT_STEP
    init: bool = False
    use_range: bool = False
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def set_init_int64_value(self, step: int, low: int, high: int) -> None:
        """Set the step and range once; later calls are ignored."""
        with self._lock:
            if self.init:
                return
            self.step = step
            if low != -1:
                self.min_int_value = low
                self.int_value = low
            if low < high:
                self.max_int_value = high
                self.use_range = True
            self.init = True

    def uniq_int64(self) -> int:
        """The next value; stays at the last one once the range is exhausted."""
        with self._lock:
            data = self.int_value
            if self.use_range and self.int_value + self.step > self.max_int_value:
                return data
            self.int_value += self.step
            return data

    def uniq_float64(self) -> float:
        return float(self.uniq_int64())

    def uniq_string(self, n: int) -> str:
        """The next counter value written in base 62, at most n characters."""
        with self._lock:
            self.int_value += 1
            data = self.int_value

        chars = []
        base = len(ALPHABET)
        while n != 0:
            data, idx = divmod(data, base)
            chars.append(ALPHABET[idx])
            if data == 0:
                break
            n -= 1
        return "".join(reversed(chars))

    def _advance(self, delta) -> datetime:
        if self.time_value is None:
            self.time_value = datetime.now()
        else:
            self.time_value = delta(self.time_value)
        return self.time_value

    def uniq_time(self) -> str:
        with self._lock:
            t = self._advance(lambda v: v + timedelta(seconds=self.step))
            return f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"

    def uniq_date(self) -> str:
        with self._lock:
            t = self._advance(lambda v: v + timedelta(days=self.step))
            return f"{t.year:04d}-{t.month:02d}-{t.day:02d}"

    def uniq_timestamp(self) -> str:
        with self._lock:
            t = self._advance(lambda v: v + timedelta(seconds=self.step))
            return (
                f"{t.year:04d}-{t.month:02d}-{t.day:02d} "
                f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
            )

    def uniq_year(self) -> str:
        with self._lock:
            t = self._advance(lambda v: _add_years(v, self.step))
            return f"{t.year:04d}"