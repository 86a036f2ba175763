"""Random values for generating test rows."""

from __future__ import annotations

import random
from datetime import datetime, timedelta

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
YEAR_FORMAT = "%Y"
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_ZERO_TIME = datetime(1, 1, 1)


def _parse(value: str, fmt: str) -> datetime:
    try:
        return datetime.strptime(value, fmt)
    except ValueError:
        return _ZERO_TIME


def _format_date(t: datetime) -> str:
    return f"{t.year:04d}-{t.month:02d}-{t.day:02d}"


def _format_time(t: datetime) -> str:
    return f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"


def rand_int(low: int, high: int) -> int:
    """A random integer in [low, high]; raises ValueError if the range is empty."""
    return low + random.randrange(high - low + 1)


def rand_int64(low: int, high: int) -> int:
    """A random 64-bit integer in [low, high]."""
    return low + random.randrange(high - low + 1)


def rand_float64(low: int, high: int, prec: int) -> float:
    """A random whole number in [low, high] as a float rounded to ``prec`` digits."""
    value = float(rand_int64(low, high))
    if prec < 0:
        return value
    return float(f"{value:.{prec}f}")


def rand_bool() -> bool:
    return rand_int(0, 1) == 1


def rand_string(n: int) -> str:
    """A random alphanumeric string of length n."""
    return "".join(random.choices(ALPHABET, k=max(n, 0)))


def rand_duration(n: timedelta) -> timedelta:
    """A random duration between zero and n."""
    return timedelta(microseconds=rand_int(0, n // timedelta(microseconds=1)))


def rand_date(low: str, high: str) -> str:
    """A random date; in [low, high], within a year after low, or this year."""
    if not low:
        year = datetime.now().year
        return f"{year:04d}-{rand_int(1, 12):02d}-{rand_int(1, 28):02d}"

    min_time = _parse(low, DATE_FORMAT)
    if not high:
        return _format_date(min_time + timedelta(days=rand_int(0, 365)))

    max_time = _parse(high, DATE_FORMAT)
    days = int((max_time - min_time).total_seconds() / 3600 / 24)
    return _format_date(min_time + timedelta(days=rand_int(0, days)))


def rand_time(low: str, high: str) -> str:
    """A random time of day, in [low, high] when both are given."""
    if not low or not high:
        return f"{rand_int(0, 23):02d}:{rand_int(0, 59):02d}:{rand_int(0, 59):02d}"

    min_time = _parse(low, TIME_FORMAT)
    max_time = _parse(high, TIME_FORMAT)
    seconds = int((max_time - min_time).total_seconds())
    return _format_time(min_time + timedelta(seconds=rand_int(0, seconds)))


def rand_timestamp(low: str, high: str) -> str:
    """A random timestamp; in [low, high], within a year after low, or this year."""
    if not low:
        year = datetime.now().year
        return (
            f"{year:04d}-{rand_int(1, 12):02d}-{rand_int(1, 28):02d} "
            f"{rand_int(0, 23):02d}:{rand_int(0, 59):02d}:{rand_int(0, 59):02d}"
        )

    min_time = _parse(low, DATETIME_FORMAT)
    if not high:
        t = min_time + timedelta(days=rand_int(0, 365))
        return f"{_format_date(t)} {_format_time(t)}"

    max_time = _parse(high, DATETIME_FORMAT)
    seconds = int((max_time - min_time).total_seconds())
    t = min_time + timedelta(seconds=rand_int(0, seconds))
    return f"{_format_date(t)} {_format_time(t)}"


def rand_year(low: str, high: str) -> str:
    """A random year, in [low, high] when both are given, else within ten years back."""
    if not low or not high:
        return f"{datetime.now().year - rand_int(0, 10):04d}"

    min_time = _parse(low, YEAR_FORMAT)
    max_time = _parse(high, YEAR_FORMAT)
    seconds = int((max_time - min_time).total_seconds())
    t = min_time + timedelta(seconds=rand_int(0, seconds))
    return f"{t.year:04d}"