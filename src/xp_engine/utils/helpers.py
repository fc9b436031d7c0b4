# src/xp_engine/utils/helpers.py

import math
from datetime import datetime, timezone
from statistics import StatisticsError, correlation, fmean, linear_regression, pstdev
from typing import List, Sequence


def now_utc() -> datetime:
    """Returns the current time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Treats naive datetimes as UTC so they compare with aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clips a value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def format_number(value: float) -> str:
    """Formats a number without a trailing '.0' for integral values."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def humanize(name: str) -> str:
    """Turns a camelCase field name into lower-case words."""
    words = []
    current = ""
    for char in name:
        if char.isupper() and current:
            words.append(current)
            current = char.lower()
        else:
            current += char.lower()
    if current:
        words.append(current)
    return " ".join(words)


def safe_mean(values: Sequence[float]) -> float:
    """Calculates the mean of a list, returning 0 for empty lists."""
    return fmean(values) if values else 0.0


def safe_pstdev(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    return pstdev(values) if len(values) > 1 else 0.0


def safe_correlation(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson correlation, 0 when either series is constant or too short."""
    if len(xs) < 2:
        return 0.0
    try:
        return correlation(xs, ys)
    except StatisticsError:
        # at least one input is constant
        return 0.0


def linear_slope(values: List[float]) -> float:
    """Least-squares slope of values against their position."""
    if len(values) < 2:
        return 0.0
    return linear_regression(range(len(values)), values).slope
