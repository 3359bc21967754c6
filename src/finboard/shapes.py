from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import math
import re
from typing import Any, Union

from dateutil import parser as dtparser

# Scan order matters: the first series key present wins.
TIME_SERIES_KEYS = (
    "Time Series (Daily)",
    "Weekly Time Series",
    "Monthly Time Series",
    "Time Series (5min)",
    "Time Series (15min)",
    "Time Series (30min)",
    "Time Series (60min)",
    "Time Series (1min)",
    "Weekly Adjusted Time Series",
    "Monthly Adjusted Time Series",
)
META_DATA_KEY = "Meta Data"

_ORDINAL = re.compile(r"^\d+\.\s*")


def strip_ordinal(sub_key: str) -> str:
    """``"1. open"`` -> ``"open"``."""
    return _ORDINAL.sub("", sub_key)


def to_number(value: Any) -> Any:
    """Parse numeric strings; anything else comes back untouched."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def _date_key(stamp: str) -> datetime:
    try:
        return dtparser.parse(stamp)
    except (ValueError, OverflowError):
        # unparseable stamps sort as oldest
        return datetime.min


def newest_first(stamps) -> list[str]:
    """Order timestamps by calendar date, most recent first."""
    parsed = [(_date_key(s), s) for s in stamps]
    parsed.sort(key=lambda pair: pair[0].replace(tzinfo=None), reverse=True)
    return [s for _, s in parsed]


@dataclass(frozen=True)
class TimeSeries:
    """A response keyed by timestamp, one OHLCV-like record per period."""

    key: str | None
    series: dict[str, dict[str, Any]] = field(default_factory=dict)
    dates: tuple[str, ...] = ()
    kind = "time_series"

    @property
    def is_empty(self) -> bool:
        return not self.dates

    def record(self, index: int) -> dict[str, Any] | None:
        if 0 <= index < len(self.dates):
            return self.series[self.dates[index]]
        return None

    @staticmethod
    def lookup(record: dict[str, Any] | None, key: str) -> Any:
        """First sub-key whose name contains ``key``, parsed as a number when possible."""
        if not record:
            return None
        for sub_key, value in record.items():
            if key in sub_key:
                return to_number(value)
        return None

    @classmethod
    def ohlcv(cls, record: dict[str, Any] | None) -> dict[str, Any]:
        volume = cls.lookup(record, "volume")
        return {
            "open": cls.lookup(record, "open"),
            "high": cls.lookup(record, "high"),
            "low": cls.lookup(record, "low"),
            "close": cls.lookup(record, "close"),
            "volume": int(volume) if isinstance(volume, float) and math.isfinite(volume) else volume,
        }


@dataclass(frozen=True)
class Generic:
    """Any other JSON body."""

    payload: Any
    kind = "generic"


ResponseShape = Union[TimeSeries, Generic]


def is_time_series(raw: Any) -> bool:
    if not isinstance(raw, dict):
        return False
    return META_DATA_KEY in raw or any(k in raw for k in TIME_SERIES_KEYS)


def detect_shape(raw: Any) -> ResponseShape:
    """Classify a parsed response once; callers branch on the result's type."""
    if not is_time_series(raw):
        return Generic(payload=raw)

    for key in TIME_SERIES_KEYS:
        if key in raw:
            bucket = raw[key]
            if not isinstance(bucket, dict):
                return TimeSeries(key=key)
            series = {d: rec for d, rec in bucket.items() if isinstance(rec, dict)}
            return TimeSeries(key=key, series=series, dates=tuple(newest_first(series)))
    return TimeSeries(key=None)
