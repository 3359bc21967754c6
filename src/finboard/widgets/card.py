from __future__ import annotations

from typing import Any, Sequence

from ..fields import Field
from ..shapes import TimeSeries
from .base import percent_change, resolve_path

name = "card"
title = "Card"


def from_time_series(shape: TimeSeries, fields: Sequence[Field], window: int) -> dict[str, Any]:
    latest = shape.record(0)
    previous = shape.record(1)
    out: dict[str, Any] = {}
    for f in fields:
        if f.key == "change":
            out[f.key] = percent_change(
                TimeSeries.lookup(latest, "close"),
                TimeSeries.lookup(previous, "close"),
            )
            continue
        if f.key == "date":
            continue
        value = TimeSeries.lookup(latest, f.key)
        if value is not None:
            out[f.key] = value
    # some consumers read the latest close as "price"
    out["price"] = out.get("close")
    return out


def from_generic(payload: Any, fields: Sequence[Field]) -> dict[str, Any]:
    return {f.key: resolve_path(payload, f.path) for f in fields}
