from __future__ import annotations

from typing import Any, Sequence

from ..fields import Field
from ..shapes import TimeSeries
from .base import percent_change

name = "chart"
title = "Chart"


def from_time_series(shape: TimeSeries, fields: Sequence[Field], window: int) -> dict[str, Any]:
    # select the most recent periods, then plot oldest to newest;
    # change looks past the window to the next older period in the response
    dates = shape.dates[:window]
    points = []
    for i, date in enumerate(dates):
        record = shape.series[date]
        older = shape.record(i + 1)
        point = TimeSeries.ohlcv(record)
        point["change"] = percent_change(point["close"], TimeSeries.lookup(older, "close"))
        point["date"] = date
        points.append(point)
    points.reverse()
    return {"chart_data": points}


def from_generic(payload: Any, fields: Sequence[Field]) -> dict[str, Any]:
    return {"chart_data": []}
