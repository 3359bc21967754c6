from __future__ import annotations

from typing import Any, Sequence

from ..fields import Field
from ..shapes import TimeSeries
from .base import percent_change

name = "table"
title = "Table"


def from_time_series(shape: TimeSeries, fields: Sequence[Field], window: int) -> dict[str, Any]:
    """One row per period, newest first, limited to ``window`` periods.

    ``change`` compares each row with the next older period in the window, so
    the oldest row in the window reports 0.
    """
    dates = shape.dates[:window]
    rows = []
    for i, date in enumerate(dates):
        record = shape.series[date]
        older = shape.series[dates[i + 1]] if i + 1 < len(dates) else None
        row: dict[str, Any] = {"date": date}
        for f in fields:
            if f.key == "change":
                row[f.key] = percent_change(
                    TimeSeries.lookup(record, "close"),
                    TimeSeries.lookup(older, "close"),
                )
            elif f.key != "date":
                value = TimeSeries.lookup(record, f.key)
                if value is not None:
                    row[f.key] = value
        rows.append(row)
    return {"rows": rows}


def from_generic(payload: Any, fields: Sequence[Field]) -> dict[str, Any]:
    # no series to tabulate without a recognised time-series shape
    return {"rows": []}
