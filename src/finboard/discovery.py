from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from .errors import NoTimeSeriesFound
from .fields import CHANGE_FIELD, SERIES_PREFIX, Field, describe, value_type
from .shapes import Generic, TimeSeries, detect_shape, strip_ordinal, to_number

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3


@dataclass(frozen=True)
class FieldCatalogue:
    fields: list[Field]
    chart_data: list[dict[str, Any]] = field(default_factory=list)

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.fields]


def _time_series_fields(shape: TimeSeries) -> FieldCatalogue:
    if shape.is_empty:
        raise NoTimeSeriesFound(
            "No time series data found",
            {"series_key": shape.key},
        )

    latest = shape.record(0)
    fields: list[Field] = []
    seen = {CHANGE_FIELD.key}
    for sub_key, value in latest.items():
        key = strip_ordinal(sub_key)
        if key in seen:
            key = sub_key
        suffix = 2
        while key in seen:
            key = f"{strip_ordinal(sub_key)}#{suffix}"
            suffix += 1
        seen.add(key)
        fields.append(Field(
            key=key,
            path=f"{SERIES_PREFIX}{sub_key}",
            value_type="number" if isinstance(to_number(value), (int, float)) else value_type(value),
            sample=value,
            description=describe(key),
        ))
    fields.append(CHANGE_FIELD)

    chart_data = [TimeSeries.ohlcv(shape.series[d]) for d in shape.dates]
    logger.debug("Discovered %d fields in %r (%d periods)", len(fields), shape.key, len(shape.dates))
    return FieldCatalogue(fields=fields, chart_data=chart_data)


def _generic_fields(payload: Any, max_depth: int) -> FieldCatalogue:
    fields: list[Field] = []
    taken: set[str] = set()

    def walk(obj: dict | list, prefix: str, depth: int) -> None:
        if depth > max_depth:
            return
        # a top-level array is walked by index, like an object
        items = obj.items() if isinstance(obj, dict) else enumerate(obj)
        for key, value in items:
            path = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(value, dict):
                walk(value, path, depth + 1)
                continue
            # leaf names repeat across branches; fall back to the full path
            display = str(key) if str(key) not in taken else path
            suffix = 2
            while display in taken:
                display = f"{path}#{suffix}"
                suffix += 1
            taken.add(display)
            fields.append(Field(
                key=display,
                path=path,
                value_type=value_type(value),
                sample=value[:2] if isinstance(value, list) else value,
                description=f"{key} field",
            ))

    if isinstance(payload, (dict, list)):
        walk(payload, "", 0)
    logger.debug("Discovered %d generic fields", len(fields))
    return FieldCatalogue(fields=fields)


def discover(raw: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> FieldCatalogue:
    """Build the field catalogue for an already-parsed response.

    Time-series responses yield their per-period sub-keys (ordinal prefixes
    stripped) plus a calculated ``change`` field, and a chart-ready point
    list. Anything else is walked key by key up to ``max_depth`` levels of
    nesting; leaves (primitives and arrays) become fields with dotted paths.
    """
    shape = detect_shape(raw)
    if isinstance(shape, TimeSeries):
        return _time_series_fields(shape)
    assert isinstance(shape, Generic)
    return _generic_fields(shape.payload, max_depth)
