from __future__ import annotations

import logging
from typing import Any, Sequence

from .fields import Field
from .shapes import Generic, TimeSeries, detect_shape
from .widgets import REGISTRY

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 20


def extract(raw: Any, selected_fields: Sequence[Field], widget_type: str, window: int = DEFAULT_WINDOW) -> dict[str, Any]:
    """Shape a parsed response for one widget type.

    Fields that cannot be resolved are left out (time series) or mapped to
    None (generic); they never fail the whole extraction.
    """
    mod = REGISTRY.get(widget_type)
    if mod is None:
        raise ValueError(f"Unknown widget type: {widget_type}")

    shape = detect_shape(raw)
    if isinstance(shape, TimeSeries):
        if shape.is_empty:
            logger.debug("Time-series response without periods (%r)", shape.key)
        return mod.from_time_series(shape, selected_fields, window)
    assert isinstance(shape, Generic)
    return mod.from_generic(shape.payload, selected_fields)
