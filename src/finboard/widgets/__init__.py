from __future__ import annotations

from . import card, chart, table
from .base import WIDGET_TYPES, Position, Widget, WidgetConfig

REGISTRY = {
    card.name: card,
    table.name: table,
    chart.name: chart,
}

__all__ = ["REGISTRY", "WIDGET_TYPES", "Position", "Widget", "WidgetConfig"]
