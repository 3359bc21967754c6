from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from ..fields import Field

WIDGET_TYPES = ("table", "card", "chart")


def percent_change(current: Any, previous: Any) -> float:
    """Percent change between two closes; 0 when either side is missing."""
    if current is None or previous is None:
        return 0
    try:
        cur = float(current)
        prev = float(previous)
    except (TypeError, ValueError):
        return 0
    if prev == 0:
        return 0
    return (cur - prev) / prev * 100


def resolve_path(obj: Any, path: str) -> Any:
    """Follow a dotted key chain; any missing step yields None."""
    current = obj
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
        if current is None:
            return None
    return current


@dataclass(frozen=True)
class Position:
    x: int = 0
    y: int = 0
    w: int = 4
    h: int = 3

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Position":
        return cls(**{k: int(raw[k]) for k in ("x", "y", "w", "h") if k in raw})


@dataclass(frozen=True)
class WidgetConfig:
    refresh_interval: int | None = None
    chart_type: str | None = None     # line | candlestick
    time_interval: str | None = None  # daily | weekly | monthly
    card_type: str | None = None      # watchlist | gainers | performance | financial
    filters: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "refresh_interval": self.refresh_interval,
            "chart_type": self.chart_type,
            "time_interval": self.time_interval,
            "card_type": self.card_type,
            "filters": dict(self.filters),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "WidgetConfig":
        interval = raw.get("refresh_interval")
        return cls(
            refresh_interval=int(interval) if interval is not None else None,
            chart_type=raw.get("chart_type"),
            time_interval=raw.get("time_interval"),
            card_type=raw.get("card_type"),
            filters=dict(raw.get("filters") or {}),
        )


@dataclass(frozen=True)
class Widget:
    id: str
    type: str
    title: str
    endpoint: str
    selected_fields: tuple[Field, ...] = ()
    description: str | None = None
    config: WidgetConfig = field(default_factory=WidgetConfig)
    position: Position = field(default_factory=Position)
    data: Any = None
    last_updated: float | None = None
    is_loading: bool = False
    error: str | None = None

    def __post_init__(self) -> None:
        if self.type not in WIDGET_TYPES:
            raise ValueError(f"Unknown widget type {self.type!r}. Supported: {list(WIDGET_TYPES)}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "endpoint": self.endpoint,
            "selected_fields": [f.to_dict() for f in self.selected_fields],
            "config": self.config.to_dict(),
            "position": self.position.to_dict(),
            "data": self.data,
            "last_updated": self.last_updated,
            "is_loading": self.is_loading,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Widget":
        return cls(
            id=str(raw["id"]),
            type=str(raw["type"]),
            title=str(raw["title"]),
            endpoint=str(raw["endpoint"]),
            selected_fields=coerce_fields(raw.get("selected_fields") or ()),
            description=raw.get("description"),
            config=coerce(WidgetConfig, raw.get("config") or {}),
            position=coerce(Position, raw.get("position") or {}),
            data=raw.get("data"),
            last_updated=raw.get("last_updated"),
            is_loading=bool(raw.get("is_loading", False)),
            error=raw.get("error"),
        )


def coerce(cls, value):
    """Accept either an instance of ``cls`` or its dict form."""
    return value if isinstance(value, cls) else cls.from_dict(value)


def coerce_fields(values) -> tuple[Field, ...]:
    return tuple(coerce(Field, v) for v in values)
