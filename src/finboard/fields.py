from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

CALCULATED_PREFIX = "calculated."
SERIES_PREFIX = "timeSeries."

FIELD_DESCRIPTIONS = {
    "open": "Opening price for the trading day",
    "high": "Highest price during the trading day",
    "low": "Lowest price during the trading day",
    "close": "Closing price for the trading day",
    "volume": "Number of shares traded",
}


def describe(key: str) -> str:
    return FIELD_DESCRIPTIONS.get(key, f"{key} data field")


def value_type(value: Any) -> str:
    """Name the JSON type of a sample value."""
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if value is None:
        return "null"
    return "object"


@dataclass(frozen=True)
class Field:
    """A displayable value discovered in an API response.

    ``path`` is how extraction finds the value again: a dotted key chain for
    generic responses, ``timeSeries.<sub key>`` for time-series records, or a
    ``calculated.`` marker for values that are computed rather than looked up.
    """

    key: str
    path: str
    value_type: str
    sample: Any = None
    description: str | None = None

    @property
    def is_calculated(self) -> bool:
        return self.path.startswith(CALCULATED_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "path": self.path,
            "type": self.value_type,
            "sample": self.sample,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Field":
        return cls(
            key=str(raw["key"]),
            path=str(raw["path"]),
            value_type=str(raw.get("type", "string")),
            sample=raw.get("sample"),
            description=raw.get("description"),
        )


CHANGE_FIELD = Field(
    key="change",
    path=f"{CALCULATED_PREFIX}change",
    value_type="number",
    sample=2.5,
    description="Price change percentage",
)

OHLCV_FIELDS = tuple(
    Field(key=name, path=f"{SERIES_PREFIX}{i}. {name}", value_type="number", sample=0, description=describe(name))
    for i, name in enumerate(("open", "high", "low", "close", "volume"), start=1)
)
