"""TTL cache for API payloads."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300.0  # seconds


@dataclass(frozen=True)
class CacheEntry:
    payload: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl

    def to_dict(self) -> dict[str, Any]:
        return {"payload": self.payload, "stored_at": self.stored_at, "ttl": self.ttl}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> CacheEntry:
        return cls(payload=raw.get("payload"), stored_at=float(raw["stored_at"]), ttl=float(raw["ttl"]))


class ResponseCache:
    """Key -> payload mapping whose entries expire after their TTL.

    Expired entries are dropped when they are read, not by a background sweep.
    """

    def __init__(self, default_ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.time):
        self.entries: dict[str, CacheEntry] = {}
        self.default_ttl = default_ttl
        self.clock = clock
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Any | None:
        entry = self.entries.get(key)
        if entry is None:
            logger.debug("Cache miss for %s", key)
            self.misses += 1
            return None
        if entry.is_expired(self.clock()):
            logger.debug("Cache entry %s expired", key)
            del self.entries[key]
            self.misses += 1
            return None
        logger.debug("Cache hit for %s", key)
        self.hits += 1
        return entry.payload

    def set(self, key: str, payload: Any, ttl: float | None = None):
        self.entries[key] = CacheEntry(
            payload=payload,
            stored_at=self.clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def clear(self):
        self.entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self.entries)

    def get_stats(self) -> dict[str, Any]:
        total = self.hits + self.misses
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total_requests": total,
            "hit_rate": (self.hits / total * 100) if total > 0 else 0,
            "cached_items": len(self.entries),
        }

    def to_dict(self) -> dict[str, Any]:
        return {key: entry.to_dict() for key, entry in self.entries.items()}

    def load(self, raw: dict[str, Any]):
        self.entries = {key: CacheEntry.from_dict(entry) for key, entry in raw.items()}
