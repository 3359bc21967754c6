from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import os
import yaml

from .cache import DEFAULT_TTL
from .client import DEFAULT_TIMEOUT, USER_AGENT
from .connection import DEFAULT_SYMBOL, PROVIDER_HOSTS, SYMBOL_PARAM
from .discovery import DEFAULT_MAX_DEPTH
from .extraction import DEFAULT_WINDOW
from .storage import NAMESPACE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

def _expand(path: str) -> str:
    return os.path.expanduser(os.path.expandvars(path))

@dataclass(frozen=True)
class Config:
    raw: dict = field(default_factory=dict)

    def _section(self, name: str) -> dict:
        return self.raw.get(name) or {}

    @property
    def timeout(self) -> float:
        return float(self._section("http").get("timeout", DEFAULT_TIMEOUT))

    @property
    def user_agent(self) -> str:
        return str(self._section("http").get("user_agent", USER_AGENT))

    @property
    def provider(self) -> dict:
        return self._section("providers").get("alphavantage") or {}

    @property
    def provider_hosts(self) -> tuple[str, ...]:
        return tuple(self.provider.get("hosts", PROVIDER_HOSTS))

    @property
    def symbol_param(self) -> str:
        return str(self.provider.get("symbol_param", SYMBOL_PARAM))

    @property
    def default_symbol(self) -> str:
        return str(self.provider.get("default_symbol", DEFAULT_SYMBOL))

    @property
    def cache_ttl(self) -> float:
        return float(self._section("cache").get("ttl_seconds", DEFAULT_TTL))

    @property
    def max_depth(self) -> int:
        return int(self._section("discovery").get("max_depth", DEFAULT_MAX_DEPTH))

    @property
    def window(self) -> int:
        return int(self._section("extraction").get("window", DEFAULT_WINDOW))

    @property
    def storage_path(self) -> Path:
        out = self._section("storage").get("path", "~/.local/share/finboard/dashboard.json")
        return Path(_expand(out))

    @property
    def namespace(self) -> str:
        return str(self._section("storage").get("namespace", NAMESPACE))

    @property
    def log_level(self) -> str:
        level = str(self._section("logging").get("level", "INFO")).upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level {level!r}. Supported: {list(LOG_LEVELS)}")
        return level

def load_config(path: str | Path | None) -> Config:
    if path is None:
        return Config()
    p = Path(_expand(str(path)))
    if not p.exists():
        return Config()
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return Config()
    if not isinstance(raw, dict):
        raise ValueError("config.yaml must contain a YAML mapping at top level.")
    return Config(raw=raw)
