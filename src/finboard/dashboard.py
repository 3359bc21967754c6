from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
import json
import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Iterable, Mapping, Sequence

from .cache import ResponseCache
from .client import fetch_widget_data_async
from .errors import DashboardImportError
from .fields import Field
from .widgets import Position, Widget
from .widgets.base import WidgetConfig, coerce, coerce_fields

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Sequence[Field], str], Awaitable[Any]]

# fields a caller may merge into an existing widget
MUTABLE_FIELDS = {
    "title", "description", "endpoint", "selected_fields", "config",
    "position", "data", "last_updated", "is_loading", "error",
}


@dataclass(frozen=True)
class RefreshRequest:
    """A refresh the caller should run after a mutation (see run_refreshes)."""

    widget_id: str


def _normalize(changes: Mapping[str, Any]) -> dict[str, Any]:
    out = dict(changes)
    if "selected_fields" in out:
        out["selected_fields"] = coerce_fields(out["selected_fields"] or ())
    if "config" in out:
        out["config"] = coerce(WidgetConfig, out["config"] or {})
    if "position" in out:
        out["position"] = coerce(Position, out["position"] or {})
    return out


class DashboardStore:
    """Owns the widgets, their fetch state and the response cache.

    Mutations are plain synchronous methods. Network work only happens in
    :meth:`refresh_widget_data`, which the host application awaits; mutations
    that need fresh data return :class:`RefreshRequest` items instead of
    scheduling anything themselves.
    """

    def __init__(
        self,
        widgets: Iterable[Widget] = (),
        fetcher: Fetcher | None = None,
        cache: ResponseCache | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._widgets: list[Widget] = list(widgets)
        self._fetcher = fetcher or fetch_widget_data_async
        self._clock = clock
        self.cache = cache if cache is not None else ResponseCache(clock=clock)
        self.is_edit_mode = False
        self.selected_widget: str | None = None

    @property
    def widgets(self) -> tuple[Widget, ...]:
        return tuple(self._widgets)

    def get_widget(self, widget_id: str) -> Widget | None:
        for w in self._widgets:
            if w.id == widget_id:
                return w
        return None

    def _new_id(self) -> str:
        taken = {w.id for w in self._widgets}
        while True:
            candidate = uuid.uuid4().hex
            if candidate not in taken:
                return candidate

    def _replace(self, widget_id: str, **changes: Any) -> Widget | None:
        for i, w in enumerate(self._widgets):
            if w.id == widget_id:
                self._widgets[i] = replace(w, **changes)
                return self._widgets[i]
        return None

    # -- mutations --------------------------------------------------------

    def add_widget(self, draft: Mapping[str, Any]) -> list[RefreshRequest]:
        record = dict(draft)
        record.update(id=self._new_id(), data=None, last_updated=None, is_loading=False, error=None)
        widget = Widget.from_dict(record)
        self._widgets.append(widget)
        logger.info("Added %s widget %s (%s)", widget.type, widget.id, widget.title)
        return [RefreshRequest(widget.id)]

    def remove_widget(self, widget_id: str) -> None:
        self._widgets = [w for w in self._widgets if w.id != widget_id]
        if self.selected_widget == widget_id:
            self.selected_widget = None

    def update_widget(self, widget_id: str, changes: Mapping[str, Any]) -> None:
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update widget fields: {sorted(unknown)}")
        self._replace(widget_id, **_normalize(changes))

    def update_widget_position(self, widget_id: str, position: Position | Mapping[str, Any]) -> None:
        self._replace(widget_id, position=coerce(Position, position))

    def set_edit_mode(self, enabled: bool) -> None:
        self.is_edit_mode = enabled
        if enabled:
            self.selected_widget = None

    def set_selected_widget(self, widget_id: str | None) -> None:
        self.selected_widget = widget_id

    def update_widget_data(self, widget_id: str, data: Any, error: str | None = None) -> None:
        self._replace(widget_id, data=data, error=error, last_updated=self._clock(), is_loading=False)

    # -- refresh ----------------------------------------------------------

    async def refresh_widget_data(self, widget_id: str) -> None:
        """Fetch and extract fresh data for one widget.

        Concurrent refreshes of the same widget are not coalesced; whichever
        finishes last wins. If the widget is removed while the fetch is in
        flight the result is dropped.
        """
        widget = self.get_widget(widget_id)
        if widget is None:
            return

        self._replace(widget_id, is_loading=True, error=None)
        try:
            data = await self._fetcher(widget.endpoint, widget.selected_fields, widget.type)
        except Exception as e:
            logger.warning("Widget %s data fetch failed: %s", widget_id, e)
            # keep the last good data on screen
            self._replace(widget_id, error=str(e) or "Failed to fetch data", is_loading=False)
            return

        self.update_widget_data(widget_id, data)
        logger.info("Refreshed widget %s", widget_id)

    async def run_refreshes(self, requests: Iterable[RefreshRequest]) -> None:
        await asyncio.gather(*(self.refresh_widget_data(r.widget_id) for r in requests))

    async def refresh_all(self) -> None:
        await self.run_refreshes(RefreshRequest(w.id) for w in self._widgets)

    # -- cache ------------------------------------------------------------

    def get_cached_data(self, key: str) -> Any:
        return self.cache.get(key)

    def set_cached_data(self, key: str, payload: Any, ttl: float | None = None) -> None:
        self.cache.set(key, payload, ttl)

    def clear_cache(self) -> None:
        self.cache.clear()

    # -- import / export --------------------------------------------------

    def export_dashboard(self) -> str:
        return json.dumps({"widgets": [w.to_dict() for w in self._widgets]}, indent=2)

    def import_dashboard(self, text: str) -> list[RefreshRequest]:
        """Replace every widget with the ones in ``text``; all or nothing."""
        try:
            parsed = json.loads(text)
        except (TypeError, ValueError) as e:
            raise DashboardImportError(f"Dashboard text is not valid JSON: {e}") from e
        if not isinstance(parsed, dict) or not isinstance(parsed.get("widgets"), list):
            raise DashboardImportError("Dashboard text has no 'widgets' list")

        widgets = parse_widgets(parsed["widgets"])
        self._widgets = widgets
        if self.get_widget(self.selected_widget or "") is None:
            self.selected_widget = None
        logger.info("Imported %d widgets", len(widgets))
        return [RefreshRequest(w.id) for w in widgets]

    # -- persistence ------------------------------------------------------

    def to_state(self) -> dict[str, Any]:
        return {
            "widgets": [w.to_dict() for w in self._widgets],
            "api_cache": self.cache.to_dict(),
        }

    @classmethod
    def from_state(cls, state: Mapping[str, Any], **kw: Any) -> "DashboardStore":
        store = cls(widgets=parse_widgets(state.get("widgets") or []), **kw)
        store.cache.load(state.get("api_cache") or {})
        return store


def parse_widgets(records: Sequence[Any]) -> list[Widget]:
    widgets = []
    seen: set[str] = set()
    for i, rec in enumerate(records):
        try:
            w = Widget.from_dict(rec)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DashboardImportError(f"Widget #{i} is invalid: {e}", {"index": i}) from e
        if w.id in seen:
            raise DashboardImportError(f"Duplicate widget id {w.id!r}", {"index": i})
        seen.add(w.id)
        widgets.append(w)
    return widgets
