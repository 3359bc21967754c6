from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any

from .dashboard import DashboardStore

logger = logging.getLogger(__name__)

NAMESPACE = "finance-dashboard"


def _read_doc(path: Path) -> dict[str, Any]:
    doc = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(doc, dict):
        raise ValueError(f"{path} must contain a JSON object at top level.")
    return doc


def save_state(path: Path, store: DashboardStore, namespace: str = NAMESPACE) -> Path:
    """Write the store under ``namespace``, leaving other records in the file alone.

    The file is replaced in one step, so a failed write leaves the previous
    contents in place.
    """
    doc = _read_doc(path) if path.exists() else {}
    doc[namespace] = store.to_state()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(doc, fh, indent=2)
        Path(tmp).replace(path)
    except Exception:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("Saved %d widgets to %s", len(store.widgets), path)
    return path


def load_state(path: Path, namespace: str = NAMESPACE, **store_kw: Any) -> DashboardStore:
    if not path.exists():
        return DashboardStore(**store_kw)
    return DashboardStore.from_state(_read_doc(path).get(namespace) or {}, **store_kw)
