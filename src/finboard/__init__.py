from __future__ import annotations

from .connection import test_connection
from .dashboard import DashboardStore, RefreshRequest
from .discovery import discover
from .extraction import extract

__version__ = "0.1.0"

__all__ = ["DashboardStore", "RefreshRequest", "discover", "extract", "test_connection"]
