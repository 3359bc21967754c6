from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from .errors import ConnectionFailed, ExtractionError, HttpError, ProviderError, RateLimitError
from .extraction import DEFAULT_WINDOW, extract
from .fields import OHLCV_FIELDS, Field

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
USER_AGENT = "finboard/0.1"
ALPHAVANTAGE_URL = "https://www.alphavantage.co/query?apikey=demo"

ERROR_MARKER = "Error Message"
RATE_LIMIT_MARKERS = ("Note", "Information")

INTERVAL_FUNCTIONS = {
    "daily": "TIME_SERIES_DAILY",
    "weekly": "TIME_SERIES_WEEKLY",
    "monthly": "TIME_SERIES_MONTHLY",
}


def with_query(url: str, **params: str) -> str:
    """Set query parameters on ``url``, keeping the ones already there."""
    parts = urlsplit(url)
    # repeated keys survive unless they are being set here
    pairs = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in params]
    pairs.extend(params.items())
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def check_provider_markers(body: Any) -> None:
    if not isinstance(body, dict):
        return
    if ERROR_MARKER in body:
        raise ProviderError(str(body[ERROR_MARKER]))
    for marker in RATE_LIMIT_MARKERS:
        if marker in body:
            raise RateLimitError(marker=marker, provider_message=body[marker])


def fetch_json(url: str, timeout: float = DEFAULT_TIMEOUT, user_agent: str = USER_AGENT) -> Any:
    """GET ``url`` once and return the parsed body.

    Raises HttpError on a non-2xx status, ProviderError (or RateLimitError)
    when the body carries a provider error marker, and ConnectionFailed when
    the request never completes.
    """
    logger.debug("GET %s", url)
    try:
        r = requests.get(url, timeout=timeout, headers={"User-Agent": user_agent})
    except requests.RequestException as e:
        raise ConnectionFailed(f"Request failed: {e}", {"url": url}) from e

    if not r.ok:
        raise HttpError(r.status_code, url)
    try:
        body = r.json()
    except ValueError as e:
        raise ProviderError("Response body is not valid JSON", {"url": url}) from e

    check_provider_markers(body)
    return body


def fetch_widget_data(
    endpoint: str,
    selected_fields: Sequence[Field],
    widget_type: str,
    timeout: float = DEFAULT_TIMEOUT,
    window: int = DEFAULT_WINDOW,
    user_agent: str = USER_AGENT,
) -> dict[str, Any]:
    try:
        body = fetch_json(endpoint, timeout=timeout, user_agent=user_agent)
    except ConnectionFailed as e:
        raise ExtractionError(str(e), dict(e.details)) from e
    return extract(body, selected_fields, widget_type, window=window)


async def fetch_widget_data_async(
    endpoint: str,
    selected_fields: Sequence[Field],
    widget_type: str,
    timeout: float = DEFAULT_TIMEOUT,
    window: int = DEFAULT_WINDOW,
    user_agent: str = USER_AGENT,
) -> dict[str, Any]:
    """Run :func:`fetch_widget_data` off the event loop."""
    return await asyncio.to_thread(fetch_widget_data, endpoint, selected_fields, widget_type, timeout, window, user_agent)


def fetch_stock_data(symbol: str, widget_type: str, endpoint: str | None = None, **kw: Any) -> dict[str, Any]:
    """Daily series for ``symbol`` shaped with the standard OHLCV fields."""
    url = endpoint or with_query(ALPHAVANTAGE_URL, function="TIME_SERIES_DAILY", symbol=symbol)
    return fetch_widget_data(url, OHLCV_FIELDS, widget_type, **kw)


def get_time_interval_data(symbol: str, interval: str, endpoint: str | None = None, **kw: Any) -> dict[str, Any]:
    function = INTERVAL_FUNCTIONS.get(interval, INTERVAL_FUNCTIONS["daily"])
    url = with_query(endpoint or ALPHAVANTAGE_URL, function=function, symbol=symbol)
    return fetch_widget_data(url, OHLCV_FIELDS, "chart", **kw)
