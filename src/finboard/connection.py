from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Sequence
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from .client import DEFAULT_TIMEOUT, USER_AGENT, fetch_json
from .discovery import DEFAULT_MAX_DEPTH, discover
from .errors import FinboardError
from .fields import Field

logger = logging.getLogger(__name__)

PROVIDER_HOSTS = ("alphavantage.co",)
SYMBOL_PARAM = "symbol"
DEFAULT_SYMBOL = "IBM"


@dataclass(frozen=True)
class ConnectionResult:
    fields: list[Field]
    sample_data: dict[str, Any]


def prepare_test_url(
    endpoint: str,
    provider_hosts: Sequence[str] = PROVIDER_HOSTS,
    symbol_param: str = SYMBOL_PARAM,
    default_symbol: str = DEFAULT_SYMBOL,
) -> str:
    """Give known provider endpoints a symbol so the test call returns data."""
    parts = urlsplit(endpoint)
    host = parts.hostname or ""
    if not any(host == h or host.endswith("." + h) for h in provider_hosts):
        return endpoint
    if symbol_param in parse_qs(parts.query, keep_blank_values=True):
        return endpoint
    # append to the query as written; existing parameters are left untouched
    extra = urlencode({symbol_param: default_symbol})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit(parts._replace(query=query))


def test_connection(
    endpoint: str,
    timeout: float = DEFAULT_TIMEOUT,
    max_depth: int = DEFAULT_MAX_DEPTH,
    provider_hosts: Sequence[str] = PROVIDER_HOSTS,
    symbol_param: str = SYMBOL_PARAM,
    default_symbol: str = DEFAULT_SYMBOL,
    user_agent: str = USER_AGENT,
) -> ConnectionResult:
    """Dry-run an endpoint and list the fields a widget could display.

    Nothing is stored. Raises ConnectionFailed (HttpError, ProviderError,
    RateLimitError) for a failed call and NoTimeSeriesFound for a
    time-series response with no periods.
    """
    url = prepare_test_url(endpoint, provider_hosts, symbol_param, default_symbol)
    try:
        body = fetch_json(url, timeout=timeout, user_agent=user_agent)
        catalogue = discover(body, max_depth=max_depth)
    except FinboardError as e:
        logger.warning("API test failed for %s: %s", url, e)
        raise

    return ConnectionResult(
        fields=catalogue.fields,
        sample_data={"chart_data": catalogue.chart_data, "raw_response": body},
    )
