from __future__ import annotations

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def daily_response():
    return {
        "Time Series (Daily)": {
            "2024-01-02": {"1. open": "10", "2. high": "12", "3. low": "9", "4. close": "11", "5. volume": "100"},
            "2024-01-01": {"1. open": "9", "2. high": "10", "3. low": "8", "4. close": "10", "5. volume": "90"},
        }
    }


@pytest.fixture
def generic_response():
    return {
        "symbol": "BTC",
        "price": 43125.5,
        "active": True,
        "tags": ["crypto", "large-cap", "spot"],
        "quote": {
            "bid": 43120.0,
            "ask": 43130.0,
            "venue": {"name": "example", "region": {"code": "US", "deep": {"x": 1}}},
        },
    }


@pytest.fixture
def fake_response():
    def _make(body=None, status: int = 200, json_error: bool = False):
        r = MagicMock()
        r.status_code = status
        r.ok = status < 400
        if json_error:
            r.json.side_effect = ValueError("No JSON object could be decoded")
        else:
            r.json.return_value = body
        return r
    return _make
