from __future__ import annotations

from datetime import date, timedelta


def make_series(n: int, key: str = "Time Series (Daily)", start: date = date(2024, 1, 1)) -> dict:
    """``n`` consecutive daily periods; close is 100 + day index (oldest = 0)."""
    series = {}
    for i in range(n):
        day = (start + timedelta(days=i)).isoformat()
        close = 100 + i
        series[day] = {
            "1. open": f"{close - 1:.4f}",
            "2. high": f"{close + 2:.4f}",
            "3. low": f"{close - 2:.4f}",
            "4. close": f"{close:.4f}",
            "5. volume": str(1000 + i),
        }
    return {"Meta Data": {"2. Symbol": "IBM"}, key: series}
