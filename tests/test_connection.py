from unittest.mock import patch
from urllib.parse import parse_qs, urlsplit

import pytest

from finboard import connection
from finboard.errors import HttpError, NoTimeSeriesFound, RateLimitError

AV_URL = "https://www.alphavantage.co/query?function=TIME_SERIES_DAILY&apikey=demo"


class TestPrepareUrl:
    def test_injects_default_symbol_for_provider(self):
        url = connection.prepare_test_url(AV_URL)
        assert parse_qs(urlsplit(url).query)["symbol"] == ["IBM"]

    def test_keeps_existing_symbol(self):
        url = AV_URL + "&symbol=MSFT"
        assert connection.prepare_test_url(url) == url

    def test_other_hosts_untouched(self):
        url = "https://api.example.com/ticker?id=1"
        assert connection.prepare_test_url(url) == url

    def test_lookalike_host_untouched(self):
        url = "https://notalphavantage.co/query?function=X"
        assert connection.prepare_test_url(url) == url

    def test_repeated_params_are_preserved(self):
        url = connection.prepare_test_url(AV_URL + "&datatype=json&datatype=csv")

        assert url.startswith(AV_URL + "&datatype=json&datatype=csv&")
        query = parse_qs(urlsplit(url).query)
        assert query["datatype"] == ["json", "csv"]
        assert query["symbol"] == ["IBM"]

    def test_endpoint_without_query(self):
        url = connection.prepare_test_url("https://www.alphavantage.co/query")
        assert url == "https://www.alphavantage.co/query?symbol=IBM"

    def test_configurable_symbol(self):
        url = connection.prepare_test_url(AV_URL, symbol_param="ticker", default_symbol="AAPL")
        assert parse_qs(urlsplit(url).query)["ticker"] == ["AAPL"]


class TestConnection:
    def test_time_series_endpoint(self, fake_response, daily_response):
        with patch("finboard.client.requests.get", return_value=fake_response(daily_response)) as get:
            result = connection.test_connection(AV_URL)

        get.assert_called_once()
        assert "symbol=IBM" in get.call_args.args[0]
        assert [f.key for f in result.fields] == ["open", "high", "low", "close", "volume", "change"]
        assert result.sample_data["raw_response"] == daily_response
        assert len(result.sample_data["chart_data"]) == 2

    def test_generic_endpoint(self, fake_response, generic_response):
        with patch("finboard.client.requests.get", return_value=fake_response(generic_response)) as get:
            result = connection.test_connection("https://api.example.com/btc")

        assert get.call_args.args[0] == "https://api.example.com/btc"
        assert "quote.bid" in [f.path for f in result.fields]
        assert result.sample_data["chart_data"] == []

    def test_http_failure(self, fake_response):
        with patch("finboard.client.requests.get", return_value=fake_response(status=500)):
            with pytest.raises(HttpError):
                connection.test_connection("https://api.example.com/btc")

    def test_rate_limited(self, fake_response):
        with patch("finboard.client.requests.get", return_value=fake_response({"Note": "5 calls per minute"})):
            with pytest.raises(RateLimitError):
                connection.test_connection(AV_URL)

    def test_time_series_without_data(self, fake_response):
        with patch("finboard.client.requests.get", return_value=fake_response({"Meta Data": {}})):
            with pytest.raises(NoTimeSeriesFound):
                connection.test_connection(AV_URL)

    def test_non_finite_volume_does_not_fail(self, fake_response):
        raw = {"Time Series (Daily)": {"2024-01-01": {"4. close": "10", "5. volume": "Infinity"}}}
        with patch("finboard.client.requests.get", return_value=fake_response(raw)):
            result = connection.test_connection(AV_URL)

        assert result.sample_data["chart_data"][0]["volume"] == float("inf")

    def test_sends_configured_user_agent(self, fake_response, daily_response):
        with patch("finboard.client.requests.get", return_value=fake_response(daily_response)) as get:
            connection.test_connection(AV_URL, user_agent="desk-board/2")

        assert get.call_args.kwargs["headers"]["User-Agent"] == "desk-board/2"
