import math

import pytest

from finboard.discovery import discover
from finboard.errors import NoTimeSeriesFound
from finboard.fields import CHANGE_FIELD
from tests.helpers import make_series


class TestTimeSeriesDiscovery:
    def test_fields_are_stripped_sub_keys_plus_change(self, daily_response):
        catalogue = discover(daily_response)

        assert catalogue.keys == ["open", "high", "low", "close", "volume", "change"]
        assert catalogue.fields[0].path == "timeSeries.1. open"
        assert catalogue.fields[0].sample == "10"
        assert catalogue.fields[0].value_type == "number"
        assert catalogue.fields[0].description == "Opening price for the trading day"
        assert catalogue.fields[-1] == CHANGE_FIELD
        assert catalogue.fields[-1].is_calculated

    def test_chart_data_has_one_point_per_period(self, daily_response):
        catalogue = discover(daily_response)

        assert len(catalogue.chart_data) == 2
        newest = catalogue.chart_data[0]
        assert newest == {"open": 10.0, "high": 12.0, "low": 9.0, "close": 11.0, "volume": 100}
        assert isinstance(newest["volume"], int)

    def test_latest_record_chosen_by_calendar_date(self):
        # "2024-1-9" sorts after "2024-1-10" as a plain string
        raw = {
            "Monthly Time Series": {
                "2024-1-9": {"1. open": "1"},
                "2024-1-10": {"1. open": "2", "2. extra": "x"},
            }
        }
        catalogue = discover(raw)

        assert catalogue.keys == ["open", "extra", "change"]
        assert catalogue.fields[0].sample == "2"
        assert catalogue.fields[1].value_type == "string"

    def test_first_matching_series_key_wins(self):
        raw = {
            "Weekly Time Series": {"2024-01-05": {"1. weekly": "1"}},
            "Time Series (Daily)": {"2024-01-05": {"1. daily": "1"}},
        }
        assert discover(raw).keys == ["daily", "change"]

    def test_meta_data_without_series_raises(self):
        with pytest.raises(NoTimeSeriesFound):
            discover({"Meta Data": {"1. Information": "Daily Prices"}})

    def test_empty_series_raises(self):
        with pytest.raises(NoTimeSeriesFound):
            discover({"Time Series (5min)": {}})

    def test_sub_key_named_change_does_not_collide(self):
        raw = {"Time Series (Daily)": {"2024-01-01": {"1. close": "5", "2. change": "0.1"}}}
        keys = discover(raw).keys

        assert keys == ["close", "2. change", "change"]
        assert len(set(keys)) == len(keys)

    def test_sub_keys_that_strip_to_the_same_name(self):
        raw = {"Time Series (Daily)": {"2024-01-01": {"1. open": "10", "open": "11", "2. open": "12"}}}
        fields = discover(raw).fields
        keys = [f.key for f in fields]

        assert keys == ["open", "open#2", "2. open", "change"]
        assert len(set(keys)) == len(keys)
        assert [f.path for f in fields[:3]] == ["timeSeries.1. open", "timeSeries.open", "timeSeries.2. open"]

    def test_non_finite_volume_is_kept_as_float(self):
        raw = {"Time Series (Daily)": {
            "2024-01-02": {"4. close": "11", "5. volume": "NaN"},
            "2024-01-01": {"4. close": "10", "5. volume": "Infinity"},
        }}
        points = discover(raw).chart_data

        assert math.isnan(points[0]["volume"])
        assert points[1]["volume"] == float("inf")

    def test_large_series(self):
        catalogue = discover(make_series(30))
        assert catalogue.keys.count("change") == 1
        assert len(catalogue.chart_data) == 30
        assert catalogue.chart_data[0]["close"] == 129.0


class TestGenericDiscovery:
    def test_leaves_get_dotted_paths(self, generic_response):
        catalogue = discover(generic_response)
        paths = {f.path: f for f in catalogue.fields}

        assert set(paths) == {
            "symbol", "price", "active", "tags",
            "quote.bid", "quote.ask", "quote.venue.name", "quote.venue.region.code",
        }
        assert paths["price"].value_type == "number"
        assert paths["symbol"].value_type == "string"
        assert paths["active"].value_type == "boolean"
        assert paths["quote.bid"].key == "bid"
        assert paths["quote.bid"].description == "bid field"

    def test_array_samples_are_truncated(self, generic_response):
        tags = next(f for f in discover(generic_response).fields if f.key == "tags")
        assert tags.value_type == "array"
        assert tags.sample == ["crypto", "large-cap"]

    def test_depth_bound_skips_deeper_nodes(self):
        raw = {"a": {"b": {"c": {"x": 1, "d": {"y": 2}}}}}
        assert [f.path for f in discover(raw).fields] == ["a.b.c.x"]

    def test_custom_depth(self):
        raw = {"a": {"b": {"c": 1}}, "top": 2}
        assert [f.path for f in discover(raw, max_depth=1).fields] == ["top"]

    def test_repeated_leaf_names_stay_unique(self):
        raw = {"a": {"price": 1}, "b": {"price": 2}, "price": 3}
        fields = discover(raw).fields

        assert [f.key for f in fields] == ["price", "b.price", "price#2"]
        assert [f.path for f in fields] == ["a.price", "b.price", "price"]

    def test_top_level_array_is_walked_by_index(self):
        raw = [{"symbol": "IBM", "price": 1.5}, {"symbol": "MSFT", "price": 2}]
        fields = discover(raw).fields

        assert [f.path for f in fields] == ["0.symbol", "0.price", "1.symbol", "1.price"]
        assert [f.key for f in fields] == ["symbol", "price", "1.symbol", "1.price"]
        assert fields[1].value_type == "number"

    def test_top_level_array_of_scalars(self):
        fields = discover([1, "two"]).fields
        assert [(f.key, f.path) for f in fields] == [("0", "0"), ("1", "1")]

    @pytest.mark.parametrize("raw", [{}, [], "text", None, {"nested": {}}])
    def test_empty_or_odd_bodies_yield_no_fields(self, raw):
        catalogue = discover(raw)
        assert catalogue.fields == []
        assert catalogue.chart_data == []

    def test_null_leaf(self):
        [field] = discover({"value": None}).fields
        assert field.value_type == "null"
