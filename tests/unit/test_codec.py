"""
Unit tests for point encoding/decoding.
"""

import pytest

from tsdb_client.codec import PointValue, build_series, dedupe_columns, denormalize_series
from tsdb_client.models import SeriesPayload


class TestPointValue:
    @pytest.mark.parametrize(
        "value",
        [0, -12, 3.25, True, False, None, "", "plain", {"a": 1, "b": [1, 2]}, [1, "x", None]],
    )
    def test_round_trip(self, value):
        assert PointValue(PointValue(value).dump()).load() == value

    def test_containers_dump_to_json_strings(self):
        assert PointValue({"a": 1}).dump() == '{"a":1}'
        assert PointValue([1, 2]).dump() == "[1,2]"

    def test_scalars_pass_through(self):
        assert PointValue(1.5).dump() == 1.5
        assert PointValue("cpu").load() == "cpu"

    def test_invalid_json_lookalike_stays_string(self):
        assert PointValue("{not json}").load() == "{not json}"

    def test_container_shaped_string_loads_as_container(self):
        # not a supported str value; documented on PointValue
        assert PointValue(PointValue("[1]").dump()).load() == [1]
        assert PointValue(PointValue('{"a":1}').dump()).load() == {"a": 1}


class TestBuildSeries:
    def test_single_record(self):
        s = build_series("cpu", {"value": 1, "host": "a"})
        assert s.name == "cpu"
        assert s.columns == ["host", "value"]
        assert s.points == [["a", 1]]

    def test_columns_are_sorted_union_and_rows_align(self):
        records = [
            {"value": 1, "host": "a", "region": "eu"},
            {"region": "us", "host": "b", "value": 2},
        ]
        s = build_series("cpu", records)
        assert s.columns == ["host", "region", "value"]
        assert s.points == [["a", "eu", 1], ["b", "us", 2]]

    def test_column_order_independent_of_input_order(self):
        a = build_series("cpu", [{"b": 1, "a": 2}])
        b = build_series("cpu", [{"a": 2, "b": 1}])
        assert a == b

    def test_missing_column_is_rejected(self):
        with pytest.raises(ValueError, match="missing columns"):
            build_series("cpu", [{"a": 1, "b": 2}, {"a": 3}])

    def test_empty_records_rejected(self):
        with pytest.raises(ValueError):
            build_series("cpu", [])

    def test_container_values_are_dumped(self):
        s = build_series("events", {"tags": ["x", "y"]})
        assert s.points == [['["x","y"]']]


class TestDedupeColumns:
    def test_repeats_get_occurrence_suffix(self):
        assert dedupe_columns(["x", "y", "x", "x"]) == ["x", "y", "x~1", "x~2"]

    def test_no_duplicates_unchanged(self):
        assert dedupe_columns(["time", "value"]) == ["time", "value"]


class TestDenormalizeSeries:
    def test_rows_become_records_in_order(self):
        series = {
            "name": "cpu",
            "columns": ["time", "value", "value"],
            "points": [[1, 0.5, 0.6], [2, 0.7, 0.8]],
        }
        assert denormalize_series(series) == [
            {"time": 1, "value": 0.5, "value~1": 0.6},
            {"time": 2, "value": 0.7, "value~1": 0.8},
        ]

    def test_counters_reset_per_series(self):
        s1 = {"name": "a", "columns": ["x", "x"], "points": [[1, 2]]}
        s2 = {"name": "b", "columns": ["x", "x"], "points": [[3, 4]]}
        assert denormalize_series(s1) == [{"x": 1, "x~1": 2}]
        assert denormalize_series(s2) == [{"x": 3, "x~1": 4}]

    def test_values_are_loaded(self):
        series = SeriesPayload(name="e", columns=["meta"], points=[['{"k":"v"}']])
        assert denormalize_series(series) == [{"meta": {"k": "v"}}]

    def test_misaligned_rows_rejected(self):
        with pytest.raises(ValueError):
            denormalize_series({"name": "a", "columns": ["x", "y"], "points": [[1]]})
