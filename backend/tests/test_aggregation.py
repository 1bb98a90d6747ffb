"""
Unit tests for grouping and aggregation.
"""
import pytest
from autocharts.core.schemas import AggregationSpec
from autocharts.services.aggregation import aggregate, group_key, top_entries, value_counts


@pytest.fixture
def orders():
    return [
        {"region": "North", "amount": "100"},
        {"region": "South", "amount": 50},
        {"region": "North", "amount": "$1,200"},
        {"region": "South", "amount": "n/a"},
        {"region": "West", "amount": "oops"},
        {"region": "", "amount": 10},
        {"region": None, "amount": 10},
        {"region": "null", "amount": 10},
        {"region": " East ", "amount": 5.5},
    ]


def _spec(function):
    return AggregationSpec(group_column="region", value_column="amount", function=function)


@pytest.mark.unit
def test_sum_by_group(orders):
    result = aggregate(orders, _spec('sum'))
    assert result == {"North": 1300.0, "South": 50.0, "East": 5.5}


@pytest.mark.unit
def test_groups_in_first_appearance_order(orders):
    assert list(aggregate(orders, _spec('sum'))) == ["North", "South", "East"]


@pytest.mark.unit
def test_group_without_numeric_values_is_dropped(orders):
    assert "West" not in aggregate(orders, _spec('count'))


@pytest.mark.unit
def test_count_average_min_max(orders):
    assert aggregate(orders, _spec('count')) == {"North": 2, "South": 1, "East": 1}
    assert aggregate(orders, _spec('average'))["North"] == 650.0
    assert aggregate(orders, _spec('min'))["North"] == 100.0
    assert aggregate(orders, _spec('max'))["North"] == 1200.0


@pytest.mark.unit
def test_count_skips_non_numeric_values():
    dataset = [{"g": "a", "v": v} for v in [1, 2, "x", 3]]
    spec = AggregationSpec(group_column="g", value_column="v", function='count')
    assert aggregate(dataset, spec) == {"a": 3}


@pytest.mark.unit
def test_default_function_is_sum():
    spec = AggregationSpec(group_column="g", value_column="v")
    assert aggregate([{"g": "a", "v": 2}, {"g": "a", "v": 3}], spec) == {"a": 5.0}


@pytest.mark.unit
def test_empty_and_unknown_columns():
    assert aggregate([], _spec('sum')) == {}
    spec = AggregationSpec(group_column="missing", value_column="amount")
    assert aggregate([{"amount": 1}], spec) == {}


@pytest.mark.unit
def test_numeric_group_keys_use_canonical_text():
    dataset = [{"year": 2023.0, "v": 1}, {"year": "2023", "v": 2}, {"year": 2024, "v": 4}]
    spec = AggregationSpec(group_column="year", value_column="v")
    assert aggregate(dataset, spec) == {"2023": 3.0, "2024": 4.0}


@pytest.mark.unit
def test_group_key_markers():
    assert group_key("undefined") is None
    assert group_key("  ") is None
    assert group_key(None) is None
    assert group_key(" a ") == "a"
    assert group_key(False) == "false"


@pytest.mark.unit
def test_value_counts():
    dataset = [{"c": "x"}, {"c": "y"}, {"c": "x"}, {"c": None}, {}]
    assert value_counts(dataset, "c") == {"x": 2, "y": 1}


@pytest.mark.unit
def test_top_entries_sorted_and_truncated():
    counts = {"a": 1, "b": 5, "c": 3, "d": 5}
    assert top_entries(counts) == [("b", 5), ("d", 5), ("c", 3), ("a", 1)]
    assert top_entries(counts, 2) == [("b", 5), ("d", 5)]
    assert top_entries(counts, descending=False)[0] == ("a", 1)
