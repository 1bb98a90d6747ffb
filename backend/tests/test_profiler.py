"""
Unit tests for the profiler service.
"""
import pytest
from datetime import datetime
from autocharts.services.profiler import (
    categorical_columns,
    column_names,
    date_columns,
    infer_column_type,
    numeric_columns,
    profile_column,
    profile_dataset,
)
from autocharts.core.schemas import ColumnProfile


@pytest.fixture
def sales_data():
    return [
        {"region": "North", "units": "12", "price": "9.99", "date": "2024-01-05"},
        {"region": "South", "units": "7", "price": "12.50", "date": "2024-02-10"},
        {"region": "North", "units": "", "price": "8", "date": "2024-02-11"},
        {"region": "East", "units": None, "price": "10.25", "date": "2024-03-01"},
    ]


@pytest.mark.unit
def test_profile_dataset_basic(sales_data):
    profile = profile_dataset(sales_data)

    assert list(profile.keys()) == ["region", "units", "price", "date"]
    assert all(isinstance(column, ColumnProfile) for column in profile.values())
    assert profile["region"].dtype == 'string'
    assert profile["units"].dtype == 'integer'
    assert profile["price"].dtype == 'number'
    assert profile["date"].dtype == 'date'


@pytest.mark.unit
def test_profile_counts(sales_data):
    units = profile_dataset(sales_data)["units"]

    assert units.null_count == 1
    assert units.empty_count == 1
    assert units.unique_count == 2
    assert units.sample_values == ["12", "7"]
    assert units.null_count + units.empty_count + 2 == len(sales_data)


@pytest.mark.unit
def test_profile_numeric_stats(sales_data):
    price = profile_dataset(sales_data)["price"]

    assert price.min == 8.0
    assert price.max == 12.5
    assert price.mean == pytest.approx((9.99 + 12.5 + 8 + 10.25) / 4)
    assert price.is_likely_categorical is False


@pytest.mark.unit
def test_profile_date_stats(sales_data):
    dates = profile_dataset(sales_data)["date"]

    assert dates.min_date == datetime(2024, 1, 5)
    assert dates.max_date == datetime(2024, 3, 1)
    assert dates.is_likely_time_series is True
    assert dates.min is None


@pytest.mark.unit
def test_profile_empty_dataset():
    assert profile_dataset([]) == {}


@pytest.mark.unit
def test_all_missing_column_is_unknown():
    profile = profile_dataset([{"a": None}, {"a": ""}, {"a": "  "}])

    column = profile["a"]
    assert column.dtype == 'unknown'
    assert column.null_count == 1
    assert column.empty_count == 2
    assert column.unique_count == 0
    assert column.sample_values == []


@pytest.mark.unit
def test_one_bad_value_makes_column_string():
    values = [str(i) for i in range(99)] + ["x"]
    assert infer_column_type(values) == 'string'


@pytest.mark.unit
def test_mixed_integers_and_decimals_is_number():
    assert infer_column_type(["1", "2.5", 3]) == 'number'


@pytest.mark.unit
def test_leading_zeros_are_number_not_integer():
    assert infer_column_type(["007", "010"]) == 'number'


@pytest.mark.unit
def test_native_values_are_typed():
    assert infer_column_type([1, 2, 3]) == 'integer'
    assert infer_column_type([1.5, 2]) == 'number'
    assert infer_column_type([datetime(2024, 1, 1)]) == 'date'
    assert infer_column_type([True, False]) == 'string'
    assert infer_column_type([]) == 'unknown'


@pytest.mark.unit
def test_sample_size_limits_type_voting():
    cells = ["1", "2", "3", "oops"]

    assert profile_column("n", cells).dtype == 'string'
    assert profile_column("n", cells, sample_size=3).dtype == 'integer'


@pytest.mark.unit
def test_numeric_stats_skip_values_outside_sample():
    column = profile_column("n", ["1", "2", "3", "oops"], sample_size=3)
    assert column.min == 1.0
    assert column.max == 3.0


@pytest.mark.unit
def test_likely_categorical_numeric_column():
    dataset = [{"rating": str(1 + i % 3)} for i in range(30)]
    rating = profile_dataset(dataset)["rating"]

    assert rating.dtype == 'integer'
    assert rating.unique_count == 3
    assert rating.is_likely_categorical is True


@pytest.mark.unit
def test_single_date_is_not_time_series():
    profile = profile_dataset([{"d": "2024-01-01"}, {"d": "2024-01-01"}])
    assert profile["d"].is_likely_time_series is False


@pytest.mark.unit
def test_column_order_follows_first_record():
    dataset = [{"b": 1, "a": 2}, {"a": 3, "b": 4, "c": 5}]
    assert column_names(dataset) == ["b", "a"]
    assert list(profile_dataset(dataset)) == ["b", "a"]


@pytest.mark.unit
def test_missing_keys_count_as_null():
    profile = profile_dataset([{"a": 1, "b": "x"}, {"a": 2}])
    assert profile["b"].null_count == 1


@pytest.mark.unit
def test_column_selectors():
    dataset = [
        {"score": str(i * 1.5), "rating": str(1 + i % 2), "team": f"T{i % 3}", "day": f"2024-01-{i + 1:02d}"}
        for i in range(20)
    ]
    profile = profile_dataset(dataset)

    assert numeric_columns(profile) == ["score"]
    assert numeric_columns(profile, include_categorical=True) == ["score", "rating"]
    assert categorical_columns(profile) == ["rating", "team"]
    assert date_columns(profile) == ["day"]


@pytest.mark.unit
def test_oversized_integer_does_not_abort_profiling():
    column = profile_dataset([{"a": 10 ** 400}, {"a": 1}])["a"]

    assert column.null_count == 0
    assert column.min == 1.0
    assert column.max == 1.0


@pytest.mark.unit
def test_profiling_is_repeatable(sales_data):
    assert profile_dataset(sales_data) == profile_dataset(sales_data)


@pytest.mark.unit
def test_unique_ratio_at_threshold_is_not_categorical():
    dataset = [{"flag": str(i % 2)} for i in range(10)]
    flag = profile_dataset(dataset)["flag"]

    assert flag.unique_count == 2
    assert flag.is_likely_categorical is False


@pytest.mark.unit
def test_too_many_distinct_values_is_not_categorical():
    dataset = [{"code": str(i % 11)} for i in range(110)]
    code = profile_dataset(dataset)["code"]

    assert code.unique_count == 11
    assert code.is_likely_categorical is False
