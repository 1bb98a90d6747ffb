"""
Chart inference service.

Decides which charts are worth generating for a dataset from its column
profiles, using deterministic rules, and assembles them in a fixed order:
overview, numeric, categorical, time series, correlation.
"""
import logging
from typing import Dict, List

from autocharts.core.performance import track_performance
from autocharts.core.schemas import ChartSpec, ChartSuggestion, ColumnProfile, Record
from autocharts.services.aggregation import top_entries, value_counts
from autocharts.services.coercion import as_datetime, as_number
from autocharts.services.generator import (
    category_bar_chart,
    category_pie_chart,
    distribution_chart,
    overview_chart,
    scatter_chart,
    scatter_points,
    statistics_chart,
    timeline_chart,
)
from autocharts.services.profiler import categorical_columns, date_columns, numeric_columns
from autocharts.services.statistics import group_by_month, histogram, summary_statistics

logger = logging.getLogger(__name__)

MAX_CHARTS = 12

# Per-category limits
MAX_NUMERIC_COLUMNS = 4
MAX_CATEGORICAL_COLUMNS = 4
MAX_TIME_SERIES_COLUMNS = 2
MAX_SCATTER_PAIRS = 2

HISTOGRAM_BINS = 8
HISTOGRAM_MIN_VALUES = 10  # a distribution needs more than this many values
MIN_CATEGORIES, MAX_CATEGORIES = 2, 50
MAX_CATEGORY_BARS = 15
MAX_PIE_SLICES = 8
MIN_TIME_SERIES_DATES = 5
MIN_SCATTER_POINTS = 5


def _chartable_categories(profile: Dict[str, ColumnProfile]) -> List[str]:
    return [
        name for name in categorical_columns(profile)
        if MIN_CATEGORIES <= profile[name].unique_count <= MAX_CATEGORIES
    ]


def _time_series_columns(profile: Dict[str, ColumnProfile]) -> List[str]:
    return [name for name in date_columns(profile) if profile[name].is_likely_time_series]


def numeric_charts(dataset: List[Record], profile: Dict[str, ColumnProfile]) -> List[ChartSpec]:
    """Min/avg/max bars and a distribution for each continuous numeric column."""
    charts = []
    for column in numeric_columns(profile)[:MAX_NUMERIC_COLUMNS]:
        values = [v for v in (as_number(row.get(column)) for row in dataset) if v is not None]
        stats = summary_statistics(values)
        if stats is None:
            continue

        charts.append(statistics_chart(column, stats))
        if len(values) > HISTOGRAM_MIN_VALUES:
            charts.append(distribution_chart(column, histogram(values, HISTOGRAM_BINS)))
    return charts


def categorical_charts(dataset: List[Record], profile: Dict[str, ColumnProfile]) -> List[ChartSpec]:
    """Value-count bars, plus a pie when the category count is small."""
    charts = []
    for column in _chartable_categories(profile)[:MAX_CATEGORICAL_COLUMNS]:
        entries = top_entries(value_counts(dataset, column), MAX_CATEGORY_BARS)
        if not entries:
            continue

        charts.append(category_bar_chart(column, entries))
        if 1 < len(entries) <= MAX_PIE_SLICES:
            charts.append(category_pie_chart(column, entries))
    return charts


def time_series_charts(dataset: List[Record], profile: Dict[str, ColumnProfile]) -> List[ChartSpec]:
    """Records per month for date columns with enough distinct dates."""
    charts = []
    for column in _time_series_columns(profile)[:MAX_TIME_SERIES_COLUMNS]:
        dates = [d for d in (as_datetime(row.get(column)) for row in dataset) if d is not None]
        if len(dates) < MIN_TIME_SERIES_DATES:
            continue
        charts.append(timeline_chart(column, group_by_month(dates)))
    return charts


def correlation_charts(dataset: List[Record], profile: Dict[str, ColumnProfile]) -> List[ChartSpec]:
    """Scatter plots of neighbouring continuous numeric columns."""
    columns = numeric_columns(profile)
    charts = []
    for i in range(min(len(columns) - 1, MAX_SCATTER_PAIRS)):
        x_column, y_column = columns[i], columns[i + 1]
        points = scatter_points(dataset, x_column, y_column)
        if len(points) < MIN_SCATTER_POINTS:
            continue
        charts.append(scatter_chart(x_column, y_column, points, index=i))
    return charts


@track_performance("recommend_charts")
def recommend_charts(
    dataset: List[Record],
    profile: Dict[str, ColumnProfile],
    max_charts: int = MAX_CHARTS
) -> List[ChartSpec]:
    """
    Build the automatic chart set for a dataset.

    Args:
        dataset: Records the profile was computed from (or a filtered subset)
        profile: Output of profile_dataset
        max_charts: Hard cap; later chart categories are dropped once reached

    Returns:
        Chart specs, overview first. Empty for an empty dataset.
    """
    if not dataset:
        return []

    charts: List[ChartSpec] = [overview_chart(len(dataset))]
    charts.extend(numeric_charts(dataset, profile))
    charts.extend(categorical_charts(dataset, profile))
    charts.extend(time_series_charts(dataset, profile))
    charts.extend(correlation_charts(dataset, profile))

    if len(charts) > max_charts:
        logger.debug(f"Truncating {len(charts)} charts to {max_charts}")
    result = charts[:max_charts]
    logger.info(f"Generated {len(result)} automatic charts for {len(dataset)} rows")
    return result


def suggest_chart_types(profile: Dict[str, ColumnProfile]) -> Dict[str, ChartSuggestion]:
    """
    Name the chart types a dataset supports, with the columns to use.

    Unlike recommend_charts this needs no data, only the profile.
    """
    numeric = numeric_columns(profile, include_categorical=True)
    dates = date_columns(profile)
    categorical = categorical_columns(profile)
    suggestions: Dict[str, ChartSuggestion] = {}

    if numeric:
        suggestions['histogram'] = ChartSuggestion(
            type='bar',
            description='Distribution of a numeric variable.',
            required_columns=numeric[:1]
        )

    if categorical:
        suggestions['barChart'] = ChartSuggestion(
            type='bar',
            description='Compare values across categories.',
            required_columns=categorical[:1]
        )
        suggestions['pieChart'] = ChartSuggestion(
            type='pie',
            description='Proportion of each category.',
            required_columns=categorical[:1]
        )

    if len(numeric) >= 2:
        suggestions['scatterPlot'] = ChartSuggestion(
            type='scatter',
            description='Relationship between two numeric variables.',
            required_columns=numeric[:2]
        )

    if numeric and categorical:
        suggestions['groupedBarChart'] = ChartSuggestion(
            type='bar',
            description='Compare a numeric variable across different categories.',
            required_columns=[categorical[0], numeric[0]]
        )

    if dates and numeric:
        suggestions['lineChart'] = ChartSuggestion(
            type='line',
            description='Trend of a numeric variable over time.',
            required_columns=[dates[0], numeric[0]]
        )

    return suggestions
