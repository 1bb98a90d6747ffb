"""
Chart payload generator.

Builds ChartSpec objects (labels plus data series) for each kind of chart the
engine produces. Rendering is left to the client; these payloads only carry
data, titles and colors.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from autocharts.core.schemas import AggregationSpec, ChartSeries, ChartSpec, Histogram, Record, SummaryStatistics
from autocharts.services.aggregation import aggregate, top_entries, value_counts
from autocharts.services.coercion import as_number

# Colorblind-safe color palettes
COLORBLIND_SAFE_PALETTES = {
    'categorical': [
        '#1f77b4',  # Blue
        '#ff7f0e',  # Orange
        '#2ca02c',  # Green
        '#d62728',  # Red
        '#9467bd',  # Purple
        '#8c564b',  # Brown
        '#e377c2',  # Pink
        '#7f7f7f',  # Gray
        '#bcbd22',  # Yellow-green
        '#17becf'   # Cyan
    ],
    'sequential': [
        '#08306b',
        '#08519c',
        '#2171b5',
        '#4292c6',
        '#6baed6',
        '#9ecae1',
    ],
}

AGGREGATION_LABELS = {
    'sum': 'Sum',
    'count': 'Count',
    'average': 'Average',
    'min': 'Minimum',
    'max': 'Maximum',
}

# Manual builder limits
TOP_GROUPS = 20
TOP_PIE_CATEGORIES = 10
RADAR_GROUPS = 8
MAX_SCATTER_POINTS = 200


def palette_colors(count: int, palette: str = 'categorical') -> List[str]:
    """
    Cycle a palette for count items.

    Each pass over the palette lowers the alpha channel so repeated hues stay
    distinguishable.
    """
    colors = COLORBLIND_SAFE_PALETTES[palette]
    result = []
    for i in range(count):
        opacity = max(0.8 - (i // len(colors)) * 0.1, 0.2)
        result.append(f"{colors[i % len(colors)]}{round(opacity * 255):02x}")
    return result


def _split(entries: Sequence[Tuple[str, Any]]) -> Tuple[List[str], List[Any]]:
    return [label for label, _ in entries], [value for _, value in entries]


def overview_chart(row_count: int) -> ChartSpec:
    return ChartSpec(
        id="overview-total",
        title="Total Records",
        type="doughnut",
        labels=["Total Records"],
        series=[ChartSeries(label="Records", data=[row_count], colors=palette_colors(1))],
    )


def statistics_chart(column: str, stats: SummaryStatistics) -> ChartSpec:
    return ChartSpec(
        id=f"numeric-stats-{column}",
        title=f"{column} Statistics",
        type="bar",
        labels=["Min", "Avg", "Max"],
        series=[ChartSeries(label=column, data=[stats.min, stats.mean, stats.max], colors=palette_colors(3))],
    )


def distribution_chart(column: str, hist: Histogram) -> ChartSpec:
    return ChartSpec(
        id=f"numeric-dist-{column}",
        title=f"{column} Distribution",
        type="histogram",
        labels=list(hist.bins),
        series=[ChartSeries(label="Frequency", data=list(hist.counts), colors=palette_colors(1, 'sequential'))],
    )


def category_bar_chart(column: str, entries: Sequence[Tuple[str, int]]) -> ChartSpec:
    labels, counts = _split(entries)
    return ChartSpec(
        id=f"categorical-bar-{column}",
        title=f"{column} Distribution",
        type="bar",
        labels=labels,
        series=[ChartSeries(label="Count", data=counts, colors=palette_colors(len(counts)))],
    )


def category_pie_chart(column: str, entries: Sequence[Tuple[str, int]]) -> ChartSpec:
    labels, counts = _split(entries)
    return ChartSpec(
        id=f"categorical-pie-{column}",
        title=f"Top {column} Categories",
        type="pie",
        labels=labels,
        series=[ChartSeries(label="Count", data=counts, colors=palette_colors(len(counts)))],
    )


def month_label(key: str) -> str:
    """'2024-01' -> 'Jan 2024'."""
    return datetime.strptime(key, "%Y-%m").strftime("%b %Y")


def timeline_chart(column: str, monthly: Dict[str, int]) -> ChartSpec:
    return ChartSpec(
        id=f"timeseries-{column}",
        title=f"{column} Timeline (Monthly)",
        type="line",
        labels=[month_label(key) for key in monthly],
        series=[ChartSeries(label="Records", data=list(monthly.values()), colors=palette_colors(1, 'sequential'))],
    )


def scatter_points(dataset: List[Record], x_column: str, y_column: str,
                   limit: int = MAX_SCATTER_POINTS) -> List[Dict[str, float]]:
    """First limit rows where both columns hold finite numbers, as {x, y}."""
    points = []
    for row in dataset:
        x, y = as_number(row.get(x_column)), as_number(row.get(y_column))
        if x is None or y is None:
            continue
        points.append({"x": x, "y": y})
        if len(points) >= limit:
            break
    return points


def scatter_chart(x_column: str, y_column: str, points: List[Dict[str, float]], index: int = 0) -> ChartSpec:
    color = COLORBLIND_SAFE_PALETTES['categorical'][index % len(COLORBLIND_SAFE_PALETTES['categorical'])]
    return ChartSpec(
        id=f"correlation-{x_column}-{y_column}",
        title=f"{y_column} vs {x_column}",
        type="scatter",
        series=[ChartSeries(label=f"{y_column} vs {x_column}", data=points, colors=[f"{color}99"])],
    )


def _aggregated_title(chart_type: str, x_column: str, y_column: Optional[str], function: str) -> str:
    if chart_type in ('pie', 'doughnut'):
        return f"{x_column} Distribution"
    if chart_type == 'scatter':
        return f"{y_column or 'Value'} vs {x_column}"
    return f"{AGGREGATION_LABELS.get(function, 'Sum')} of {y_column or 'Value'} by {x_column}"


def build_aggregated_chart(
    dataset: List[Record],
    chart_type: str,
    x_column: str,
    y_column: Optional[str] = None,
    function: str = 'sum'
) -> ChartSpec:
    """
    Build a user-configured chart.

    - pie / doughnut: row counts of x_column, top 10 categories
    - radar: aggregated y_column by x_column, first 8 groups as encountered
    - scatter: x_column against y_column, first 200 numeric pairs
    - anything else (bar, line): aggregated y_column by x_column, top 20 groups

    Charts that need a y column return empty data when it is missing.
    """
    chart = ChartSpec(
        id=f"custom-{chart_type}-{x_column}-{y_column or 'count'}",
        title=_aggregated_title(chart_type, x_column, y_column, function),
        type=chart_type,
    )

    if chart_type in ('pie', 'doughnut'):
        labels, counts = _split(top_entries(value_counts(dataset, x_column), TOP_PIE_CATEGORIES))
        chart.labels = labels
        chart.series = [ChartSeries(label="Count", data=counts, colors=palette_colors(len(counts)))]
        return chart

    if not y_column:
        return chart

    if chart_type == 'scatter':
        chart.series = [ChartSeries(label=chart.title, data=scatter_points(dataset, x_column, y_column))]
        return chart

    grouped = aggregate(dataset, AggregationSpec(group_column=x_column, value_column=y_column, function=function))
    if chart_type == 'radar':
        entries = list(grouped.items())[:RADAR_GROUPS]
    else:
        entries = top_entries(grouped, TOP_GROUPS)

    labels, values = _split(entries)
    chart.labels = labels
    chart.series = [ChartSeries(
        label=f"{function} of {y_column}",
        data=values,
        colors=palette_colors(len(values)),
    )]
    return chart
