"""
Unit tests for chart payload builders.
"""
import pytest
from autocharts.core.schemas import Histogram, SummaryStatistics
from autocharts.services.generator import (
    build_aggregated_chart,
    category_bar_chart,
    distribution_chart,
    month_label,
    overview_chart,
    palette_colors,
    scatter_points,
    statistics_chart,
    timeline_chart,
)


@pytest.fixture
def sales():
    rows = []
    for i in range(30):
        rows.append({
            "product": f"P{i % 25}",
            "region": ["North", "South", "East"][i % 3],
            "revenue": str(100 + i),
            "units": i,
        })
    return rows


@pytest.mark.unit
def test_palette_colors_cycle_with_lower_alpha():
    colors = palette_colors(12)
    assert len(colors) == 12
    assert colors[0] == "#1f77b4cc"
    assert colors[10] == "#1f77b4b3"


@pytest.mark.unit
def test_overview_chart():
    chart = overview_chart(42)
    assert chart.id == "overview-total"
    assert chart.type == "doughnut"
    assert chart.labels == ["Total Records"]
    assert chart.series[0].data == [42]


@pytest.mark.unit
def test_statistics_chart():
    chart = statistics_chart("price", SummaryStatistics(min=1, max=9, mean=4, median=3))
    assert chart.id == "numeric-stats-price"
    assert chart.labels == ["Min", "Avg", "Max"]
    assert chart.series[0].data == [1, 4, 9]


@pytest.mark.unit
def test_distribution_chart():
    chart = distribution_chart("price", Histogram(bins=["0.0-1.0", "1.0-2.0"], counts=[3, 4]))
    assert chart.type == "histogram"
    assert chart.labels == ["0.0-1.0", "1.0-2.0"]
    assert chart.series[0].data == [3, 4]


@pytest.mark.unit
def test_category_bar_chart():
    chart = category_bar_chart("region", [("North", 5), ("South", 2)])
    assert chart.id == "categorical-bar-region"
    assert chart.labels == ["North", "South"]
    assert chart.series[0].data == [5, 2]
    assert len(chart.series[0].colors) == 2


@pytest.mark.unit
def test_timeline_chart_labels_months():
    assert month_label("2024-01") == "Jan 2024"
    chart = timeline_chart("date", {"2024-01": 3, "2024-02": 1})
    assert chart.labels == ["Jan 2024", "Feb 2024"]
    assert chart.series[0].data == [3, 1]


@pytest.mark.unit
def test_scatter_points_skip_non_numeric_and_limit():
    rows = [{"x": i, "y": "bad" if i == 2 else i * 2} for i in range(10)]
    points = scatter_points(rows, "x", "y", limit=4)
    assert points == [{"x": 0, "y": 0}, {"x": 1, "y": 2}, {"x": 3, "y": 6}, {"x": 4, "y": 8}]


@pytest.mark.unit
def test_build_bar_chart_top_groups(sales):
    chart = build_aggregated_chart(sales, "bar", "product", "revenue", "sum")

    assert chart.type == "bar"
    assert len(chart.labels) == 20
    values = chart.series[0].data
    assert values == sorted(values, reverse=True)
    assert chart.title == "Sum of revenue by product"


@pytest.mark.unit
def test_build_pie_chart_counts_top_categories(sales):
    chart = build_aggregated_chart(sales, "pie", "product")
    assert len(chart.labels) == 10
    assert chart.series[0].data[0] == 2


@pytest.mark.unit
def test_build_radar_chart_keeps_first_groups(sales):
    chart = build_aggregated_chart(sales, "radar", "product", "units", "count")
    assert chart.labels == [f"P{i}" for i in range(8)]


@pytest.mark.unit
def test_build_scatter_chart(sales):
    chart = build_aggregated_chart(sales, "scatter", "units", "revenue")
    assert len(chart.series[0].data) == 30
    assert chart.series[0].data[0] == {"x": 0, "y": 100}


@pytest.mark.unit
def test_build_chart_without_value_column_is_empty(sales):
    chart = build_aggregated_chart(sales, "line", "region")
    assert chart.labels == []
    assert chart.series == []


@pytest.mark.unit
def test_build_chart_average(sales):
    chart = build_aggregated_chart(sales, "line", "region", "units", "average")
    assert dict(zip(chart.labels, chart.series[0].data)) == {"North": 13.5, "South": 14.5, "East": 15.5}
