"""
Summary statistics, histograms and date bucketing.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from autocharts.core.schemas import Histogram, SummaryStatistics


def summary_statistics(values: Sequence[float]) -> Optional[SummaryStatistics]:
    """
    Min, max, mean and median of values, or None for an empty input.

    The median is the element at index len // 2 of the sorted values; for an
    even count that is the upper of the two middle elements, not their average.
    """
    if len(values) == 0:
        return None
    ordered = np.sort(np.asarray(values, dtype='float64'))
    return SummaryStatistics(
        min=float(ordered[0]),
        max=float(ordered[-1]),
        mean=float(ordered.mean()),
        median=float(ordered[len(ordered) // 2]),
    )


def histogram(values: Sequence[float], bin_count: int) -> Histogram:
    """
    Equal-width histogram over [min, max].

    Bin i covers [min + i*width, min + (i+1)*width); the last bin is closed on
    the right so the maximum is counted. Labels show both bounds to one
    decimal place.
    """
    if len(values) == 0 or bin_count < 1:
        return Histogram()

    data = np.asarray(values, dtype='float64')
    low, high = float(data.min()), float(data.max())
    width = (high - low) / bin_count

    bins: List[str] = []
    counts: List[int] = []
    for i in range(bin_count):
        start = low + i * width
        end = low + (i + 1) * width
        if i == bin_count - 1:
            # closed at the maximum itself; start + width can round below it
            members = data >= start
        else:
            members = (data >= start) & (data < end)
        bins.append(f"{start:.1f}-{end:.1f}")
        counts.append(int(np.count_nonzero(members)))

    return Histogram(bins=bins, counts=counts)


def month_key(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def group_by_month(dates: Iterable[datetime]) -> Dict[str, int]:
    """Count of dates per YYYY-MM bucket, buckets in chronological order."""
    counts: Dict[str, int] = {}
    for moment in dates:
        key = month_key(moment)
        counts[key] = counts.get(key, 0) + 1
    return dict(sorted(counts.items()))
