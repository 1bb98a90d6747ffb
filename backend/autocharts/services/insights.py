"""
Natural language insights and dataset quality summary.
"""
import logging
from typing import Dict, List

import numpy as np

from autocharts.core.schemas import ColumnProfile, DatasetSummary, Record
from autocharts.services.coercion import stringify

logger = logging.getLogger(__name__)

MAX_INSIGHTS = 3


def generate_insights(profile: Dict[str, ColumnProfile]) -> List[str]:
    """
    One sentence per numeric or date column describing its range.

    Only the first three insights are returned.
    """
    insights = []
    for column in profile.values():
        if column.is_numeric and column.mean is not None:
            insights.append(
                f"{column.name}: The values range from {stringify(column.min)} to {stringify(column.max)}, "
                f"with an average of {column.mean:.2f}."
            )
        elif column.dtype == 'date' and column.min_date and column.max_date:
            insights.append(
                f"{column.name}: The dates range from {column.min_date:%m/%d/%Y} "
                f"to {column.max_date:%m/%d/%Y}."
            )
    return insights[:MAX_INSIGHTS]


def summarize_dataset(dataset: List[Record], profile: Dict[str, ColumnProfile]) -> DatasetSummary:
    """
    Record/column counts plus completeness and quality percentages.

    completeness = share of cells that are not missing.
    data_quality = average of mean column uniqueness and the share of
    non-blank cells.
    """
    total_records = len(dataset)
    total_columns = len(profile)
    total_cells = total_records * total_columns

    numeric = sum(1 for c in profile.values() if c.is_numeric)
    categories = sum(1 for c in profile.values() if c.dtype == 'string')

    if total_cells == 0:
        return DatasetSummary(
            record_count=total_records,
            column_count=total_columns,
            numeric_columns=numeric,
            categorical_columns=categories,
            data_points=0,
            completeness=0,
            data_quality=0,
        )

    nulls = sum(c.null_count for c in profile.values())
    empties = sum(c.empty_count for c in profile.values())
    uniqueness = np.mean([c.unique_count / total_records for c in profile.values()])

    completeness = round((total_cells - nulls) / total_cells * 100)
    data_quality = round((uniqueness + (1 - empties / total_cells)) / 2 * 100)

    logger.debug(f"Dataset summary: completeness={completeness}%, quality={data_quality}%")
    return DatasetSummary(
        record_count=total_records,
        column_count=total_columns,
        numeric_columns=numeric,
        categorical_columns=categories,
        data_points=total_cells,
        completeness=int(completeness),
        data_quality=int(data_quality),
    )
