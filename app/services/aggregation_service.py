"""
app/services/aggregation_service.py

Aggregation and summary statistics over normalized dataset records.

All functions take an already-filtered record sequence (or the full store
contents) and never mutate it. They are total: missing fields, null values
and non-numeric cells degrade to empty or zero results instead of raising.

Numeric rules
-------------
Only finite ``int``/``float`` values count as metric observations; booleans,
strings and ``None`` are skipped (see :func:`app.domain.sustainability.as_metric`).

Formulas
--------
mean         = sum(values) / count
median       = middle value, or the mean of the two middle values for even counts
correlation  = Pearson r over rows where both fields are numeric
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Iterable, Sequence

import numpy as np

from app.domain.sustainability import (
    FIELD_COUNTRY,
    SCHEMA_METRICS_COUNT,
    NormalizedRecord,
    as_metric,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Dataset metadata
# ---------------------------------------------------------------------------

DATASET_NAME: Final[str] = "World Sustainability Dataset"
DATASET_DESCRIPTION: Final[str] = (
    "Comprehensive sustainability metrics covering environmental, social, and "
    "economic indicators across 173 countries over 19 years (2000-2018). Data "
    "sourced from the World Bank, UN, and other international organizations."
)
DATASET_SOURCE: Final[str] = "Kaggle TrueCue Women+Data Hackathon"
DATASET_LAST_UPDATED: Final[str] = "2024"


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegionalAverage:
    region: str
    average: float
    count: int


@dataclass(frozen=True)
class MetricSummary:
    """
    Descriptive statistics of one metric. All values are 0 when count is 0.
    """

    min: float
    max: float
    mean: float
    median: float
    count: int

    @classmethod
    def empty(cls) -> MetricSummary:
        return cls(min=0.0, max=0.0, mean=0.0, median=0.0, count=0)


@dataclass(frozen=True)
class DatasetInfo:
    """
    Dataset-level metadata.

    ``metrics_count`` describes the source schema, not the loaded rows.
    """

    total_records: int
    countries: int
    year_range: tuple[int, int]
    metrics_count: int = SCHEMA_METRICS_COUNT
    name: str = DATASET_NAME
    description: str = DATASET_DESCRIPTION
    source: str = DATASET_SOURCE
    last_updated: str = DATASET_LAST_UPDATED


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _metric_values(records: Iterable[NormalizedRecord], metric: str) -> list[float | int]:
    values = []
    for record in records:
        value = as_metric(record.get(metric))
        if value is not None:
            values.append(value)
    return values


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def unique_values(records: Iterable[NormalizedRecord], field_name: str) -> list[str]:
    """
    Distinct non-empty values of *field_name*, sorted case-sensitively.
    """

    distinct = {str(value) for value in (record.get(field_name) for record in records) if value}
    return sorted(distinct)


def regional_average(
    records: Iterable[NormalizedRecord],
    metric: str,
    year: int | None = None,
) -> list[RegionalAverage]:
    """
    Mean of *metric* per region, optionally restricted to one *year*.

    Records with no numeric value for *metric* do not contribute, and regions
    without contributors are omitted. Regions appear in first-seen order.
    """

    grouped: dict[str, list[float | int]] = {}
    for record in records:
        if year is not None and record.year != year:
            continue
        value = as_metric(record.get(metric))
        if value is None:
            continue
        grouped.setdefault(record.region, []).append(value)

    return [
        RegionalAverage(region=region, average=float(np.mean(values)), count=len(values))
        for region, values in grouped.items()
    ]


def summary(records: Iterable[NormalizedRecord], metric: str) -> MetricSummary:
    values = _metric_values(records, metric)
    if not values:
        return MetricSummary.empty()

    array = np.asarray(values, dtype=float)
    return MetricSummary(
        min=float(array.min()),
        max=float(array.max()),
        mean=float(array.mean()),
        median=float(np.median(array)),
        count=len(values),
    )


def correlation(records: Iterable[NormalizedRecord], field_a: str, field_b: str) -> float:
    """
    Pearson correlation between two fields.

    Only rows where both values are numeric are paired. Returns 0.0 when
    fewer than two pairs exist or either series is constant.
    """

    pairs: list[tuple[float | int, float | int]] = []
    for record in records:
        a = as_metric(record.get(field_a))
        b = as_metric(record.get(field_b))
        if a is None or b is None:
            continue
        pairs.append((a, b))

    if len(pairs) < 2:
        return 0.0

    x = np.asarray([pair[0] for pair in pairs], dtype=float)
    y = np.asarray([pair[1] for pair in pairs], dtype=float)
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = float(np.sqrt(np.sum(dx * dx) * np.sum(dy * dy)))
    if denominator == 0 or not np.isfinite(denominator):
        logger.debug("Correlation undefined field_a=%s field_b=%s", field_a, field_b)
        return 0.0

    r = float(np.sum(dx * dy)) / denominator
    return float(np.clip(r, -1.0, 1.0))


def total_years(records: Iterable[NormalizedRecord]) -> int:
    return len({record.year for record in records})


def dataset_info(records: Sequence[NormalizedRecord]) -> DatasetInfo:
    """
    Record, country and year coverage of *records* plus static schema metadata.

    An empty sequence yields ``year_range=(0, 0)``.
    """

    years = [record.year for record in records]
    year_range = (min(years), max(years)) if years else (0, 0)
    return DatasetInfo(
        total_records=len(records),
        countries=len({record.get(FIELD_COUNTRY) for record in records}),
        year_range=year_range,
    )
