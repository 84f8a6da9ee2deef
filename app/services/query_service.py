"""
app/services/query_service.py

Predicate-based filtering over normalized dataset records.

Every function here is pure: it reads the given record sequence, never
mutates it, and preserves input order in its result.

Filter dimensions
-----------------
    countries      - membership on ``Country``
    years          - membership on ``Year``
    regions        - membership on ``Region``
    income_groups  - membership on ``Income group``
    regime_types   - membership on the RoW regime type column
    search_term    - case-insensitive substring over SEARCH_FIELDS

Options are AND-composed. An empty or absent option imposes no constraint,
which includes an empty ``countries`` set.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Iterable, Sequence

from app.domain.sustainability import (
    COL_REGIME_TYPE,
    COL_UN_SDG_REGION,
    FIELD_COUNTRY,
    FIELD_INCOME_GROUP,
    FIELD_REGION,
    NormalizedRecord,
    as_metric,
)

SEARCH_FIELDS: tuple[str, ...] = (
    FIELD_COUNTRY,
    FIELD_REGION,
    FIELD_INCOME_GROUP,
    COL_REGIME_TYPE,
    COL_UN_SDG_REGION,
)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterOptions:
    """
    Immutable set of filter criteria.

    Set-valued options accept any iterable and are frozen on construction;
    a bare string counts as a single value.
    """

    countries: frozenset[str] = field(default_factory=frozenset)
    years: frozenset[int] = field(default_factory=frozenset)
    regions: frozenset[str] = field(default_factory=frozenset)
    income_groups: frozenset[str] = field(default_factory=frozenset)
    regime_types: frozenset[str] = field(default_factory=frozenset)
    search_term: str | None = None

    def __post_init__(self) -> None:
        for option in fields(self):
            if option.name == "search_term":
                continue
            value = getattr(self, option.name)
            if isinstance(value, str):
                object.__setattr__(self, option.name, frozenset({value}))
            elif not isinstance(value, frozenset):
                object.__setattr__(self, option.name, frozenset(value or ()))

    def is_empty(self) -> bool:
        """
        True when no option constrains the result.
        """

        return not any(
            (
                self.countries,
                self.years,
                self.regions,
                self.income_groups,
                self.regime_types,
                self.search_term,
            )
        )

    def merge(self, other: FilterOptions) -> FilterOptions:
        """
        Combine two option sets keyed on independent dimensions.

        Options set on *other* take precedence; options it leaves empty keep
        this instance's value. For disjoint keys,
        ``filter_records(filter_records(r, a), b)`` equals
        ``filter_records(r, a.merge(b))``.
        """

        changes: dict[str, Any] = {}
        for option in fields(other):
            value = getattr(other, option.name)
            if value:
                changes[option.name] = value
        return replace(self, **changes)


@dataclass(frozen=True)
class TimePoint:
    """
    One (year, value) pair of a country time series. ``value`` may be None.
    """

    year: int
    value: float | int | None


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def _matches_search(record: NormalizedRecord, needle: str) -> bool:
    for field_name in SEARCH_FIELDS:
        value = record.get(field_name)
        if value is None:
            continue
        if needle in str(value).lower():
            return True
    return False


def matches(record: NormalizedRecord, options: FilterOptions) -> bool:
    """
    Return True when *record* satisfies every supplied option.
    """

    if options.countries and record.country not in options.countries:
        return False
    if options.years and record.year not in options.years:
        return False
    if options.regions and record.region not in options.regions:
        return False
    if options.income_groups and record.income_group not in options.income_groups:
        return False
    if options.regime_types and record.get(COL_REGIME_TYPE) not in options.regime_types:
        return False
    if options.search_term:
        if not _matches_search(record, options.search_term.lower()):
            return False
    return True


def filter_records(
    records: Iterable[NormalizedRecord],
    options: FilterOptions | None = None,
) -> list[NormalizedRecord]:
    """
    Stable filter of *records* by *options*.
    """

    if options is None or options.is_empty():
        return list(records)
    return [record for record in records if matches(record, options)]


def country_records(records: Iterable[NormalizedRecord], country: str) -> list[NormalizedRecord]:
    return [record for record in records if record.country == country]


def country_time_series(
    records: Sequence[NormalizedRecord],
    country: str,
    metric: str,
) -> list[TimePoint]:
    """
    Year-ordered values of *metric* for *country*.

    Missing or non-numeric values are kept as ``None`` so gaps stay visible.
    """

    points = [
        TimePoint(year=record.year, value=as_metric(record.get(metric)))
        for record in country_records(records, country)
    ]
    return sorted(points, key=lambda point: point.year)
