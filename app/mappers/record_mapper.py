"""
app/mappers/record_mapper.py

Derivation of simplified record fields from parsed raw dataset rows.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from app.domain.sustainability import (
    COL_CO2_PRODUCTION,
    COL_CONTINENT,
    COL_COUNTRY_NAME,
    COL_GDP_PER_CAPITA,
    COL_INCOME_CLASSIFICATION,
    COL_LIFE_EXPECTANCY,
    COL_RENEWABLE_CONSUMPTION,
    COL_UN_SDG_REGION,
    COL_YEAR,
    UNKNOWN,
    NormalizedRecord,
    as_metric,
)

# Source columns for each derived classification, in priority order.
REGION_SOURCES: tuple[str, ...] = (COL_CONTINENT, COL_UN_SDG_REGION)
INCOME_GROUP_SOURCES: tuple[str, ...] = (COL_INCOME_CLASSIFICATION,)


class RecordMapper:
    """
    Converts one valid parsed raw row into a :class:`NormalizedRecord`.
    """

    def __init__(
        self,
        *,
        region_sources: Sequence[str] = REGION_SOURCES,
        income_group_sources: Sequence[str] = INCOME_GROUP_SOURCES,
    ) -> None:
        self._region_sources = tuple(region_sources)
        self._income_group_sources = tuple(income_group_sources)

    def to_normalized(self, raw_row: Mapping[str, Any]) -> NormalizedRecord:
        """
        Build the simplified view of *raw_row*.

        The caller guarantees the row passed the key-column validity check.
        """

        return NormalizedRecord(
            country=str(raw_row[COL_COUNTRY_NAME]),
            year=int(raw_row[COL_YEAR]),
            region=self._first_present(raw_row, self._region_sources),
            income_group=self._first_present(raw_row, self._income_group_sources),
            carbon_emissions=as_metric(raw_row.get(COL_CO2_PRODUCTION)),
            renewable_energy=as_metric(raw_row.get(COL_RENEWABLE_CONSUMPTION)),
            gdp_per_capita=as_metric(raw_row.get(COL_GDP_PER_CAPITA)),
            life_expectancy=as_metric(raw_row.get(COL_LIFE_EXPECTANCY)),
            # The source schema has no forest area column.
            forest_area=None,
            raw=raw_row,
        )

    @staticmethod
    def _first_present(raw_row: Mapping[str, Any], columns: Sequence[str]) -> str:
        for column in columns:
            value = raw_row.get(column)
            if value:
                return str(value)
        return UNKNOWN
