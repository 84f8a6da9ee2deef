"""
tests/test_aggregation_service.py

Pytest unit tests for unique values, regional averages, summary statistics,
correlation and dataset metadata.

Every function under test must be total: empty selections, null metrics and
unknown field names return defaults instead of raising.
"""

from __future__ import annotations

import math

import pytest

from app.domain.sustainability import (
    FIELD_CARBON_EMISSIONS,
    FIELD_COUNTRY,
    FIELD_GDP_PER_CAPITA,
    FIELD_REGION,
    FIELD_RENEWABLE_ENERGY,
    RAW_COLUMNS,
)
from app.services.aggregation_service import (
    DatasetInfo,
    MetricSummary,
    RegionalAverage,
    correlation,
    dataset_info,
    regional_average,
    summary,
    total_years,
    unique_values,
)
from app.services.query_service import FilterOptions, filter_records
from tests.factories import make_record


# ---------------------------------------------------------------------------
# Example scenario
# ---------------------------------------------------------------------------


class TestScenario:
    def test_country_filter(self, scenario_records) -> None:
        result = filter_records(scenario_records, FilterOptions(countries={"Brazil"}))
        assert result == scenario_records[:2]

    def test_summary(self, scenario_records) -> None:
        result = summary(scenario_records, FIELD_CARBON_EMISSIONS)
        assert result.count == 3
        assert result.min == pytest.approx(2.1)
        assert result.max == pytest.approx(9.1)
        assert result.mean == pytest.approx(4.5)
        assert result.median == pytest.approx(2.3)

    def test_unique_regions(self, scenario_records) -> None:
        assert unique_values(scenario_records, FIELD_REGION) == ["Europe", "South America"]


# ---------------------------------------------------------------------------
# unique_values
# ---------------------------------------------------------------------------


class TestUniqueValues:
    def test_sorted_case_sensitive(self) -> None:
        records = [make_record("b", 2000), make_record("B", 2000), make_record("a", 2000), make_record("b", 2001)]
        assert unique_values(records, FIELD_COUNTRY) == ["B", "a", "b"]

    def test_skips_empty_values(self) -> None:
        records = [
            make_record("Chile", 2000, raw={"Note": ""}),
            make_record("Peru", 2000, raw={"Note": "x"}),
            make_record("Peru", 2001),
        ]
        assert unique_values(records, "Note") == ["x"]

    def test_unknown_field_is_empty(self, scenario_records) -> None:
        assert unique_values(scenario_records, "No such field") == []


# ---------------------------------------------------------------------------
# regional_average
# ---------------------------------------------------------------------------


class TestRegionalAverage:
    def test_groups_and_averages(self, scenario_records) -> None:
        result = regional_average(scenario_records, FIELD_CARBON_EMISSIONS)
        assert result == [
            RegionalAverage(region="South America", average=pytest.approx(2.2), count=2),
            RegionalAverage(region="Europe", average=pytest.approx(9.1), count=1),
        ]

    def test_year_restriction(self, scenario_records) -> None:
        result = regional_average(scenario_records, FIELD_CARBON_EMISSIONS, year=2017)
        assert [(r.region, r.count) for r in result] == [("South America", 1)]

    def test_regions_without_values_are_omitted(self) -> None:
        records = [
            make_record("Chile", 2000, "South America", carbon_emissions=None),
            make_record("Spain", 2000, "Europe", carbon_emissions=5.0),
        ]
        result = regional_average(records, FIELD_CARBON_EMISSIONS)
        assert [r.region for r in result] == ["Europe"]
        assert result[0].average == pytest.approx(5.0)

    def test_non_numeric_values_do_not_contribute(self) -> None:
        records = [
            make_record("Chile", 2000, "South America", raw={"Index": "n/a"}),
            make_record("Peru", 2000, "South America", raw={"Index": 4}),
        ]
        result = regional_average(records, "Index")
        assert result == [RegionalAverage(region="South America", average=4.0, count=1)]


# ---------------------------------------------------------------------------
# summary
# ---------------------------------------------------------------------------


class TestSummary:
    def test_empty_input_is_all_zero(self) -> None:
        assert summary([], FIELD_CARBON_EMISSIONS) == MetricSummary(
            min=0.0, max=0.0, mean=0.0, median=0.0, count=0
        )

    def test_all_null_input_is_all_zero(self) -> None:
        records = [make_record("Chile", 2000), make_record("Peru", 2000)]
        assert summary(records, FIELD_CARBON_EMISSIONS) == MetricSummary.empty()

    def test_unknown_field_is_all_zero(self, scenario_records) -> None:
        assert summary(scenario_records, "No such field").count == 0

    def test_even_count_median(self) -> None:
        records = [make_record("c", 2000 + i, renewable_energy=v) for i, v in enumerate([4, 1, 3, 2])]
        result = summary(records, FIELD_RENEWABLE_ENERGY)
        assert result.median == pytest.approx(2.5)
        assert result.mean == pytest.approx(2.5)
        assert result.count == 4

    def test_booleans_and_strings_are_ignored(self) -> None:
        records = [
            make_record("a", 2000, raw={"Flag": True}),
            make_record("b", 2000, raw={"Flag": "7"}),
            make_record("c", 2000, raw={"Flag": 3}),
        ]
        result = summary(records, "Flag")
        assert result.count == 1
        assert result.min == result.max == 3.0


# ---------------------------------------------------------------------------
# correlation
# ---------------------------------------------------------------------------


class TestCorrelation:
    def test_perfect_positive(self) -> None:
        records = [make_record("c", 2000 + i, carbon_emissions=i, gdp_per_capita=2 * i + 1) for i in range(5)]
        assert correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA) == pytest.approx(1.0)

    def test_perfect_negative(self) -> None:
        records = [make_record("c", 2000 + i, carbon_emissions=i, gdp_per_capita=-3 * i) for i in range(5)]
        assert correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA) == pytest.approx(-1.0)

    def test_fewer_than_two_pairs_is_zero(self) -> None:
        records = [
            make_record("a", 2000, carbon_emissions=1.0, gdp_per_capita=10.0),
            make_record("b", 2000, carbon_emissions=2.0),
            make_record("c", 2000, gdp_per_capita=30.0),
        ]
        assert correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA) == 0.0

    def test_constant_field_is_zero(self) -> None:
        records = [make_record("c", 2000 + i, carbon_emissions=0.1, gdp_per_capita=float(i)) for i in range(4)]
        assert correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA) == 0.0

    def test_result_is_bounded(self) -> None:
        values = [(1e-9, 3.0), (2e-9, 1.0), (1e12, 7.5), (5.5, 5.5), (-4.0, 0.0)]
        records = [
            make_record("c", 2000 + i, carbon_emissions=a, gdp_per_capita=b) for i, (a, b) in enumerate(values)
        ]
        result = correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA)
        assert not math.isnan(result)
        assert -1.0 <= result <= 1.0

    def test_symmetric(self) -> None:
        records = [
            make_record("a", 2000, carbon_emissions=1.0, gdp_per_capita=3.0),
            make_record("b", 2000, carbon_emissions=2.0, gdp_per_capita=2.0),
            make_record("c", 2000, carbon_emissions=4.0, gdp_per_capita=7.0),
        ]
        assert correlation(records, FIELD_CARBON_EMISSIONS, FIELD_GDP_PER_CAPITA) == pytest.approx(
            correlation(records, FIELD_GDP_PER_CAPITA, FIELD_CARBON_EMISSIONS)
        )


# ---------------------------------------------------------------------------
# dataset_info / total_years
# ---------------------------------------------------------------------------


class TestDatasetInfo:
    def test_counts_and_range(self, scenario_records) -> None:
        info = dataset_info(scenario_records)
        assert isinstance(info, DatasetInfo)
        assert info.total_records == 3
        assert info.countries == 2
        assert info.year_range == (2017, 2018)

    def test_metrics_count_tracks_schema(self, scenario_records) -> None:
        info = dataset_info(scenario_records)
        assert info.metrics_count == 54
        assert info.metrics_count == len(RAW_COLUMNS)

    def test_static_metadata(self) -> None:
        info = dataset_info([])
        assert info.name == "World Sustainability Dataset"
        assert info.source == "Kaggle TrueCue Women+Data Hackathon"
        assert info.last_updated == "2024"

    def test_empty_input(self) -> None:
        info = dataset_info([])
        assert info.total_records == 0
        assert info.countries == 0
        assert info.year_range == (0, 0)

    def test_total_years(self, scenario_records) -> None:
        assert total_years(scenario_records) == 2
        assert total_years([]) == 0
