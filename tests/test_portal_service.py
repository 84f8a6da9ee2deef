"""
tests/test_portal_service.py

End-to-end tests of the query facade over an in-memory dataset.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from app.config import get_dataset_settings
from app.domain.sustainability import FIELD_CARBON_EMISSIONS, FIELD_REGION
from app.repositories.dataset_store import DatasetStore
from app.services.csv_ingestion_service import CSVIngestionService, IngestError
from app.services.insight_service import LocalSummarizer
from app.services.portal_service import PortalService
from app.services.query_service import FilterOptions


@pytest.fixture()
def portal() -> PortalService:
    ingestion = CSVIngestionService(store=DatasetStore(), log_parse_warnings=False)
    return PortalService(ingestion=ingestion, summarizer=LocalSummarizer())


@pytest.fixture()
def loaded_portal(portal: PortalService, sample_csv: str) -> PortalService:
    portal._ingestion.load(sample_csv)
    return portal


@pytest.fixture()
def dataset_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, sample_csv: str):
    path = tmp_path / "dataset.csv"
    path.write_text(sample_csv, encoding="utf-8")
    monkeypatch.setenv("DATASET_SOURCE", str(path))
    get_dataset_settings.cache_clear()
    yield path
    get_dataset_settings.cache_clear()


class TestBeforeLoad:
    def test_reads_are_empty(self, portal: PortalService) -> None:
        assert portal.is_loaded() is False
        assert portal.all() == ()
        assert portal.summary(FIELD_CARBON_EMISSIONS).count == 0
        assert portal.dataset_info().year_range == (0, 0)


class TestLoad:
    def test_load_from_configured_file(self, portal: PortalService, dataset_env: Path) -> None:
        summary = portal.load()
        assert summary.rows_loaded == 4
        assert portal.is_loaded() is True
        assert portal.load() == summary

    def test_missing_file_raises_ingest_error(
        self,
        portal: PortalService,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
    ) -> None:
        monkeypatch.setenv("DATASET_SOURCE", str(tmp_path / "missing.csv"))
        get_dataset_settings.cache_clear()
        try:
            with pytest.raises(IngestError):
                portal.load()
            assert portal.is_loaded() is False
        finally:
            get_dataset_settings.cache_clear()


class TestQueries:
    def test_filter(self, loaded_portal: PortalService) -> None:
        result = loaded_portal.filter(FilterOptions(countries={"Brazil"}))
        assert [(r.country, r.year) for r in result] == [("Brazil", 2018), ("Brazil", 2017)]

    def test_aggregations(self, loaded_portal: PortalService) -> None:
        assert loaded_portal.unique_values(FIELD_REGION) == ["Europe", "South America", "Sub-Saharan Africa"]
        summary = loaded_portal.summary(FIELD_CARBON_EMISSIONS)
        assert summary.count == 3
        assert summary.median == pytest.approx(2.3)
        regions = loaded_portal.regional_average(FIELD_CARBON_EMISSIONS, year=2018)
        assert [(r.region, r.count) for r in regions] == [("South America", 1), ("Europe", 1)]
        assert loaded_portal.total_years() == 2

    def test_summary_over_selection(self, loaded_portal: PortalService) -> None:
        summary = loaded_portal.summary(FIELD_CARBON_EMISSIONS, FilterOptions(countries={"Germany"}))
        assert summary.count == 1
        assert summary.mean == pytest.approx(9.1)

    def test_dataset_info(self, loaded_portal: PortalService) -> None:
        info = loaded_portal.dataset_info()
        assert info.total_records == 4
        assert info.countries == 3
        assert info.year_range == (2017, 2018)
        assert info.metrics_count == 54

    def test_country_time_series(self, loaded_portal: PortalService) -> None:
        series = loaded_portal.country_time_series("Brazil", FIELD_CARBON_EMISSIONS)
        assert [point.year for point in series] == [2017, 2018]

    def test_correlation_is_bounded(self, loaded_portal: PortalService) -> None:
        value = loaded_portal.correlation(FIELD_CARBON_EMISSIONS, "GDP per capita (current US$)")
        assert -1.0 <= value <= 1.0


class TestExportAndInsights:
    def test_json_export_of_selection(self, loaded_portal: PortalService) -> None:
        payload = json.loads(loaded_portal.export(FilterOptions(years={2017}), "json"))
        assert [row["Country"] for row in payload] == ["Brazil"]

    def test_csv_export_header(self, loaded_portal: PortalService) -> None:
        text = loaded_portal.export(FilterOptions(countries={"Kenya"}))
        assert text.splitlines()[0].startswith("Country Name,Country Code,Year")
        assert len(text.splitlines()) == 2

    def test_insights_for_empty_selection(self, loaded_portal: PortalService) -> None:
        report = loaded_portal.insights(FilterOptions(countries={"Atlantis"}))
        assert report.summary == "No data to analyze"

    def test_insights_for_selection(self, loaded_portal: PortalService) -> None:
        report = loaded_portal.insights(FilterOptions(countries={"Brazil"}), filter_description="Brazil")
        assert report.summary == "Analysis of 2 records from 1 countries (2017-2018)"


class TestMetricOptions:
    def test_headline_metrics_by_default(self, portal: PortalService) -> None:
        options = portal.metric_options()
        assert options[0] == (FIELD_CARBON_EMISSIONS, FIELD_CARBON_EMISSIONS)
        assert len(options) == 5

    def test_category_uses_friendly_labels(self, portal: PortalService) -> None:
        labels = dict(portal.metric_options("economic"))
        assert labels["GDP per capita (current US$) - NY.GDP.PCAP.CD"] == "GDP per Capita"

    def test_unknown_category(self, portal: PortalService) -> None:
        assert portal.metric_options("astrology") == []
