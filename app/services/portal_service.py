"""
app/services/portal_service.py

Query API facade consumed by presentation layers.

Presentation code calls these methods only; it never reads CSV text or the
dataset store directly. Every read method works on the store snapshot, so
calling one before :meth:`PortalService.load` returns empty results.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from app.domain.sustainability import IngestionSummary, NormalizedRecord, metric_options
from app.services import aggregation_service, export_service, query_service
from app.services.aggregation_service import DatasetInfo, MetricSummary, RegionalAverage
from app.services.csv_ingestion_service import (
    CSVIngestionService,
    get_csv_ingestion_service,
    load_configured_dataset,
)
from app.services.insight_service import Summarizer, SummaryContext, build_summarizer
from app.services.query_service import FilterOptions, TimePoint
from llm_synthesis.schema import InsightReport


class PortalService:
    """
    Read-only operations over the loaded dataset.

    Parameters
    ----------
    ingestion:
        Service owning the dataset store.
    summarizer:
        Insight generator; defaults to :func:`build_summarizer` on first use.
    """

    def __init__(
        self,
        *,
        ingestion: CSVIngestionService,
        summarizer: Summarizer | None = None,
    ) -> None:
        self._ingestion = ingestion
        self._summarizer = summarizer

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> IngestionSummary:
        """
        Load the configured dataset once. Raises ``IngestError`` on failure.
        """

        return load_configured_dataset(self._ingestion)

    def is_loaded(self) -> bool:
        return self._ingestion.store.is_loaded()

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def all(self) -> Sequence[NormalizedRecord]:
        return self._ingestion.store.all()

    def filter(self, options: FilterOptions | None = None) -> list[NormalizedRecord]:
        return query_service.filter_records(self.all(), options)

    def country_records(self, country: str) -> list[NormalizedRecord]:
        return query_service.country_records(self.all(), country)

    def country_time_series(self, country: str, metric: str) -> list[TimePoint]:
        return query_service.country_time_series(self.all(), country, metric)

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    def unique_values(self, field_name: str) -> list[str]:
        return aggregation_service.unique_values(self.all(), field_name)

    def regional_average(self, metric: str, year: int | None = None) -> list[RegionalAverage]:
        return aggregation_service.regional_average(self.all(), metric, year)

    def summary(self, metric: str, options: FilterOptions | None = None) -> MetricSummary:
        """Summary statistics of *metric*, optionally over a filtered selection."""
        return aggregation_service.summary(self.filter(options), metric)

    def correlation(self, field_a: str, field_b: str) -> float:
        return aggregation_service.correlation(self.all(), field_a, field_b)

    def dataset_info(self) -> DatasetInfo:
        return aggregation_service.dataset_info(self.all())

    def total_years(self) -> int:
        return aggregation_service.total_years(self.all())

    def metric_options(self, category: str | None = None) -> list[tuple[str, str]]:
        """Selectable ``(field, label)`` metrics; headline metrics by default."""
        return metric_options(category)

    # ------------------------------------------------------------------
    # Export and insights
    # ------------------------------------------------------------------

    def export(self, options: FilterOptions | None = None, fmt: str = "csv") -> str:
        """
        Serialise the filtered selection. Raises ``ValueError`` on unknown *fmt*.
        """

        return export_service.export(self.filter(options), fmt)

    def insights(
        self,
        options: FilterOptions | None = None,
        filter_description: str | None = None,
    ) -> InsightReport:
        records = self.filter(options)
        if self._summarizer is None:
            self._summarizer = build_summarizer()
        context = SummaryContext.from_records(records, filter_description)
        return self._summarizer.summarize(records, context)


@lru_cache(maxsize=1)
def get_portal_service() -> PortalService:
    """
    Build and cache the facade around the shared ingestion service.
    """
    return PortalService(ingestion=get_csv_ingestion_service())
