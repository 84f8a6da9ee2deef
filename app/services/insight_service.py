"""
app/services/insight_service.py

Narrative insight reports over a record selection.

Two interchangeable summarizers implement :class:`Summarizer`:

    LocalSummarizer  - deterministic rules over summary() statistics
    LLMSummarizer    - prompt + adapter + validated JSON, with LocalSummarizer
                       as the fallback for empty selections and any failure

:func:`build_summarizer` picks one from :class:`app.config.LLMSettings` at
construction time. Callers never see LLM errors.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

from app.config import LLMSettings, get_llm_settings
from app.domain.sustainability import (
    FIELD_CARBON_EMISSIONS,
    FIELD_GDP_PER_CAPITA,
    FIELD_LIFE_EXPECTANCY,
    FIELD_RENEWABLE_ENERGY,
    NormalizedRecord,
)
from app.logging_utils import elapsed_ms, log_event
from app.services.aggregation_service import MetricSummary, summary
from llm_synthesis.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_synthesis.prompt_builder import InsightPromptBuilder
from llm_synthesis.retry import generate_with_retry
from llm_synthesis.schema import InsightReport

logger = logging.getLogger(__name__)

PROMPT_SAMPLE_SIZE = 5

HIGH_CARBON_THRESHOLD = 10.0
LOW_CARBON_THRESHOLD = 2.0
LOW_RENEWABLE_THRESHOLD = 20.0
HIGH_RENEWABLE_THRESHOLD = 50.0

DEFAULT_RECOMMENDATIONS = (
    "Continue monitoring sustainability indicators",
    "Focus on balanced environmental, social, and economic development",
)

# Prompt statistic key -> simplified field.
_STATISTIC_FIELDS = {
    "carbon": FIELD_CARBON_EMISSIONS,
    "renewable": FIELD_RENEWABLE_ENERGY,
    "gdp": FIELD_GDP_PER_CAPITA,
    "life_expectancy": FIELD_LIFE_EXPECTANCY,
}


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryContext:
    """
    Selection metadata quoted in the report summary and the prompt.
    """

    total_records: int
    unique_countries: int
    year_range: str
    filter_description: str | None = None

    @classmethod
    def from_records(
        cls,
        records: Sequence[NormalizedRecord],
        filter_description: str | None = None,
    ) -> SummaryContext:
        years = sorted({record.year for record in records})
        if not years:
            year_range = "N/A"
        elif years[0] == years[-1]:
            year_range = str(years[0])
        else:
            year_range = f"{years[0]}-{years[-1]}"
        return cls(
            total_records=len(records),
            unique_countries=len({record.country for record in records}),
            year_range=year_range,
            filter_description=filter_description,
        )

    def as_prompt_context(self) -> dict[str, Any]:
        return {
            "total_records": self.total_records,
            "unique_countries": self.unique_countries,
            "year_range": self.year_range,
            "filter_description": self.filter_description,
        }


# ---------------------------------------------------------------------------
# Summarizers
# ---------------------------------------------------------------------------


class Summarizer(ABC):
    """Produces an InsightReport for a record selection."""

    @abstractmethod
    def summarize(
        self,
        records: Sequence[NormalizedRecord],
        context: SummaryContext,
    ) -> InsightReport:
        """Return a report for *records*; must not raise for empty input."""


class LocalSummarizer(Summarizer):
    """
    Rule-based report derived from metric summaries.

    Rules
    -----
    carbon mean > 10      -> recommend an emissions reduction focus
    carbon mean < 2       -> note good environmental performance
    renewable mean < 20   -> recommend renewable infrastructure investment
    renewable mean > 50   -> note strong renewable adoption
    more than one region  -> list the covered regions
    """

    def summarize(
        self,
        records: Sequence[NormalizedRecord],
        context: SummaryContext,
    ) -> InsightReport:
        if not records:
            return InsightReport.no_data()

        insights: list[str] = []
        recommendations: list[str] = []

        carbon = summary(records, FIELD_CARBON_EMISSIONS)
        if carbon.count:
            insights.append(f"Average carbon emissions: {carbon.mean:.2f} metric tons per capita")
            if carbon.mean > HIGH_CARBON_THRESHOLD:
                recommendations.append(
                    "Focus on reducing carbon emissions through renewable energy transition"
                )
            elif carbon.mean < LOW_CARBON_THRESHOLD:
                insights.append("Low carbon emissions indicate good environmental performance")

        renewable = summary(records, FIELD_RENEWABLE_ENERGY)
        if renewable.count:
            insights.append(f"Average renewable energy usage: {renewable.mean:.1f}%")
            if renewable.mean < LOW_RENEWABLE_THRESHOLD:
                recommendations.append("Increase investment in renewable energy infrastructure")
            elif renewable.mean > HIGH_RENEWABLE_THRESHOLD:
                insights.append(
                    "Strong renewable energy adoption indicates sustainable energy practices"
                )

        gdp = summary(records, FIELD_GDP_PER_CAPITA)
        if gdp.count:
            insights.append(f"Average GDP per capita: ${gdp.mean:,.2f}")

        regions = list(dict.fromkeys(record.region for record in records))
        if len(regions) > 1:
            insights.append(f"Data covers {len(regions)} different regions: {', '.join(regions)}")

        if not insights:
            insights.append("No numeric sustainability indicators available for this selection")

        return InsightReport(
            insights=insights,
            summary=(
                f"Analysis of {context.total_records} records from "
                f"{context.unique_countries} countries ({context.year_range})"
            ),
            recommendations=recommendations or list(DEFAULT_RECOMMENDATIONS),
            trend_analysis=(
                f"This dataset covers {context.year_range} and includes multiple "
                "sustainability dimensions for comprehensive analysis."
            ),
        )


class LLMSummarizer(Summarizer):
    """
    Report generated by an LLM adapter, validated against InsightReport.

    Empty selections skip the model entirely. Adapter errors, invalid JSON
    after all retries, or any other failure fall back to *fallback*.
    """

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        *,
        max_retries: int = 2,
        prompt_builder: InsightPromptBuilder | None = None,
        fallback: Summarizer | None = None,
    ) -> None:
        self._adapter = adapter
        self._max_retries = max_retries
        self._prompt_builder = prompt_builder or InsightPromptBuilder()
        self._fallback = fallback or LocalSummarizer()

    def summarize(
        self,
        records: Sequence[NormalizedRecord],
        context: SummaryContext,
    ) -> InsightReport:
        if not records:
            return self._fallback.summarize(records, context)

        started = time.monotonic()
        try:
            prompt = self.build_prompt(records, context)
            report = generate_with_retry(self._adapter, prompt, max_retries=self._max_retries)
        except Exception as error:  # noqa: BLE001
            log_event(
                logger,
                logging.WARNING,
                "insight_generation_fallback",
                adapter=type(self._adapter).__name__,
                error_type=type(error).__name__,
                error=str(error),
                elapsed_ms=elapsed_ms(started),
            )
            return self._fallback.summarize(records, context)

        log_event(
            logger,
            logging.INFO,
            "insight_generation_completed",
            adapter=type(self._adapter).__name__,
            records=len(records),
            elapsed_ms=elapsed_ms(started),
        )
        return report

    def build_prompt(self, records: Sequence[NormalizedRecord], context: SummaryContext) -> str:
        statistics = {
            key: _prompt_statistics(summary(records, field_name))
            for key, field_name in _STATISTIC_FIELDS.items()
        }
        sample = [_prompt_sample(record) for record in records[:PROMPT_SAMPLE_SIZE]]
        return self._prompt_builder.build_prompt(
            context=context.as_prompt_context(),
            statistics=statistics,
            sample=sample,
        )


def _prompt_statistics(metric: MetricSummary) -> dict[str, float]:
    return {"avg": metric.mean, "min": metric.min, "max": metric.max}


def _prompt_sample(record: NormalizedRecord) -> dict[str, Any]:
    return {
        "country": record.country,
        "year": record.year,
        "region": record.region,
        "income_group": record.income_group,
        "carbon_emissions": record.carbon_emissions,
        "renewable_energy": record.renewable_energy,
        "gdp_per_capita": record.gdp_per_capita,
        "life_expectancy": record.life_expectancy,
        "forest_area": record.forest_area,
    }


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _build_adapter(settings: LLMSettings) -> BaseLLMAdapter:
    """
    LLM_ADAPTER=mock   -> MockLLMAdapter (no API key required)
    LLM_ADAPTER=openai -> OpenAILLMAdapter
    """

    if settings.adapter == "mock":
        return MockLLMAdapter()
    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )


def build_summarizer(settings: LLMSettings | None = None) -> Summarizer:
    """
    Return an LLMSummarizer when the LLM is enabled, else a LocalSummarizer.
    """

    settings = settings or get_llm_settings()
    if not settings.enabled:
        logger.info("LLM summarizer disabled adapter=%s; using local insights", settings.adapter)
        return LocalSummarizer()

    return LLMSummarizer(_build_adapter(settings), max_retries=settings.max_retries)
