"""
app/services/csv_ingestion_service.py

Service layer for loading the sustainability CSV into the dataset store.

Load flow
---------
    1. Fetch the raw text through a connector (file, HTTP, or in-memory).
    2. Parse with ``csv.DictReader``; header names are trimmed.
    3. Coerce every cell (null transform, Year rule, dynamic typing).
    4. Drop rows missing Country Name, Country Code or Year.
    5. Map each kept row to a NormalizedRecord and populate the store.

Steps 1-5 run inside the store's single-flight guard, so the CSV is fetched
and parsed at most once per store. Any failure in steps 1-5 is raised as
:class:`IngestError` and leaves the store empty for a later retry.
"""

from __future__ import annotations

import csv
import io
import logging
import time
from functools import lru_cache

from app.config import get_dataset_settings, get_external_http_settings
from app.connectors.base import BaseConnector
from app.connectors.dataset_source import TextDatasetSource, resolve_dataset_source
from app.domain.sustainability import IngestionSummary, NormalizedRecord, ParseWarning
from app.logging_utils import elapsed_ms, log_event
from app.mappers.record_mapper import RecordMapper
from app.repositories.dataset_store import DatasetStore
from app.validators.csv_validator import CSVRowValidator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class IngestError(RuntimeError):
    """
    Raised when the dataset cannot be fetched or parsed.

    The underlying failure is available as ``__cause__`` and ``cause``.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class CSVHeaderValidationError(ValueError):
    """
    Raised when the CSV has no header row.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Coordinates CSV fetching, parsing, validation, and store population.
    """

    def __init__(
        self,
        *,
        store: DatasetStore,
        max_parse_warnings: int = 500,
        log_parse_warnings: bool = True,
        validator: CSVRowValidator | None = None,
        mapper: RecordMapper | None = None,
    ) -> None:
        self._store = store
        self._max_parse_warnings = max(1, max_parse_warnings)
        self._log_parse_warnings = log_parse_warnings
        self._validator = validator or CSVRowValidator()
        self._mapper = mapper or RecordMapper()
        self._last_summary: IngestionSummary | None = None

    @property
    def store(self) -> DatasetStore:
        return self._store

    @property
    def last_summary(self) -> IngestionSummary | None:
        """
        Summary of the run that populated the store, if any.
        """

        return self._last_summary

    def load(self, source_text: str) -> IngestionSummary:
        """
        Populate the store from CSV text already held in memory.
        """

        return self.load_from(TextDatasetSource(source_text))

    def load_from(self, connector: BaseConnector) -> IngestionSummary:
        """
        Fetch, parse and store the dataset once.

        Calls made after a successful load are no-ops and return the summary
        of that load.

        Raises:
            IngestError: When fetching or parsing fails. The store is left
                empty and unloaded.
        """

        started = time.monotonic()

        def _loader() -> list[NormalizedRecord]:
            log_event(logger, logging.INFO, "dataset_load_started", source=connector.source)
            records, summary = self.parse(connector.fetch_text())
            self._last_summary = summary
            return records

        try:
            populated = self._store.load(_loader)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "dataset_load_failed",
                source=connector.source,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise IngestError("Failed to load sustainability dataset.", cause=exc) from exc

        summary = self._last_summary or IngestionSummary(rows_loaded=len(self._store), rows_rejected=0)
        if populated:
            log_event(
                logger,
                logging.INFO,
                "dataset_load_completed",
                source=connector.source,
                rows_loaded=summary.rows_loaded,
                rows_rejected=summary.rows_rejected,
                warnings=len(summary.warnings),
                elapsed_ms=elapsed_ms(started),
            )
        return summary

    def parse(self, source_text: str) -> tuple[list[NormalizedRecord], IngestionSummary]:
        """
        Parse CSV text into normalized records without touching the store.

        Raises:
            CSVHeaderValidationError: When the header row is missing.
            csv.Error: When the header row itself cannot be read.
        """

        reader = csv.DictReader(io.StringIO(source_text.lstrip("\ufeff"), newline=""))
        headers = reader.fieldnames
        if not headers:
            raise CSVHeaderValidationError("CSV header row is missing.")
        reader.fieldnames = [header.strip() for header in headers]

        records: list[NormalizedRecord] = []
        captured_warnings: list[ParseWarning] = []
        rows_rejected = 0

        row_number = 1
        while True:
            row_number += 1
            try:
                raw_row = next(reader)
            except StopIteration:
                break
            except csv.Error as exc:
                self._record_warning(
                    captured_warnings,
                    ParseWarning(row_number=row_number, message=f"Unreadable row: {exc}"),
                )
                rows_rejected += 1
                continue

            parsed_row, row_warnings = self._validator.parse_row(
                raw_row=raw_row,
                row_number=row_number,
            )
            for warning in row_warnings:
                self._record_warning(captured_warnings, warning)

            if not self._validator.is_valid_row(parsed_row):
                rows_rejected += 1
                continue

            records.append(self._mapper.to_normalized(parsed_row))

        if captured_warnings:
            logger.warning("CSV parsing warnings count=%s", len(captured_warnings))

        summary = IngestionSummary(
            rows_loaded=len(records),
            rows_rejected=rows_rejected,
            warnings=captured_warnings,
        )
        return records, summary

    def _record_warning(self, captured: list[ParseWarning], warning: ParseWarning) -> None:
        if len(captured) >= self._max_parse_warnings:
            return
        captured.append(warning)
        if self._log_parse_warnings:
            logger.warning(
                "CSV parse warning row=%s column=%s message=%s value=%s",
                warning.row_number,
                warning.column,
                warning.message,
                warning.value,
            )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def load_configured_dataset(service: CSVIngestionService) -> IngestionSummary:
    """
    Load the dataset from the location named by ``DATASET_SOURCE``.
    """

    settings = get_dataset_settings()
    connector = resolve_dataset_source(
        settings.source,
        http_settings=get_external_http_settings(),
    )
    return service.load_from(connector)


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_dataset_settings()
    return CSVIngestionService(
        store=DatasetStore(),
        max_parse_warnings=settings.max_parse_warnings,
        log_parse_warnings=settings.log_parse_warnings,
    )
