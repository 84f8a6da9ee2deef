"""
app/domain package marker.
"""

from app.domain.sustainability import (
    RAW_COLUMNS,
    SCHEMA_METRICS_COUNT,
    IngestionSummary,
    NormalizedRecord,
    ParseWarning,
)

__all__ = [
    "IngestionSummary",
    "NormalizedRecord",
    "ParseWarning",
    "RAW_COLUMNS",
    "SCHEMA_METRICS_COUNT",
]
