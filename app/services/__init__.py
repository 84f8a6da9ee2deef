"""
app/services package marker.
"""

from app.services.csv_ingestion_service import (
    CSVHeaderValidationError,
    CSVIngestionService,
    IngestError,
    get_csv_ingestion_service,
)
from app.services.portal_service import PortalService, get_portal_service
from app.services.query_service import FilterOptions

__all__ = [
    "CSVHeaderValidationError",
    "CSVIngestionService",
    "IngestError",
    "get_csv_ingestion_service",
    "FilterOptions",
    "PortalService",
    "get_portal_service",
]
