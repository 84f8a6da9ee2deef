"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError, HTTPConnector
from app.connectors.dataset_source import (
    FileDatasetSource,
    HTTPDatasetSource,
    TextDatasetSource,
    resolve_dataset_source,
)

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "FileDatasetSource",
    "HTTPConnector",
    "HTTPDatasetSource",
    "TextDatasetSource",
    "resolve_dataset_source",
]
