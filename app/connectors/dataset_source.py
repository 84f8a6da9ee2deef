"""
app/connectors/dataset_source.py

Sources that deliver the raw sustainability CSV text.

A location starting with ``http://`` or ``https://`` is fetched over HTTP;
anything else is read from the local filesystem (relative paths resolve
against the project root).
"""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from app.config import ExternalHTTPSettings
from app.connectors.base import BaseConnector, ConnectorRequestError, HTTPConnector

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parents[2]


class FileDatasetSource(BaseConnector):
    """
    Reads the dataset from a local CSV file.
    """

    def __init__(self, path: str | Path) -> None:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved
        super().__init__(source=str(resolved))
        self._path = resolved

    def fetch_text(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8-sig")
        except OSError as exc:
            logger.error("Dataset file unreadable path=%s error=%s", self._path, exc)
            raise ConnectorRequestError(f"{self.source}: dataset file could not be read.") from exc


class HTTPDatasetSource(HTTPConnector):
    """
    Fetches the dataset from a static HTTP(S) location.
    """

    def __init__(
        self,
        url: str,
        *,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source=url, http_settings=http_settings, session=session)
        self._url = url

    def fetch_text(self) -> str:
        return self._request_text(method="GET", url=self._url)


class TextDatasetSource(BaseConnector):
    """
    Wraps CSV text already held in memory.
    """

    def __init__(self, text: str, *, source: str = "<memory>") -> None:
        super().__init__(source=source)
        self._text = text

    def fetch_text(self) -> str:
        return self._text


def resolve_dataset_source(
    location: str,
    *,
    http_settings: ExternalHTTPSettings,
) -> BaseConnector:
    """
    Pick the connector matching *location*.
    """

    if location.lower().startswith(("http://", "https://")):
        return HTTPDatasetSource(location, http_settings=http_settings)
    return FileDatasetSource(location)
