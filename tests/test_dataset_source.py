"""
tests/test_dataset_source.py

Pytest unit tests for dataset connectors. HTTP goes through a fake session.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from app.config import ExternalHTTPSettings
from app.connectors.base import ConnectorRequestError
from app.connectors.dataset_source import (
    FileDatasetSource,
    HTTPDatasetSource,
    TextDatasetSource,
    resolve_dataset_source,
)

_HTTP_SETTINGS = ExternalHTTPSettings(
    timeout_seconds=1.0,
    max_retries=2,
    backoff_initial_seconds=0.0,
    backoff_multiplier=1.0,
)


def _response(status_code: int, body: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body.encode("utf-8")
    response.url = "https://example.org/data.csv"
    return response


class FakeSession:
    def __init__(self, outcomes: list) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    def request(self, **kwargs) -> requests.Response:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestFileSource:
    def test_reads_text_and_strips_bom(self, tmp_path: Path) -> None:
        path = tmp_path / "data.csv"
        path.write_text("\ufeffCountry Name\nChile\n", encoding="utf-8")
        assert FileDatasetSource(path).fetch_text() == "Country Name\nChile\n"

    def test_missing_file_raises_connector_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConnectorRequestError):
            FileDatasetSource(tmp_path / "missing.csv").fetch_text()


class TestHTTPSource:
    def test_success(self) -> None:
        session = FakeSession([_response(200, "a,b\n1,2\n")])
        source = HTTPDatasetSource("https://example.org/data.csv", http_settings=_HTTP_SETTINGS, session=session)
        assert source.fetch_text() == "a,b\n1,2\n"

    def test_retries_transient_failures(self) -> None:
        session = FakeSession([requests.Timeout("slow"), _response(503), _response(200, "ok")])
        source = HTTPDatasetSource("https://example.org/data.csv", http_settings=_HTTP_SETTINGS, session=session)
        assert source.fetch_text() == "ok"
        assert session.calls == 3

    def test_non_retryable_status_fails_fast(self) -> None:
        session = FakeSession([_response(404)])
        source = HTTPDatasetSource("https://example.org/data.csv", http_settings=_HTTP_SETTINGS, session=session)
        with pytest.raises(ConnectorRequestError):
            source.fetch_text()
        assert session.calls == 1

    def test_exhaustion_raises(self) -> None:
        session = FakeSession([_response(500), _response(502), _response(503)])
        source = HTTPDatasetSource("https://example.org/data.csv", http_settings=_HTTP_SETTINGS, session=session)
        with pytest.raises(ConnectorRequestError):
            source.fetch_text()
        assert session.calls == 3


class TestResolve:
    def test_url_selects_http(self) -> None:
        source = resolve_dataset_source("HTTPS://example.org/x.csv", http_settings=_HTTP_SETTINGS)
        assert isinstance(source, HTTPDatasetSource)

    def test_path_selects_file(self) -> None:
        source = resolve_dataset_source("data/WorldSustainabilityDataset.csv", http_settings=_HTTP_SETTINGS)
        assert isinstance(source, FileDatasetSource)
        assert Path(source.source).is_absolute()

    def test_text_source(self) -> None:
        assert TextDatasetSource("x").fetch_text() == "x"
