"""
tests/conftest.py

Shared fixtures: a small sustainability CSV and the example scenario records.
"""

from __future__ import annotations

import pytest

from app.domain.sustainability import NormalizedRecord
from tests.factories import SAMPLE_HEADER, SAMPLE_ROWS, build_csv, make_record


@pytest.fixture()
def sample_csv() -> str:
    return build_csv(SAMPLE_HEADER, SAMPLE_ROWS)


@pytest.fixture()
def scenario_records() -> list[NormalizedRecord]:
    """Brazil 2018, Brazil 2017 and Germany 2018 with carbon values."""
    return [
        make_record("Brazil", 2018, "South America", carbon_emissions=2.1),
        make_record("Brazil", 2017, "South America", carbon_emissions=2.3),
        make_record("Germany", 2018, "Europe", carbon_emissions=9.1),
    ]
