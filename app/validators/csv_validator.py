"""
app/validators/csv_validator.py

Cell-level type coercion and row validity checks for dataset ingestion.

Coercion rules
--------------
- ``""``, whitespace-only, the literal ``"null"`` and missing cells become ``None``.
- The ``Year`` column is read as a base-10 integer from its leading digits.
- Every other cell is dynamically typed: integer text becomes ``int``,
  decimal/exponent text becomes ``float``, ``true``/``false`` become ``bool``,
  anything else stays a string.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from app.domain.sustainability import COL_YEAR, KEY_COLUMNS, ParseWarning

_NULL_TOKENS = frozenset({"", "null"})
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_LEADING_INT_PATTERN = re.compile(r"^[+-]?\d+")
_BOOL_TOKENS = {"true": True, "TRUE": True, "false": False, "FALSE": False}


class CSVRowValidator:
    """
    Parses raw CSV cells and decides whether a parsed row is usable.
    """

    def parse_row(
        self,
        *,
        raw_row: Mapping[str | None, Any],
        row_number: int,
    ) -> tuple[dict[str, Any], list[ParseWarning]]:
        """
        Coerce every cell of one ``csv.DictReader`` row.

        Overflow cells (stored by ``DictReader`` under the ``None`` key) and
        missing trailing cells are reported as warnings, never as failures.
        """

        warnings: list[ParseWarning] = []
        parsed: dict[str, Any] = {}

        for column, value in raw_row.items():
            if column is None:
                warnings.append(
                    ParseWarning(
                        row_number=row_number,
                        message="Too many fields: extra cells were ignored.",
                        value=self._stringify_value(value),
                    )
                )
                continue
            if value is None:
                warnings.append(
                    ParseWarning(
                        row_number=row_number,
                        column=column,
                        message="Too few fields: missing cell read as null.",
                    )
                )
            parsed[column] = self.parse_value(
                column=column,
                value=value,
                row_number=row_number,
                warnings=warnings,
            )

        return parsed, warnings

    def parse_value(
        self,
        *,
        column: str,
        value: Any,
        row_number: int = 0,
        warnings: list[ParseWarning] | None = None,
    ) -> Any:
        """
        Apply the null transform, the Year rule, then dynamic typing.
        """

        if value is None:
            return None
        raw_value = str(value).strip()
        if raw_value in _NULL_TOKENS:
            return None

        if column == COL_YEAR:
            year = self.parse_year(raw_value)
            if year is None and warnings is not None:
                warnings.append(
                    ParseWarning(
                        row_number=row_number,
                        column=column,
                        message="Year is not an integer.",
                        value=raw_value,
                    )
                )
            return year

        return self._parse_dynamic(raw_value)

    @staticmethod
    def parse_year(raw_value: str) -> int | None:
        """
        Read the leading base-10 integer of *raw_value* (``"2018.0"`` -> 2018).
        """

        match = _LEADING_INT_PATTERN.match(raw_value.strip())
        if match is None:
            return None
        return int(match.group(0))

    @staticmethod
    def is_valid_row(row: Mapping[str, Any]) -> bool:
        """
        A row is kept only when Country Name, Country Code and Year are truthy.
        """

        return all(bool(row.get(column)) for column in KEY_COLUMNS)

    @staticmethod
    def _parse_dynamic(raw_value: str) -> Any:
        if raw_value in _BOOL_TOKENS:
            return _BOOL_TOKENS[raw_value]

        if _INT_PATTERN.match(raw_value):
            return int(raw_value)

        if _FLOAT_PATTERN.match(raw_value):
            number = float(raw_value)
            return number if math.isfinite(number) else None

        return raw_value

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return ",".join(str(item) for item in value)
        return str(value)
