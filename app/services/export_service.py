"""
app/services/export_service.py

Serialises record sequences to CSV or JSON text for download actions.

Pure formatting only: nothing here touches the network or the filesystem.

CSV layout
----------
- Header row is the flattened key order of the first record.
- Later records contribute values for those keys only; missing keys are blank.
- ``None`` is written as an empty cell, booleans as ``true``/``false``.
- Cells containing commas, quotes or line breaks are quoted (RFC 4180).
"""

from __future__ import annotations

import csv
import io
import json
from dataclasses import dataclass, field
from typing import Any, Final, Iterable, Mapping

from app.domain.sustainability import NormalizedRecord

EXPORT_FORMATS: Final[frozenset[str]] = frozenset({"csv", "json"})


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular rows ready for serialisation.

    Attributes
    ----------
    rows:   One flat dict per record (raw columns plus simplified fields).
    fields: Column order taken from the first row.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: Iterable[NormalizedRecord | Mapping[str, Any]]) -> ExportResult:
        rows = [_flatten(record) for record in records]
        return cls(rows=rows, fields=list(rows[0]) if rows else [])


def _flatten(record: NormalizedRecord | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(record, NormalizedRecord):
        return record.as_dict()
    return dict(record)


def _csv_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


# ---------------------------------------------------------------------------
# Serialisers
# ---------------------------------------------------------------------------


def to_csv(records: Iterable[NormalizedRecord | Mapping[str, Any]]) -> str:
    """
    Render *records* as CSV text. An empty input renders as ``""``.
    """

    result = ExportResult.from_records(records)
    if not result.fields:
        return ""

    buf = io.StringIO()
    writer = csv.DictWriter(
        buf,
        fieldnames=result.fields,
        extrasaction="ignore",
        restval="",
        lineterminator="\r\n",
    )
    writer.writeheader()
    for row in result.rows:
        writer.writerow({key: _csv_cell(value) for key, value in row.items()})
    return buf.getvalue()


def to_json(records: Iterable[NormalizedRecord | Mapping[str, Any]]) -> str:
    """Render *records* as a pretty-printed JSON array."""
    result = ExportResult.from_records(records)
    return json.dumps(result.rows, indent=2, ensure_ascii=False, default=str)


def export(records: Iterable[NormalizedRecord | Mapping[str, Any]], fmt: str = "csv") -> str:
    """
    Dispatch to :func:`to_csv` or :func:`to_json`.

    Raises
    ------
    ValueError: When *fmt* is not ``"csv"`` or ``"json"``.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unknown export format {fmt!r}. Valid: {sorted(EXPORT_FORMATS)}")
    if fmt == "json":
        return to_json(records)
    return to_csv(records)
