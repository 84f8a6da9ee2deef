"""Validation layer for raw LLM insight output.

Parses and validates JSON strings against the InsightReport schema.
"""

import json
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from llm_synthesis.schema import InsightReport

_REPORT_KEYS = (
    "insights",
    "summary",
    "recommendations",
    "trend_analysis",
)


class LLMOutputValidationError(Exception):
    """Raised when LLM output fails parsing or schema validation.

    Attributes:
        stage: Which validation step failed ("json_parse" or "schema").
        errors: List of human-readable error descriptions.
        raw_response: The original string that failed validation.
    """

    def __init__(
        self,
        stage: str,
        errors: List[str],
        raw_response: str,
    ) -> None:
        self.stage = stage
        self.errors = errors
        self.raw_response = raw_response
        message = (
            f"LLM output validation failed at stage '{stage}': "
            + "; ".join(errors)
        )
        super().__init__(message)


def _strip_markdown_fences(text: str) -> str:
    """Remove optional ```json ... ``` fences around the payload."""
    stripped = text.strip()
    match = re.match(
        r"^```(?:json)?\s*\n?(.*?)\n?\s*```$",
        stripped,
        re.DOTALL,
    )
    if match:
        return match.group(1).strip()
    return stripped


def _project_report_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only InsightReport keys; models often add commentary fields."""
    projected = {key: data.get(key) for key in _REPORT_KEYS}
    for key in ("insights", "recommendations"):
        if isinstance(projected[key], str):
            projected[key] = [projected[key]]
    return projected


def validate_llm_output(raw_response: str) -> InsightReport:
    """Parse and validate a raw LLM response string.

    Steps:
        1. Strip optional markdown fences.
        2. Parse as JSON.
        3. Project payload onto InsightReport keys.
        4. Validate against the InsightReport model.

    Raises:
        LLMOutputValidationError: If JSON parsing or schema validation fails.
    """
    cleaned = _strip_markdown_fences(raw_response)

    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMOutputValidationError(
            stage="json_parse",
            errors=[str(exc)],
            raw_response=raw_response,
        ) from exc

    if not isinstance(data, dict):
        raise LLMOutputValidationError(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=raw_response,
        )

    try:
        return InsightReport.model_validate(_project_report_keys(data))
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}"
            for e in exc.errors()
        ]
        raise LLMOutputValidationError(
            stage="schema",
            errors=errors,
            raw_response=raw_response,
        ) from exc
