"""Retry loop for malformed LLM insight reports.

Only JSON parse and schema failures are retried. Transport errors raised by
the adapter propagate unchanged so the caller can fall back immediately.
"""

import logging
from typing import List

from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.schema import InsightReport
from llm_synthesis.validator import LLMOutputValidationError, validate_llm_output

logger = logging.getLogger(__name__)

_RETRYABLE_STAGES = frozenset({"json_parse", "schema"})

_CORRECTION_TEMPLATE = """\

# CORRECTION

Your previous answer was rejected ({stage}): {errors}
Reply again with ONLY the JSON object described above.
"""


class LLMRetryExhaustedError(Exception):
    """Raised when every attempt returned an invalid report.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: The validation error from the final attempt.
        history: Validation errors from every failed attempt.
    """

    def __init__(
        self,
        attempts: int,
        last_error: LLMOutputValidationError,
        history: List[LLMOutputValidationError],
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.history = history
        super().__init__(
            f"Insight report invalid after {attempts} attempt(s). "
            f"Last error: {last_error}"
        )


def _with_correction(prompt: str, error: LLMOutputValidationError) -> str:
    return prompt + _CORRECTION_TEMPLATE.format(
        stage=error.stage,
        errors="; ".join(error.errors)[:500],
    )


def generate_with_retry(
    adapter: BaseLLMAdapter,
    prompt: str,
    max_retries: int = 2,
) -> InsightReport:
    """Generate an insight report, re-prompting after formatting errors.

    Each retry sends the original prompt followed by a short correction
    section naming the previous validation failure.

    Args:
        adapter: An LLM adapter implementing ``generate(prompt) -> str``.
        prompt: The fully formatted prompt string.
        max_retries: Additional attempts after the first failure.

    Returns:
        A validated ``InsightReport`` instance.

    Raises:
        LLMRetryExhaustedError: If all attempts fail with retryable errors.
    """
    errors: List[LLMOutputValidationError] = []
    total_attempts = 1 + max(0, max_retries)
    current_prompt = prompt

    for attempt in range(1, total_attempts + 1):
        raw = adapter.generate(current_prompt)

        try:
            report = validate_llm_output(raw)
        except LLMOutputValidationError as exc:
            if exc.stage not in _RETRYABLE_STAGES:
                raise
            errors.append(exc)
            logger.warning(
                "Insight report attempt %d/%d rejected at stage '%s': %s",
                attempt,
                total_attempts,
                exc.stage,
                "; ".join(exc.errors),
            )
            current_prompt = _with_correction(prompt, exc)
            continue

        if attempt > 1:
            logger.info("Insight report validated on attempt %d/%d", attempt, total_attempts)
        return report

    raise LLMRetryExhaustedError(
        attempts=total_attempts,
        last_error=errors[-1],
        history=errors,
    )
