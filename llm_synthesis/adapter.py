"""LLM adapters for insight report generation.

Provides a base interface, an adapter for OpenAI-compatible chat
completion APIs, and a deterministic mock for tests and offline runs.
"""

import json
from abc import ABC, abstractmethod
from typing import Optional


class BaseLLMAdapter(ABC):
    """Abstract base for all LLM adapters."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send *prompt* to the model and return its raw text (expected JSON)."""


class OpenAILLMAdapter(BaseLLMAdapter):
    """Adapter for OpenAI-compatible chat completion APIs.

    Uses a system message that pins the JSON-only contract, low temperature
    and a fixed seed so repeated calls over the same selection stay stable.
    """

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        max_tokens: int = 2048,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        from openai import OpenAI

        client_kwargs: dict = {"api_key": api_key, "timeout": timeout_seconds}
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = OpenAI(**client_kwargs)
        self._model = model
        self._max_tokens = max_tokens

    @property
    def model(self) -> str:
        return self._model

    def generate(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {
                    "role": "system",
                    "content": (
                        "You are a sustainability data analyst. "
                        "Always respond with a single valid JSON object."
                    ),
                },
                {"role": "user", "content": prompt},
            ],
            temperature=0.2,
            max_tokens=self._max_tokens,
            response_format={"type": "json_object"},
            stream=False,
            seed=42,
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Fixed mock report used for local testing.
# ---------------------------------------------------------------------------
MOCK_REPORT = {
    "insights": [
        "Mock insight: carbon emissions in the selection are stable.",
        "Mock insight: renewable energy share is rising.",
    ],
    "summary": "Mock summary of the selected sustainability records.",
    "recommendations": ["Verify integration with the insight service."],
    "trend_analysis": "Mock trend analysis for testing purposes.",
}

_MOCK_REPORT_JSON = json.dumps(MOCK_REPORT, indent=2)


class MockLLMAdapter(BaseLLMAdapter):
    """Deterministic adapter that returns a fixed valid report.

    Records every prompt it receives so tests can assert on prompt content.
    """

    def __init__(self, response: Optional[str] = None) -> None:
        self._response = response if response is not None else _MOCK_REPORT_JSON
        self.prompts: list = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._response
