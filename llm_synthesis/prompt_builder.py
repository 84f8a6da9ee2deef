"""Structured prompt builder for sustainability insight reports."""

import json
from typing import Any, Dict, List, Mapping, Optional

from llm_synthesis.schema import InsightReport

_SCHEMA_JSON = json.dumps(InsightReport.model_json_schema(), indent=2)

_EXAMPLE_OUTPUT = json.dumps(
    {
        "insights": [
            "Key insight about environmental patterns",
            "Key insight about social indicators",
            "Key insight about economic trends",
        ],
        "summary": "Brief summary of overall sustainability performance",
        "recommendations": [
            "Recommendation for improvement",
            "Recommendation for policy makers",
        ],
        "trend_analysis": "Analysis of trends and patterns observed in the data",
    },
    indent=2,
)

_SYSTEM_INSTRUCTIONS = """\
You are a sustainability data expert.

STRICT RULES:
- Use ONLY the data provided below. Do not invent countries, years or values.
- Return strictly valid JSON matching the schema defined below.
- Do NOT include any text outside the JSON object.
- Do NOT wrap the JSON in markdown code fences.
"""

_FOCUS = """\
Focus on:
1. Environmental indicators (carbon emissions, renewable energy)
2. Social development (life expectancy)
3. Economic sustainability (GDP per capita)
4. Regional or income group patterns
5. Year-over-year trends if multiple years are present
"""

# Statistic key -> (label, value format, unit suffix)
_STAT_LABELS = {
    "carbon": ("Average Carbon Emissions", "{:.2f}", " metric tons per capita"),
    "renewable": ("Average Renewable Energy", "{:.1f}", "%"),
    "gdp": ("Average GDP per Capita", "${:,.0f}", ""),
    "life_expectancy": ("Average Life Expectancy", "{:.1f}", " years"),
}

_SECTION_TEMPLATE = """\
## {title}
{body}
"""


class InsightPromptBuilder:
    """Builds a deterministic prompt asking for an InsightReport JSON object."""

    def build_prompt(
        self,
        context: Mapping[str, Any],
        statistics: Mapping[str, Mapping[str, float]],
        sample: List[Dict[str, Any]],
    ) -> str:
        """Build the full analysis prompt.

        Args:
            context: ``total_records``, ``unique_countries``, ``year_range``
                and optional ``filter_description``.
            statistics: Per-metric ``avg``/``min``/``max`` keyed by
                ``carbon``, ``renewable``, ``gdp``, ``life_expectancy``.
            sample: Leading records of the selection, already reduced to
                the simplified fields.

        Returns:
            A fully formatted prompt string ready for LLM consumption.
        """
        sections = "\n".join(
            [
                _SECTION_TEMPLATE.format(
                    title="Dataset Context",
                    body=self._format_context(context),
                ),
                _SECTION_TEMPLATE.format(
                    title="Statistical Summary",
                    body=self._format_statistics(statistics),
                ),
                _SECTION_TEMPLATE.format(
                    title=f"Sample Data (first {len(sample)} records)",
                    body=f"```json\n{json.dumps(sample, indent=2, default=str)}\n```",
                ),
            ]
        )

        return (
            f"{_SYSTEM_INSTRUCTIONS}\n"
            f"# PROVIDED DATA\n\n{sections}\n"
            f"# OUTPUT SCHEMA\n\n"
            f"Your response MUST conform to this JSON schema:\n\n"
            f"```json\n{_SCHEMA_JSON}\n```\n\n"
            f"# EXAMPLE OUTPUT\n\n"
            f"```json\n{_EXAMPLE_OUTPUT}\n```\n\n"
            f"# TASK\n\n"
            f"{_FOCUS}\n"
            f"Provide specific, actionable insights based on the actual data values."
        )

    @staticmethod
    def _format_context(context: Mapping[str, Any]) -> str:
        filter_description: Optional[str] = context.get("filter_description")
        return "\n".join(
            [
                f"- Total Records: {context.get('total_records', 0)}",
                f"- Countries: {context.get('unique_countries', 0)}",
                f"- Time Period: {context.get('year_range', 'N/A')}",
                f"- Filter Applied: {filter_description or 'None'}",
            ]
        )

    @staticmethod
    def _format_statistics(statistics: Mapping[str, Mapping[str, float]]) -> str:
        lines = []
        for key, (label, value_format, unit) in _STAT_LABELS.items():
            stats = statistics.get(key)
            if not stats:
                continue
            lines.append(
                f"- {label}: {value_format.format(stats.get('avg', 0.0))}{unit} "
                f"(min {stats.get('min', 0.0):g}, max {stats.get('max', 0.0):g})"
            )
        return "\n".join(lines) if lines else "- No numeric indicators available"
