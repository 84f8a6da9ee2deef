"""Structured output schema for dataset insight reports."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class InsightReport(BaseModel):
    """Only allowed output contract for the summarizer layer."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        str_strip_whitespace=True,
    )

    insights: List[str] = Field(min_length=1)
    summary: str = Field(min_length=1)
    recommendations: List[str] = Field(min_length=1)
    trend_analysis: str = Field(min_length=1)

    @classmethod
    def no_data(cls) -> "InsightReport":
        return cls(
            insights=["No data available for the current selection"],
            summary="No data to analyze",
            recommendations=["Try adjusting your filters to include more data"],
            trend_analysis="No trends available",
        )
