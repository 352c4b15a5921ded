"""DSPy program used by the summarization backend adapter."""
from __future__ import annotations

import dspy

from .signatures import SummarizeContent


class SummaryProgram(dspy.Module):  # type: ignore[misc]
    """Single-step summarizer over :class:`SummarizeContent`."""

    def __init__(self) -> None:
        super().__init__()
        self.summarizer = dspy.Predict(SummarizeContent)

    def forward(self, text: str) -> str:
        return str(self.summarizer(text=text).summary or "")
