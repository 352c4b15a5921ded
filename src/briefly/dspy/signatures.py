"""DSPy Signatures for content summarization."""
from __future__ import annotations

import dspy


class SummarizeContent(dspy.Signature):  # type: ignore[misc]
    """You are a professional summarizer. Create a concise, accurate summary of the provided text in 5-7 sentences of plain prose.

    text -> summary
    """

    text: str = dspy.InputField(desc="Plain text extracted from the submitted content")
    summary: str = dspy.OutputField(desc="5-7 sentence prose summary")
