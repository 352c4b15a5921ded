"""Summarization backend adapter on a DSPy language model."""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

import dspy

from briefly.core.errors import SummarizationError
from briefly.core.settings import Settings
from briefly.dspy.programs import SummaryProgram

logger = logging.getLogger(__name__)

# Providers LiteLLM can reach without credentials.
_KEYLESS_PROVIDERS = ("ollama/", "ollama_chat/")


class DspySummarizer:
    """Turns plain text into a 5-7 sentence summary.

    Every failure comes out as :class:`SummarizationError` so the worker only
    sees success or failure, never which side of the wire broke.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        api_base: str | None = None,
        temperature: float = 1.0,
        max_tokens: int = 1024,
        timeout: float = 60.0,
        program: Any | None = None,
    ) -> None:
        self.model = model
        self._api_key = api_key
        self._api_base = api_base
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._program = program or SummaryProgram()
        self._lm: dspy.LM | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> DspySummarizer:
        return cls(
            settings.llm_model,
            api_key=settings.llm_api_key,
            api_base=settings.llm_api_base,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        if not self.model:
            return False
        if self._api_key or self.model.startswith(_KEYLESS_PROVIDERS):
            return True
        # LiteLLM falls back to the provider's own variable, e.g. GROQ_API_KEY.
        return bool(os.environ.get(self.provider_key_env))

    @property
    def provider_key_env(self) -> str:
        provider = self.model.split("/", 1)[0]
        return f"{provider.upper()}_API_KEY"

    async def summarize(self, text: str) -> str:
        if not text or not text.strip():
            raise SummarizationError("Invalid input: text must be a non-empty string")
        if not self.is_configured:
            raise SummarizationError("Summarization backend is not configured")

        try:
            summary = await asyncio.to_thread(self._predict, text)
        except Exception as e:
            logger.error(f"LLM generation error ({self.model}): {e}")
            raise SummarizationError(f"LLM summarization failed: {e}", retryable=True) from e

        summary = (summary or "").strip()
        if not summary:
            raise SummarizationError("LLM returned empty summary")
        return summary

    def _predict(self, text: str) -> str:
        with dspy.context(lm=self._get_lm()):
            return str(self._program(text=text))

    def _get_lm(self) -> dspy.LM:
        if self._lm is None:
            kwargs: dict[str, Any] = {
                "temperature": self._temperature,
                "max_tokens": self._max_tokens,
                "timeout": self._timeout,
                "num_retries": 0,  # redelivery is the queue's job
                "cache": False,
            }
            if self._api_key:
                kwargs["api_key"] = self._api_key
            if self._api_base:
                kwargs["api_base"] = self._api_base
            self._lm = dspy.LM(model=self.model, **kwargs)
            logger.info(f"Configured DSPy LM for summaries: {self.model}")
        return self._lm
