"""DSPy summarizer adapter: configuration checks and uniform failures."""
import pytest

from briefly.core.errors import SummarizationError
from briefly.core.settings import Settings
from briefly.services.summarizer import DspySummarizer


def _summarizer(**kwargs):
    kwargs.setdefault("api_key", "test-key")
    return DspySummarizer("groq/llama-3.1-8b-instant", **kwargs)


def test_is_configured_needs_key_except_for_local_models(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    assert _summarizer().is_configured
    assert not DspySummarizer("groq/llama-3.1-8b-instant").is_configured
    assert DspySummarizer("ollama/llama3").is_configured
    assert DspySummarizer("ollama_chat/llama3").is_configured
    assert not DspySummarizer("", api_key="k").is_configured


def test_provider_environment_key_counts_as_configured(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk-from-env")
    summarizer = DspySummarizer("groq/llama-3.1-8b-instant")

    assert summarizer.provider_key_env == "GROQ_API_KEY"
    assert summarizer.is_configured


@pytest.mark.asyncio
async def test_provider_environment_key_lets_jobs_run(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gsk-from-env")
    summarizer = DspySummarizer("groq/llama-3.1-8b-instant")
    monkeypatch.setattr(summarizer, "_predict", lambda text: "A summary.")

    assert await summarizer.summarize("text") == "A summary."


def test_from_settings_copies_backend_options():
    settings = Settings(
        llm_model="openai/gpt-4o-mini",
        llm_api_key="sk-test",
        llm_temperature=0.2,
        llm_max_tokens=256,
    )
    summarizer = DspySummarizer.from_settings(settings)
    assert summarizer.model == "openai/gpt-4o-mini"
    assert summarizer.is_configured
    assert summarizer._temperature == 0.2
    assert summarizer._max_tokens == 256


@pytest.mark.asyncio
async def test_summarize_returns_stripped_program_output(monkeypatch):
    summarizer = _summarizer()
    monkeypatch.setattr(summarizer, "_predict", lambda text: f"  Summary of {len(text)} chars.  \n")

    assert await summarizer.summarize("Some article text") == "Summary of 17 chars."


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["", "   "])
async def test_summarize_rejects_empty_input(text):
    with pytest.raises(SummarizationError) as exc_info:
        await _summarizer().summarize(text)
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_summarize_without_credentials_fails_terminally(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    with pytest.raises(SummarizationError) as exc_info:
        await DspySummarizer("groq/llama-3.1-8b-instant").summarize("text")
    assert exc_info.value.message == "Summarization backend is not configured"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_summarize_empty_result(monkeypatch):
    summarizer = _summarizer()
    monkeypatch.setattr(summarizer, "_predict", lambda text: "   ")

    with pytest.raises(SummarizationError) as exc_info:
        await summarizer.summarize("text")
    assert exc_info.value.message == "LLM returned empty summary"
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_summarize_call_error_is_retryable(monkeypatch):
    def broken(text):
        raise ConnectionError("upstream reset")

    summarizer = _summarizer()
    monkeypatch.setattr(summarizer, "_predict", broken)

    with pytest.raises(SummarizationError) as exc_info:
        await summarizer.summarize("text")
    assert exc_info.value.message == "LLM summarization failed: upstream reset"
    assert exc_info.value.retryable is True


def test_language_model_is_built_once():
    summarizer = _summarizer()

    lm = summarizer._get_lm()

    assert lm.model == "groq/llama-3.1-8b-instant"
    assert summarizer._get_lm() is lm
