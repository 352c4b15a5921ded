"""Turn a submitted URL into plain text ready for summarization."""
from __future__ import annotations

import logging
import re

import httpx
from bs4 import BeautifulSoup

from briefly.core.errors import ContentResolutionError, ResolutionErrorKind
from briefly.core.settings import Settings

logger = logging.getLogger(__name__)

# Markup that never carries article content.
STRIPPED_TAGS = ["script", "style", "noscript", "iframe", "svg", "nav", "header", "footer", "aside"]
TRUNCATION_MARKER = "..."

_WHITESPACE = re.compile(r"\s+")


def extract_text(html: str, max_chars: int = 4000) -> str:
    """Strip chrome from an HTML document and return collapsed, truncated text."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()

    root = soup.body if soup.body is not None else soup
    text = _WHITESPACE.sub(" ", root.get_text(separator=" ")).strip()

    if len(text) > max_chars:
        text = text[:max_chars] + TRUNCATION_MARKER
    return text


class ContentResolver:
    def __init__(
        self,
        *,
        timeout: float = 10.0,
        max_redirects: int = 5,
        max_chars: int = 4000,
        user_agent: str = "Mozilla/5.0 (compatible; ContentSummarizer/1.0)",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.max_chars = max_chars
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> ContentResolver:
        return cls(
            timeout=settings.fetch_timeout_seconds,
            max_redirects=settings.fetch_max_redirects,
            max_chars=settings.content_max_chars,
            user_agent=settings.fetch_user_agent,
        )

    async def resolve(self, url: str) -> str:
        """Fetch ``url`` and return its readable text.

        Raises ContentResolutionError with a distinct ``kind`` for invalid URLs,
        unreachable hosts, timeouts, redirect loops, non-2xx answers and pages
        with nothing left after stripping.
        """
        if not url or not url.strip():
            raise ContentResolutionError(
                "Invalid URL: must be a non-empty string", kind=ResolutionErrorKind.INVALID_URL
            )

        response = await self._fetch(url.strip())

        if not response.is_success:
            status_code = response.status_code
            raise ContentResolutionError(
                f"HTTP {status_code}: {response.reason_phrase}",
                kind=ResolutionErrorKind.HTTP_STATUS,
                retryable=status_code == 429 or status_code >= 500,
            )

        text = extract_text(response.text, self.max_chars)
        if not text:
            raise ContentResolutionError(
                "No readable text found in webpage", kind=ResolutionErrorKind.EMPTY_CONTENT
            )

        logger.info(f"Resolved {url} to {len(text)} characters")
        return text

    async def _fetch(self, url: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                max_redirects=self.max_redirects,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                return await client.get(url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise ContentResolutionError(
                f"Invalid URL: {e}", kind=ResolutionErrorKind.INVALID_URL
            ) from e
        except httpx.TimeoutException as e:
            raise ContentResolutionError(
                "Request timeout", kind=ResolutionErrorKind.TIMEOUT, retryable=True
            ) from e
        except httpx.ConnectError as e:
            raise ContentResolutionError(
                "URL not found or DNS resolution failed",
                kind=ResolutionErrorKind.UNREACHABLE,
                retryable=True,
            ) from e
        except httpx.TooManyRedirects as e:
            raise ContentResolutionError(
                "Too many redirects", kind=ResolutionErrorKind.REDIRECTS
            ) from e
        except httpx.HTTPError as e:
            raise ContentResolutionError(
                f"Failed to fetch URL: {e}",
                kind=ResolutionErrorKind.UNREACHABLE,
                retryable=True,
            ) from e
