"""Interfaces (Protocols) between the job pipeline and its collaborators."""
from __future__ import annotations

from typing import Protocol


class ResultCacheProtocol(Protocol):
    async def get(self, key: str) -> str | None: ...  # noqa: D401,E701
    async def set(self, key: str, value: str, ttl: int | None = None) -> bool: ...
    async def ttl_remaining(self, key: str) -> int | None: ...


class ContentResolverProtocol(Protocol):
    async def resolve(self, url: str) -> str: ...


class SummarizerProtocol(Protocol):
    async def summarize(self, text: str) -> str: ...


class JobQueueProtocol(Protocol):
    async def enqueue(self, job_id: str) -> str: ...
