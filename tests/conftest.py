"""Shared fixtures: SQLite job store, in-memory Redis and queue, scripted backends."""
from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from briefly.core.cache_manager import ResultCache
from briefly.db.base import Database
from briefly.pipelines.job_pipeline import JobPipeline
from briefly.services.query import QueryService
from briefly.services.submission import SubmissionService


class InMemoryRedis:
    """The slice of redis.asyncio.Redis used by the cache and the health check, with real expiry."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}
        self.lists: dict[str, list[str]] = {}

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        return entry

    async def get(self, key: str) -> str | None:
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        expires_at = time.monotonic() + ex if ex else None
        self._data[key] = (value, expires_at)
        return True

    async def ttl(self, key: str) -> int:
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return int(entry[1] - time.monotonic())

    async def ping(self) -> bool:
        return True

    async def llen(self, key: str) -> int:
        return len(self.lists.get(key, []))

    def expire_now(self, key: str) -> None:
        value, _ = self._data[key]
        self._data[key] = (value, time.monotonic() - 1)


class UnreachableRedis:
    async def get(self, key: str) -> str | None:
        raise RedisConnectionError("Connection refused")

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        raise RedisConnectionError("Connection refused")

    async def ttl(self, key: str) -> int:
        raise RedisConnectionError("Connection refused")

    async def ping(self) -> bool:
        raise RedisConnectionError("Connection refused")


class RecordingQueue:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.job_ids: list[str] = []

    async def enqueue(self, job_id: str) -> str:
        if self.fail:
            raise RedisConnectionError("broker unavailable")
        self.job_ids.append(job_id)
        return f"msg-{len(self.job_ids)}"


class ScriptedSummarizer:
    """Returns ``Summary of: <text>`` unless given an error; counts calls."""

    def __init__(
        self,
        error: Exception | None = None,
        on_call: Callable[[str], Awaitable[None]] | None = None,
    ) -> None:
        self.error = error
        self.on_call = on_call
        self.calls: list[str] = []

    async def summarize(self, text: str) -> str:
        self.calls.append(text)
        if self.on_call is not None:
            await self.on_call(text)
        if self.error is not None:
            raise self.error
        return f"Summary of: {text}"


class ScriptedResolver:
    def __init__(self, text: str = "Resolved page text.", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.urls: list[str] = []

    async def resolve(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.text


@pytest_asyncio.fixture
async def database(tmp_path: Any) -> Any:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    await db.init_models(drop=True)
    yield db
    await db.dispose()


@pytest.fixture
def redis_store() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache(redis_store: InMemoryRedis) -> ResultCache:
    return ResultCache(redis_store, prefix="summary:", default_ttl=3600)


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def summarizer() -> ScriptedSummarizer:
    return ScriptedSummarizer()


@pytest.fixture
def resolver() -> ScriptedResolver:
    return ScriptedResolver()


@pytest.fixture
def submission_service(database: Database, queue: RecordingQueue) -> SubmissionService:
    return SubmissionService(database.session_factory, queue)


@pytest.fixture
def query_service(database: Database, cache: ResultCache) -> QueryService:
    return QueryService(database.session_factory, cache)


@pytest.fixture
def pipeline(
    database: Database,
    cache: ResultCache,
    resolver: ScriptedResolver,
    summarizer: ScriptedSummarizer,
) -> JobPipeline:
    return JobPipeline(database.session_factory, cache, resolver, summarizer, cache_ttl=3600)


@pytest.fixture
def unreachable_redis() -> UnreachableRedis:
    return UnreachableRedis()


@pytest.fixture
def unreachable_cache(unreachable_redis: UnreachableRedis) -> ResultCache:
    return ResultCache(unreachable_redis, prefix="summary:", default_ttl=3600)
