"""Per-job worker pipeline: load, cache lookup, resolve, summarize, persist.

Runs once per queue delivery. Job-local failures end as ``failed`` records
rather than exceptions; only bookkeeping errors (database, illegal
transitions) and retry requests leave :meth:`JobPipeline.process`.
"""
from __future__ import annotations

import enum
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from briefly.core.errors import JobProcessingError, RetryableJobError
from briefly.db.models import InputType, Job, JobStatus, parse_job_id
from briefly.db.repositories import JobRepository
from briefly.pipelines.interfaces import (
    ContentResolverProtocol,
    ResultCacheProtocol,
    SummarizerProtocol,
)

logger = logging.getLogger(__name__)


class JobOutcome(str, enum.Enum):
    COMPLETED = "completed"
    CACHE_HIT = "cache_hit"
    FAILED = "failed"
    DROPPED = "dropped"  # unknown or malformed job id
    SKIPPED = "skipped"  # redelivery of a job that already reached a terminal state


class JobPipeline:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: ResultCacheProtocol,
        resolver: ContentResolverProtocol,
        summarizer: SummarizerProtocol,
        *,
        cache_ttl: int = 3600,
    ) -> None:
        self._session_factory = session_factory
        self._cache = cache
        self._resolver = resolver
        self._summarizer = summarizer
        self._cache_ttl = cache_ttl

    async def process(self, job_id: str, *, final_attempt: bool = True) -> JobOutcome:
        """Drive one job to a terminal state.

        With ``final_attempt=False`` a retryable failure leaves the job in
        ``processing`` and raises RetryableJobError so the queue can redeliver.
        """
        job_uuid = parse_job_id(job_id)
        if job_uuid is None:
            logger.error(f"Dropping queue item with malformed job id {job_id!r}")
            return JobOutcome.DROPPED

        async with self._session_factory() as session:
            jobs = JobRepository(session)
            job = await jobs.get(job_uuid)
            if job is None:
                logger.error(f"Job {job_id} not found in database, dropping queue item")
                return JobOutcome.DROPPED

            if JobStatus(job.status).is_terminal:
                logger.info(f"Job {job_id} already {job.status.value}, ignoring redelivery")
                return JobOutcome.SKIPPED

            cached_summary = await self._lookup_cache(job)
            if cached_summary:
                logger.info(f"Cache HIT for job {job_id}")
                await jobs.mark_completed(job, cached_summary, is_cache_hit=True)
                await session.commit()
                return JobOutcome.CACHE_HIT

            logger.info(f"Cache MISS for job {job_id}")
            if job.status is JobStatus.QUEUED:
                await jobs.mark_processing(job)
                await session.commit()

            try:
                content = await self._resolve_content(job)
                summary = await self._summarizer.summarize(content)
            except JobProcessingError as e:
                if e.retryable and not final_attempt:
                    logger.warning(f"Job {job_id} will be retried: {e.message}")
                    raise RetryableJobError(job_id, e) from e
                logger.error(f"Job {job_id} failed: {e.message}")
                await jobs.mark_failed(job, e.message)
                await session.commit()
                return JobOutcome.FAILED
            except Exception as e:
                logger.exception(f"Job {job_id} failed with an unexpected error")
                await jobs.mark_failed(job, f"Unexpected error: {e}")
                await session.commit()
                return JobOutcome.FAILED

            await self._store_in_cache(job, summary)

            await jobs.mark_completed(job, summary, is_cache_hit=False)
            await session.commit()
            logger.info(f"Job {job_id} completed")
            return JobOutcome.COMPLETED

    async def _resolve_content(self, job: Job) -> str:
        if job.input_type is InputType.URL:
            return await self._resolver.resolve(job.original_url or "")
        return job.original_text or ""

    async def _lookup_cache(self, job: Job) -> str | None:
        try:
            return await self._cache.get(job.input_hash)
        except Exception as e:
            logger.warning(f"Cache lookup failed for job {job.id}, treating as miss: {e}")
            return None

    async def _store_in_cache(self, job: Job, summary: str) -> None:
        try:
            stored = await self._cache.set(job.input_hash, summary, self._cache_ttl)
        except Exception as e:
            logger.warning(f"Failed to cache summary for job {job.id}: {e}")
            return
        if not stored:
            logger.warning(f"Summary for job {job.id} was not cached")
