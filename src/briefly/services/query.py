"""Read path for job status and results."""
from __future__ import annotations

import logging
import math
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from briefly.core.errors import InvalidJobIdError, JobNotFoundError
from briefly.db.models import Job, JobStatus, as_utc, parse_job_id
from briefly.db.repositories import JobRepository
from briefly.pipelines.interfaces import ResultCacheProtocol
from briefly.schemas import (
    CacheInfo,
    CompletedResultResponse,
    FailedResultResponse,
    JobStatusResponse,
    PendingResultResponse,
    ResultResponse,
)

logger = logging.getLogger(__name__)


def format_processing_time(created_at: datetime, updated_at: datetime) -> str:
    seconds = (as_utc(updated_at) - as_utc(created_at)).total_seconds()
    return f"{max(seconds, 0.0):.2f}s"


class QueryService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        cache: ResultCacheProtocol,
    ) -> None:
        self._session_factory = session_factory
        self._cache = cache

    async def get_status(self, job_id: str) -> JobStatusResponse:
        job = await self._load(job_id)
        return JobStatusResponse(
            job_id=str(job.id),
            status=job.status.value,
            is_cache_hit=job.is_cache_hit,
            created_at=as_utc(job.created_at),
            updated_at=as_utc(job.updated_at),
        )

    async def get_result(self, job_id: str) -> ResultResponse:
        job = await self._load(job_id)
        status = JobStatus(job.status)

        if status in (JobStatus.QUEUED, JobStatus.PROCESSING):
            return PendingResultResponse(job_id=str(job.id), status=status.value)

        if status is JobStatus.FAILED:
            return FailedResultResponse(
                job_id=str(job.id),
                error=job.error_message or "Job processing failed",
            )

        return CompletedResultResponse(
            job_id=str(job.id),
            summary=job.summary or "",
            completed_at=as_utc(job.updated_at),
            processing_time=format_processing_time(job.created_at, job.updated_at),
            is_cache_hit=job.is_cache_hit,
            cache_info=await self._cache_info(job.input_hash),
        )

    async def _cache_info(self, input_hash: str) -> CacheInfo:
        try:
            remaining = await self._cache.ttl_remaining(input_hash)
        except Exception as e:
            logger.warning(f"Cache TTL lookup failed for {input_hash}: {e}")
            remaining = None
        if remaining is None:
            return CacheInfo(is_cached=False, expires_in_minutes=None, remaining_seconds=None)
        return CacheInfo(
            is_cached=True,
            expires_in_minutes=math.ceil(remaining / 60),
            remaining_seconds=remaining,
        )

    async def _load(self, job_id: str) -> Job:
        job_uuid = parse_job_id(job_id)
        if job_uuid is None:
            raise InvalidJobIdError()
        async with self._session_factory() as session:
            job = await JobRepository(session).get(job_uuid)
        if job is None:
            raise JobNotFoundError()
        return job
