"""Repository implementations using SQLAlchemy async sessions."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from briefly.core.errors import InvalidTransitionError

from .models import InputType, Job, JobStatus, can_transition, utcnow

logger = logging.getLogger(__name__)


class JobRepository:
    """Job records. Callers own the transaction and commit."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, job_id: uuid.UUID) -> Job | None:
        result = await self.session.execute(select(Job).where(Job.id == job_id))
        return result.scalar_one_or_none()

    async def add(self, input_type: InputType, content: str, input_hash: str) -> Job:
        now = utcnow()
        job = Job(
            id=uuid.uuid4(),
            input_type=input_type,
            original_text=content if input_type is InputType.TEXT else None,
            original_url=content if input_type is InputType.URL else None,
            input_hash=input_hash,
            status=JobStatus.QUEUED,
            created_at=now,
            updated_at=now,
        )
        self.session.add(job)
        await self.session.flush()
        return job

    async def mark_processing(self, job: Job) -> Job:
        self._transition(job, JobStatus.PROCESSING)
        await self.session.flush()
        return job

    async def mark_completed(self, job: Job, summary: str, *, is_cache_hit: bool) -> Job:
        self._transition(job, JobStatus.COMPLETED)
        job.summary = summary
        job.is_cache_hit = is_cache_hit
        job.error_message = None
        await self.session.flush()
        return job

    async def mark_failed(self, job: Job, error_message: str) -> Job:
        self._transition(job, JobStatus.FAILED)
        job.error_message = error_message
        job.summary = None
        await self.session.flush()
        return job

    def _transition(self, job: Job, target: JobStatus) -> None:
        current = JobStatus(job.status)
        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)
        job.status = target
        job.updated_at = utcnow()
        logger.debug(f"Job {job.id}: {current.value} -> {target.value}")
