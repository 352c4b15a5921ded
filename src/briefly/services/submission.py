"""Job submission: validate, fingerprint, persist, enqueue."""
from __future__ import annotations

import hashlib
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from briefly.core.errors import SubmissionValidationError
from briefly.db.models import InputType
from briefly.db.repositories import JobRepository
from briefly.pipelines.interfaces import JobQueueProtocol
from briefly.schemas import SubmitRequest, SubmitResponse

logger = logging.getLogger(__name__)


def compute_input_hash(content: str) -> str:
    """SHA-256 hex digest of already-trimmed input; the cache key and idempotency fingerprint."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def validate_submission(payload: SubmitRequest) -> tuple[InputType, str]:
    """Return (input_type, trimmed_input) or raise SubmissionValidationError."""
    provided = payload.model_fields_set & {"url", "text"}

    if provided == {"url", "text"}:
        raise SubmissionValidationError("Cannot provide both url and text. Provide exactly one.")
    if not provided:
        raise SubmissionValidationError("Either url or text must be provided.")

    field = provided.pop()
    trimmed = (getattr(payload, field) or "").strip()
    if not trimmed:
        raise SubmissionValidationError(f"{field} cannot be empty or contain only whitespace.")
    return InputType(field), trimmed


class SubmissionService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        queue: JobQueueProtocol,
    ) -> None:
        self._session_factory = session_factory
        self._queue = queue

    async def submit(self, payload: SubmitRequest) -> SubmitResponse:
        input_type, content = validate_submission(payload)
        input_hash = compute_input_hash(content)

        async with self._session_factory() as session:
            job = await JobRepository(session).add(input_type, content, input_hash)
            await session.commit()

        job_id = str(job.id)
        try:
            await self._queue.enqueue(job_id)
            logger.info(f"Job {job_id} added to queue")
        except Exception as e:
            # The record stays queued; a sweep over queued jobs can re-enqueue it.
            logger.error(f"Failed to add job {job_id} to queue: {e}")

        return SubmitResponse(job_id=job_id, status=job.status.value)
