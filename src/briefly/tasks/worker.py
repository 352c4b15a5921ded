"""Background worker for briefly.

Single consumer of the summarization queue: each delivery runs the job
pipeline on the process-owned event loop. Start it with ``briefly run-worker``
or ``celery -A briefly.tasks.worker worker --pool=solo -Q summarization-jobs``.
"""
from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from celery.exceptions import Retry
from celery.signals import worker_process_init, worker_process_shutdown, worker_shutdown
from celery.utils.log import get_task_logger

from briefly.core.errors import RetryableJobError
from briefly.core.logging import setup_logging
from briefly.core.resources import Resources
from briefly.core.settings import Settings, get_settings
from briefly.pipelines.job_pipeline import JobPipeline
from briefly.services.content_resolver import ContentResolver
from briefly.services.summarizer import DspySummarizer
from briefly.tasks import PROCESS_JOB_TASK, create_celery_app, retry_countdown

logger = get_task_logger(__name__)

T = TypeVar("T")

settings = get_settings()

# Create Celery app for worker
app = create_celery_app(settings, name="briefly-worker")


class WorkerRuntime:
    """Event loop, connections and pipeline owned by one worker process."""

    def __init__(self, settings: Settings) -> None:
        self.loop = asyncio.new_event_loop()
        self.resources = Resources.open(settings)
        self.pipeline = JobPipeline(
            self.resources.database.session_factory,
            self.resources.cache,
            ContentResolver.from_settings(settings),
            DspySummarizer.from_settings(settings),
            cache_ttl=settings.cache_ttl_seconds,
        )

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        return self.loop.run_until_complete(coro)

    def close(self) -> None:
        try:
            self.run(self.resources.close())
        finally:
            self.loop.close()


_runtime: WorkerRuntime | None = None


def get_runtime() -> WorkerRuntime:
    """Return the process runtime, creating it on first use (the solo pool sends no init signal)."""
    global _runtime
    if _runtime is None:
        setup_logging(settings.log_level)
        _runtime = WorkerRuntime(settings)
        logger.info("Worker runtime started")
    return _runtime


@worker_process_init.connect
def _init_runtime(**_: Any) -> None:
    get_runtime()


@worker_process_shutdown.connect
@worker_shutdown.connect
def _shutdown_runtime(**_: Any) -> None:
    global _runtime
    if _runtime is None:
        return
    logger.info("Worker shutting down")
    try:
        _runtime.close()
    finally:
        _runtime = None


@app.task(  # type: ignore[misc]
    bind=True,
    name=PROCESS_JOB_TASK,
    max_retries=settings.job_max_retries,
)
def process_summary_job(self: Any, job_id: str) -> str:
    """Run one job to a terminal state, or schedule a redelivery for transient failures.

    Args:
        job_id: Id of the job record; the only payload the queue carries

    Returns:
        The pipeline outcome name
    """
    runtime = get_runtime()
    retries = self.request.retries
    final_attempt = retries >= self.max_retries
    logger.info(f"Picked job {job_id} from queue (attempt {retries + 1}/{self.max_retries + 1})")

    try:
        outcome = runtime.run(runtime.pipeline.process(job_id, final_attempt=final_attempt))
    except RetryableJobError as e:
        countdown = retry_countdown(
            retries,
            settings.job_retry_backoff_seconds,
            settings.job_retry_backoff_max_seconds,
        )
        logger.warning(f"Retrying job {job_id} in {countdown:.0f}s: {e.cause.message}")
        try:
            raise self.retry(exc=e, countdown=countdown) from e
        except Retry:
            raise
        except Exception as publish_error:
            # Nothing will redeliver this job, so settle it now.
            logger.error(f"Could not schedule a retry for job {job_id}, finishing it here: {publish_error}")
        outcome = runtime.run(runtime.pipeline.process(job_id, final_attempt=True))

    logger.info(f"Job {job_id} finished with outcome {outcome.value}")
    return outcome.value
