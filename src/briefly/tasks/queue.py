"""Producer side of the job queue."""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from celery import Celery

from briefly.tasks import PROCESS_JOB_TASK

logger = logging.getLogger(__name__)


class JobQueue:
    """Publishes ``{jobId}`` work items; the payload is the id and nothing else."""

    def __init__(self, celery_app: Celery, queue_name: str) -> None:
        self.celery_app = celery_app
        self.queue_name = queue_name

    async def enqueue(self, job_id: str) -> str:
        """Publish a work item and return the broker message id.

        Raises whatever the broker raises; publishing is not retried here.
        """
        result = await asyncio.to_thread(self._publish, job_id)
        logger.debug(f"Published job {job_id} as message {result.id}")
        return str(result.id)

    def _publish(self, job_id: str) -> Any:
        return self.celery_app.send_task(
            PROCESS_JOB_TASK,
            args=[job_id],
            queue=self.queue_name,
            retry=False,
        )

    async def get_queue_length(self, redis_client: Any) -> int | None:
        """Pending work items (Redis transport keeps them in a list named after the queue)."""
        try:
            return int(await redis_client.llen(self.queue_name))
        except Exception as e:
            logger.error(f"Error getting queue length for {self.queue_name}: {e}")
            return None
