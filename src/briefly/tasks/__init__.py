"""Task queue system initialization for briefly.

Celery with Redis as the broker carries job ids from the API to the single
summarization worker. Job state lives in the database, so no result backend
is configured.
"""
from __future__ import annotations

import logging

from celery import Celery

from briefly.core.settings import Settings

logger = logging.getLogger(__name__)

PROCESS_JOB_TASK = "briefly.tasks.worker.process_summary_job"


def create_celery_app(settings: Settings, name: str = "briefly") -> Celery:
    """Create a Celery application bound to the configured Redis broker."""
    app = Celery(name, broker=settings.redis_url, include=["briefly.tasks.worker"])

    app.conf.update(
        # Task settings
        task_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_ignore_result=True,

        # At-least-once delivery to exactly one in-flight job
        worker_concurrency=1,
        worker_prefetch_multiplier=1,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        task_acks_on_failure_or_timeout=True,

        # Routing
        task_default_queue=settings.queue_name,
        task_routes={PROCESS_JOB_TASK: {"queue": settings.queue_name}},

        broker_connection_retry_on_startup=True,
        broker_transport_options={"visibility_timeout": 3600},
    )

    logger.info(f"Celery application {name!r} initialized with Redis broker")
    return app


def retry_countdown(retries: int, base: float, cap: float) -> float:
    """Exponential backoff for the ``retries``-th redelivery: base * 2**retries, capped."""
    return float(min(base * (2 ** retries), cap))
