"""Process-wide connections, built once at startup and closed on shutdown.

The API lifespan and the worker runtime each own one ``Resources`` and hand
its members to the services by constructor.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from briefly.core.cache_manager import ResultCache
from briefly.core.redis_client import close_redis_client, create_redis_client
from briefly.core.settings import Settings
from briefly.db.base import Database
from briefly.tasks import create_celery_app
from briefly.tasks.queue import JobQueue

logger = logging.getLogger(__name__)


@dataclass
class Resources:
    settings: Settings
    database: Database
    redis: Any
    cache: ResultCache
    queue: JobQueue

    @classmethod
    def open(cls, settings: Settings) -> Resources:
        database = Database(settings.database_url, echo=settings.sql_echo)
        redis_client = create_redis_client(settings)
        cache = ResultCache(
            redis_client,
            prefix=settings.cache_prefix,
            default_ttl=settings.cache_ttl_seconds,
        )
        queue = JobQueue(create_celery_app(settings, name="briefly-producer"), settings.queue_name)
        logger.info("Resources opened")
        return cls(settings=settings, database=database, redis=redis_client, cache=cache, queue=queue)

    async def close(self) -> None:
        try:
            await close_redis_client(self.redis)
        except Exception as e:
            logger.warning(f"Error closing Redis client: {e}")
        await self.database.dispose()
        self.queue.celery_app.close()
        logger.info("Resources closed")
