"""Request and response models for the job API (camelCase on the wire)."""
from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitRequest(BaseModel):
    # Presence matters: an explicit null still counts as "provided".
    url: str | None = None
    text: str | None = None


class SubmitResponse(CamelModel):
    job_id: str
    status: str


class JobStatusResponse(CamelModel):
    job_id: str
    status: str
    is_cache_hit: bool | None
    created_at: datetime
    updated_at: datetime


class CacheInfo(CamelModel):
    is_cached: bool
    expires_in_minutes: int | None
    remaining_seconds: int | None


class PendingResultResponse(CamelModel):
    job_id: str
    status: Literal["queued", "processing"]
    message: str = "Job is still being processed"


class CompletedResultResponse(CamelModel):
    job_id: str
    status: Literal["completed"] = "completed"
    summary: str
    completed_at: datetime
    processing_time: str
    is_cache_hit: bool | None
    cache_info: CacheInfo


class FailedResultResponse(CamelModel):
    job_id: str
    status: Literal["failed"] = "failed"
    error: str


ResultResponse = PendingResultResponse | CompletedResultResponse | FailedResultResponse
