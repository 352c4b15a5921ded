"""Error handling utilities and custom exceptions."""
from __future__ import annotations

import logging
from enum import Enum

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "app_error",
        http_status: int = status.HTTP_400_BAD_REQUEST,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class SubmissionValidationError(AppError):
    """Rejected submission payload; never reaches the queue."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="validation_error")


class InvalidJobIdError(AppError):
    def __init__(self) -> None:
        super().__init__(
            "Invalid job ID format. Must be a valid UUID.",
            code="invalid_job_id",
        )


class JobNotFoundError(AppError):
    def __init__(self) -> None:
        super().__init__(
            "Job not found.",
            code="job_not_found",
            http_status=status.HTTP_404_NOT_FOUND,
        )


class ErrorResponse(BaseModel):
    error: str
    code: str | None = None


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request payload"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "code": "validation_error"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": "internal_error"},
    )


# Job processing errors (worker side)

class JobProcessingError(Exception):
    """A job-local failure that the worker folds into the ``failed`` status.

    ``retryable`` marks transient causes that the queue may redeliver before
    the failure becomes terminal.
    """

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class ResolutionErrorKind(str, Enum):
    INVALID_URL = "invalid_url"
    UNREACHABLE = "unreachable"
    TIMEOUT = "timeout"
    REDIRECTS = "redirects"
    HTTP_STATUS = "http_status"
    EMPTY_CONTENT = "empty_content"


class ContentResolutionError(JobProcessingError):
    """URL could not be turned into summarizable text."""

    def __init__(
        self,
        message: str,
        *,
        kind: ResolutionErrorKind,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.kind = kind


class SummarizationError(JobProcessingError):
    """Backend produced no summary; transport and backend causes look the same."""


class RetryableJobError(Exception):
    """Raised by the pipeline when a transient failure should be redelivered."""

    def __init__(self, job_id: str, cause: JobProcessingError) -> None:
        super().__init__(f"Job {job_id} hit a retryable failure: {cause.message}")
        self.job_id = job_id
        self.cause = cause


class InvalidTransitionError(Exception):
    """Requested status change is not in the job state-transition table."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Illegal job status transition {current} -> {target}")
        self.current = current
        self.target = target
