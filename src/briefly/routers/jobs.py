"""Job endpoints: submit, poll status, fetch result."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from briefly.core.errors import ErrorResponse
from briefly.schemas import (
    JobStatusResponse,
    PendingResultResponse,
    SubmitRequest,
    SubmitResponse,
)
from briefly.services.query import QueryService
from briefly.services.submission import SubmissionService

router = APIRouter(tags=["jobs"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service  # type: ignore[no-any-return]


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query_service  # type: ignore[no-any-return]


@router.post(
    "/submit",
    status_code=status.HTTP_201_CREATED,
    responses={201: {"model": SubmitResponse}, 400: {"model": ErrorResponse}},
)
async def submit_job(
    payload: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service),  # noqa: B008
) -> JSONResponse:
    created = await service.submit(payload)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=created.model_dump(mode="json", by_alias=True),
    )


@router.get("/status/{job_id}", responses=_ERRORS)
async def get_job_status(
    job_id: str,
    service: QueryService = Depends(get_query_service),  # noqa: B008
) -> JSONResponse:
    view: JobStatusResponse = await service.get_status(job_id)
    return JSONResponse(content=view.model_dump(mode="json", by_alias=True))


@router.get("/result/{job_id}", responses={**_ERRORS, 202: {"model": PendingResultResponse}})
async def get_job_result(
    job_id: str,
    service: QueryService = Depends(get_query_service),  # noqa: B008
) -> JSONResponse:
    view = await service.get_result(job_id)
    # A failed job is still a successful query; only pending jobs get 202.
    status_code = (
        status.HTTP_202_ACCEPTED
        if isinstance(view, PendingResultResponse)
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=status_code, content=view.model_dump(mode="json", by_alias=True))

