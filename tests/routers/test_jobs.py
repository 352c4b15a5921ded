"""HTTP contract of /submit, /status/{id} and /result/{id}."""
import uuid

import httpx
import pytest
import pytest_asyncio

from briefly import create_app
from briefly.core.errors import SummarizationError


@pytest_asyncio.fixture
async def client(submission_service, query_service):
    app = create_app()
    app.state.submission_service = submission_service
    app.state.query_service = query_service
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_submit_text_returns_201_with_job_id(client, queue):
    resp = await client.post("/submit", json={"text": "Summarize this please."})

    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "queued"
    assert uuid.UUID(data["jobId"])
    assert queue.job_ids == [data["jobId"]]


@pytest.mark.asyncio
async def test_submit_url_returns_201(client):
    resp = await client.post("/submit", json={"url": "https://example.com/article"})
    assert resp.status_code == 201
    assert resp.json()["status"] == "queued"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body, message",
    [
        ({"url": "https://example.com", "text": "both"}, "Cannot provide both url and text. Provide exactly one."),
        ({}, "Either url or text must be provided."),
        ({"text": "   "}, "text cannot be empty or contain only whitespace."),
        ({"url": None}, "url cannot be empty or contain only whitespace."),
    ],
)
async def test_submit_validation_errors(client, queue, body, message):
    resp = await client.post("/submit", json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": message, "code": "validation_error"}
    assert queue.job_ids == []


@pytest.mark.asyncio
async def test_submit_with_wrong_types_is_400(client):
    resp = await client.post("/submit", json={"text": 42})

    assert resp.status_code == 400
    data = resp.json()
    assert data["code"] == "validation_error"
    assert data["error"].startswith("text")


@pytest.mark.asyncio
async def test_submit_with_malformed_body_is_400(client):
    resp = await client.post("/submit", content=b"{not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_status_of_new_job(client):
    job_id = (await client.post("/submit", json={"text": "poll me"})).json()["jobId"]

    resp = await client.get(f"/status/{job_id}")

    assert resp.status_code == 200
    data = resp.json()
    assert data["jobId"] == job_id
    assert data["status"] == "queued"
    assert data["isCacheHit"] is None
    assert "createdAt" in data and "updatedAt" in data


@pytest.mark.asyncio
async def test_result_of_pending_job_is_202(client):
    job_id = (await client.post("/submit", json={"text": "not yet"})).json()["jobId"]

    resp = await client.get(f"/result/{job_id}")

    assert resp.status_code == 202
    assert resp.json() == {
        "jobId": job_id,
        "status": "queued",
        "message": "Job is still being processed",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/status/not-a-uuid", "/result/not-a-uuid"])
async def test_malformed_job_id_is_400(client, path):
    resp = await client.get(path)
    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Invalid job ID format. Must be a valid UUID.",
        "code": "invalid_job_id",
    }


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["/status", "/result"])
async def test_unknown_job_id_is_404(client, prefix):
    resp = await client.get(f"{prefix}/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Job not found.", "code": "job_not_found"}


@pytest.mark.asyncio
async def test_submit_process_then_fetch_result(client, pipeline, summarizer):
    first_id = (await client.post("/submit", json={"text": "End to end text."})).json()["jobId"]
    second_id = (await client.post("/submit", json={"text": "  End to end text.  "})).json()["jobId"]

    await pipeline.process(first_id)
    await pipeline.process(second_id)

    first = await client.get(f"/result/{first_id}")
    second = await client.get(f"/result/{second_id}")

    assert first.status_code == 200
    body = first.json()
    assert body["status"] == "completed"
    assert body["summary"] == "Summary of: End to end text."
    assert body["isCacheHit"] is False
    assert body["processingTime"].endswith("s")
    assert body["cacheInfo"]["isCached"] is True
    assert body["cacheInfo"]["expiresInMinutes"] == 60

    assert second.status_code == 200
    assert second.json()["isCacheHit"] is True
    assert second.json()["summary"] == body["summary"]
    assert len(summarizer.calls) == 1

    status = await client.get(f"/status/{second_id}")
    assert status.json()["status"] == "completed"
    assert status.json()["isCacheHit"] is True


@pytest.mark.asyncio
async def test_failed_job_result_is_200_with_error(client, summarizer, pipeline):
    summarizer.error = SummarizationError("LLM returned empty summary")
    job_id = (await client.post("/submit", json={"text": "will fail"})).json()["jobId"]
    await pipeline.process(job_id)

    resp = await client.get(f"/result/{job_id}")

    assert resp.status_code == 200
    assert resp.json() == {"jobId": job_id, "status": "failed", "error": "LLM returned empty summary"}
