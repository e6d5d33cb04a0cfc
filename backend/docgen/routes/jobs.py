"""
Document job routes - submission and status polling
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from typing import Optional
import json
import time

from ..config import settings
from ..exceptions import StorageError
from ..jobs.status import JobStatus, is_terminal
from ..logger import logger
from ..models import DocumentJob
from ..rendering.templates import fallback_html, loading_html
from ..schemas import GenerateRequest, JobStatusResponse, JobSubmitResponse
from ..store import JobStore, get_job_store
from ..tasks import dispatch_job

router = APIRouter(tags=["Jobs"])

SUBMITTED_MESSAGE = "Your request is being processed"
IN_FLIGHT_MESSAGE = "Your request is still being processed"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": str(settings.CORS_MAX_AGE_SECONDS),
}

def _epoch_ms() -> int:
    return int(time.time() * 1000)

async def _read_generate_request(request: Request) -> GenerateRequest:
    """Parse the submission body leniently; a missing or malformed body still yields a job."""
    raw = await request.body()
    try:
        data = json.loads(raw) if raw else {}
    except ValueError:
        logger.warning("Submission body is not valid JSON, using an empty request")
        data = {}
    if not isinstance(data, dict):
        data = {}
    try:
        return GenerateRequest.model_validate(data)
    except ValueError:
        logger.warning("Submission body has an invalid prompt, using an empty request")
        return GenerateRequest()

def _job_to_status(job: DocumentJob) -> JobStatusResponse:
    """Convert a stored job into the status payload, filling gaps with renderable content"""
    if not is_terminal(job.status):
        return JobStatusResponse(
            status=job.status,
            message=IN_FLIGHT_MESSAGE,
            html=job.html or loading_html(job.prompt, job.created_at),
            projectId=job.project_id or f"pending-{job.job_id}",
        )

    if job.status == JobStatus.FAILED.value:
        error = job.error or "Unknown error"
        return JobStatusResponse(
            status=JobStatus.FAILED.value,
            error=error,
            html=job.html or fallback_html(job.prompt, error, job.updated_at),
            projectId=job.project_id or f"failed-{job.job_id}",
        )

    return JobStatusResponse(
        status=JobStatus.COMPLETED.value,
        result=job.result,
        html=job.html,
        projectId=job.project_id or f"completed-{job.job_id}",
    )

async def _job_status_response(job_id: str, store: JobStore) -> Response:
    job = await store.get(job_id)
    if job is None:
        logger.warning(f"Job not found: {job_id}")
        return JSONResponse(
            status_code=404,
            content={"error": "Job not found", "status": "not_found"},
        )

    body = _job_to_status(job)
    logger.debug(f"Job {job_id} status: {job.status}", extra={"job_id": job_id})
    return JSONResponse(content=body.model_dump(exclude_none=True))

async def _fail_undispatched(job: DocumentJob, error: Exception, store: JobStore) -> JobSubmitResponse:
    error_message = f"Failed to queue job: {error}"
    html = fallback_html(job.prompt, error_message, store.now())
    project_id = f"error-{job.job_id}"
    await store.update(
        job.job_id,
        status=JobStatus.FAILED,
        error=error_message,
        html=html,
        project_id=project_id,
        result={"html": html, "projectId": project_id},
    )
    return JobSubmitResponse(
        jobId=job.job_id,
        status=JobStatus.FAILED.value,
        error=error_message,
        html=html,
        projectId=project_id,
    )

@router.post("/jobs", response_model=JobSubmitResponse, response_model_exclude_none=True)
async def submit_job(
    request: Request,
    jobId: Optional[str] = Query(None),
    store: JobStore = Depends(get_job_store),
):
    """
    Create a generation job and hand it to the worker pool.

    Returns immediately with the job id and placeholder html. With a `jobId`
    query parameter this is a status check instead.
    """
    if jobId:
        return await _job_status_response(jobId, store)

    body = await _read_generate_request(request)
    prompt = body.effective_prompt()
    logger.info("Generation request received", extra={"prompt_length": len(prompt)})

    try:
        job = await store.create(prompt, html=loading_html(prompt, store.now()))
    except StorageError as e:
        logger.error(f"Job submission degraded to fallback document: {e.message}")
        return JobSubmitResponse(
            jobId=None,
            status=JobStatus.FAILED.value,
            error=e.message,
            html=fallback_html(prompt, "Error processing your request"),
            projectId=f"error-{_epoch_ms()}",
        )

    try:
        await run_in_threadpool(dispatch_job, job.job_id, body.forward_payload())
    except Exception as e:
        logger.error(f"Failed to queue job {job.job_id}: {e}", extra={"job_id": job.job_id})
        return await _fail_undispatched(job, e, store)

    return JobSubmitResponse(
        jobId=job.job_id,
        status=JobStatus.PENDING.value,
        message=SUBMITTED_MESSAGE,
        html=job.html,
        projectId=f"job-{job.job_id}",
    )

@router.get("/jobs/{job_id}")
async def get_job_status(job_id: str, store: JobStore = Depends(get_job_store)):
    """
    Get current status of a job. Read-only.
    """
    return await _job_status_response(job_id, store)

@router.get("/jobs")
async def get_job_status_by_query(
    jobId: Optional[str] = Query(None),
    store: JobStore = Depends(get_job_store),
):
    if not jobId:
        raise HTTPException(status_code=400, detail="jobId query parameter is required")
    return await _job_status_response(jobId, store)

@router.options("/jobs")
@router.options("/jobs/{job_id}")
async def jobs_options():
    return Response(status_code=204, headers=CORS_HEADERS)
