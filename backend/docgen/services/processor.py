"""
Job processor - drives one document job from pending to a terminal status.

Status flow: pending -> processing -> completed/failed

The processor is detached from any request, so it never raises: every failure
ends up in the job record as a "failed" status with renderable fallback html.
"""
from __future__ import annotations

import time
import traceback
from typing import Any, Dict

from ..exceptions import InvalidResponseFormatError
from ..jobs.status import JobStatus
from ..logger import logger
from ..rendering.templates import fallback_html
from ..store import JobStore
from .generation_client import GenerationClient
from .response_classifier import INVALID, STRUCTURED, classify_response


async def process_job(
    job_id: str,
    payload: Dict[str, Any],
    *,
    store: JobStore,
    client: GenerationClient,
) -> None:
    started = time.time()
    logger.info(f"Processing job {job_id}", extra={"job_id": job_id})

    try:
        if not await store.update(job_id, status=JobStatus.PROCESSING):
            logger.warning(f"Could not mark job {job_id} as processing, continuing", extra={"job_id": job_id})

        body = await client.generate(payload)
        classified = classify_response(body)

        if classified.kind == INVALID:
            raise InvalidResponseFormatError()

        if classified.kind == STRUCTURED:
            project_id = classified.project_id or f"job-{job_id}"
            result = classified.payload
        else:
            project_id = f"html-{job_id}"
            result = {"html": classified.html, "projectId": project_id}

        saved = await store.update(
            job_id,
            status=JobStatus.COMPLETED,
            html=classified.html,
            project_id=project_id,
            result=result,
        )
        if not saved:
            logger.error(f"Failed to store result for job {job_id}", extra={"job_id": job_id})
            return

        logger.info(
            f"Job {job_id} completed with {classified.kind} content",
            extra={
                "job_id": job_id,
                "project_id": project_id,
                "duration_ms": round((time.time() - started) * 1000, 2),
            },
        )
    except Exception as e:
        logger.error(
            f"Job {job_id} failed: {e}",
            extra={
                "job_id": job_id,
                "error": str(e),
                "traceback": traceback.format_exc(),
            },
        )
        await _fail_job(job_id, payload, e, store=store)


async def _fail_job(job_id: str, payload: Dict[str, Any], error: Exception, *, store: JobStore) -> None:
    error_message = str(error) or type(error).__name__
    try:
        job = await store.get(job_id)
        prompt = job.prompt if job is not None else str(payload.get("prompt") or "")

        html = fallback_html(prompt, error_message, store.now())
        project_id = f"error-{job_id}"
        saved = await store.update(
            job_id,
            status=JobStatus.FAILED,
            error=error_message,
            html=html,
            project_id=project_id,
            result={"html": html, "projectId": project_id},
        )
        if not saved:
            logger.error(f"Failed to record failure for job {job_id}", extra={"job_id": job_id})
    except Exception as e:
        logger.error(
            f"Could not record failure for job {job_id}: {e}",
            extra={"job_id": job_id, "traceback": traceback.format_exc()},
        )
