"""
Client-side poller for document jobs.

Submits a prompt, then polls the status endpoint at a fixed interval until the
job reaches a terminal status or the attempt budget runs out. Giving up is
local only: nothing is sent to the server, which may still finish the job.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

import httpx

from ..logger import logger
from ..rendering.templates import timeout_html


DEFAULT_INTERVAL_SECONDS = 2.0
DEFAULT_MAX_ATTEMPTS = 60


class PollState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    DONE = "done"


@dataclass
class PollOutcome:
    status: str  # completed | failed | timeout | error | cancelled
    html: str
    project_id: Optional[str] = None
    job_id: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0


class JobPoller:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        jobs_path: str = "/jobs",
        interval: float = DEFAULT_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        on_update: Optional[Callable[[str], Any]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.jobs_path = jobs_path.rstrip("/")
        self.interval = interval
        self.max_attempts = max_attempts
        self.on_update = on_update
        self._sleep = sleep

        self.state = PollState.IDLE
        self.job_id: Optional[str] = None
        self.last_html: Optional[str] = None
        self._generation = 0

    def reset(self) -> None:
        """Forget the current document. A loop still running stops at its next check."""
        self._generation += 1
        self.state = PollState.IDLE
        self.job_id = None
        self.last_html = None

    def _render(self, html: Optional[str]) -> None:
        if not html or html == self.last_html:
            return
        self.last_html = html
        if self.on_update is not None:
            self.on_update(html)

    def _finish(self, outcome: PollOutcome) -> PollOutcome:
        self.state = PollState.DONE
        self._render(outcome.html)
        logger.info(
            f"Polling finished: {outcome.status}",
            extra={"job_id": outcome.job_id, "attempts": outcome.attempts},
        )
        return outcome

    def _client_failure(self, prompt: str, job_id: Optional[str], error: str, status: str, attempts: int) -> PollOutcome:
        return self._finish(PollOutcome(
            status=status,
            html=timeout_html(prompt, error),
            project_id=f"timeout-{int(time.time() * 1000)}",
            job_id=job_id,
            error=error,
            attempts=attempts,
        ))

    async def generate(self, prompt: str, **extra: Any) -> PollOutcome:
        """Submit a new document request and follow it to the end."""
        self.reset()
        generation = self._generation
        self.state = PollState.SUBMITTING

        try:
            response = await self.client.post(self.jobs_path, json={"prompt": prompt, **extra})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Job submission failed: {e}")
            return self._client_failure(prompt, None, f"Job submission failed: {e}", "error", 0)

        job_id = data.get("jobId")
        if not job_id:
            # Degraded submission: the server answered with a fallback document only.
            return self._finish(PollOutcome(
                status="failed",
                html=data.get("html") or timeout_html(prompt, data.get("error") or "No job ID returned from server"),
                project_id=data.get("projectId"),
                error=data.get("error") or "No job ID returned from server",
            ))

        self._render(data.get("html"))
        return await self._poll(job_id, prompt, generation)

    async def resume(self, job_id: str, prompt: str = "") -> PollOutcome:
        """Follow an already submitted job, e.g. when a document page is reopened."""
        self.reset()
        return await self._poll(job_id, prompt, self._generation)

    async def _poll(self, job_id: str, prompt: str, generation: int) -> PollOutcome:
        self.state = PollState.POLLING
        self.job_id = job_id
        attempts = 0

        while attempts < self.max_attempts:
            if generation != self._generation:
                return PollOutcome(status="cancelled", html="", job_id=job_id, attempts=attempts)

            try:
                response = await self.client.get(f"{self.jobs_path}/{job_id}")
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Error polling for job status: {e}", extra={"job_id": job_id})
                return self._client_failure(prompt, job_id, str(e), "error", attempts + 1)

            if generation != self._generation:
                return PollOutcome(status="cancelled", html="", job_id=job_id, attempts=attempts + 1)

            status = data.get("status")
            logger.debug(f"Job status ({attempts + 1}/{self.max_attempts}): {status}", extra={"job_id": job_id})

            if status == "completed":
                result = data.get("result") or {}
                return self._finish(PollOutcome(
                    status="completed",
                    html=data.get("html") or (result.get("html") if isinstance(result, dict) else None) or "",
                    project_id=data.get("projectId") or f"job-{job_id}",
                    job_id=job_id,
                    attempts=attempts + 1,
                ))

            if status == "failed":
                error = data.get("error") or "Unknown error"
                return self._finish(PollOutcome(
                    status="failed",
                    html=data.get("html") or timeout_html(prompt, error),
                    project_id=data.get("projectId") or f"error-{job_id}",
                    job_id=job_id,
                    error=error,
                    attempts=attempts + 1,
                ))

            self._render(data.get("html"))

            attempts += 1
            await self._sleep(self.interval)

        total_seconds = self.interval * self.max_attempts
        return self._client_failure(
            prompt,
            job_id,
            f"Job processing timed out after {total_seconds:g} seconds",
            "timeout",
            attempts,
        )
