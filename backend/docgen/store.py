from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from .db import AsyncSessionLocal
from .exceptions import StorageError
from .jobs.status import JobStatus, allowed_predecessors
from .logger import logger
from .models import DocumentJob

Clock = Callable[[], datetime]

UPDATABLE_FIELDS = frozenset({"status", "html", "project_id", "error", "result"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStore:
    """
    Durable access to DocumentJob records.

    Absence is not an error: `get` returns None for unknown ids. `update` reports
    failure through its return value so the job processor can log and move on;
    the other operations raise StorageError when the database is unreachable.
    """

    def __init__(self, session_factory=AsyncSessionLocal, clock: Clock = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    async def create(self, prompt: str, html: Optional[str] = None) -> DocumentJob:
        now = self._clock()
        job = DocumentJob(
            job_id=str(uuid.uuid4()),
            status=JobStatus.PENDING.value,
            prompt=prompt,
            html=html,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as db:
                db.add(job)
                await db.commit()
                await db.refresh(job)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to create job: {e}")
            raise StorageError(f"Failed to create job record: {e}")

        logger.info(f"Job created: {job.job_id}", extra={"job_id": job.job_id})
        return job

    async def get(self, job_id: str) -> Optional[DocumentJob]:
        try:
            async with self._session_factory() as db:
                res = await db.execute(select(DocumentJob).filter(DocumentJob.job_id == job_id))
                return res.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to read job {job_id}: {e}", extra={"job_id": job_id})
            raise StorageError(f"Failed to read job record: {e}")

    async def update(self, job_id: str, /, **fields: Any) -> bool:
        """
        Merge `fields` into the stored job and refresh updated_at.

        A status change is applied only if the stored status is one of its
        allowed predecessors; the check runs inside the UPDATE so a terminal
        status can never be overwritten, whoever writes concurrently.
        """
        values: Dict[str, Any] = {}
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                logger.warning(f"Ignoring non-updatable job field: {key}", extra={"job_id": job_id})
                continue
            values[key] = value.value if isinstance(value, JobStatus) else value
        values["updated_at"] = self._clock()

        stmt = update(DocumentJob).where(DocumentJob.job_id == job_id)
        if "status" in values:
            stmt = stmt.where(DocumentJob.status.in_(sorted(allowed_predecessors(values["status"]))))
        stmt = stmt.values(**values)

        try:
            async with self._session_factory() as db:
                res = await db.execute(stmt)
                await db.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to update job {job_id}: {e}", extra={"job_id": job_id})
            return False

        if res.rowcount == 0:
            logger.warning(
                f"Job {job_id} not updated",
                extra={"job_id": job_id, "status": values.get("status")},
            )
            return False
        return True

    async def delete_older_than(self, cutoff: datetime) -> int:
        try:
            async with self._session_factory() as db:
                res = await db.execute(delete(DocumentJob).where(DocumentJob.created_at < cutoff))
                await db.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to delete jobs older than {cutoff.isoformat()}: {e}")
            raise StorageError(f"Failed to delete old jobs: {e}")

        deleted = int(res.rowcount or 0)
        logger.info(f"Deleted {deleted} jobs older than {cutoff.isoformat()}", extra={"deleted": deleted})
        return deleted


_default_store: Optional[JobStore] = None


def get_job_store() -> JobStore:
    global _default_store
    if _default_store is None:
        _default_store = JobStore()
    return _default_store
