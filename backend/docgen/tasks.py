import asyncio
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .workers import celery_app
from .config import settings
from .store import JobStore
from .services.generation_client import GenerationClient
from .services.processor import process_job
from .logger import logger


@celery_app.task(bind=True, acks_late=True)
def process_job_task(self, job_id: str, payload: Dict[str, Any]):
    """
    Celery task that runs one document job to a terminal status.

    No retries: a failed generation is recorded on the job, not re-attempted.
    """
    async def _run():
        # Each task gets its own event loop, so it gets its own engine too.
        engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
        session_factory = sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
        try:
            await process_job(
                job_id,
                payload,
                store=JobStore(session_factory),
                client=GenerationClient(),
            )
        finally:
            await engine.dispose()

    return asyncio.run(_run())


def dispatch_job(job_id: str, payload: Dict[str, Any]) -> None:
    """Enqueue a job for the worker pool without waiting for it. Broker errors propagate."""
    process_job_task.apply_async(args=(job_id, payload), queue=settings.GENERATION_QUEUE)
    logger.info(f"Job {job_id} queued for processing", extra={"job_id": job_id})
