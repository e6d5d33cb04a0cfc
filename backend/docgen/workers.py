from celery import Celery
from .config import settings

def _route_task(name, args, kwargs, options, task=None):
    """
    Route generation tasks to their dedicated queue.

    Applies to any sender that does not name a queue itself.
    """
    if name == "docgen.tasks.process_job_task":
        return {"queue": settings.GENERATION_QUEUE}

    return None

celery_app = Celery(
    "docgen",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["docgen.tasks"]
)

celery_app.conf.update(
    task_track_started=True,
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.GENERATION_WORKER_CONCURRENCY,
    task_acks_late=True,
    broker_transport_options={"visibility_timeout": 3600},
    task_routes=(_route_task,),
)
