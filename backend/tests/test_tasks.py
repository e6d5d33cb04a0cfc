"""
Worker glue tests: jobs go through Celery (eagerly) and the real task body.

Synchronous tests: the task starts its own event loop.
"""
import asyncio

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from conftest import make_generation_client
from docgen import tasks as tasks_module
from docgen.models import Base
from docgen.store import JobStore
from docgen.workers import celery_app


async def _with_store(database_url, action):
    engine = create_async_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        session_factory = sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
        return await action(JobStore(session_factory))
    finally:
        await engine.dispose()


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'worker.db'}"
    monkeypatch.setattr(tasks_module.settings, "DATABASE_URL", url)
    return url


@pytest.fixture
def eager_celery(monkeypatch):
    monkeypatch.setattr(celery_app.conf, "task_always_eager", True)
    monkeypatch.setattr(celery_app.conf, "task_eager_propagates", True)


def _stub_generation_service(monkeypatch, handler):
    monkeypatch.setattr(tasks_module, "GenerationClient", lambda: make_generation_client(handler))


def test_dispatched_job_runs_to_completion(database_url, eager_celery, monkeypatch):
    seen = []

    def handler(request):
        seen.append(request.content)
        return httpx.Response(200, json={"html": "<h1>ok</h1>", "projectId": "p-42"})

    _stub_generation_service(monkeypatch, handler)

    async def _create(store):
        return (await store.create("Write a memo")).job_id

    job_id = asyncio.run(_with_store(database_url, _create))

    tasks_module.dispatch_job(job_id, {"prompt": "Write a memo"})

    stored = asyncio.run(_with_store(database_url, lambda store: store.get(job_id)))
    assert stored.status == "completed"
    assert stored.html == "<h1>ok</h1>"
    assert stored.project_id == "p-42"
    assert len(seen) == 1


def test_worker_records_generation_failure(database_url, eager_celery, monkeypatch):
    _stub_generation_service(monkeypatch, lambda request: httpx.Response(500))

    async def _create(store):
        return (await store.create("X")).job_id

    job_id = asyncio.run(_with_store(database_url, _create))

    tasks_module.process_job_task.delay(job_id, {"prompt": "X"})

    stored = asyncio.run(_with_store(database_url, lambda store: store.get(job_id)))
    assert stored.status == "failed"
    assert "500" in stored.error
    assert "X" in stored.html


def test_dispatch_targets_generation_queue(monkeypatch):
    calls = []

    def _apply_async(*args, **kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(tasks_module.process_job_task, "apply_async", _apply_async)

    tasks_module.dispatch_job("job-1", {"prompt": "p"})

    assert calls == [{"args": ("job-1", {"prompt": "p"}), "queue": tasks_module.settings.GENERATION_QUEUE}]


def test_dispatch_surfaces_broker_errors(monkeypatch):
    def _apply_async(*args, **kwargs):
        raise ConnectionError("broker down")

    monkeypatch.setattr(tasks_module.process_job_task, "apply_async", _apply_async)

    with pytest.raises(ConnectionError):
        tasks_module.dispatch_job("job-1", {"prompt": "p"})
