from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from docgen.main import app
from docgen.models import Base
from docgen.routes import jobs as jobs_module
from docgen.services.generation_client import GenerationClient
from docgen.store import JobStore, get_job_store


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class BrokenSessionFactory:
    """Session factory for a database that cannot be reached."""

    def __call__(self):
        raise OSError("connection refused")


def make_generation_client(handler) -> GenerationClient:
    """GenerationClient whose HTTP traffic is answered by `handler(request)`."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GenerationClient(url="http://generator.test/generate", timeout=5.0, http_client=http_client)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def store(tmp_path, clock):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'jobs.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    yield JobStore(session_factory, clock=clock)
    await engine.dispose()


@pytest.fixture
def dispatched(monkeypatch):
    """Records jobs handed to the worker pool instead of reaching a broker."""
    calls = []

    def _dispatch_job(job_id, payload):
        calls.append((job_id, payload))

    monkeypatch.setattr(jobs_module, "dispatch_job", _dispatch_job)
    return calls


@pytest_asyncio.fixture
async def client(store, dispatched):
    app.dependency_overrides[get_job_store] = lambda: store
    try:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
