from datetime import timedelta

import pytest

from conftest import BrokenSessionFactory
from docgen.exceptions import StorageError
from docgen.store import JobStore


@pytest.mark.asyncio
async def test_create_sets_pending_and_timestamps(store, clock):
    job = await store.create("Write a memo", html="<p>loading</p>")

    assert job.job_id
    assert job.status == "pending"
    assert job.prompt == "Write a memo"
    assert job.html == "<p>loading</p>"
    assert job.error is None
    assert job.result is None

    stored = await store.get(job.job_id)
    assert stored is not None
    assert stored.created_at.replace(tzinfo=None) == clock().replace(tzinfo=None)
    assert stored.updated_at == stored.created_at


@pytest.mark.asyncio
async def test_create_allocates_unique_ids(store):
    first = await store.create("a")
    second = await store.create("a")
    assert first.job_id != second.job_id


@pytest.mark.asyncio
async def test_get_unknown_job_returns_none(store):
    assert await store.get("does-not-exist") is None


@pytest.mark.asyncio
async def test_update_merges_fields_and_refreshes_updated_at(store, clock):
    job = await store.create("p")
    clock.advance(seconds=30)

    assert await store.update(job.job_id, status="processing", html="<p>working</p>") is True

    stored = await store.get(job.job_id)
    assert stored.status == "processing"
    assert stored.html == "<p>working</p>"
    assert stored.prompt == "p"
    assert stored.updated_at - stored.created_at == timedelta(seconds=30)


@pytest.mark.asyncio
async def test_update_ignores_immutable_fields(store):
    job = await store.create("original")

    assert await store.update(job.job_id, prompt="changed", created_at=None, job_id="other", error="e") is True

    stored = await store.get(job.job_id)
    assert stored.prompt == "original"
    assert stored.job_id == job.job_id
    assert stored.created_at is not None
    assert stored.error == "e"


@pytest.mark.asyncio
async def test_update_unknown_job_reports_failure(store):
    assert await store.update("missing", status="processing") is False


@pytest.mark.asyncio
async def test_terminal_status_is_never_left(store):
    job = await store.create("p")
    assert await store.update(job.job_id, status="completed", html="<h1>done</h1>") is True

    assert await store.update(job.job_id, status="processing") is False
    assert await store.update(job.job_id, status="failed", error="late") is False

    stored = await store.get(job.job_id)
    assert stored.status == "completed"
    assert stored.error is None


@pytest.mark.asyncio
async def test_status_cannot_return_to_pending(store):
    job = await store.create("p")
    assert await store.update(job.job_id, status="processing") is True
    assert await store.update(job.job_id, status="pending") is False
    assert (await store.get(job.job_id)).status == "processing"


@pytest.mark.asyncio
async def test_delete_older_than_removes_only_old_jobs(store, clock):
    old = await store.create("old")
    clock.advance(days=8)
    fresh = await store.create("fresh")

    deleted = await store.delete_older_than(clock() - timedelta(days=7))

    assert deleted == 1
    assert await store.get(old.job_id) is None
    assert await store.get(fresh.job_id) is not None


@pytest.mark.asyncio
async def test_unreachable_store():
    broken = JobStore(BrokenSessionFactory())

    with pytest.raises(StorageError):
        await broken.create("p")
    with pytest.raises(StorageError):
        await broken.get("job")
    with pytest.raises(StorageError):
        await broken.delete_older_than(broken.now())

    assert await broken.update("job", status="processing") is False
