import types

import pytest

from friendjobs.database import SessionLocal
from friendjobs.jobs import NameCapitalizerJob, UnknownJobError, execute
from friendjobs.jobs.base import Job
from friendjobs.models import Friend
from friendjobs.worker import tasks
from friendjobs.worker.dispatch import (
    CeleryAdapter,
    InlineAdapter,
    TestAdapter,
    build_queue_adapter,
    set_queue_adapter,
)
from tests._db import fetch_friend, insert_friend


async def _load(friend_id: int) -> Friend:
    async with SessionLocal() as session:
        return await session.get(Friend, friend_id)


def test_build_queue_adapter():
    assert isinstance(build_queue_adapter("celery"), CeleryAdapter)
    assert isinstance(build_queue_adapter("inline"), InlineAdapter)
    assert isinstance(build_queue_adapter("test"), TestAdapter)

    with pytest.raises(ValueError):
        build_queue_adapter("sidekiq")


@pytest.mark.anyio
async def test_celery_adapter_sends_payload_to_job_queue(sync_engine, monkeypatch):
    sent: dict = {}

    def _apply_async(*, args, **options):
        sent["args"] = args
        sent["options"] = options
        return types.SimpleNamespace(id="celery-task-1")

    monkeypatch.setattr(tasks, "execute_job", types.SimpleNamespace(apply_async=_apply_async))
    set_queue_adapter(CeleryAdapter())

    friend_id = insert_friend(sync_engine)
    job = await NameCapitalizerJob.perform_later(await _load(friend_id), wait=30)

    assert job.provider_job_id == "celery-task-1"
    assert sent["options"]["queue"] == "default"
    assert sent["options"]["countdown"] == pytest.approx(30)
    (payload,) = sent["args"]
    assert payload["job_class"] == "NameCapitalizerJob"
    assert payload["arguments"] == [{"_aj_globalid": f"gid://friendjobs/Friend/{friend_id}"}]
    assert payload["scheduled_at"] is not None


@pytest.mark.anyio
async def test_inline_adapter_performs_immediately(sync_engine):
    set_queue_adapter(InlineAdapter())
    friend_id = insert_friend(sync_engine, name="john")

    await NameCapitalizerJob.perform_later(await _load(friend_id))

    assert fetch_friend(sync_engine, friend_id)["name"] == "John"


@pytest.mark.anyio
async def test_inline_adapter_cannot_schedule(sync_engine):
    set_queue_adapter(InlineAdapter())
    friend_id = insert_friend(sync_engine, name="john")

    with pytest.raises(NotImplementedError):
        await NameCapitalizerJob.perform_later(await _load(friend_id), wait=10)

    assert fetch_friend(sync_engine, friend_id)["name"] == "john"


def test_job_payload_round_trip():
    job = NameCapitalizerJob(Friend(id=9))
    payload = job.serialize()

    rebuilt = Job.deserialize(payload)

    assert type(rebuilt) is NameCapitalizerJob
    assert rebuilt.job_id == job.job_id
    assert rebuilt.serialized_arguments == [{"_aj_globalid": "gid://friendjobs/Friend/9"}]


@pytest.mark.anyio
async def test_execute_unknown_job_class():
    with pytest.raises(UnknownJobError):
        await execute({"job_class": "NoSuchJob", "job_id": "x", "arguments": []})


def test_celery_task_executes_payload(sync_engine):
    friend_id = insert_friend(sync_engine, name="JOHN SMITH")
    payload = NameCapitalizerJob(Friend(id=friend_id)).serialize()

    result = tasks.execute_job.apply(args=[payload])

    assert result.successful(), result.traceback
    assert fetch_friend(sync_engine, friend_id)["name"] == "John smith"
