import pytest

from friendjobs.crud.base import RecordNotFound
from friendjobs.database import SessionLocal
from friendjobs.globalid import GlobalID
from friendjobs.jobs import NameCapitalizerJob
from friendjobs.jobs.arguments import DeserializationError
from friendjobs.models import Friend
from tests._db import fetch_friend, insert_friend


async def _load(friend_id: int) -> Friend:
    async with SessionLocal() as session:
        return await session.get(Friend, friend_id)


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("john", "John"),
        ("JOHN SMITH", "John smith"),
        ("mary-jane", "Mary-jane"),
        ("", ""),
    ],
)
async def test_perform_now_capitalizes_name(sync_engine, name, expected):
    friend_id = insert_friend(sync_engine, name=name)

    await NameCapitalizerJob.perform_now(await _load(friend_id))

    assert fetch_friend(sync_engine, friend_id)["name"] == expected


@pytest.mark.anyio
async def test_email_is_never_modified(sync_engine):
    friend_id = insert_friend(sync_engine, name="john", email="JOHN@Example.COM")

    await NameCapitalizerJob.perform_now(await _load(friend_id))

    row = fetch_friend(sync_engine, friend_id)
    assert row["name"] == "John"
    assert row["email"] == "JOHN@Example.COM"


@pytest.mark.anyio
async def test_null_name_is_left_untouched(sync_engine):
    friend_id = insert_friend(sync_engine, name=None)

    await NameCapitalizerJob.perform_now(await _load(friend_id))

    assert fetch_friend(sync_engine, friend_id)["name"] is None


@pytest.mark.anyio
async def test_only_the_target_friend_changes(sync_engine):
    target = insert_friend(sync_engine, name="john")
    other = insert_friend(sync_engine, name="alice", email="alice@example.com")

    await NameCapitalizerJob.perform_now(await _load(target))

    assert fetch_friend(sync_engine, target)["name"] == "John"
    assert fetch_friend(sync_engine, other)["name"] == "alice"


@pytest.mark.anyio
async def test_perform_later_enqueues_global_id_not_record(sync_engine, queue_adapter):
    friend_id = insert_friend(sync_engine, name="john")

    job = await NameCapitalizerJob.perform_later(await _load(friend_id))

    assert len(queue_adapter.enqueued_jobs) == 1
    payload = queue_adapter.enqueued_jobs[0]
    assert payload["job_class"] == "NameCapitalizerJob"
    assert payload["job_id"] == job.job_id
    assert payload["queue_name"] == "default"
    assert payload["arguments"] == [{"_aj_globalid": f"gid://friendjobs/Friend/{friend_id}"}]

    # nothing happens until the queue is drained
    assert fetch_friend(sync_engine, friend_id)["name"] == "john"

    assert await queue_adapter.perform_enqueued_jobs() == 1
    assert fetch_friend(sync_engine, friend_id)["name"] == "John"
    assert queue_adapter.enqueued_jobs == []


@pytest.mark.anyio
async def test_job_sees_current_row_when_it_runs(sync_engine, queue_adapter):
    friend_id = insert_friend(sync_engine, name="john")
    await NameCapitalizerJob.perform_later(await _load(friend_id))

    with sync_engine.begin() as conn:
        conn.exec_driver_sql("UPDATE friends SET name = 'PAUL' WHERE id = ?", (friend_id,))

    await queue_adapter.perform_enqueued_jobs()

    assert fetch_friend(sync_engine, friend_id)["name"] == "Paul"


@pytest.mark.anyio
async def test_missing_record_raises_deserialization_error(sync_engine):
    gone = GlobalID(app="friendjobs", model_name="Friend", model_id="999")

    with pytest.raises(DeserializationError) as excinfo:
        await NameCapitalizerJob.perform_now(gone)

    assert isinstance(excinfo.value.__cause__, RecordNotFound)
