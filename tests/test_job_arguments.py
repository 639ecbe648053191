from datetime import datetime, timezone

import pytest

from friendjobs.database import SessionLocal
from friendjobs.jobs.arguments import (
    DeserializationError,
    SerializationError,
    deserialize,
    serialize,
)
from friendjobs.models import Friend
from tests._db import insert_friend


def test_records_are_serialized_as_global_ids():
    when = datetime(2014, 8, 28, 9, 53, 31, tzinfo=timezone.utc)

    assert serialize([Friend(id=3), "x", 1, 2.5, True, None, [Friend(id=4)], {"friend": Friend(id=5), "at": when}]) == [
        {"_aj_globalid": "gid://friendjobs/Friend/3"},
        "x",
        1,
        2.5,
        True,
        None,
        [{"_aj_globalid": "gid://friendjobs/Friend/4"}],
        {
            "friend": {"_aj_globalid": "gid://friendjobs/Friend/5"},
            "at": {"_aj_serialized": "datetime", "value": "2014-08-28T09:53:31+00:00"},
        },
    ]


@pytest.mark.parametrize(
    "argument",
    [
        object(),
        {1: "int key"},
        {"_aj_globalid": "gid://friendjobs/Friend/1"},
        {"_aj_serialized": "datetime"},
        datetime(2014, 8, 28),
        Friend(name="unsaved"),
    ],
)
def test_unsupported_arguments_raise(argument):
    with pytest.raises(SerializationError):
        serialize([argument])


@pytest.mark.anyio
async def test_deserialize_locates_records(sync_engine):
    friend_id = insert_friend(sync_engine, name="john")
    when = datetime(2014, 8, 28, 9, 53, 31, tzinfo=timezone.utc)

    async with SessionLocal() as session:
        args = await deserialize(session, serialize([Friend(id=friend_id), {"at": when, "tags": ["a"]}]))

    friend, options = args
    assert isinstance(friend, Friend)
    assert friend.name == "john"
    assert options == {"at": when, "tags": ["a"]}


@pytest.mark.anyio
async def test_deserialize_unknown_global_id(sync_engine):
    async with SessionLocal() as session:
        with pytest.raises(DeserializationError):
            await deserialize(session, [{"_aj_globalid": "gid://someotherapp/Friend/1"}])


def test_only_keys_the_serializer_emits_are_reserved():
    assert serialize([{"_aj_symbol_keys": ["a"], "_aj_ruby2_keywords": []}]) == [
        {"_aj_symbol_keys": ["a"], "_aj_ruby2_keywords": []}
    ]
