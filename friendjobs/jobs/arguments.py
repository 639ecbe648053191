"""JSON-safe encoding of job arguments.

Records travel as global id URIs and are located again on the worker::

    serialize([friend, "hello"])
    # -> [{"_aj_globalid": "gid://friendjobs/Friend/1"}, "hello"]
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from friendjobs.globalid import GlobalID, GlobalIdentification
from friendjobs.globalid.locator import locate


GLOBALID_KEY = "_aj_globalid"
SERIALIZED_KEY = "_aj_serialized"
RESERVED_KEYS = frozenset({GLOBALID_KEY, SERIALIZED_KEY})


class SerializationError(TypeError):
    pass


class DeserializationError(RuntimeError):
    """A job argument could not be rebuilt, usually because its record is gone."""


def serialize(arguments: Sequence[Any]) -> list[Any]:
    return [serialize_argument(arg) for arg in arguments]


def serialize_argument(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, GlobalIdentification):
        try:
            return {GLOBALID_KEY: value.to_global_id().to_string()}
        except ValueError as e:
            raise SerializationError(f"Unable to serialize {type(value).__name__} without an id") from e
    if isinstance(value, GlobalID):
        return {GLOBALID_KEY: value.to_string()}
    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise SerializationError("Naive datetimes are ambiguous; pass a timezone-aware datetime")
        return {SERIALIZED_KEY: "datetime", "value": value.isoformat()}
    if isinstance(value, (list, tuple)):
        return [serialize_argument(v) for v in value]
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, v in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"Only string keys are allowed in job arguments, got {key!r}")
            if key in RESERVED_KEYS:
                raise SerializationError(f"Can't serialize a dict with reserved key {key!r}")
            out[key] = serialize_argument(v)
        return out

    raise SerializationError(f"Unsupported argument type: {type(value).__name__}")


async def deserialize(session: AsyncSession, arguments: Sequence[Any]) -> list[Any]:
    try:
        return [await _deserialize_argument(session, arg) for arg in arguments]
    except DeserializationError:
        raise
    except Exception as e:
        raise DeserializationError(f"Error while trying to deserialize arguments: {e}") from e


async def _deserialize_argument(session: AsyncSession, value: Any) -> Any:
    if isinstance(value, list):
        return [await _deserialize_argument(session, v) for v in value]
    if not isinstance(value, dict):
        return value

    if GLOBALID_KEY in value and len(value) == 1:
        record = await locate(session, value[GLOBALID_KEY])
        if record is None:
            raise DeserializationError(f"Unable to locate {value[GLOBALID_KEY]}")
        return record

    if value.get(SERIALIZED_KEY) == "datetime":
        return datetime.fromisoformat(value["value"])

    return {k: await _deserialize_argument(session, v) for k, v in value.items()}
