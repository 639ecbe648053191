from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


TModel = TypeVar("TModel")
TCreate = TypeVar("TCreate")
TUpdate = TypeVar("TUpdate")


class RecordNotFound(LookupError):
    def __init__(self, model_name: str, id: Any) -> None:
        super().__init__(f"Couldn't find {model_name} with id={id}")
        self.model_name = model_name
        self.id = id


def _to_dict(obj: Any, *, exclude_unset: bool = True) -> dict[str, Any]:
    """Best-effort conversion for Pydantic models / plain dict payloads."""

    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if isinstance(obj, BaseModel):
        return obj.model_dump(exclude_unset=exclude_unset)

    return dict(vars(obj))


def _touch(db_obj: Any) -> None:
    if hasattr(db_obj, "updated_at"):
        db_obj.updated_at = datetime.now(timezone.utc)


class BaseCRUD(Generic[TModel, TCreate, TUpdate]):
    """Generic CRUD helper for SQLAlchemy (async).

    Methods do NOT commit. Callers control transaction boundaries.
    """

    def __init__(self, model: type[TModel]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, *, obj_in: TCreate) -> TModel:
        db_obj = self.model(**_to_dict(obj_in))  # type: ignore[call-arg]
        session.add(db_obj)
        await session.flush()
        # server-side timestamps are only known after a round trip
        await session.refresh(db_obj)
        return db_obj

    async def get(self, session: AsyncSession, *, id: Any) -> TModel | None:
        return await session.get(self.model, id)

    async def find(self, session: AsyncSession, *, id: Any) -> TModel:
        obj = await self.get(session, id=id)
        if obj is None:
            raise RecordNotFound(self.model.__name__, id)
        return obj

    async def get_multi(
        self,
        session: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 100,
    ) -> list[TModel]:
        pk = getattr(self.model, "id")
        q = select(self.model).order_by(pk.asc()).offset(max(skip, 0)).limit(max(1, limit))
        r = await session.execute(q)
        return list(r.scalars().all())

    async def update(
        self,
        session: AsyncSession,
        *,
        db_obj: TModel,
        obj_in: TUpdate,
    ) -> TModel:
        data = _to_dict(obj_in)

        for field, value in data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        _touch(db_obj)
        session.add(db_obj)  # no-op for persistent objects, safe for detached
        await session.flush()
        return db_obj

    async def update_attribute(
        self,
        session: AsyncSession,
        *,
        db_obj: TModel,
        name: str,
        value: Any,
    ) -> TModel:
        """Set a single attribute and persist it without validation."""

        if not hasattr(db_obj, name):
            raise AttributeError(f"{type(db_obj).__name__} has no attribute {name!r}")

        setattr(db_obj, name, value)
        _touch(db_obj)
        session.add(db_obj)
        await session.flush()
        return db_obj
