from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from friendjobs.config import settings
from friendjobs.crud.base import RecordNotFound

from .signed import DEFAULT_PURPOSE, SignedGlobalID
from .uri import GlobalID


logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=type)

_models: dict[str, type] = {}


def register_model(model: TModel) -> TModel:
    """Make ``model`` locatable by its class name (class decorator)."""

    _models[model.__name__] = model
    return model


def model_for(gid: GlobalID) -> type | None:
    if gid.app != settings.globalid_app:
        return None
    return _models.get(gid.model_name)


def _allowed(model: type, only: type | Iterable[type] | None) -> bool:
    if only is None:
        return True
    if isinstance(only, type):
        only = (only,)
    return issubclass(model, tuple(only))


def _primary_key(model: type):
    return model.__mapper__.primary_key[0]  # type: ignore[attr-defined]


def _coerce_id(model: type, raw_id: str) -> Any:
    column = _primary_key(model)
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw_id
    try:
        return python_type(raw_id)
    except (TypeError, ValueError) as e:
        raise RecordNotFound(model.__name__, raw_id) from e


def _resolve(gid: Any, only: type | Iterable[type] | None) -> tuple[GlobalID, type] | None:
    parsed = GlobalID.parse(gid)
    if parsed is None:
        return None

    model = model_for(parsed)
    if model is None or not _allowed(model, only):
        logger.debug("global id not locatable here gid=%s", parsed)
        return None
    return parsed, model


async def locate(
    session: AsyncSession,
    gid: GlobalID | str,
    *,
    only: type | Iterable[type] | None = None,
) -> Any | None:
    """Load the record a global id points at.

    Returns None when ``gid`` is not a global id for a model this app knows
    (or one outside ``only``). Raises RecordNotFound when the row is gone.
    """

    resolved = _resolve(gid, only)
    if resolved is None:
        return None
    parsed, model = resolved

    record = await session.get(model, _coerce_id(model, parsed.model_id))
    if record is None:
        raise RecordNotFound(model.__name__, parsed.model_id)
    return record


async def locate_many(
    session: AsyncSession,
    gids: Iterable[GlobalID | str],
    *,
    only: type | Iterable[type] | None = None,
    ignore_missing: bool = False,
) -> list[Any]:
    """Locate several records with one query per model, keeping input order."""

    resolved = [r for r in (_resolve(gid, only) for gid in gids) if r is not None]

    ids_by_model: dict[type, set[Any]] = {}
    keys: list[tuple[type, Any, str]] = []
    for parsed, model in resolved:
        try:
            pk = _coerce_id(model, parsed.model_id)
        except RecordNotFound:
            if ignore_missing:
                continue
            raise
        ids_by_model.setdefault(model, set()).add(pk)
        keys.append((model, pk, parsed.model_id))

    found: dict[tuple[type, Any], Any] = {}
    for model, ids in ids_by_model.items():
        pk_col = _primary_key(model)
        res = await session.execute(select(model).where(pk_col.in_(ids)))
        for record in res.scalars().all():
            found[(model, getattr(record, pk_col.key))] = record

    records: list[Any] = []
    for model, pk, raw_id in keys:
        record = found.get((model, pk))
        if record is None:
            if ignore_missing:
                continue
            raise RecordNotFound(model.__name__, raw_id)
        records.append(record)
    return records


async def locate_signed(
    session: AsyncSession,
    sgid: SignedGlobalID | str,
    *,
    purpose: str = DEFAULT_PURPOSE,
    only: type | Iterable[type] | None = None,
) -> Any | None:
    """Verify a signed global id and locate its record. None if it does not verify."""

    signed = SignedGlobalID.parse(sgid, purpose=purpose)
    if signed is None:
        return None
    return await locate(session, signed.global_id, only=only)
