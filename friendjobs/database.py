from __future__ import annotations

from collections.abc import AsyncGenerator
import os
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from friendjobs.config import settings


_engine_kwargs: dict = {"pool_pre_ping": True}

# Pooled connections are bound to the event loop that opened them. The
# worker runs every job in a fresh loop (asyncio.run) and pytest may do the
# same, so pooling is disabled under pytest and the worker disposes the
# engine after each job.
if os.getenv("PYTEST_CURRENT_TEST") or ("pytest" in sys.modules):
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.database_url, **_engine_kwargs)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
