import os
import tempfile
from pathlib import Path

# Settings are read at import time, so the environment must be in place
# before anything from friendjobs is imported.
_TEST_DB = Path(tempfile.mkdtemp(prefix="friendjobs-tests-")) / "friendjobs.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["QUEUE_ADAPTER"] = "test"

import pytest  # noqa: E402
import sqlalchemy as sa  # noqa: E402

from friendjobs.models import Base  # noqa: E402
from friendjobs.worker.dispatch import TestAdapter, set_queue_adapter  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(scope="session")
def sync_engine():
    """Synchronous engine on the same SQLite file the app uses (for setup and assertions)."""

    engine = sa.create_engine(f"sqlite:///{_TEST_DB}")
    yield engine
    engine.dispose()


@pytest.fixture(autouse=True)
def schema(sync_engine):
    Base.metadata.create_all(sync_engine)
    yield
    Base.metadata.drop_all(sync_engine)


@pytest.fixture(autouse=True)
def queue_adapter() -> TestAdapter:
    adapter = TestAdapter()
    set_queue_adapter(adapter)
    yield adapter
    set_queue_adapter(None)
