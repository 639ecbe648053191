# Import models here so Alembic and the global id locator can discover them
from .base import Base  # noqa: F401
from .friend import Friend  # noqa: F401
