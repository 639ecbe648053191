"""Background jobs.

Importing this package registers every job class so workers can rebuild
jobs from their payloads by class name.
"""

from .base import Job, UnknownJobError, execute  # noqa: F401
from .name_capitalizer import NameCapitalizerJob  # noqa: F401
