"""Global identifiers for database records.

A global id names a single record across process boundaries as a URI::

    gid://friendjobs/Friend/42

Jobs receive these instead of the record itself and locate the record again
when they run. Signed ids add a purpose and an expiry and are safe to hand
to untrusted clients.
"""

from .identification import GlobalIdentification
from .signed import SignedGlobalID
from .uri import GlobalID, InvalidGlobalIDError

__all__ = [
    "GlobalID",
    "GlobalIdentification",
    "InvalidGlobalIDError",
    "SignedGlobalID",
]
