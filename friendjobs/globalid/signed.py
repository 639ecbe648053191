from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from friendjobs.config import settings

from .uri import GlobalID


DEFAULT_PURPOSE = "default"

_UNSET: Any = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sign(data: str, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), data.encode("ascii"), hashlib.sha256).hexdigest()


@dataclass
class SignedGlobalID:
    """A GlobalID bound to a purpose and an optional expiry, signed with HMAC-SHA256.

    Token format: ``<urlsafe base64 JSON payload>--<hex digest>``.
    """

    global_id: GlobalID
    purpose: str = DEFAULT_PURPOSE
    expires_at: datetime | None = None

    @classmethod
    def create(
        cls,
        record: Any,
        *,
        purpose: str = DEFAULT_PURPOSE,
        expires_in: int | timedelta | None = _UNSET,
        expires_at: datetime | None = None,
        app: str | None = None,
        **params: Any,
    ) -> SignedGlobalID:
        """Sign a global id for ``record``.

        ``expires_at`` wins over ``expires_in``. Without either the id expires
        after ``settings.signed_globalid_expires_in`` seconds; pass
        ``expires_in=None`` for an id that never expires.
        """

        if expires_at is None:
            if expires_in is _UNSET:
                expires_in = settings.signed_globalid_expires_in
            if expires_in is not None:
                if not isinstance(expires_in, timedelta):
                    expires_in = timedelta(seconds=expires_in)
                expires_at = _utcnow() + expires_in

        return cls(
            global_id=GlobalID.create(record, app=app, **params),
            purpose=purpose,
            expires_at=expires_at,
        )

    @classmethod
    def parse(
        cls,
        token: Any,
        *,
        purpose: str = DEFAULT_PURPOSE,
        secret: str | None = None,
        now: datetime | None = None,
    ) -> SignedGlobalID | None:
        """Verify and decode a token. Returns None when it cannot be trusted."""

        if isinstance(token, SignedGlobalID):
            if token.purpose != purpose or token.is_expired(now=now):
                return None
            return token
        if not isinstance(token, str):
            return None

        data, sep, digest = token.rpartition("--")
        if not sep or not data or not (data.isascii() and digest.isascii()):
            return None
        if not hmac.compare_digest(_sign(data, secret or settings.globalid_secret), digest):
            return None

        try:
            payload = json.loads(base64.urlsafe_b64decode(data.encode("ascii")))
        except (binascii.Error, UnicodeError, ValueError):
            return None
        if not isinstance(payload, dict) or payload.get("purpose") != purpose:
            return None

        expires_at = None
        if payload.get("expires_at"):
            try:
                expires_at = datetime.fromisoformat(payload["expires_at"])
            except (TypeError, ValueError):
                return None

        gid = GlobalID.parse(payload.get("gid"))
        if gid is None:
            return None

        sgid = cls(global_id=gid, purpose=purpose, expires_at=expires_at)
        if sgid.is_expired(now=now):
            return None
        return sgid

    def is_expired(self, *, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or _utcnow())

    def to_string(self, *, secret: str | None = None) -> str:
        payload = {
            "gid": self.global_id.to_string(),
            "purpose": self.purpose,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }
        raw = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
        data = base64.urlsafe_b64encode(raw).decode("ascii")
        return f"{data}--{_sign(data, secret or settings.globalid_secret)}"

    def to_param(self) -> str:
        return self.to_string()

    def __str__(self) -> str:
        return self.to_string()
