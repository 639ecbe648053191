from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlsplit

from friendjobs.config import settings


SCHEME = "gid"

# Host name rules: lower-case letters, digits, dots and hyphens.
_APP_RE = re.compile(r"^[a-z0-9](?:[a-z0-9.-]*[a-z0-9])?$")


class InvalidGlobalIDError(ValueError):
    pass


def validate_app(app: str | None) -> str:
    if not app:
        raise InvalidGlobalIDError("An app is required to create a Global ID")
    if not _APP_RE.match(app):
        raise InvalidGlobalIDError(f"Invalid app name {app!r}: app names must be valid host names")
    return app


def _b64decode(value: str) -> str:
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")


@dataclass
class GlobalID:
    app: str
    model_name: str
    model_id: str
    params: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_app(self.app)
        if not self.model_name:
            raise InvalidGlobalIDError("Unable to create a Global ID without a model name")
        self.model_id = "" if self.model_id is None else str(self.model_id)
        if not self.model_id:
            raise InvalidGlobalIDError(
                f"Unable to create a Global ID for {self.model_name} without a model id"
            )

    @classmethod
    def create(cls, record: Any, *, app: str | None = None, **params: Any) -> GlobalID:
        model_id = getattr(record, "id", None)
        if model_id is None:
            raise InvalidGlobalIDError(
                f"Unable to create a Global ID for {type(record).__name__} without a model id"
            )
        return cls(
            app=app or settings.globalid_app,
            model_name=type(record).__name__,
            model_id=str(model_id),
            params={k: str(v) for k, v in params.items()},
        )

    @classmethod
    def from_uri(cls, uri: str) -> GlobalID:
        """Strict parser for ``gid://app/Model/id[?params]``."""

        try:
            parts = urlsplit(uri)
        except ValueError as e:
            raise InvalidGlobalIDError(f"Malformed URI: {uri!r}") from e
        if parts.scheme != SCHEME:
            raise InvalidGlobalIDError(f"Not a gid:// URI scheme: {uri!r}")
        if not parts.netloc:
            raise InvalidGlobalIDError(f"Missing app name: {uri!r}")

        model_name, _, raw_id = parts.path.lstrip("/").partition("/")
        if not model_name:
            raise InvalidGlobalIDError(f"Missing model name: {uri!r}")
        if not raw_id or "/" in raw_id:
            raise InvalidGlobalIDError(f"Expected a URI like gid://app/Friend/1234: {uri!r}")

        return cls(
            app=parts.netloc,
            model_name=unquote(model_name),
            model_id=unquote(raw_id),
            params=dict(parse_qsl(parts.query, keep_blank_values=True)),
        )

    @classmethod
    def parse(cls, value: Any) -> GlobalID | None:
        """Lenient parser: accepts a GlobalID, its URI or its param form.

        Returns None instead of raising for anything that is not a global id.
        """

        if isinstance(value, GlobalID):
            return value
        if not isinstance(value, str) or not value:
            return None

        try:
            return cls.from_uri(value)
        except InvalidGlobalIDError:
            pass

        try:
            decoded = _b64decode(value)
        except (binascii.Error, UnicodeError, ValueError):
            return None

        try:
            return cls.from_uri(decoded)
        except InvalidGlobalIDError:
            return None

    def to_string(self) -> str:
        uri = f"{SCHEME}://{self.app}/{quote(self.model_name, safe='')}/{quote(self.model_id, safe='')}"
        if self.params:
            uri = f"{uri}?{urlencode(self.params)}"
        return uri

    def to_param(self) -> str:
        return base64.urlsafe_b64encode(self.to_string().encode("utf-8")).decode("ascii").rstrip("=")

    def __str__(self) -> str:
        return self.to_string()
