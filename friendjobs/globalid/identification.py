from __future__ import annotations

from typing import Any

from .signed import SignedGlobalID
from .uri import GlobalID


class GlobalIdentification:
    """Mixin for models that can be referenced by a global id."""

    def to_global_id(self, **params: Any) -> GlobalID:
        return GlobalID.create(self, **params)

    to_gid = to_global_id

    def to_gid_param(self, **params: Any) -> str:
        return self.to_global_id(**params).to_param()

    def to_signed_global_id(self, **options: Any) -> SignedGlobalID:
        return SignedGlobalID.create(self, **options)

    to_sgid = to_signed_global_id

    def to_sgid_param(self, **options: Any) -> str:
        return self.to_signed_global_id(**options).to_param()
