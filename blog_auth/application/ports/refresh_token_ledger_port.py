from __future__ import annotations

from datetime import datetime
from typing import Protocol

from blog_auth.domain.entities.refresh_token import RefreshTokenRecord


class RefreshTokenLedgerPort(Protocol):
    def get(self, *, subject: str) -> RefreshTokenRecord | None:
        ...

    def upsert(self, *, subject: str, token_hash: str, expires_at: datetime, now: datetime) -> None:
        ...

    def replace_if_current(
        self,
        *,
        subject: str,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        """Swap the stored hash only if it still equals current_hash."""
        ...
