from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RefreshTokenRecord:
    subject: str
    token_hash: str
    expires_at: datetime
    updated_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
