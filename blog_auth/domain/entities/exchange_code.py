from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .oauth_link import ExternalIdentity


@dataclass(frozen=True)
class ExchangeCodeRecord:
    identity: ExternalIdentity
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
