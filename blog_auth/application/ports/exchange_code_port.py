from __future__ import annotations

from datetime import datetime
from typing import Protocol

from blog_auth.domain.entities.oauth_link import ExternalIdentity


class ExchangeCodePort(Protocol):
    def issue(self, *, identity: ExternalIdentity) -> tuple[str, datetime]:
        ...

    def redeem(self, *, code: str) -> ExternalIdentity:
        """Consume the code; raises InvalidCodeError or CodeExpiredError."""
        ...
