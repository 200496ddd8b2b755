from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from blog_auth.application.dto.auth import IssuedToken
from blog_auth.domain.entities.user import Principal


ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenPort(Protocol):
    def issue(
        self,
        *,
        principal: Principal,
        ttl: timedelta,
        token_type: str,
        now: datetime,
    ) -> IssuedToken:
        ...

    def validate(self, *, token: str, expected_type: str | None = None) -> bool:
        ...

    def parse(self, *, token: str) -> Principal:
        ...

    def hash_token(self, *, token: str) -> str:
        ...
