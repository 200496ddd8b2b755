from __future__ import annotations

from typing import Protocol

from blog_auth.domain.entities.user import Principal


class CredentialVerifierPort(Protocol):
    def verify(self, *, email: str, password: str) -> Principal:
        """Return the verified principal or raise AuthenticationFailedError."""
        ...
