from __future__ import annotations

import logging

from blog_auth.application.ports.credential_verifier_port import CredentialVerifierPort
from blog_auth.application.ports.password_hasher_port import PasswordHasherPort
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import Principal, normalize_email
from blog_auth.domain.exceptions import AuthenticationFailedError


logger = logging.getLogger(__name__)


class PasswordCredentialVerifier(CredentialVerifierPort):
    """Checks email and password against the users table."""

    def __init__(self, *, users_port: UsersPort, password_hasher: PasswordHasherPort):
        self._users_port = users_port
        self._password_hasher = password_hasher

    def verify(self, *, email: str, password: str) -> Principal:
        normalized = normalize_email(email)
        user = self._users_port.get_user_by_email(email=normalized)
        if user is None:
            logger.warning("credential_verifier: unknown_email email=%s", normalized)
            raise AuthenticationFailedError("Invalid email or password.")

        if not self._password_hasher.verify(password, user.password_hash):
            logger.warning("credential_verifier: bad_password user_id=%s", user.id)
            raise AuthenticationFailedError("Invalid email or password.")

        return Principal.for_user(user)
