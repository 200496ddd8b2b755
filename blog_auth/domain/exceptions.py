from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class AuthenticationFailedError(DomainError):
    """Email or password did not match a user."""


class InvalidRefreshTokenError(DomainError):
    """Refresh token is malformed, badly signed or expired."""


class StaleSessionError(DomainError):
    """Refresh token is valid but no longer the latest one issued for its subject."""


class UserNotFoundError(DomainError):
    """Token subject does not resolve to a user."""


class EmailAlreadyExistsError(DomainError):
    """Email is already registered."""


class InvalidPasswordError(DomainError):
    """Password does not satisfy the password policy."""


class NicknameAlreadyExistsError(DomainError):
    """Nickname is already taken by another user."""


class InvalidCodeError(DomainError):
    """Exchange code is unknown or was already redeemed."""


class CodeExpiredError(DomainError):
    """Exchange code outlived its lifetime."""


class AccountNotLinkedError(DomainError):
    """External identity is not linked to any user."""


class AlreadyLinkedElsewhereError(DomainError):
    """External identity already belongs to another user."""


class AlreadyLinkedSameProviderError(DomainError):
    """User already has a link for this provider."""


class LinkNotFoundError(DomainError):
    """User has no link for this provider."""
