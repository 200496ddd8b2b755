from __future__ import annotations

from typing import Any, Mapping

from blog_auth.domain.entities.oauth_link import OAuthLink
from blog_auth.domain.entities.refresh_token import RefreshTokenRecord
from blog_auth.domain.entities.user import Role, User


def _as_str(value: Any) -> str:
    return str(value)


def _as_role(value: Any) -> Role:
    role = Role.from_value(str(value))
    if role is None:
        raise ValueError(f"Unknown role in users table: {value!r}")
    return role


def map_row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=_as_str(row["id"]),
        name=row["name"],
        email=row["email"],
        nickname=row["nickname"],
        password_hash=row["password_hash"],
        role=_as_role(row["role"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_oauth_link(row: Mapping[str, Any]) -> OAuthLink:
    return OAuthLink(
        id=_as_str(row["id"]),
        user_id=_as_str(row["user_id"]),
        provider=row["provider"],
        provider_id=row["provider_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def map_row_to_refresh_token_record(row: Mapping[str, Any]) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        subject=_as_str(row["subject"]),
        token_hash=row["token_hash"],
        expires_at=row["expires_at"],
        updated_at=row["updated_at"],
    )
