from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    USER = "ROLE_USER"
    ADMIN = "ROLE_ADMIN"

    @classmethod
    def from_value(cls, value: str) -> Role | None:
        for role in cls:
            if role.value == value or role.name == value:
                return role
        return None


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    nickname: str
    password_hash: str
    role: Role
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Principal:
    """Subject and roles carried inside a token; never persisted."""

    subject: str
    roles: tuple[str, ...]

    @classmethod
    def for_user(cls, user: User) -> Principal:
        return cls(subject=user.id, roles=(user.role.value,))


def normalize_email(email: str) -> str:
    return email.strip().lower()
