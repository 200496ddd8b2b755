from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from blog_auth.domain.entities.user import Role


@dataclass(frozen=True)
class RegisterUserInput:
    name: str
    email: str
    nickname: str
    password: str
    role: Role = Role.USER


@dataclass(frozen=True)
class UserOutput:
    id: str
    name: str
    email: str
    nickname: str
    role: str
    created_at: datetime


@dataclass(frozen=True)
class UpdateUserInput:
    user_id: str
    name: str | None = None
    email: str | None = None
    nickname: str | None = None


@dataclass(frozen=True)
class UpdatePasswordInput:
    user_id: str
    new_password: str


@dataclass(frozen=True)
class UpdateRoleInput:
    user_id: str
    role: str
