from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class CreateUserRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=100)
    nickname: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=8, max_length=256)


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    nickname: str
    role: str
    created_at: datetime


class UpdateUserRequest(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=50)
    email: str | None = Field(default=None, min_length=3, max_length=100)
    nickname: str | None = Field(default=None, min_length=2, max_length=50)


class UpdatePasswordRequest(CamelModel):
    new_password: str = Field(..., min_length=8, max_length=256)


class UpdateRoleRequest(CamelModel):
    role: str = Field(..., min_length=1, max_length=20)


class NicknameResponse(CamelModel):
    nickname: str
