from __future__ import annotations

from datetime import datetime
from typing import Protocol

from blog_auth.domain.entities.user import Role, User


class UsersPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        nickname: str,
        password_hash: str,
        role: Role,
        created_at: datetime,
    ) -> User:
        ...

    def get_user_by_nickname(self, *, nickname: str) -> User | None:
        ...

    def list_users(self) -> list[User]:
        ...

    def update_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        nickname: str,
        updated_at: datetime,
    ) -> User | None:
        ...

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> bool:
        ...

    def update_role(self, *, user_id: str, role: Role, updated_at: datetime) -> User | None:
        ...

    def delete_user(self, *, user_id: str) -> bool:
        ...
