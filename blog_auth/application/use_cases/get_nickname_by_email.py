from __future__ import annotations

from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import normalize_email
from blog_auth.domain.exceptions import UserNotFoundError


class GetNicknameByEmailUseCase:
    """Public lookup used by the blog front end to greet a returning user."""

    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, *, email: str) -> str:
        user = self._users_port.get_user_by_email(email=normalize_email(email))
        if user is None:
            raise UserNotFoundError("No user is registered with this email.")
        return user.nickname
