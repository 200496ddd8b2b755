from __future__ import annotations

from blog_auth.application.dto.users import UserOutput
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.exceptions import UserNotFoundError

from .register_user import build_user_output


class GetUserUseCase:
    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, *, user_id: str) -> UserOutput:
        user = self._users_port.get_user_by_id(user_id=user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found.")
        return build_user_output(user)
