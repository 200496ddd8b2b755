from __future__ import annotations

from blog_auth.application.dto.users import UserOutput
from blog_auth.application.ports.users_port import UsersPort

from .register_user import build_user_output


class ListUsersUseCase:
    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self) -> list[UserOutput]:
        return [build_user_output(user) for user in self._users_port.list_users()]
