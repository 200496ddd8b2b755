from __future__ import annotations

import logging

from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.exceptions import UserNotFoundError


logger = logging.getLogger(__name__)


class DeleteUserUseCase:
    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, *, user_id: str) -> None:
        if not self._users_port.delete_user(user_id=user_id):
            raise UserNotFoundError(f"User {user_id} not found.")
        logger.info("delete_user: deleted user_id=%s", user_id)
