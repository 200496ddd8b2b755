from __future__ import annotations

import logging

from blog_auth.application.dto.users import UpdatePasswordInput
from blog_auth.application.ports.password_hasher_port import PasswordHasherPort
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.exceptions import UserNotFoundError

from .auth_common import utcnow
from .register_user import ensure_password_policy


logger = logging.getLogger(__name__)


class UpdatePasswordUseCase:
    def __init__(
        self,
        *,
        users_port: UsersPort,
        password_hasher: PasswordHasherPort,
    ):
        self._users_port = users_port
        self._password_hasher = password_hasher

    def execute(self, command: UpdatePasswordInput) -> None:
        ensure_password_policy(command.new_password)
        updated = self._users_port.update_password_hash(
            user_id=command.user_id,
            password_hash=self._password_hasher.hash(command.new_password),
            updated_at=utcnow(),
        )
        if not updated:
            raise UserNotFoundError(f"User {command.user_id} not found.")
        logger.info("update_password: updated user_id=%s", command.user_id)
