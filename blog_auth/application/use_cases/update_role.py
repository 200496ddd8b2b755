from __future__ import annotations

import logging

from blog_auth.application.dto.users import UpdateRoleInput, UserOutput
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import Role
from blog_auth.domain.exceptions import UserNotFoundError

from .auth_common import utcnow
from .register_user import build_user_output


logger = logging.getLogger(__name__)


class UpdateRoleUseCase:
    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, command: UpdateRoleInput) -> UserOutput:
        role = Role.from_value(command.role.strip())
        if role is None:
            raise ValueError(f"role must be one of {', '.join(r.value for r in Role)}.")
        updated = self._users_port.update_role(user_id=command.user_id, role=role, updated_at=utcnow())
        if updated is None:
            raise UserNotFoundError(f"User {command.user_id} not found.")
        logger.info("update_role: updated user_id=%s role=%s", updated.id, role.value)
        return build_user_output(updated)
