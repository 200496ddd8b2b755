from __future__ import annotations

import logging

from blog_auth.application.dto.users import UpdateUserInput, UserOutput
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import normalize_email
from blog_auth.domain.exceptions import (
    EmailAlreadyExistsError,
    NicknameAlreadyExistsError,
    UserNotFoundError,
)

from .auth_common import utcnow
from .register_user import EMAIL_PATTERN, build_user_output


logger = logging.getLogger(__name__)


def _clean(value: str | None, field: str) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError(f"{field} must not be blank.")
    return value


class UpdateUserUseCase:
    """Partially updates name, email and nickname.

    Fields left as None keep their stored value. Email and nickname stay
    unique across users; the database constraints catch a concurrent writer
    that slips past the lookups below.
    """

    def __init__(self, *, users_port: UsersPort):
        self._users_port = users_port

    def execute(self, command: UpdateUserInput) -> UserOutput:
        user = self._users_port.get_user_by_id(user_id=command.user_id)
        if user is None:
            raise UserNotFoundError(f"User {command.user_id} not found.")

        name = _clean(command.name, "name")
        nickname = _clean(command.nickname, "nickname")
        email = _clean(command.email, "email")
        if email is not None:
            email = normalize_email(email)
            if not EMAIL_PATTERN.match(email):
                raise ValueError("email must be a valid email address.")

        if email is not None and email != user.email:
            owner = self._users_port.get_user_by_email(email=email)
            if owner is not None and owner.id != user.id:
                raise EmailAlreadyExistsError("Email already in use.")
        if nickname is not None and nickname != user.nickname:
            owner = self._users_port.get_user_by_nickname(nickname=nickname)
            if owner is not None and owner.id != user.id:
                raise NicknameAlreadyExistsError("Nickname already in use.")

        updated = self._users_port.update_user(
            user_id=user.id,
            name=name if name is not None else user.name,
            email=email if email is not None else user.email,
            nickname=nickname if nickname is not None else user.nickname,
            updated_at=utcnow(),
        )
        if updated is None:
            raise UserNotFoundError(f"User {command.user_id} not found.")
        logger.info("update_user: updated user_id=%s", updated.id)
        return build_user_output(updated)
