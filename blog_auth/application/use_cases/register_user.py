from __future__ import annotations

import logging
import re
from uuid import uuid4

from blog_auth.application.dto.users import RegisterUserInput, UserOutput
from blog_auth.application.ports.password_hasher_port import PasswordHasherPort
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import User, normalize_email
from blog_auth.domain.exceptions import EmailAlreadyExistsError, InvalidPasswordError

from .auth_common import utcnow


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")
PASSWORD_PATTERN = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)(?=.*[@$!%*#?&])[A-Za-z\d@$!%*#?&]{8,}$")


def ensure_password_policy(password: str) -> None:
    if not PASSWORD_PATTERN.match(password):
        raise InvalidPasswordError(
            "password must have at least 8 characters including a letter, a digit and one of @$!%*#?&."
        )


def build_user_output(user: User) -> UserOutput:
    return UserOutput(
        id=user.id,
        name=user.name,
        email=user.email,
        nickname=user.nickname,
        role=user.role.value,
        created_at=user.created_at,
    )


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users_port: UsersPort,
        password_hasher: PasswordHasherPort,
    ):
        self._users_port = users_port
        self._password_hasher = password_hasher

    def execute(self, command: RegisterUserInput) -> UserOutput:
        name = command.name.strip()
        email = normalize_email(command.email)
        nickname = command.nickname.strip()

        if not name:
            raise ValueError("name is required.")
        if not nickname:
            raise ValueError("nickname is required.")
        if not EMAIL_PATTERN.match(email):
            raise ValueError("email must be a valid email address.")
        ensure_password_policy(command.password)

        if self._users_port.get_user_by_email(email=email) is not None:
            raise EmailAlreadyExistsError("Email already in use.")

        user = self._users_port.create_user(
            user_id=str(uuid4()),
            name=name,
            email=email,
            nickname=nickname,
            password_hash=self._password_hasher.hash(command.password),
            role=command.role,
            created_at=utcnow(),
        )
        logger.info("register_user: created user_id=%s role=%s", user.id, user.role.value)
        return build_user_output(user)
