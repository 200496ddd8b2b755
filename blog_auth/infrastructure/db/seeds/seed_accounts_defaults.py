from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from blog_auth.application.dto.users import RegisterUserInput
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.application.use_cases.register_user import RegisterUserUseCase
from blog_auth.domain.entities.user import Role
from blog_auth.domain.exceptions import DomainError
from blog_auth.shared.config import SeedAccount, Settings


logger = logging.getLogger(__name__)


def _seed_account(
    *,
    account: SeedAccount,
    role: Role,
    users_port: UsersPort,
    register_user: RegisterUserUseCase,
) -> bool:
    if not account.email or not account.password:
        logger.info("seed_accounts: skipped role=%s reason=not_configured", role.value)
        return False
    if users_port.get_user_by_email(email=account.email.strip().lower()) is not None:
        return False

    register_user.execute(
        RegisterUserInput(
            name=account.nickname,
            email=account.email,
            nickname=account.nickname,
            password=account.password,
            role=role,
        )
    )
    logger.info("seed_accounts: created role=%s email=%s", role.value, account.email)
    return True


def seed_accounts_defaults(
    *,
    settings: Settings,
    users_port: UsersPort,
    register_user: RegisterUserUseCase,
) -> int:
    """Create the configured admin and test accounts when they are missing.

    Returns how many accounts were created. Errors are logged and do not stop
    the application from starting.
    """
    created = 0
    for account, role in ((settings.admin_account, Role.ADMIN), (settings.test_account, Role.USER)):
        try:
            if _seed_account(account=account, role=role, users_port=users_port, register_user=register_user):
                created += 1
        except (DomainError, ValueError, SQLAlchemyError):
            logger.exception("seed_accounts: failed role=%s email=%s", role.value, account.email)
    return created
