from __future__ import annotations

import secrets
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from blog_auth.application.ports.token_port import ACCESS_TOKEN_TYPE
from blog_auth.application.use_cases.auth_common import TokenLifetimes
from blog_auth.application.use_cases.delete_user import DeleteUserUseCase
from blog_auth.application.use_cases.exchange_oauth_code import ExchangeOAuthCodeUseCase
from blog_auth.application.use_cases.get_me import GetMeUseCase
from blog_auth.application.use_cases.get_nickname_by_email import GetNicknameByEmailUseCase
from blog_auth.application.use_cases.get_user import GetUserUseCase
from blog_auth.application.use_cases.link_oauth_account import LinkOAuthAccountUseCase
from blog_auth.application.use_cases.list_linked_accounts import ListLinkedAccountsUseCase
from blog_auth.application.use_cases.list_users import ListUsersUseCase
from blog_auth.application.use_cases.login_local import LoginLocalUseCase
from blog_auth.application.use_cases.logout_session import LogoutSessionUseCase
from blog_auth.application.use_cases.oauth_login import OAuthLoginUseCase
from blog_auth.application.use_cases.refresh_session import RefreshSessionUseCase
from blog_auth.application.use_cases.register_user import RegisterUserUseCase
from blog_auth.application.use_cases.unlink_oauth_account import UnlinkOAuthAccountUseCase
from blog_auth.application.use_cases.update_password import UpdatePasswordUseCase
from blog_auth.application.use_cases.update_role import UpdateRoleUseCase
from blog_auth.application.use_cases.update_user import UpdateUserUseCase
from blog_auth.domain.entities.user import Role, User
from blog_auth.infrastructure.db.engine import get_engine
from blog_auth.infrastructure.db.repositories.accounts_repository import SqlAccountsRepository
from blog_auth.infrastructure.db.repositories.oauth_link_repository import SqlOAuthLinkRepository
from blog_auth.infrastructure.db.repositories.refresh_token_repository import (
    SqlRefreshTokenRepository,
)
from blog_auth.infrastructure.oauth.exchange_code_broker import InMemoryExchangeCodeBroker
from blog_auth.infrastructure.security.credential_verifier import PasswordCredentialVerifier
from blog_auth.infrastructure.security.password_hasher import PasswordHasher
from blog_auth.infrastructure.security.token_service import InvalidSigningKeyError, JwtTokenService
from blog_auth.shared.config import get_settings


BEARER_PREFIX = "Bearer "


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def build_token_service() -> JwtTokenService:
    settings = get_settings()
    return JwtTokenService.from_base64_secret(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


@lru_cache(maxsize=1)
def _get_token_service() -> JwtTokenService:
    try:
        return build_token_service()
    except InvalidSigningKeyError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def _get_exchange_code_broker() -> InMemoryExchangeCodeBroker:
    # One table per process; every request must see the same codes.
    settings = get_settings()
    return InMemoryExchangeCodeBroker(ttl=timedelta(seconds=settings.oauth_code_ttl_seconds))


def _get_token_lifetimes() -> TokenLifetimes:
    settings = get_settings()
    return TokenLifetimes(
        access_ttl=timedelta(seconds=settings.jwt_access_token_validity_seconds),
        refresh_ttl=timedelta(seconds=settings.jwt_refresh_token_validity_seconds),
    )


def _get_accounts_repository() -> SqlAccountsRepository:
    return SqlAccountsRepository(_get_db_engine())


def _get_oauth_link_repository() -> SqlOAuthLinkRepository:
    return SqlOAuthLinkRepository(_get_db_engine())


def _get_refresh_token_repository() -> SqlRefreshTokenRepository:
    return SqlRefreshTokenRepository(_get_db_engine())


def get_refresh_cookie_secure() -> bool:
    return get_settings().refresh_cookie_secure


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        credential_verifier=PasswordCredentialVerifier(
            users_port=_get_accounts_repository(),
            password_hasher=_get_password_hasher(),
        ),
        token_port=_get_token_service(),
        refresh_ledger=_get_refresh_token_repository(),
        lifetimes=_get_token_lifetimes(),
    )


def get_refresh_session_use_case() -> RefreshSessionUseCase:
    return RefreshSessionUseCase(
        token_port=_get_token_service(),
        refresh_ledger=_get_refresh_token_repository(),
        lifetimes=_get_token_lifetimes(),
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(token_port=_get_token_service())


def get_oauth_login_use_case() -> OAuthLoginUseCase:
    return OAuthLoginUseCase(exchange_code_port=_get_exchange_code_broker())


def get_exchange_oauth_code_use_case() -> ExchangeOAuthCodeUseCase:
    return ExchangeOAuthCodeUseCase(
        exchange_code_port=_get_exchange_code_broker(),
        oauth_link_port=_get_oauth_link_repository(),
        users_port=_get_accounts_repository(),
        token_port=_get_token_service(),
        refresh_ledger=_get_refresh_token_repository(),
        lifetimes=_get_token_lifetimes(),
    )


def get_link_oauth_account_use_case() -> LinkOAuthAccountUseCase:
    return LinkOAuthAccountUseCase(oauth_link_port=_get_oauth_link_repository())


def get_unlink_oauth_account_use_case() -> UnlinkOAuthAccountUseCase:
    return UnlinkOAuthAccountUseCase(oauth_link_port=_get_oauth_link_repository())


def get_list_linked_accounts_use_case() -> ListLinkedAccountsUseCase:
    return ListLinkedAccountsUseCase(oauth_link_port=_get_oauth_link_repository())


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        users_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_get_me_use_case() -> GetMeUseCase:
    return GetMeUseCase()


def get_list_users_use_case() -> ListUsersUseCase:
    return ListUsersUseCase(users_port=_get_accounts_repository())


def get_get_user_use_case() -> GetUserUseCase:
    return GetUserUseCase(users_port=_get_accounts_repository())


def get_get_nickname_by_email_use_case() -> GetNicknameByEmailUseCase:
    return GetNicknameByEmailUseCase(users_port=_get_accounts_repository())


def get_update_user_use_case() -> UpdateUserUseCase:
    return UpdateUserUseCase(users_port=_get_accounts_repository())


def get_update_password_use_case() -> UpdatePasswordUseCase:
    return UpdatePasswordUseCase(
        users_port=_get_accounts_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_update_role_use_case() -> UpdateRoleUseCase:
    return UpdateRoleUseCase(users_port=_get_accounts_repository())


def get_delete_user_use_case() -> DeleteUserUseCase:
    return DeleteUserUseCase(users_port=_get_accounts_repository())


def get_current_user(
    authorization: str | None = Header(default=None),
) -> User:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Invalid authorization header.")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing access token.")

    token_service = _get_token_service()
    if not token_service.validate(token=token, expected_type=ACCESS_TOKEN_TYPE):
        raise HTTPException(status_code=401, detail="Invalid access token.")
    principal = token_service.parse(token=token)

    user = _get_accounts_repository().get_user_by_id(user_id=principal.subject)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found.")
    return user


def require_api_key(
    x_api_key: str | None = Header(default=None),
) -> None:
    settings = get_settings()
    if not settings.internal_api_key:
        raise HTTPException(status_code=500, detail="INTERNAL_API_KEY is required.")
    if not x_api_key or not secrets.compare_digest(x_api_key, settings.internal_api_key):
        raise HTTPException(status_code=401, detail="Invalid API key.")


def is_admin(user: User) -> bool:
    return user.role is Role.ADMIN


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Admin role required.")
    return current_user


def ensure_self_or_admin(current_user: User, user_id: str) -> None:
    if current_user.id != user_id and not is_admin(current_user):
        raise HTTPException(status_code=403, detail="Not allowed to access this user.")
