from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response

from blog_auth.api.deps import (
    get_login_local_use_case,
    get_logout_session_use_case,
    get_refresh_cookie_secure,
    get_refresh_session_use_case,
)
from blog_auth.api.schemas.auth import LoginRequest, TokenResponse
from blog_auth.api.schemas.common import ApiResponse
from blog_auth.application.dto.auth import AuthTokensOutput, LoginLocalInput, RefreshSessionInput
from blog_auth.application.use_cases.login_local import LoginLocalUseCase
from blog_auth.application.use_cases.logout_session import LogoutSessionUseCase
from blog_auth.application.use_cases.refresh_session import RefreshSessionUseCase
from blog_auth.domain.exceptions import (
    AuthenticationFailedError,
    InvalidRefreshTokenError,
    StaleSessionError,
)


router = APIRouter()

REFRESH_COOKIE_NAME = "refreshToken"
REFRESH_COOKIE_PATH = "/"


def _cookie_max_age_seconds(refresh_expires_at: datetime) -> int:
    now = datetime.now(timezone.utc)
    return max(int((refresh_expires_at - now).total_seconds()), 0)


def _set_refresh_cookie(response: Response, refresh_token: str, max_age_seconds: int, secure: bool) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=secure,
        max_age=max_age_seconds,
        path=REFRESH_COOKIE_PATH,
    )


def write_session(response: Response, output: AuthTokensOutput, *, secure: bool) -> ApiResponse[TokenResponse]:
    """Put the access token in the Authorization header and the refresh token in the cookie."""
    response.headers["Authorization"] = f"Bearer {output.access_token}"
    _set_refresh_cookie(
        response,
        output.refresh_token,
        max_age_seconds=_cookie_max_age_seconds(output.refresh_expires_at),
        secure=secure,
    )
    return ApiResponse[TokenResponse].ok(
        TokenResponse(
            access_expires_at=output.access_expires_at,
            refresh_expires_at=output.refresh_expires_at,
        )
    )


@router.post("/api/v1/auth/login", response_model=ApiResponse[TokenResponse])
def login_local(
    req: LoginRequest,
    response: Response,
    secure_cookie: bool = Depends(get_refresh_cookie_secure),
    use_case: LoginLocalUseCase = Depends(get_login_local_use_case),
):
    try:
        output = use_case.execute(LoginLocalInput(email=req.email, password=req.password))
    except AuthenticationFailedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return write_session(response, output, secure=secure_cookie)


@router.post("/api/v1/auth/refresh", response_model=ApiResponse[TokenResponse])
def refresh_auth(
    response: Response,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    secure_cookie: bool = Depends(get_refresh_cookie_secure),
    use_case: RefreshSessionUseCase = Depends(get_refresh_session_use_case),
):
    if not refresh_token_cookie:
        raise HTTPException(status_code=401, detail="Missing refresh token cookie.")

    try:
        output = use_case.execute(RefreshSessionInput(refresh_token=refresh_token_cookie))
    except (InvalidRefreshTokenError, StaleSessionError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return write_session(response, output, secure=secure_cookie)


@router.post("/api/v1/auth/logout", response_model=ApiResponse[None])
def logout_auth(
    response: Response,
    refresh_token_cookie: str | None = Cookie(default=None, alias=REFRESH_COOKIE_NAME),
    secure_cookie: bool = Depends(get_refresh_cookie_secure),
    use_case: LogoutSessionUseCase = Depends(get_logout_session_use_case),
):
    use_case.execute(refresh_token=refresh_token_cookie)
    _set_refresh_cookie(response, "", max_age_seconds=0, secure=secure_cookie)
    return ApiResponse[None].ok()
