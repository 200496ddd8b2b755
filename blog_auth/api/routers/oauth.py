from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from blog_auth.api.deps import (
    get_current_user,
    get_exchange_oauth_code_use_case,
    get_link_oauth_account_use_case,
    get_list_linked_accounts_use_case,
    get_oauth_login_use_case,
    get_refresh_cookie_secure,
    get_unlink_oauth_account_use_case,
)
from blog_auth.api.routers.auth import write_session
from blog_auth.api.schemas.auth import TokenResponse
from blog_auth.api.schemas.common import ApiResponse
from blog_auth.api.schemas.oauth import (
    CodeResponse,
    ExchangeRequest,
    LinkedAccountResponse,
    LinkedAccountsResponse,
    OAuthLinkRequest,
    OAuthLinkResponse,
    OAuthLoginRequest,
    OAuthUnlinkRequest,
)
from blog_auth.application.dto.oauth import (
    ExchangeCodeInput,
    LinkOAuthAccountInput,
    OAuthLoginInput,
    UnlinkOAuthAccountInput,
)
from blog_auth.application.use_cases.exchange_oauth_code import ExchangeOAuthCodeUseCase
from blog_auth.application.use_cases.link_oauth_account import LinkOAuthAccountUseCase
from blog_auth.application.use_cases.list_linked_accounts import ListLinkedAccountsUseCase
from blog_auth.application.use_cases.oauth_login import OAuthLoginUseCase
from blog_auth.application.use_cases.unlink_oauth_account import UnlinkOAuthAccountUseCase
from blog_auth.domain.entities.user import User
from blog_auth.domain.exceptions import (
    AccountNotLinkedError,
    AlreadyLinkedElsewhereError,
    AlreadyLinkedSameProviderError,
    CodeExpiredError,
    InvalidCodeError,
    LinkNotFoundError,
    UserNotFoundError,
)


router = APIRouter()


@router.post("/api/v1/oauth/login", response_model=ApiResponse[CodeResponse])
def oauth_login(
    req: OAuthLoginRequest,
    use_case: OAuthLoginUseCase = Depends(get_oauth_login_use_case),
):
    try:
        output = use_case.execute(OAuthLoginInput(provider=req.provider, provider_id=req.provider_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[CodeResponse].ok(CodeResponse(code=output.code, expires_at=output.expires_at))


@router.post("/api/v1/oauth/exchange", response_model=ApiResponse[TokenResponse])
def oauth_exchange(
    req: ExchangeRequest,
    response: Response,
    secure_cookie: bool = Depends(get_refresh_cookie_secure),
    use_case: ExchangeOAuthCodeUseCase = Depends(get_exchange_oauth_code_use_case),
):
    try:
        output = use_case.execute(ExchangeCodeInput(code=req.code))
    except (InvalidCodeError, AccountNotLinkedError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (CodeExpiredError, UserNotFoundError) as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    return write_session(response, output, secure=secure_cookie)


@router.post("/api/v1/oauth/link", response_model=ApiResponse[OAuthLinkResponse])
def oauth_link(
    req: OAuthLinkRequest,
    current_user: User = Depends(get_current_user),
    use_case: LinkOAuthAccountUseCase = Depends(get_link_oauth_account_use_case),
):
    try:
        output = use_case.execute(
            LinkOAuthAccountInput(
                user_id=current_user.id,
                provider=req.provider,
                provider_id=req.provider_id,
            )
        )
    except (AlreadyLinkedElsewhereError, AlreadyLinkedSameProviderError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[OAuthLinkResponse].ok(
        OAuthLinkResponse(
            id=output.id,
            user_id=output.user_id,
            provider=output.provider,
            provider_id=output.provider_id,
            created_at=output.created_at,
            updated_at=output.updated_at,
        )
    )


@router.delete("/api/v1/oauth/unlink", response_model=ApiResponse[None])
def oauth_unlink(
    req: OAuthUnlinkRequest,
    current_user: User = Depends(get_current_user),
    use_case: UnlinkOAuthAccountUseCase = Depends(get_unlink_oauth_account_use_case),
):
    try:
        use_case.execute(UnlinkOAuthAccountInput(user_id=current_user.id, provider=req.provider))
    except LinkNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return ApiResponse[None].ok()


@router.get("/api/v1/oauth/linked", response_model=ApiResponse[LinkedAccountsResponse])
def oauth_linked(
    current_user: User = Depends(get_current_user),
    use_case: ListLinkedAccountsUseCase = Depends(get_list_linked_accounts_use_case),
):
    output = use_case.execute(user_id=current_user.id)
    return ApiResponse[LinkedAccountsResponse].ok(
        LinkedAccountsResponse(
            linked_accounts=[
                LinkedAccountResponse(provider=item.provider, created_at=item.created_at)
                for item in output.linked_accounts
            ]
        )
    )
