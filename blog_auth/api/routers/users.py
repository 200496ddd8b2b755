from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from blog_auth.api.deps import (
    ensure_self_or_admin,
    get_current_user,
    get_delete_user_use_case,
    get_get_me_use_case,
    get_get_nickname_by_email_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_register_user_use_case,
    get_update_password_use_case,
    get_update_role_use_case,
    get_update_user_use_case,
    require_admin,
    require_api_key,
)
from blog_auth.api.schemas.common import ApiResponse
from blog_auth.api.schemas.users import (
    CreateUserRequest,
    NicknameResponse,
    UpdatePasswordRequest,
    UpdateRoleRequest,
    UpdateUserRequest,
    UserResponse,
)
from blog_auth.application.dto.users import (
    RegisterUserInput,
    UpdatePasswordInput,
    UpdateRoleInput,
    UpdateUserInput,
    UserOutput,
)
from blog_auth.application.use_cases.delete_user import DeleteUserUseCase
from blog_auth.application.use_cases.get_me import GetMeUseCase
from blog_auth.application.use_cases.get_nickname_by_email import GetNicknameByEmailUseCase
from blog_auth.application.use_cases.get_user import GetUserUseCase
from blog_auth.application.use_cases.list_users import ListUsersUseCase
from blog_auth.application.use_cases.register_user import RegisterUserUseCase
from blog_auth.application.use_cases.update_password import UpdatePasswordUseCase
from blog_auth.application.use_cases.update_role import UpdateRoleUseCase
from blog_auth.application.use_cases.update_user import UpdateUserUseCase
from blog_auth.domain.entities.user import User
from blog_auth.domain.exceptions import (
    EmailAlreadyExistsError,
    InvalidPasswordError,
    NicknameAlreadyExistsError,
    UserNotFoundError,
)


router = APIRouter()


def _to_response(output: UserOutput) -> UserResponse:
    return UserResponse(
        id=output.id,
        name=output.name,
        email=output.email,
        nickname=output.nickname,
        role=output.role,
        created_at=output.created_at,
    )


@router.post(
    "/api/v1/users",
    response_model=ApiResponse[UserResponse],
    status_code=201,
    dependencies=[Depends(require_api_key)],
)
def create_user(
    req: CreateUserRequest,
    use_case: RegisterUserUseCase = Depends(get_register_user_use_case),
):
    try:
        output = use_case.execute(
            RegisterUserInput(
                name=req.name,
                email=req.email,
                nickname=req.nickname,
                password=req.password,
            )
        )
    except (EmailAlreadyExistsError, NicknameAlreadyExistsError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (InvalidPasswordError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[UserResponse].ok(_to_response(output))


@router.get("/api/v1/users/me", response_model=ApiResponse[UserResponse])
def get_me(
    current_user: User = Depends(get_current_user),
    use_case: GetMeUseCase = Depends(get_get_me_use_case),
):
    output = use_case.execute(user=current_user)
    return ApiResponse[UserResponse].ok(_to_response(output))


@router.get("/api/v1/users", response_model=ApiResponse[list[UserResponse]])
def list_users(
    _admin: User = Depends(require_admin),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    return ApiResponse[list[UserResponse]].ok([_to_response(output) for output in use_case.execute()])


@router.get("/api/v1/users/email/{email}", response_model=ApiResponse[NicknameResponse])
def get_nickname_by_email(
    email: str,
    use_case: GetNicknameByEmailUseCase = Depends(get_get_nickname_by_email_use_case),
):
    try:
        nickname = use_case.execute(email=email)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return ApiResponse[NicknameResponse].ok(NicknameResponse(nickname=nickname))


@router.get("/api/v1/users/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    ensure_self_or_admin(current_user, user_id)
    try:
        output = use_case.execute(user_id=user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return ApiResponse[UserResponse].ok(_to_response(output))


@router.put("/api/v1/users/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: str,
    req: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
):
    ensure_self_or_admin(current_user, user_id)
    try:
        output = use_case.execute(
            UpdateUserInput(
                user_id=user_id,
                name=req.name,
                email=req.email,
                nickname=req.nickname,
            )
        )
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (EmailAlreadyExistsError, NicknameAlreadyExistsError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[UserResponse].ok(_to_response(output))


@router.put("/api/v1/users/{user_id}/password", response_model=ApiResponse[None])
def update_password(
    user_id: str,
    req: UpdatePasswordRequest,
    current_user: User = Depends(get_current_user),
    use_case: UpdatePasswordUseCase = Depends(get_update_password_use_case),
):
    ensure_self_or_admin(current_user, user_id)
    try:
        use_case.execute(UpdatePasswordInput(user_id=user_id, new_password=req.new_password))
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InvalidPasswordError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[None].ok()


@router.put("/api/v1/users/{user_id}/role", response_model=ApiResponse[UserResponse])
def update_role(
    user_id: str,
    req: UpdateRoleRequest,
    _admin: User = Depends(require_admin),
    use_case: UpdateRoleUseCase = Depends(get_update_role_use_case),
):
    try:
        output = use_case.execute(UpdateRoleInput(user_id=user_id, role=req.role))
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return ApiResponse[UserResponse].ok(_to_response(output))


@router.delete("/api/v1/users/{user_id}", response_model=ApiResponse[None])
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
):
    ensure_self_or_admin(current_user, user_id)
    try:
        use_case.execute(user_id=user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return ApiResponse[None].ok()
