from __future__ import annotations

from blog_auth.application.dto.users import UserOutput
from blog_auth.domain.entities.user import User

from .register_user import build_user_output


class GetMeUseCase:
    def execute(self, *, user: User) -> UserOutput:
        return build_user_output(user)
