from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1, max_length=256)


class TokenResponse(CamelModel):
    token_type: str = "Bearer"
    access_expires_at: datetime
    refresh_expires_at: datetime
