from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .common import CamelModel


class OAuthLoginRequest(CamelModel):
    provider: str = Field(..., min_length=1, max_length=50)
    provider_id: str = Field(..., min_length=1, max_length=100)


class OAuthLinkRequest(CamelModel):
    provider: str = Field(..., min_length=1, max_length=50)
    provider_id: str = Field(..., min_length=1, max_length=100)


class OAuthUnlinkRequest(CamelModel):
    provider: str = Field(..., min_length=1, max_length=50)


class ExchangeRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=200)


class CodeResponse(CamelModel):
    code: str
    expires_at: datetime


class OAuthLinkResponse(CamelModel):
    id: str
    user_id: str
    provider: str
    provider_id: str
    created_at: datetime
    updated_at: datetime


class LinkedAccountResponse(CamelModel):
    provider: str
    created_at: datetime


class LinkedAccountsResponse(CamelModel):
    linked_accounts: list[LinkedAccountResponse]
