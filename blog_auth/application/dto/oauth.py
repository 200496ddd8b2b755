from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OAuthLoginInput:
    provider: str
    provider_id: str


@dataclass(frozen=True)
class OAuthCodeOutput:
    code: str
    expires_at: datetime


@dataclass(frozen=True)
class ExchangeCodeInput:
    code: str


@dataclass(frozen=True)
class LinkOAuthAccountInput:
    user_id: str
    provider: str
    provider_id: str


@dataclass(frozen=True)
class UnlinkOAuthAccountInput:
    user_id: str
    provider: str


@dataclass(frozen=True)
class OAuthLinkOutput:
    id: str
    user_id: str
    provider: str
    provider_id: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class LinkedAccountOutput:
    provider: str
    created_at: datetime


@dataclass(frozen=True)
class LinkedAccountsOutput:
    linked_accounts: list[LinkedAccountOutput]
