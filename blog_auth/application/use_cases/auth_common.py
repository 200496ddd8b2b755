from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from blog_auth.application.dto.auth import AuthTokensOutput
from blog_auth.application.ports.refresh_token_ledger_port import RefreshTokenLedgerPort
from blog_auth.application.ports.token_port import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE, TokenPort
from blog_auth.domain.entities.user import Principal


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenLifetimes:
    access_ttl: timedelta
    refresh_ttl: timedelta


def mint_token_pair(
    *,
    principal: Principal,
    token_port: TokenPort,
    lifetimes: TokenLifetimes,
    now: datetime,
) -> AuthTokensOutput:
    access = token_port.issue(
        principal=principal,
        ttl=lifetimes.access_ttl,
        token_type=ACCESS_TOKEN_TYPE,
        now=now,
    )
    refresh = token_port.issue(
        principal=principal,
        ttl=lifetimes.refresh_ttl,
        token_type=REFRESH_TOKEN_TYPE,
        now=now,
    )
    return AuthTokensOutput(
        subject=principal.subject,
        access_token=access.token,
        refresh_token=refresh.token,
        access_expires_at=access.expires_at,
        refresh_expires_at=refresh.expires_at,
    )


def issue_tokens(
    *,
    principal: Principal,
    token_port: TokenPort,
    refresh_ledger: RefreshTokenLedgerPort,
    lifetimes: TokenLifetimes,
) -> AuthTokensOutput:
    """Mint a fresh pair and record the refresh token as the subject's latest."""
    now = utcnow()
    output = mint_token_pair(principal=principal, token_port=token_port, lifetimes=lifetimes, now=now)
    refresh_ledger.upsert(
        subject=principal.subject,
        token_hash=token_port.hash_token(token=output.refresh_token),
        expires_at=output.refresh_expires_at,
        now=now,
    )
    return output
