from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OAuthLink:
    id: str
    user_id: str
    provider: str
    provider_id: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ExternalIdentity:
    provider: str
    provider_id: str


def normalize_provider(provider: str) -> str:
    return provider.strip().lower()
