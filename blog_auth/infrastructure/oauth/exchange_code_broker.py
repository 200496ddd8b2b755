from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable

from blog_auth.application.ports.exchange_code_port import ExchangeCodePort
from blog_auth.domain.entities.exchange_code import ExchangeCodeRecord
from blog_auth.domain.entities.oauth_link import ExternalIdentity
from blog_auth.domain.exceptions import CodeExpiredError, InvalidCodeError
from blog_auth.shared.logging_config import mask_secret


logger = logging.getLogger(__name__)

CODE_PREFIX = "oauth_temp_"
DEFAULT_CODE_TTL = timedelta(minutes=5)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryExchangeCodeBroker(ExchangeCodePort):
    """Single-use OAuth exchange codes held in process memory.

    Each code moves Issued -> Redeemed or Issued -> Expired and never back.
    Expired entries are swept whenever a new code is issued, so the table
    holds at most (issuance rate x ttl) entries. Codes do not survive a
    restart and are not shared between instances; a store with native key
    expiry can replace this class behind ExchangeCodePort.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = DEFAULT_CODE_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._ttl = ttl
        self._clock = clock
        self._lock = Lock()
        self._records: dict[str, ExchangeCodeRecord] = {}

    def issue(self, *, identity: ExternalIdentity) -> tuple[str, datetime]:
        code = CODE_PREFIX + secrets.token_urlsafe(32)
        now = self._clock()
        expires_at = now + self._ttl
        with self._lock:
            self._records[code] = ExchangeCodeRecord(identity=identity, expires_at=expires_at)
            swept = self._sweep_locked(now)

        logger.info(
            "exchange_code_broker: issued provider=%s code=%s swept=%s",
            identity.provider,
            mask_secret(code),
            swept,
        )
        return code, expires_at

    def redeem(self, *, code: str) -> ExternalIdentity:
        now = self._clock()
        with self._lock:
            record = self._records.pop(code, None)

        if record is None:
            logger.warning("exchange_code_broker: unknown_code code=%s", mask_secret(code))
            raise InvalidCodeError("Invalid authorization code.")
        if record.is_expired(now):
            logger.warning(
                "exchange_code_broker: expired_code provider=%s code=%s",
                record.identity.provider,
                mask_secret(code),
            )
            raise CodeExpiredError("Authorization code has expired.")

        logger.info(
            "exchange_code_broker: redeemed provider=%s code=%s",
            record.identity.provider,
            mask_secret(code),
        )
        return record.identity

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _sweep_locked(self, now: datetime) -> int:
        expired = [code for code, record in self._records.items() if record.is_expired(now)]
        for code in expired:
            del self._records[code]
        return len(expired)
