from __future__ import annotations

import logging

from blog_auth.application.dto.auth import AuthTokensOutput, RefreshSessionInput
from blog_auth.application.ports.refresh_token_ledger_port import RefreshTokenLedgerPort
from blog_auth.application.ports.token_port import REFRESH_TOKEN_TYPE, TokenPort
from blog_auth.domain.exceptions import InvalidRefreshTokenError, StaleSessionError
from blog_auth.shared.logging_config import mask_secret

from .auth_common import TokenLifetimes, mint_token_pair, utcnow


logger = logging.getLogger(__name__)


class RefreshSessionUseCase:
    """Rotates a refresh token into a new access/refresh pair.

    Only the latest refresh token recorded for a subject is accepted, so a
    superseded token is rejected with StaleSessionError even before it
    expires. The ledger swap is a compare-and-set on the previous hash: of two
    concurrent refreshes with the same token exactly one wins.
    """

    def __init__(
        self,
        *,
        token_port: TokenPort,
        refresh_ledger: RefreshTokenLedgerPort,
        lifetimes: TokenLifetimes,
    ):
        self._token_port = token_port
        self._refresh_ledger = refresh_ledger
        self._lifetimes = lifetimes

    def execute(self, command: RefreshSessionInput) -> AuthTokensOutput:
        token = command.refresh_token.strip()
        if not token:
            raise InvalidRefreshTokenError("Missing refresh token.")

        if not self._token_port.validate(token=token, expected_type=REFRESH_TOKEN_TYPE):
            logger.warning("refresh_session: invalid_token token=%s", mask_secret(token))
            raise InvalidRefreshTokenError("Invalid refresh token.")

        principal = self._token_port.parse(token=token)
        presented_hash = self._token_port.hash_token(token=token)
        now = utcnow()

        record = self._refresh_ledger.get(subject=principal.subject)
        if record is None:
            logger.warning("refresh_session: no_ledger_entry sub=%s", principal.subject)
            raise StaleSessionError("No active session for this refresh token.")
        if record.is_expired(now):
            logger.warning("refresh_session: ledger_entry_expired sub=%s", principal.subject)
            raise StaleSessionError("Session has expired.")
        if record.token_hash != presented_hash:
            logger.warning(
                "refresh_session: superseded_token sub=%s token=%s",
                principal.subject,
                mask_secret(token),
            )
            raise StaleSessionError("Refresh token has been superseded.")

        output = mint_token_pair(
            principal=principal,
            token_port=self._token_port,
            lifetimes=self._lifetimes,
            now=now,
        )
        swapped = self._refresh_ledger.replace_if_current(
            subject=principal.subject,
            current_hash=presented_hash,
            new_hash=self._token_port.hash_token(token=output.refresh_token),
            expires_at=output.refresh_expires_at,
            now=now,
        )
        if not swapped:
            logger.warning("refresh_session: lost_rotation_race sub=%s", principal.subject)
            raise StaleSessionError("Refresh token has been superseded.")

        logger.info("refresh_session: rotated sub=%s", principal.subject)
        return output
