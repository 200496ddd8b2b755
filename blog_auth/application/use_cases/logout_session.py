from __future__ import annotations

import logging

from blog_auth.application.ports.token_port import REFRESH_TOKEN_TYPE, TokenPort


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    """Logout is cookie-only: issued access tokens stay valid until they expire.

    The transport layer overwrites the refresh cookie with an expired one.
    The ledger entry is left alone; the client simply loses the token.
    """

    def __init__(self, *, token_port: TokenPort):
        self._token_port = token_port

    def execute(self, *, refresh_token: str | None) -> None:
        subject = None
        if refresh_token and self._token_port.validate(token=refresh_token, expected_type=REFRESH_TOKEN_TYPE):
            subject = self._token_port.parse(token=refresh_token).subject
        logger.info("logout_session: cookie_cleared sub=%s", subject)
