from __future__ import annotations

import logging

from blog_auth.application.dto.auth import AuthTokensOutput, LoginLocalInput
from blog_auth.application.ports.credential_verifier_port import CredentialVerifierPort
from blog_auth.application.ports.refresh_token_ledger_port import RefreshTokenLedgerPort
from blog_auth.application.ports.token_port import TokenPort

from .auth_common import TokenLifetimes, issue_tokens


logger = logging.getLogger(__name__)


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        credential_verifier: CredentialVerifierPort,
        token_port: TokenPort,
        refresh_ledger: RefreshTokenLedgerPort,
        lifetimes: TokenLifetimes,
    ):
        self._credential_verifier = credential_verifier
        self._token_port = token_port
        self._refresh_ledger = refresh_ledger
        self._lifetimes = lifetimes

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        principal = self._credential_verifier.verify(email=command.email, password=command.password)
        output = issue_tokens(
            principal=principal,
            token_port=self._token_port,
            refresh_ledger=self._refresh_ledger,
            lifetimes=self._lifetimes,
        )
        logger.info("login_local: success sub=%s", principal.subject)
        return output
