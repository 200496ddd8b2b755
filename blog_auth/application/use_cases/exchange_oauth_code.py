from __future__ import annotations

import logging

from blog_auth.application.dto.auth import AuthTokensOutput
from blog_auth.application.dto.oauth import ExchangeCodeInput
from blog_auth.application.ports.exchange_code_port import ExchangeCodePort
from blog_auth.application.ports.oauth_link_port import OAuthLinkPort
from blog_auth.application.ports.refresh_token_ledger_port import RefreshTokenLedgerPort
from blog_auth.application.ports.token_port import TokenPort
from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import Principal
from blog_auth.domain.exceptions import AccountNotLinkedError, InvalidCodeError, UserNotFoundError

from .auth_common import TokenLifetimes, issue_tokens


logger = logging.getLogger(__name__)


class ExchangeOAuthCodeUseCase:
    def __init__(
        self,
        *,
        exchange_code_port: ExchangeCodePort,
        oauth_link_port: OAuthLinkPort,
        users_port: UsersPort,
        token_port: TokenPort,
        refresh_ledger: RefreshTokenLedgerPort,
        lifetimes: TokenLifetimes,
    ):
        self._exchange_code_port = exchange_code_port
        self._oauth_link_port = oauth_link_port
        self._users_port = users_port
        self._token_port = token_port
        self._refresh_ledger = refresh_ledger
        self._lifetimes = lifetimes

    def execute(self, command: ExchangeCodeInput) -> AuthTokensOutput:
        code = command.code.strip()
        if not code:
            raise InvalidCodeError("Invalid authorization code.")

        identity = self._exchange_code_port.redeem(code=code)

        link = self._oauth_link_port.get_link_by_provider_id(
            provider=identity.provider,
            provider_id=identity.provider_id,
        )
        if link is None:
            logger.warning(
                "exchange_oauth_code: account_not_linked provider=%s",
                identity.provider,
            )
            raise AccountNotLinkedError(
                "This OAuth account is not linked. Sign in and link it to an existing account first."
            )

        user = self._users_port.get_user_by_id(user_id=link.user_id)
        if user is None:
            raise UserNotFoundError("User linked to this OAuth account was not found.")

        output = issue_tokens(
            principal=Principal.for_user(user),
            token_port=self._token_port,
            refresh_ledger=self._refresh_ledger,
            lifetimes=self._lifetimes,
        )
        logger.info("exchange_oauth_code: success sub=%s provider=%s", user.id, identity.provider)
        return output
