from __future__ import annotations

import logging

from blog_auth.application.dto.oauth import UnlinkOAuthAccountInput
from blog_auth.application.ports.oauth_link_port import OAuthLinkPort
from blog_auth.domain.entities.oauth_link import normalize_provider
from blog_auth.domain.exceptions import LinkNotFoundError


logger = logging.getLogger(__name__)


class UnlinkOAuthAccountUseCase:
    def __init__(self, *, oauth_link_port: OAuthLinkPort):
        self._oauth_link_port = oauth_link_port

    def execute(self, command: UnlinkOAuthAccountInput) -> None:
        provider = normalize_provider(command.provider)
        if not self._oauth_link_port.delete_link(user_id=command.user_id, provider=provider):
            logger.warning("unlink_oauth_account: not_found user_id=%s provider=%s", command.user_id, provider)
            raise LinkNotFoundError(f"No {provider} account is linked to this user.")
        logger.info("unlink_oauth_account: unlinked user_id=%s provider=%s", command.user_id, provider)
