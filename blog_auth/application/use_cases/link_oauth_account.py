from __future__ import annotations

import logging
from uuid import uuid4

from blog_auth.application.dto.oauth import LinkOAuthAccountInput, OAuthLinkOutput
from blog_auth.application.ports.oauth_link_port import OAuthLinkPort
from blog_auth.domain.entities.oauth_link import OAuthLink, normalize_provider
from blog_auth.domain.exceptions import AlreadyLinkedElsewhereError, AlreadyLinkedSameProviderError

from .auth_common import utcnow


logger = logging.getLogger(__name__)


def build_oauth_link_output(link: OAuthLink) -> OAuthLinkOutput:
    return OAuthLinkOutput(
        id=link.id,
        user_id=link.user_id,
        provider=link.provider,
        provider_id=link.provider_id,
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


class LinkOAuthAccountUseCase:
    def __init__(self, *, oauth_link_port: OAuthLinkPort):
        self._oauth_link_port = oauth_link_port

    def execute(self, command: LinkOAuthAccountInput) -> OAuthLinkOutput:
        provider = normalize_provider(command.provider)
        provider_id = command.provider_id.strip()
        if not provider:
            raise ValueError("provider is required.")
        if not provider_id:
            raise ValueError("providerId is required.")

        existing = self._oauth_link_port.get_link_by_provider_id(provider=provider, provider_id=provider_id)
        if existing is not None:
            if existing.user_id != command.user_id:
                raise AlreadyLinkedElsewhereError("This OAuth account is already linked to another user.")
            raise AlreadyLinkedSameProviderError(f"A {provider} account is already linked to this user.")

        if self._oauth_link_port.get_link_for_user_provider(user_id=command.user_id, provider=provider) is not None:
            raise AlreadyLinkedSameProviderError(f"A {provider} account is already linked to this user.")

        # The store's unique constraints still decide concurrent links.
        link = self._oauth_link_port.create_link(
            link_id=str(uuid4()),
            user_id=command.user_id,
            provider=provider,
            provider_id=provider_id,
            created_at=utcnow(),
        )
        logger.info("link_oauth_account: linked user_id=%s provider=%s", command.user_id, provider)
        return build_oauth_link_output(link)
