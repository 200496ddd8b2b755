from __future__ import annotations

from blog_auth.application.dto.oauth import LinkedAccountOutput, LinkedAccountsOutput
from blog_auth.application.ports.oauth_link_port import OAuthLinkPort


class ListLinkedAccountsUseCase:
    def __init__(self, *, oauth_link_port: OAuthLinkPort):
        self._oauth_link_port = oauth_link_port

    def execute(self, *, user_id: str) -> LinkedAccountsOutput:
        links = self._oauth_link_port.list_links_by_user(user_id=user_id)
        return LinkedAccountsOutput(
            linked_accounts=[
                LinkedAccountOutput(provider=link.provider, created_at=link.created_at)
                for link in links
            ]
        )
