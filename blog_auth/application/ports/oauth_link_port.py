from __future__ import annotations

from datetime import datetime
from typing import Protocol

from blog_auth.domain.entities.oauth_link import OAuthLink


class OAuthLinkPort(Protocol):
    def create_link(
        self,
        *,
        link_id: str,
        user_id: str,
        provider: str,
        provider_id: str,
        created_at: datetime,
    ) -> OAuthLink:
        """Persist a link; raises AlreadyLinked*Error on a uniqueness conflict."""
        ...

    def get_link_by_provider_id(self, *, provider: str, provider_id: str) -> OAuthLink | None:
        ...

    def get_link_for_user_provider(self, *, user_id: str, provider: str) -> OAuthLink | None:
        ...

    def list_links_by_user(self, *, user_id: str) -> list[OAuthLink]:
        ...

    def delete_link(self, *, user_id: str, provider: str) -> bool:
        ...
