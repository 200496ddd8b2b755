from __future__ import annotations

from blog_auth.application.dto.oauth import OAuthCodeOutput, OAuthLoginInput
from blog_auth.application.ports.exchange_code_port import ExchangeCodePort
from blog_auth.domain.entities.oauth_link import ExternalIdentity, normalize_provider


class OAuthLoginUseCase:
    """Binds an external identity to a short-lived exchange code.

    Nothing is checked against the link registry here; an unlinked identity
    is only rejected when the code is exchanged.
    """

    def __init__(self, *, exchange_code_port: ExchangeCodePort):
        self._exchange_code_port = exchange_code_port

    def execute(self, command: OAuthLoginInput) -> OAuthCodeOutput:
        provider = normalize_provider(command.provider)
        provider_id = command.provider_id.strip()
        if not provider:
            raise ValueError("provider is required.")
        if not provider_id:
            raise ValueError("providerId is required.")

        code, expires_at = self._exchange_code_port.issue(
            identity=ExternalIdentity(provider=provider, provider_id=provider_id)
        )
        return OAuthCodeOutput(code=code, expires_at=expires_at)
