from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from blog_auth.application.ports.oauth_link_port import OAuthLinkPort
from blog_auth.domain.exceptions import AlreadyLinkedElsewhereError, AlreadyLinkedSameProviderError
from blog_auth.infrastructure.db.mappers.accounts_mapper import map_row_to_oauth_link


logger = logging.getLogger(__name__)

LINK_COLUMNS = "id, user_id, provider, provider_id, created_at, updated_at"
PROVIDER_ID_CONSTRAINT = "uq_user_oauths_provider_provider_id"
USER_PROVIDER_CONSTRAINT = "uq_user_oauths_user_provider"


class SqlOAuthLinkRepository(OAuthLinkPort):
    def __init__(self, engine):
        self._engine = engine

    def create_link(
        self,
        *,
        link_id: str,
        user_id: str,
        provider: str,
        provider_id: str,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO public.user_oauths (
                id, user_id, provider, provider_id, created_at, updated_at
            ) VALUES (
                :id, :user_id, :provider, :provider_id, :created_at, :created_at
            )
            RETURNING {LINK_COLUMNS}
        """
        params = {
            "id": link_id,
            "user_id": user_id,
            "provider": provider,
            "provider_id": provider_id,
            "created_at": created_at,
        }
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            # A concurrent link won the race; the constraint name tells which rule it hit.
            detail = str(exc.orig)
            logger.warning(
                "oauth_link_repo: integrity_error user_id=%s provider=%s detail=%s",
                user_id,
                provider,
                detail,
            )
            if PROVIDER_ID_CONSTRAINT in detail:
                raise AlreadyLinkedElsewhereError(
                    "This OAuth account is already linked to another user."
                ) from exc
            if USER_PROVIDER_CONSTRAINT in detail:
                raise AlreadyLinkedSameProviderError(
                    f"A {provider} account is already linked to this user."
                ) from exc
            raise

        logger.info(
            "oauth_link_repo: created id=%s user_id=%s provider=%s",
            row["id"],
            user_id,
            provider,
        )
        return map_row_to_oauth_link(row)

    def get_link_by_provider_id(self, *, provider: str, provider_id: str):
        sql = f"""
            SELECT {LINK_COLUMNS}
            FROM public.user_oauths
            WHERE provider = :provider
              AND provider_id = :provider_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(
                text(sql),
                {
                    "provider": provider,
                    "provider_id": provider_id,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_oauth_link(row)

    def get_link_for_user_provider(self, *, user_id: str, provider: str):
        sql = f"""
            SELECT {LINK_COLUMNS}
            FROM public.user_oauths
            WHERE user_id = :user_id
              AND provider = :provider
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "provider": provider,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_oauth_link(row)

    def list_links_by_user(self, *, user_id: str):
        sql = f"""
            SELECT {LINK_COLUMNS}
            FROM public.user_oauths
            WHERE user_id = :user_id
            ORDER BY created_at ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql), {"user_id": user_id}).mappings().all()
        return [map_row_to_oauth_link(row) for row in rows]

    def delete_link(self, *, user_id: str, provider: str) -> bool:
        sql = """
            DELETE FROM public.user_oauths
            WHERE user_id = :user_id
              AND provider = :provider
        """
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), {"user_id": user_id, "provider": provider})
        logger.info(
            "oauth_link_repo: deleted user_id=%s provider=%s rows=%s",
            user_id,
            provider,
            result.rowcount,
        )
        return result.rowcount > 0
