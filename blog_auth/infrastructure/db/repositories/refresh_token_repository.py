from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import text

from blog_auth.application.ports.refresh_token_ledger_port import RefreshTokenLedgerPort
from blog_auth.infrastructure.db.mappers.accounts_mapper import map_row_to_refresh_token_record


logger = logging.getLogger(__name__)


class SqlRefreshTokenRepository(RefreshTokenLedgerPort):
    """Latest refresh token hash per subject."""

    def __init__(self, engine):
        self._engine = engine

    def get(self, *, subject: str):
        sql = """
            SELECT subject, token_hash, expires_at, updated_at
            FROM public.refresh_tokens
            WHERE subject = :subject
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"subject": subject}).mappings().first()
        if row is None:
            return None
        return map_row_to_refresh_token_record(row)

    def upsert(self, *, subject: str, token_hash: str, expires_at: datetime, now: datetime) -> None:
        sql = """
            INSERT INTO public.refresh_tokens (subject, token_hash, expires_at, updated_at)
            VALUES (:subject, :token_hash, :expires_at, :now)
            ON CONFLICT (subject)
            DO UPDATE SET
                token_hash = EXCLUDED.token_hash,
                expires_at = EXCLUDED.expires_at,
                updated_at = EXCLUDED.updated_at
        """
        with self._engine.begin() as conn:
            conn.execute(
                text(sql),
                {
                    "subject": subject,
                    "token_hash": token_hash,
                    "expires_at": expires_at,
                    "now": now,
                },
            )
        logger.debug("refresh_token_repo: upsert subject=%s", subject)

    def replace_if_current(
        self,
        *,
        subject: str,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        sql = """
            UPDATE public.refresh_tokens
            SET token_hash = :new_hash,
                expires_at = :expires_at,
                updated_at = :now
            WHERE subject = :subject
              AND token_hash = :current_hash
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text(sql),
                {
                    "subject": subject,
                    "current_hash": current_hash,
                    "new_hash": new_hash,
                    "expires_at": expires_at,
                    "now": now,
                },
            )
        swapped = result.rowcount == 1
        logger.debug("refresh_token_repo: replace_if_current subject=%s swapped=%s", subject, swapped)
        return swapped
