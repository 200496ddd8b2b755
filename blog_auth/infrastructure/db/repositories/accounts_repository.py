from __future__ import annotations

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from blog_auth.application.ports.users_port import UsersPort
from blog_auth.domain.entities.user import Role
from blog_auth.domain.exceptions import EmailAlreadyExistsError, NicknameAlreadyExistsError
from blog_auth.infrastructure.db.mappers.accounts_mapper import map_row_to_user


USER_COLUMNS = "id, name, email, nickname, password_hash, role, created_at, updated_at"
EMAIL_CONSTRAINT = "users_email_key"
NICKNAME_CONSTRAINT = "users_nickname_key"


def _raise_unique_violation(exc: IntegrityError):
    detail = str(exc.orig)
    if NICKNAME_CONSTRAINT in detail:
        raise NicknameAlreadyExistsError("Nickname already in use.") from exc
    if EMAIL_CONSTRAINT in detail:
        raise EmailAlreadyExistsError("Email already in use.") from exc
    raise exc


class SqlAccountsRepository(UsersPort):
    def __init__(self, engine):
        self._engine = engine

    def get_user_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def get_user_by_email(self, *, email: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        nickname: str,
        password_hash: str,
        role: Role,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO public.users (
                id, name, email, nickname, password_hash, role, created_at, updated_at
            ) VALUES (
                :id, :name, :email, :nickname, :password_hash, :role, :created_at, :created_at
            )
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "name": name,
            "email": email,
            "nickname": nickname,
            "password_hash": password_hash,
            "role": role.value,
            "created_at": created_at,
        }
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            _raise_unique_violation(exc)
        return map_row_to_user(row)

    def get_user_by_nickname(self, *, nickname: str):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            WHERE nickname = :nickname
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"nickname": nickname}).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def list_users(self):
        sql = f"""
            SELECT {USER_COLUMNS}
            FROM public.users
            ORDER BY created_at ASC
        """
        with self._engine.connect() as conn:
            rows = conn.execute(text(sql)).mappings().all()
        return [map_row_to_user(row) for row in rows]

    def update_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        nickname: str,
        updated_at: datetime,
    ):
        sql = f"""
            UPDATE public.users
            SET name = :name,
                email = :email,
                nickname = :nickname,
                updated_at = :updated_at
            WHERE id = :user_id
            RETURNING {USER_COLUMNS}
        """
        params = {
            "user_id": user_id,
            "name": name,
            "email": email,
            "nickname": nickname,
            "updated_at": updated_at,
        }
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().first()
        except IntegrityError as exc:
            _raise_unique_violation(exc)
        if row is None:
            return None
        return map_row_to_user(row)

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> bool:
        sql = """
            UPDATE public.users
            SET password_hash = :password_hash,
                updated_at = :updated_at
            WHERE id = :user_id
        """
        with self._engine.begin() as conn:
            result = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "password_hash": password_hash,
                    "updated_at": updated_at,
                },
            )
        return result.rowcount > 0

    def update_role(self, *, user_id: str, role: Role, updated_at: datetime):
        sql = f"""
            UPDATE public.users
            SET role = :role,
                updated_at = :updated_at
            WHERE id = :user_id
            RETURNING {USER_COLUMNS}
        """
        with self._engine.begin() as conn:
            row = conn.execute(
                text(sql),
                {
                    "user_id": user_id,
                    "role": role.value,
                    "updated_at": updated_at,
                },
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_user(row)

    def delete_user(self, *, user_id: str) -> bool:
        # OAuth links go with the user via ON DELETE CASCADE; the ledger row is keyed by subject only.
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM public.refresh_tokens WHERE subject = :user_id"), {"user_id": user_id})
            result = conn.execute(text("DELETE FROM public.users WHERE id = :user_id"), {"user_id": user_id})
        return result.rowcount > 0
