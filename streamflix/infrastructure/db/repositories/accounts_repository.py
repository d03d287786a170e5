from __future__ import annotations

from datetime import datetime

from sqlalchemy import text

from streamflix.application.ports.accounts_port import AccountsPort
from streamflix.domain.entities.user import LocalCredentials
from streamflix.infrastructure.db.mappers.accounts_mapper import map_row_to_user


USER_COLUMNS = "id, name, email, role, is_active, created_at, updated_at"


class SqlAccountsRepository(AccountsPort):
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

    def get_local_credentials_by_email(self, *, email: str):
        sql = f"""
            SELECT {USER_COLUMNS}, password_hash
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return LocalCredentials(user=map_row_to_user(row), password_hash=row["password_hash"])

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        is_active: bool,
        created_at: datetime,
    ):
        sql = f"""
            INSERT INTO public.users (
                id, name, email, password_hash, role, is_active, created_at, updated_at
            ) VALUES (
                :id, :name, :email, :password_hash, :role, :is_active, :created_at, :created_at
            )
            RETURNING {USER_COLUMNS}
        """
        params = {
            "id": user_id,
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "role": role,
            "is_active": is_active,
            "created_at": created_at,
        }
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), params).mappings().one()
        return map_row_to_user(row)

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                text(
                    """
                    UPDATE public.users
                    SET password_hash = :password_hash,
                        updated_at = :updated_at
                    WHERE id = :user_id
                    """
                ),
                {"user_id": user_id, "password_hash": password_hash, "updated_at": updated_at},
            )
