from __future__ import annotations

from datetime import datetime
from typing import Protocol

from streamflix.domain.entities.user import LocalCredentials, User, UserRole


class AccountsPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def get_user_by_email(self, *, email: str) -> User | None:
        ...

    def get_local_credentials_by_email(self, *, email: str) -> LocalCredentials | None:
        ...

    def create_user(
        self,
        *,
        user_id: str,
        name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        is_active: bool,
        created_at: datetime,
    ) -> User:
        ...

    def update_password_hash(self, *, user_id: str, password_hash: str, updated_at: datetime) -> None:
        ...
