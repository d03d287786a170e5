from __future__ import annotations

from streamflix.application.dto.auth import AuthUserOutput
from streamflix.domain.entities.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_auth_user_output(user: User) -> AuthUserOutput:
    return AuthUserOutput(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
    )
