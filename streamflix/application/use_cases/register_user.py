from __future__ import annotations

from datetime import datetime
from typing import Callable
from uuid import uuid4

from streamflix.application.dto.auth import RegisterUserInput, RegisterUserOutput
from streamflix.application.ports.accounts_port import AccountsPort
from streamflix.application.ports.password_hasher_port import PasswordHasherPort
from streamflix.domain.exceptions import EmailAlreadyExistsError

from .auth_common import build_auth_user_output, normalize_email
from .billing_common import utcnow


MIN_PASSWORD_LENGTH = 8


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        password_hasher: PasswordHasherPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher
        self._clock = clock

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        name = command.name.strip()
        email = normalize_email(command.email)

        if not name:
            raise ValueError("name is required.")
        if not email:
            raise ValueError("email is required.")
        if len(command.password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must have at least {MIN_PASSWORD_LENGTH} characters.")

        if self._accounts_port.get_user_by_email(email=email) is not None:
            raise EmailAlreadyExistsError("Email already in use.")

        user = self._accounts_port.create_user(
            user_id=str(uuid4()),
            name=name,
            email=email,
            password_hash=self._password_hasher.hash(command.password),
            role="user",
            is_active=True,
            created_at=self._clock(),
        )
        return RegisterUserOutput(user=build_auth_user_output(user))
