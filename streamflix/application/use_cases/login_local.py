from __future__ import annotations

from datetime import datetime
from typing import Callable

from streamflix.application.dto.auth import AuthTokensOutput, LoginLocalInput
from streamflix.application.ports.accounts_port import AccountsPort
from streamflix.application.ports.password_hasher_port import PasswordHasherPort
from streamflix.application.ports.token_port import TokenPort
from streamflix.domain.exceptions import InvalidCredentialsError, UserInactiveError

from .auth_common import build_auth_user_output, normalize_email
from .billing_common import utcnow


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        accounts_port: AccountsPort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._accounts_port = accounts_port
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._clock = clock

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        credentials = self._accounts_port.get_local_credentials_by_email(email=normalize_email(command.email))
        if credentials is None:
            raise InvalidCredentialsError("Invalid credentials.")

        if not self._password_hasher.verify(command.password, credentials.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")

        user = credentials.user
        if not user.is_active:
            raise UserInactiveError("User is inactive.")

        now = self._clock()
        if self._password_hasher.needs_rehash(credentials.password_hash):
            self._accounts_port.update_password_hash(
                user_id=user.id,
                password_hash=self._password_hasher.hash(command.password),
                updated_at=now,
            )

        access_token, access_expires_at = self._token_port.create_access_token(user_id=user.id, now=now)
        return AuthTokensOutput(
            user=build_auth_user_output(user),
            access_token=access_token,
            access_expires_at=access_expires_at,
        )
