from __future__ import annotations

from passlib.context import CryptContext

from streamflix.application.ports.password_hasher_port import PasswordHasherPort


# New hashes use the first scheme; the rest are only accepted for existing accounts.
PASSWORD_SCHEMES = ("argon2", "bcrypt")


class PasswordHasher(PasswordHasherPort):
    def __init__(self, *, schemes: tuple[str, ...] = PASSWORD_SCHEMES):
        self._ctx = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, plain_password: str) -> str:
        return self._ctx.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self._ctx.verify(plain_password, password_hash)
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        try:
            return self._ctx.needs_update(password_hash)
        except (ValueError, TypeError):
            return False
