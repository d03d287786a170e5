from __future__ import annotations

from datetime import datetime, timedelta

import jwt

from streamflix.application.dto.auth import AccessTokenPayload
from streamflix.application.ports.token_port import TokenPort


ALGORITHM = "HS256"


class JwtTokenService(TokenPort):
    def __init__(self, *, jwt_secret: str, access_ttl_minutes: int):
        self._jwt_secret = jwt_secret
        self._access_ttl = timedelta(minutes=access_ttl_minutes)

    def create_access_token(self, *, user_id: str, now: datetime) -> tuple[str, datetime]:
        expires_at = now + self._access_ttl
        payload = {
            "sub": user_id,
            "type": "access",
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._jwt_secret, algorithm=ALGORITHM), expires_at

    def decode_access_token(self, *, token: str) -> AccessTokenPayload:
        try:
            payload = jwt.decode(token, self._jwt_secret, algorithms=[ALGORITHM])
        except jwt.PyJWTError as exc:
            raise ValueError("Invalid access token.") from exc

        if payload.get("type") != "access":
            raise ValueError("Invalid token type.")

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise ValueError("Invalid token subject.")
        return AccessTokenPayload(user_id=user_id)
