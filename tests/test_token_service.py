from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from streamflix.infrastructure.security.token_service import JwtTokenService


def test_access_token_round_trip():
    service = JwtTokenService(jwt_secret="secret", access_ttl_minutes=60)
    now = datetime.now(timezone.utc)

    token, expires_at = service.create_access_token(user_id="user-1", now=now)

    assert expires_at == now + timedelta(minutes=60)
    assert service.decode_access_token(token=token).user_id == "user-1"


def test_expired_token_is_rejected():
    service = JwtTokenService(jwt_secret="secret", access_ttl_minutes=1)
    token, _ = service.create_access_token(user_id="user-1", now=datetime.now(timezone.utc) - timedelta(hours=1))

    with pytest.raises(ValueError):
        service.decode_access_token(token=token)


def test_token_of_other_type_is_rejected():
    token = jwt.encode({"sub": "user-1", "type": "refresh"}, "secret", algorithm="HS256")

    with pytest.raises(ValueError, match="token type"):
        JwtTokenService(jwt_secret="secret", access_ttl_minutes=60).decode_access_token(token=token)
