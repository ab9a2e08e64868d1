"""Tests for token verification and actor decoding."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import JWTError, jwt

from inkpress.auth.permissions import UserRole
from inkpress.auth.security import (
    actor_from_claims,
    create_access_token,
    decode_access_token,
)
from inkpress.config import get_settings


class TestAccessToken:
    def test_roundtrip_claims(self) -> None:
        user_id = uuid4()
        token = create_access_token({"sub": str(user_id), "role": "admin"})
        payload = decode_access_token(token)
        assert payload["sub"] == str(user_id)
        assert payload["role"] == "admin"
        assert payload["type"] == "access"

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(
            {"sub": str(uuid4())}, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_type_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4())})
        settings = get_settings()
        payload = jwt.decode(
            token, settings.auth_secret_key, algorithms=[settings.auth_algorithm]
        )
        payload["type"] = "refresh"
        forged = jwt.encode(
            payload, settings.auth_secret_key, algorithm=settings.auth_algorithm
        )
        with pytest.raises(JWTError):
            decode_access_token(forged)

    def test_tampered_signature_rejected(self) -> None:
        token = create_access_token({"sub": str(uuid4())})
        with pytest.raises(JWTError):
            decode_access_token(token[:-4] + "abcd")


class TestActorFromClaims:
    def test_full_claims(self) -> None:
        user_id = uuid4()
        actor = actor_from_claims(
            {"sub": str(user_id), "role": "admin", "name": "Ann", "email": "a@x.io"}
        )
        assert actor.id == user_id
        assert actor.role == UserRole.ADMIN
        assert actor.is_admin
        assert actor.display_name == "Ann"
        assert actor.email == "a@x.io"

    def test_unknown_role_defaults_to_user(self) -> None:
        actor = actor_from_claims({"sub": str(uuid4()), "role": "superuser"})
        assert actor.role == UserRole.USER

    @pytest.mark.parametrize("payload", [{}, {"sub": "not-a-uuid"}])
    def test_bad_subject(self, payload: dict) -> None:
        with pytest.raises(JWTError):
            actor_from_claims(payload)
