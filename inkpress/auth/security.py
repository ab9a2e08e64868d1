"""JWT access token handling.

Tokens are issued by the identity provider; this service only verifies
them. ``create_access_token`` exists for tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from inkpress.auth.permissions import Actor, parse_role
from inkpress.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token.

    Args:
        data: Claims, typically {"sub": user_id, "role": role, "email": ..., "name": ...}
        expires_delta: Token lifetime (default 30 minutes)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()

    to_encode = data.copy()
    now = datetime.now(UTC)
    to_encode.update(
        {
            "exp": now + (expires_delta or timedelta(minutes=30)),
            "iat": now,
            "type": "access",
        }
    )
    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates the signature, the expiration and that ``type == "access"``.

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type", "access") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    return payload


def actor_from_claims(payload: dict[str, Any]) -> Actor:
    """Build an Actor from decoded token claims.

    Raises:
        JWTError: If ``sub`` is missing or not a UUID
    """
    try:
        user_id = UUID(str(payload["sub"]))
    except (KeyError, ValueError) as e:
        msg = "Token subject is not a valid user id"
        raise JWTError(msg) from e

    email = payload.get("email") or ""
    return Actor(
        id=user_id,
        role=parse_role(payload.get("role")),
        display_name=payload.get("name") or email.split("@")[0],
        email=email,
    )
