"""FastAPI dependencies for authentication.

Provides the current Actor from the bearer token, optional authentication
for public routes, and an admin-only guard.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from inkpress.auth.permissions import Actor
from inkpress.auth.security import actor_from_claims, decode_access_token
from inkpress.core.context import set_actor


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


def _decode_actor(token: str) -> Actor:
    actor = actor_from_claims(decode_access_token(token))
    set_actor(actor.id, actor.role.value)
    return actor


async def get_current_actor(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Actor:
    """Get the authenticated caller.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return _decode_actor(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_optional_actor(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Actor | None:
    """Get the caller if a valid token is present, None otherwise."""
    if not token:
        return None
    try:
        return _decode_actor(token)
    except JWTError:
        return None


async def require_admin(
    actor: Annotated[Actor, Depends(get_current_actor)],
) -> Actor:
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admin privileges required.",
        )
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
OptionalActor = Annotated[Actor | None, Depends(get_optional_actor)]
AdminActor = Annotated[Actor, Depends(require_admin)]
