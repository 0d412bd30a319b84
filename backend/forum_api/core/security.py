"""
Token authentication.

Tokens are JWTs sent in the ``x-auth-token`` header with the payload
``{"user": {"id": <user id>}}``.
"""

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Header

from forum_api.core.config import settings
from forum_api.core.exceptions import AuthenticationFailed


def create_access_token(user_id: str, expires_minutes: int | None = None) -> str:
    """Issue a signed token for a user."""
    minutes = expires_minutes or settings.jwt_access_token_expire_minutes
    payload = {
        "user": {"id": user_id},
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """
    Decode a token into the caller's user id.

    Raises:
        AuthenticationFailed: If the token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
        return str(payload["user"]["id"])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationFailed("Token has expired") from e
    except (jwt.PyJWTError, KeyError, TypeError) as e:
        raise AuthenticationFailed() from e


async def get_current_user_id(
    x_auth_token: str | None = Header(None),
) -> str:
    """FastAPI dependency resolving the authenticated caller."""
    if not x_auth_token:
        raise AuthenticationFailed("No token, authorization denied")
    return decode_access_token(x_auth_token)
