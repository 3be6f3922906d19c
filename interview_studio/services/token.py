"""HS256 session tokens issued after a successful external sign-in.

A session token carries the recruiter's email and name plus the
revocation epoch current when it was minted (see ``SessionManager``).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import jwt, JWTError

from interview_studio.config.settings import settings

TOKEN_TYPE = "session"
RESERVED_CLAIMS = ("exp", "iat", "sub", "typ")


def create_token(claims: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a session token for the given identity claims.

    ``exp``/``iat``/``sub``/``typ`` in ``claims`` are ignored; ``sub`` is
    always the email.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = {key: value for key, value in claims.items() if key not in RESERVED_CLAIMS}
    payload["sub"] = claims.get("email")
    payload["typ"] = TOKEN_TYPE
    payload["iat"] = issued_at
    payload["exp"] = issued_at + lifetime

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify a session token and return its payload.

    Raises:
        JWTError: Bad signature, expired, or not a session token
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise JWTError("Session has expired")
    except jwt.JWTClaimsError as e:
        raise JWTError(f"Invalid session claims: {e}")
    except JWTError as e:
        raise JWTError(f"Invalid session token: {e}")

    if payload.get("typ") != TOKEN_TYPE:
        raise JWTError("Not a session token")
    return payload


def should_refresh_token(payload: dict[str, Any]) -> bool:
    """True once less than half of the token's lifetime is left."""
    expires, issued = payload.get("exp"), payload.get("iat")
    if not expires or not issued:
        return False

    remaining = expires - datetime.now(timezone.utc).timestamp()
    return remaining < (expires - issued) / 2
