"""RS256 validation of tokens issued by the external identity provider.

The provider signs with its private key; we only hold the public half,
read once from ``SSO_PUBLIC_KEY_PATH``. Only the email claim matters to
this app: the recruiter's identity and company are derived from it.
"""

from pathlib import Path
from typing import Any, Optional

import structlog
from jose import jwt, JWTError

from interview_studio.config.settings import settings

logger = structlog.get_logger()

_public_keys: dict[str, str] = {}


def load_public_key(path: Optional[str] = None) -> Optional[str]:
    """Read (and cache per path) the provider's PEM public key."""
    path = path or settings.SSO_PUBLIC_KEY_PATH
    if not path:
        logger.warning("SSO_PUBLIC_KEY_PATH not configured")
        return None

    if path not in _public_keys:
        key_path = Path(path)
        if not key_path.exists():
            logger.error("SSO public key file not found", path=str(key_path))
            return None
        _public_keys[path] = key_path.read_text()
        logger.info("Loaded SSO public key", path=str(key_path))
    return _public_keys[path]


def display_name(payload: dict[str, Any]) -> Optional[str]:
    """``name``, else given + family name, else None."""
    if payload.get("name"):
        return payload["name"]
    parts = [payload.get("given_name"), payload.get("family_name")]
    joined = " ".join(p for p in parts if p)
    return joined or None


def validate_sso_token(token: str, public_key: Optional[str] = None) -> dict[str, Any]:
    """
    Verify a provider token and return its identity claims.

    Returns:
        ``{"email": ..., "name": ...}`` with the email as issued

    Raises:
        JWTError: Bad signature, wrong audience or issuer, expired, or no email
    """
    public_key = public_key or load_public_key()
    if not public_key:
        raise JWTError("SSO public key not configured")

    try:
        payload = jwt.decode(
            token,
            public_key,
            algorithms=["RS256"],
            audience=settings.SSO_APP_ID,
            issuer=settings.SSO_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        logger.warning("SSO token expired")
        raise JWTError("SSO token has expired")
    except jwt.JWTClaimsError as e:
        logger.warning("SSO token claims invalid", error=str(e))
        raise JWTError(f"Invalid SSO token claims: {e}")
    except JWTError as e:
        logger.warning("SSO token validation failed", error=str(e))
        raise JWTError(f"Invalid SSO token: {e}")

    email = payload.get("email")
    if not email:
        raise JWTError("Missing required claim: email")

    logger.debug("SSO token validated", email=email)
    return {"email": email, "name": display_name(payload)}
