from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.core.config import settings
from src.core.exceptions import AuthenticationError

ACCESS = "access"


def create_access_token(user_id: int, role: str, expires_minutes: int | None = None) -> str:
    """
    Sign an access token the way the identity provider does.

    Only local tooling and tests mint tokens; the API never issues them.
    """
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "role": role,
        "type": ACCESS,
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, token_type: str = ACCESS) -> dict[str, Any]:
    """
    Verify signature, expiry and token type; return the claims.

    Raises:
        AuthenticationError: the token cannot be trusted.
    """
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {e}")

    if claims.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type, expected {token_type}")
    return claims
