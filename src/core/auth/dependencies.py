from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth.jwt import decode_token
from src.core.auth.models import User, UserRole
from src.core.database import get_db
from src.core.exceptions import AuthenticationError, AuthorizationError

BEARER = "Bearer "


def _bearer_token(authorization: str | None) -> str:
    if not authorization:
        raise AuthenticationError("Authorization header required")
    if not authorization.startswith(BEARER):
        raise AuthenticationError("Invalid authorization header format")
    return authorization[len(BEARER):].strip()


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve ``Authorization: Bearer <token>`` to an active user."""
    claims = decode_token(_bearer_token(authorization))
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token subject")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the current user must hold one of ``roles``."""

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise AuthorizationError(f"Required role: {', '.join(r.value for r in roles)}")
        return current_user

    return role_checker


CurrentUser = Annotated[User, Depends(get_current_user)]
EditorUser = Annotated[User, Depends(require_roles(UserRole.ADMIN, UserRole.EDITOR))]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
