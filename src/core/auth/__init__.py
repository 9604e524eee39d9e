from src.core.auth.dependencies import (
    AdminUser,
    CurrentUser,
    EditorUser,
    get_current_user,
    require_roles,
)
from src.core.auth.jwt import create_access_token, decode_token
from src.core.auth.models import User, UserRole

__all__ = [
    "AdminUser",
    "CurrentUser",
    "EditorUser",
    "User",
    "UserRole",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "require_roles",
]
