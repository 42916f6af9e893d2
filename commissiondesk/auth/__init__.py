"""Authentication module."""

from commissiondesk.auth.dependencies import get_current_user, require_manager
from commissiondesk.auth.jwt import create_access_token, verify_token

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_user",
    "require_manager",
]
