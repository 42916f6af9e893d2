"""
FastAPI dependencies resolving the calling salesperson or manager.
"""

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from commissiondesk.auth.jwt import get_token_from_request, verify_token
from commissiondesk.db import get_db
from commissiondesk.models import UserProfile


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """
    Profile of the token's subject.

    The role stored on the profile wins over the role claim, so a demotion
    takes effect before old tokens expire.
    """
    token = get_token_from_request(request)
    if not token:
        raise _unauthorized("Not authenticated")

    claims = verify_token(token)
    if claims is None:
        raise _unauthorized("Invalid or expired token")

    profile = await db.get(UserProfile, claims.user_id)
    if profile is None:
        raise _unauthorized("Unknown user")

    if not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return profile


async def require_manager(
    current_user: UserProfile = Depends(get_current_user),
) -> UserProfile:
    """Managers and admins only."""
    if not current_user.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Manager access required",
        )
    return current_user
