"""
Request dependencies shared by the API routers.

``get_current_user`` resolves the bearer token to an active ``User`` row;
``require_roles`` narrows that to a set of roles.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.services.security import InvalidTokenError, decode_access_token, extract_bearer_token

logger = get_logger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Authenticate the caller from ``Authorization: Bearer <token>``."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise _unauthorized("Unauthorized: No token provided")

    try:
        payload = decode_access_token(token)
    except InvalidTokenError:
        raise _unauthorized("Unauthorized: Invalid token")

    user = await session.get(User, payload.user_id)
    if user is None or not user.is_active:
        logger.info(f"[AUTH] Token for missing or inactive user {payload.user_id}")
        raise _unauthorized("Unauthorized: Invalid token")
    return user


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory allowing only callers whose role is in ``roles``."""
    allowed = set(roles)

    async def _checker(user: User = Depends(get_current_user)) -> User:
        if UserRole(user.role) not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden: Insufficient permissions",
            )
        return user

    return _checker


require_admin = require_roles(UserRole.ADMIN)
require_trader = require_roles(UserRole.TRADER)
require_partner = require_roles(UserRole.LOGISTICS_PARTNER)
