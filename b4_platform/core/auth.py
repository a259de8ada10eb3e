"""Authentication dependencies for FastAPI routes.

Bearer tokens are Supabase access tokens. Admin privilege comes either from
the token role or from an ``admin`` row in ``user_roles``.
"""

from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.constants import AppRole
from b4_platform.core.database import get_async_session
from b4_platform.core.jwt import jwt_verifier
from b4_platform.repositories.user_role_repository import UserRoleRepository
from b4_platform.schemas.auth import CurrentUser
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def _authenticate(token: str) -> CurrentUser:
    try:
        claims = await jwt_verifier.verify_token(token)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    user = CurrentUser.from_claims(claims)
    user.is_admin = user.role == AppRole.ADMIN.value
    LOGGER.debug(f"Authenticated user: {user.id} ({user.email})")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _authenticate(credentials.credentials)


async def get_current_user_from_query(
    token: Annotated[Optional[str], Query(description="Access token")] = None,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Authenticate an EventSource request, which cannot send headers.

    The ``token`` query parameter wins; the Authorization header is accepted
    as a fallback.
    """
    raw_token = token or (credentials.credentials if credentials else None)
    if not raw_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _authenticate(raw_token)


async def resolve_admin(user: CurrentUser, db_session: AsyncSession) -> CurrentUser:
    """Mark the user as admin if a ``user_roles`` grant says so."""
    if not user.is_admin:
        user.is_admin = await UserRoleRepository(db_session).has_role(
            user.id, AppRole.ADMIN.value
        )
    return user


async def get_current_user_with_roles(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    db_session: Annotated[AsyncSession, Depends(get_async_session)],
) -> CurrentUser:
    return await resolve_admin(user, db_session)


async def require_admin(
    user: Annotated[CurrentUser, Depends(get_current_user_with_roles)],
) -> CurrentUser:
    """Allow only admins through.

    Raises:
        HTTPException: 403 if the user holds no admin privilege
    """
    if not user.is_admin:
        LOGGER.warning(f"Access denied for user {user.id}: admin role required")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions. Required role: admin",
        )
    return user
