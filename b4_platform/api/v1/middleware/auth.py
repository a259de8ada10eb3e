"""JWT Authentication Middleware for FastAPI.

This middleware verifies the Supabase access token in the Authorization
header and attaches the user to the request state.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import jwt

from b4_platform.core.config import settings
from b4_platform.core.jwt import jwt_verifier
from b4_platform.schemas.auth import CurrentUser
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Paths that don't require authentication
EXCLUDED_PATHS = {
    "/",
    "/health",
    "/health/",
    "/docs",
    "/docs/",
    "/redoc",
    "/openapi.json",
}

# Routes that answer unauthenticated callers themselves
SELF_AUTHENTICATED_PATHS = {
    f"{settings.api_v1_prefix}/account/delete",
}

# Anonymous callers allowed; a bearer token, if sent, is still verified
OPTIONAL_AUTH_PATHS = {
    f"{settings.api_v1_prefix}/applications",
    f"{settings.api_v1_prefix}/applications/",
}

# EventSource cannot set headers, so streams take ?token=
QUERY_TOKEN_PREFIXES = (
    f"{settings.api_v1_prefix}/notifications/stream",
)


class JWTAuthenticationMiddleware(BaseHTTPMiddleware):
    """Middleware for JWT authentication.

    Verifies the Bearer token in the 'Authorization' header and populates
    request.state.user.
    """

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in EXCLUDED_PATHS or path.startswith("/health"):
            return await call_next(request)
        if path in SELF_AUTHENTICATED_PATHS:
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        token = None

        if auth_header:
            if not auth_header.startswith("Bearer "):
                LOGGER.warning(f"Invalid Authorization header format for {path}")
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"detail": "Invalid authentication scheme. Use Bearer token."},
                    headers={"WWW-Authenticate": "Bearer"},
                )
            token = auth_header.split(" ", 1)[1]
        elif path.startswith(QUERY_TOKEN_PREFIXES):
            token = request.query_params.get("token")

        if not token:
            if path in OPTIONAL_AUTH_PATHS:
                return await call_next(request)
            LOGGER.warning(f"Missing authentication for {path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Authentication required"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            claims = await jwt_verifier.verify_token(token)
            request.state.user = CurrentUser.from_claims(claims)
            LOGGER.debug(f"Authenticated user {claims.sub} via middleware")
        except jwt.InvalidTokenError as e:
            LOGGER.warning(f"Invalid token for {path}: {e}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid authentication token"},
                headers={"WWW-Authenticate": "Bearer"},
            )

        return await call_next(request)
