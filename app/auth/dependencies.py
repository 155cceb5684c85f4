# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, get_current_admin, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import Settings, get_settings
from app.dependencies import get_supabase_client
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url(settings: Settings) -> str:
    """Get the JWKS URL from Supabase URL."""
    # Format: https://<project-ref>.supabase.co
    supabase_url = (settings.SUPABASE_URL or "").rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks(settings: Settings) -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    # Return cached if valid
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url(settings)
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Return cached even if expired, as fallback
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str, settings: Settings) -> tuple[str | dict, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    secret = settings.SUPABASE_JWT_SECRET or ""

    # Decode header without verification to get algorithm and key ID
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return secret, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return secret, "HS256"

    # For ES256 or other algorithms, use JWKS
    if kid:
        for key in _fetch_jwks(settings).get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return secret, "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    settings: Settings = Depends(get_settings),
) -> AuthUser:
    """
    Extract and validate user from Supabase JWT token.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Validates the token hasn't expired
    4. Returns an AuthUser with the user's ID, email and metadata

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    token = credentials.credentials

    try:
        signing_key, algorithm = _get_signing_key(token, settings)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience="authenticated"
        )
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(
        id=user_uuid,
        email=payload.get("email"),
        user_metadata=payload.get("user_metadata") or {},
    )


async def get_current_admin(
    user: AuthUser = Depends(get_current_user),
    db: SupabaseClient = Depends(get_supabase_client),
) -> AuthUser:
    """
    Require an active admin_profiles row for the token's user.

    Raises:
        HTTPException: 403 if the user is not an active admin, or the check fails
    """
    try:
        is_admin = db.is_active_admin(str(user.id))
    except SupabaseClientError as e:
        logger.error(f"Admin check failed for {user.id}: {e}")
        is_admin = False

    if not is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. You do not have admin privileges.",
        )
    return user
