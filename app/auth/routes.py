# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations:
# - POST /auth/magic-link   send a passwordless login link (60s cooldown)
# - POST /auth/admin-login  password sign-in for active admins
# - GET  /auth/me           member-area user for the current token
# - GET  /auth/verify       token check
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request, Response

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, MeResponse
from app.dependencies import (
    AuthClientDep,
    CooldownsDep,
    PreferencesDep,
    SettingsDep,
    SupabaseDep,
    require_env,
    set_preference_cookies,
)
from app.exceptions import LoginFailedError
from core.models.pages import AdminLoginRequest, AdminLoginResponse, MagicLinkRequest, MagicLinkResponse
from core.services.checkout_service import resolve_base_url
from core.services.identity_service import IdentityProvider
from core.services.login_flow import LoginFlow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/magic-link",
    response_model=MagicLinkResponse,
    dependencies=[Depends(require_env("SUPABASE_URL", "SUPABASE_ANON_KEY"))],
)
async def send_magic_link(
    body: MagicLinkRequest,
    request: Request,
    response: Response,
    db: AuthClientDep,
    cooldowns: CooldownsDep,
    preferences: PreferencesDep,
    settings: SettingsDep,
) -> MagicLinkResponse:
    """
    Send a login link to an existing member.

    Raises:
        429: While the cooldown for this email is running
        400: If the provider refuses (unknown member)
    """
    cooldown = cooldowns.get(body.email)
    cooldown.check()

    provider = IdentityProvider(db, redirect_origin=resolve_base_url(request.headers, settings))
    flow = LoginFlow(provider.login, preferences, cooldown)

    if flow.submit(body.email) != "confirmed":
        raise LoginFailedError(flow.error or "Unable to send a login link")

    set_preference_cookies(response, preferences, settings)
    return MagicLinkResponse(
        status="sent",
        message=f"We just sent a magic link to {body.email}. Check your inbox.",
        cooldown_seconds=cooldown.remaining(),
    )


@router.post(
    "/admin-login",
    response_model=AdminLoginResponse,
    dependencies=[Depends(require_env("SUPABASE_URL", "SUPABASE_ANON_KEY"))],
)
async def admin_login(body: AdminLoginRequest, db: AuthClientDep) -> AdminLoginResponse:
    """Password sign-in; succeeds only for accounts with an active admin profile."""
    provider = IdentityProvider(db)
    result = provider.admin_login(body.email, body.password)

    if not result.get("success"):
        return AdminLoginResponse(success=False, error=result.get("error"))

    token = getattr(provider.session, "access_token", None)
    logger.info(f"Admin signed in: {body.email}")
    return AdminLoginResponse(success=True, access_token=token)


@router.get(
    "/me",
    response_model=MeResponse,
    dependencies=[Depends(require_env("SUPABASE_URL", "SUPABASE_SERVICE_ROLE_KEY"))],
)
async def get_current_user_info(
    db: SupabaseDep,
    user: AuthUser = Depends(get_current_user),
) -> MeResponse:
    """
    Get the member-area user for the current token.

    Admin and membership lookups that fail are logged and leave the user as
    a plain member.
    """
    app_user, is_admin = IdentityProvider(db).resolve_user(user)
    return MeResponse(user=app_user, is_admin=is_admin)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email,
    }
