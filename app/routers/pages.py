# =============================================================================
# app/routers/pages.py - Login & Post-Payment Page Endpoints
# =============================================================================
# Page models for the two screens a buyer sees around checkout:
# - GET  /login             checkout-return handling (?checkout=success|cancelled)
# - GET  /success/{plan}    post-payment page; sends one login link
# - GET  /success           same, plan from the visitor's last plan
# - POST /success/resend    re-send / change email under the cooldown
#
# The success page is composed inside an error boundary: any failure returns
# a minimal fallback body instead of an error.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request, Response

from app.config import Settings
from app.dependencies import (
    SUPABASE_AUTH_KEYS,
    SUPABASE_SERVICE_KEYS,
    AuthClientDep,
    CooldownsDep,
    PreferencesDep,
    SettingsDep,
    get_auth_client,
    get_stripe_client,
    get_supabase_client,
    require_env,
    set_preference_cookies,
)
from app.exceptions import LoginFailedError, MembershipException
from core.models.pages import LoginPageState, MagicLinkResponse, ResendRequest, SuccessFallback, SuccessPage
from core.services.checkout_service import resolve_base_url
from core.services.identity_service import IdentityProvider
from core.services.login_flow import CooldownRegistry, handle_checkout_return
from core.services.stripe_session_service import StripeSessionService
from core.services.success_flow import SuccessFlow
from lib.preferences import PreferenceStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/login", response_model=LoginPageState, response_model_exclude_none=True)
async def login_page(
    response: Response,
    preferences: PreferencesDep,
    settings: SettingsDep,
    checkout: str | None = None,
):
    """Resolve where a visitor returning from Stripe Checkout should go."""
    state = handle_checkout_return(checkout, preferences)
    set_preference_cookies(response, preferences, settings)
    return state


# =============================================================================
# Success Page
# =============================================================================

def _compose_success_page(
    plan_segment: str | None,
    session_id: str | None,
    request: Request,
    response: Response,
    preferences: PreferenceStore,
    cooldowns: CooldownRegistry,
    settings: Settings,
) -> SuccessPage:
    business_name = None
    contact_name = None
    session_email = None

    if session_id and not settings.missing("STRIPE_SECRET_KEY", *SUPABASE_SERVICE_KEYS):
        try:
            summary = StripeSessionService.get_summary(
                get_stripe_client(settings), get_supabase_client(settings), session_id
            )
            session_email = summary.email
            business_name = summary.business_name
            contact_name = summary.contact_name
        except MembershipException as e:
            logger.warning(f"[success] summary lookup failed for {session_id}: {e.message}")

    if settings.missing(*SUPABASE_AUTH_KEYS):
        def send_link(email: str) -> None:
            raise LoginFailedError("Login links are not configured for this deploy.")
    else:
        provider = IdentityProvider(
            get_auth_client(settings), redirect_origin=resolve_base_url(request.headers, settings)
        )
        send_link = provider.login

    flow = SuccessFlow(
        plan_segment,
        session_id,
        login=send_link,
        preferences=preferences,
        email_lookup=lambda _: session_email,
    )
    if flow.email:
        flow.cooldown = cooldowns.get(flow.email)
        # One automatic send per cooldown window
        if not flow.cooldown.active:
            flow.auto_send()

    preferences.remember_plan(flow.plan.value)
    set_preference_cookies(response, preferences, settings)
    return flow.page(business_name=business_name, contact_name=contact_name)


async def _success_page_or_fallback(
    plan_segment: str | None,
    session_id: str | None,
    request: Request,
    response: Response,
    preferences: PreferenceStore,
    cooldowns: CooldownRegistry,
    settings: Settings,
) -> SuccessPage | SuccessFallback:
    try:
        return _compose_success_page(
            plan_segment, session_id, request, response, preferences, cooldowns, settings
        )
    except Exception as e:
        logger.exception(f"[success] page composition failed (plan={plan_segment}, session={session_id})")
        return SuccessFallback(debug=str(e) if settings.DEBUG else None)


@router.get("/success/{plan}", response_model=SuccessPage | SuccessFallback)
async def success_page_for_plan(
    plan: str,
    request: Request,
    response: Response,
    preferences: PreferencesDep,
    cooldowns: CooldownsDep,
    settings: SettingsDep,
    session_id: str | None = None,
):
    """
    Post-payment page for a plan.

    Unknown plan values show the founding-member content.
    """
    return await _success_page_or_fallback(
        plan, session_id, request, response, preferences, cooldowns, settings
    )


@router.get("/success", response_model=SuccessPage | SuccessFallback)
async def success_page(
    request: Request,
    response: Response,
    preferences: PreferencesDep,
    cooldowns: CooldownsDep,
    settings: SettingsDep,
    session_id: str | None = None,
):
    """Post-payment page without a plan segment; `redirect` points at the canonical URL."""
    return await _success_page_or_fallback(
        None, session_id, request, response, preferences, cooldowns, settings
    )


@router.post(
    "/success/resend",
    response_model=MagicLinkResponse,
    dependencies=[Depends(require_env(*SUPABASE_AUTH_KEYS))],
)
async def resend_login_link(
    body: ResendRequest,
    request: Request,
    response: Response,
    db: AuthClientDep,
    preferences: PreferencesDep,
    cooldowns: CooldownsDep,
    settings: SettingsDep,
):
    """
    Send the login link again, optionally to a different email.

    Raises:
        429: While the cooldown for this email is running
        400: If the link could not be sent
    """
    provider = IdentityProvider(db, redirect_origin=resolve_base_url(request.headers, settings))
    flow = SuccessFlow(
        None,
        body.session_id,
        login=provider.login,
        preferences=preferences,
        cooldown=cooldowns.get(body.email),
    )

    if flow.update_email(body.email) != "sent":
        raise LoginFailedError(flow.message)

    set_preference_cookies(response, preferences, settings)
    return MagicLinkResponse(
        status=flow.status,
        message=flow.message,
        cooldown_seconds=flow.cooldown.remaining(),
    )
