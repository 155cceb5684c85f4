# =============================================================================
# app/routers/checkout.py - Checkout Session Endpoint
# =============================================================================
# POST /create-checkout-session
# Creates a Stripe Checkout Session for a plan and returns its hosted URL.
# =============================================================================

from fastapi import APIRouter, Depends, Request

from app.dependencies import SUPABASE_SERVICE_KEYS, SettingsDep, StripeDep, SupabaseDep, require_env
from core.models.checkout import CheckoutRequest, CheckoutResponse
from core.services.checkout_service import CheckoutService

router = APIRouter()


@router.post(
    "/create-checkout-session",
    response_model=CheckoutResponse,
    dependencies=[Depends(require_env("STRIPE_SECRET_KEY", *SUPABASE_SERVICE_KEYS))],
)
async def create_checkout_session(
    body: CheckoutRequest,
    request: Request,
    db: SupabaseDep,
    stripe_client: StripeDep,
    settings: SettingsDep,
):
    """
    Create a subscription Checkout Session.

    The profile and Stripe customer are found or created by email first.
    The success URL points back at /success/<plan> on this deploy's origin.
    """
    return CheckoutService.create_session(body, db, stripe_client, settings, request.headers)
