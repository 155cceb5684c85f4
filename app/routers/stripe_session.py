# =============================================================================
# app/routers/stripe_session.py - Checkout Session Lookups
# =============================================================================
# Read-only views of a completed Checkout Session for the landing page:
# - GET /stripe-session-email   payer email only
# - GET /stripe-session         email, plan and linked ids
# - GET /success-summary        the above plus business / contact names
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.dependencies import SUPABASE_SERVICE_KEYS, StripeDep, SupabaseDep, require_env
from core.models.checkout import StripeSessionDetails, StripeSessionEmail, SuccessSummary
from core.services.stripe_session_service import StripeSessionService

router = APIRouter()

SessionIdQuery = Annotated[str, Query(min_length=1, description="Stripe Checkout Session id")]


@router.get(
    "/stripe-session-email",
    response_model=StripeSessionEmail,
    dependencies=[Depends(require_env("STRIPE_SECRET_KEY"))],
)
async def get_stripe_session_email(session_id: SessionIdQuery, stripe_client: StripeDep):
    """
    Return the payer email for a Checkout Session.

    Raises:
        404: If the session carries no email
    """
    return StripeSessionService.get_email(stripe_client, session_id.strip())


@router.get(
    "/stripe-session",
    response_model=StripeSessionDetails,
    dependencies=[Depends(require_env("STRIPE_SECRET_KEY"))],
)
async def get_stripe_session(session_id: SessionIdQuery, stripe_client: StripeDep):
    return StripeSessionService.get_details(stripe_client, session_id.strip())


@router.get(
    "/success-summary",
    response_model=SuccessSummary,
    dependencies=[Depends(require_env("STRIPE_SECRET_KEY", *SUPABASE_SERVICE_KEYS))],
)
async def get_success_summary(session_id: SessionIdQuery, stripe_client: StripeDep, db: SupabaseDep):
    """Session details plus the business and contact names for the buyer."""
    return StripeSessionService.get_summary(stripe_client, db, session_id.strip())
