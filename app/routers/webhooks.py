# =============================================================================
# app/routers/webhooks.py - Stripe Webhook Endpoint
# =============================================================================
# POST /stripe-webhook
# Verifies the Stripe signature over the raw body, then hands the event to
# WebhookService. Events already recorded are acknowledged without
# re-processing.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Request

from app.dependencies import SUPABASE_SERVICE_KEYS, SettingsDep, StripeDep, SupabaseDep, require_env
from app.exceptions import MembershipException
from core.services.webhook_service import WebhookService
from lib.stripe_client import StripeClient, WebhookSignatureError

logger = logging.getLogger(__name__)

router = APIRouter()


class WebhookSignatureRejected(MembershipException):
    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_SIGNATURE", status_code=400)


@router.post(
    "/stripe-webhook",
    dependencies=[Depends(require_env("STRIPE_SECRET_KEY", "STRIPE_WEBHOOK_SECRET", *SUPABASE_SERVICE_KEYS))],
)
async def stripe_webhook(
    request: Request,
    db: SupabaseDep,
    stripe_client: StripeDep,
    settings: SettingsDep,
) -> dict:
    """
    Receive a Stripe event.

    Raises:
        400: Missing or invalid stripe-signature header
        500: WEBHOOK_FAILED when a handler step fails
    """
    signature = request.headers.get("stripe-signature")
    if not signature:
        raise WebhookSignatureRejected("Missing stripe-signature header")

    payload = await request.body()
    try:
        event = StripeClient.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except WebhookSignatureError as e:
        logger.warning(f"[webhook] {e.message}")
        raise WebhookSignatureRejected("Invalid signature")

    return WebhookService(db, stripe_client, settings).process(event)
