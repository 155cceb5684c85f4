# =============================================================================
# core/services/checkout_service.py - Checkout Session Creation
# =============================================================================
# Turns a plan (or explicit price id) and an email into a hosted Stripe
# Checkout URL:
#   1. resolve the price id and the site base URL
#   2. find-or-create the profile by email
#   3. find-or-create the Stripe customer and remember it on the profile
#   4. create a subscription-mode Checkout Session
# =============================================================================

import logging
from typing import Any, Mapping

from app.config import BASE_URL_ENV_CHAIN, PLAN_PRICE_ENV, Settings
from app.exceptions import ConfigurationError, RequestValidationFailed, UpstreamError
from core.models.checkout import CheckoutRequest, CheckoutResponse
from core.models.plan import Plan
from lib.stripe_client import StripeClient, StripeClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


def resolve_base_url(headers: Mapping[str, str], settings: Settings) -> str:
    """
    Work out the public base URL for success/cancel redirects.

    Prefers the request's own origin (honouring proxy headers), then the
    deployment URL variables in order.

    Args:
        headers: Request headers (case-insensitive mapping)
        settings: Application settings

    Returns:
        Base URL without a trailing slash

    Raises:
        ConfigurationError: MISSING_BASE_URL when nothing is available
    """
    host = headers.get("x-forwarded-host") or headers.get("host")
    if host:
        proto = headers.get("x-forwarded-proto") or ("http" if host.startswith(("localhost", "127.0.0.1")) else "https")
        # Proxies may send a comma-separated chain; the first hop is the client-facing one
        proto = proto.split(",")[0].strip()
        host = host.split(",")[0].strip()
        return f"{proto}://{host}".rstrip("/")

    for env_name in BASE_URL_ENV_CHAIN:
        value = getattr(settings, env_name)
        if value and value.strip():
            return value.strip().rstrip("/")

    raise ConfigurationError(list(BASE_URL_ENV_CHAIN), code="MISSING_BASE_URL")


class CheckoutService:
    """
    Service for creating Stripe Checkout Sessions.
    """

    @staticmethod
    def resolve_price(request: CheckoutRequest, settings: Settings) -> str:
        """
        Pick the Stripe price id for a checkout request.

        Raises:
            RequestValidationFailed: Neither plan nor price id given
            ConfigurationError: MISSING_PRICE_ID when the plan has no price configured
        """
        if request.price_id:
            return request.price_id
        if request.plan is None:
            raise RequestValidationFailed([
                {"field": "plan", "message": "plan or price_id is required"}
            ])

        price_id = settings.price_for_plan(request.plan.value)
        if not price_id:
            raise ConfigurationError([PLAN_PRICE_ENV[request.plan.value]], code="MISSING_PRICE_ID")
        return price_id

    @staticmethod
    def find_or_create_profile(db: SupabaseClient, email: str) -> dict[str, Any]:
        """Return the profile for an email, creating an empty one if needed."""
        profile = db.fetch_profile_by_email(email)
        if profile:
            return profile
        return db.insert_profile({"email": email})

    @staticmethod
    def find_or_create_customer(
        db: SupabaseClient,
        stripe_client: StripeClient,
        profile: dict[str, Any],
        email: str,
    ) -> str:
        """
        Return the Stripe customer id for a profile.

        Uses the id stored on the profile, then a Stripe lookup by email, then
        creates a customer. A newly found or created id is written back.
        """
        customer_id = profile.get("stripe_customer_id")
        if customer_id:
            return customer_id

        customer = stripe_client.find_customer_by_email(email)
        if customer is None:
            customer = stripe_client.create_customer(email, {"profile_id": str(profile.get("id") or "")})

        customer_id = customer["id"]
        db.update_profile(profile["id"], {"stripe_customer_id": customer_id})
        return customer_id

    @staticmethod
    def create_session(
        request: CheckoutRequest,
        db: SupabaseClient,
        stripe_client: StripeClient,
        settings: Settings,
        headers: Mapping[str, str],
    ) -> CheckoutResponse:
        """
        Create a subscription-mode Checkout Session.

        Args:
            request: Validated checkout request
            db: Supabase wrapper (service role)
            stripe_client: Stripe wrapper
            settings: Application settings (prices, fallback URLs)
            headers: Incoming request headers, used for the origin

        Returns:
            CheckoutResponse with the hosted redirect URL

        Raises:
            ConfigurationError: Missing price id or base URL
            UpstreamError: CHECKOUT_CREATE_FAILED if Stripe or Supabase fails
        """
        price_id = CheckoutService.resolve_price(request, settings)
        base_url = resolve_base_url(headers, settings)
        plan = request.plan or Plan.FOUNDING_MEMBER

        try:
            profile = CheckoutService.find_or_create_profile(db, request.email)
            customer_id = CheckoutService.find_or_create_customer(db, stripe_client, profile, request.email)

            profile_id = request.profile_id or str(profile["id"])
            metadata = {
                "email_entered": request.email,
                "plan": plan.value,
                "assessment_id": request.assessment_id or "",
                "profile_id": profile_id,
            }

            session = stripe_client.create_checkout_session(
                mode="subscription",
                customer=customer_id,
                line_items=[{"price": price_id, "quantity": 1}],
                success_url=f"{base_url}/success/{plan.value}?checkout=success&session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{base_url}/results?checkout=cancelled",
                client_reference_id=profile_id,
                allow_promotion_codes=True,
                metadata=metadata,
                subscription_data={"metadata": metadata},
            )

        except (SupabaseClientError, StripeClientError) as e:
            logger.error(f"[checkout] create_session failed for {request.email}: {e}")
            raise UpstreamError("CHECKOUT_CREATE_FAILED", "Failed to create checkout session")

        url = session.get("url")
        if not url:
            logger.error(f"[checkout] session {session.get('id')} returned no url")
            raise UpstreamError("CHECKOUT_CREATE_FAILED", "Checkout session did not return a redirect URL")

        logger.info(f"[checkout] created session {session.get('id')} for {request.email} plan={plan.value}")
        return CheckoutResponse(url=url, session_id=session.get("id"))
