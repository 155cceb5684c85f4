# =============================================================================
# core/services/webhook_service.py - Stripe Webhook Processing
# =============================================================================
# Applies verified Stripe events to the membership tables.
#
# Event flow:
#   verify signature -> skip if already processed -> dispatch by type
#   -> mark processed
#
# Handled events:
# - checkout.session.completed      : provision auth user, profile, membership
# - customer.subscription.created   : upsert subscription + membership
# - customer.subscription.updated   : upsert subscription + membership
# - customer.subscription.deleted   : mark canceled
# - invoice.payment_succeeded       : mark active, record invoice
# - invoice.payment_failed          : mark past_due, record invoice
# - payment_method.attached         : store card brand / last4 on the profile
# =============================================================================

import logging
from typing import Any, Callable

from app.config import Settings
from app.exceptions import UpstreamError
from core.models.plan import PLAN_TO_TIER, Plan, parse_plan
from lib.stripe_client import StripeClient, StripeClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import from_unix, iso_days_ago, utc_now

logger = logging.getLogger(__name__)

# Assessments older than this are not linked to a new member
ASSESSMENT_BACKFILL_HOURS = 48

DEFAULT_TIER = "Bronze"


def _object_id(value: Any) -> str | None:
    """Stripe fields may hold an id or an expanded object."""
    if isinstance(value, dict):
        return value.get("id")
    return value


def _first_price(subscription: dict[str, Any]) -> dict[str, Any]:
    items = (subscription.get("items") or {}).get("data") or []
    return (items[0].get("price") or {}) if items else {}


class WebhookService:
    """
    Applies Stripe events to Supabase.

    Example:
        service = WebhookService(db, stripe_client, settings)
        service.process(event)
    """

    def __init__(self, db: SupabaseClient, stripe_client: StripeClient, settings: Settings):
        self.db = db
        self.stripe = stripe_client
        self.settings = settings
        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "checkout.session.completed": self.handle_checkout_completed,
            "customer.subscription.created": self.handle_subscription_changed,
            "customer.subscription.updated": self.handle_subscription_changed,
            "customer.subscription.deleted": self.handle_subscription_deleted,
            "invoice.payment_succeeded": self.handle_invoice_succeeded,
            "invoice.payment_failed": self.handle_invoice_failed,
            "payment_method.attached": self.handle_payment_method_attached,
        }

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def process(self, event: dict[str, Any]) -> dict[str, Any]:
        """
        Process one verified event exactly once.

        Args:
            event: Parsed Stripe event (id, type, data.object)

        Returns:
            {"received": True} plus a note when the event was a duplicate

        Raises:
            UpstreamError: WEBHOOK_FAILED if any handler step fails
        """
        event_id = event.get("id")
        event_type = event.get("type", "")

        try:
            if event_id and self.db.is_event_processed(event_id):
                logger.info(f"[webhook] event {event_id} already processed")
                return {"received": True, "message": "Already processed"}

            logger.info(f"[webhook] processing {event_type} ({event_id})")
            handler = self._handlers.get(event_type)
            if handler is None:
                logger.info(f"[webhook] unhandled event type {event_type}")
            else:
                handler((event.get("data") or {}).get("object") or {})

            if event_id:
                self.db.mark_event_processed(event_id, event_type)

        except (SupabaseClientError, StripeClientError) as e:
            logger.error(f"[webhook] {event_type} ({event_id}) failed: {e}")
            raise UpstreamError("WEBHOOK_FAILED", "Webhook handling failed")

        return {"received": True}

    # -------------------------------------------------------------------------
    # Tier mapping
    # -------------------------------------------------------------------------

    def tier_for_price(self, price_id: str | None, metadata: dict[str, Any] | None = None) -> str:
        """
        Display tier for a price id.

        An explicit plan in the session metadata wins; otherwise the price is
        matched against the configured plan prices. Unknown prices map to
        Bronze.
        """
        plan = parse_plan((metadata or {}).get("plan") or (metadata or {}).get("tier"))
        if plan is not None:
            return PLAN_TO_TIER[plan]

        if price_id:
            for candidate in Plan:
                if self.settings.price_for_plan(candidate.value) == price_id:
                    return PLAN_TO_TIER[candidate]
            logger.warning(f"[webhook] unknown price id {price_id}, defaulting to {DEFAULT_TIER}")
        return DEFAULT_TIER

    # -------------------------------------------------------------------------
    # Row builders
    # -------------------------------------------------------------------------

    def subscription_row(self, profile_id: str, subscription: dict[str, Any]) -> dict[str, Any]:
        price = _first_price(subscription)
        return {
            "profile_id": profile_id,
            "stripe_subscription_id": subscription.get("id"),
            "stripe_customer_id": _object_id(subscription.get("customer")),
            "status": subscription.get("status"),
            "tier": self.tier_for_price(price.get("id"), subscription.get("metadata")),
            "unit_amount_cents": price.get("unit_amount") or 0,
            "billing_cycle": (price.get("recurring") or {}).get("interval") or "month",
            "current_period_start": from_unix(subscription.get("current_period_start")),
            "current_period_end": from_unix(subscription.get("current_period_end")),
            "cancel_at_period_end": bool(subscription.get("cancel_at_period_end")),
            "canceled_at": from_unix(subscription.get("canceled_at")),
            "trial_start": from_unix(subscription.get("trial_start")),
            "trial_end": from_unix(subscription.get("trial_end")),
            "updated_at": utc_now().isoformat(),
        }

    @staticmethod
    def invoice_row(profile_id: str, invoice: dict[str, Any]) -> dict[str, Any]:
        transitions = invoice.get("status_transitions") or {}
        return {
            "profile_id": profile_id,
            "stripe_invoice_id": invoice.get("id"),
            "subscription_stripe_id": _object_id(invoice.get("subscription")),
            "amount_cents": invoice.get("amount_paid") or 0,
            "amount_due_cents": invoice.get("amount_due") or 0,
            "currency": invoice.get("currency") or "usd",
            "status": invoice.get("status") or "draft",
            "hosted_invoice_url": invoice.get("hosted_invoice_url"),
            "pdf_url": invoice.get("invoice_pdf"),
            "invoice_date": from_unix(invoice.get("created")),
            "due_date": from_unix(invoice.get("due_date")),
            "paid_at": from_unix(transitions.get("paid_at")),
        }

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def handle_checkout_completed(self, session: dict[str, Any]) -> None:
        """
        Provision a member after a completed checkout.

        Steps:
            1. Resolve or create the auth user for the payer email
            2. Link the latest assessment (last 48 hours) to the profile
            3. Retrieve the subscription for its price and status
            4. Upsert the profile, membership and subscription rows
        """
        details = session.get("customer_details") or {}
        metadata = session.get("metadata") or {}
        email = details.get("email") or session.get("customer_email") or metadata.get("email_entered")
        if not email:
            logger.error(f"[webhook] checkout session {session.get('id')} has no email")
            return
        email = email.strip().lower()

        subscription_id = _object_id(session.get("subscription"))
        if not subscription_id:
            logger.error(f"[webhook] checkout session {session.get('id')} has no subscription")
            return

        customer_id = _object_id(session.get("customer"))

        user = self.db.find_auth_user_by_email(email) or self.db.create_auth_user(email, {"source": "stripe"})
        if user is None:
            # Created concurrently; look it up again
            user = self.db.find_auth_user_by_email(email)
        if user is None:
            raise SupabaseClientError(f"Could not resolve auth user for {email}", code="RESOLVE_USER_FAILED")
        user_id = user["id"]

        since = iso_days_ago(ASSESSMENT_BACKFILL_HOURS // 24)
        assessment = self.db.fetch_latest_assessment(email, since)
        if assessment:
            self.db.link_assessment_to_profile(assessment["id"], user_id)
        else:
            logger.warning(f"[webhook] no assessment for {email} within {ASSESSMENT_BACKFILL_HOURS}h")

        subscription = self.stripe.retrieve_subscription(subscription_id)
        tier = self.tier_for_price(_first_price(subscription).get("id"), metadata)

        existing = self.db.fetch_profile(user_id)
        profile = {
            "id": user_id,
            "email": email,
            "stripe_customer_id": customer_id,
            "membership_tier": tier,
            "updated_at": utc_now().isoformat(),
        }
        if not (existing or {}).get("verification_status"):
            profile["verification_status"] = "pending"
        self.db.upsert_profile(profile)

        membership = {
            "profile_id": user_id,
            "tier": tier,
            "status": "active",
            "activated_at": utc_now().isoformat(),
        }
        if assessment:
            membership["assessment_id"] = assessment["id"]
        self.db.upsert_membership(membership)

        self.db.upsert_subscription(self.subscription_row(user_id, subscription))
        logger.info(f"[webhook] provisioned {email} as {tier} (profile {user_id})")

    def handle_subscription_changed(self, subscription: dict[str, Any]) -> None:
        customer_id = _object_id(subscription.get("customer"))
        profile = self.db.fetch_profile_by_customer(customer_id) if customer_id else None
        if profile is None:
            logger.warning(f"[webhook] no profile for customer {customer_id}")
            return

        row = self.subscription_row(profile["id"], subscription)
        self.db.upsert_subscription(row)
        self.db.upsert_membership({
            "profile_id": profile["id"],
            "tier": row["tier"],
            "status": "active" if subscription.get("status") == "active" else "inactive",
        })

    def handle_subscription_deleted(self, subscription: dict[str, Any]) -> None:
        subscription_id = subscription.get("id")
        self.db.update_subscription_status(subscription_id, "canceled")

        record = self.db.fetch_subscription_by_stripe_id(subscription_id)
        if record and record.get("profile_id"):
            self.db.upsert_membership({
                "profile_id": record["profile_id"],
                "tier": record.get("tier") or DEFAULT_TIER,
                "status": "inactive",
            })
        logger.info(f"[webhook] canceled subscription {subscription_id}")

    def _handle_invoice(self, invoice: dict[str, Any], status: str) -> None:
        subscription_id = _object_id(invoice.get("subscription"))
        if not subscription_id:
            logger.info(f"[webhook] invoice {invoice.get('id')} has no subscription")
            return

        record = self.db.fetch_subscription_by_stripe_id(subscription_id)
        self.db.update_subscription_status(subscription_id, status)
        if record and record.get("profile_id"):
            self.db.insert_invoice(self.invoice_row(record["profile_id"], invoice))

    def handle_invoice_succeeded(self, invoice: dict[str, Any]) -> None:
        self._handle_invoice(invoice, "active")

    def handle_invoice_failed(self, invoice: dict[str, Any]) -> None:
        self._handle_invoice(invoice, "past_due")

    def handle_payment_method_attached(self, payment_method: dict[str, Any]) -> None:
        customer_id = _object_id(payment_method.get("customer"))
        if not customer_id:
            logger.warning(f"[webhook] payment method {payment_method.get('id')} has no customer")
            return

        profile = self.db.fetch_profile_by_customer(customer_id)
        card = payment_method.get("card")
        if profile is None or payment_method.get("type") != "card" or not card:
            return

        self.db.update_profile(profile["id"], {
            "payment_method_brand": card.get("brand"),
            "payment_method_last4": card.get("last4"),
            "payment_method_exp_month": card.get("exp_month"),
            "payment_method_exp_year": card.get("exp_year"),
        })
