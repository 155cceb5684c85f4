# =============================================================================
# core/services/stripe_session_service.py - Checkout Session Read-backs
# =============================================================================
# Reads a completed Checkout Session back from Stripe for the post-payment
# page: the payer email, the plan, and the names stored for the buyer.
# =============================================================================

import logging
import re
from typing import Any

from app.exceptions import MembershipException, UpstreamError
from core.models.checkout import StripeSessionDetails, StripeSessionEmail, SuccessSummary
from lib.stripe_client import StripeClient, StripeClientError
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

_SUCCESS_PLAN_PATTERN = re.compile(r"/success/([^?]+)")


class SessionEmailNotFound(MembershipException):
    """Raised when a Checkout Session carries no payer email."""

    def __init__(self, session_id: str):
        super().__init__(
            message="No email found in session",
            code="EMAIL_NOT_FOUND",
            status_code=404,
            details={"session_id": session_id},
        )

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


def _customer_email(session: dict[str, Any]) -> str | None:
    customer = session.get("customer")
    if isinstance(customer, dict):
        return customer.get("email")
    return None


def session_email(session: dict[str, Any]) -> str | None:
    """Payer email: customer_details.email, then the expanded customer, then metadata."""
    details = session.get("customer_details") or {}
    metadata = session.get("metadata") or {}
    return (
        details.get("email")
        or _customer_email(session)
        or metadata.get("email_entered")
        or None
    )


def session_plan(session: dict[str, Any]) -> str | None:
    """Plan from metadata, else the /success/<plan> segment of the success URL."""
    metadata = session.get("metadata") or {}
    if metadata.get("plan"):
        return metadata["plan"]
    match = _SUCCESS_PLAN_PATTERN.search(session.get("success_url") or "")
    return match.group(1) if match else None


class StripeSessionService:
    """
    Service for reading Checkout Sessions after payment.
    """

    @staticmethod
    def _retrieve(stripe_client: StripeClient, session_id: str, code: str) -> dict[str, Any]:
        try:
            return stripe_client.retrieve_checkout_session(session_id, expand=["customer"])
        except StripeClientError as e:
            logger.error(f"[stripe-session] retrieve failed for {session_id}: {e}")
            raise UpstreamError(code, "Failed to retrieve checkout session")

    @staticmethod
    def get_email(stripe_client: StripeClient, session_id: str) -> StripeSessionEmail:
        """
        Extract the payer email for display.

        Only customer_details.email and customer_email are considered.

        Raises:
            SessionEmailNotFound: 404 when neither is present
            UpstreamError: STRIPE_SESSION_LOOKUP_FAILED if Stripe fails
        """
        session = StripeSessionService._retrieve(stripe_client, session_id, "STRIPE_SESSION_LOOKUP_FAILED")
        email = (session.get("customer_details") or {}).get("email") or session.get("customer_email")
        if not email:
            logger.warning(f"[stripe-session] no email on session {session_id}")
            raise SessionEmailNotFound(session_id)
        return StripeSessionEmail(email=email)

    @staticmethod
    def get_details(stripe_client: StripeClient, session_id: str) -> StripeSessionDetails:
        """
        Summarize a Checkout Session for the landing page.

        Raises:
            UpstreamError: STRIPE_SESSION_LOOKUP_FAILED if Stripe fails
        """
        session = StripeSessionService._retrieve(stripe_client, session_id, "STRIPE_SESSION_LOOKUP_FAILED")
        metadata = session.get("metadata") or {}
        return StripeSessionDetails(
            session_id=session.get("id") or session_id,
            email=session_email(session),
            plan=session_plan(session),
            assessment_id=metadata.get("assessment_id") or None,
            profile_id=metadata.get("profile_id") or None,
            payment_status=session.get("payment_status"),
        )

    @staticmethod
    def get_summary(
        stripe_client: StripeClient,
        db: SupabaseClient,
        session_id: str,
    ) -> SuccessSummary:
        """
        Session details plus the business and contact names for the buyer.

        Names come from the profile (company_name, full_name) and fall back
        to the assessment (answers.businessName, full_name_entered). Lookup
        failures for names are logged and leave the names empty.
        """
        details = StripeSessionService.get_details(stripe_client, session_id)
        email = details.email
        business_name = None
        contact_name = None

        if details.profile_id:
            try:
                profile = db.fetch_profile(details.profile_id)
            except SupabaseClientError as e:
                logger.warning(f"[success-summary] profile lookup failed: {e}")
                profile = None
            if profile:
                business_name = profile.get("company_name")
                contact_name = profile.get("full_name")
                email = email or profile.get("email")

        if (not business_name or not contact_name) and details.assessment_id:
            try:
                assessment = db.fetch_assessment(details.assessment_id)
            except SupabaseClientError as e:
                logger.warning(f"[success-summary] assessment lookup failed: {e}")
                assessment = None
            if assessment:
                answers = assessment.get("answers") or {}
                business_name = business_name or answers.get("businessName")
                contact_name = contact_name or assessment.get("full_name_entered")

        return SuccessSummary(
            **details.model_dump(exclude={"email"}),
            email=email,
            business_name=business_name,
            contact_name=contact_name,
        )
