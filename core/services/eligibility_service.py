# =============================================================================
# core/services/eligibility_service.py - Assessment Eligibility
# =============================================================================
# Decides whether an email may take the assessment:
# - existing member with an active-like subscription -> "member"
# - assessment submitted in the last 30 days          -> "recent-assessment"
# - otherwise eligible
# =============================================================================

import logging

from app.exceptions import UpstreamError
from core.models.assessment import EligibilityResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import iso_days_ago

logger = logging.getLogger(__name__)

ACTIVE_SUBSCRIPTION_STATUSES = ["active", "trialing", "past_due"]
RECENT_ASSESSMENT_DAYS = 30

MEMBER_MESSAGE = "This email is already a member with an active subscription."
RECENT_MESSAGE = "You have recently completed an assessment. Please check your inbox or contact support."
ELIGIBLE_MESSAGE = "Email is eligible for assessment"


class EligibilityService:
    """
    Service for the pre-assessment eligibility check.
    """

    @staticmethod
    def check(db: SupabaseClient, email: str) -> EligibilityResponse:
        """
        Check whether an email may start a new assessment.

        Args:
            db: Supabase wrapper (service role)
            email: Normalized (trimmed, lower-cased) email

        Returns:
            EligibilityResponse with eligible flag, reason and message

        Raises:
            UpstreamError: ELIGIBILITY_CHECK_FAILED if the user or subscription
                lookup fails
        """
        try:
            user = db.find_auth_user_by_email(email)
            if user:
                subscription = db.fetch_active_subscription(user["id"], ACTIVE_SUBSCRIPTION_STATUSES)
                if subscription:
                    logger.info(f"[eligibility] {email} already has subscription {subscription.get('id')}")
                    return EligibilityResponse(eligible=False, reason="member", message=MEMBER_MESSAGE)

        except SupabaseClientError as e:
            logger.error(f"[eligibility] lookup failed for {email}: {e}")
            raise UpstreamError("ELIGIBILITY_CHECK_FAILED", "Failed to check email eligibility")

        # The recent-assessment check is advisory; a failed lookup skips it
        try:
            recent = db.fetch_latest_assessment(email, iso_days_ago(RECENT_ASSESSMENT_DAYS))
        except SupabaseClientError as e:
            logger.error(f"[eligibility] recent assessment lookup failed for {email}: {e}")
            recent = None

        if recent:
            logger.info(f"[eligibility] {email} has a recent assessment {recent.get('id')}")
            return EligibilityResponse(
                eligible=False,
                reason="recent-assessment",
                message=RECENT_MESSAGE,
                assessment_date=recent.get("created_at"),
            )

        return EligibilityResponse(eligible=True, message=ELIGIBLE_MESSAGE)
