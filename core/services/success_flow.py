# =============================================================================
# core/services/success_flow.py - Post-Payment Landing Flow
# =============================================================================
# Composes the page a buyer lands on after Stripe Checkout:
#   1. resolve the plan   (URL segment -> cached plan -> founding-member)
#   2. resolve the email  (Checkout Session -> cached email)
#   3. send one login link automatically (idle -> sending -> sent | error)
#   4. allow a resend / email change under the shared cooldown
#
# Unknown plan values normalize to founding-member; they never raise.
# =============================================================================

import logging
from typing import Callable

from app.exceptions import MembershipException
from core.models.pages import SendStatus, SuccessPage
from core.models.plan import Plan, details_for, normalize_plan
from core.services.login_flow import Cooldown
from lib.preferences import PreferenceStore

logger = logging.getLogger(__name__)

MISSING_EMAIL_MESSAGE = "Please provide an email address to resend your login link."
SENDING_MESSAGE = "Sending a fresh magic link…"
SENT_MESSAGE = "We just sent a magic link to {email}. Check your inbox."
MISSING_NEW_EMAIL_MESSAGE = "Enter the new email address you would like to use."
SEND_FAILED_MESSAGE = "Unable to send a magic link right now. Please try again later."


class SuccessFlow:
    """
    State for one post-payment page load.

    Args:
        plan_segment: The /success/<plan> path segment, if any
        session_id: Checkout Session id from the query string, if any
        login: Sends a login link to an email (raises on failure)
        preferences: Cached last plan / email
        cooldown: Shared resend cooldown for the email
        email_lookup: Returns the payer email for a session id (or None)
    """

    def __init__(
        self,
        plan_segment: str | None,
        session_id: str | None,
        login: Callable[[str], None],
        preferences: PreferenceStore,
        cooldown: Cooldown | None = None,
        email_lookup: Callable[[str], str | None] | None = None,
    ):
        self._login = login
        self.preferences = preferences
        self.cooldown = cooldown or Cooldown()
        self.session_id = session_id

        self.plan_segment = plan_segment
        self.plan = self.resolve_plan(plan_segment)
        self.email = self.resolve_email(session_id, email_lookup)

        self.status: SendStatus = "idle"
        self.message = ""
        self._auto_sent = False

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve_plan(self, plan_segment: str | None) -> Plan:
        if plan_segment:
            return normalize_plan(plan_segment)
        return normalize_plan(self.preferences.last_plan())

    def resolve_email(
        self,
        session_id: str | None,
        email_lookup: Callable[[str], str | None] | None,
    ) -> str | None:
        if session_id and email_lookup is not None:
            try:
                email = email_lookup(session_id)
            except MembershipException as e:
                logger.warning(f"[success] session email lookup failed for {session_id}: {e.message}")
                email = None
            if email:
                return email.strip().lower()
        return self.preferences.last_email()

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def trigger(self, email: str | None) -> SendStatus:
        """Send a login link now, updating status and message."""
        if not email:
            self.status = "error"
            self.message = MISSING_EMAIL_MESSAGE
            return self.status

        self.status = "sending"
        self.message = SENDING_MESSAGE
        try:
            self._login(email)
        except MembershipException as e:
            self.status = "error"
            self.message = e.message
            return self.status
        except Exception:
            logger.exception(f"[success] magic link send failed for {email}")
            self.status = "error"
            self.message = SEND_FAILED_MESSAGE
            return self.status

        self.status = "sent"
        self.message = SENT_MESSAGE.format(email=email)
        self.email = email
        self.preferences.remember_email(email)
        self.cooldown.start()
        return self.status

    def auto_send(self) -> SendStatus:
        """
        Send the login link once per page load when an email is known.

        Later calls are no-ops.
        """
        if self._auto_sent or self.status != "idle":
            return self.status
        self._auto_sent = True
        if not self.email:
            return self.status
        return self.trigger(self.email)

    def resend(self) -> SendStatus:
        """
        Raises:
            CooldownActiveError: While the resend countdown is running
        """
        self.cooldown.check()
        return self.trigger(self.email)

    def update_email(self, new_email: str | None) -> SendStatus:
        """
        Switch the destination email and send a link to it.

        Raises:
            CooldownActiveError: While the resend countdown is running
        """
        if not new_email or not new_email.strip():
            self.status = "error"
            self.message = MISSING_NEW_EMAIL_MESSAGE
            return self.status
        self.cooldown.check()
        return self.trigger(new_email.strip().lower())

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def page(self, business_name: str | None = None, contact_name: str | None = None) -> SuccessPage:
        redirect = None
        if not self.plan_segment and self.preferences.last_plan():
            redirect = f"/success/{self.plan.value}"

        return SuccessPage(
            plan=self.plan.value,
            is_founding=self.plan == Plan.FOUNDING_MEMBER,
            details=details_for(self.plan.value),
            email=self.email,
            business_name=business_name or "Your Business",
            contact_name=contact_name or "Your Name",
            status=self.status,
            message=self.message,
            cooldown_seconds=self.cooldown.remaining(),
            redirect=redirect,
        )
