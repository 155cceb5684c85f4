# =============================================================================
# lib/stripe_client.py - Stripe Client Wrapper
# =============================================================================
# Thin wrapper over the stripe library for the calls the funnel makes:
# - Customers (lookup by email, create)
# - Checkout Sessions (create, retrieve)
# - Subscriptions (retrieve)
# - Webhook signature verification
#
# The API key is passed per call rather than set on the stripe module, so
# several configurations can coexist in one process (and in tests).
#
# Usage:
#   from lib.stripe_client import StripeClient
#   stripe_client = StripeClient(settings.STRIPE_SECRET_KEY)
#   session = stripe_client.create_checkout_session(...)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import stripe

logger = logging.getLogger(__name__)


class StripeClientError(Exception):
    """
    Error during Stripe operations.

    Wraps the provider exception with a stable code so handlers can log it
    and return a fixed error vocabulary.
    """

    def __init__(
        self,
        message: str,
        code: str = "STRIPE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class WebhookSignatureError(StripeClientError):
    """Raised when a webhook payload fails signature verification."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="INVALID_SIGNATURE",
            suggestion="Check STRIPE_WEBHOOK_SECRET matches the endpoint's signing secret",
        )


def as_dict(obj: Any) -> dict[str, Any] | None:
    """
    Convert a StripeObject (or plain mapping) to a plain dict.

    Nested objects are converted too so callers can use .get() chains.
    """
    if obj is None:
        return None
    if hasattr(obj, "to_dict_recursive"):
        return obj.to_dict_recursive()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeClient:
    """
    Typed wrapper for Stripe API calls.

    Example:
        client = StripeClient("sk_test_...")
        customer = client.find_customer_by_email("owner@acme.com")
        if customer is None:
            customer = client.create_customer("owner@acme.com", {"profile_id": "..."})
    """

    def __init__(self, api_key: str):
        self._api_key = api_key

    # -------------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------------

    def find_customer_by_email(self, email: str) -> dict[str, Any] | None:
        """
        Look up an existing Stripe customer by email.

        Returns:
            The first matching customer, or None

        Raises:
            StripeClientError: If the Stripe call fails
        """
        try:
            result = stripe.Customer.list(email=email, limit=1, api_key=self._api_key)
        except Exception as e:
            raise StripeClientError(
                message=f"Failed to list customers: {e}",
                code="CUSTOMER_LOOKUP_FAILED",
                details={"email": email}
            )

        customers = result.data if hasattr(result, "data") else result.get("data", [])
        return as_dict(customers[0]) if customers else None

    def create_customer(self, email: str, metadata: dict[str, str] | None = None) -> dict[str, Any]:
        """
        Create a Stripe customer.

        Raises:
            StripeClientError: If the Stripe call fails
        """
        try:
            customer = stripe.Customer.create(
                email=email,
                metadata={k: v for k, v in (metadata or {}).items() if v},
                api_key=self._api_key,
            )
        except Exception as e:
            raise StripeClientError(
                message=f"Failed to create customer: {e}",
                code="CUSTOMER_CREATE_FAILED",
                details={"email": email}
            )

        logger.info(f"Created Stripe customer {customer['id']} for {email}")
        return as_dict(customer)

    # -------------------------------------------------------------------------
    # Checkout Sessions
    # -------------------------------------------------------------------------

    def create_checkout_session(self, **params: Any) -> dict[str, Any]:
        """
        Create a Checkout Session.

        Args:
            params: Keyword arguments forwarded to stripe.checkout.Session.create

        Raises:
            StripeClientError: If the Stripe call fails
        """
        try:
            session = stripe.checkout.Session.create(api_key=self._api_key, **params)
        except Exception as e:
            raise StripeClientError(
                message=f"Failed to create checkout session: {e}",
                code="CHECKOUT_CREATE_FAILED",
                details={"customer": params.get("customer")}
            )
        return as_dict(session)

    def retrieve_checkout_session(
        self,
        session_id: str,
        expand: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Retrieve a Checkout Session by id.

        Raises:
            StripeClientError: If the Stripe call fails
        """
        try:
            session = stripe.checkout.Session.retrieve(
                session_id,
                expand=expand or [],
                api_key=self._api_key,
            )
        except Exception as e:
            raise StripeClientError(
                message=f"Failed to retrieve checkout session: {e}",
                code="SESSION_RETRIEVE_FAILED",
                suggestion="Check that the session_id belongs to this Stripe account",
                details={"session_id": session_id}
            )
        return as_dict(session)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def retrieve_subscription(self, subscription_id: str) -> dict[str, Any]:
        """
        Retrieve a Subscription by id.

        Raises:
            StripeClientError: If the Stripe call fails
        """
        try:
            subscription = stripe.Subscription.retrieve(subscription_id, api_key=self._api_key)
        except Exception as e:
            raise StripeClientError(
                message=f"Failed to retrieve subscription: {e}",
                code="SUBSCRIPTION_RETRIEVE_FAILED",
                details={"subscription_id": subscription_id}
            )
        return as_dict(subscription)

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def construct_event(payload: bytes, signature: str, secret: str) -> dict[str, Any]:
        """
        Verify a webhook payload and return the parsed event.

        Raises:
            WebhookSignatureError: If the payload or signature is invalid
        """
        try:
            event = stripe.Webhook.construct_event(payload, signature, secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookSignatureError(f"Webhook signature verification failed: {e}")
        return as_dict(event)
