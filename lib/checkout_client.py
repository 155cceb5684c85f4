# =============================================================================
# lib/checkout_client.py - Checkout Initiator
# =============================================================================
# Client side of "Buy now": posts the visitor's identifiers to the
# create-checkout-session endpoint and hands the returned Stripe URL to a
# navigation callback.
#
# Preconditions are checked before any network call. Failures are raised as
# CheckoutError; nothing is retried.
#
# Usage:
#   initiator = CheckoutInitiator(
#       "https://example.com/api/v1/create-checkout-session",
#       price_id="price_123",
#       navigate=webbrowser.open,
#   )
#   initiator.start(assessment_id, profile_id, "owner@acme.com")
# =============================================================================

import logging
from typing import Any, Callable

import httpx

from lib.preferences import PreferenceStore
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0
MISSING_URL_MESSAGE = "Checkout session did not return a redirect URL."


class CheckoutPreconditionError(ApplicationError):
    """A required identifier or the configured price id is missing."""

    def __init__(self, missing: list[str]):
        super().__init__(
            f"Cannot start checkout, missing: {', '.join(missing)}",
            code="CHECKOUT_PRECONDITION",
            suggestion="Complete the assessment before starting checkout",
            details={"missing": missing},
        )
        self.missing = missing


class CheckoutError(ApplicationError):
    """The checkout endpoint failed or returned no redirect URL."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CHECKOUT_ERROR", **kwargs)


class CheckoutInitiator:
    """
    Starts a Stripe Checkout redirect for a completed assessment.

    Args:
        endpoint: Full URL of the create-checkout-session endpoint
        price_id: Stripe price to subscribe to
        navigate: Called with the Checkout URL on success
        http_client: Optional httpx.Client (one is created per call otherwise)
        preferences: Where the email is remembered for the success page
    """

    def __init__(
        self,
        endpoint: str,
        price_id: str | None,
        navigate: Callable[[str], Any] | None = None,
        http_client: httpx.Client | None = None,
        preferences: PreferenceStore | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.price_id = price_id
        self._navigate = navigate or (lambda url: None)
        self._http = http_client
        self.preferences = preferences or PreferenceStore()
        self.timeout = timeout

    def _post(self, payload: dict[str, str]) -> httpx.Response:
        if self._http is not None:
            return self._http.post(self.endpoint, json=payload, timeout=self.timeout)
        return httpx.post(self.endpoint, json=payload, timeout=self.timeout)

    def start(self, assessment_id: str | None, profile_id: str | None, email: str | None) -> str:
        """
        Create the Checkout Session and navigate to it.

        Returns:
            The Stripe Checkout URL

        Raises:
            CheckoutPreconditionError: If an identifier or the price id is empty
            CheckoutError: If the request fails or no URL comes back
        """
        fields = {
            "assessment_id": assessment_id,
            "profile_id": profile_id,
            "email": email,
            "price_id": self.price_id,
        }
        missing = [name for name, value in fields.items() if not value or not str(value).strip()]
        if missing:
            raise CheckoutPreconditionError(missing)

        payload = {name: str(value).strip() for name, value in fields.items()}

        try:
            response = self._post(payload)
        except httpx.HTTPError as e:
            logger.error(f"[checkout] request failed: {e} payload={payload}")
            raise CheckoutError(f"Checkout request failed: {e}", details={"payload": payload})

        if response.status_code >= 400:
            logger.error(f"[checkout] endpoint returned {response.status_code} payload={payload}")
            raise CheckoutError(
                _error_message(response),
                details={"status_code": response.status_code, "payload": payload},
            )

        try:
            body = response.json()
        except ValueError:
            body = None
        url = body.get("url") if isinstance(body, dict) else None

        if not url:
            logger.error(f"[checkout] no redirect URL in response payload={payload}")
            raise CheckoutError(MISSING_URL_MESSAGE, details={"payload": payload})

        self.preferences.remember_email(payload["email"])
        self._navigate(url)
        return url


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"Checkout request failed with status {response.status_code}"
