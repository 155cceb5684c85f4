# =============================================================================
# tests/test_checkout.py - Checkout Session Tests
# =============================================================================

import pytest

from app.exceptions import ConfigurationError, RequestValidationFailed, UpstreamError
from core.models.checkout import CheckoutRequest
from core.services.checkout_service import CheckoutService, resolve_base_url
from lib.stripe_client import StripeClientError


@pytest.fixture
def gold_request():
    return CheckoutRequest(email="owner@acme.com", plan="gold", assessment_id="assessment-1")


# =============================================================================
# Base URL Resolution
# =============================================================================

class TestResolveBaseUrl:

    def test_prefers_forwarded_headers(self, test_settings):
        headers = {"x-forwarded-host": "restorationexpertise.com", "x-forwarded-proto": "https", "host": "internal:8000"}
        assert resolve_base_url(headers, test_settings) == "https://restorationexpertise.com"

    def test_localhost_defaults_to_http(self, test_settings):
        assert resolve_base_url({"host": "localhost:5173"}, test_settings) == "http://localhost:5173"

    def test_first_hop_of_forwarded_chain(self, test_settings):
        headers = {"x-forwarded-host": "a.example.com, b.example.com", "x-forwarded-proto": "https,http"}
        assert resolve_base_url(headers, test_settings) == "https://a.example.com"

    def test_falls_back_to_deploy_url_chain(self, test_settings):
        settings = test_settings.model_copy(update={"DEPLOY_URL": None, "URL": "https://site.example.com/"})
        assert resolve_base_url({}, settings) == "https://site.example.com"

    def test_nothing_available(self, test_settings):
        settings = test_settings.model_copy(update={
            "DEPLOY_URL": None, "DEPLOY_PRIME_URL": None, "URL": None, "SITE_URL": None,
        })

        with pytest.raises(ConfigurationError) as exc_info:
            resolve_base_url({}, settings)

        assert exc_info.value.code == "MISSING_BASE_URL"


# =============================================================================
# CheckoutService
# =============================================================================

class TestResolvePrice:

    def test_explicit_price_wins(self, test_settings):
        request = CheckoutRequest(email="owner@acme.com", plan="gold", price_id="price_custom")
        assert CheckoutService.resolve_price(request, test_settings) == "price_custom"

    def test_plan_price(self, test_settings, gold_request):
        assert CheckoutService.resolve_price(gold_request, test_settings) == "price_gold"

    def test_plan_or_price_required(self, test_settings):
        with pytest.raises(RequestValidationFailed):
            CheckoutService.resolve_price(CheckoutRequest(email="owner@acme.com"), test_settings)

    def test_unconfigured_price(self, test_settings, gold_request):
        settings = test_settings.model_copy(update={"STRIPE_PRICE_GOLD": None})

        with pytest.raises(ConfigurationError) as exc_info:
            CheckoutService.resolve_price(gold_request, settings)

        assert exc_info.value.code == "MISSING_PRICE_ID"
        assert exc_info.value.details["missing"] == ["STRIPE_PRICE_GOLD"]


class TestCreateSession:

    def test_new_customer(self, mock_db, mock_stripe, test_settings, gold_request):
        # Arrange
        mock_db.insert_profile.return_value = {"id": "profile-new", "email": "owner@acme.com"}
        mock_stripe.find_customer_by_email.return_value = None
        mock_stripe.create_customer.return_value = {"id": "cus_new"}
        mock_stripe.create_checkout_session.return_value = {"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"}

        # Act
        result = CheckoutService.create_session(
            gold_request, mock_db, mock_stripe, test_settings, {"host": "restorationexpertise.com"},
        )

        # Assert
        assert result.url == "https://checkout.stripe.com/c/pay/cs_1"
        assert result.session_id == "cs_1"
        mock_stripe.create_customer.assert_called_once_with("owner@acme.com", {"profile_id": "profile-new"})
        mock_db.update_profile.assert_called_once_with("profile-new", {"stripe_customer_id": "cus_new"})

        params = mock_stripe.create_checkout_session.call_args.kwargs
        assert params["mode"] == "subscription"
        assert params["customer"] == "cus_new"
        assert params["line_items"] == [{"price": "price_gold", "quantity": 1}]
        assert params["success_url"] == (
            "https://restorationexpertise.com/success/gold?checkout=success&session_id={CHECKOUT_SESSION_ID}"
        )
        assert params["cancel_url"] == "https://restorationexpertise.com/results?checkout=cancelled"
        assert params["metadata"] == {
            "email_entered": "owner@acme.com",
            "plan": "gold",
            "assessment_id": "assessment-1",
            "profile_id": "profile-new",
        }

    def test_stored_customer_is_reused(self, mock_db, mock_stripe, test_settings, gold_request, sample_profile):
        mock_db.fetch_profile_by_email.return_value = {**sample_profile, "stripe_customer_id": "cus_existing"}
        mock_stripe.create_checkout_session.return_value = {"id": "cs_2", "url": "https://checkout.stripe.com/x"}

        CheckoutService.create_session(gold_request, mock_db, mock_stripe, test_settings, {"host": "example.com"})

        mock_stripe.find_customer_by_email.assert_not_called()
        mock_stripe.create_customer.assert_not_called()
        mock_db.update_profile.assert_not_called()
        assert mock_stripe.create_checkout_session.call_args.kwargs["customer"] == "cus_existing"

    def test_stripe_customer_found_by_email(self, mock_db, mock_stripe, test_settings, gold_request, sample_profile):
        mock_db.fetch_profile_by_email.return_value = sample_profile
        mock_stripe.find_customer_by_email.return_value = {"id": "cus_found"}
        mock_stripe.create_checkout_session.return_value = {"id": "cs_3", "url": "https://checkout.stripe.com/y"}

        CheckoutService.create_session(gold_request, mock_db, mock_stripe, test_settings, {"host": "example.com"})

        mock_stripe.create_customer.assert_not_called()
        mock_db.update_profile.assert_called_once_with("profile-123", {"stripe_customer_id": "cus_found"})

    def test_stripe_failure(self, mock_db, mock_stripe, test_settings, gold_request, sample_profile):
        mock_db.fetch_profile_by_email.return_value = sample_profile
        mock_stripe.find_customer_by_email.side_effect = StripeClientError("card network down")

        with pytest.raises(UpstreamError) as exc_info:
            CheckoutService.create_session(gold_request, mock_db, mock_stripe, test_settings, {"host": "example.com"})

        assert exc_info.value.code == "CHECKOUT_CREATE_FAILED"

    def test_session_without_url(self, mock_db, mock_stripe, test_settings, gold_request, sample_profile):
        mock_db.fetch_profile_by_email.return_value = {**sample_profile, "stripe_customer_id": "cus_1"}
        mock_stripe.create_checkout_session.return_value = {"id": "cs_4", "url": None}

        with pytest.raises(UpstreamError):
            CheckoutService.create_session(gold_request, mock_db, mock_stripe, test_settings, {"host": "example.com"})


# =============================================================================
# Endpoint
# =============================================================================

class TestCheckoutEndpoint:
    """Tests for POST /api/v1/create-checkout-session."""

    def test_returns_redirect_url(self, client, mock_db, mock_stripe, sample_profile):
        mock_db.fetch_profile_by_email.return_value = {**sample_profile, "stripe_customer_id": "cus_1"}
        mock_stripe.create_checkout_session.return_value = {"id": "cs_5", "url": "https://checkout.stripe.com/z"}

        response = client.post("/api/v1/create-checkout-session", json={
            "email": "owner@acme.com",
            "tier": "Founding Member",
        })

        assert response.status_code == 200
        assert response.json() == {"url": "https://checkout.stripe.com/z", "session_id": "cs_5"}
        params = mock_stripe.create_checkout_session.call_args.kwargs
        assert params["line_items"][0]["price"] == "price_founding"
        assert "/success/founding-member?" in params["success_url"]

    def test_unknown_plan(self, client, mock_stripe):
        response = client.post("/api/v1/create-checkout-session", json={"email": "owner@acme.com", "plan": "platinum"})

        assert response.status_code == 400
        assert response.json()["details"] == ["plan"]
        mock_stripe.create_checkout_session.assert_not_called()

    def test_missing_stripe_key(self, client, mock_stripe, test_settings, use_settings):
        use_settings(test_settings.model_copy(update={"STRIPE_SECRET_KEY": None}))

        response = client.post("/api/v1/create-checkout-session", json={"email": "owner@acme.com", "plan": "gold"})

        assert response.status_code == 500
        assert response.json()["code"] == "MISSING_ENV"
        assert response.json()["missing"] == ["STRIPE_SECRET_KEY"]
        mock_stripe.create_checkout_session.assert_not_called()
