# =============================================================================
# tests/test_stripe_session.py - Checkout Session Lookup Tests
# =============================================================================

import pytest

from app.exceptions import UpstreamError
from core.services.stripe_session_service import (
    SessionEmailNotFound,
    StripeSessionService,
    session_email,
    session_plan,
)
from lib.stripe_client import StripeClientError
from lib.supabase_client import SupabaseClientError


class TestSessionHelpers:

    def test_email_prefers_customer_details(self, sample_checkout_session):
        assert session_email(sample_checkout_session) == "Owner@Acme.com"

    def test_email_from_expanded_customer(self):
        session = {"customer": {"id": "cus_1", "email": "billing@acme.com"}, "metadata": {"email_entered": "x@y.co"}}
        assert session_email(session) == "billing@acme.com"

    def test_email_from_metadata(self):
        assert session_email({"customer": "cus_1", "metadata": {"email_entered": "x@y.co"}}) == "x@y.co"

    def test_no_email(self):
        assert session_email({}) is None

    def test_plan_from_success_url(self):
        session = {"metadata": {}, "success_url": "https://example.com/success/silver?checkout=success"}
        assert session_plan(session) == "silver"

    def test_plan_metadata_wins(self, sample_checkout_session):
        assert session_plan(sample_checkout_session) == "gold"


class TestStripeSessionService:

    def test_get_email(self, mock_stripe, sample_checkout_session):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session

        result = StripeSessionService.get_email(mock_stripe, "cs_test_123")

        assert result.email == "Owner@Acme.com"
        mock_stripe.retrieve_checkout_session.assert_called_once_with("cs_test_123", expand=["customer"])

    def test_get_email_ignores_metadata(self, mock_stripe):
        mock_stripe.retrieve_checkout_session.return_value = {
            "id": "cs_1",
            "customer_details": None,
            "customer_email": None,
            "metadata": {"email_entered": "owner@acme.com"},
        }

        with pytest.raises(SessionEmailNotFound) as exc_info:
            StripeSessionService.get_email(mock_stripe, "cs_1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.to_dict() == {"error": "No email found in session"}

    def test_stripe_failure(self, mock_stripe):
        mock_stripe.retrieve_checkout_session.side_effect = StripeClientError("No such checkout session")

        with pytest.raises(UpstreamError) as exc_info:
            StripeSessionService.get_details(mock_stripe, "cs_missing")

        assert exc_info.value.code == "STRIPE_SESSION_LOOKUP_FAILED"

    def test_get_details(self, mock_stripe, sample_checkout_session):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session

        details = StripeSessionService.get_details(mock_stripe, "cs_test_123")

        assert details.session_id == "cs_test_123"
        assert details.plan == "gold"
        assert details.assessment_id == "assessment-1"
        assert details.profile_id == "profile-123"
        assert details.payment_status == "paid"

    def test_summary_uses_profile_names(self, mock_stripe, mock_db, sample_checkout_session, sample_profile):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session
        mock_db.fetch_profile.return_value = sample_profile

        summary = StripeSessionService.get_summary(mock_stripe, mock_db, "cs_test_123")

        assert summary.business_name == "Acme Restoration"
        assert summary.contact_name == "Jane Owner"
        mock_db.fetch_assessment.assert_not_called()

    def test_summary_falls_back_to_assessment(self, mock_stripe, mock_db, sample_checkout_session):
        # Arrange: profile exists but has no names yet
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session
        mock_db.fetch_profile.return_value = {"id": "profile-123", "email": "owner@acme.com"}
        mock_db.fetch_assessment.return_value = {
            "id": "assessment-1",
            "answers": {"businessName": "Acme Water Damage"},
            "full_name_entered": "Jane Q. Owner",
        }

        # Act
        summary = StripeSessionService.get_summary(mock_stripe, mock_db, "cs_test_123")

        # Assert
        assert summary.business_name == "Acme Water Damage"
        assert summary.contact_name == "Jane Q. Owner"

    def test_summary_survives_name_lookup_failure(self, mock_stripe, mock_db, sample_checkout_session):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session
        mock_db.fetch_profile.side_effect = SupabaseClientError("timeout")
        mock_db.fetch_assessment.side_effect = SupabaseClientError("timeout")

        summary = StripeSessionService.get_summary(mock_stripe, mock_db, "cs_test_123")

        assert summary.email == "Owner@Acme.com"
        assert summary.business_name is None
        assert summary.contact_name is None


class TestStripeSessionEndpoints:

    def test_session_email(self, client, mock_stripe, sample_checkout_session):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session

        response = client.get("/api/v1/stripe-session-email", params={"session_id": "cs_test_123"})

        assert response.status_code == 200
        assert response.json() == {"email": "Owner@Acme.com"}

    def test_session_email_not_found(self, client, mock_stripe):
        mock_stripe.retrieve_checkout_session.return_value = {"id": "cs_1", "metadata": {}}

        response = client.get("/api/v1/stripe-session-email", params={"session_id": "cs_1"})

        assert response.status_code == 404
        assert response.json() == {"error": "No email found in session"}

    def test_session_id_required(self, client, mock_stripe):
        response = client.get("/api/v1/stripe-session-email")

        assert response.status_code == 400
        assert response.json()["details"] == ["session_id"]
        mock_stripe.retrieve_checkout_session.assert_not_called()

    def test_empty_session_id(self, client):
        response = client.get("/api/v1/stripe-session", params={"session_id": ""})

        assert response.status_code == 400

    def test_missing_stripe_key(self, client, test_settings, use_settings):
        use_settings(test_settings.model_copy(update={"STRIPE_SECRET_KEY": None}))

        response = client.get("/api/v1/stripe-session", params={"session_id": "cs_1"})

        assert response.status_code == 500
        assert response.json()["missing"] == ["STRIPE_SECRET_KEY"]

    def test_success_summary(self, client, mock_stripe, mock_db, sample_checkout_session, sample_profile):
        mock_stripe.retrieve_checkout_session.return_value = sample_checkout_session
        mock_db.fetch_profile.return_value = sample_profile

        response = client.get("/api/v1/success-summary", params={"session_id": "cs_test_123"})

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == "gold"
        assert body["business_name"] == "Acme Restoration"
        assert body["contact_name"] == "Jane Owner"
