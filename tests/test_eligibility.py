# =============================================================================
# tests/test_eligibility.py - Email Eligibility Tests
# =============================================================================

import pytest

from app.exceptions import UpstreamError
from core.services.eligibility_service import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    ELIGIBLE_MESSAGE,
    MEMBER_MESSAGE,
    RECENT_MESSAGE,
    EligibilityService,
)
from lib.supabase_client import SupabaseClientError


class TestEligibilityService:
    """Tests for EligibilityService.check()."""

    def test_new_email_is_eligible(self, mock_db):
        result = EligibilityService.check(mock_db, "owner@acme.com")

        assert result.eligible is True
        assert result.reason is None
        assert result.message == ELIGIBLE_MESSAGE

    def test_member_with_active_subscription(self, mock_db):
        # Arrange
        mock_db.find_auth_user_by_email.return_value = {"id": "user-1", "email": "owner@acme.com"}
        mock_db.fetch_active_subscription.return_value = {"id": "sub-1", "status": "active"}

        # Act
        result = EligibilityService.check(mock_db, "owner@acme.com")

        # Assert
        assert result.eligible is False
        assert result.reason == "member"
        assert result.message == MEMBER_MESSAGE
        mock_db.fetch_active_subscription.assert_called_once_with("user-1", ACTIVE_SUBSCRIPTION_STATUSES)
        mock_db.fetch_latest_assessment.assert_not_called()

    def test_user_without_subscription_checks_assessments(self, mock_db):
        mock_db.find_auth_user_by_email.return_value = {"id": "user-1"}

        result = EligibilityService.check(mock_db, "owner@acme.com")

        assert result.eligible is True
        mock_db.fetch_latest_assessment.assert_called_once()

    def test_recent_assessment(self, mock_db):
        mock_db.fetch_latest_assessment.return_value = {
            "id": "assessment-1",
            "created_at": "2024-07-01T12:00:00+00:00",
        }

        result = EligibilityService.check(mock_db, "owner@acme.com")

        assert result.eligible is False
        assert result.reason == "recent-assessment"
        assert result.message == RECENT_MESSAGE
        assert result.assessment_date == "2024-07-01T12:00:00+00:00"

    def test_lookup_failure_is_upstream_error(self, mock_db):
        mock_db.find_auth_user_by_email.side_effect = SupabaseClientError("boom")

        with pytest.raises(UpstreamError) as exc_info:
            EligibilityService.check(mock_db, "owner@acme.com")

        assert exc_info.value.code == "ELIGIBILITY_CHECK_FAILED"
        assert exc_info.value.status_code == 500

    def test_recent_assessment_lookup_failure_is_skipped(self, mock_db):
        mock_db.fetch_latest_assessment.side_effect = SupabaseClientError("timeout")

        result = EligibilityService.check(mock_db, "owner@acme.com")

        assert result.eligible is True
        assert result.reason is None


class TestEligibilityEndpoint:
    """Tests for POST /api/v1/check-email-eligibility."""

    def test_eligible_response_omits_reason(self, client, mock_db):
        response = client.post("/api/v1/check-email-eligibility", json={"email": " Owner@Acme.com "})

        assert response.status_code == 200
        assert response.json() == {"eligible": True, "message": ELIGIBLE_MESSAGE}
        mock_db.find_auth_user_by_email.assert_called_once_with("owner@acme.com")

    def test_invalid_email_is_validation_error(self, client, mock_db):
        response = client.post("/api/v1/check-email-eligibility", json={"email": "not-an-email"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"] == ["email"]
        mock_db.find_auth_user_by_email.assert_not_called()

    def test_malformed_json(self, client):
        response = client.post(
            "/api/v1/check-email-eligibility",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_JSON"

    def test_missing_supabase_config_fails_closed(self, client, mock_db, test_settings, use_settings):
        use_settings(test_settings.model_copy(update={"SUPABASE_SERVICE_ROLE_KEY": None}))

        response = client.post("/api/v1/check-email-eligibility", json={"email": "owner@acme.com"})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "MISSING_ENV"
        assert body["missing"] == ["SUPABASE_SERVICE_ROLE_KEY"]
        mock_db.find_auth_user_by_email.assert_not_called()

    def test_upstream_failure_hides_details(self, client, mock_db):
        mock_db.find_auth_user_by_email.side_effect = SupabaseClientError("relation does not exist")

        response = client.post("/api/v1/check-email-eligibility", json={"email": "owner@acme.com"})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "ELIGIBILITY_CHECK_FAILED"
        assert "relation" not in body["error"]

    def test_wrong_method(self, client):
        response = client.get("/api/v1/check-email-eligibility")

        assert response.status_code == 405
        assert response.json()["code"] == "METHOD_NOT_ALLOWED"

    def test_options_preflight(self, client):
        response = client.options("/api/v1/check-email-eligibility")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
