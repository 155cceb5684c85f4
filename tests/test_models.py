# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the request/response models to ensure:
# - Valid data is accepted and normalized
# - Invalid data raises ValidationError
# - Plan values normalize onto known slugs
#
# Run with: pytest tests/test_models.py -v
# =============================================================================

import pytest
from pydantic import ValidationError

from core.models import (
    PLAN_DETAILS,
    CheckoutRequest,
    EligibilityRequest,
    Plan,
    SaveAssessmentRequest,
    details_for,
    normalize_plan,
    parse_plan,
    plan_slug,
)
from core.models.admin import BulkVerificationUpdate, MemberUpdate
from core.models.pages import MagicLinkRequest, SuccessFallback


# =============================================================================
# Plan Tests
# =============================================================================

class TestPlanNormalization:
    """Tests for plan slugging and normalization."""

    def test_slug_lowercases_and_hyphenates(self):
        assert plan_slug("Founding Member") == "founding-member"
        assert plan_slug("  GOLD ") == "gold"

    def test_parse_known_plans(self):
        assert parse_plan("Silver") is Plan.SILVER
        assert parse_plan("founding member") is Plan.FOUNDING_MEMBER

    def test_parse_unknown_plan_returns_none(self):
        assert parse_plan("platinum") is None
        assert parse_plan(None) is None

    @pytest.mark.parametrize("value", [None, "", "platinum", "gold-plus", "🙂"])
    def test_normalize_unknown_defaults_to_founding_member(self, value):
        """Unknown values never raise; they resolve to founding-member."""
        assert normalize_plan(value) is Plan.FOUNDING_MEMBER

    def test_every_plan_has_four_benefits(self):
        for plan in Plan:
            assert len(PLAN_DETAILS[plan].benefits) == 4

    def test_details_for_unknown_plan(self):
        details = details_for("nonsense")
        assert details.plan is Plan.FOUNDING_MEMBER
        assert "Founding Member" in details.badge_text


# =============================================================================
# Eligibility / Login Request Tests
# =============================================================================

class TestEmailRequests:
    """Email fields are trimmed, lower-cased and checked."""

    def test_email_is_normalized(self):
        request = EligibilityRequest(email="  Owner@Acme.COM ")
        assert request.email == "owner@acme.com"

    @pytest.mark.parametrize("email", ["", "   ", "no-at-sign", "a@b", "two words@acme.com"])
    def test_invalid_email_rejected(self, email):
        with pytest.raises(ValidationError):
            EligibilityRequest(email=email)

    def test_non_string_email_rejected(self):
        with pytest.raises(ValidationError):
            MagicLinkRequest(email=123)


# =============================================================================
# Save Assessment Tests
# =============================================================================

class TestSaveAssessmentRequest:
    """Tests for SaveAssessmentRequest validation."""

    def test_valid_submission(self, valid_assessment_payload):
        # Act
        request = SaveAssessmentRequest(**valid_assessment_payload)

        # Assert: normalized fields
        assert request.email == "owner@acme.com"
        assert request.state == "TX"
        assert request.grade == "A"
        assert request.profile_id is None

    def test_unknown_state_rejected(self, valid_assessment_payload):
        valid_assessment_payload["state"] = "PR"
        with pytest.raises(ValidationError) as exc_info:
            SaveAssessmentRequest(**valid_assessment_payload)
        assert exc_info.value.errors()[0]["loc"] == ("state",)

    def test_unknown_grade_rejected(self, valid_assessment_payload):
        valid_assessment_payload["grade"] = "C"
        with pytest.raises(ValidationError):
            SaveAssessmentRequest(**valid_assessment_payload)

    def test_negative_score_rejected(self, valid_assessment_payload):
        valid_assessment_payload["digital_score"] = -1
        with pytest.raises(ValidationError):
            SaveAssessmentRequest(**valid_assessment_payload)

    def test_answers_must_be_object(self, valid_assessment_payload):
        valid_assessment_payload["answers"] = ["not", "an", "object"]
        with pytest.raises(ValidationError):
            SaveAssessmentRequest(**valid_assessment_payload)

    def test_blank_optional_fields_become_none(self, valid_assessment_payload):
        valid_assessment_payload["scenario"] = "   "
        valid_assessment_payload["profile_id"] = ""
        request = SaveAssessmentRequest(**valid_assessment_payload)
        assert request.scenario is None
        assert request.profile_id is None


# =============================================================================
# Checkout Request Tests
# =============================================================================

class TestCheckoutRequest:
    """Tests for CheckoutRequest parsing."""

    def test_tier_alias_is_slugged(self):
        request = CheckoutRequest(email="owner@acme.com", tier="Founding Member")
        assert request.plan is Plan.FOUNDING_MEMBER

    def test_camel_case_aliases(self):
        request = CheckoutRequest.model_validate({
            "email": "owner@acme.com",
            "priceId": "price_123",
            "assessmentId": "a-1",
            "profileId": "p-1",
        })
        assert request.price_id == "price_123"
        assert request.assessment_id == "a-1"
        assert request.profile_id == "p-1"

    def test_unknown_plan_rejected(self):
        with pytest.raises(ValidationError):
            CheckoutRequest(email="owner@acme.com", plan="platinum")

    def test_blank_plan_is_none(self):
        request = CheckoutRequest(email="owner@acme.com", plan="  ")
        assert request.plan is None


# =============================================================================
# Admin / Page Model Tests
# =============================================================================

class TestAdminModels:

    def test_bulk_update_requires_ids(self):
        with pytest.raises(ValidationError):
            BulkVerificationUpdate(ids=[], status="Approved")

    def test_member_update_rejects_unknown_tier(self):
        with pytest.raises(ValidationError):
            MemberUpdate(tier="Diamond")

    def test_success_fallback_defaults(self):
        fallback = SuccessFallback()
        assert fallback.fallback is True
        assert fallback.message == "Your payment was successful. Check your email for your login link."
