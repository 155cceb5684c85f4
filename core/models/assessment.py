# =============================================================================
# core/models/assessment.py - Assessment Schemas
# =============================================================================
# These models define the API contract for the assessment funnel:
# - EligibilityRequest / EligibilityResponse: may this email take the assessment?
# - SaveAssessmentRequest / SaveAssessmentResponse: persist a scored submission
# - ScoreAssessmentRequest: score raw answers server-side
#
# Every inbound field is validated here, before any database call.
# =============================================================================

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from lib.utils import is_valid_email, normalize_email, normalize_text

# The 50 states, as two-letter postal codes
US_STATES: frozenset[str] = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
})

Grade = Literal["A+", "A", "B+", "Needs Work"]

EligibilityReason = Literal["member", "recent-assessment"]


def clean_email(value: Any) -> str:
    """Normalize and validate an email field (shared by request models)."""
    if not isinstance(value, str):
        raise ValueError("email must be a string")
    email = normalize_email(value)
    if not email:
        raise ValueError("email is required")
    if not is_valid_email(email):
        raise ValueError("email is not a valid address")
    return email


# =============================================================================
# Eligibility
# =============================================================================

class EligibilityRequest(BaseModel):
    """Email to check before starting the assessment."""
    email: str = Field(..., example="owner@acmerestoration.com")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, value: Any) -> str:
        return clean_email(value)


class EligibilityResponse(BaseModel):
    """Eligibility verdict."""
    eligible: bool
    reason: EligibilityReason | None = None
    message: str
    assessment_date: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "eligible": False,
                "reason": "recent-assessment",
                "message": "You have recently completed an assessment. Please check your inbox or contact support.",
                "assessment_date": "2024-07-01T12:00:00+00:00",
            }
        }
    }


# =============================================================================
# Save Assessment
# =============================================================================

class SaveAssessmentRequest(BaseModel):
    """
    A scored assessment submission.

    Scores are produced by the assessment tool (see lib.scoring); the grade
    must be one of the four published grades and the state one of the 50 US
    states.
    """

    full_name: str = Field(..., min_length=1, max_length=200, example="Jane Owner")
    email: str = Field(..., example="owner@acmerestoration.com")
    state: str = Field(..., example="TX")
    city: str = Field(..., min_length=1, max_length=120, example="Dallas")

    answers: dict[str, Any] = Field(
        ...,
        description="Questionnaire answers as submitted by the assessment form",
        example={"businessName": "Acme Restoration", "hasLicense": True, "yearsLicensed": 6},
    )

    operational_score: float = Field(..., ge=0, le=20)
    licensing_score: float = Field(..., ge=0, le=10)
    feedback_score: float = Field(..., ge=0, le=30)
    certifications_score: float = Field(..., ge=0, le=20)
    digital_score: float = Field(..., ge=0, le=17)
    total_score: float = Field(..., ge=0, le=100)
    grade: Grade
    is_eligible: bool
    eligibility_reasons: list[str] = Field(default_factory=list)

    scenario: str | None = Field(default=None, max_length=100, example="results-page")
    intended_membership_tier: str | None = Field(default=None, example="Gold")
    profile_id: str | None = Field(default=None, description="Known profile id, if the visitor has one")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, value: Any) -> str:
        return clean_email(value)

    @field_validator("full_name", "city", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("state", mode="before")
    @classmethod
    def check_state(cls, value: Any) -> str:
        if not isinstance(value, str) or value.strip().upper() not in US_STATES:
            raise ValueError("state must be a two-letter code for one of the 50 US states")
        return value.strip().upper()

    @field_validator("scenario", "intended_membership_tier", "profile_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_text(value)
        return value


class SaveAssessmentResponse(BaseModel):
    """Result of persisting an assessment."""
    success: bool = True
    profile_id: str
    assessment_id: str
    email: str


# =============================================================================
# Scoring
# =============================================================================

class ScoreAssessmentRequest(BaseModel):
    """Raw questionnaire answers to score."""
    answers: dict[str, Any] = Field(
        ...,
        example={
            "hasLicense": True,
            "hasLiabilityInsurance": True,
            "hasWorkersComp": False,
            "yearsLicensed": 4,
            "googleRating": 4.7,
            "googleReviews": 32,
            "certifications": {"water": True, "fire": False, "mold": True, "other": False},
            "hasWebsite": True,
            "hasProEmail": True,
            "emergencyLine": True,
            "activeSocialMedia": False,
            "brandedVehicles": True,
        },
    )
