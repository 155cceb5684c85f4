# =============================================================================
# core/models/checkout.py - Checkout & Stripe Session Schemas
# =============================================================================
# API contract for creating Checkout Sessions and reading them back after
# payment:
# - CheckoutRequest / CheckoutResponse
# - StripeSessionDetails: what the landing page needs from a paid session
# - SuccessSummary: session details plus business/contact names
# =============================================================================

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

from core.models.assessment import clean_email
from core.models.plan import Plan, parse_plan
from lib.utils import normalize_text


class CheckoutRequest(BaseModel):
    """
    Request to start a subscription checkout.

    Either a plan (also accepted as `tier`, e.g. "Founding Member") or an
    explicit Stripe price id is required.
    """

    email: str = Field(..., example="owner@acmerestoration.com")
    plan: Plan | None = Field(
        default=None,
        validation_alias=AliasChoices("plan", "tier"),
        example="founding-member",
    )
    price_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("price_id", "priceId"),
        example="price_1P...",
    )
    assessment_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("assessment_id", "assessmentId"),
    )
    profile_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("profile_id", "profileId"),
    )

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email_field(cls, value: Any) -> str:
        return clean_email(value)

    @field_validator("plan", mode="before")
    @classmethod
    def check_plan(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        plan = parse_plan(value) if isinstance(value, str) else None
        if plan is None:
            raise ValueError("plan must be one of bronze, silver, gold, founding-member")
        return plan

    @field_validator("price_id", "assessment_id", "profile_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return normalize_text(value)
        if isinstance(value, int):
            return str(value)
        return value


class CheckoutResponse(BaseModel):
    """Hosted Checkout redirect."""
    url: str = Field(..., example="https://checkout.stripe.com/c/pay/cs_test_...")
    session_id: str | None = Field(default=None, example="cs_test_a1b2c3")


class StripeSessionEmail(BaseModel):
    """Payer email recovered from a Checkout Session."""
    email: str


class StripeSessionDetails(BaseModel):
    """What the post-payment page needs from a Checkout Session."""
    session_id: str
    email: str | None = None
    plan: str | None = None
    assessment_id: str | None = None
    profile_id: str | None = None
    payment_status: str | None = None


class SuccessSummary(StripeSessionDetails):
    """Session details enriched with the names stored for the buyer."""
    business_name: str | None = None
    contact_name: str | None = None
