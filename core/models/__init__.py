# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - plan.py: Plan slugs, normalization and post-payment plan content
# - assessment.py: Eligibility, save-assessment and scoring requests
# - checkout.py: Checkout Session requests and Stripe session read-backs
# - user.py: The display-facing AppUser built from an auth session
# - admin.py: Admin console records, edit payloads and action results
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Plan Models
# -----------------------------------------------------------------------------
from .plan import (
    DEFAULT_PLAN,
    PLAN_DETAILS,
    Plan,
    PlanBenefit,
    PlanDetails,
    details_for,
    normalize_plan,
    parse_plan,
    plan_slug,
)

# -----------------------------------------------------------------------------
# Assessment Models
# -----------------------------------------------------------------------------
from .assessment import (
    US_STATES,
    EligibilityRequest,
    EligibilityResponse,
    SaveAssessmentRequest,
    SaveAssessmentResponse,
    ScoreAssessmentRequest,
)

# -----------------------------------------------------------------------------
# Checkout Models
# -----------------------------------------------------------------------------
from .checkout import (
    CheckoutRequest,
    CheckoutResponse,
    StripeSessionDetails,
    StripeSessionEmail,
    SuccessSummary,
)

# -----------------------------------------------------------------------------
# User Models
# -----------------------------------------------------------------------------
from .user import AppUser, MemberBenefit, MemberPlan

__all__ = [
    # Plan
    "DEFAULT_PLAN",
    "PLAN_DETAILS",
    "Plan",
    "PlanBenefit",
    "PlanDetails",
    "details_for",
    "normalize_plan",
    "parse_plan",
    "plan_slug",
    # Assessment
    "US_STATES",
    "EligibilityRequest",
    "EligibilityResponse",
    "SaveAssessmentRequest",
    "SaveAssessmentResponse",
    "ScoreAssessmentRequest",
    # Checkout
    "CheckoutRequest",
    "CheckoutResponse",
    "StripeSessionDetails",
    "StripeSessionEmail",
    "SuccessSummary",
    # User
    "AppUser",
    "MemberBenefit",
    "MemberPlan",
]
