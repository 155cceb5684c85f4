# =============================================================================
# app/routers/eligibility.py - Email Eligibility Endpoint
# =============================================================================
# POST /check-email-eligibility
# Tells the assessment form whether an email may start a new assessment.
# =============================================================================

from fastapi import APIRouter, Depends

from app.dependencies import SUPABASE_SERVICE_KEYS, SupabaseDep, require_env
from core.models.assessment import EligibilityRequest, EligibilityResponse
from core.services.eligibility_service import EligibilityService

router = APIRouter()


@router.post(
    "/check-email-eligibility",
    response_model=EligibilityResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_env(*SUPABASE_SERVICE_KEYS))],
)
async def check_email_eligibility(body: EligibilityRequest, db: SupabaseDep):
    """
    Check an email against active subscriptions and recent assessments.

    Returns eligible=false with reason "member" or "recent-assessment", or
    eligible=true.
    """
    return EligibilityService.check(db, body.email)
