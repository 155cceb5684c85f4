# =============================================================================
# app/routers/assessments.py - Assessment Endpoints
# =============================================================================
# - POST /save-assessment   persist a scored submission (insert-only)
# - POST /score-assessment  score raw answers without saving
# =============================================================================

from fastapi import APIRouter, Depends

from app.dependencies import SUPABASE_SERVICE_KEYS, SupabaseDep, require_env
from core.models.assessment import SaveAssessmentRequest, SaveAssessmentResponse, ScoreAssessmentRequest
from core.services.assessment_service import AssessmentService
from lib.scoring import calculate_score

router = APIRouter()


@router.post(
    "/save-assessment",
    response_model=SaveAssessmentResponse,
    dependencies=[Depends(require_env(*SUPABASE_SERVICE_KEYS))],
)
async def save_assessment(body: SaveAssessmentRequest, db: SupabaseDep):
    """
    Save an assessment submission.

    Creates the auth identity and profile on first submission; later
    submissions update changed name / city / state and always insert a new
    assessment row.
    """
    return AssessmentService.save(db, body)


@router.post("/score-assessment")
async def score_assessment(body: ScoreAssessmentRequest) -> dict:
    """Compute section scores, grade, eligibility and top opportunities."""
    return calculate_score(body.answers).to_dict()
