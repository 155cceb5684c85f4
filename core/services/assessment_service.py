# =============================================================================
# core/services/assessment_service.py - Assessment Persistence
# =============================================================================
# Saves a scored assessment:
#   1. resolve the profile (by id, else by email)
#   2. no profile -> create the auth identity and insert the profile
#      existing  -> update only the changed name/city/state
#   3. insert a new assessment row (assessments are append-only)
# =============================================================================

import logging
from typing import Any

from app.exceptions import UpstreamError
from core.models.assessment import SaveAssessmentRequest, SaveAssessmentResponse
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


class AssessmentService:
    """
    Service for persisting assessment submissions.
    """

    @staticmethod
    def _resolve_profile(db: SupabaseClient, request: SaveAssessmentRequest) -> dict[str, Any] | None:
        if request.profile_id:
            profile = db.fetch_profile(request.profile_id)
            if profile:
                return profile
        return db.fetch_profile_by_email(request.email)

    @staticmethod
    def upsert_profile(db: SupabaseClient, request: SaveAssessmentRequest) -> str:
        """
        Create or refresh the profile for a submission.

        Returns:
            The profile id
        """
        profile = AssessmentService._resolve_profile(db, request)

        if profile is None:
            # The auth identity lets the visitor log in with a magic link later
            db.create_auth_user(request.email, {
                "full_name": request.full_name,
                "city": request.city,
                "state": request.state,
            })
            profile = db.insert_profile({
                "email": request.email,
                "full_name": request.full_name,
                "city": request.city,
                "state": request.state,
            })
            return str(profile["id"])

        changes = {
            key: value
            for key, value in (
                ("full_name", request.full_name),
                ("city", request.city),
                ("state", request.state),
            )
            if value and value != profile.get(key)
        }
        if changes:
            db.update_profile(profile["id"], changes)
            logger.info(f"[save-assessment] updated profile {profile['id']} fields={sorted(changes)}")
        return str(profile["id"])

    @staticmethod
    def save(db: SupabaseClient, request: SaveAssessmentRequest) -> SaveAssessmentResponse:
        """
        Persist a validated assessment submission.

        Args:
            db: Supabase wrapper (service role)
            request: Validated submission

        Returns:
            SaveAssessmentResponse with profile and assessment ids

        Raises:
            UpstreamError: ASSESSMENT_SAVE_FAILED if any database step fails
        """
        try:
            profile_id = AssessmentService.upsert_profile(db, request)

            assessment = db.insert_assessment({
                "profile_id": profile_id,
                "email_entered": request.email,
                "answers": request.answers,
                "total_score": request.total_score,
                "operational_score": request.operational_score,
                "licensing_score": request.licensing_score,
                "feedback_score": request.feedback_score,
                "certifications_score": request.certifications_score,
                "digital_score": request.digital_score,
                "grade": request.grade,
                "is_eligible": request.is_eligible,
                "eligibility_reasons": request.eligibility_reasons,
                "scenario": request.scenario,
                "intended_membership_tier": request.intended_membership_tier,
                "full_name_entered": request.full_name,
                "city": request.city,
                "state": request.state,
            })

        except SupabaseClientError as e:
            logger.error(f"[save-assessment] failed for {request.email}: {e}")
            raise UpstreamError("ASSESSMENT_SAVE_FAILED", "Failed to save assessment")

        assessment_id = str(assessment["id"])
        logger.info(f"[save-assessment] saved assessment {assessment_id} for profile {profile_id}")
        return SaveAssessmentResponse(
            profile_id=profile_id,
            assessment_id=assessment_id,
            email=request.email,
        )
