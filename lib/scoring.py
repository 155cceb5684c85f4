# =============================================================================
# lib/scoring.py - Assessment Scoring Engine
# =============================================================================
# Turns the assessment questionnaire answers into the five category scores,
# a 0-100 total, a letter grade, certification eligibility and the top three
# improvement opportunities.
#
# Category maxima:
#   operational 20 | licensing 10 | feedback 30 | certifications 20 | digital 17
#
# Usage:
#   from lib.scoring import calculate_score
#   breakdown = calculate_score(answers)
#   breakdown.total, breakdown.grade
# =============================================================================

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Literal

RAW_MAX = {
    "operational": 20,
    "licensing": 10,
    "feedback": 30,
    "certifications": 20,
    "digital": 17,
}

Grade = Literal["A+", "A", "B+", "Needs Work"]
GRADES: tuple[str, ...] = ("A+", "A", "B+", "Needs Work")

ELIGIBILITY_MIN_TOTAL = 70


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class Opportunity:
    """An improvement suggestion shown under the score."""
    id: str
    label: str
    description: str
    category: str
    impact: str  # "High" or "Medium"
    type: str  # "Quick win" or "Deep work"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "impact": self.impact,
            "type": self.type,
        }


@dataclass
class ScoreBreakdown:
    """Result of scoring one set of answers."""
    operational: int
    licensing: int
    feedback: float
    certifications: int
    digital: int
    total: int
    grade: str
    is_eligible: bool
    eligibility_reasons: list[str] = field(default_factory=list)
    opportunities: list[Opportunity] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "operational": self.operational,
            "licensing": self.licensing,
            "feedback": self.feedback,
            "certifications": self.certifications,
            "digital": self.digital,
            "total": self.total,
            "grade": self.grade,
            "is_eligible": self.is_eligible,
            "eligibility_reasons": list(self.eligibility_reasons),
            "opportunities": [o.to_dict() for o in self.opportunities],
        }


# =============================================================================
# Answer Access
# =============================================================================

def _flag(answers: dict[str, Any], key: str) -> bool:
    return bool(answers.get(key))


def _number(answers: dict[str, Any], key: str) -> float:
    try:
        return float(answers.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


def _cert_count(answers: dict[str, Any]) -> int:
    certs = answers.get("certifications") or {}
    return sum(1 for key in ("water", "fire", "mold", "other") if certs.get(key))


# =============================================================================
# Grade & Eligibility
# =============================================================================

def get_grade(total: float) -> str:
    """Map a 0-100 total to a letter grade."""
    if total >= 90:
        return "A+"
    if total >= 80:
        return "A"
    if total >= 65:
        return "B+"
    return "Needs Work"


def evaluate_eligibility(answers: dict[str, Any], scores: dict[str, float]) -> list[str]:
    """
    List the reasons a business is not yet eligible for certification.

    An empty list means eligible.
    """
    reasons = []
    if not _flag(answers, "hasLicense"):
        reasons.append("No active contractor license on file.")
    if not _flag(answers, "hasLiabilityInsurance"):
        reasons.append("No general liability insurance listed.")
    if scores["operational"] < 10:
        reasons.append("Operational standards are below our minimum.")
    if scores["licensing"] < 4:
        reasons.append("Too few years licensed for certification.")
    if scores["feedback"] < 5:
        reasons.append("Customer feedback and reviews are too low.")
    if scores["digital"] < 5:
        reasons.append("Digital & brand presence needs improvement.")
    if scores["total"] < ELIGIBILITY_MIN_TOTAL:
        reasons.append("Overall score is below the minimum threshold.")
    return reasons


# =============================================================================
# Opportunities
# =============================================================================

_OPPORTUNITIES: list[tuple[Opportunity, Callable[[dict[str, Any]], bool]]] = [
    (
        Opportunity(
            "hasLicense", "Get an active contractor license",
            "This is a fundamental requirement for certification and a major trust signal for homeowners.",
            "Operational", "High", "Deep work",
        ),
        lambda a: not _flag(a, "hasLicense"),
    ),
    (
        Opportunity(
            "hasLiabilityInsurance", "Secure general liability insurance",
            "Liability insurance is a non-negotiable for professional contractors and essential for certification.",
            "Operational", "High", "Deep work",
        ),
        lambda a: not _flag(a, "hasLiabilityInsurance"),
    ),
    (
        Opportunity(
            "yearsLicensed", "Increase years of licensed experience",
            "More years of licensed operation build significant credibility. "
            "While this takes time, it's a key factor for top-tier status.",
            "Licensing", "High", "Deep work",
        ),
        lambda a: _number(a, "yearsLicensed") < 3,
    ),
    (
        Opportunity(
            "googleReviewsLow", "Boost your Google review count",
            "Reviews are a powerful form of social proof. Aim for at least 20+ high-quality reviews to build authority.",
            "Feedback", "High", "Deep work",
        ),
        lambda a: _number(a, "googleReviews") < 5,
    ),
    (
        Opportunity(
            "hasWebsite", "Create a professional website",
            "A website is your digital storefront. It's a critical asset for establishing credibility and attracting leads.",
            "Digital", "High", "Deep work",
        ),
        lambda a: not _flag(a, "hasWebsite"),
    ),
    (
        Opportunity(
            "hasWorkersComp", "Add workers' comp insurance",
            "This is a core credibility and compliance signal, especially for businesses with employees. "
            "Many adjusters and commercial clients expect it.",
            "Operational", "Medium", "Deep work",
        ),
        lambda a: not _flag(a, "hasWorkersComp"),
    ),
    (
        Opportunity(
            "googleReviewsMedium", "Gather more Google reviews",
            "You have a good start, but pushing from 5-10 reviews to 20-40 can significantly "
            "increase your local authority and lead flow.",
            "Feedback", "Medium", "Quick win",
        ),
        lambda a: 5 <= _number(a, "googleReviews") < 20,
    ),
    (
        Opportunity(
            "googleRating", "Improve your Google rating",
            "A rating below 4.5 stars can deter potential customers. Focus on delivering excellent "
            "service and encouraging happy clients to leave reviews.",
            "Feedback", "Medium", "Deep work",
        ),
        lambda a: 0 < _number(a, "googleRating") < 4.5,
    ),
    (
        Opportunity(
            "hasProEmail", "Set up a professional email address",
            "Using an email like 'info@yourcompany.com' instead of a generic Gmail or Yahoo address "
            "is a quick way to look more professional.",
            "Digital", "Medium", "Quick win",
        ),
        lambda a: not _flag(a, "hasProEmail"),
    ),
    (
        Opportunity(
            "certifications", "Earn more IICRC certifications",
            "Certifications demonstrate a commitment to industry standards and expertise, "
            "justifying higher prices and building trust.",
            "Certifications", "Medium", "Deep work",
        ),
        lambda a: _cert_count(a) < 2,
    ),
    (
        Opportunity(
            "emergencyLine", "Establish a 24/7 emergency line",
            "For restoration, being available 24/7 is critical. Clearly advertising this on your "
            "site can significantly increase emergency calls.",
            "Digital", "Medium", "Quick win",
        ),
        lambda a: not _flag(a, "emergencyLine"),
    ),
]

_IMPACT_ORDER = {"High": 1, "Medium": 2}
_TYPE_ORDER = {"Quick win": 1, "Deep work": 2}


def get_opportunities(answers: dict[str, Any], limit: int = 3) -> list[Opportunity]:
    """
    Pick the most valuable improvements for these answers.

    Ordered by impact (High first), then effort (Quick win first); the sort
    is stable so ties keep their declaration order.
    """
    found = [opportunity for opportunity, applies in _OPPORTUNITIES if applies(answers)]
    found.sort(key=lambda o: (_IMPACT_ORDER[o.impact], _TYPE_ORDER[o.type]))
    return found[:limit]


# =============================================================================
# Scoring
# =============================================================================

def _licensing_points(years_licensed: float) -> int:
    years = max(0.0, min(years_licensed, RAW_MAX["licensing"]))
    if years == 0:
        return 0
    if years <= 2:
        return 4
    if years <= 5:
        return 7
    return 10


def _feedback_points(rating: float, reviews: float) -> float:
    if rating <= 0 and reviews <= 0:
        return 0
    rating_points = 5 + (max(4.0, rating) - 4.0) * 10  # 4.0 -> 5, 5.0 -> 15

    if reviews >= 40:
        review_points = 15
    elif reviews >= 20:
        review_points = 10
    elif reviews >= 5:
        review_points = 6
    elif reviews > 0:
        review_points = 4
    else:
        review_points = 0

    return min(RAW_MAX["feedback"], rating_points + review_points)


def calculate_score(answers: dict[str, Any]) -> ScoreBreakdown:
    """
    Score a completed questionnaire.

    Args:
        answers: Questionnaire answers keyed as the assessment form sends
            them (hasLicense, yearsLicensed, googleRating, certifications, ...)

    Returns:
        ScoreBreakdown with category scores, total, grade, eligibility and
        opportunities
    """
    operational = 0
    if _flag(answers, "hasLicense"):
        operational += 10
    if _flag(answers, "hasLiabilityInsurance"):
        operational += 5
    if _flag(answers, "hasWorkersComp"):
        operational += 5
    operational = min(RAW_MAX["operational"], operational)

    licensing = _licensing_points(_number(answers, "yearsLicensed"))
    feedback = _feedback_points(_number(answers, "googleRating"), _number(answers, "googleReviews"))
    certifications = min(RAW_MAX["certifications"], _cert_count(answers) * 5)

    digital = 0
    if _flag(answers, "hasWebsite"):
        digital += 7
    if _flag(answers, "hasProEmail"):
        digital += 5
    if _flag(answers, "emergencyLine"):
        digital += 3
    if _flag(answers, "activeSocialMedia"):
        digital += 1
    if _flag(answers, "brandedVehicles"):
        digital += 1
    digital = min(RAW_MAX["digital"], digital)

    raw_total = operational + licensing + feedback + certifications + digital
    total = min(100, max(0, math.floor(raw_total + 0.5)))  # half-up

    reasons = evaluate_eligibility(answers, {
        "operational": operational,
        "licensing": licensing,
        "feedback": feedback,
        "certifications": certifications,
        "digital": digital,
        "total": total,
    })

    return ScoreBreakdown(
        operational=operational,
        licensing=licensing,
        feedback=feedback,
        certifications=certifications,
        digital=digital,
        total=total,
        grade=get_grade(total),
        is_eligible=not reasons,
        eligibility_reasons=reasons,
        opportunities=get_opportunities(answers),
    )
