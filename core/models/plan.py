# =============================================================================
# core/models/plan.py - Membership Plans
# =============================================================================
# Plan slugs, the normalization that maps any input onto a known slug, and
# the onboarding content shown on the post-payment page for each plan.
#
# Flow: raw value (URL segment, cached preference, Stripe metadata)
#       -> normalize_plan() -> PLAN_DETAILS[plan]
# =============================================================================

from enum import Enum

from pydantic import BaseModel, Field


class Plan(str, Enum):
    """
    Membership plan slugs.

    FOUNDING_MEMBER is the default for unknown or missing values.
    """
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    FOUNDING_MEMBER = "founding-member"


DEFAULT_PLAN = Plan.FOUNDING_MEMBER

# Display tier names used on profiles and in the admin console
PACKAGE_TIERS: tuple[str, ...] = ("Bronze", "Silver", "Gold", "Founding Member", "Platinum")

PLAN_TO_TIER: dict[Plan, str] = {
    Plan.BRONZE: "Bronze",
    Plan.SILVER: "Silver",
    Plan.GOLD: "Gold",
    Plan.FOUNDING_MEMBER: "Founding Member",
}


def plan_slug(value: str | None) -> str:
    """
    Slug a tier or plan name: lower-case, spaces become hyphens.

    Example:
        plan_slug("Founding Member")  # "founding-member"
    """
    return "-".join((value or "").strip().lower().split())


def parse_plan(value: str | None) -> Plan | None:
    """Return the Plan for a value, or None if it names no known plan."""
    try:
        return Plan(plan_slug(value))
    except ValueError:
        return None


def normalize_plan(value: str | None) -> Plan:
    """
    Map any value onto a known plan, defaulting to founding-member.

    Example:
        normalize_plan("Gold")        # Plan.GOLD
        normalize_plan("platinum")    # Plan.FOUNDING_MEMBER
        normalize_plan(None)          # Plan.FOUNDING_MEMBER
    """
    return parse_plan(value) or DEFAULT_PLAN


# =============================================================================
# Plan Content
# =============================================================================

class PlanBenefit(BaseModel):
    """One onboarding step shown after payment."""
    icon: str
    title: str
    description: str


class PlanDetails(BaseModel):
    """Post-payment content for one plan."""
    plan: Plan
    badge_text: str
    rating_text: str
    benefits: list[PlanBenefit] = Field(default_factory=list)

    model_config = {"frozen": True}


_UPLOAD = PlanBenefit(
    icon="UploadIcon",
    title="Upload Your Documents",
    description="Submit required documents for account verification and badge approval.",
)
_CLAIM_TEXT = "Download your verified badge once your account is approved."

PLAN_DETAILS: dict[Plan, PlanDetails] = {
    Plan.BRONZE: PlanDetails(
        plan=Plan.BRONZE,
        badge_text="Bronze Member",
        rating_text="B+ Restoration Professional",
        benefits=[
            _UPLOAD,
            PlanBenefit(icon="UsersIcon", title="Join the Community",
                        description="Access our private community for networking and support."),
            PlanBenefit(icon="ShieldCheckIcon", title="Claim Your Badge", description=_CLAIM_TEXT),
            PlanBenefit(icon="ListBulletIcon", title="Explore Resources",
                        description="Check out the member resources to get started."),
        ],
    ),
    Plan.SILVER: PlanDetails(
        plan=Plan.SILVER,
        badge_text="Silver Member",
        rating_text="A- Restoration Specialist",
        benefits=[
            _UPLOAD,
            PlanBenefit(icon="UsersIcon", title="Join the Community",
                        description="Access our private community for networking and support."),
            PlanBenefit(icon="ShieldCheckIcon", title="Claim Your Enhanced Badge", description=_CLAIM_TEXT),
            PlanBenefit(icon="NewspaperIcon", title="Explore Premium Resources",
                        description="Access the resource library and request your first SEO post."),
        ],
    ),
    Plan.GOLD: PlanDetails(
        plan=Plan.GOLD,
        badge_text="Gold Member",
        rating_text="A Elite Restoration Expert",
        benefits=[
            _UPLOAD,
            PlanBenefit(icon="UsersIcon", title="Join the Member's Circle",
                        description="Get access to our exclusive circle for Gold members."),
            PlanBenefit(icon="ShieldCheckIcon", title="Claim Your Premium Badge", description=_CLAIM_TEXT),
            PlanBenefit(icon="ClipboardDocumentCheckIcon", title="Access the 99-Steps Blueprint",
                        description="Start your journey to mastery with our exclusive blueprint dashboard."),
        ],
    ),
    Plan.FOUNDING_MEMBER: PlanDetails(
        plan=Plan.FOUNDING_MEMBER,
        badge_text="⭐ Founding Member",
        rating_text="A+ Founding Elite - Restoration Pioneer",
        benefits=[
            _UPLOAD,
            PlanBenefit(icon="UsersIcon", title="Join the Founder's Circle",
                        description="Access our private community for direct communication and networking."),
            PlanBenefit(icon="ShieldCheckIcon", title="Claim Your Exclusive Badge", description=_CLAIM_TEXT),
            PlanBenefit(icon="TrophyIcon", title="Explore Premium Resources",
                        description="Access lifetime tools, exclusive content, and early feature releases."),
        ],
    ),
}


def details_for(value: str | None) -> PlanDetails:
    """Look up plan content for any raw value; never fails."""
    return PLAN_DETAILS[normalize_plan(value)]
