# =============================================================================
# core/models/user.py - Application User Schemas
# =============================================================================
# The display-facing user synthesized from an auth session:
# - AppUser: name, role, package and the account sections the member area shows
# - MemberBenefit: one benefit card on the dashboard
#
# An AppUser is rebuilt on every session change; fields the visitor already
# edited survive the rebuild when the email is unchanged.
# =============================================================================

from typing import Literal

from pydantic import BaseModel, Field

Role = Literal["admin", "member"]


class MemberBenefit(BaseModel):
    """A membership benefit shown on the dashboard."""
    title: str
    description: str
    icon: str
    quota: int | None = None
    used: int | None = None
    next_date: str | None = None
    status: str | None = None
    is_included: bool | None = None


BASE_BENEFITS: tuple[MemberBenefit, ...] = (
    MemberBenefit(
        title="SEO Blog Posts",
        description="Professionally written articles to boost your site's search engine ranking.",
        icon="NewspaperIcon",
        quota=2,
        used=1,
    ),
    MemberBenefit(
        title="Quarterly Website Review",
        description="Our experts will review your site for SEO and conversion improvements.",
        icon="ChartBarIcon",
        next_date="August 15, 2024",
    ),
    MemberBenefit(
        title="Trust Badge & Network Listing",
        description="Display your verified status and get listed in our trusted network.",
        icon="ShieldCheckIcon",
        status="Active",
    ),
    MemberBenefit(
        title="Priority Support",
        description="Get faster response times from our dedicated member support team.",
        icon="ChatBubbleOvalLeftEllipsisIcon",
        is_included=True,
    ),
)


class MemberPlan(BaseModel):
    """Plan summary on the account page."""
    name: str = "Gold"
    billing_cycle: str = "Billed annually"
    price: str = "$229/month"
    renewal_date: str = "Mar 15, 2025"
    rating: str = "A+"


class BusinessProfile(BaseModel):
    """Public business profile fields the member edits."""
    contact_number: str = ""
    address: str = ""
    description: str = ""
    dba_name: str = ""
    years_in_business: int | None = None
    website_url: str = ""
    logo_url: str = ""
    service_areas: list[str] = Field(default_factory=list)
    specialties: list[str] = Field(default_factory=list)
    social_links: dict[str, str] = Field(default_factory=dict)


class AccountInfo(BaseModel):
    owner_name: str
    owner_email: str
    role: str
    company_name: str = ""


class NotificationPreferences(BaseModel):
    document_status: bool = True
    verification_status: bool = True
    request_updates: bool = True
    benefit_delivery: bool = True
    billing_updates: bool = True
    community_updates: bool = True
    email_frequency: Literal["real-time", "daily", "weekly"] = "real-time"


class AppUser(BaseModel):
    """
    Display-facing user derived from the auth session.

    Example:
        {
            "name": "Jane Owner",
            "email": "owner@acme.com",
            "role": "member",
            "package": "Gold",
            ...
        }
    """
    id: str
    name: str
    email: str
    role: Role = "member"
    package: str = "Gold"
    plan: MemberPlan = Field(default_factory=MemberPlan)
    profile: BusinessProfile = Field(default_factory=BusinessProfile)
    benefits: list[MemberBenefit] = Field(default_factory=lambda: [b.model_copy() for b in BASE_BENEFITS])
    account: AccountInfo
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
