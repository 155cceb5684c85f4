# =============================================================================
# core/models/admin.py - Admin Console Schemas
# =============================================================================
# Records managed by the admin back office and the edit payloads for them:
# - AdminMember, AdminSubscription, AdminVerification, AdminServiceRequest,
#   AdminUser, FoundingPartnerOffer
# - *Update models: the fields an admin may change from a drawer or modal
# - ActionResult: the stored record plus the toast shown after the write
#
# Records are immutable; edits produce a copy that replaces the stored one.
# =============================================================================

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

Tier = Literal["Bronze", "Silver", "Gold", "Founding Member", "Platinum"]
BadgeRating = Literal["A+", "A", "B+"]
MemberStatus = Literal["Active", "Suspended", "Pending", "Canceled"]
BadgeStatus = Literal["NONE", "PENDING", "ACTIVE", "REVOKED"]

SubscriptionStatus = Literal["Active", "Trialing", "Past due", "Canceled"]
BillingCycle = Literal["Monthly", "Annual"]
InvoiceStatus = Literal["Paid", "Failed", "Pending"]
ChurnRisk = Literal["Low", "Medium", "High"]

VerificationStatus = Literal["Pending", "Approved", "Rejected", "Needs Replacement", "Expired"]
DocumentType = Literal["Contractor License", "Liability Insurance", "Workers’ Comp", "IICRC", "Other"]

RequestType = Literal["SEO Blog Post", "Spotlight Article", "Website Review", "Badge Support", "Other"]
RequestStatus = Literal["Open", "In progress", "Completed", "Canceled"]
RequestPriority = Literal["Low", "Normal", "High"]
RequestSource = Literal["Member portal", "Internal", "Email"]

AdminRole = Literal["Superadmin", "Operations", "Support", "Content", "ReadOnly"]
AdminStatus = Literal["Active", "Suspended"]

OfferStatus = Literal["ACTIVE", "CLOSED"]


class _Record(BaseModel):
    model_config = {"frozen": True}


# =============================================================================
# Members
# =============================================================================

class MemberDocument(_Record):
    name: str
    status: Literal["Approved", "Pending", "Rejected"]


class ActivityEntry(_Record):
    event: str
    date: str


class BillingSnapshot(_Record):
    stripe_id: str
    last_payment: str
    plan: str


class MemberStats(_Record):
    profile_views: int = 0
    badge_clicks: int = 0


class Badge(_Record):
    """Badge descriptor embedded on member websites."""
    status: BadgeStatus = "NONE"
    badge_label: str
    image_light_url: str = ""
    image_dark_url: str | None = None
    profile_url: str = ""


class AdminMember(_Record):
    id: str
    business_name: str
    city: str
    email: str
    tier: Tier
    rating: BadgeRating
    status: MemberStatus
    renewal_date: str
    join_date: str
    mrr: float = 0
    pending_docs: int = 0
    open_requests: int = 0
    documents: list[MemberDocument] = Field(default_factory=list)
    activity_log: list[ActivityEntry] = Field(default_factory=list)
    billing_info: BillingSnapshot | None = None
    stats: MemberStats = Field(default_factory=MemberStats)
    badge: Badge | None = None


class BadgeUpdate(BaseModel):
    status: BadgeStatus | None = None
    badge_label: str | None = None
    image_light_url: str | None = None
    image_dark_url: str | None = None
    profile_url: str | None = None


class MemberUpdate(BaseModel):
    """Fields editable from the member drawer."""
    tier: Tier | None = None
    rating: BadgeRating | None = None
    status: MemberStatus | None = None
    renewal_date: str | None = None
    badge: BadgeUpdate | None = None


# =============================================================================
# Subscriptions
# =============================================================================

class AdminInvoice(_Record):
    id: str
    date: str
    amount: float
    status: InvoiceStatus


class AdminSubscription(_Record):
    id: str
    member_id: str
    business_name: str
    tier: Tier
    plan_price: float
    billing_cycle: BillingCycle
    status: SubscriptionStatus
    next_payment_date: str
    last_payment_date: str
    mrr: float
    stripe_customer_id: str
    stripe_subscription_id: str
    canceled_date: str | None = None
    invoices: list[AdminInvoice] = Field(default_factory=list)
    churn_risk: ChurnRisk | None = None
    flagged: bool = False


class SubscriptionKpis(BaseModel):
    mrr: float
    active: int
    past_due: int
    canceled_this_month: int


# =============================================================================
# Verifications
# =============================================================================

class AdminVerification(_Record):
    id: str
    member_id: str
    business_name: str
    city: str
    tier: Tier
    rating: BadgeRating
    document_type: DocumentType
    status: VerificationStatus
    uploaded_at: str
    expires_at: str
    admin_note: str | None = None
    missing_items: int | None = None


class VerificationUpdate(BaseModel):
    status: VerificationStatus
    admin_note: str | None = None


class BulkVerificationUpdate(BaseModel):
    ids: list[str] = Field(..., min_length=1)
    status: VerificationStatus = "Approved"


class VerificationSummary(BaseModel):
    pending: int
    needs_replacement: int
    expiring_soon: int


# =============================================================================
# Service Requests
# =============================================================================

class RequestActivity(_Record):
    event: str
    timestamp: str
    by: str
    icon: str = "Cog6ToothIcon"


class InternalNote(_Record):
    note: str
    author: str
    timestamp: str


class MemberUpdateNote(_Record):
    update: str
    author: str
    timestamp: str


class AdminServiceRequest(_Record):
    id: str
    member_id: str
    business_name: str
    tier: Tier
    city: str
    type: RequestType
    title: str
    status: RequestStatus
    priority: RequestPriority
    created_at: str
    due_date: str
    assigned_to: str = "Unassigned"
    source: RequestSource
    description: str | None = None
    activity_log: list[RequestActivity] = Field(default_factory=list)
    internal_notes: list[InternalNote] = Field(default_factory=list)
    member_updates: list[MemberUpdateNote] = Field(default_factory=list)


class ServiceRequestUpdate(BaseModel):
    status: RequestStatus | None = None
    assigned_to: str | None = None


class NoteRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class ServiceRequestCounts(BaseModel):
    open: int
    in_progress: int
    overdue: int


# =============================================================================
# Admin Users
# =============================================================================

class AdminUser(_Record):
    id: str
    name: str
    email: str
    role: AdminRole
    status: AdminStatus
    last_login: str


class AdminUserInvite(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: AdminRole = "Support"


class AdminUserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    role: AdminRole | None = None
    status: AdminStatus | None = None


# =============================================================================
# Founding Partner Offer
# =============================================================================

class FoundingPartnerOffer(_Record):
    status: OfferStatus = "ACTIVE"
    claimed_count: int
    total_spots: int
    expiration_timestamp: str
    total_revenue: float


class ExtendDeadlineRequest(BaseModel):
    expiration_timestamp: str = Field(..., examples=["2026-03-31T23:59:59Z"])


# =============================================================================
# Results
# =============================================================================

T = TypeVar("T")


class ActionResult(BaseModel, Generic[T]):
    """A committed change and the toast to show for it."""
    item: T
    toast: str


class ListResult(BaseModel, Generic[T]):
    """A filtered, sorted view of a screen's records."""
    items: list[T]
    total: int
