# =============================================================================
# app/routers/admin.py - Admin Console Endpoints
# =============================================================================
# Back-office screens: members, subscriptions, verifications, service
# requests, admin users and the founding partner offer.
# All endpoints require an active admin (get_current_admin).
#
# Every mutation returns {"item": ..., "toast": ...}.
# =============================================================================

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel

from app.auth import get_current_admin
from app.dependencies import AdminConsoleDep
from app.exceptions import RequestValidationFailed
from core.admin import OfferView, SortState
from core.models.admin import (
    ActionResult,
    AdminMember,
    AdminServiceRequest,
    AdminSubscription,
    AdminUser,
    AdminUserInvite,
    AdminUserUpdate,
    AdminVerification,
    BillingCycle,
    BulkVerificationUpdate,
    ExtendDeadlineRequest,
    FoundingPartnerOffer,
    ListResult,
    MemberUpdate,
    NoteRequest,
    ServiceRequestCounts,
    ServiceRequestUpdate,
    SubscriptionKpis,
    Tier,
    VerificationSummary,
    VerificationUpdate,
)

router = APIRouter(dependencies=[Depends(get_current_admin)])


# =============================================================================
# Request Models
# =============================================================================

class TierChangeRequest(BaseModel):
    tier: Tier


class BillingCycleChangeRequest(BaseModel):
    billing_cycle: BillingCycle


# =============================================================================
# Shared Query Parameters
# =============================================================================

SearchQuery = Annotated[str, Query(description="Case-insensitive substring search")]
SortQuery = Annotated[str | None, Query(description="Column to sort by")]
DirectionQuery = Annotated[Literal["ascending", "descending"], Query(description="Sort direction")]
RecordId = Annotated[str, Path(description="Record id")]


def _sort(column: str | None, direction: str) -> SortState | None:
    return SortState(column, direction) if column else None


# =============================================================================
# Members
# =============================================================================

@router.get("/members", response_model=ListResult[AdminMember])
async def list_members(
    console: AdminConsoleDep,
    search: SearchQuery = "",
    tier: str | None = None,
    status: str | None = None,
    rating: str | None = None,
    sort: SortQuery = None,
    direction: DirectionQuery = "ascending",
):
    """List members; newest joiners first unless another sort is given."""
    return console.members.list(search, tier, status, rating, _sort(sort, direction))


@router.get("/members/{member_id}", response_model=AdminMember)
async def get_member(member_id: RecordId, console: AdminConsoleDep):
    return console.members.get(member_id)


@router.patch("/members/{member_id}", response_model=ActionResult[AdminMember])
async def update_member(member_id: RecordId, body: MemberUpdate, console: AdminConsoleDep):
    return console.members.update(member_id, body)


# =============================================================================
# Subscriptions
# =============================================================================

@router.get("/subscriptions", response_model=ListResult[AdminSubscription])
async def list_subscriptions(
    console: AdminConsoleDep,
    search: SearchQuery = "",
    status: str | None = None,
    tier: str | None = None,
    billing_cycle: str | None = None,
    sort: SortQuery = None,
    direction: DirectionQuery = "ascending",
):
    return console.subscriptions.list(search, status, tier, billing_cycle, _sort(sort, direction))


@router.get("/subscriptions/kpis", response_model=SubscriptionKpis)
async def subscription_kpis(console: AdminConsoleDep):
    """MRR (Active + Trialing), active, past due and canceled this month."""
    return console.subscriptions.kpis()


@router.get("/subscriptions/{subscription_id}", response_model=AdminSubscription)
async def get_subscription(subscription_id: RecordId, console: AdminConsoleDep):
    return console.subscriptions.get(subscription_id)


@router.post("/subscriptions/{subscription_id}/tier", response_model=ActionResult[AdminSubscription])
async def change_subscription_tier(
    subscription_id: RecordId, body: TierChangeRequest, console: AdminConsoleDep
):
    return console.subscriptions.change_tier(subscription_id, body.tier)


@router.post("/subscriptions/{subscription_id}/billing-cycle", response_model=ActionResult[AdminSubscription])
async def change_billing_cycle(
    subscription_id: RecordId, body: BillingCycleChangeRequest, console: AdminConsoleDep
):
    return console.subscriptions.change_billing_cycle(subscription_id, body.billing_cycle)


@router.post("/subscriptions/{subscription_id}/mark-paid", response_model=ActionResult[AdminSubscription])
async def mark_subscription_paid(subscription_id: RecordId, console: AdminConsoleDep):
    return console.subscriptions.mark_paid(subscription_id)


@router.post("/subscriptions/{subscription_id}/flag", response_model=ActionResult[AdminSubscription])
async def flag_subscription(subscription_id: RecordId, console: AdminConsoleDep):
    return console.subscriptions.flag(subscription_id)


@router.post("/subscriptions/{subscription_id}/cancel", response_model=ActionResult[AdminSubscription])
async def cancel_subscription(subscription_id: RecordId, console: AdminConsoleDep):
    return console.subscriptions.cancel(subscription_id)


# =============================================================================
# Verifications
# =============================================================================

@router.get("/verifications", response_model=ListResult[AdminVerification])
async def list_verifications(
    console: AdminConsoleDep,
    search: SearchQuery = "",
    status: str | None = None,
    document_type: str | None = None,
    tier: str | None = None,
    rating: str | None = None,
    sort: SortQuery = None,
    direction: DirectionQuery = "ascending",
):
    return console.verifications.list(search, status, document_type, tier, rating, _sort(sort, direction))


@router.get("/verifications/summary", response_model=VerificationSummary)
async def verification_summary(console: AdminConsoleDep):
    return console.verifications.summary()


@router.post("/verifications/bulk", response_model=ActionResult[list[AdminVerification]])
async def bulk_update_verifications(body: BulkVerificationUpdate, console: AdminConsoleDep):
    """Apply one status to every selected document."""
    return console.verifications.bulk_update(body)


@router.patch("/verifications/{verification_id}", response_model=ActionResult[AdminVerification])
async def update_verification(
    verification_id: RecordId, body: VerificationUpdate, console: AdminConsoleDep
):
    return console.verifications.update(verification_id, body)


# =============================================================================
# Service Requests
# =============================================================================

@router.get("/service-requests", response_model=ListResult[AdminServiceRequest])
async def list_service_requests(
    console: AdminConsoleDep,
    search: SearchQuery = "",
    status: str | None = None,
    type: str | None = None,
    priority: str | None = None,
    assigned_to: str | None = None,
    sort: SortQuery = None,
    direction: DirectionQuery = "ascending",
):
    return console.service_requests.list(
        search, status, type, priority, assigned_to, _sort(sort, direction)
    )


@router.get("/service-requests/counts", response_model=ServiceRequestCounts)
async def service_request_counts(console: AdminConsoleDep):
    return console.service_requests.counts()


@router.get("/service-requests/{request_id}", response_model=AdminServiceRequest)
async def get_service_request(request_id: RecordId, console: AdminConsoleDep):
    return console.service_requests.get(request_id)


@router.patch("/service-requests/{request_id}", response_model=ActionResult[AdminServiceRequest])
async def update_service_request(
    request_id: RecordId, body: ServiceRequestUpdate, console: AdminConsoleDep
):
    """
    Change status and/or assignee.

    When both are given the status is applied first and the assignee toast
    is returned.
    """
    if body.status is None and body.assigned_to is None:
        raise RequestValidationFailed([{"field": "status", "message": "status or assigned_to is required"}])

    result = None
    if body.status is not None:
        result = console.service_requests.set_status(request_id, body.status)
    if body.assigned_to is not None:
        result = console.service_requests.assign(request_id, body.assigned_to)
    return result


@router.post("/service-requests/{request_id}/notes", response_model=ActionResult[AdminServiceRequest])
async def add_internal_note(request_id: RecordId, body: NoteRequest, console: AdminConsoleDep):
    return console.service_requests.add_internal_note(request_id, body.text)


@router.post("/service-requests/{request_id}/member-updates", response_model=ActionResult[AdminServiceRequest])
async def add_member_update(request_id: RecordId, body: NoteRequest, console: AdminConsoleDep):
    return console.service_requests.add_member_update(request_id, body.text)


# =============================================================================
# Admin Users
# =============================================================================

@router.get("/users", response_model=list[AdminUser])
async def list_admin_users(console: AdminConsoleDep):
    return console.admin_users.list()


@router.post("/users", response_model=ActionResult[AdminUser], status_code=201)
async def invite_admin_user(body: AdminUserInvite, console: AdminConsoleDep):
    return console.admin_users.invite(body)


@router.patch("/users/{user_id}", response_model=ActionResult[AdminUser])
async def update_admin_user(user_id: RecordId, body: AdminUserUpdate, console: AdminConsoleDep):
    return console.admin_users.update(user_id, body)


@router.post("/users/{user_id}/toggle-status", response_model=ActionResult[AdminUser])
async def toggle_admin_user(user_id: RecordId, console: AdminConsoleDep):
    """Suspend an active admin or re-activate a suspended one."""
    return console.admin_users.toggle_status(user_id)


# =============================================================================
# Founding Partner Offer
# =============================================================================

@router.get("/founding-partner", response_model=OfferView)
async def get_founding_offer(console: AdminConsoleDep):
    return console.founding_partner.view()


@router.post("/founding-partner/close", response_model=ActionResult[FoundingPartnerOffer])
async def close_founding_offer(console: AdminConsoleDep):
    return console.founding_partner.close()


@router.post("/founding-partner/extend", response_model=ActionResult[FoundingPartnerOffer])
async def extend_founding_offer(body: ExtendDeadlineRequest, console: AdminConsoleDep):
    return console.founding_partner.extend(body.expiration_timestamp)


@router.post("/founding-partner/members", response_model=ActionResult[FoundingPartnerOffer])
async def add_founding_member(console: AdminConsoleDep):
    """Claim one more spot; 409 once every spot is taken."""
    return console.founding_partner.add_member()
