# =============================================================================
# core/admin/service_requests.py - Service Request Queue
# =============================================================================
# Member requests (blog posts, badge support, website reviews ...) and the
# triage actions on them. Notes are append-only and stamped with the author.
# =============================================================================

import logging
from datetime import date, datetime

from core.admin.repository import InMemoryRepository
from core.admin.table import SortState, TableQuery
from core.models.admin import (
    ActionResult,
    AdminServiceRequest,
    InternalNote,
    ListResult,
    MemberUpdateNote,
    RequestActivity,
    RequestStatus,
    ServiceRequestCounts,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("business_name", "title", "id")
CLOSED_STATUSES = ("Completed", "Canceled")
NOTE_AUTHOR = "Admin User"


def timestamp(now: datetime | None = None) -> str:
    """Display timestamp, e.g. "2024-07-20, 2:15 PM"."""
    now = now or datetime.now()
    return f"{now:%Y-%m-%d}, {now:%I:%M %p}".replace(", 0", ", ")


def is_overdue(request: AdminServiceRequest, today: date) -> bool:
    if request.status in CLOSED_STATUSES:
        return False
    try:
        return date.fromisoformat(request.due_date[:10]) < today
    except ValueError:
        return False


class ServiceRequestService:
    def __init__(self, repository: InMemoryRepository[AdminServiceRequest]):
        self.repository = repository

    def list(
        self,
        search: str = "",
        status: str | None = None,
        type: str | None = None,
        priority: str | None = None,
        assigned_to: str | None = None,
        sort: SortState | None = None,
    ) -> ListResult[AdminServiceRequest]:
        query = TableQuery(
            search=search,
            filters={"status": status, "type": type, "priority": priority, "assigned_to": assigned_to},
            sort=sort,
        )
        items = query.apply(self.repository.list(), SEARCH_FIELDS)
        return ListResult[AdminServiceRequest](items=items, total=len(self.repository))

    def get(self, request_id: str) -> AdminServiceRequest:
        return self.repository.get(request_id)

    def counts(self, today: date | None = None) -> ServiceRequestCounts:
        today = today or date.today()
        requests = self.repository.list()
        return ServiceRequestCounts(
            open=sum(1 for r in requests if r.status == "Open"),
            in_progress=sum(1 for r in requests if r.status == "In progress"),
            overdue=sum(1 for r in requests if is_overdue(r, today)),
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def set_status(
        self, request_id: str, status: RequestStatus, now: datetime | None = None
    ) -> ActionResult[AdminServiceRequest]:
        current = self.repository.get(request_id)
        entry = RequestActivity(event=f"Marked as {status}", timestamp=timestamp(now), by=NOTE_AUTHOR)
        record = self.repository.update(
            request_id, status=status, activity_log=[entry, *current.activity_log]
        )
        logger.info(f"[admin] request {request_id} -> {status}")
        return ActionResult[AdminServiceRequest](item=record, toast=f"Request marked as {status}.")

    def assign(
        self, request_id: str, assignee: str, now: datetime | None = None
    ) -> ActionResult[AdminServiceRequest]:
        current = self.repository.get(request_id)
        entry = RequestActivity(event=f"Assigned to {assignee}", timestamp=timestamp(now), by=NOTE_AUTHOR)
        record = self.repository.update(
            request_id, assigned_to=assignee, activity_log=[entry, *current.activity_log]
        )
        return ActionResult[AdminServiceRequest](item=record, toast="Assignee updated.")

    def add_internal_note(
        self, request_id: str, text: str, now: datetime | None = None
    ) -> ActionResult[AdminServiceRequest]:
        current = self.repository.get(request_id)
        note = InternalNote(note=text.strip(), author=NOTE_AUTHOR, timestamp=timestamp(now))
        record = self.repository.update(request_id, internal_notes=[*current.internal_notes, note])
        return ActionResult[AdminServiceRequest](item=record, toast="Internal note added.")

    def add_member_update(
        self, request_id: str, text: str, now: datetime | None = None
    ) -> ActionResult[AdminServiceRequest]:
        current = self.repository.get(request_id)
        note = MemberUpdateNote(update=text.strip(), author=NOTE_AUTHOR, timestamp=timestamp(now))
        record = self.repository.update(request_id, member_updates=[*current.member_updates, note])
        return ActionResult[AdminServiceRequest](item=record, toast="Update sent to member.")
