# =============================================================================
# core/admin/verifications.py - Document Verification Queue
# =============================================================================

from __future__ import annotations

import logging
from datetime import date, timedelta

from core.admin.repository import InMemoryRepository
from core.admin.table import SortState, TableQuery
from core.models.admin import (
    ActionResult,
    AdminVerification,
    BulkVerificationUpdate,
    ListResult,
    VerificationSummary,
    VerificationUpdate,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("business_name", "city")
EXPIRING_WINDOW_DAYS = 30


def is_expiring_soon(record: AdminVerification, today: date) -> bool:
    """True when the document expires within the window and is not already Expired."""
    if record.status == "Expired":
        return False
    try:
        expires = date.fromisoformat(record.expires_at[:10])
    except ValueError:
        return False
    return today < expires <= today + timedelta(days=EXPIRING_WINDOW_DAYS)


class VerificationService:
    def __init__(self, repository: InMemoryRepository[AdminVerification]):
        self.repository = repository

    def list(
        self,
        search: str = "",
        status: str | None = None,
        document_type: str | None = None,
        tier: str | None = None,
        rating: str | None = None,
        sort: SortState | None = None,
    ) -> ListResult[AdminVerification]:
        query = TableQuery(
            search=search,
            filters={"status": status, "document_type": document_type, "tier": tier, "rating": rating},
            sort=sort,
        )
        items = query.apply(self.repository.list(), SEARCH_FIELDS)
        return ListResult[AdminVerification](items=items, total=len(self.repository))

    def summary(self, today: date | None = None) -> VerificationSummary:
        today = today or date.today()
        records = self.repository.list()
        return VerificationSummary(
            pending=sum(1 for r in records if r.status == "Pending"),
            needs_replacement=sum(1 for r in records if r.status == "Needs Replacement"),
            expiring_soon=sum(1 for r in records if is_expiring_soon(r, today)),
        )

    def update(self, verification_id: str, update: VerificationUpdate) -> ActionResult[AdminVerification]:
        changes = {"status": update.status}
        if update.admin_note is not None:
            changes["admin_note"] = update.admin_note

        record = self.repository.update(verification_id, **changes)
        if update.status == "Approved":
            toast = "Document approved."
        else:
            toast = f'Document status updated to "{update.status}".'

        logger.info(f"[admin] verification {verification_id} -> {update.status}")
        return ActionResult[AdminVerification](item=record, toast=toast)

    def bulk_update(self, update: BulkVerificationUpdate) -> ActionResult[list[AdminVerification]]:
        """
        Set one status on every selected document.

        Raises:
            RecordNotFoundError: If any id is unknown (nothing is changed)
        """
        # A selection is a set; repeated ids count once
        ids = list(dict.fromkeys(update.ids))

        already_approved = 0
        if update.status == "Approved":
            already_approved = sum(
                1 for record_id in ids if self.repository.get(record_id).status == "Approved"
            )

        records = self.repository.update_many(
            ids,
            lambda record: record.model_copy(update={"status": update.status}),
        )

        toast = f'{len(ids)} documents marked as "{update.status}".'
        if already_approved:
            toast += f" ({already_approved} were already approved.)"

        logger.info(f"[admin] bulk verification update: {len(records)} -> {update.status}")
        return ActionResult[list[AdminVerification]](item=records, toast=toast)
