# =============================================================================
# core/admin/members.py - Members Screen
# =============================================================================

import logging

from core.admin.repository import InMemoryRepository
from core.admin.table import SortState, TableQuery
from core.models.admin import ActionResult, AdminMember, Badge, ListResult, MemberUpdate

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("business_name", "email")
DEFAULT_SORT = SortState("join_date", "descending")

MEMBER_UPDATED = "Member updated successfully."


class MemberService:
    """Listing and drawer edits for the members table."""

    def __init__(self, repository: InMemoryRepository[AdminMember]):
        self.repository = repository

    def list(
        self,
        search: str = "",
        tier: str | None = None,
        status: str | None = None,
        rating: str | None = None,
        sort: SortState | None = None,
    ) -> ListResult[AdminMember]:
        query = TableQuery(
            search=search,
            filters={"tier": tier, "status": status, "rating": rating},
            sort=sort or DEFAULT_SORT,
        )
        items = query.apply(self.repository.list(), SEARCH_FIELDS)
        return ListResult[AdminMember](items=items, total=len(self.repository))

    def get(self, member_id: str) -> AdminMember:
        return self.repository.get(member_id)

    def update(self, member_id: str, update: MemberUpdate) -> ActionResult[AdminMember]:
        """
        Apply a drawer edit.

        The badge is always rewritten: unspecified badge fields keep their
        current values and the label falls back to "<tier> · <rating>".

        Raises:
            RecordNotFoundError: If the member does not exist
        """
        current = self.repository.get(member_id)
        changes = update.model_dump(exclude_none=True, exclude={"badge"})
        tier = changes.get("tier", current.tier)
        rating = changes.get("rating", current.rating)

        existing = current.badge
        requested = update.badge.model_dump(exclude_none=True) if update.badge else {}
        default_label = f"{tier} · {rating}"
        if update.badge is not None and "badge_label" in update.badge.model_fields_set:
            # An explicitly cleared label resets to the default
            label = (update.badge.badge_label or "").strip() or default_label
        else:
            label = (existing.badge_label if existing else None) or default_label

        badge = Badge(
            status=requested.get("status", existing.status if existing else "NONE"),
            badge_label=label,
            image_light_url=requested.get("image_light_url", existing.image_light_url if existing else ""),
            image_dark_url=requested.get("image_dark_url", existing.image_dark_url if existing else None),
            profile_url=requested.get("profile_url") or (existing.profile_url if existing else ""),
        )

        member = self.repository.update(member_id, **changes, badge=badge)
        logger.info(f"[admin] member {member_id} updated: {sorted(changes)}")
        return ActionResult[AdminMember](item=member, toast=MEMBER_UPDATED)
