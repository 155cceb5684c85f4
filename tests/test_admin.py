# =============================================================================
# tests/test_admin.py - Admin Console Service Tests
# =============================================================================
# Services run against the seeded in-memory repositories with a fixed
# "today" so date-relative counts are deterministic.
# =============================================================================

from datetime import date, datetime, timezone

import pytest

from app.exceptions import RecordNotFoundError, RequestValidationFailed
from core.admin import AdminConsole, OfferFullError, SortState, TableQuery
from core.admin.founding_partner import days_remaining
from core.admin.service_requests import NOTE_AUTHOR, timestamp
from core.admin.subscriptions import monthly_revenue
from core.models.admin import (
    AdminUserInvite,
    AdminUserUpdate,
    BadgeUpdate,
    BulkVerificationUpdate,
    MemberUpdate,
    VerificationUpdate,
)

TODAY = date(2025, 3, 1)
NOW = datetime(2025, 3, 1, 14, 5)


@pytest.fixture
def console() -> AdminConsole:
    return AdminConsole.seeded(today=TODAY)


# =============================================================================
# Table behavior
# =============================================================================

class TestSortState:

    def test_toggle_same_column(self):
        assert SortState("mrr", "ascending").toggle("mrr") == SortState("mrr", "descending")

    def test_toggle_descending_restarts(self):
        assert SortState("mrr", "descending").toggle("mrr") == SortState("mrr", "ascending")

    def test_new_column_starts_ascending(self):
        assert SortState("mrr", "descending").toggle("tier") == SortState("tier", "ascending")


class TestTableQuery:

    def test_all_means_no_filter(self, console):
        rows = console.members.list(tier="All").items
        assert len(rows) == 6

    def test_search_is_case_insensitive(self, console):
        rows = console.members.list(search="ACME").items
        assert [m.id for m in rows] == ["mem_001"]

    def test_filters_are_anded(self, console):
        rows = console.members.list(tier="Gold", status="Active").items
        assert [m.id for m in rows] == ["mem_001"]

    def test_missing_values_sort_last(self, console):
        query = TableQuery(sort=SortState("canceled_date", "ascending"))
        rows = query.apply(console.subscriptions.repository.list(), ())
        assert [r.id for r in rows[:2]] == ["sub_008", "sub_004"]
        assert rows[-1].canceled_date is None


# =============================================================================
# Members
# =============================================================================

class TestMemberService:

    def test_newest_first_by_default(self, console):
        result = console.members.list()

        assert result.total == 6
        assert result.items[0].id == "mem_005"
        assert result.items[-1].id == "mem_003"

    def test_update_keeps_existing_badge_label(self, console):
        result = console.members.update("mem_001", MemberUpdate(status="Suspended"))

        assert result.toast == "Member updated successfully."
        assert result.item.status == "Suspended"
        assert result.item.badge.badge_label == "Gold · A+"
        assert console.members.get("mem_001").status == "Suspended"

    def test_update_creates_badge_from_tier_and_rating(self, console):
        result = console.members.update("mem_004", MemberUpdate(tier="Silver"))

        assert result.item.tier == "Silver"
        assert result.item.badge.badge_label == "Silver · B+"
        assert result.item.badge.status == "NONE"

    def test_requested_badge_fields_win(self, console):
        update = MemberUpdate(badge=BadgeUpdate(status="REVOKED", badge_label="Suspended"))

        badge = console.members.update("mem_001", update).item.badge

        assert badge.status == "REVOKED"
        assert badge.badge_label == "Suspended"

    def test_cleared_badge_label_uses_default(self, console):
        update = MemberUpdate(tier="Silver", badge=BadgeUpdate(badge_label=""))

        badge = console.members.update("mem_001", update).item.badge

        assert badge.badge_label == "Silver · A+"

    def test_unknown_member(self, console):
        with pytest.raises(RecordNotFoundError) as exc_info:
            console.members.get("mem_999")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "MEMBER_NOT_FOUND"


# =============================================================================
# Subscriptions
# =============================================================================

class TestSubscriptionService:

    def test_monthly_revenue(self):
        assert monthly_revenue(2500, "Annual") == 208
        assert monthly_revenue(297, "Monthly") == 297

    def test_kpis(self, console):
        kpis = console.subscriptions.kpis(TODAY)

        assert kpis.mrr == 497 + 208 + 159 + 199
        assert kpis.active == 3
        assert kpis.past_due == 2
        assert kpis.canceled_this_month == 1

    def test_search_by_stripe_id(self, console):
        rows = console.subscriptions.list(search="sub_ghi").items
        assert [s.id for s in rows] == ["sub_003"]

    def test_change_billing_cycle_recomputes_mrr(self, console):
        result = console.subscriptions.change_billing_cycle("sub_003", "Monthly")

        assert result.item.billing_cycle == "Monthly"
        assert result.item.mrr == 2500
        assert result.toast == "Billing cycle updated."

    def test_mark_paid(self, console):
        result = console.subscriptions.mark_paid("sub_002", TODAY)

        assert result.item.status == "Active"
        assert result.item.last_payment_date == "2025-03-01"
        assert console.subscriptions.kpis(TODAY).past_due == 1

    def test_cancel(self, console):
        result = console.subscriptions.cancel("sub_001", TODAY)

        assert result.item.status == "Canceled"
        assert result.item.canceled_date == "2025-03-01"
        assert result.toast == "Subscription scheduled for cancellation."

    def test_flag_and_tier(self, console):
        assert console.subscriptions.flag("sub_007").item.flagged is True
        assert console.subscriptions.change_tier("sub_007", "Gold").toast == "Plan tier updated (demo-only)."


# =============================================================================
# Verifications
# =============================================================================

class TestVerificationService:

    def test_summary(self, console):
        summary = console.verifications.summary(TODAY)

        assert summary.pending == 3
        assert summary.needs_replacement == 1
        assert summary.expiring_soon == 1

    def test_single_update_toasts(self, console):
        approved = console.verifications.update("ver_001", VerificationUpdate(status="Approved"))
        rejected = console.verifications.update(
            "ver_005", VerificationUpdate(status="Rejected", admin_note="Blurry scan")
        )

        assert approved.toast == "Document approved."
        assert rejected.toast == 'Document status updated to "Rejected".'
        assert rejected.item.admin_note == "Blurry scan"

    def test_bulk_approve_counts_already_approved(self, console):
        result = console.verifications.bulk_update(
            BulkVerificationUpdate(ids=["ver_001", "ver_003", "ver_005"], status="Approved")
        )

        assert result.toast == '3 documents marked as "Approved". (1 were already approved.)'
        assert {r.status for r in result.item} == {"Approved"}

    def test_bulk_repeated_ids_count_once(self, console):
        result = console.verifications.bulk_update(
            BulkVerificationUpdate(ids=["ver_003", "ver_003", "ver_001"], status="Approved")
        )

        assert result.toast == '2 documents marked as "Approved". (1 were already approved.)'
        assert [r.id for r in result.item] == ["ver_003", "ver_001"]

    def test_bulk_update_unknown_id_changes_nothing(self, console):
        with pytest.raises(RecordNotFoundError):
            console.verifications.bulk_update(BulkVerificationUpdate(ids=["ver_001", "ver_999"]))

        assert console.verifications.repository.get("ver_001").status == "Pending"


# =============================================================================
# Service Requests
# =============================================================================

class TestServiceRequestService:

    def test_timestamp_format(self):
        assert timestamp(NOW) == "2025-03-01, 2:05 PM"

    def test_counts(self, console):
        counts = console.service_requests.counts(TODAY)

        assert counts.open == 2
        assert counts.in_progress == 2
        assert counts.overdue == 1

    def test_set_status_prepends_activity(self, console):
        before = len(console.service_requests.get("REQ-1023").activity_log)

        result = console.service_requests.set_status("REQ-1023", "Completed", NOW)

        assert result.toast == "Request marked as Completed."
        assert len(result.item.activity_log) == before + 1
        assert result.item.activity_log[0].event == "Marked as Completed"

    def test_completed_request_is_not_overdue(self, console):
        console.service_requests.set_status("REQ-1021", "Completed", NOW)
        assert console.service_requests.counts(TODAY).overdue == 0

    def test_notes_are_appended(self, console):
        first = console.service_requests.add_internal_note("REQ-1025", "  Called the member  ", NOW)
        update = console.service_requests.add_member_update("REQ-1025", "We're on it", NOW)

        note = first.item.internal_notes[-1]
        assert note.note == "Called the member"
        assert note.author == NOTE_AUTHOR
        assert update.toast == "Update sent to member."
        assert update.item.member_updates[-1].update == "We're on it"

    def test_assign(self, console):
        result = console.service_requests.assign("REQ-1025", "Sam (Support)", NOW)

        assert result.item.assigned_to == "Sam (Support)"
        assert result.toast == "Assignee updated."


# =============================================================================
# Admin Users
# =============================================================================

class TestAdminUserService:

    def test_invite(self, console):
        result = console.admin_users.invite(AdminUserInvite(name=" Jo Park ", email="Jo@RestorationExpertise.com"))

        assert result.item.id.startswith("admin_")
        assert result.item.email == "jo@restorationexpertise.com"
        assert result.item.status == "Active"
        assert result.item.last_login == "-"
        assert len(console.admin_users.list()) == 4

    def test_toggle_status(self, console):
        assert console.admin_users.toggle_status("admin_003").toast == "User active."
        assert console.admin_users.toggle_status("admin_002").toast == "User suspended."

    def test_update_role(self, console):
        result = console.admin_users.update("admin_002", AdminUserUpdate(role="Operations"))

        assert result.item.role == "Operations"
        assert result.item.name == "Sarah Lee"


# =============================================================================
# Founding Partner Offer
# =============================================================================

class TestFoundingPartnerService:

    def test_days_remaining(self):
        now = datetime(2025, 12, 30, 23, 59, 59, tzinfo=timezone.utc)
        assert days_remaining("2025-12-31T23:59:59Z", now) == 1
        assert days_remaining("2025-12-31T23:59:59Z", datetime(2026, 1, 2, tzinfo=timezone.utc)) == 0

    def test_view(self, console):
        view = console.founding_partner.view(datetime(2025, 12, 1, tzinfo=timezone.utc))

        assert view.spots_remaining == 12
        assert view.days_remaining == 31

    def test_add_member_until_full(self, console):
        for _ in range(12):
            console.founding_partner.add_member()

        with pytest.raises(OfferFullError) as exc_info:
            console.founding_partner.add_member()

        assert exc_info.value.status_code == 409
        assert console.founding_partner.view().spots_remaining == 0

    def test_extend(self, console):
        result = console.founding_partner.extend("2026-03-31T23:59:59Z")

        assert result.item.expiration_timestamp == "2026-03-31T23:59:59Z"
        assert result.toast == "Deadline extended."

    def test_extend_rejects_bad_timestamp(self, console):
        with pytest.raises(RequestValidationFailed):
            console.founding_partner.extend("next tuesday")

    def test_close(self, console):
        assert console.founding_partner.close().item.status == "CLOSED"
