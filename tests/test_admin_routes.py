# =============================================================================
# tests/test_admin_routes.py - Admin Console Endpoint Tests
# =============================================================================

from uuid import UUID

from app.auth import get_current_user
from app.auth.models import AuthUser

ADMIN = "/api/v1/admin"
MEMBER_ID = UUID("22222222-2222-2222-2222-222222222222")


class TestAdminAccess:

    def test_requires_token(self, client):
        response = client.get(f"{ADMIN}/members")

        # HTTPBearer answers 401 or 403 depending on the FastAPI release
        assert response.status_code in (401, 403)

    def test_non_admin_token_is_forbidden(self, app, client):
        app.dependency_overrides[get_current_user] = lambda: AuthUser(id=MEMBER_ID, email="owner@acme.com")

        response = client.get(f"{ADMIN}/members")

        assert response.status_code == 403
        assert response.json() == {
            "error": "Access denied. You do not have admin privileges.",
            "code": "FORBIDDEN",
        }


class TestMembersRoutes:

    def test_list_with_filters(self, admin_client):
        response = admin_client.get(f"{ADMIN}/members", params={"tier": "Gold", "status": "All"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 6
        assert {m["id"] for m in body["items"]} == {"mem_001", "mem_003"}

    def test_sorted_by_mrr(self, admin_client):
        response = admin_client.get(f"{ADMIN}/members", params={"sort": "mrr", "direction": "descending"})

        mrrs = [m["mrr"] for m in response.json()["items"]]
        assert mrrs == sorted(mrrs, reverse=True)

    def test_get_unknown(self, admin_client):
        response = admin_client.get(f"{ADMIN}/members/mem_999")

        assert response.status_code == 404
        assert response.json()["code"] == "MEMBER_NOT_FOUND"

    def test_patch(self, admin_client):
        response = admin_client.patch(f"{ADMIN}/members/mem_002", json={"rating": "A+"})

        assert response.status_code == 200
        body = response.json()
        assert body["item"]["rating"] == "A+"
        assert body["toast"] == "Member updated successfully."

    def test_patch_invalid_tier(self, admin_client):
        response = admin_client.patch(f"{ADMIN}/members/mem_002", json={"tier": "Diamond"})

        assert response.status_code == 400
        assert response.json()["details"] == ["tier"]


class TestSubscriptionRoutes:

    def test_kpis(self, admin_client):
        body = admin_client.get(f"{ADMIN}/subscriptions/kpis").json()

        assert body["mrr"] == 1063
        assert body["active"] == 3
        assert body["past_due"] == 2
        assert body["canceled_this_month"] == 1

    def test_actions(self, admin_client):
        flagged = admin_client.post(f"{ADMIN}/subscriptions/sub_007/flag").json()
        paid = admin_client.post(f"{ADMIN}/subscriptions/sub_007/mark-paid").json()
        cycle = admin_client.post(f"{ADMIN}/subscriptions/sub_001/billing-cycle", json={"billing_cycle": "Annual"}).json()

        assert flagged["item"]["flagged"] is True
        assert paid["item"]["status"] == "Active"
        assert cycle["item"]["mrr"] == 41  # round(497 / 12)

    def test_cancel(self, admin_client):
        response = admin_client.post(f"{ADMIN}/subscriptions/sub_006/cancel")

        assert response.json()["item"]["status"] == "Canceled"
        assert admin_client.get(f"{ADMIN}/subscriptions/kpis").json()["canceled_this_month"] == 2

    def test_change_tier(self, admin_client):
        response = admin_client.post(f"{ADMIN}/subscriptions/sub_006/tier", json={"tier": "Gold"})

        assert response.json()["toast"] == "Plan tier updated (demo-only)."


class TestVerificationRoutes:

    def test_summary(self, admin_client):
        body = admin_client.get(f"{ADMIN}/verifications/summary").json()

        assert body["pending"] == 3
        assert body["needs_replacement"] == 1

    def test_bulk(self, admin_client):
        response = admin_client.post(f"{ADMIN}/verifications/bulk", json={"ids": ["ver_001", "ver_007"]})

        assert response.status_code == 200
        assert response.json()["toast"] == '2 documents marked as "Approved".'

    def test_bulk_requires_ids(self, admin_client):
        response = admin_client.post(f"{ADMIN}/verifications/bulk", json={"ids": []})

        assert response.status_code == 400

    def test_patch(self, admin_client):
        response = admin_client.patch(f"{ADMIN}/verifications/ver_002", json={"status": "Rejected"})

        assert response.json()["toast"] == 'Document status updated to "Rejected".'


class TestServiceRequestRoutes:

    def test_counts(self, admin_client):
        body = admin_client.get(f"{ADMIN}/service-requests/counts").json()

        assert body == {"open": 2, "in_progress": 2, "overdue": 1}

    def test_search_by_id(self, admin_client):
        body = admin_client.get(f"{ADMIN}/service-requests", params={"search": "req-1022"}).json()

        assert [r["id"] for r in body["items"]] == ["REQ-1022"]

    def test_patch_status_and_assignee(self, admin_client):
        response = admin_client.patch(
            f"{ADMIN}/service-requests/REQ-1025",
            json={"status": "In progress", "assigned_to": "Taylor (SEO)"},
        )

        body = response.json()
        assert body["item"]["status"] == "In progress"
        assert body["item"]["assigned_to"] == "Taylor (SEO)"
        assert body["toast"] == "Assignee updated."

    def test_patch_requires_a_field(self, admin_client):
        response = admin_client.patch(f"{ADMIN}/service-requests/REQ-1025", json={})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_notes(self, admin_client):
        note = admin_client.post(f"{ADMIN}/service-requests/REQ-1024/notes", json={"text": "Draft ready"})
        update = admin_client.post(f"{ADMIN}/service-requests/REQ-1024/member-updates", json={"text": "Draft sent"})

        assert note.json()["toast"] == "Internal note added."
        assert update.json()["item"]["member_updates"][-1]["update"] == "Draft sent"

    def test_empty_note_rejected(self, admin_client):
        response = admin_client.post(f"{ADMIN}/service-requests/REQ-1024/notes", json={"text": ""})

        assert response.status_code == 400


class TestAdminUserRoutes:

    def test_invite(self, admin_client):
        response = admin_client.post(f"{ADMIN}/users", json={"name": "Jo Park", "email": "jo@restorationexpertise.com"})

        assert response.status_code == 201
        assert response.json()["item"]["role"] == "Support"
        assert len(admin_client.get(f"{ADMIN}/users").json()) == 4

    def test_toggle(self, admin_client):
        response = admin_client.post(f"{ADMIN}/users/admin_001/toggle-status")

        assert response.json()["item"]["status"] == "Suspended"

    def test_patch(self, admin_client):
        response = admin_client.patch(f"{ADMIN}/users/admin_003", json={"role": "ReadOnly"})

        assert response.json()["item"]["role"] == "ReadOnly"


class TestFoundingPartnerRoutes:

    def test_view(self, admin_client):
        body = admin_client.get(f"{ADMIN}/founding-partner").json()

        assert body["claimed_count"] == 13
        assert body["spots_remaining"] == 12

    def test_add_member(self, admin_client):
        body = admin_client.post(f"{ADMIN}/founding-partner/members").json()

        assert body["item"]["claimed_count"] == 14
        assert body["toast"] == "Founding partner added."

    def test_extend_invalid(self, admin_client):
        response = admin_client.post(f"{ADMIN}/founding-partner/extend", json={"expiration_timestamp": "soon"})

        assert response.status_code == 400
        assert response.json()["details"] == ["expiration_timestamp"]

    def test_close(self, admin_client):
        body = admin_client.post(f"{ADMIN}/founding-partner/close").json()

        assert body["item"]["status"] == "CLOSED"
