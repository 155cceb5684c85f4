# =============================================================================
# core/admin/seed.py - Admin Console Seed Data
# =============================================================================
# Initial records for the admin screens. A few dates are relative to "today"
# (expiring documents, overdue requests, cancellations this month) so the
# summary counters always have something to show.
# =============================================================================

from datetime import date, timedelta

from core.models.admin import (
    ActivityEntry,
    AdminInvoice,
    AdminMember,
    AdminServiceRequest,
    AdminSubscription,
    AdminUser,
    AdminVerification,
    Badge,
    BillingSnapshot,
    FoundingPartnerOffer,
    InternalNote,
    MemberDocument,
    MemberStats,
    MemberUpdateNote,
    RequestActivity,
)

_SHADOW_BADGE = "https://restorationexpertise.com/wp-content/uploads/2025/11/restorationexpertise_badge_3d_layingtra_shadow.webp"
_PROFILE_BASE = "https://restorationexpertise.com/profile"


def _docs(license_status: str = "Approved", insurance_status: str = "Approved") -> list[MemberDocument]:
    return [
        MemberDocument(name="Contractor License", status=license_status),
        MemberDocument(name="Liability Insurance", status=insurance_status),
    ]


def seed_members() -> list[AdminMember]:
    return [
        AdminMember(
            id="mem_001", business_name="Acme Restoration", city="Dallas, TX",
            email="owner@acmerestoration.com", tier="Gold", rating="A+", status="Active",
            renewal_date="2025-03-15", join_date="2024-01-10", mrr=497, pending_docs=0, open_requests=2,
            documents=_docs(),
            activity_log=[
                ActivityEntry(event='Request "Badge Support" created', date="2024-07-28"),
                ActivityEntry(event="Plan changed to Gold", date="2024-03-15"),
            ],
            billing_info=BillingSnapshot(stripe_id="cus_abc123", last_payment="2024-07-15", plan="Gold Monthly"),
            stats=MemberStats(profile_views=132, badge_clicks=24),
            badge=Badge(
                status="ACTIVE", badge_label="Gold · A+",
                image_light_url="https://example.com/acme-gold-a-plus-light.svg",
                image_dark_url="https://example.com/acme-gold-a-plus-dark.svg",
                profile_url=f"{_PROFILE_BASE}/acme-restoration",
            ),
        ),
        AdminMember(
            id="mem_002", business_name="Summit Clean & Dry", city="Denver, CO",
            email="contact@summitclean.com", tier="Silver", rating="A", status="Active",
            renewal_date="2025-08-20", join_date="2024-02-20", mrr=297, pending_docs=0, open_requests=1,
            documents=_docs(),
            activity_log=[
                ActivityEntry(event='Request "SEO Post" created', date="2024-07-27"),
                ActivityEntry(event="Initial verification approved", date="2024-02-22"),
            ],
            billing_info=BillingSnapshot(stripe_id="cus_def456", last_payment="2024-07-20", plan="Silver Monthly"),
            stats=MemberStats(profile_views=88, badge_clicks=12),
            badge=Badge(
                status="ACTIVE", badge_label="Silver · A", image_light_url=_SHADOW_BADGE,
                profile_url=f"{_PROFILE_BASE}/summit-clean-and-dry",
            ),
        ),
        AdminMember(
            id="mem_003", business_name="Coastal Recovery Inc.", city="Miami, FL",
            email="dispatch@coastalrecovery.net", tier="Gold", rating="A+", status="Suspended",
            renewal_date="2025-06-01", join_date="2023-06-01", mrr=497, pending_docs=1, open_requests=0,
            documents=_docs(insurance_status="Rejected"),
            activity_log=[ActivityEntry(event="Account suspended due to failed payment.", date="2024-07-25")],
            billing_info=BillingSnapshot(stripe_id="cus_ghi789", last_payment="2024-06-01", plan="Gold Monthly"),
            stats=MemberStats(profile_views=250, badge_clicks=45),
            badge=Badge(
                status="REVOKED", badge_label="Gold · A+", image_light_url=_SHADOW_BADGE,
                profile_url=f"{_PROFILE_BASE}/coastal-recovery-inc",
            ),
        ),
        AdminMember(
            id="mem_004", business_name="Pioneer Restoration", city="Austin, TX",
            email="info@pioneertx.com", tier="Bronze", rating="B+", status="Active",
            renewal_date="2025-09-12", join_date="2024-03-12", mrr=159, pending_docs=0, open_requests=0,
            documents=_docs(),
            activity_log=[ActivityEntry(event="Profile updated", date="2024-06-15")],
            billing_info=BillingSnapshot(stripe_id="cus_jkl012", last_payment="2024-07-12", plan="Bronze Monthly"),
            stats=MemberStats(profile_views=45, badge_clicks=5),
        ),
        AdminMember(
            id="mem_005", business_name="Evergreen Environmental", city="Seattle, WA",
            email="support@evergreenenv.com", tier="Founding Member", rating="A+", status="Pending",
            renewal_date="2025-01-30", join_date="2024-07-28", mrr=199, pending_docs=2, open_requests=0,
            documents=_docs("Pending", "Pending"),
            activity_log=[ActivityEntry(event="Account created", date="2024-07-28")],
            billing_info=BillingSnapshot(stripe_id="cus_mno345", last_payment="2024-07-28", plan="Founding Monthly"),
            stats=MemberStats(profile_views=0, badge_clicks=0),
            badge=Badge(
                status="PENDING", badge_label="Founding Member · A+", image_light_url=_SHADOW_BADGE,
                profile_url=f"{_PROFILE_BASE}/evergreen-environmental",
            ),
        ),
        AdminMember(
            id="mem_006", business_name="Midwest Damage Repair", city="Chicago, IL",
            email="claims@midwestdr.com", tier="Silver", rating="A", status="Canceled",
            renewal_date="2024-07-31", join_date="2023-08-01", mrr=0, pending_docs=0, open_requests=0,
            documents=_docs(),
            activity_log=[ActivityEntry(event="Subscription canceled by user", date="2024-07-10")],
            billing_info=BillingSnapshot(stripe_id="cus_pqr678", last_payment="2024-06-30", plan="Silver Monthly"),
            stats=MemberStats(profile_views=60, badge_clicks=8),
        ),
    ]


def seed_verifications(today: date | None = None) -> list[AdminVerification]:
    today = today or date.today()
    expiring_soon = (today + timedelta(days=29)).isoformat()
    expired = (today - timedelta(days=60)).isoformat()

    return [
        AdminVerification(
            id="ver_001", member_id="mem_001", business_name="Acme Restoration", city="Dallas, TX",
            tier="Gold", rating="A+", document_type="Contractor License", status="Pending",
            uploaded_at="2025-02-10", expires_at="2026-02-10", admin_note="Awaiting manual review.",
        ),
        AdminVerification(
            id="ver_002", member_id="mem_002", business_name="Summit Clean & Dry", city="Denver, CO",
            tier="Silver", rating="A", document_type="Liability Insurance", status="Needs Replacement",
            uploaded_at="2024-10-01", expires_at="2024-12-31",
            admin_note="Policy expired; upload updated certificate.",
        ),
        AdminVerification(
            id="ver_003", member_id="mem_003", business_name="Coastal Recovery Inc.", city="Miami, FL",
            tier="Gold", rating="A+", document_type="Workers’ Comp", status="Approved",
            uploaded_at="2024-11-15", expires_at="2025-11-14",
        ),
        AdminVerification(
            id="ver_004", member_id="mem_004", business_name="Pioneer Restoration", city="Austin, TX",
            tier="Bronze", rating="B+", document_type="IICRC", status="Approved",
            uploaded_at="2024-09-01", expires_at=expiring_soon,
        ),
        AdminVerification(
            id="ver_005", member_id="mem_005", business_name="Evergreen Environmental", city="Seattle, WA",
            tier="Founding Member", rating="A+", document_type="Contractor License", status="Pending",
            uploaded_at="2025-03-01", expires_at="2026-03-01",
        ),
        AdminVerification(
            id="ver_006", member_id="mem_006", business_name="Midwest Damage Repair", city="Chicago, IL",
            tier="Silver", rating="A", document_type="Liability Insurance", status="Expired",
            uploaded_at="2023-05-20", expires_at=expired,
        ),
        AdminVerification(
            id="ver_007", member_id="mem_001", business_name="Acme Restoration", city="Dallas, TX",
            tier="Gold", rating="A+", document_type="Liability Insurance", status="Pending",
            uploaded_at="2025-02-11", expires_at="2026-02-11",
        ),
        AdminVerification(
            id="ver_008", member_id="mem_002", business_name="Summit Clean & Dry", city="Denver, CO",
            tier="Silver", rating="A", document_type="Other", status="Rejected",
            uploaded_at="2025-01-05", expires_at="2026-01-05",
            admin_note="Document provided is not a valid certification.",
        ),
    ]


def seed_service_requests(today: date | None = None) -> list[AdminServiceRequest]:
    today = today or date.today()
    yesterday = (today - timedelta(days=1)).isoformat()
    five_days_ago = (today - timedelta(days=5)).isoformat()
    next_week = (today + timedelta(days=7)).isoformat()
    two_weeks = (today + timedelta(days=14)).isoformat()

    return [
        AdminServiceRequest(
            id="REQ-1024", member_id="mem_001", business_name="Acme Restoration", tier="Gold", city="Dallas, TX",
            type="SEO Blog Post", title="Water Damage FAQ Article", status="In progress", priority="High",
            created_at="2024-07-20", due_date=next_week, assigned_to="Alex (Content)", source="Member portal",
            description=(
                "The member wants a comprehensive FAQ article for their blog targeting homeowners who have "
                "just experienced water damage. \n\nKey topics to cover:\n- What to do immediately\n"
                "- When to call a professional\n- The restoration process\n- Insurance questions"
            ),
            activity_log=[
                RequestActivity(event="Assigned to Alex (Content)", timestamp="2024-07-20, 2:15 PM", by="System"),
                RequestActivity(event="Request created", timestamp="2024-07-20, 1:30 PM", by="Member",
                                icon="UserCircleIcon"),
            ],
            internal_notes=[
                InternalNote(note="Alex is the best writer for this topic. Let's fast-track it.",
                             author="Sam (Support)", timestamp="2024-07-20, 2:16 PM"),
            ],
        ),
        AdminServiceRequest(
            id="REQ-1023", member_id="mem_001", business_name="Acme Restoration", tier="Gold", city="Dallas, TX",
            type="Badge Support", title="Badge not displaying on our website footer", status="Open",
            priority="High", created_at=yesterday, due_date=next_week, assigned_to="Sam (Support)",
            source="Member portal",
            description=(
                "Hi team, we've tried embedding the badge code on our footer but it's not showing up. "
                "Can you please take a look? Our website is acmerestoration.com. I've attached a screenshot."
            ),
            activity_log=[
                RequestActivity(event="Request created", timestamp=f"{yesterday}, 9:05 AM", by="Member",
                                icon="UserCircleIcon"),
            ],
        ),
        AdminServiceRequest(
            id="REQ-1022", member_id="mem_002", business_name="Summit Clean & Dry", tier="Silver", city="Denver, CO",
            type="Website Review", title="Quarterly SEO & Conversion Checkup", status="Completed",
            priority="Normal", created_at="2024-07-15", due_date="2024-07-22", assigned_to="Taylor (SEO)",
            source="Internal",
            description=(
                "Scheduled quarterly website review. Focus on mobile performance and lead capture form "
                "conversion rates."
            ),
            activity_log=[
                RequestActivity(event="Marked as Completed", timestamp="2024-07-21, 11:00 AM", by="Taylor (SEO)",
                                icon="CheckCircleIcon"),
                RequestActivity(event="Review PDF uploaded", timestamp="2024-07-21, 10:58 AM", by="Taylor (SEO)",
                                icon="PencilSquareIcon"),
                RequestActivity(event="Request created", timestamp="2024-07-15, 8:00 AM", by="System"),
            ],
            internal_notes=[
                InternalNote(note="Good progress on their organic traffic since last quarter.",
                             author="Taylor (SEO)", timestamp="2024-07-21, 10:59 AM"),
            ],
            member_updates=[
                MemberUpdateNote(
                    update=(
                        "Hi Jane, your quarterly website review is complete! You'll find the PDF with our "
                        "recommendations attached. Great job on the new testimonials page!"
                    ),
                    author="Taylor (SEO)", timestamp="2024-07-21, 11:01 AM",
                ),
            ],
        ),
        AdminServiceRequest(
            id="REQ-1025", member_id="mem_004", business_name="Pioneer Restoration", tier="Bronze", city="Austin, TX",
            type="Other", title="Question about local SEO", status="Open", priority="Low",
            created_at=today.isoformat(), due_date=two_weeks, assigned_to="Unassigned", source="Email",
            description=(
                "Member emailed in asking for tips on how to improve their Google Maps ranking. "
                "Not a formal review, just needs some advice."
            ),
            activity_log=[
                RequestActivity(event="Request created from email", timestamp=f"{today.isoformat()}, 10:20 AM",
                                by="System"),
            ],
        ),
        AdminServiceRequest(
            id="REQ-1021", member_id="mem_003", business_name="Coastal Recovery Inc.", tier="Gold", city="Miami, FL",
            type="SEO Blog Post", title="Hurricane Preparedness Guide for Businesses", status="In progress",
            priority="Normal", created_at="2024-07-18", due_date=five_days_ago, assigned_to="Alex (Content)",
            source="Member portal",
            description="Article timed for hurricane season. Needs to be published ASAP.",
            activity_log=[
                RequestActivity(event="Assigned to Alex (Content)", timestamp="2024-07-18, 1:00 PM", by="System"),
                RequestActivity(event="Request created", timestamp="2024-07-18, 12:45 PM", by="Member",
                                icon="UserCircleIcon"),
            ],
            internal_notes=[
                InternalNote(note="Ping Alex, this is now overdue.", author="Sam (Support)",
                             timestamp="2024-07-23, 9:00 AM"),
            ],
        ),
        AdminServiceRequest(
            id="REQ-1020", member_id="mem_006", business_name="Midwest Damage Repair", tier="Silver",
            city="Chicago, IL", type="Spotlight Article", title="Community involvement feature", status="Canceled",
            priority="Normal", created_at="2024-07-10", due_date="2024-07-24", assigned_to="Unassigned",
            source="Member portal",
            description=(
                "Member wanted an article about their charity work but then decided to cancel as their "
                "subscription was ending."
            ),
            activity_log=[
                RequestActivity(event="Request Canceled", timestamp="2024-07-11, 4:00 PM", by="System",
                                icon="XMarkIcon"),
                RequestActivity(event="Request created", timestamp="2024-07-10, 2:30 PM", by="Member",
                                icon="UserCircleIcon"),
            ],
        ),
    ]


def seed_subscriptions(today: date | None = None) -> list[AdminSubscription]:
    today = today or date.today()
    second_of_month = today.replace(day=2).isoformat()

    def paid(invoice_id: str, day: str, amount: float, status: str = "Paid") -> AdminInvoice:
        return AdminInvoice(id=invoice_id, date=day, amount=amount, status=status)

    return [
        AdminSubscription(
            id="sub_001", member_id="mem_001", business_name="Acme Restoration", tier="Gold", plan_price=497,
            billing_cycle="Monthly", status="Active", next_payment_date="2025-03-15",
            last_payment_date="2025-02-15", mrr=497, stripe_customer_id="cus_abc123",
            stripe_subscription_id="sub_abc123", churn_risk="Low",
            invoices=[paid("inv_1a", "2025-02-15", 497), paid("inv_1b", "2025-01-15", 497)],
        ),
        AdminSubscription(
            id="sub_002", member_id="mem_003", business_name="Coastal Recovery Inc.", tier="Silver", plan_price=297,
            billing_cycle="Monthly", status="Past due", next_payment_date="2025-02-10",
            last_payment_date="2025-01-10", mrr=297, stripe_customer_id="cus_def456",
            stripe_subscription_id="sub_def456", churn_risk="High",
            invoices=[paid("inv_2a", "2025-02-10", 297, "Failed"), paid("inv_2b", "2025-01-10", 297)],
        ),
        AdminSubscription(
            id="sub_003", member_id="mem_002", business_name="Summit Clean & Dry", tier="Silver", plan_price=2500,
            billing_cycle="Annual", status="Active", next_payment_date="2026-01-20",
            last_payment_date="2025-01-20", mrr=round(2500 / 12), stripe_customer_id="cus_ghi789",
            stripe_subscription_id="sub_ghi789", churn_risk="Low",
            invoices=[paid("inv_3a", "2025-01-20", 2500)],
        ),
        AdminSubscription(
            id="sub_004", member_id="mem_006", business_name="Midwest Damage Repair", tier="Silver", plan_price=297,
            billing_cycle="Monthly", status="Canceled", next_payment_date="2025-02-05",
            last_payment_date="2025-01-05", mrr=0, stripe_customer_id="cus_jkl012",
            stripe_subscription_id="sub_jkl012", canceled_date=second_of_month, churn_risk="High",
            invoices=[paid("inv_4a", "2025-01-05", 297)],
        ),
        AdminSubscription(
            id="sub_005", member_id="mem_005", business_name="Evergreen Environmental", tier="Founding Member",
            plan_price=199, billing_cycle="Monthly", status="Trialing", next_payment_date="2025-03-10",
            last_payment_date="N/A", mrr=199, stripe_customer_id="cus_mno345",
            stripe_subscription_id="sub_mno345", churn_risk="Medium",
        ),
        AdminSubscription(
            id="sub_006", member_id="mem_004", business_name="Pioneer Restoration", tier="Bronze", plan_price=159,
            billing_cycle="Monthly", status="Active", next_payment_date="2025-03-12",
            last_payment_date="2025-02-12", mrr=159, stripe_customer_id="cus_pqr678",
            stripe_subscription_id="sub_pqr678", churn_risk="Low",
            invoices=[paid("inv_6a", "2025-02-12", 159)],
        ),
        AdminSubscription(
            id="sub_007", member_id="mem_007", business_name="Sun Valley Services", tier="Bronze", plan_price=159,
            billing_cycle="Monthly", status="Past due", next_payment_date="2025-02-18",
            last_payment_date="2025-01-18", mrr=159, stripe_customer_id="cus_stu901",
            stripe_subscription_id="sub_stu901", churn_risk="High",
            invoices=[paid("inv_7a", "2025-02-18", 159, "Failed"), paid("inv_7b", "2025-01-18", 159)],
        ),
        AdminSubscription(
            id="sub_008", member_id="mem_008", business_name="Granite State Cleaners", tier="Gold", plan_price=497,
            billing_cycle="Monthly", status="Canceled", next_payment_date="2025-02-20",
            last_payment_date="2025-01-20", mrr=0, stripe_customer_id="cus_vwx234",
            stripe_subscription_id="sub_vwx234", canceled_date="2024-12-15", churn_risk="High",
            invoices=[paid("inv_8a", "2025-01-20", 497)],
        ),
    ]


def seed_admin_users() -> list[AdminUser]:
    return [
        AdminUser(id="admin_001", name="Max Bauer", email="max@restorationexpertise.com",
                  role="Superadmin", status="Active", last_login="2025-02-20 14:32"),
        AdminUser(id="admin_002", name="Sarah Lee", email="sarah@restorationexpertise.com",
                  role="Support", status="Active", last_login="2025-02-19 09:12"),
        AdminUser(id="admin_003", name="Alex King", email="alex@restorationexpertise.com",
                  role="Content", status="Suspended", last_login="2025-01-31 17:45"),
    ]


def seed_founding_offer() -> FoundingPartnerOffer:
    # 13 founding partners at $229
    return FoundingPartnerOffer(
        status="ACTIVE",
        claimed_count=13,
        total_spots=25,
        expiration_timestamp="2025-12-31T23:59:59Z",
        total_revenue=2977,
    )
