# =============================================================================
# core/admin/ - Admin Console Back Office
# =============================================================================
# One service per admin screen, each over an in-memory repository:
# - members.py: member table and drawer edits (tier, rating, badge)
# - subscriptions.py: KPIs and billing actions
# - verifications.py: document review queue with bulk actions
# - service_requests.py: request triage, notes and assignment
# - admin_users.py: back-office accounts
# - founding_partner.py: founding partner offer tracker
# =============================================================================

from dataclasses import dataclass
from datetime import date

from core.admin.admin_users import AdminUserService
from core.admin.founding_partner import FoundingPartnerService, OfferFullError, OfferView
from core.admin.members import MemberService
from core.admin.repository import InMemoryRepository, RecordHolder
from core.admin.seed import (
    seed_admin_users,
    seed_founding_offer,
    seed_members,
    seed_service_requests,
    seed_subscriptions,
    seed_verifications,
)
from core.admin.service_requests import ServiceRequestService
from core.admin.subscriptions import SubscriptionService
from core.admin.table import SortState, TableQuery
from core.admin.verifications import VerificationService


@dataclass
class AdminConsole:
    """Every admin screen service, sharing one set of repositories."""
    members: MemberService
    subscriptions: SubscriptionService
    verifications: VerificationService
    service_requests: ServiceRequestService
    admin_users: AdminUserService
    founding_partner: FoundingPartnerService

    @classmethod
    def seeded(cls, today: date | None = None) -> "AdminConsole":
        return cls(
            members=MemberService(InMemoryRepository("Member", seed_members())),
            subscriptions=SubscriptionService(InMemoryRepository("Subscription", seed_subscriptions(today))),
            verifications=VerificationService(InMemoryRepository("Verification", seed_verifications(today))),
            service_requests=ServiceRequestService(
                InMemoryRepository("Service request", seed_service_requests(today))
            ),
            admin_users=AdminUserService(InMemoryRepository("Admin user", seed_admin_users())),
            founding_partner=FoundingPartnerService(RecordHolder(seed_founding_offer())),
        )


__all__ = [
    "AdminConsole",
    "AdminUserService",
    "FoundingPartnerService",
    "InMemoryRepository",
    "MemberService",
    "OfferFullError",
    "OfferView",
    "RecordHolder",
    "ServiceRequestService",
    "SortState",
    "SubscriptionService",
    "TableQuery",
    "VerificationService",
]
