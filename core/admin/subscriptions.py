# =============================================================================
# core/admin/subscriptions.py - Subscriptions Screen
# =============================================================================
# KPI cards, the subscriptions table and the drawer actions. Actions only
# change the local record; Stripe is not contacted from here.
# =============================================================================

import logging
from datetime import date

from core.admin.repository import InMemoryRepository
from core.admin.table import SortState, TableQuery
from core.models.admin import (
    ActionResult,
    AdminSubscription,
    BillingCycle,
    ListResult,
    SubscriptionKpis,
    Tier,
)

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("business_name", "stripe_customer_id", "stripe_subscription_id")
REVENUE_STATUSES = ("Active", "Trialing")


def monthly_revenue(price: float, cycle: BillingCycle) -> float:
    return round(price / 12) if cycle == "Annual" else price


class SubscriptionService:
    def __init__(self, repository: InMemoryRepository[AdminSubscription]):
        self.repository = repository

    def list(
        self,
        search: str = "",
        status: str | None = None,
        tier: str | None = None,
        billing_cycle: str | None = None,
        sort: SortState | None = None,
    ) -> ListResult[AdminSubscription]:
        query = TableQuery(
            search=search,
            filters={"status": status, "tier": tier, "billing_cycle": billing_cycle},
            sort=sort,
        )
        items = query.apply(self.repository.list(), SEARCH_FIELDS)
        return ListResult[AdminSubscription](items=items, total=len(self.repository))

    def get(self, subscription_id: str) -> AdminSubscription:
        return self.repository.get(subscription_id)

    def kpis(self, today: date | None = None) -> SubscriptionKpis:
        """
        Headline numbers for the KPI cards.

        Canceled-this-month compares the year and month of `canceled_date`
        with today's.
        """
        today = today or date.today()
        month_prefix = today.strftime("%Y-%m")
        subscriptions = self.repository.list()

        return SubscriptionKpis(
            mrr=sum(s.mrr for s in subscriptions if s.status in REVENUE_STATUSES),
            active=sum(1 for s in subscriptions if s.status == "Active"),
            past_due=sum(1 for s in subscriptions if s.status == "Past due"),
            canceled_this_month=sum(
                1 for s in subscriptions
                if s.status == "Canceled" and (s.canceled_date or "").startswith(month_prefix)
            ),
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _commit(self, subscription_id: str, toast: str, **changes) -> ActionResult[AdminSubscription]:
        subscription = self.repository.update(subscription_id, **changes)
        logger.info(f"[admin] subscription {subscription_id}: {toast}")
        return ActionResult[AdminSubscription](item=subscription, toast=toast)

    def change_tier(self, subscription_id: str, tier: Tier) -> ActionResult[AdminSubscription]:
        return self._commit(subscription_id, "Plan tier updated (demo-only).", tier=tier)

    def change_billing_cycle(self, subscription_id: str, cycle: BillingCycle) -> ActionResult[AdminSubscription]:
        current = self.repository.get(subscription_id)
        return self._commit(
            subscription_id,
            "Billing cycle updated.",
            billing_cycle=cycle,
            mrr=monthly_revenue(current.plan_price, cycle),
        )

    def mark_paid(self, subscription_id: str, today: date | None = None) -> ActionResult[AdminSubscription]:
        today = today or date.today()
        return self._commit(
            subscription_id,
            "Subscription marked as paid.",
            status="Active",
            last_payment_date=today.isoformat(),
        )

    def flag(self, subscription_id: str) -> ActionResult[AdminSubscription]:
        return self._commit(subscription_id, "Account has been flagged internally.", flagged=True)

    def cancel(self, subscription_id: str, today: date | None = None) -> ActionResult[AdminSubscription]:
        today = today or date.today()
        return self._commit(
            subscription_id,
            "Subscription scheduled for cancellation.",
            status="Canceled",
            canceled_date=today.isoformat(),
        )
