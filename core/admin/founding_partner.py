# =============================================================================
# core/admin/founding_partner.py - Founding Partner Offer Tracker
# =============================================================================

import logging
import math
from datetime import datetime, timezone

from app.exceptions import MembershipException, RequestValidationFailed
from core.admin.repository import RecordHolder
from core.models.admin import ActionResult, FoundingPartnerOffer

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class OfferView(FoundingPartnerOffer):
    days_remaining: int
    spots_remaining: int


class OfferFullError(MembershipException):
    def __init__(self, total_spots: int):
        super().__init__(
            message=f"All {total_spots} founding partner spots have been claimed",
            code="OFFER_FULL",
            status_code=409,
        )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp, treating a trailing Z as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def days_remaining(expiration: str, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    seconds = (parse_timestamp(expiration) - now).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / SECONDS_PER_DAY)


class FoundingPartnerService:
    def __init__(self, holder: RecordHolder[FoundingPartnerOffer]):
        self.holder = holder

    def view(self, now: datetime | None = None) -> OfferView:
        offer = self.holder.get()
        return OfferView(
            **offer.model_dump(),
            days_remaining=days_remaining(offer.expiration_timestamp, now),
            spots_remaining=max(offer.total_spots - offer.claimed_count, 0),
        )

    def close(self) -> ActionResult[FoundingPartnerOffer]:
        offer = self.holder.update(status="CLOSED")
        logger.info("[admin] founding partner offer closed")
        return ActionResult[FoundingPartnerOffer](item=offer, toast="Founding partner offer closed.")

    def extend(self, expiration_timestamp: str) -> ActionResult[FoundingPartnerOffer]:
        try:
            parse_timestamp(expiration_timestamp)
        except ValueError:
            raise RequestValidationFailed(
                [{"field": "expiration_timestamp", "message": "must be an ISO 8601 timestamp"}]
            )
        offer = self.holder.update(expiration_timestamp=expiration_timestamp)
        return ActionResult[FoundingPartnerOffer](item=offer, toast="Deadline extended.")

    def add_member(self) -> ActionResult[FoundingPartnerOffer]:
        """
        Raises:
            OfferFullError: When every spot is already claimed
        """
        current = self.holder.get()
        if current.claimed_count >= current.total_spots:
            raise OfferFullError(current.total_spots)
        offer = self.holder.update(claimed_count=current.claimed_count + 1)
        return ActionResult[FoundingPartnerOffer](item=offer, toast="Founding partner added.")
