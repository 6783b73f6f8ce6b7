"""
Vendor subscription repository.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from dockit.core.exceptions import ResourceNotFoundError
from dockit.models.subscription.vendor_subscription import VendorSubscription
from dockit.repositories.base.base_repository import BaseRepository
from dockit.schemas.common.enums import SubscriptionStatus


class VendorSubscriptionRepository(BaseRepository[VendorSubscription]):
    def __init__(self, db: Session):
        super().__init__(VendorSubscription, db)

    def find_by_vendor(self, vendor_id: UUID) -> Optional[VendorSubscription]:
        return self.db.scalar(
            select(VendorSubscription).where(VendorSubscription.vendor_id == vendor_id)
        )

    def get_by_vendor(self, vendor_id: UUID) -> VendorSubscription:
        subscription = self.find_by_vendor(vendor_id)
        if subscription is None:
            raise ResourceNotFoundError("VendorSubscription", str(vendor_id))
        return subscription

    def find_lapsed(self, now: datetime) -> List[VendorSubscription]:
        """Subscriptions still stored active whose end date has passed."""
        stmt = (
            select(VendorSubscription)
            .where(
                VendorSubscription.status == SubscriptionStatus.ACTIVE,
                VendorSubscription.end_date <= now,
            )
            .order_by(VendorSubscription.end_date)
        )
        return list(self.db.scalars(stmt))
