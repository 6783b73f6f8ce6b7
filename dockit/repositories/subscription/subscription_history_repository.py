"""
Subscription history and payment repositories.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from dockit.models.subscription.subscription_history import SubscriptionHistory
from dockit.models.subscription.subscription_payment import SubscriptionPayment
from dockit.repositories.base.base_repository import AuditContext, BaseRepository


class SubscriptionHistoryRepository(BaseRepository[SubscriptionHistory]):
    def __init__(self, db: Session):
        super().__init__(SubscriptionHistory, db)

    def record(
        self,
        vendor_id: UUID,
        change_type: str,
        audit: AuditContext,
        changed_at: datetime,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        reason: Optional[str] = None,
        station_id: Optional[UUID] = None,
    ) -> SubscriptionHistory:
        entry = SubscriptionHistory(
            vendor_id=vendor_id,
            station_id=station_id,
            change_type=change_type,
            old_value=old_value,
            new_value=new_value,
            reason=reason,
            changed_by=audit.actor,
            changed_at=changed_at,
        )
        self.db.add(entry)
        return entry

    def list_by_vendor(self, vendor_id: UUID) -> List[SubscriptionHistory]:
        stmt = (
            select(SubscriptionHistory)
            .where(SubscriptionHistory.vendor_id == vendor_id)
            .order_by(SubscriptionHistory.changed_at.desc(), SubscriptionHistory.id)
        )
        return list(self.db.scalars(stmt))


class SubscriptionPaymentRepository(BaseRepository[SubscriptionPayment]):
    def __init__(self, db: Session):
        super().__init__(SubscriptionPayment, db)

    def list_by_vendor(self, vendor_id: UUID) -> List[SubscriptionPayment]:
        stmt = (
            select(SubscriptionPayment)
            .where(SubscriptionPayment.vendor_id == vendor_id)
            .order_by(SubscriptionPayment.created_at.desc())
        )
        return list(self.db.scalars(stmt))
