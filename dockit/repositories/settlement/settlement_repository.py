"""
Settlement ledger repositories.

Bucket amounts are never stored: they are aggregated from transaction rows
grouped by ``settlement_status``, and moving money between buckets is a
guarded status update of the rows involved.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from dockit.models.settlement.settlement_request import SettlementRequest
from dockit.models.settlement.settlement_transaction import SettlementTransaction
from dockit.repositories.base.base_repository import BaseRepository
from dockit.schemas.common.enums import (
    SettlementRequestStatus,
    SettlementSourceType,
    TransactionSettlementStatus,
)

ZERO = Decimal("0.00")

# status -> (amount, transaction count)
BucketTotals = Dict[TransactionSettlementStatus, Tuple[Decimal, int]]


def _money(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(Decimal("0.01"))


class SettlementTransactionRepository(BaseRepository[SettlementTransaction]):
    def __init__(self, db: Session):
        super().__init__(SettlementTransaction, db)

    def find_by_source(
        self,
        source_type: SettlementSourceType,
        source_id: str,
    ) -> Optional[SettlementTransaction]:
        return self.db.scalar(
            select(SettlementTransaction).where(
                SettlementTransaction.source_type == source_type,
                SettlementTransaction.source_id == source_id,
            )
        )

    def bucket_totals(self, vendor_id: UUID, settlement_date: date) -> BucketTotals:
        stmt = (
            select(
                SettlementTransaction.settlement_status,
                func.sum(SettlementTransaction.final_amount),
                func.count(SettlementTransaction.id),
            )
            .where(
                SettlementTransaction.vendor_id == vendor_id,
                SettlementTransaction.settlement_date == settlement_date,
            )
            .group_by(SettlementTransaction.settlement_status)
        )
        return {status: (_money(total), count) for status, total, count in self.db.execute(stmt)}

    def vendor_bucket_totals(self) -> Dict[UUID, BucketTotals]:
        """Totals per vendor over all dates."""
        stmt = select(
            SettlementTransaction.vendor_id,
            SettlementTransaction.settlement_status,
            func.sum(SettlementTransaction.final_amount),
            func.count(SettlementTransaction.id),
        ).group_by(SettlementTransaction.vendor_id, SettlementTransaction.settlement_status)

        totals: Dict[UUID, BucketTotals] = {}
        for vendor_id, status, total, count in self.db.execute(stmt):
            totals.setdefault(vendor_id, {})[status] = (_money(total), count)
        return totals

    def pending_dates(self, vendor_id: UUID) -> List[date]:
        stmt = (
            select(SettlementTransaction.settlement_date)
            .where(
                SettlementTransaction.vendor_id == vendor_id,
                SettlementTransaction.settlement_status == TransactionSettlementStatus.PENDING,
            )
            .distinct()
            .order_by(SettlementTransaction.settlement_date)
        )
        return list(self.db.scalars(stmt))

    def pending_rows(self, vendor_id: UUID, settlement_date: date) -> List[Tuple[UUID, Decimal]]:
        """(id, final_amount) of every pending row of a vendor-day."""
        stmt = select(SettlementTransaction.id, SettlementTransaction.final_amount).where(
            SettlementTransaction.vendor_id == vendor_id,
            SettlementTransaction.settlement_date == settlement_date,
            SettlementTransaction.settlement_status == TransactionSettlementStatus.PENDING,
        )
        return [(transaction_id, _money(amount)) for transaction_id, amount in self.db.execute(stmt)]

    def claim(self, transaction_ids: Sequence[UUID], request_id: UUID) -> int:
        """
        Move pending rows into a settlement request.

        Only rows still pending are touched; the caller compares the returned
        row count with the number of ids it expected to claim.
        """
        if not transaction_ids:
            return 0
        stmt = (
            update(SettlementTransaction)
            .where(
                SettlementTransaction.id.in_(list(transaction_ids)),
                SettlementTransaction.settlement_status == TransactionSettlementStatus.PENDING,
            )
            .values(
                settlement_status=TransactionSettlementStatus.IN_SETTLEMENT,
                settlement_request_id=request_id,
            )
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount

    def settle(self, request_id: UUID, settled_at: datetime, payment_reference: str) -> int:
        """Mark every row claimed by a request as settled."""
        stmt = (
            update(SettlementTransaction)
            .where(
                SettlementTransaction.settlement_request_id == request_id,
                SettlementTransaction.settlement_status == TransactionSettlementStatus.IN_SETTLEMENT,
            )
            .values(
                settlement_status=TransactionSettlementStatus.SETTLED,
                settled_at=settled_at,
                payment_reference=payment_reference,
            )
            .execution_options(synchronize_session="fetch")
        )
        return self.db.execute(stmt).rowcount

    def find_by_request(self, request_id: UUID) -> List[SettlementTransaction]:
        stmt = (
            select(SettlementTransaction)
            .where(SettlementTransaction.settlement_request_id == request_id)
            .order_by(SettlementTransaction.completed_at)
        )
        return list(self.db.scalars(stmt))


class SettlementRequestRepository(BaseRepository[SettlementRequest]):
    def __init__(self, db: Session):
        super().__init__(SettlementRequest, db)

    def find_open(self, vendor_id: UUID, settlement_date: date) -> Optional[SettlementRequest]:
        return self.db.scalar(
            select(SettlementRequest).where(
                SettlementRequest.vendor_id == vendor_id,
                SettlementRequest.settlement_date == settlement_date,
                SettlementRequest.status == SettlementRequestStatus.PROCESSING,
            )
        )

    def list_by_vendor(
        self,
        vendor_id: Optional[UUID] = None,
        status: Optional[SettlementRequestStatus] = None,
    ) -> List[SettlementRequest]:
        """Settlement history, newest first."""
        stmt = select(SettlementRequest)
        if vendor_id is not None:
            stmt = stmt.where(SettlementRequest.vendor_id == vendor_id)
        if status is not None:
            stmt = stmt.where(SettlementRequest.status == status)
        stmt = stmt.order_by(SettlementRequest.requested_at.desc(), SettlementRequest.id)
        return list(self.db.scalars(stmt))
