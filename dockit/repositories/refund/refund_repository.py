"""
Refund request repository.
"""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from dockit.models.refund.refund_request import RefundRequest
from dockit.repositories.base.base_repository import BaseRepository
from dockit.schemas.common.enums import QueueOrdering, RefundStatus


class RefundRequestRepository(BaseRepository[RefundRequest]):
    def __init__(self, db: Session):
        super().__init__(RefundRequest, db)

    def find_by_booking(self, booking_id: str) -> Optional[RefundRequest]:
        return self.db.scalar(select(RefundRequest).where(RefundRequest.booking_id == booking_id))

    def _queue_stmt(self, status: Optional[RefundStatus], ordering: QueueOrdering):
        stmt = select(RefundRequest)
        if status is not None:
            stmt = stmt.where(RefundRequest.refund_status == status)
        if ordering == QueueOrdering.LIFO:
            return stmt.order_by(RefundRequest.created_at.desc(), RefundRequest.id.desc())
        return stmt.order_by(RefundRequest.created_at.asc(), RefundRequest.id.asc())

    def list_queue(
        self,
        status: Optional[RefundStatus] = RefundStatus.PENDING,
        ordering: QueueOrdering = QueueOrdering.FIFO,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[RefundRequest], int]:
        """Refunds in queue order (oldest first by default), one page."""
        return self.paginate(self._queue_stmt(status, ordering), page, page_size)

    def next_pending(self) -> Optional[RefundRequest]:
        stmt = self._queue_stmt(RefundStatus.PENDING, QueueOrdering.FIFO).limit(1)
        return self.db.scalar(stmt)
