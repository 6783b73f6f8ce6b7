"""
Refund audit log.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dockit.models.base import BaseModel, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import RefundAuditAction
from dockit.utils.date_utils import now_utc

if TYPE_CHECKING:
    from dockit.models.refund.refund_request import RefundRequest

__all__ = ["RefundAuditEntry"]


class RefundAuditEntry(UUIDMixin, BaseModel):
    """Append-only record of who did what to a refund."""

    __tablename__ = "refund_audit_entries"

    refund_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("refund_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    action: Mapped[RefundAuditAction] = mapped_column(
        enum_column(RefundAuditAction, "refund_audit_action"),
        nullable=False,
    )
    performed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    performed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=now_utc)

    refund: Mapped["RefundRequest"] = relationship("RefundRequest", back_populates="audit_entries")
