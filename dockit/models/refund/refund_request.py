"""
Refund request model.

Refunds are queued when a user cancels a booking early enough and are paid
out manually by an operator who enters the bank/gateway transaction id.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dockit.models.base import BaseModel, MoneyType, TimestampMixin, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import RefundStatus

if TYPE_CHECKING:
    from dockit.models.refund.refund_audit_entry import RefundAuditEntry

__all__ = ["RefundRequest"]


class RefundRequest(UUIDMixin, TimestampMixin, BaseModel):
    """
    Refund of a cancelled booking.

    ``created_at`` is the queue key: pending refunds are served oldest first,
    ties broken by ``id``.
    """

    __tablename__ = "refund_requests"
    __table_args__ = (
        CheckConstraint("original_amount >= 0", name="original_amount_non_negative"),
        CheckConstraint("final_refund_amount >= 0", name="final_refund_non_negative"),
        Index("ix_refund_request_status_created", "refund_status", "created_at"),
    )

    refund_reference: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Human-readable reference (RF...)",
    )
    user_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    booking_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="At most one refund per booking",
    )
    vendor_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True,
    )

    refund_status: Mapped[RefundStatus] = mapped_column(
        enum_column(RefundStatus, "refund_status"),
        nullable=False,
        default=RefundStatus.PENDING,
    )

    # Calculation
    original_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    platform_fee_deducted: Mapped[Decimal] = mapped_column(MoneyType, nullable=False, default=Decimal("0"))
    slot_occupancy_fee: Mapped[Decimal] = mapped_column(MoneyType, nullable=False, default=Decimal("0"))
    slot_occupancy_fee_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal("5"),
    )
    final_refund_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    hours_before_charge: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(8, 2),
        nullable=True,
        comment="Hours between cancellation and scheduled charging start",
    )
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Processing
    transaction_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    processed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    audit_entries: Mapped[List["RefundAuditEntry"]] = relationship(
        "RefundAuditEntry",
        back_populates="refund",
        cascade="all, delete-orphan",
        order_by="RefundAuditEntry.performed_at",
    )

    def __repr__(self) -> str:
        return (
            f"<RefundRequest(reference='{self.refund_reference}', booking_id='{self.booking_id}', "
            f"status={self.refund_status})>"
        )
