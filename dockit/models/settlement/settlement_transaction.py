"""
Settlement transaction model.

One row per completed booking or restaurant order, carrying the merchant's
revenue. The row's ``settlement_status`` is the bucket its money sits in.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dockit.models.base import BaseModel, MoneyType, TimestampMixin, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import SettlementSourceType, TransactionSettlementStatus

__all__ = ["SettlementTransaction"]


class SettlementTransaction(UUIDMixin, TimestampMixin, BaseModel):
    """Merchant revenue of one completed booking or order."""

    __tablename__ = "settlement_transactions"
    __table_args__ = (
        UniqueConstraint("source_type", "source_id", name="uq_settlement_transaction_source"),
        CheckConstraint("final_amount >= 0", name="final_amount_non_negative"),
        Index(
            "ix_settlement_transaction_vendor_date_status",
            "vendor_id",
            "settlement_date",
            "settlement_status",
        ),
    )

    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    source_type: Mapped[SettlementSourceType] = mapped_column(
        enum_column(SettlementSourceType, "settlement_source_type"),
        nullable=False,
    )
    source_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Booking or order identifier",
    )

    final_amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Merchant revenue after platform fee, charges and refunds",
    )
    completed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    settlement_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        comment="UTC calendar day of completed_at",
    )

    settlement_status: Mapped[TransactionSettlementStatus] = mapped_column(
        enum_column(TransactionSettlementStatus, "transaction_settlement_status"),
        nullable=False,
        default=TransactionSettlementStatus.PENDING,
    )
    settlement_request_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("settlement_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    settled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SettlementTransaction(source={self.source_type}:{self.source_id}, "
            f"amount={self.final_amount}, status={self.settlement_status})>"
        )
