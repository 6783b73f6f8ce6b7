"""
Settlement request model.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from dockit.models.base import BaseModel, MoneyType, TimestampMixin, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import SettlementRequestStatus, SettlementRequestType

__all__ = ["SettlementRequest"]


class SettlementRequest(UUIDMixin, TimestampMixin, BaseModel):
    """
    Admin or vendor request to pay out one vendor-day of pending revenue.

    At most one ``processing`` request may exist per (vendor, date); the
    partial unique index below enforces it for concurrent writers.
    """

    __tablename__ = "settlement_requests"
    __table_args__ = (
        Index(
            "uq_settlement_request_open_vendor_date",
            "vendor_id",
            "settlement_date",
            unique=True,
            sqlite_where=text("status = 'processing'"),
            postgresql_where=text("status = 'processing'"),
        ),
        CheckConstraint("amount > 0", name="amount_positive"),
        Index("ix_settlement_request_vendor_requested", "vendor_id", "requested_at"),
    )

    settlement_reference: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Human-readable reference (STL...)",
    )
    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    settlement_date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[SettlementRequestStatus] = mapped_column(
        enum_column(SettlementRequestStatus, "settlement_request_status"),
        nullable=False,
        default=SettlementRequestStatus.PROCESSING,
        index=True,
    )
    request_type: Mapped[SettlementRequestType] = mapped_column(
        enum_column(SettlementRequestType, "settlement_request_type"),
        nullable=False,
        default=SettlementRequestType.REGULAR,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Bank details at the time of the request
    bank_account_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    bank_account_holder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    bank_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Workflow
    requested_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    processing_notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    processed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.status == SettlementRequestStatus.PROCESSING

    def __repr__(self) -> str:
        return (
            f"<SettlementRequest(reference='{self.settlement_reference}', "
            f"vendor_id={self.vendor_id}, date={self.settlement_date}, status={self.status})>"
        )
