"""
Subscription payment records.

Payments are simulated: the caller supplies a gateway transaction id or one
is generated. VAT is stored per payment so receipts stay reproducible.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dockit.models.base import BaseModel, MoneyType, TimestampMixin, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import PaymentStatus, PaymentSubject, PaymentType

__all__ = ["SubscriptionPayment"]


class SubscriptionPayment(UUIDMixin, TimestampMixin, BaseModel):
    """Payment for a vendor licence or a station premium plan."""

    __tablename__ = "subscription_payments"

    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    station_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("charging_stations.id", ondelete="SET NULL"),
        nullable=True,
        comment="Null for vendor licence payments",
    )

    subject: Mapped[PaymentSubject] = mapped_column(
        enum_column(PaymentSubject, "payment_subject"),
        nullable=False,
    )
    payment_type: Mapped[PaymentType] = mapped_column(
        enum_column(PaymentType, "payment_type"),
        nullable=False,
    )
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False)

    transaction_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    # Amounts
    base_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    vat_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NPR")

    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_column(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.COMPLETED,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
