"""
Subscription change audit trail.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dockit.models.base import BaseModel, UTCDateTime, UUIDMixin
from dockit.utils.date_utils import now_utc

__all__ = ["SubscriptionHistory"]


class SubscriptionHistory(UUIDMixin, BaseModel):
    """
    One row per lifecycle transition of a vendor licence or station premium.

    ``old_value`` and ``new_value`` hold short human-readable summaries of
    the fields that changed.
    """

    __tablename__ = "subscription_history"
    __table_args__ = (
        Index("ix_subscription_history_vendor_changed", "vendor_id", "changed_at"),
    )

    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
    )
    station_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("charging_stations.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    change_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="extended, modified, upgraded, expired, premium_activated, ...",
    )
    old_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    new_value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    changed_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Actor id, or 'system' for the expiry sweep",
    )
    changed_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=now_utc)

    def __repr__(self) -> str:
        return f"<SubscriptionHistory(vendor_id={self.vendor_id}, change_type='{self.change_type}')>"
