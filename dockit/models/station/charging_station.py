"""
Charging station model.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dockit.models.base import BaseModel, TimestampMixin, UTCDateTime, UUIDMixin

if TYPE_CHECKING:
    from dockit.models.subscription.station_premium import StationPremiumSubscription
    from dockit.models.vendor.vendor import Vendor

__all__ = ["ChargingStation"]


class ChargingStation(UUIDMixin, TimestampMixin, BaseModel):
    """
    EV charging station listed by a vendor.

    Stations are switched off in bulk when their vendor's licence lapses and
    switched back on when it is revived; ``deactivation_reason`` records
    why, so only sweep-deactivated stations are revived.
    """

    __tablename__ = "charging_stations"
    __table_args__ = (
        Index("ix_charging_station_vendor_active", "vendor_id", "is_active"),
    )

    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Station is visible and bookable",
    )
    deactivation_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    deactivated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    dockit_recommended: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Search ranking boost mirrored from premium state",
    )

    # Relationships
    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="stations")
    premium: Mapped[Optional["StationPremiumSubscription"]] = relationship(
        "StationPremiumSubscription",
        back_populates="station",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ChargingStation(id={self.id}, name='{self.name}', active={self.is_active})>"
