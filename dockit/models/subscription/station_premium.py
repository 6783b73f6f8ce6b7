"""
Station premium subscription model.

Per-station add-on that boosts a station in search. One row per station,
created inactive alongside the station.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dockit.models.base import BaseModel, TimestampMixin, UTCDateTime, UUIDMixin, enum_column
from dockit.schemas.common.enums import PremiumPlanType

if TYPE_CHECKING:
    from dockit.models.station.charging_station import ChargingStation

__all__ = ["StationPremiumSubscription"]


class StationPremiumSubscription(UUIDMixin, TimestampMixin, BaseModel):
    """
    Station premium state.

    An active row always carries a plan type and both dates. After
    ``end_date`` passes the row keeps its values and is simply treated as
    standard until it is deactivated or re-activated.
    """

    __tablename__ = "station_premium_subscriptions"
    __table_args__ = (
        CheckConstraint(
            "NOT is_active OR (type IS NOT NULL AND start_date IS NOT NULL AND end_date IS NOT NULL)",
            name="active_requires_period",
        ),
        CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR end_date > start_date",
            name="end_after_start",
        ),
    )

    station_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("charging_stations.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    type: Mapped[Optional[PremiumPlanType]] = mapped_column(
        enum_column(PremiumPlanType, "premium_plan_type"),
        nullable=True,
    )
    start_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True, index=True)

    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    next_payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Optimistic concurrency token",
    )

    station: Mapped["ChargingStation"] = relationship("ChargingStation", back_populates="premium")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<StationPremiumSubscription(station_id={self.station_id}, "
            f"active={self.is_active}, type={self.type}, end_date={self.end_date})>"
        )
