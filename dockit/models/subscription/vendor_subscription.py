"""
Vendor licence subscription model.

One row per vendor. Trial at signup, yearly after payment; the row is never
deleted, only moved between states by the lifecycle services.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dockit.models.base import (
    BaseModel,
    TimestampMixin,
    UTCDateTime,
    UUIDMixin,
    enum_column,
)
from dockit.schemas.common.enums import FeatureFlag, SubscriptionStatus, SubscriptionType

if TYPE_CHECKING:
    from dockit.models.vendor.vendor import Vendor

__all__ = ["VendorSubscription", "FEATURE_COLUMNS"]

# Feature flag -> boolean column holding it
FEATURE_COLUMNS = {
    FeatureFlag.BASIC_DASHBOARD: "basic_dashboard",
    FeatureFlag.ADVANCED_ANALYTICS: "advanced_analytics",
    FeatureFlag.PRIORITY_SUPPORT: "priority_support",
    FeatureFlag.CUSTOM_BRANDING: "custom_branding",
    FeatureFlag.API_ACCESS: "api_access",
}


class VendorSubscription(UUIDMixin, TimestampMixin, BaseModel):
    """
    Vendor licence.

    ``status`` is the stored value; whether the licence is expired right now
    is computed from ``end_date`` by the subscription rules.
    """

    __tablename__ = "vendor_subscriptions"
    __table_args__ = (
        CheckConstraint(
            "end_date > start_date",
            name="end_after_start",
        ),
        CheckConstraint(
            "max_stations >= 0",
            name="max_stations_non_negative",
        ),
        Index("ix_vendor_subscription_status_end_date", "status", "end_date"),
    )

    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="Owning vendor",
    )

    type: Mapped[SubscriptionType] = mapped_column(
        enum_column(SubscriptionType, "subscription_type"),
        nullable=False,
        default=SubscriptionType.TRIAL,
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        enum_column(SubscriptionStatus, "subscription_status"),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
        index=True,
    )

    # Period
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, index=True)

    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_stations: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Station cap, derived from type unless overridden",
    )
    license_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Cleared by the expiry sweep, set again on revival",
    )

    # Features
    basic_dashboard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    advanced_analytics: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority_support: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_branding: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    api_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Payments
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    next_payment_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Optimistic concurrency token",
    )

    vendor: Mapped["Vendor"] = relationship("Vendor", back_populates="subscription")

    __mapper_args__ = {"version_id_col": version}

    @property
    def features_enabled(self) -> List[FeatureFlag]:
        return [flag for flag, column in FEATURE_COLUMNS.items() if getattr(self, column)]

    def set_features(self, flags) -> None:
        enabled = set(flags)
        for flag, column in FEATURE_COLUMNS.items():
            setattr(self, column, flag in enabled)

    def __repr__(self) -> str:
        return (
            f"<VendorSubscription(vendor_id={self.vendor_id}, type={self.type}, "
            f"status={self.status}, end_date={self.end_date})>"
        )
