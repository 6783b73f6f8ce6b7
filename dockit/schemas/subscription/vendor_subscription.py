"""
Vendor licence subscription schemas.

Requests for extending, modifying and upgrading a licence, and the
responses carrying the stored row plus its computed expiry state.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from dockit.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema
from dockit.schemas.common.enums import FeatureFlag, SubscriptionStatus, SubscriptionType

__all__ = [
    "VendorSubscriptionResponse",
    "SubscriptionExtensionRequest",
    "SubscriptionModifyRequest",
    "SubscriptionUpgradeRequest",
    "AutoRenewRequest",
    "TimeRemaining",
    "ExpirationStatus",
]


class VendorSubscriptionResponse(BaseResponseSchema):
    """Vendor licence with its effective (computed) status."""

    id: UUID
    vendor_id: UUID
    type: SubscriptionType
    status: SubscriptionStatus = Field(..., description="Stored status")
    effective_status: SubscriptionStatus = Field(
        ...,
        description="Expired once end_date has passed, regardless of stored status",
    )
    start_date: datetime
    end_date: datetime
    auto_renew: bool
    max_stations: int
    features_enabled: List[FeatureFlag]
    license_active: bool
    last_payment_date: Optional[datetime] = None
    next_payment_date: Optional[datetime] = None
    days_until_expiration: int = Field(..., ge=0)
    is_expiring_soon: bool
    version: int


class SubscriptionExtensionRequest(BaseCreateSchema):
    """
    Extend a licence by a duration.

    Months count as 30 days and years as 365 days. At least one component
    must be positive.
    """

    days: int = Field(default=0, ge=0, le=3650)
    months: int = Field(default=0, ge=0, le=120)
    years: int = Field(default=0, ge=0, le=10)
    reason: Optional[str] = Field(None, max_length=500)
    expected_version: Optional[int] = Field(None, ge=1)


class SubscriptionModifyRequest(BaseCreateSchema):
    """Partial update of a licence; omitted fields keep their value."""

    type: Optional[SubscriptionType] = None
    status: Optional[SubscriptionStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_stations: Optional[int] = Field(None, ge=0, le=10000)
    reason: Optional[str] = Field(None, max_length=500)
    expected_version: Optional[int] = Field(None, ge=1)


class SubscriptionUpgradeRequest(BaseCreateSchema):
    reason: Optional[str] = Field(None, max_length=500)
    transaction_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)
    expected_version: Optional[int] = Field(None, ge=1)


class SubscriptionRenewalRequest(BaseCreateSchema):
    """Paid renewal of the vendor licence for another year."""

    auto_renew: bool = False
    transaction_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)
    expected_version: Optional[int] = Field(None, ge=1)


class AutoRenewRequest(BaseCreateSchema):
    auto_renew: bool


class TimeRemaining(BaseSchema):
    """Countdown until expiry; all zero once expired."""

    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0


class ExpirationStatus(BaseSchema):
    """Result of the expiry check for one vendor."""

    vendor_id: UUID
    is_expired: bool
    is_expiring_soon: bool
    days_until_expiration: int
    time_until_expiration: TimeRemaining
    subscription_status: SubscriptionStatus
    license_active: bool
    end_date: datetime
    stations_deactivated: int = 0
