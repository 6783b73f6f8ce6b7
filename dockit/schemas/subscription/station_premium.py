"""
Station premium and station schemas.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from dockit.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema
from dockit.schemas.common.enums import BulkPremiumAction, PremiumPlanType

__all__ = [
    "StationPremiumResponse",
    "PremiumActivationRequest",
    "PremiumExtensionRequest",
    "PremiumDeactivationRequest",
    "StationCreateRequest",
    "StationResponse",
    "BulkPremiumRequest",
    "BulkPremiumSuccess",
    "BulkPremiumFailure",
    "BulkPremiumResult",
]


class StationPremiumResponse(BaseResponseSchema):
    station_id: UUID
    is_active: bool = Field(..., description="Stored activation flag")
    premium_active: bool = Field(..., description="Active and not yet past end_date")
    type: Optional[PremiumPlanType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    auto_renew: bool
    last_payment_date: Optional[datetime] = None
    next_payment_date: Optional[datetime] = None
    version: int


class PremiumActivationRequest(BaseCreateSchema):
    """Activate premium for a station after a (simulated) payment."""

    plan_type: PremiumPlanType
    transaction_id: Optional[str] = Field(None, max_length=100)
    payment_method: Optional[str] = Field(None, max_length=50)
    expected_version: Optional[int] = Field(None, ge=1)


class PremiumExtensionRequest(PremiumActivationRequest):
    """Extend premium; the new period starts at the later of end_date and now."""


class PremiumDeactivationRequest(BaseCreateSchema):
    reason: Optional[str] = Field(None, max_length=500)
    expected_version: Optional[int] = Field(None, ge=1)


class StationCreateRequest(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255)


class StationResponse(BaseResponseSchema):
    id: UUID
    vendor_id: UUID
    name: str
    is_active: bool
    deactivation_reason: Optional[str] = None
    dockit_recommended: bool


class BulkPremiumRequest(BaseCreateSchema):
    """Apply one premium action to many stations; each station is handled on its own."""

    station_ids: List[UUID] = Field(..., min_length=1, max_length=200)
    action: BulkPremiumAction
    plan_type: PremiumPlanType = PremiumPlanType.MONTHLY
    reason: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50)


class BulkPremiumSuccess(BaseSchema):
    station_id: UUID
    station_name: str
    end_date: Optional[datetime] = None


class BulkPremiumFailure(BaseSchema):
    station_id: UUID
    error_code: str
    error: str


class BulkPremiumResult(BaseSchema):
    action: BulkPremiumAction
    total_processed: int
    successful: List[BulkPremiumSuccess] = Field(default_factory=list)
    failed: List[BulkPremiumFailure] = Field(default_factory=list)
