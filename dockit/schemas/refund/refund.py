"""
Refund queue schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from dockit.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema
from dockit.schemas.common.enums import RefundAuditAction, RefundStatus

__all__ = [
    "RefundCalculation",
    "RefundCreateRequest",
    "RefundProcessRequest",
    "RefundRejectRequest",
    "RefundAuditEntryResponse",
    "RefundResponse",
    "RefundListResponse",
]


class RefundCalculation(BaseSchema):
    """
    Refund breakdown for a cancelled booking.

    Ineligible cancellations (too close to the charging start) get a zero
    refund and a ``reason``.
    """

    eligible: bool
    original_amount: Decimal
    platform_fee: Decimal
    base_refund: Decimal
    slot_occupancy_fee_percentage: Decimal
    slot_occupancy_fee: Decimal
    final_refund_amount: Decimal
    hours_before_charge: Decimal
    reason: Optional[str] = None


class RefundCreateRequest(BaseCreateSchema):
    booking_id: str = Field(..., min_length=1, max_length=100)
    user_id: str = Field(..., min_length=1, max_length=100)
    vendor_id: Optional[UUID] = None
    original_amount: Decimal = Field(..., gt=0)
    platform_fee: Decimal = Field(default=Decimal("0"), ge=0)
    hours_before_charge: Decimal = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=500)


class RefundProcessRequest(BaseCreateSchema):
    # Blank is rejected by the queue as MISSING_TRANSACTION_ID
    transaction_id: str = Field(default="", max_length=100)
    remarks: Optional[str] = Field(None, max_length=1000)


class RefundRejectRequest(BaseCreateSchema):
    reason: Optional[str] = Field(None, max_length=500)


class RefundAuditEntryResponse(BaseSchema):
    action: RefundAuditAction
    performed_by: Optional[str] = None
    details: Optional[str] = None
    performed_at: datetime


class RefundResponse(BaseResponseSchema):
    id: UUID
    refund_reference: str
    user_id: str
    booking_id: str
    vendor_id: Optional[UUID] = None
    refund_status: RefundStatus
    original_amount: Decimal
    platform_fee_deducted: Decimal
    slot_occupancy_fee: Decimal
    slot_occupancy_fee_percentage: Decimal
    final_refund_amount: Decimal
    hours_before_charge: Optional[Decimal] = None
    cancellation_reason: Optional[str] = None
    transaction_id: Optional[str] = None
    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    audit_entries: List[RefundAuditEntryResponse] = Field(default_factory=list)


class RefundListResponse(BaseSchema):
    items: List[RefundResponse]
    total: int
    page: int
    page_size: int
