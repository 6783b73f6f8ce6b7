"""
Settlement ledger schemas.

``DailySettlement`` is the per-vendor, per-day view of the ledger. Its four
amounts always satisfy::

    total_to_be_received == pending_settlement
                            + in_settlement_process
                            + payment_settled
"""

from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, computed_field

from dockit.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema
from dockit.schemas.common.enums import (
    SettlementRequestStatus,
    SettlementRequestType,
    SettlementSourceType,
    TransactionSettlementStatus,
)

__all__ = [
    "DailySettlement",
    "TransactionRecordRequest",
    "SettlementTransactionResponse",
    "SettlementInitiateRequest",
    "UrgentSettlementRequest",
    "SettlementCompleteRequest",
    "SettlementRequestResponse",
    "VendorSettlementOverview",
]

ZERO = Decimal("0.00")


class DailySettlement(BaseSchema):
    """Money owed to one vendor for one calendar day, split by bucket."""

    vendor_id: UUID
    date: Date
    total_to_be_received: Decimal = ZERO
    pending_settlement: Decimal = ZERO
    in_settlement_process: Decimal = ZERO
    payment_settled: Decimal = ZERO
    transaction_count: int = 0
    open_settlement_id: Optional[UUID] = None

    @computed_field
    @property
    def state(self) -> str:
        """Ledger state of the day, most actionable bucket first."""
        if self.transaction_count == 0:
            return "no_transactions"
        if self.in_settlement_process > 0:
            return "in_settlement_process"
        if self.pending_settlement > 0:
            return "pending_settlement"
        return "payment_settled"


class TransactionRecordRequest(BaseCreateSchema):
    """Completed booking or order entering the ledger."""

    vendor_id: UUID
    source_type: SettlementSourceType
    source_id: str = Field(..., min_length=1, max_length=100)
    final_amount: Decimal = Field(..., ge=0, decimal_places=2)
    completed_at: datetime


class SettlementTransactionResponse(BaseResponseSchema):
    id: UUID
    vendor_id: UUID
    source_type: SettlementSourceType
    source_id: str
    final_amount: Decimal
    completed_at: datetime
    settlement_date: Date
    settlement_status: TransactionSettlementStatus
    settlement_request_id: Optional[UUID] = None
    settled_at: Optional[datetime] = None


class SettlementInitiateRequest(BaseCreateSchema):
    """Admin request to settle the whole pending amount of one vendor-day."""

    vendor_id: UUID
    date: Date
    amount: Decimal = Field(..., ge=0)


class UrgentSettlementRequest(BaseCreateSchema):
    date: Date
    amount: Decimal = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=500)


class SettlementCompleteRequest(BaseCreateSchema):
    # Length is checked by the ledger so a short reference maps to INVALID_REFERENCE
    payment_reference: str = Field(default="", max_length=100)
    processing_notes: Optional[str] = Field(None, max_length=1000)


class SettlementRequestResponse(BaseResponseSchema):
    id: UUID
    settlement_reference: str
    vendor_id: UUID
    settlement_date: Date
    amount: Decimal
    transaction_count: int
    status: SettlementRequestStatus
    request_type: SettlementRequestType
    reason: Optional[str] = None
    bank_account_number: Optional[str] = None
    bank_account_holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    requested_by: Optional[str] = None
    requested_at: datetime
    payment_reference: Optional[str] = None
    processing_notes: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None


class VendorSettlementOverview(BaseSchema):
    """Per-vendor totals over all dates for the admin overview."""

    vendor_id: UUID
    business_name: str
    total_to_be_received: Decimal
    pending_settlement: Decimal
    in_settlement_process: Decimal
    payment_settled: Decimal
    pending_dates: List[Date] = Field(default_factory=list)
    has_bank_details: bool
