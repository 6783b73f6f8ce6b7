from dockit.schemas.refund.refund import (
    RefundAuditEntryResponse,
    RefundCalculation,
    RefundCreateRequest,
    RefundListResponse,
    RefundProcessRequest,
    RefundRejectRequest,
    RefundResponse,
)

__all__ = [
    "RefundAuditEntryResponse",
    "RefundCalculation",
    "RefundCreateRequest",
    "RefundListResponse",
    "RefundProcessRequest",
    "RefundRejectRequest",
    "RefundResponse",
]
