from dockit.schemas.settlement.settlement import (
    DailySettlement,
    SettlementCompleteRequest,
    SettlementInitiateRequest,
    SettlementRequestResponse,
    SettlementTransactionResponse,
    TransactionRecordRequest,
    UrgentSettlementRequest,
    VendorSettlementOverview,
)

__all__ = [
    "DailySettlement",
    "SettlementCompleteRequest",
    "SettlementInitiateRequest",
    "SettlementRequestResponse",
    "SettlementTransactionResponse",
    "TransactionRecordRequest",
    "UrgentSettlementRequest",
    "VendorSettlementOverview",
]
