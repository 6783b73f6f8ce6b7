from dockit.repositories.settlement.settlement_repository import (
    BucketTotals,
    SettlementRequestRepository,
    SettlementTransactionRepository,
)

__all__ = ["BucketTotals", "SettlementRequestRepository", "SettlementTransactionRepository"]
