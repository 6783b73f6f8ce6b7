from dockit.services.settlement.settlement_ledger_service import (
    PaymentAdjustment,
    SettlementLedgerService,
    calculate_merchant_revenue,
)

__all__ = ["PaymentAdjustment", "SettlementLedgerService", "calculate_merchant_revenue"]
