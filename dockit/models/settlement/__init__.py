from dockit.models.settlement.settlement_request import SettlementRequest
from dockit.models.settlement.settlement_transaction import SettlementTransaction

__all__ = ["SettlementRequest", "SettlementTransaction"]
