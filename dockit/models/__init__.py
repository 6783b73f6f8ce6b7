"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from dockit.models.base import Base, BaseModel
from dockit.models.refund import RefundAuditEntry, RefundRequest
from dockit.models.settlement import SettlementRequest, SettlementTransaction
from dockit.models.station import ChargingStation
from dockit.models.subscription import (
    StationPremiumSubscription,
    SubscriptionHistory,
    SubscriptionPayment,
    VendorSubscription,
)
from dockit.models.vendor import Vendor

__all__ = [
    "Base",
    "BaseModel",
    "ChargingStation",
    "RefundAuditEntry",
    "RefundRequest",
    "SettlementRequest",
    "SettlementTransaction",
    "StationPremiumSubscription",
    "SubscriptionHistory",
    "SubscriptionPayment",
    "Vendor",
    "VendorSubscription",
]
