from dockit.repositories.subscription.station_premium_repository import StationPremiumRepository
from dockit.repositories.subscription.subscription_history_repository import (
    SubscriptionHistoryRepository,
    SubscriptionPaymentRepository,
)
from dockit.repositories.subscription.vendor_subscription_repository import (
    VendorSubscriptionRepository,
)

__all__ = [
    "StationPremiumRepository",
    "SubscriptionHistoryRepository",
    "SubscriptionPaymentRepository",
    "VendorSubscriptionRepository",
]
