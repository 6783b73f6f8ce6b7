from dockit.models.subscription.station_premium import StationPremiumSubscription
from dockit.models.subscription.subscription_history import SubscriptionHistory
from dockit.models.subscription.subscription_payment import SubscriptionPayment
from dockit.models.subscription.vendor_subscription import FEATURE_COLUMNS, VendorSubscription

__all__ = [
    "FEATURE_COLUMNS",
    "StationPremiumSubscription",
    "SubscriptionHistory",
    "SubscriptionPayment",
    "VendorSubscription",
]
