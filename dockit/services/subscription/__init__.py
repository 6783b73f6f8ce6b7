from dockit.services.subscription.station_premium_service import StationPremiumService
from dockit.services.subscription.subscription_pricing import (
    calculate_vat,
    quote_station_premium,
    quote_vendor_license,
)
from dockit.services.subscription.vendor_subscription_service import (
    EXPIRY_DEACTIVATION_REASON,
    VendorSubscriptionService,
)

__all__ = [
    "EXPIRY_DEACTIVATION_REASON",
    "StationPremiumService",
    "VendorSubscriptionService",
    "calculate_vat",
    "quote_station_premium",
    "quote_vendor_license",
]
