from dockit.schemas.subscription.pricing import PriceQuote
from dockit.schemas.subscription.station_premium import (
    BulkPremiumFailure,
    BulkPremiumRequest,
    BulkPremiumResult,
    BulkPremiumSuccess,
    PremiumActivationRequest,
    PremiumDeactivationRequest,
    PremiumExtensionRequest,
    StationCreateRequest,
    StationPremiumResponse,
    StationResponse,
)
from dockit.schemas.subscription.vendor_subscription import (
    AutoRenewRequest,
    ExpirationStatus,
    SubscriptionExtensionRequest,
    SubscriptionModifyRequest,
    SubscriptionRenewalRequest,
    SubscriptionUpgradeRequest,
    TimeRemaining,
    VendorSubscriptionResponse,
)

__all__ = [
    "PriceQuote",
    "BulkPremiumFailure",
    "BulkPremiumRequest",
    "BulkPremiumResult",
    "BulkPremiumSuccess",
    "PremiumActivationRequest",
    "PremiumDeactivationRequest",
    "PremiumExtensionRequest",
    "StationCreateRequest",
    "StationPremiumResponse",
    "StationResponse",
    "AutoRenewRequest",
    "ExpirationStatus",
    "SubscriptionExtensionRequest",
    "SubscriptionModifyRequest",
    "SubscriptionRenewalRequest",
    "SubscriptionUpgradeRequest",
    "TimeRemaining",
    "VendorSubscriptionResponse",
]
