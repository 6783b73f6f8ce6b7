"""
Enumerations shared by models, schemas and services.
"""

from enum import Enum

__all__ = [
    "ActorType",
    "VerificationStatus",
    "SubscriptionType",
    "SubscriptionStatus",
    "FeatureFlag",
    "PremiumPlanType",
    "BulkPremiumAction",
    "PaymentSubject",
    "PaymentType",
    "PaymentStatus",
    "SettlementSourceType",
    "TransactionSettlementStatus",
    "SettlementRequestStatus",
    "SettlementRequestType",
    "RefundStatus",
    "RefundAuditAction",
    "QueueOrdering",
    "AutoRenewTarget",
]


class ActorType(str, Enum):
    """Who performed a transition."""

    ADMIN = "admin"
    VENDOR = "vendor"
    USER = "user"
    SYSTEM = "system"


class VerificationStatus(str, Enum):
    """Vendor onboarding verification."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class SubscriptionType(str, Enum):
    """Vendor licence tier."""

    TRIAL = "trial"
    YEARLY = "yearly"


class SubscriptionStatus(str, Enum):
    """Stored vendor subscription status."""

    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class FeatureFlag(str, Enum):
    """Dashboard features gated by the vendor licence."""

    BASIC_DASHBOARD = "basic_dashboard"
    ADVANCED_ANALYTICS = "advanced_analytics"
    PRIORITY_SUPPORT = "priority_support"
    CUSTOM_BRANDING = "custom_branding"
    API_ACCESS = "api_access"


class PremiumPlanType(str, Enum):
    """Station premium billing period."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class BulkPremiumAction(str, Enum):
    ACTIVATE = "activate"
    EXTEND = "extend"
    DEACTIVATE = "deactivate"


class PaymentSubject(str, Enum):
    """What a subscription payment paid for."""

    VENDOR_LICENSE = "vendor_license"
    STATION_PREMIUM = "station_premium"


class PaymentType(str, Enum):
    SUBSCRIPTION = "subscription"
    RENEWAL = "renewal"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SettlementSourceType(str, Enum):
    """Origin of a settlement transaction."""

    BOOKING = "booking"
    ORDER = "order"


class TransactionSettlementStatus(str, Enum):
    """Bucket a settlement transaction currently sits in."""

    PENDING = "pending"
    IN_SETTLEMENT = "in_settlement"
    SETTLED = "settled"


class SettlementRequestStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"


class SettlementRequestType(str, Enum):
    REGULAR = "regular"
    URGENT = "urgent"


class RefundStatus(str, Enum):
    """Refund lifecycle; completed, failed and rejected are terminal."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REJECTED = "rejected"


class RefundAuditAction(str, Enum):
    CREATED = "created"
    COMPLETED = "completed"
    REJECTED = "rejected"


class QueueOrdering(str, Enum):
    """Ordering of queue listings by request time."""

    FIFO = "fifo"
    LIFO = "lifo"


class AutoRenewTarget(str, Enum):
    VENDOR = "vendor"
    STATION = "station"
