"""
Subscription lifecycle rules.

Pure functions over vendor licence and station premium state. Derived
queries answer questions about an entity at a given instant; transition
functions validate a request and return the column changes to apply,
raising ``BusinessRuleViolation`` before anything is mutated.

All instants are timezone-aware UTC datetimes supplied by the caller.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from dockit.core.config import LicensingSettings, settings
from dockit.core.exceptions import BusinessRuleViolation, ErrorCode
from dockit.schemas.common.enums import (
    FeatureFlag,
    PremiumPlanType,
    SubscriptionStatus,
    SubscriptionType,
)
from dockit.utils.date_utils import SECONDS_PER_DAY
from dockit.utils.string_utils import is_blank

__all__ = [
    "days_until_expiration",
    "time_until_expiration",
    "is_expired",
    "is_expiring_soon",
    "compute_subscription_status",
    "is_premium_active",
    "has_feature",
    "default_features",
    "default_max_stations",
    "premium_period",
    "require_reason",
    "ensure_not_expired",
    "activate_premium",
    "extend_premium",
    "deactivate_premium",
    "extend_subscription",
    "modify_subscription",
    "upgrade_to_yearly",
    "renew_subscription",
]


def _licensing(licensing: Optional[LicensingSettings]) -> LicensingSettings:
    return licensing or settings.licensing


# ---------------------------------------------------------------------------
# Derived queries
# ---------------------------------------------------------------------------

def days_until_expiration(end_date: datetime, now: datetime) -> int:
    """Whole days left, rounded up; 0 once expired."""
    remaining = (end_date - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining / SECONDS_PER_DAY)


def time_until_expiration(end_date: datetime, now: datetime) -> Dict[str, int]:
    remaining = int((end_date - now).total_seconds())
    if remaining <= 0:
        return {"days": 0, "hours": 0, "minutes": 0, "seconds": 0}
    days, remaining = divmod(remaining, SECONDS_PER_DAY)
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)
    return {"days": days, "hours": hours, "minutes": minutes, "seconds": seconds}


def is_expired(subscription, now: datetime) -> bool:
    return subscription.status == SubscriptionStatus.EXPIRED or subscription.end_date <= now


def is_expiring_soon(subscription, now: datetime, threshold_days: Optional[int] = None) -> bool:
    if threshold_days is None:
        threshold_days = settings.licensing.EXPIRY_WARNING_DAYS
    if is_expired(subscription, now):
        return False
    return 0 < days_until_expiration(subscription.end_date, now) <= threshold_days


def compute_subscription_status(subscription, now: datetime) -> SubscriptionStatus:
    """Expired once ``end_date`` has passed, whatever the stored status says."""
    if subscription.end_date <= now:
        return SubscriptionStatus.EXPIRED
    return subscription.status


def is_premium_active(premium, now: datetime) -> bool:
    """A premium counts only while flagged active and not past its end date."""
    if premium is None or not premium.is_active or premium.end_date is None:
        return False
    return premium.end_date > now


def has_feature(subscription, flag: FeatureFlag, now: datetime) -> bool:
    if compute_subscription_status(subscription, now) == SubscriptionStatus.EXPIRED:
        return False
    return flag in subscription.features_enabled


def default_features(subscription_type: SubscriptionType) -> List[FeatureFlag]:
    if subscription_type == SubscriptionType.YEARLY:
        return list(FeatureFlag)
    return [FeatureFlag.BASIC_DASHBOARD]


def default_max_stations(
    subscription_type: SubscriptionType,
    licensing: Optional[LicensingSettings] = None,
) -> int:
    licensing = _licensing(licensing)
    if subscription_type == SubscriptionType.YEARLY:
        return licensing.YEARLY_MAX_STATIONS
    return licensing.TRIAL_MAX_STATIONS


def premium_period(plan_type: PremiumPlanType, licensing: Optional[LicensingSettings] = None) -> timedelta:
    licensing = _licensing(licensing)
    if plan_type == PremiumPlanType.YEARLY:
        return timedelta(days=licensing.PREMIUM_YEARLY_DAYS)
    return timedelta(days=licensing.PREMIUM_MONTHLY_DAYS)


def _feature_columns(flags: Iterable[FeatureFlag]) -> Dict[str, bool]:
    enabled = set(flags)
    return {flag.value: flag in enabled for flag in FeatureFlag}


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

def require_reason(reason: Optional[str]) -> str:
    if is_blank(reason):
        raise BusinessRuleViolation(
            ErrorCode.MISSING_REQUIRED_FIELD,
            "A reason is required for this change",
            {"field": "reason"},
        )
    return reason.strip()


def ensure_not_expired(subscription, now: datetime) -> None:
    """Reject operations that need a live licence."""
    if subscription is None:
        raise BusinessRuleViolation(
            ErrorCode.SUBSCRIPTION_EXPIRED,
            "Vendor has no licence subscription",
        )
    if compute_subscription_status(subscription, now) == SubscriptionStatus.EXPIRED:
        raise BusinessRuleViolation(
            ErrorCode.SUBSCRIPTION_EXPIRED,
            "Vendor subscription has expired",
            {"vendor_id": str(subscription.vendor_id), "end_date": subscription.end_date.isoformat()},
        )


# ---------------------------------------------------------------------------
# Station premium transitions
# ---------------------------------------------------------------------------

def activate_premium(
    premium,
    plan_type: PremiumPlanType,
    now: datetime,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    if is_premium_active(premium, now):
        raise BusinessRuleViolation(
            ErrorCode.ALREADY_ACTIVE,
            "Station premium is already active",
            {"station_id": str(premium.station_id), "end_date": premium.end_date.isoformat()},
        )
    end_date = now + premium_period(plan_type, licensing)
    return {
        "is_active": True,
        "type": plan_type,
        "start_date": now,
        "end_date": end_date,
        "last_payment_date": now,
        "next_payment_date": end_date,
    }


def extend_premium(
    premium,
    plan_type: PremiumPlanType,
    now: datetime,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    """
    Add one plan period to the later of the current end date and ``now``.

    Only the stored flag is checked, so a premium that ran past its end date
    without being deactivated can still be extended.
    """
    if not premium.is_active:
        raise BusinessRuleViolation(
            ErrorCode.NOT_ACTIVE,
            "Station premium is not active",
            {"station_id": str(premium.station_id)},
        )
    base = max(premium.end_date, now) if premium.end_date is not None else now
    end_date = base + premium_period(plan_type, licensing)
    return {
        "type": plan_type,
        "end_date": end_date,
        "last_payment_date": now,
        "next_payment_date": end_date,
    }


def deactivate_premium(premium, reason: Optional[str]) -> Dict[str, Any]:
    require_reason(reason)
    if not premium.is_active:
        raise BusinessRuleViolation(
            ErrorCode.NOT_ACTIVE,
            "Station premium is not active",
            {"station_id": str(premium.station_id)},
        )
    return {
        "is_active": False,
        "type": None,
        "start_date": None,
        "end_date": None,
        "next_payment_date": None,
    }


# ---------------------------------------------------------------------------
# Vendor licence transitions
# ---------------------------------------------------------------------------

def _liveness(status: SubscriptionStatus, end_date: datetime, now: datetime) -> Dict[str, Any]:
    live = status == SubscriptionStatus.ACTIVE and end_date > now
    return {"status": status, "license_active": live}


def extend_subscription(
    subscription,
    now: datetime,
    days: int = 0,
    months: int = 0,
    years: int = 0,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    """
    Push the end date out from its stored value, never from ``now``.

    A lapsed licence whose new end date lies in the future becomes active
    again; a suspended one stays suspended.
    """
    licensing = _licensing(licensing)
    if min(days, months, years) < 0 or days + months + years <= 0:
        raise BusinessRuleViolation(
            ErrorCode.NO_DURATION_SPECIFIED,
            "Specify a positive number of days, months or years",
            {"days": days, "months": months, "years": years},
        )

    total_days = days + months * licensing.DAYS_PER_MONTH + years * licensing.DAYS_PER_YEAR
    end_date = subscription.end_date + timedelta(days=total_days)

    status = subscription.status
    if status == SubscriptionStatus.EXPIRED and end_date > now:
        status = SubscriptionStatus.ACTIVE

    changes = {"end_date": end_date, "next_payment_date": end_date}
    changes.update(_liveness(status, end_date, now))
    return changes


def modify_subscription(
    subscription,
    now: datetime,
    reason: Optional[str],
    type: Optional[SubscriptionType] = None,
    status: Optional[SubscriptionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    max_stations: Optional[int] = None,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    """
    Partial update. Changing ``type`` without an explicit ``max_stations``
    re-derives the station cap and the feature set from the new type.
    """
    require_reason(reason)

    new_start = start_date if start_date is not None else subscription.start_date
    new_end = end_date if end_date is not None else subscription.end_date
    if new_end <= new_start:
        raise BusinessRuleViolation(
            ErrorCode.INVALID_DATE_RANGE,
            "End date must be after start date",
            {"start_date": new_start.isoformat(), "end_date": new_end.isoformat()},
        )
    if max_stations is not None and max_stations < 0:
        raise BusinessRuleViolation(
            ErrorCode.VALIDATION_ERROR,
            "max_stations cannot be negative",
            {"field": "max_stations"},
        )

    changes: Dict[str, Any] = {"start_date": new_start, "end_date": new_end}

    if type is not None:
        changes["type"] = type
        if type != subscription.type:
            changes.update(_feature_columns(default_features(type)))
            if max_stations is None:
                changes["max_stations"] = default_max_stations(type, licensing)
    if max_stations is not None:
        changes["max_stations"] = max_stations

    new_status = status if status is not None else subscription.status
    if status is None and new_status == SubscriptionStatus.EXPIRED and new_end > now:
        new_status = SubscriptionStatus.ACTIVE
    changes.update(_liveness(new_status, new_end, now))
    return changes


def upgrade_to_yearly(
    subscription,
    now: datetime,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    """Trial to yearly, allowed even after the trial lapsed."""
    licensing = _licensing(licensing)
    if subscription.type == SubscriptionType.YEARLY:
        raise BusinessRuleViolation(
            ErrorCode.ALREADY_YEARLY,
            "Subscription is already yearly",
            {"vendor_id": str(subscription.vendor_id)},
        )
    end_date = now + timedelta(days=licensing.YEARLY_PERIOD_DAYS)
    changes = {
        "type": SubscriptionType.YEARLY,
        "status": SubscriptionStatus.ACTIVE,
        "start_date": now,
        "end_date": end_date,
        "max_stations": licensing.YEARLY_MAX_STATIONS,
        "license_active": True,
        "last_payment_date": now,
        "next_payment_date": end_date,
    }
    changes.update(_feature_columns(default_features(SubscriptionType.YEARLY)))
    return changes


def renew_subscription(
    subscription,
    now: datetime,
    auto_renew: bool = False,
    licensing: Optional[LicensingSettings] = None,
) -> Dict[str, Any]:
    """
    Paid renewal: one licence year from ``now``, whatever the current state.

    The plan type, station limit and features are kept; a lapsed or switched
    off licence becomes active again.
    """
    licensing = _licensing(licensing)
    end_date = now + timedelta(days=licensing.YEARLY_PERIOD_DAYS)
    return {
        "status": SubscriptionStatus.ACTIVE,
        "end_date": end_date,
        "license_active": True,
        "auto_renew": auto_renew,
        "last_payment_date": now,
        "next_payment_date": end_date,
    }
