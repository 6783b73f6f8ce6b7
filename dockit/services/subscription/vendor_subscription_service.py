"""
Vendor licence lifecycle service.

Applies the subscription rules to persisted licences: trial at signup,
extension, admin modification, trial-to-yearly upgrade, paid renewal and
the expiry sweep that switches a lapsed vendor's stations off. Stations
switched off by the sweep are switched back on by any transition that
revives the licence.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dockit.core.config import LicensingSettings, settings
from dockit.core.exceptions import BusinessRuleViolation, ErrorCode
from dockit.models.subscription.vendor_subscription import VendorSubscription
from dockit.repositories.base.base_repository import AuditContext
from dockit.repositories.station.station_repository import StationRepository
from dockit.repositories.subscription import (
    SubscriptionHistoryRepository,
    SubscriptionPaymentRepository,
    VendorSubscriptionRepository,
)
from dockit.repositories.vendor.vendor_repository import VendorRepository
from dockit.schemas.common.enums import (
    FeatureFlag,
    PaymentType,
    SubscriptionStatus,
    SubscriptionType,
)
from dockit.schemas.subscription import (
    ExpirationStatus,
    SubscriptionExtensionRequest,
    SubscriptionModifyRequest,
    SubscriptionRenewalRequest,
    SubscriptionUpgradeRequest,
    TimeRemaining,
    VendorSubscriptionResponse,
)
from dockit.services.base.base_service import BaseService
from dockit.services.base.notification_dispatcher import NotificationDispatcher, NotificationEvent
from dockit.services.base.service_result import ServiceResult
from dockit.services.subscription import subscription_rules as rules
from dockit.services.subscription.subscription_pricing import build_payment, quote_vendor_license
from dockit.utils.date_utils import resolve_now
from dockit.utils.string_utils import clean_text

EXPIRY_DEACTIVATION_REASON = "Vendor subscription expired"


def to_subscription_response(
    subscription: VendorSubscription,
    now: datetime,
    warning_days: Optional[int] = None,
) -> VendorSubscriptionResponse:
    return VendorSubscriptionResponse(
        id=subscription.id,
        vendor_id=subscription.vendor_id,
        type=subscription.type,
        status=subscription.status,
        effective_status=rules.compute_subscription_status(subscription, now),
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        auto_renew=subscription.auto_renew,
        max_stations=subscription.max_stations,
        features_enabled=subscription.features_enabled,
        license_active=subscription.license_active,
        last_payment_date=subscription.last_payment_date,
        next_payment_date=subscription.next_payment_date,
        days_until_expiration=rules.days_until_expiration(subscription.end_date, now),
        is_expiring_soon=rules.is_expiring_soon(subscription, now, warning_days),
        version=subscription.version,
        created_at=subscription.created_at,
        updated_at=subscription.updated_at,
    )


def _summary(subscription: VendorSubscription) -> str:
    return (
        f"type={subscription.type.value}, status={subscription.status.value}, "
        f"end_date={subscription.end_date.isoformat()}, max_stations={subscription.max_stations}"
    )


class VendorSubscriptionService(BaseService):
    """Vendor licence operations."""

    def __init__(
        self,
        db_session: Session,
        notifier: Optional[NotificationDispatcher] = None,
        licensing: Optional[LicensingSettings] = None,
    ):
        super().__init__(db_session, notifier)
        self.licensing = licensing or settings.licensing
        self.vendor_repo = VendorRepository(db_session)
        self.subscription_repo = VendorSubscriptionRepository(db_session)
        self.station_repo = StationRepository(db_session)
        self.history_repo = SubscriptionHistoryRepository(db_session)
        self.payment_repo = SubscriptionPaymentRepository(db_session)

    def _response(self, subscription: VendorSubscription, now: datetime) -> VendorSubscriptionResponse:
        return to_subscription_response(subscription, now, self.licensing.EXPIRY_WARNING_DAYS)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_vendor_subscription(
        self,
        vendor_id: UUID,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        now = resolve_now(now)
        try:
            subscription = self.subscription_repo.get_by_vendor(vendor_id)
        except Exception as e:
            return self._handle_exception(e, "get vendor subscription", vendor_id)
        return ServiceResult.success(self._response(subscription, now))

    def has_feature(
        self,
        vendor_id: UUID,
        flag: FeatureFlag,
        now: Optional[datetime] = None,
    ) -> ServiceResult[bool]:
        now = resolve_now(now)
        try:
            subscription = self.subscription_repo.get_by_vendor(vendor_id)
        except Exception as e:
            return self._handle_exception(e, "check feature", vendor_id)
        return ServiceResult.success(rules.has_feature(subscription, flag, now))

    def get_history(self, vendor_id: UUID) -> ServiceResult[List[Dict[str, Any]]]:
        try:
            entries = self.history_repo.list_by_vendor(vendor_id)
        except Exception as e:
            return self._handle_exception(e, "get subscription history", vendor_id)
        return ServiceResult.success([entry.to_dict() for entry in entries])

    def list_payments(self, vendor_id: UUID) -> ServiceResult[List[Dict[str, Any]]]:
        try:
            payments = self.payment_repo.list_by_vendor(vendor_id)
        except Exception as e:
            return self._handle_exception(e, "list subscription payments", vendor_id)
        return ServiceResult.success([payment.to_dict() for payment in payments])

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start_trial(
        self,
        vendor_id: UUID,
        audit: Optional[AuditContext] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        """Create the trial licence a vendor gets at signup."""
        now = resolve_now(now)
        audit = audit or AuditContext.system("start_trial")
        try:
            with self.transaction():
                subscription = self.create_trial(vendor_id, audit, now)
        except Exception as e:
            return self._handle_exception(e, "start trial", vendor_id)

        self._logger.info(
            "Trial subscription started",
            extra={"vendor_id": str(vendor_id), "end_date": subscription.end_date.isoformat()},
        )
        return ServiceResult.success(self._response(subscription, now), message="Trial started")

    def create_trial(self, vendor_id: UUID, audit: AuditContext, now: datetime) -> VendorSubscription:
        """Insert the trial row inside the caller's transaction."""
        self.vendor_repo.get_by_id(vendor_id)
        if self.subscription_repo.find_by_vendor(vendor_id) is not None:
            raise BusinessRuleViolation(
                ErrorCode.ALREADY_EXISTS,
                "Vendor already has a subscription",
                {"vendor_id": str(vendor_id)},
            )
        subscription = VendorSubscription(
            vendor_id=vendor_id,
            type=SubscriptionType.TRIAL,
            status=SubscriptionStatus.ACTIVE,
            start_date=now,
            end_date=now + timedelta(days=self.licensing.TRIAL_PERIOD_DAYS),
            auto_renew=False,
            max_stations=rules.default_max_stations(SubscriptionType.TRIAL, self.licensing),
            license_active=True,
        )
        subscription.set_features(rules.default_features(SubscriptionType.TRIAL))
        self.subscription_repo.create(subscription)
        self.history_repo.record(
            vendor_id,
            "trial_started",
            audit,
            now,
            new_value=_summary(subscription),
        )
        return subscription

    def extend_subscription(
        self,
        vendor_id: UUID,
        request: SubscriptionExtensionRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        """
        Extend by days, months (30 days) and years (365 days) from the stored
        end date.
        """
        now = resolve_now(now)
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                self.subscription_repo.check_version(subscription, request.expected_version)
                was_live = subscription.license_active and not rules.is_expired(subscription, now)
                old_value = _summary(subscription)

                changes = rules.extend_subscription(
                    subscription,
                    now,
                    days=request.days,
                    months=request.months,
                    years=request.years,
                    licensing=self.licensing,
                )
                self.subscription_repo.update(subscription, changes)
                reactivated = self._revive_stations(subscription, was_live)
                self.history_repo.record(
                    vendor_id,
                    "extended",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(subscription),
                    reason=clean_text(request.reason),
                )
        except Exception as e:
            return self._handle_exception(e, "extend vendor subscription", vendor_id)

        self._logger.info(
            "Vendor subscription extended",
            extra={
                "vendor_id": str(vendor_id),
                "end_date": subscription.end_date.isoformat(),
                "stations_reactivated": reactivated,
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.SUBSCRIPTION_EXTENDED,
            vendor_id,
            "Subscription extended",
            f"Your subscription now runs until {subscription.end_date:%Y-%m-%d}.",
            {"end_date": subscription.end_date.isoformat()},
        )
        return ServiceResult.success(self._response(subscription, now), message="Subscription extended")

    def modify_subscription(
        self,
        vendor_id: UUID,
        request: SubscriptionModifyRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                self.subscription_repo.check_version(subscription, request.expected_version)
                was_live = subscription.license_active and not rules.is_expired(subscription, now)
                old_value = _summary(subscription)

                changes = rules.modify_subscription(
                    subscription,
                    now,
                    request.reason,
                    type=request.type,
                    status=request.status,
                    start_date=request.start_date,
                    end_date=request.end_date,
                    max_stations=request.max_stations,
                    licensing=self.licensing,
                )
                self.subscription_repo.update(subscription, changes)
                reactivated = self._revive_stations(subscription, was_live)
                self.history_repo.record(
                    vendor_id,
                    "modified",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(subscription),
                    reason=clean_text(request.reason),
                )
        except Exception as e:
            return self._handle_exception(e, "modify vendor subscription", vendor_id)

        self._logger.info(
            "Vendor subscription modified",
            extra={
                "vendor_id": str(vendor_id),
                "fields": sorted(request.model_dump(exclude_none=True, exclude={"reason", "expected_version"})),
                "stations_reactivated": reactivated,
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.SUBSCRIPTION_MODIFIED,
            vendor_id,
            "Subscription updated",
            "Your subscription details were updated by the Dockit team.",
            {"reason": clean_text(request.reason)},
        )
        return ServiceResult.success(self._response(subscription, now), message="Subscription modified")

    def upgrade_trial_to_yearly(
        self,
        vendor_id: UUID,
        request: SubscriptionUpgradeRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        """Upgrade a trial (even a lapsed one) to a yearly licence and record the payment."""
        now = resolve_now(now)
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                self.subscription_repo.check_version(subscription, request.expected_version)
                was_live = subscription.license_active and not rules.is_expired(subscription, now)
                old_value = _summary(subscription)

                changes = rules.upgrade_to_yearly(subscription, now, self.licensing)
                quote = quote_vendor_license(self.licensing)
                payment = build_payment(
                    quote,
                    vendor_id,
                    PaymentType.SUBSCRIPTION,
                    now,
                    transaction_id=request.transaction_id,
                    payment_method=request.payment_method,
                )
                self.subscription_repo.update(subscription, changes)
                self.payment_repo.create(payment)
                reactivated = self._revive_stations(subscription, was_live)
                self.history_repo.record(
                    vendor_id,
                    "upgraded",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(subscription),
                    reason=clean_text(request.reason),
                )
        except Exception as e:
            return self._handle_exception(e, "upgrade vendor subscription", vendor_id)

        self._logger.info(
            "Vendor subscription upgraded to yearly",
            extra={
                "vendor_id": str(vendor_id),
                "transaction_id": payment.transaction_id,
                "total_amount": str(payment.total_amount),
                "stations_reactivated": reactivated,
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.SUBSCRIPTION_UPGRADED,
            vendor_id,
            "Yearly plan activated",
            f"Your yearly licence is active until {subscription.end_date:%Y-%m-%d}.",
            {"transaction_id": payment.transaction_id, "total_amount": str(payment.total_amount)},
        )
        return ServiceResult.success(
            self._response(subscription, now),
            message="Subscription upgraded to yearly",
            metadata={"transaction_id": payment.transaction_id},
        )

    def renew_subscription(
        self,
        vendor_id: UUID,
        request: SubscriptionRenewalRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        """Renew the licence for a year from now, record the renewal payment and restore stations."""
        now = resolve_now(now)
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                self.subscription_repo.check_version(subscription, request.expected_version)
                was_live = subscription.license_active and not rules.is_expired(subscription, now)
                old_value = _summary(subscription)

                changes = rules.renew_subscription(subscription, now, request.auto_renew, self.licensing)
                payment = build_payment(
                    quote_vendor_license(self.licensing),
                    vendor_id,
                    PaymentType.RENEWAL,
                    now,
                    transaction_id=request.transaction_id,
                    payment_method=request.payment_method,
                )
                self.subscription_repo.update(subscription, changes)
                self.payment_repo.create(payment)
                reactivated = self._revive_stations(subscription, was_live)
                self.history_repo.record(
                    vendor_id,
                    "renewed",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(subscription),
                )
        except Exception as e:
            return self._handle_exception(e, "renew vendor subscription", vendor_id)

        self._logger.info(
            "Vendor subscription renewed",
            extra={
                "vendor_id": str(vendor_id),
                "end_date": subscription.end_date.isoformat(),
                "transaction_id": payment.transaction_id,
                "stations_reactivated": reactivated,
                "actor": audit.actor,
            },
        )
        message = f"Your subscription has been renewed until {subscription.end_date:%Y-%m-%d}."
        if reactivated:
            message += f" {reactivated} station(s) are live for bookings again."
        self._notify(
            NotificationEvent.SUBSCRIPTION_RENEWED,
            vendor_id,
            "Subscription renewed",
            message,
            {
                "transaction_id": payment.transaction_id,
                "end_date": subscription.end_date.isoformat(),
                "stations_reactivated": reactivated,
            },
        )
        return ServiceResult.success(
            self._response(subscription, now),
            message="Subscription renewed",
            metadata={"transaction_id": payment.transaction_id, "stations_reactivated": reactivated},
        )

    def set_auto_renew(
        self,
        vendor_id: UUID,
        auto_renew: bool,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[VendorSubscriptionResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                self.subscription_repo.update(subscription, {"auto_renew": auto_renew})
        except Exception as e:
            return self._handle_exception(e, "set auto renew", vendor_id)

        self._logger.info(
            "Vendor auto-renew updated",
            extra={"vendor_id": str(vendor_id), "auto_renew": auto_renew, "actor": audit.actor},
        )
        return ServiceResult.success(self._response(subscription, now))

    # -------------------------------------------------------------------------
    # Expiry
    # -------------------------------------------------------------------------

    def check_expiration(
        self,
        vendor_id: UUID,
        now: Optional[datetime] = None,
    ) -> ServiceResult[ExpirationStatus]:
        """
        Report expiry state and persist a lapse.

        A licence found lapsed while still stored active is marked expired
        and the vendor's active stations are switched off.
        """
        now = resolve_now(now)
        deactivated = 0
        lapsed = False
        try:
            with self.transaction():
                subscription = self.subscription_repo.get_by_vendor(vendor_id)
                if self._should_expire(subscription, now):
                    deactivated = self._expire(subscription, now)
                    lapsed = True
        except Exception as e:
            return self._handle_exception(e, "check subscription expiration", vendor_id)

        status = ExpirationStatus(
            vendor_id=vendor_id,
            is_expired=rules.is_expired(subscription, now),
            is_expiring_soon=rules.is_expiring_soon(
                subscription, now, self.licensing.EXPIRY_WARNING_DAYS
            ),
            days_until_expiration=rules.days_until_expiration(subscription.end_date, now),
            time_until_expiration=TimeRemaining(**rules.time_until_expiration(subscription.end_date, now)),
            subscription_status=rules.compute_subscription_status(subscription, now),
            license_active=subscription.license_active,
            end_date=subscription.end_date,
            stations_deactivated=deactivated,
        )

        if lapsed:
            self._notify_expired(subscription, deactivated)
        elif status.is_expiring_soon:
            self._notify(
                NotificationEvent.SUBSCRIPTION_EXPIRING_SOON,
                vendor_id,
                "Subscription expiring soon",
                f"Your subscription expires in {status.days_until_expiration} day(s).",
                {"days_until_expiration": status.days_until_expiration},
            )
        return ServiceResult.success(status)

    def expire_lapsed_subscriptions(self, now: Optional[datetime] = None) -> ServiceResult[int]:
        """Batch sweep: mark every lapsed licence expired."""
        now = resolve_now(now)
        expired: List[tuple] = []
        try:
            with self.transaction():
                for subscription in self.subscription_repo.find_lapsed(now):
                    expired.append((subscription, self._expire(subscription, now)))
        except Exception as e:
            return self._handle_exception(e, "expire lapsed subscriptions")

        for subscription, deactivated in expired:
            self._notify_expired(subscription, deactivated)
        self._logger.info("Expiry sweep finished", extra={"expired_count": len(expired)})
        return ServiceResult.success(len(expired))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _should_expire(subscription: VendorSubscription, now: datetime) -> bool:
        return subscription.status == SubscriptionStatus.ACTIVE and subscription.end_date <= now

    def _expire(self, subscription: VendorSubscription, now: datetime) -> int:
        old_value = _summary(subscription)
        self.subscription_repo.update(
            subscription,
            {"status": SubscriptionStatus.EXPIRED, "license_active": False},
        )
        deactivated = self.station_repo.deactivate_for_vendor(
            subscription.vendor_id, EXPIRY_DEACTIVATION_REASON, now
        )
        self.history_repo.record(
            subscription.vendor_id,
            "expired",
            AuditContext.system("expiry_sweep"),
            now,
            old_value=old_value,
            new_value=_summary(subscription),
            reason=EXPIRY_DEACTIVATION_REASON,
        )
        return deactivated

    def _revive_stations(self, subscription: VendorSubscription, was_live: bool) -> int:
        if was_live or not subscription.license_active:
            return 0
        return self.station_repo.reactivate_for_vendor(
            subscription.vendor_id, EXPIRY_DEACTIVATION_REASON
        )

    def _notify_expired(self, subscription: VendorSubscription, deactivated: int) -> None:
        self._logger.info(
            "Vendor subscription expired",
            extra={"vendor_id": str(subscription.vendor_id), "stations_deactivated": deactivated},
        )
        self._notify(
            NotificationEvent.SUBSCRIPTION_EXPIRED,
            subscription.vendor_id,
            "Subscription expired",
            "Your subscription has expired and your stations were deactivated. Renew to restore them.",
            {"stations_deactivated": deactivated},
        )
