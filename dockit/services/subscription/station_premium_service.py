"""
Station premium lifecycle service.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from dockit.core.config import LicensingSettings, settings
from dockit.core.exceptions import ResourceNotFoundError
from dockit.models.station.charging_station import ChargingStation
from dockit.models.subscription.station_premium import StationPremiumSubscription
from dockit.repositories.base.base_repository import AuditContext
from dockit.repositories.station.station_repository import StationRepository
from dockit.repositories.subscription import (
    StationPremiumRepository,
    SubscriptionHistoryRepository,
    SubscriptionPaymentRepository,
    VendorSubscriptionRepository,
)
from dockit.schemas.common.enums import BulkPremiumAction, PaymentType, PremiumPlanType
from dockit.schemas.subscription import (
    BulkPremiumFailure,
    BulkPremiumRequest,
    BulkPremiumResult,
    BulkPremiumSuccess,
    PremiumActivationRequest,
    PremiumDeactivationRequest,
    PremiumExtensionRequest,
    PriceQuote,
    StationPremiumResponse,
    StationResponse,
)
from dockit.services.base.base_service import BaseService
from dockit.services.base.notification_dispatcher import NotificationDispatcher, NotificationEvent
from dockit.services.base.service_result import ServiceResult
from dockit.services.subscription import subscription_rules as rules
from dockit.services.subscription.subscription_pricing import build_payment, quote_station_premium
from dockit.utils.date_utils import resolve_now
from dockit.utils.string_utils import clean_text


def to_premium_response(premium: StationPremiumSubscription, now: datetime) -> StationPremiumResponse:
    return StationPremiumResponse(
        station_id=premium.station_id,
        is_active=premium.is_active,
        premium_active=rules.is_premium_active(premium, now),
        type=premium.type,
        start_date=premium.start_date,
        end_date=premium.end_date,
        auto_renew=premium.auto_renew,
        last_payment_date=premium.last_payment_date,
        next_payment_date=premium.next_payment_date,
        version=premium.version,
        created_at=premium.created_at,
        updated_at=premium.updated_at,
    )


def _summary(premium: StationPremiumSubscription) -> str:
    if not premium.is_active:
        return "inactive"
    return f"type={premium.type.value}, end_date={premium.end_date.isoformat()}"


class StationPremiumService(BaseService):
    """Per-station premium add-on."""

    def __init__(
        self,
        db_session: Session,
        notifier: Optional[NotificationDispatcher] = None,
        licensing: Optional[LicensingSettings] = None,
    ):
        super().__init__(db_session, notifier)
        self.licensing = licensing or settings.licensing
        self.station_repo = StationRepository(db_session)
        self.premium_repo = StationPremiumRepository(db_session)
        self.subscription_repo = VendorSubscriptionRepository(db_session)
        self.history_repo = SubscriptionHistoryRepository(db_session)
        self.payment_repo = SubscriptionPaymentRepository(db_session)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_station_premium(
        self,
        station_id: UUID,
        now: Optional[datetime] = None,
    ) -> ServiceResult[StationPremiumResponse]:
        now = resolve_now(now)
        try:
            premium = self.premium_repo.get_by_station(station_id)
        except Exception as e:
            return self._handle_exception(e, "get station premium", station_id)
        return ServiceResult.success(to_premium_response(premium, now))

    def list_premium_stations(self, now: Optional[datetime] = None) -> ServiceResult[List[StationResponse]]:
        """Active stations with an active premium, for search prioritisation."""
        now = resolve_now(now)
        try:
            stations = self.station_repo.find_premium_stations(now)
        except Exception as e:
            return self._handle_exception(e, "list premium stations")
        return ServiceResult.success([StationResponse.model_validate(s) for s in stations])

    def quote(self, plan_type: PremiumPlanType) -> ServiceResult[PriceQuote]:
        return ServiceResult.success(quote_station_premium(plan_type, self.licensing))

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def activate_station_premium(
        self,
        station_id: UUID,
        request: PremiumActivationRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[StationPremiumResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                station, premium = self._load(station_id)
                self.premium_repo.check_version(premium, request.expected_version)
                rules.ensure_not_expired(self.subscription_repo.find_by_vendor(station.vendor_id), now)

                old_value = _summary(premium)
                changes = rules.activate_premium(premium, request.plan_type, now, self.licensing)
                payment = self._payment(station, request, PaymentType.SUBSCRIPTION, now)
                self.premium_repo.update(premium, changes)
                self.station_repo.update(station, {"dockit_recommended": True})
                self.payment_repo.create(payment)
                self.history_repo.record(
                    station.vendor_id,
                    "premium_activated",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(premium),
                    station_id=station_id,
                )
        except Exception as e:
            return self._handle_exception(e, "activate station premium", station_id)

        self._logger.info(
            "Station premium activated",
            extra={
                "station_id": str(station_id),
                "plan_type": request.plan_type.value,
                "end_date": premium.end_date.isoformat(),
                "transaction_id": payment.transaction_id,
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.PREMIUM_ACTIVATED,
            station.vendor_id,
            "Premium activated",
            f"{station.name} is premium until {premium.end_date:%Y-%m-%d}.",
            {"station_id": str(station_id), "plan_type": request.plan_type.value},
        )
        return ServiceResult.success(
            to_premium_response(premium, now),
            message="Station premium activated",
            metadata={"transaction_id": payment.transaction_id},
        )

    def extend_station_premium(
        self,
        station_id: UUID,
        request: PremiumExtensionRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[StationPremiumResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                station, premium = self._load(station_id)
                self.premium_repo.check_version(premium, request.expected_version)
                rules.ensure_not_expired(self.subscription_repo.find_by_vendor(station.vendor_id), now)

                old_value = _summary(premium)
                changes = rules.extend_premium(premium, request.plan_type, now, self.licensing)
                payment = self._payment(station, request, PaymentType.RENEWAL, now)
                self.premium_repo.update(premium, changes)
                self.station_repo.update(station, {"dockit_recommended": True})
                self.payment_repo.create(payment)
                self.history_repo.record(
                    station.vendor_id,
                    "premium_extended",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(premium),
                    station_id=station_id,
                )
        except Exception as e:
            return self._handle_exception(e, "extend station premium", station_id)

        self._logger.info(
            "Station premium extended",
            extra={
                "station_id": str(station_id),
                "plan_type": request.plan_type.value,
                "end_date": premium.end_date.isoformat(),
                "actor": audit.actor,
            },
        )
        self._notify(
            NotificationEvent.PREMIUM_EXTENDED,
            station.vendor_id,
            "Premium extended",
            f"{station.name} is premium until {premium.end_date:%Y-%m-%d}.",
            {"station_id": str(station_id), "end_date": premium.end_date.isoformat()},
        )
        return ServiceResult.success(
            to_premium_response(premium, now),
            message="Station premium extended",
            metadata={"transaction_id": payment.transaction_id},
        )

    def deactivate_station_premium(
        self,
        station_id: UUID,
        request: PremiumDeactivationRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[StationPremiumResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                station, premium = self._load(station_id)
                self.premium_repo.check_version(premium, request.expected_version)

                old_value = _summary(premium)
                changes = rules.deactivate_premium(premium, request.reason)
                self.premium_repo.update(premium, changes)
                self.station_repo.update(station, {"dockit_recommended": False})
                self.history_repo.record(
                    station.vendor_id,
                    "premium_deactivated",
                    audit,
                    now,
                    old_value=old_value,
                    new_value=_summary(premium),
                    reason=clean_text(request.reason),
                    station_id=station_id,
                )
        except Exception as e:
            return self._handle_exception(e, "deactivate station premium", station_id)

        self._logger.info(
            "Station premium deactivated",
            extra={"station_id": str(station_id), "actor": audit.actor},
        )
        self._notify(
            NotificationEvent.PREMIUM_DEACTIVATED,
            station.vendor_id,
            "Premium deactivated",
            f"Premium for {station.name} was deactivated.",
            {"station_id": str(station_id), "reason": clean_text(request.reason)},
        )
        return ServiceResult.success(to_premium_response(premium, now), message="Station premium deactivated")

    def set_auto_renew(
        self,
        station_id: UUID,
        auto_renew: bool,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[StationPremiumResponse]:
        now = resolve_now(now)
        try:
            with self.transaction():
                premium = self.premium_repo.get_by_station(station_id)
                self.premium_repo.update(premium, {"auto_renew": auto_renew})
        except Exception as e:
            return self._handle_exception(e, "set premium auto renew", station_id)

        self._logger.info(
            "Station premium auto-renew updated",
            extra={"station_id": str(station_id), "auto_renew": auto_renew, "actor": audit.actor},
        )
        return ServiceResult.success(to_premium_response(premium, now))

    def bulk_manage_premium(
        self,
        request: BulkPremiumRequest,
        audit: AuditContext,
        now: Optional[datetime] = None,
    ) -> ServiceResult[BulkPremiumResult]:
        """
        Apply one action to each listed station.

        Every station runs through the single-station operation in its own
        transaction, so one rejected station never rolls back the others.
        Only a deactivation without a reason fails the whole request.
        """
        now = resolve_now(now)
        if request.action == BulkPremiumAction.DEACTIVATE:
            try:
                rules.require_reason(request.reason)
            except Exception as e:
                return self._handle_exception(e, "bulk manage station premium")

        outcome = BulkPremiumResult(action=request.action, total_processed=len(request.station_ids))
        for station_id in request.station_ids:
            result = self._apply_bulk_action(station_id, request, audit, now)
            if result.is_success:
                station = self.station_repo.find_by_id(station_id)
                outcome.successful.append(
                    BulkPremiumSuccess(
                        station_id=station_id,
                        station_name=station.name,
                        end_date=result.data.end_date,
                    )
                )
            else:
                outcome.failed.append(
                    BulkPremiumFailure(
                        station_id=station_id,
                        error_code=result.error.code.value,
                        error=result.error.message,
                    )
                )

        self._logger.info(
            "Bulk station premium action finished",
            extra={
                "action": request.action.value,
                "total_processed": outcome.total_processed,
                "successful": len(outcome.successful),
                "failed": len(outcome.failed),
                "actor": audit.actor,
            },
        )
        return ServiceResult.success(outcome, message=f"Bulk {request.action.value} completed")

    def _apply_bulk_action(
        self,
        station_id: UUID,
        request: BulkPremiumRequest,
        audit: AuditContext,
        now: datetime,
    ) -> ServiceResult[StationPremiumResponse]:
        if request.action == BulkPremiumAction.ACTIVATE:
            return self.activate_station_premium(
                station_id,
                PremiumActivationRequest(plan_type=request.plan_type, payment_method=request.payment_method),
                audit,
                now=now,
            )
        if request.action == BulkPremiumAction.EXTEND:
            return self.extend_station_premium(
                station_id,
                PremiumExtensionRequest(plan_type=request.plan_type, payment_method=request.payment_method),
                audit,
                now=now,
            )
        return self.deactivate_station_premium(
            station_id,
            PremiumDeactivationRequest(reason=request.reason),
            audit,
            now=now,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load(self, station_id: UUID):
        station: ChargingStation = self.station_repo.get_by_id(station_id)
        premium = self.premium_repo.find_by_station(station_id)
        if premium is None:
            raise ResourceNotFoundError("StationPremiumSubscription", str(station_id))
        return station, premium

    def _payment(self, station: ChargingStation, request: PremiumActivationRequest, payment_type, now):
        return build_payment(
            quote_station_premium(request.plan_type, self.licensing),
            station.vendor_id,
            payment_type,
            now,
            station_id=station.id,
            transaction_id=request.transaction_id,
            payment_method=request.payment_method,
        )
