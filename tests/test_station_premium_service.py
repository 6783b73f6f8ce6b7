"""Tests for the station premium add-on."""

from datetime import timedelta
from uuid import uuid4

from dockit.core.exceptions import ErrorCode
from dockit.schemas.common.enums import BulkPremiumAction, PremiumPlanType
from dockit.schemas.subscription import (
    BulkPremiumRequest,
    PremiumActivationRequest,
    PremiumDeactivationRequest,
    PremiumExtensionRequest,
    SubscriptionUpgradeRequest,
)
from dockit.services.base.notification_dispatcher import NotificationEvent


def activate(premium_service, station, admin, now, plan=PremiumPlanType.MONTHLY, **kwargs):
    return premium_service.activate_station_premium(
        station.id, PremiumActivationRequest(plan_type=plan, **kwargs), admin, now=now
    )


class TestActivate:
    def test_monthly_activation(self, premium_service, station, admin, now, notifier, db_session):
        result = activate(premium_service, station, admin, now)
        premium = result.unwrap()
        assert premium.is_active is True
        assert premium.premium_active is True
        assert premium.type == PremiumPlanType.MONTHLY
        assert premium.start_date == now
        assert premium.end_date == now + timedelta(days=30)
        assert result.metadata["transaction_id"].startswith("PAY")

        db_session.refresh(station)
        assert station.dockit_recommended is True
        assert notifier.events() == [NotificationEvent.PREMIUM_ACTIVATED]

    def test_activation_records_payment(self, premium_service, subscription_service, station, vendor, admin, now):
        activate(premium_service, station, admin, now, plan=PremiumPlanType.YEARLY, transaction_id="KHALTI-1")

        payments = subscription_service.list_payments(vendor.id).unwrap()
        assert payments[0]["transaction_id"] == "KHALTI-1"
        assert payments[0]["station_id"] == str(station.id)
        assert payments[0]["base_amount"] == "9999.00"
        assert payments[0]["vat_amount"] == "1300.00"
        assert payments[0]["total_amount"] == "11299.00"

    def test_second_activation_fails(self, premium_service, station, admin, now):
        activate(premium_service, station, admin, now).unwrap()
        result = activate(premium_service, station, admin, now + timedelta(days=1))
        assert result.error_code == ErrorCode.ALREADY_ACTIVE

    def test_expired_vendor_cannot_activate(self, premium_service, make_vendor, make_station, admin, now):
        vendor = make_vendor(started_at=now - timedelta(days=9))
        station = make_station(vendor)
        result = activate(premium_service, station, admin, now)
        assert result.error_code == ErrorCode.SUBSCRIPTION_EXPIRED

    def test_unknown_station(self, premium_service, admin, now):
        result = premium_service.activate_station_premium(
            uuid4(), PremiumActivationRequest(plan_type=PremiumPlanType.MONTHLY), admin, now=now
        )
        assert result.error_code == ErrorCode.NOT_FOUND


class TestExtend:
    def test_activate_then_extend_at_same_instant_gives_sixty_days(self, premium_service, station, admin, now):
        activate(premium_service, station, admin, now).unwrap()

        result = premium_service.extend_station_premium(
            station.id, PremiumExtensionRequest(plan_type=PremiumPlanType.MONTHLY), admin, now=now
        )
        assert result.unwrap().end_date == now + timedelta(days=60)

    def test_extend_inactive_premium_fails(self, premium_service, station, admin, now):
        result = premium_service.extend_station_premium(
            station.id, PremiumExtensionRequest(plan_type=PremiumPlanType.MONTHLY), admin, now=now
        )
        assert result.error_code == ErrorCode.NOT_ACTIVE

    def test_stale_version_is_rejected(self, premium_service, station, admin, now):
        activated = activate(premium_service, station, admin, now).unwrap()
        result = premium_service.extend_station_premium(
            station.id,
            PremiumExtensionRequest(plan_type=PremiumPlanType.MONTHLY, expected_version=activated.version - 1),
            admin,
            now=now,
        )
        assert result.error_code == ErrorCode.CONCURRENT_MODIFICATION


class TestDeactivate:
    def test_reason_required(self, premium_service, station, admin, now):
        activate(premium_service, station, admin, now).unwrap()
        result = premium_service.deactivate_station_premium(
            station.id, PremiumDeactivationRequest(reason=""), admin, now=now
        )
        assert result.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_deactivate_clears_premium(self, premium_service, station, admin, now, db_session, notifier):
        activate(premium_service, station, admin, now).unwrap()
        result = premium_service.deactivate_station_premium(
            station.id, PremiumDeactivationRequest(reason="vendor request"), admin, now=now
        )
        premium = result.unwrap()
        assert premium.is_active is False
        assert premium.end_date is None
        assert premium.type is None

        db_session.refresh(station)
        assert station.dockit_recommended is False
        assert notifier.events()[-1] == NotificationEvent.PREMIUM_DEACTIVATED

    def test_deactivate_inactive_fails(self, premium_service, station, admin, now):
        result = premium_service.deactivate_station_premium(
            station.id, PremiumDeactivationRequest(reason="cleanup"), admin, now=now
        )
        assert result.error_code == ErrorCode.NOT_ACTIVE


class TestQueries:
    def test_premium_listing_only_includes_live_premiums(
        self, premium_service, vendor, make_station, admin, now
    ):
        premium_station = make_station(vendor, "Premium Bay")
        make_station(vendor, "Plain Bay")
        activate(premium_service, premium_station, admin, now).unwrap()

        listed = premium_service.list_premium_stations(now=now).unwrap()
        assert [s.id for s in listed] == [premium_station.id]

        later = premium_service.list_premium_stations(now=now + timedelta(days=31)).unwrap()
        assert later == []

    def test_quote(self, premium_service):
        quote = premium_service.quote(PremiumPlanType.MONTHLY).unwrap()
        assert quote.base_amount == 1000
        assert quote.vat_amount == 130
        assert quote.total_amount == 1130
        assert quote.period_days == 30


class TestReactivation:
    def test_history_keeps_lapsed_plan_as_old_value(
        self, premium_service, subscription_service, vendor, station, admin, now
    ):
        subscription_service.upgrade_trial_to_yearly(vendor.id, SubscriptionUpgradeRequest(), admin, now=now).unwrap()
        activate(premium_service, station, admin, now).unwrap()

        later = now + timedelta(days=31)
        again = activate(premium_service, station, admin, later, plan=PremiumPlanType.YEARLY).unwrap()
        assert again.end_date == later + timedelta(days=365)

        history = subscription_service.get_history(vendor.id).unwrap()
        activations = [entry for entry in history if entry["change_type"] == "premium_activated"]
        assert len(activations) == 2
        assert activations[0]["old_value"].startswith("type=monthly, end_date=")
        assert activations[1]["old_value"] == "inactive"


class TestBulkManage:
    def test_per_station_outcomes(self, premium_service, vendor, make_station, admin, now):
        first = make_station(vendor, "Bay A")
        second = make_station(vendor, "Bay B")
        missing = uuid4()

        outcome = premium_service.bulk_manage_premium(
            BulkPremiumRequest(station_ids=[first.id, missing, second.id], action=BulkPremiumAction.ACTIVATE),
            admin,
            now=now,
        ).unwrap()

        assert outcome.total_processed == 3
        assert [item.station_name for item in outcome.successful] == ["Bay A", "Bay B"]
        assert outcome.successful[0].end_date == now + timedelta(days=30)
        assert [(item.station_id, item.error_code) for item in outcome.failed] == [(missing, "NOT_FOUND")]

    def test_rejected_station_does_not_block_others(self, premium_service, vendor, make_station, admin, now):
        live = make_station(vendor, "Live Bay")
        plain = make_station(vendor, "Plain Bay")
        activate(premium_service, live, admin, now, plan=PremiumPlanType.YEARLY).unwrap()

        outcome = premium_service.bulk_manage_premium(
            BulkPremiumRequest(station_ids=[live.id, plain.id], action=BulkPremiumAction.ACTIVATE),
            admin,
            now=now,
        ).unwrap()

        assert [item.station_id for item in outcome.successful] == [plain.id]
        assert [item.error_code for item in outcome.failed] == ["ALREADY_ACTIVE"]
        assert premium_service.get_station_premium(live.id, now=now).unwrap().type == PremiumPlanType.YEARLY

    def test_bulk_extend_and_deactivate(self, premium_service, vendor, make_station, admin, now, notifier):
        stations = [make_station(vendor, f"Bay {index}") for index in range(2)]
        ids = [station.id for station in stations]
        for station in stations:
            activate(premium_service, station, admin, now).unwrap()

        extended = premium_service.bulk_manage_premium(
            BulkPremiumRequest(station_ids=ids, action=BulkPremiumAction.EXTEND), admin, now=now
        ).unwrap()
        assert {item.end_date for item in extended.successful} == {now + timedelta(days=60)}

        notifier.clear()
        deactivated = premium_service.bulk_manage_premium(
            BulkPremiumRequest(station_ids=ids, action=BulkPremiumAction.DEACTIVATE, reason="contract ended"),
            admin,
            now=now,
        ).unwrap()
        assert len(deactivated.successful) == 2
        assert deactivated.failed == []
        assert notifier.events() == [NotificationEvent.PREMIUM_DEACTIVATED] * 2

    def test_bulk_deactivate_needs_reason(self, premium_service, station, admin, now):
        activate(premium_service, station, admin, now).unwrap()
        result = premium_service.bulk_manage_premium(
            BulkPremiumRequest(station_ids=[station.id], action=BulkPremiumAction.DEACTIVATE), admin, now=now
        )
        assert result.error_code == ErrorCode.MISSING_REQUIRED_FIELD
        assert premium_service.get_station_premium(station.id, now=now).unwrap().is_active is True
