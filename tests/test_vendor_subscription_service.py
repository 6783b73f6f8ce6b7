"""Tests for vendor onboarding and the vendor licence lifecycle."""

from datetime import timedelta
from uuid import uuid4

from dockit.core.exceptions import ErrorCode
from dockit.models.station.charging_station import ChargingStation
from dockit.models.subscription.vendor_subscription import VendorSubscription
from dockit.schemas.common.enums import FeatureFlag, SubscriptionStatus, SubscriptionType
from dockit.schemas.subscription import (
    StationCreateRequest,
    SubscriptionExtensionRequest,
    SubscriptionModifyRequest,
    SubscriptionRenewalRequest,
    SubscriptionUpgradeRequest,
)
from dockit.schemas.vendor import BankDetailsUpdate, VendorCreateRequest
from dockit.services.base.notification_dispatcher import NotificationEvent
from dockit.services.subscription import EXPIRY_DEACTIVATION_REASON


def subscription_of(db_session, vendor) -> VendorSubscription:
    db_session.expire_all()
    return db_session.query(VendorSubscription).filter_by(vendor_id=vendor.id).one()


class TestVendorOnboarding:
    def test_register_vendor_starts_seven_day_trial(self, vendor_service, subscription_service, admin, now):
        result = vendor_service.register_vendor(
            VendorCreateRequest(business_name="Pokhara Volt", email="ops@pokharavolt.np"),
            admin,
            now=now,
        )
        assert result.is_success
        assert result.data.has_bank_details is False

        sub = subscription_service.get_vendor_subscription(result.data.id, now=now).unwrap()
        assert sub.type == SubscriptionType.TRIAL
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.end_date == now + timedelta(days=7)
        assert sub.max_stations == 5
        assert sub.features_enabled == [FeatureFlag.BASIC_DASHBOARD]
        assert sub.license_active is True
        assert sub.is_expiring_soon is True

    def test_duplicate_email_is_rejected(self, vendor_service, admin, now):
        request = VendorCreateRequest(business_name="Pokhara Volt", email="ops@pokharavolt.np")
        assert vendor_service.register_vendor(request, admin, now=now).is_success

        result = vendor_service.register_vendor(request, admin, now=now)
        assert result.error_code == ErrorCode.ALREADY_EXISTS

    def test_verify_vendor_notifies_once(self, vendor_service, admin, now, notifier):
        created = vendor_service.register_vendor(VendorCreateRequest(business_name="Bhaktapur EV"), admin, now=now)
        vendor_id = created.unwrap().id

        assert vendor_service.verify_vendor(vendor_id, admin, now=now).is_success
        assert notifier.events() == [NotificationEvent.VENDOR_VERIFIED]

        again = vendor_service.verify_vendor(vendor_id, admin, now=now)
        assert again.error_code == ErrorCode.INVALID_STATE

    def test_update_bank_details(self, vendor_service, make_vendor, admin):
        vendor = make_vendor(with_bank=False)
        result = vendor_service.update_bank_details(
            vendor.id,
            BankDetailsUpdate(
                bank_account_number="999000111",
                bank_account_holder_name="Kathmandu EV Hub",
                bank_name="Global IME Bank",
            ),
            admin,
        )
        assert result.unwrap().has_bank_details is True

    def test_station_limit_for_trial(self, vendor_service, vendor, admin, now):
        for index in range(5):
            result = vendor_service.register_station(
                vendor.id, StationCreateRequest(name=f"Bay {index}"), admin, now=now
            )
            assert result.is_success

        result = vendor_service.register_station(vendor.id, StationCreateRequest(name="Bay 6"), admin, now=now)
        assert result.error_code == ErrorCode.STATION_LIMIT_REACHED
        assert result.error.details["max_stations"] == 5

    def test_expired_vendor_cannot_add_stations(self, vendor_service, make_vendor, admin, now):
        vendor = make_vendor(started_at=now - timedelta(days=8))
        result = vendor_service.register_station(vendor.id, StationCreateRequest(name="Bay 1"), admin, now=now)
        assert result.error_code == ErrorCode.SUBSCRIPTION_EXPIRED


class TestExtendSubscription:
    def test_all_zero_durations_fail(self, subscription_service, vendor, admin, now):
        result = subscription_service.extend_subscription(
            vendor.id, SubscriptionExtensionRequest(days=0, months=0, years=0), admin, now=now
        )
        assert result.error_code == ErrorCode.NO_DURATION_SPECIFIED

    def test_extends_from_stored_end_date(self, subscription_service, vendor, admin, now, notifier):
        result = subscription_service.extend_subscription(
            vendor.id, SubscriptionExtensionRequest(months=1, reason="goodwill"), admin, now=now
        )
        assert result.unwrap().end_date == now + timedelta(days=7 + 30)
        assert NotificationEvent.SUBSCRIPTION_EXTENDED in notifier.events()

        history = subscription_service.get_history(vendor.id).unwrap()
        extended = [entry for entry in history if entry["change_type"] == "extended"]
        assert len(extended) == 1
        assert extended[0]["reason"] == "goodwill"
        assert extended[0]["changed_by"] == "admin-1"

    def test_stale_version_is_rejected(self, subscription_service, vendor, admin, now):
        result = subscription_service.extend_subscription(
            vendor.id, SubscriptionExtensionRequest(days=5, expected_version=99), admin, now=now
        )
        assert result.error_code == ErrorCode.CONCURRENT_MODIFICATION

    def test_version_increments_on_each_change(self, subscription_service, vendor, admin, now):
        before = subscription_service.get_vendor_subscription(vendor.id, now=now).unwrap().version
        after = subscription_service.extend_subscription(
            vendor.id, SubscriptionExtensionRequest(days=1, expected_version=before), admin, now=now
        ).unwrap()
        assert after.version == before + 1


class TestModifySubscription:
    def test_reason_is_required(self, subscription_service, vendor, admin, now):
        result = subscription_service.modify_subscription(
            vendor.id, SubscriptionModifyRequest(max_stations=9), admin, now=now
        )
        assert result.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    def test_invalid_date_range(self, subscription_service, vendor, admin, now):
        result = subscription_service.modify_subscription(
            vendor.id,
            SubscriptionModifyRequest(end_date=now - timedelta(days=3), reason="typo"),
            admin,
            now=now,
        )
        assert result.error_code == ErrorCode.INVALID_DATE_RANGE

    def test_type_change_rederives_terms(self, subscription_service, vendor, admin, now):
        result = subscription_service.modify_subscription(
            vendor.id,
            SubscriptionModifyRequest(type=SubscriptionType.YEARLY, reason="partner deal"),
            admin,
            now=now,
        )
        sub = result.unwrap()
        assert sub.type == SubscriptionType.YEARLY
        assert sub.max_stations == 50
        assert set(sub.features_enabled) == set(FeatureFlag)


class TestUpgradeTrialToYearly:
    def test_expired_trial_is_revived_with_yearly_terms(
        self, subscription_service, make_vendor, admin, now, notifier
    ):
        vendor = make_vendor(started_at=now - timedelta(days=8))
        assert subscription_service.get_vendor_subscription(vendor.id, now=now).unwrap().effective_status == (
            SubscriptionStatus.EXPIRED
        )

        result = subscription_service.upgrade_trial_to_yearly(
            vendor.id, SubscriptionUpgradeRequest(reason="manual upgrade"), admin, now=now
        )
        sub = result.unwrap()
        assert sub.type == SubscriptionType.YEARLY
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.end_date == now + timedelta(days=365)
        assert sub.max_stations == 50
        assert set(sub.features_enabled) == set(FeatureFlag)
        assert sub.license_active is True
        assert NotificationEvent.SUBSCRIPTION_UPGRADED in notifier.events()

    def test_upgrade_records_payment_with_vat(self, subscription_service, vendor, admin, now):
        subscription_service.upgrade_trial_to_yearly(
            vendor.id,
            SubscriptionUpgradeRequest(transaction_id="ESEWA-77812", payment_method="esewa"),
            admin,
            now=now,
        ).unwrap()

        payments = subscription_service.list_payments(vendor.id).unwrap()
        assert len(payments) == 1
        assert payments[0]["transaction_id"] == "ESEWA-77812"
        assert payments[0]["base_amount"] == "12000.00"
        assert payments[0]["vat_amount"] == "1560.00"
        assert payments[0]["total_amount"] == "13560.00"

    def test_yearly_cannot_upgrade_again(self, subscription_service, vendor, admin, now):
        subscription_service.upgrade_trial_to_yearly(vendor.id, SubscriptionUpgradeRequest(), admin, now=now)
        result = subscription_service.upgrade_trial_to_yearly(
            vendor.id, SubscriptionUpgradeRequest(), admin, now=now
        )
        assert result.error_code == ErrorCode.ALREADY_YEARLY


class TestRenewSubscription:
    def test_renewal_restores_lapsed_licence_and_stations(
        self, db_session, subscription_service, make_vendor, make_station, admin, now, notifier
    ):
        vendor = make_vendor(started_at=now - timedelta(days=10))
        station = make_station(vendor)
        subscription_service.expire_lapsed_subscriptions(now=now).unwrap()
        notifier.clear()

        result = subscription_service.renew_subscription(
            vendor.id, SubscriptionRenewalRequest(auto_renew=True, payment_method="khalti"), admin, now=now
        )
        sub = result.unwrap()
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.license_active is True
        assert sub.end_date == now + timedelta(days=365)
        assert sub.next_payment_date == sub.end_date
        assert sub.auto_renew is True
        assert result.metadata["stations_reactivated"] == 1

        db_session.expire_all()
        assert db_session.get(ChargingStation, station.id).is_active is True
        assert notifier.events() == [NotificationEvent.SUBSCRIPTION_RENEWED]

    def test_renewal_records_renewal_payment(self, subscription_service, vendor, admin, now):
        subscription_service.renew_subscription(
            vendor.id, SubscriptionRenewalRequest(transaction_id="REN-2024-01"), admin, now=now
        ).unwrap()

        payments = subscription_service.list_payments(vendor.id).unwrap()
        assert len(payments) == 1
        assert payments[0]["transaction_id"] == "REN-2024-01"
        assert payments[0]["payment_type"] == "renewal"
        assert payments[0]["base_amount"] == "12000.00"
        assert payments[0]["total_amount"] == "13560.00"

        history = subscription_service.get_history(vendor.id).unwrap()
        renewed = [entry for entry in history if entry["change_type"] == "renewed"]
        assert len(renewed) == 1
        assert renewed[0]["changed_by"] == "admin-1"

    def test_renewal_counts_from_now_not_from_end_date(self, subscription_service, vendor, admin, now):
        later = now + timedelta(days=3)
        sub = subscription_service.renew_subscription(
            vendor.id, SubscriptionRenewalRequest(), admin, now=later
        ).unwrap()
        assert sub.end_date == later + timedelta(days=365)
        assert sub.type == SubscriptionType.TRIAL

    def test_unknown_vendor(self, subscription_service, admin, now):
        result = subscription_service.renew_subscription(uuid4(), SubscriptionRenewalRequest(), admin, now=now)
        assert result.error_code == ErrorCode.NOT_FOUND


class TestExpiry:
    def test_sweep_expires_licence_and_deactivates_stations(
        self, db_session, subscription_service, make_vendor, make_station, now, notifier
    ):
        vendor = make_vendor(started_at=now - timedelta(days=10))
        make_station(vendor, "Bay 1")
        make_station(vendor, "Bay 2")
        live_vendor = make_vendor(business_name="Still Live", started_at=now)

        assert subscription_service.expire_lapsed_subscriptions(now=now).unwrap() == 1

        sub = subscription_of(db_session, vendor)
        assert sub.status == SubscriptionStatus.EXPIRED
        assert sub.license_active is False
        assert subscription_of(db_session, live_vendor).status == SubscriptionStatus.ACTIVE

        stations = db_session.query(ChargingStation).filter_by(vendor_id=vendor.id).all()
        assert all(not s.is_active for s in stations)
        assert all(s.deactivation_reason == EXPIRY_DEACTIVATION_REASON for s in stations)
        assert notifier.events() == [NotificationEvent.SUBSCRIPTION_EXPIRED]

        assert subscription_service.expire_lapsed_subscriptions(now=now).unwrap() == 0

    def test_check_expiration_persists_lapse(self, db_session, subscription_service, make_vendor, make_station, now):
        vendor = make_vendor(started_at=now - timedelta(days=10))
        make_station(vendor)

        status = subscription_service.check_expiration(vendor.id, now=now).unwrap()
        assert status.is_expired is True
        assert status.subscription_status == SubscriptionStatus.EXPIRED
        assert status.days_until_expiration == 0
        assert status.stations_deactivated == 1
        assert subscription_of(db_session, vendor).status == SubscriptionStatus.EXPIRED

    def test_check_expiration_warns_when_expiring_soon(self, subscription_service, vendor, now, notifier):
        status = subscription_service.check_expiration(vendor.id, now=now + timedelta(days=5)).unwrap()
        assert status.is_expiring_soon is True
        assert status.days_until_expiration == 2
        assert notifier.events() == [NotificationEvent.SUBSCRIPTION_EXPIRING_SOON]

    def test_extension_revives_swept_stations(
        self, db_session, subscription_service, make_vendor, make_station, admin, now
    ):
        vendor = make_vendor(started_at=now - timedelta(days=10))
        station = make_station(vendor)
        subscription_service.expire_lapsed_subscriptions(now=now).unwrap()

        result = subscription_service.extend_subscription(
            vendor.id, SubscriptionExtensionRequest(days=30), admin, now=now
        )
        sub = result.unwrap()
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.end_date == now + timedelta(days=27)

        db_session.expire_all()
        revived = db_session.get(ChargingStation, station.id)
        assert revived.is_active is True
        assert revived.deactivation_reason is None

    def test_has_feature_false_after_expiry(self, subscription_service, vendor, now):
        assert subscription_service.has_feature(vendor.id, FeatureFlag.BASIC_DASHBOARD, now=now).unwrap()
        later = now + timedelta(days=8)
        assert not subscription_service.has_feature(vendor.id, FeatureFlag.BASIC_DASHBOARD, now=later).unwrap()

    def test_unknown_vendor(self, subscription_service, now):
        result = subscription_service.get_vendor_subscription(uuid4(), now=now)
        assert result.error_code == ErrorCode.NOT_FOUND
