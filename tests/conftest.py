"""Pytest configuration and fixtures."""

import os

# Keep the application's own engine off disk while tests import it
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from dockit.api import deps
from dockit.core.database import _enable_sqlite_foreign_keys, create_session_factory
from dockit.main import app
# Import all models to ensure they're registered with Base.metadata
from dockit.models import *  # noqa: F401,F403
from dockit.models.base import Base
from dockit.models.settlement.settlement_transaction import SettlementTransaction
from dockit.models.station.charging_station import ChargingStation
from dockit.models.subscription.station_premium import StationPremiumSubscription
from dockit.models.vendor.vendor import Vendor
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import (
    ActorType,
    SettlementSourceType,
    TransactionSettlementStatus,
    VerificationStatus,
)
from dockit.services.base.notification_dispatcher import RecordingNotificationDispatcher
from dockit.services.refund import RefundQueueService
from dockit.services.settlement import SettlementLedgerService
from dockit.services.subscription import StationPremiumService, VendorSubscriptionService
from dockit.services.vendor import VendorService

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed clock passed to every service call."""
    return NOW


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = create_session_factory(db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier() -> RecordingNotificationDispatcher:
    return RecordingNotificationDispatcher()


class UnreachableNotificationDispatcher:
    """Dispatcher whose delivery channel is down."""

    def notify(self, event, recipient_id, title, message, payload):
        raise ConnectionError("notification gateway unreachable")


@pytest.fixture
def unreachable_notifier() -> UnreachableNotificationDispatcher:
    return UnreachableNotificationDispatcher()


@pytest.fixture
def admin() -> AuditContext:
    return AuditContext(actor_id="admin-1", actor_type=ActorType.ADMIN)


@pytest.fixture(scope="function")
def client(db_session: Session, notifier) -> Generator[TestClient, None, None]:
    """Create a test client with database and notifier overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@pytest.fixture
def vendor_service(db_session, notifier) -> VendorService:
    return VendorService(db_session, notifier)


@pytest.fixture
def subscription_service(db_session, notifier) -> VendorSubscriptionService:
    return VendorSubscriptionService(db_session, notifier)


@pytest.fixture
def premium_service(db_session, notifier) -> StationPremiumService:
    return StationPremiumService(db_session, notifier)


@pytest.fixture
def ledger(db_session, notifier) -> SettlementLedgerService:
    return SettlementLedgerService(db_session, notifier)


@pytest.fixture
def refund_service(db_session, notifier) -> RefundQueueService:
    return RefundQueueService(db_session, notifier)


# ---------------------------------------------------------------------------
# Data factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_vendor(db_session: Session, subscription_service, admin):
    """Vendor with a trial licence started at ``started_at``."""
    def _make(
        business_name: str = "Kathmandu EV Hub",
        with_bank: bool = True,
        started_at: datetime = NOW,
    ) -> Vendor:
        vendor = Vendor(
            business_name=business_name,
            verification_status=VerificationStatus.VERIFIED,
        )
        if with_bank:
            vendor.bank_account_number = "0123456789"
            vendor.bank_account_holder_name = business_name
            vendor.bank_name = "Nabil Bank"
        db_session.add(vendor)
        db_session.commit()
        subscription_service.start_trial(vendor.id, admin, now=started_at).unwrap()
        return vendor

    return _make


@pytest.fixture
def vendor(make_vendor) -> Vendor:
    return make_vendor()


@pytest.fixture
def make_station(db_session: Session):
    def _make(vendor: Vendor, name: str = "Thamel Charging Point") -> ChargingStation:
        station = ChargingStation(vendor_id=vendor.id, name=name, is_active=True)
        db_session.add(station)
        db_session.flush()
        db_session.add(StationPremiumSubscription(station_id=station.id, is_active=False, auto_renew=False))
        db_session.commit()
        return station

    return _make


@pytest.fixture
def station(vendor, make_station) -> ChargingStation:
    return make_station(vendor)


@pytest.fixture
def add_transaction(db_session: Session):
    """Insert a ledger row directly in the given bucket."""
    counter = {"n": 0}

    def _add(
        vendor: Vendor,
        amount: str,
        completed_at: datetime = NOW,
        status: TransactionSettlementStatus = TransactionSettlementStatus.PENDING,
    ) -> SettlementTransaction:
        counter["n"] += 1
        record = SettlementTransaction(
            vendor_id=vendor.id,
            source_type=SettlementSourceType.BOOKING,
            source_id=f"booking-{counter['n']}",
            final_amount=Decimal(amount),
            completed_at=completed_at,
            settlement_date=completed_at.date(),
            settlement_status=status,
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _add
