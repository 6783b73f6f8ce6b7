"""
Charging station repository.
"""

from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dockit.models.station.charging_station import ChargingStation
from dockit.models.subscription.station_premium import StationPremiumSubscription
from dockit.repositories.base.base_repository import BaseRepository


class StationRepository(BaseRepository[ChargingStation]):
    def __init__(self, db: Session):
        super().__init__(ChargingStation, db)

    def count_by_vendor(self, vendor_id: UUID) -> int:
        stmt = select(func.count()).select_from(ChargingStation).where(
            ChargingStation.vendor_id == vendor_id
        )
        return self.db.scalar(stmt) or 0

    def find_by_vendor(self, vendor_id: UUID) -> List[ChargingStation]:
        stmt = (
            select(ChargingStation)
            .where(ChargingStation.vendor_id == vendor_id)
            .order_by(ChargingStation.created_at, ChargingStation.id)
        )
        return list(self.db.scalars(stmt))

    def find_active_by_vendor(self, vendor_id: UUID) -> List[ChargingStation]:
        stmt = select(ChargingStation).where(
            ChargingStation.vendor_id == vendor_id,
            ChargingStation.is_active.is_(True),
        )
        return list(self.db.scalars(stmt))

    def find_deactivated_for_reason(self, vendor_id: UUID, reason: str) -> List[ChargingStation]:
        """Stations switched off with a specific reason, e.g. by the expiry sweep."""
        stmt = select(ChargingStation).where(
            ChargingStation.vendor_id == vendor_id,
            ChargingStation.is_active.is_(False),
            ChargingStation.deactivation_reason == reason,
        )
        return list(self.db.scalars(stmt))

    def find_premium_stations(self, now: datetime) -> List[ChargingStation]:
        """Active stations whose premium is active at ``now``."""
        stmt = (
            select(ChargingStation)
            .join(StationPremiumSubscription, StationPremiumSubscription.station_id == ChargingStation.id)
            .where(
                ChargingStation.is_active.is_(True),
                StationPremiumSubscription.is_active.is_(True),
                StationPremiumSubscription.end_date > now,
            )
            .order_by(StationPremiumSubscription.end_date.desc(), ChargingStation.id)
        )
        return list(self.db.scalars(stmt))

    def deactivate_for_vendor(self, vendor_id: UUID, reason: str, now: datetime) -> int:
        """Switch off every active station of a vendor, recording why."""
        stations = self.find_active_by_vendor(vendor_id)
        for station in stations:
            station.is_active = False
            station.deactivation_reason = reason
            station.deactivated_at = now
        self.flush()
        return len(stations)

    def reactivate_for_vendor(self, vendor_id: UUID, reason: str) -> int:
        """Switch back on the stations deactivated for ``reason``."""
        stations = self.find_deactivated_for_reason(vendor_id, reason)
        for station in stations:
            station.is_active = True
            station.deactivation_reason = None
            station.deactivated_at = None
        self.flush()
        return len(stations)
