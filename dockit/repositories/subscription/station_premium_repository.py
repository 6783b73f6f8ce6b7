"""
Station premium repository.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from dockit.core.exceptions import ResourceNotFoundError
from dockit.models.subscription.station_premium import StationPremiumSubscription
from dockit.repositories.base.base_repository import BaseRepository


class StationPremiumRepository(BaseRepository[StationPremiumSubscription]):
    def __init__(self, db: Session):
        super().__init__(StationPremiumSubscription, db)

    def find_by_station(self, station_id: UUID) -> Optional[StationPremiumSubscription]:
        return self.db.scalar(
            select(StationPremiumSubscription).where(
                StationPremiumSubscription.station_id == station_id
            )
        )

    def get_by_station(self, station_id: UUID) -> StationPremiumSubscription:
        premium = self.find_by_station(station_id)
        if premium is None:
            raise ResourceNotFoundError("StationPremiumSubscription", str(station_id))
        return premium
