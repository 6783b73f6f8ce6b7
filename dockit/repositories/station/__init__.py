from dockit.repositories.station.station_repository import StationRepository

__all__ = ["StationRepository"]
