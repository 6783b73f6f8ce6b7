from dockit.models.station.charging_station import ChargingStation

__all__ = ["ChargingStation"]
