"""Weather adapters — Open-Meteo geocoding and forecast."""

from relaybot.adapters.weather.open_meteo import OpenMeteoClient

__all__ = ["OpenMeteoClient"]
