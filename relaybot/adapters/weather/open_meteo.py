"""Open-Meteo client — implements WeatherPort.

Two calls per lookup: geocode the free-text location, then fetch current
conditions at the resolved coordinates. Either step answering non-2xx or
with no data ends the lookup with None.
"""

import asyncio
import math
import sys
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
from pydantic import BaseModel

from relaybot.config import WeatherConfig
from relaybot.domain.errors import UpstreamError
from relaybot.domain.models import WeatherInfo

DEFAULT_TEMPERATURE_UNIT = "°C"
DEFAULT_WIND_UNIT = "km/h"


def _log(msg: str):
    print(msg, file=sys.stderr)


class GeocodingResult(BaseModel):
    latitude: float
    longitude: float
    name: Optional[str] = None
    country: Optional[str] = None
    admin1: Optional[str] = None


class GeocodingResponse(BaseModel):
    results: List[GeocodingResult] = []


class CurrentConditions(BaseModel):
    temperature_2m: Optional[float] = None
    wind_speed_10m: Optional[float] = None
    weather_code: Optional[int] = None


class CurrentUnits(BaseModel):
    temperature_2m: Optional[str] = None
    wind_speed_10m: Optional[str] = None


class ForecastResponse(BaseModel):
    current: Optional[CurrentConditions] = None
    current_units: Optional[CurrentUnits] = None


def place_label(result: GeocodingResult, fallback: str) -> str:
    """Join the non-blank parts of city, region, country with ", "."""
    parts = [result.name or fallback, result.admin1, result.country]
    return ", ".join(p for p in parts if p and p.strip())


class OpenMeteoClient:
    """Current weather for a free-text location."""

    def __init__(self, config: Optional[WeatherConfig] = None):
        self.config = config or WeatherConfig()
        self._timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)

    async def lookup(self, location: str) -> Optional[WeatherInfo]:
        """Return current conditions, or None when nothing matches.

        Raises UpstreamError on transport failures or unreadable bodies.
        """
        if not location or not location.strip():
            return None
        location = location.strip()

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                resolved = await self._resolve(session, location)
                if resolved is None:
                    return None
                lat, lon, place = resolved
                return await self._fetch(session, lat, lon, place)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(f"Open-Meteo request failed: {e!r}") from e
        except ValueError as e:
            raise UpstreamError(f"Open-Meteo returned an unreadable body: {e}") from e

    async def _resolve(
        self, session: aiohttp.ClientSession, location: str
    ) -> Optional[Tuple[float, float, str]]:
        params = {
            "name": location,
            "count": "1",
            "language": self.config.language,
            "format": "json",
        }
        async with session.get(self.config.geocoding_url, params=params) as resp:
            if resp.status >= 300:
                _log(f"[open-meteo] geocoding failed: {resp.status}")
                return None
            data = await resp.json(content_type=None)

        geo = GeocodingResponse.model_validate(data or {})
        if not geo.results:
            return None
        first = geo.results[0]
        return first.latitude, first.longitude, place_label(first, location)

    async def _fetch(
        self, session: aiohttp.ClientSession, lat: float, lon: float, place: str
    ) -> Optional[WeatherInfo]:
        params: Dict[str, Any] = {
            "latitude": str(lat),
            "longitude": str(lon),
            "current": "temperature_2m,weather_code,wind_speed_10m",
            "wind_speed_unit": "kmh",
            "timezone": "auto",
        }
        async with session.get(self.config.forecast_url, params=params) as resp:
            if resp.status >= 300:
                _log(f"[open-meteo] forecast failed: {resp.status}")
                return None
            data = await resp.json(content_type=None)

        forecast = ForecastResponse.model_validate(data or {})
        current = forecast.current
        if current is None:
            return None
        units = forecast.current_units or CurrentUnits()

        return WeatherInfo(
            place=place,
            latitude=lat,
            longitude=lon,
            temperature=current.temperature_2m if current.temperature_2m is not None else math.nan,
            wind_speed=current.wind_speed_10m if current.wind_speed_10m is not None else math.nan,
            weather_code=current.weather_code if current.weather_code is not None else -1,
            temperature_unit=units.temperature_2m or DEFAULT_TEMPERATURE_UNIT,
            wind_unit=units.wind_speed_10m or DEFAULT_WIND_UNIT,
        )
