"""Weather reporting — code labels, plain-text rendering, failure absorption."""

import asyncio
import math
import sys
from typing import Dict, Optional, Tuple

from relaybot.domain.cancellation import run_cancellable
from relaybot.domain.errors import Canceled
from relaybot.domain.models import Fail, Reply, ResponseDecision, WeatherInfo
from relaybot.ports.outbound import WeatherPort

NOT_FOUND_TEXT = "Location not found or weather service unavailable."
APOLOGY_TEXT = "Sorry, something went wrong."
MISSING = "—"

# WMO weather interpretation codes, as reported by Open-Meteo
_WEATHER_CODES: Dict[Tuple[int, ...], Tuple[str, str]] = {
    (0,): ("clear sky", "☀️"),
    (1, 2): ("partly cloudy", "🌤️"),
    (3,): ("overcast", "☁️"),
    (45, 48): ("fog", "🌫️"),
    (51, 53, 55): ("drizzle", "🌦️"),
    (56, 57): ("freezing drizzle", "🌧️"),
    (61, 63, 65): ("rain", "🌧️"),
    (66, 67): ("freezing rain", "🌧️"),
    (71, 73, 75): ("snow", "❄️"),
    (77,): ("snow grains", "❄️"),
    (80, 81, 82): ("rain showers", "🌦️"),
    (85, 86): ("snow showers", "🌨️"),
    (95,): ("thunderstorm", "⛈️"),
    (96, 97): ("thunderstorm with hail", "⛈️"),
}

WEATHER_CODE_TABLE: Dict[int, Tuple[str, str]] = {
    code: entry for codes, entry in _WEATHER_CODES.items() for code in codes
}

_UNKNOWN_EMOJI = "🌡️"


def _log(msg: str):
    print(msg, file=sys.stderr)


def describe_weather_code(code: int) -> str:
    entry = WEATHER_CODE_TABLE.get(code)
    return entry[0] if entry else f"weather code {code}"


def weather_emoji(code: int) -> str:
    entry = WEATHER_CODE_TABLE.get(code)
    return entry[1] if entry else _UNKNOWN_EMOJI


def _reading(value: float, unit: str, precision: int) -> str:
    if value is None or math.isnan(value):
        return MISSING
    return f"{value:.{precision}f} {unit}"


def format_weather(info: WeatherInfo) -> str:
    """Plain-text report, one line per field."""
    return "\n".join([
        f"{weather_emoji(info.weather_code)} Weather in {info.place}",
        f"Temperature: {_reading(info.temperature, info.temperature_unit, 1)}",
        f"Wind: {_reading(info.wind_speed, info.wind_unit, 0)}",
        f"Conditions: {describe_weather_code(info.weather_code)}",
    ])


class WeatherReporter:
    """Runs one lookup and turns every outcome into a ResponseDecision."""

    def __init__(self, client: WeatherPort, timeout: Optional[float] = 10.0):
        self._client = client
        self._timeout = timeout

    async def report(
        self,
        location: str,
        cancel: Optional[asyncio.Event] = None,
    ) -> ResponseDecision:
        try:
            info = await run_cancellable(
                self._client.lookup(location),
                timeout=self._timeout,
                cancel=cancel,
            )
        except Canceled as e:
            _log(f"[weather] lookup canceled for {location!r}: {e}")
            return Fail("canceled")
        except Exception as e:
            _log(f"[weather] lookup failed for {location!r}: {e!r}")
            return Reply(APOLOGY_TEXT)

        if info is None:
            return Reply(NOT_FOUND_TEXT)
        return Reply(format_weather(info))
