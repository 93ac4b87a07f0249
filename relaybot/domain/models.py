"""Domain data models — pure Python dataclasses."""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from relaybot.ports.inbound import InboundEvent


@dataclass(frozen=True)
class Persona:
    """Process-wide system prompt, loaded once at startup."""

    prompt: str


@dataclass(frozen=True)
class NormalizedInput:
    """Accepted event with its cleaned-up text."""

    text: str
    event: "InboundEvent"


@dataclass(frozen=True)
class Rejected:
    """Event the bot should not answer."""

    reason: str  # "not-addressed" or "empty"


Classification = Union[NormalizedInput, Rejected]


@dataclass(frozen=True)
class GenerationRequest:
    persona_prompt: str
    user_message: str
    conversation_id: str
    message_id: str


@dataclass(frozen=True)
class GenerationResponse:
    text: str
    conversation_id: str
    message_id: str


# ── Response decisions ──────────────────────────────────────
# Closed set: Ignore, Reply, Fail. Only Reply carries text.


@dataclass(frozen=True)
class Ignore:
    """No output at all."""

    @property
    def should_reply(self) -> bool:
        return False

    @property
    def reply_text(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Reply:
    """Deliver `text` to the channel."""

    text: str

    def __post_init__(self):
        if self.text is None:
            raise TypeError("Reply text must be a string")

    @property
    def should_reply(self) -> bool:
        return True

    @property
    def reply_text(self) -> Optional[str]:
        return self.text


@dataclass(frozen=True)
class Fail:
    """Internal failure; the reason is logged, never sent verbatim."""

    reason: str

    @property
    def should_reply(self) -> bool:
        return False

    @property
    def reply_text(self) -> Optional[str]:
        return None


ResponseDecision = Union[Ignore, Reply, Fail]


@dataclass(frozen=True)
class WeatherInfo:
    """Provider-agnostic current conditions.

    Missing readings are NaN, a missing weather code is -1.
    """

    place: str
    latitude: float
    longitude: float
    temperature: float = math.nan
    wind_speed: float = math.nan
    weather_code: int = -1
    temperature_unit: str = "°C"
    wind_unit: str = "km/h"
