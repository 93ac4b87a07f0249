"""Port interfaces (Hexagonal Architecture)."""

from relaybot.ports.inbound import InboundEvent
from relaybot.ports.outbound import GenerationPort, RateLimiterPort, WeatherPort

__all__ = [
    "InboundEvent",
    "GenerationPort",
    "RateLimiterPort",
    "WeatherPort",
]
