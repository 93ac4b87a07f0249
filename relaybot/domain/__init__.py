"""Domain layer — pure Python, no framework dependencies."""

from relaybot.domain.models import (
    Fail,
    GenerationRequest,
    GenerationResponse,
    Ignore,
    NormalizedInput,
    Persona,
    Rejected,
    Reply,
    ResponseDecision,
    WeatherInfo,
)
from relaybot.domain.errors import Canceled, UpstreamError
from relaybot.domain.classifier import classify, truncate
from relaybot.domain.mediator import ConversationMediator
from relaybot.domain.persona import load_persona
from relaybot.domain.weather import WeatherReporter, describe_weather_code, format_weather

__all__ = [
    "Fail",
    "GenerationRequest",
    "GenerationResponse",
    "Ignore",
    "NormalizedInput",
    "Persona",
    "Rejected",
    "Reply",
    "ResponseDecision",
    "WeatherInfo",
    "Canceled",
    "UpstreamError",
    "classify",
    "truncate",
    "ConversationMediator",
    "load_persona",
    "WeatherReporter",
    "describe_weather_code",
    "format_weather",
]
