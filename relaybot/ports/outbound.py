"""Outbound ports — interfaces for external system adapters."""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from relaybot.domain.models import GenerationRequest, GenerationResponse, WeatherInfo


@runtime_checkable
class GenerationPort(Protocol):
    """Interface for chat-completion backends.

    Cancellation is asyncio task cancellation: implementations let
    asyncio.CancelledError propagate from their awaits.
    """

    async def generate(self, request: "GenerationRequest") -> "GenerationResponse": ...


@runtime_checkable
class RateLimiterPort(Protocol):
    """Interface for the per-sender gate."""

    def try_acquire(self, key: str, interval: Union[float, timedelta]) -> bool: ...


@runtime_checkable
class WeatherPort(Protocol):
    """Interface for current-conditions lookups. None means no data."""

    async def lookup(self, location: str) -> Optional["WeatherInfo"]: ...

