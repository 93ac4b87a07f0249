"""Infrastructure — in-process services shared by the adapters."""

from relaybot.infrastructure.rate_limit import InMemoryRateLimiter

__all__ = ["InMemoryRateLimiter"]
