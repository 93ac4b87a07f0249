"""Domain exceptions."""

from typing import Optional


class UpstreamError(Exception):
    """Raised when a downstream HTTP service fails for good.

    Either the retries ran out on a server-class failure, or the service
    answered with a terminal client-class status.
    """

    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(f"HTTP {status}: {detail}" if status is not None else detail)
        self.detail = detail
        self.status = status


class Canceled(Exception):
    """Raised when a deadline expires or a cancellation signal fires first."""
