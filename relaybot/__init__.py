"""relaybot — Discord bot relaying mentions and slash commands to a chat-completion API."""

from relaybot.config import __version__, AppConfig, CONFIG

__all__ = ["__version__", "AppConfig", "CONFIG"]
