"""Inbound port — platform-agnostic chat event representation."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class InboundEvent:
    """One user message or slash-command invocation, as seen by the core."""

    author_id: str
    author_is_bot: bool
    content: str
    channel_id: str
    guild_id: Optional[str]
    message_id: str
    mentioned_user_ids: Tuple[str, ...]
    bot_user_id: str
    is_direct_message: bool
    is_slash_command: bool = False

    @property
    def conversation_id(self) -> str:
        """Guild id when the event comes from a guild, channel id otherwise."""
        return self.guild_id or self.channel_id

    @property
    def mentions_bot(self) -> bool:
        return self.bot_user_id in self.mentioned_user_ids
