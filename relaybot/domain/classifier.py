"""Decide whether an inbound event is addressed to the bot, and clean its text."""

import re

from relaybot.domain.models import Classification, NormalizedInput, Rejected
from relaybot.ports.inbound import InboundEvent


def truncate(text: str, limit: int) -> str:
    """Hard cut to at most `limit` characters."""
    return text[:limit] if len(text) > limit else text


def strip_self_mentions(content: str, bot_user_id: str) -> str:
    """Remove every `<@id>` and `<@!id>` token for the bot's own id."""
    pattern = re.compile(rf"<@!?{re.escape(bot_user_id)}>", re.IGNORECASE)
    return pattern.sub("", content)


def is_addressed(event: InboundEvent) -> bool:
    return event.is_slash_command or event.mentions_bot or event.is_direct_message


def classify(event: InboundEvent, input_max_chars: int) -> Classification:
    """Return the normalized text for an accepted event, or Rejected.

    Accepted: slash commands, messages mentioning the bot, direct messages.
    """
    if not is_addressed(event):
        return Rejected("not-addressed")

    content = event.content or ""
    if not event.is_slash_command and event.mentions_bot:
        content = strip_self_mentions(content, event.bot_user_id)

    content = content.strip()
    if not content:
        return Rejected("empty")

    return NormalizedInput(text=truncate(content, input_max_chars), event=event)
