"""Discord transport — gateway client, slash commands, launcher."""

from relaybot.adapters.discord.adapter import RelayBot, split_message
from relaybot.adapters.discord.launcher import build_bot, launch_bot

__all__ = ["RelayBot", "split_message", "build_bot", "launch_bot"]
