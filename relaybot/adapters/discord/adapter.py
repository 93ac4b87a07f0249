"""Discord adapter — bridges discord.Client to the conversation and weather pipelines.

Converts gateway messages and slash-command interactions into InboundEvent,
hands them to ConversationMediator / WeatherReporter, and delivers the
resulting text. No decision logic lives here.
"""

import asyncio
import sys
from typing import Dict, List, Set, Tuple

import discord
from discord import app_commands

from relaybot.domain.classifier import is_addressed
from relaybot.domain.mediator import ConversationMediator
from relaybot.domain.models import ResponseDecision
from relaybot.domain.weather import WeatherReporter
from relaybot.ports.inbound import InboundEvent

NO_REPLY_TEXT = "No reply."
CANCELED_TEXT = "Request canceled."
NOTHING_TO_CANCEL_TEXT = "Nothing to cancel."
MESSAGE_LIMIT = 2000


def _log(msg: str):
    print(msg, file=sys.stderr)


def split_message(text: str, limit: int = MESSAGE_LIMIT) -> List[str]:
    """Split a message into chunks that fit Discord's character limit."""
    if len(text) <= limit:
        return [text]
    chunks = []
    while text:
        chunks.append(text[:limit])
        text = text[limit:]
    return chunks


class RelayBot(discord.Client):
    """Thin Discord client: `/ask`, `/meteo`, mentions and DMs, `!cancel`."""

    def __init__(
        self,
        mediator: ConversationMediator,
        reporter: WeatherReporter,
        guild_id: int = 0,
        **discord_kwargs,
    ):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._mediator = mediator
        self._reporter = reporter
        self._guild_id = guild_id
        self._in_flight: Dict[Tuple[int, int], Set[asyncio.Event]] = {}  # (channel_id, author_id) → cancel signals
        self.tree = app_commands.CommandTree(self)
        self._register_commands()

    # -- Event conversion --

    def to_event(self, message: discord.Message) -> InboundEvent:
        """Convert a gateway message to a platform-agnostic InboundEvent."""
        return InboundEvent(
            author_id=str(message.author.id),
            author_is_bot=bool(message.author.bot),
            content=message.content or "",
            channel_id=str(message.channel.id),
            guild_id=str(message.guild.id) if message.guild else None,
            message_id=str(message.id),
            mentioned_user_ids=tuple(str(u.id) for u in message.mentions),
            bot_user_id=str(self.user.id) if self.user else "",
            is_direct_message=message.guild is None,
        )

    def interaction_event(self, interaction: discord.Interaction, prompt: str) -> InboundEvent:
        """Convert a slash-command invocation to an InboundEvent."""
        return InboundEvent(
            author_id=str(interaction.user.id),
            author_is_bot=bool(interaction.user.bot),
            content=prompt,
            channel_id=str(interaction.channel_id),
            guild_id=str(interaction.guild_id) if interaction.guild_id else None,
            message_id=str(interaction.id),
            mentioned_user_ids=(),
            bot_user_id=str(self.user.id) if self.user else "",
            is_direct_message=interaction.guild_id is None,
            is_slash_command=True,
        )

    # -- Cancellation tracking --

    def _track(self, channel_id: int, author_id: int) -> asyncio.Event:
        signal = asyncio.Event()
        self._in_flight.setdefault((channel_id, author_id), set()).add(signal)
        return signal

    def _untrack(self, channel_id: int, author_id: int, signal: asyncio.Event):
        key = (channel_id, author_id)
        signals = self._in_flight.get(key)
        if signals is None:
            return
        signals.discard(signal)
        if not signals:
            del self._in_flight[key]

    def cancel_requests(self, channel_id: int, author_id: int) -> int:
        """Fire the author's in-flight cancel signals in a channel. Returns count."""
        signals = self._in_flight.get((channel_id, author_id), set())
        pending = [s for s in signals if not s.is_set()]
        for s in pending:
            s.set()
        return len(pending)

    def _command_word(self, content: str) -> str:
        stripped = content.strip()
        # Strip bot mention prefix so "@Bot !cancel" parses correctly
        if self.user:
            stripped = stripped.replace(f"<@{self.user.id}>", "").replace(f"<@!{self.user.id}>", "").strip()
        return stripped.split()[0].lower() if stripped else ""

    # -- Gateway events --

    async def setup_hook(self):
        try:
            if self._guild_id:
                guild = discord.Object(id=self._guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                _log(f"[relaybot] slash commands registered to guild {self._guild_id}")
            else:
                await self.tree.sync()
                _log("[relaybot] slash commands registered globally (may take up to 1h to appear)")
        except discord.HTTPException as e:
            _log(f"[relaybot] failed to register slash commands: {e}")

    async def on_ready(self):
        _log(f"[relaybot] logged in as {self.user} ({self.user.id if self.user else '?'})")

    def _can_send(self, message: discord.Message) -> bool:
        if message.guild is None:
            return True
        perms = message.channel.permissions_for(message.guild.me)
        return bool(perms.send_messages)

    async def on_message(self, message: discord.Message):
        # Guard: self.user can be None before on_ready fires
        if not self.user or message.author == self.user or message.author.bot:
            return

        event = self.to_event(message)
        if not is_addressed(event):
            return

        if self._command_word(message.content or "") == "!cancel":
            await self._handle_cancel(message)
            return

        if not self._can_send(message):
            _log(f"[relaybot] missing SendMessages permission in channel {message.channel.id}")
            return

        channel_id = message.channel.id
        author_id = message.author.id
        signal = self._track(channel_id, author_id)
        try:
            async with message.channel.typing():
                decision = await self._mediator.handle(event, signal)
        finally:
            self._untrack(channel_id, author_id, signal)

        if signal.is_set() and not decision.should_reply:
            await self._safe_send(message.channel, CANCELED_TEXT)
            return

        text = decision.reply_text
        if not decision.should_reply or not text or not text.strip():
            return
        for chunk in split_message(text):
            await self._safe_send(message.channel, chunk)

    async def _handle_cancel(self, message: discord.Message):
        count = self.cancel_requests(message.channel.id, message.author.id)
        _log(f"[relaybot] !cancel by {message.author.id} in channel {message.channel.id}: {count} request(s)")
        if not count:
            await self._safe_send(message.channel, NOTHING_TO_CANCEL_TEXT)

    async def _safe_send(self, channel, text: str):
        try:
            await channel.send(text)
        except discord.HTTPException as e:
            _log(f"[relaybot] cannot send message in channel {getattr(channel, 'id', '?')}: {e}")

    # -- Slash commands --

    def _register_commands(self):
        @self.tree.command(name="ask", description="Ask the bot a question")
        @app_commands.describe(prompt="Your question")
        async def ask(interaction: discord.Interaction, prompt: str):
            await self.handle_ask(interaction, prompt)

        @self.tree.command(name="meteo", description="Current weather for a location (Open-Meteo)")
        @app_commands.describe(location="City or place, e.g. Paris")
        async def meteo(interaction: discord.Interaction, location: str):
            await self.handle_meteo(interaction, location)

    async def handle_ask(self, interaction: discord.Interaction, prompt: str):
        await interaction.response.defer()
        event = self.interaction_event(interaction, prompt)
        channel_id = interaction.channel_id
        author_id = interaction.user.id
        signal = self._track(channel_id, author_id)
        try:
            decision = await self._mediator.handle(event, signal)
        finally:
            self._untrack(channel_id, author_id, signal)
        await self._follow_up(interaction, decision)

    async def handle_meteo(self, interaction: discord.Interaction, location: str):
        await interaction.response.defer()
        channel_id = interaction.channel_id
        author_id = interaction.user.id
        signal = self._track(channel_id, author_id)
        try:
            decision = await self._reporter.report(location, signal)
        finally:
            self._untrack(channel_id, author_id, signal)
        await self._follow_up(interaction, decision)

    async def _follow_up(self, interaction: discord.Interaction, decision: ResponseDecision):
        text = decision.reply_text
        if not decision.should_reply or not text or not text.strip():
            text = NO_REPLY_TEXT
        try:
            for chunk in split_message(text):
                await interaction.followup.send(chunk)
        except discord.HTTPException as e:
            _log(f"[relaybot] follow-up failed for interaction {interaction.id}: {e}")
