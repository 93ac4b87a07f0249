"""Launcher — wires config, ports and the Discord client together."""

import asyncio
import sys
from typing import Optional

from relaybot.adapters.discord.adapter import RelayBot
from relaybot.adapters.llm.openai_adapter import OpenAIChatClient
from relaybot.adapters.weather.open_meteo import OpenMeteoClient
from relaybot.config import AppConfig
from relaybot.domain.mediator import ConversationMediator
from relaybot.domain.persona import load_persona
from relaybot.domain.weather import WeatherReporter
from relaybot.infrastructure.rate_limit import InMemoryRateLimiter


def _log(msg: str):
    print(msg, file=sys.stderr)


def build_bot(config: Optional[AppConfig] = None) -> RelayBot:
    """Instantiate the bot and every collaborator from config."""
    config = config or AppConfig.from_env()

    persona = load_persona(config.persona_prompt, config.persona_file)

    evict_after = config.bot.rate_limit_evict_after
    if evict_after is not None:
        evict_after = max(evict_after, config.bot.rate_limit_seconds)

    mediator = ConversationMediator(
        generator=OpenAIChatClient(config.gpt),
        persona=persona,
        rate_limiter=InMemoryRateLimiter(evict_after=evict_after),
        config=config.bot,
    )
    reporter = WeatherReporter(
        OpenMeteoClient(config.weather),
        timeout=config.weather.timeout_seconds,
    )
    return RelayBot(mediator, reporter, guild_id=config.discord.guild_id)


async def launch_bot(config: Optional[AppConfig] = None):
    """Log in and run until the gateway connection closes."""
    config = config or AppConfig.from_env()
    if not config.discord.token.strip():
        _log("Discord token not configured. Set DISCORD_TOKEN in the environment or .env.")
        return

    bot = build_bot(config)
    _log(f"Launching bot (model={config.gpt.model})...")
    async with bot:
        await bot.start(config.discord.token)


def main():
    asyncio.run(launch_bot())


if __name__ == "__main__":
    main()
