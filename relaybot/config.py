"""Configuration and shared state."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

DEFAULT_PERSONA_PROMPT = "You are a helpful assistant. Be concise and safe."


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


CONFIG = {
    # Conversation limits
    "reply_max_chars": _env_int("BOT_REPLY_MAX_CHARS", 1500),
    "input_max_chars": _env_int("BOT_INPUT_MAX_CHARS", 4000),
    "rate_limit_seconds": _env_float("BOT_RATE_LIMIT_SECONDS", 5.0),
    "rate_limit_evict_after": _env_float("BOT_RATE_LIMIT_EVICT_SECONDS", None),
    "request_timeout_seconds": _env_float("BOT_REQUEST_TIMEOUT_SECONDS", 60.0),
    # Chat completions (OpenAI-compatible)
    "gpt_base_url": os.getenv("GPT_BASE_URL", "https://api.openai.com/v1"),
    "gpt_model": os.getenv("GPT_MODEL", "gpt-4o-mini"),
    "openai_api_key": os.getenv("OPENAI_API_KEY", ""),
    # Open-Meteo
    "weather_language": os.getenv("WEATHER_LANGUAGE", "en"),
    "weather_timeout_seconds": _env_float("WEATHER_TIMEOUT_SECONDS", 10.0),
    # Persona: non-blank PERSONA_FILE contents win over PERSONA_PROMPT
    "persona_prompt": os.getenv("PERSONA_PROMPT", DEFAULT_PERSONA_PROMPT),
    "persona_file": os.getenv("PERSONA_FILE", "persona.txt"),
}

# Discord
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN", "")
DISCORD_GUILD_ID = _env_int("DISCORD_GUILD_ID", 0)


# ── Typed config ────────────────────────────────────────────


@dataclass
class BotConfig:
    reply_max_chars: int = 1500
    input_max_chars: int = 4000
    rate_limit_seconds: float = 5.0
    rate_limit_evict_after: Optional[float] = None
    request_timeout_seconds: float = 60.0


@dataclass
class GptConfig:
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    max_attempts: int = 3
    backoff_base_seconds: float = 0.2
    http_timeout_seconds: float = 60.0


@dataclass
class WeatherConfig:
    geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    language: str = "en"
    timeout_seconds: float = 10.0


@dataclass
class DiscordConfig:
    token: str = ""
    guild_id: int = 0


@dataclass
class AppConfig:
    """Typed configuration consumed by the launcher."""

    bot: BotConfig = field(default_factory=BotConfig)
    gpt: GptConfig = field(default_factory=GptConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    persona_prompt: str = DEFAULT_PERSONA_PROMPT
    persona_file: str = "persona.txt"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            bot=BotConfig(
                reply_max_chars=CONFIG["reply_max_chars"],
                input_max_chars=CONFIG["input_max_chars"],
                rate_limit_seconds=CONFIG["rate_limit_seconds"],
                rate_limit_evict_after=CONFIG["rate_limit_evict_after"],
                request_timeout_seconds=CONFIG["request_timeout_seconds"],
            ),
            gpt=GptConfig(
                base_url=CONFIG["gpt_base_url"],
                model=CONFIG["gpt_model"],
                api_key=CONFIG["openai_api_key"],
            ),
            weather=WeatherConfig(
                language=CONFIG["weather_language"],
                timeout_seconds=CONFIG["weather_timeout_seconds"],
            ),
            discord=DiscordConfig(
                token=DISCORD_TOKEN,
                guild_id=DISCORD_GUILD_ID,
            ),
            persona_prompt=CONFIG["persona_prompt"],
            persona_file=CONFIG["persona_file"],
        )
