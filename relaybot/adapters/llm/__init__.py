"""LLM adapters — OpenAI-compatible chat completions."""

from relaybot.adapters.llm.openai_adapter import OpenAIChatClient

__all__ = ["OpenAIChatClient"]
