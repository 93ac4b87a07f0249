"""ConversationMediator — turns one inbound event into one response decision.

Steps, in order:
1. classify and normalize the event (not addressed / empty -> Ignore)
2. per-sender rate gate (denied -> fixed Reply, no upstream call)
3. build the GenerationRequest
4. call the generation port under the request deadline and cancel signal
5. trim and cap the reply text
Port failures never escape: cancellation becomes Fail("canceled"), anything
else becomes an apology Reply.
"""

import asyncio
import sys
from typing import Optional

from relaybot.config import BotConfig
from relaybot.domain.cancellation import run_cancellable
from relaybot.domain.classifier import classify, truncate
from relaybot.domain.errors import Canceled
from relaybot.domain.models import (
    Fail,
    GenerationRequest,
    Ignore,
    Persona,
    Rejected,
    Reply,
    ResponseDecision,
)
from relaybot.ports.inbound import InboundEvent
from relaybot.ports.outbound import GenerationPort, RateLimiterPort

RATE_LIMITED_TEXT = "Too many requests, please wait a few seconds."
APOLOGY_TEXT = "Sorry, something went wrong."


def _log(msg: str):
    print(msg, file=sys.stderr)


class ConversationMediator:
    """Pure orchestration — no discord import, testable with mock ports."""

    def __init__(
        self,
        generator: GenerationPort,
        persona: Persona,
        rate_limiter: RateLimiterPort,
        config: Optional[BotConfig] = None,
    ):
        self._generator = generator
        self._persona = persona
        self._rate_limiter = rate_limiter
        self._config = config or BotConfig()

    @property
    def config(self) -> BotConfig:
        return self._config

    async def handle(
        self,
        event: InboundEvent,
        cancel: Optional[asyncio.Event] = None,
    ) -> ResponseDecision:
        """Return Ignore, Reply or Fail for `event`. Never raises on port failures."""
        result = classify(event, self._config.input_max_chars)
        if isinstance(result, Rejected):
            return Ignore()

        if not self._rate_limiter.try_acquire(event.author_id, self._config.rate_limit_seconds):
            _log(f"[mediator] rate limited author={event.author_id}")
            return Reply(RATE_LIMITED_TEXT)

        request = GenerationRequest(
            persona_prompt=self._persona.prompt,
            user_message=result.text,
            conversation_id=event.conversation_id,
            message_id=event.message_id,
        )

        try:
            response = await run_cancellable(
                self._generator.generate(request),
                timeout=self._config.request_timeout_seconds,
                cancel=cancel,
            )
        except Canceled as e:
            _log(f"[mediator] generation canceled for message {event.message_id}: {e}")
            return Fail("canceled")
        except Exception as e:
            _log(f"[mediator] error while handling message {event.message_id}: {e!r}")
            return Reply(APOLOGY_TEXT)

        text = (response.text or "").strip()
        return Reply(truncate(text, self._config.reply_max_chars))
