"""Tests for domain/mediator.py — ConversationMediator with mock ports.

No discord import needed — tests use mock ports only.
"""

import asyncio

import pytest

from relaybot.config import BotConfig
from relaybot.domain.errors import UpstreamError
from relaybot.domain.mediator import APOLOGY_TEXT, RATE_LIMITED_TEXT, ConversationMediator
from relaybot.domain.models import Fail, GenerationResponse, Ignore, Persona, Reply
from relaybot.infrastructure.rate_limit import InMemoryRateLimiter
from relaybot.ports.inbound import InboundEvent

BOT_ID = "999"


# --- Mock Ports ---


class MockGenerator:
    """Mock GenerationPort implementation."""

    def __init__(self, text="ok", error=None, delay=0.0):
        self.text = text
        self.error = error
        self.delay = delay
        self.requests = []
        self.cancelled = False

    async def generate(self, request):
        self.requests.append(request)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return GenerationResponse(self.text, request.conversation_id, request.message_id)


class PassThroughRateLimiter:
    def __init__(self):
        self.keys = []

    def try_acquire(self, key, interval):
        self.keys.append((key, interval))
        return True


class DenyingRateLimiter:
    def try_acquire(self, key, interval):
        return False


# --- Helpers ---


def _make_mediator(generator=None, rate_limiter=None, **config):
    generator = generator or MockGenerator()
    mediator = ConversationMediator(
        generator=generator,
        persona=Persona("You are test persona."),
        rate_limiter=rate_limiter if rate_limiter is not None else PassThroughRateLimiter(),
        config=BotConfig(**config),
    )
    return mediator, generator


def _make_event(
    content="hello world",
    is_slash=True,
    mentions=(),
    is_dm=False,
    author_id="u1",
    guild_id="g1",
):
    return InboundEvent(
        author_id=author_id,
        author_is_bot=False,
        content=content,
        channel_id="c1",
        guild_id=guild_id,
        message_id="m1",
        mentioned_user_ids=tuple(mentions),
        bot_user_id=BOT_ID,
        is_direct_message=is_dm,
        is_slash_command=is_slash,
    )


# --- Tests ---


class TestIgnore:
    @pytest.mark.asyncio
    async def test_ignores_unaddressed_message(self):
        mediator, gen = _make_mediator()
        decision = await mediator.handle(_make_event(is_slash=False))
        assert decision == Ignore()
        assert decision.should_reply is False
        assert decision.reply_text is None
        assert gen.requests == []

    @pytest.mark.asyncio
    async def test_ignores_empty_mention(self):
        mediator, gen = _make_mediator()
        event = _make_event(content=f"<@{BOT_ID}>", is_slash=False, mentions=[BOT_ID])
        assert await mediator.handle(event) == Ignore()
        assert gen.requests == []


class TestReply:
    @pytest.mark.asyncio
    async def test_replies_to_slash_command(self):
        mediator, gen = _make_mediator(generator=MockGenerator("ok"))
        decision = await mediator.handle(_make_event("hello world"))
        assert decision == Reply("ok")
        assert decision.should_reply is True

    @pytest.mark.asyncio
    async def test_builds_request_from_persona_and_event(self):
        mediator, gen = _make_mediator()
        await mediator.handle(_make_event("  hi  "))
        request = gen.requests[0]
        assert request.persona_prompt == "You are test persona."
        assert request.user_message == "hi"
        assert request.conversation_id == "g1"
        assert request.message_id == "m1"

    @pytest.mark.asyncio
    async def test_conversation_id_falls_back_to_channel(self):
        mediator, gen = _make_mediator()
        await mediator.handle(_make_event("hi", is_slash=False, is_dm=True, guild_id=None))
        assert gen.requests[0].conversation_id == "c1"

    @pytest.mark.asyncio
    async def test_mention_is_stripped_before_generation(self):
        mediator, gen = _make_mediator()
        event = _make_event(f"<@!{BOT_ID}> tell me a joke", is_slash=False, mentions=[BOT_ID])
        await mediator.handle(event)
        assert gen.requests[0].user_message == "tell me a joke"

    @pytest.mark.asyncio
    async def test_input_is_truncated(self):
        mediator, gen = _make_mediator(input_max_chars=5)
        await mediator.handle(_make_event("abcdefghij"))
        assert gen.requests[0].user_message == "abcde"

    @pytest.mark.asyncio
    async def test_truncates_long_reply(self):
        mediator, _ = _make_mediator(generator=MockGenerator("x" * 100), reply_max_chars=10)
        decision = await mediator.handle(_make_event("generate long"))
        assert isinstance(decision, Reply)
        assert len(decision.text) == 10

    @pytest.mark.asyncio
    async def test_reply_is_trimmed(self):
        mediator, _ = _make_mediator(generator=MockGenerator("  answer \n"))
        assert await mediator.handle(_make_event()) == Reply("answer")

    @pytest.mark.asyncio
    async def test_empty_generation_is_empty_reply(self):
        mediator, _ = _make_mediator(generator=MockGenerator("   "))
        decision = await mediator.handle(_make_event())
        assert decision == Reply("")
        assert decision.should_reply is True


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_denied_returns_fixed_message_without_upstream_call(self):
        mediator, gen = _make_mediator(rate_limiter=DenyingRateLimiter())
        decision = await mediator.handle(_make_event())
        assert decision == Reply(RATE_LIMITED_TEXT)
        assert gen.requests == []

    @pytest.mark.asyncio
    async def test_keyed_by_author_with_configured_interval(self):
        limiter = PassThroughRateLimiter()
        mediator, _ = _make_mediator(rate_limiter=limiter, rate_limit_seconds=5)
        await mediator.handle(_make_event(author_id="alice"))
        assert limiter.keys == [("alice", 5)]

    @pytest.mark.asyncio
    async def test_second_message_within_interval_is_throttled(self):
        mediator, gen = _make_mediator(rate_limiter=InMemoryRateLimiter())
        first = await mediator.handle(_make_event(author_id="alice"))
        second = await mediator.handle(_make_event(author_id="alice"))
        other = await mediator.handle(_make_event(author_id="bob"))
        assert first == Reply("ok")
        assert second == Reply(RATE_LIMITED_TEXT)
        assert other == Reply("ok")
        assert len(gen.requests) == 2

    @pytest.mark.asyncio
    async def test_ignored_events_do_not_consume_the_gate(self):
        limiter = PassThroughRateLimiter()
        mediator, _ = _make_mediator(rate_limiter=limiter)
        await mediator.handle(_make_event(is_slash=False))
        assert limiter.keys == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_upstream_error_becomes_apology(self):
        gen = MockGenerator(error=UpstreamError("boom", status=500))
        mediator, _ = _make_mediator(generator=gen)
        assert await mediator.handle(_make_event()) == Reply(APOLOGY_TEXT)

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_apology(self):
        mediator, _ = _make_mediator(generator=MockGenerator(error=RuntimeError("bug")))
        assert await mediator.handle(_make_event()) == Reply(APOLOGY_TEXT)

    @pytest.mark.asyncio
    async def test_deadline_expiry_fails_as_canceled(self):
        gen = MockGenerator(delay=5.0)
        mediator, _ = _make_mediator(generator=gen, request_timeout_seconds=0.05)
        decision = await mediator.handle(_make_event())
        assert decision == Fail("canceled")
        assert decision.reply_text is None
        assert gen.cancelled is True

    @pytest.mark.asyncio
    async def test_cancel_signal_fails_as_canceled(self):
        gen = MockGenerator(delay=5.0)
        mediator, _ = _make_mediator(generator=gen)
        cancel = asyncio.Event()

        task = asyncio.create_task(mediator.handle(_make_event(), cancel))
        await asyncio.sleep(0.01)
        cancel.set()
        decision = await asyncio.wait_for(task, timeout=1.0)

        assert decision == Fail("canceled")
        assert gen.cancelled is True

    @pytest.mark.asyncio
    async def test_port_cancelling_itself_fails_as_canceled(self):
        mediator, _ = _make_mediator(generator=MockGenerator(error=asyncio.CancelledError()))
        assert await mediator.handle(_make_event()) == Fail("canceled")
