"""OpenAI chat-completions adapter — implements GenerationPort.

Works against api.openai.com and any endpoint speaking the same
/chat/completions contract.
"""

import asyncio
import sys
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import BaseModel

from relaybot.config import GptConfig
from relaybot.domain.classifier import truncate
from relaybot.domain.errors import UpstreamError
from relaybot.domain.models import GenerationRequest, GenerationResponse

SYSTEM_PROMPT_MAX_CHARS = 1000
USER_MESSAGE_MAX_CHARS = 4000


def _log(msg: str):
    print(msg, file=sys.stderr)


class ChatMessage(BaseModel):
    role: Optional[str] = None
    content: Optional[str] = None


class ChatCompletionRequest(BaseModel):
    model: str
    messages: List[ChatMessage]


class ChatChoice(BaseModel):
    message: Optional[ChatMessage] = None
    finish_reason: Optional[str] = None


class ChatCompletionResponse(BaseModel):
    choices: Optional[List[ChatChoice]] = None


class OpenAIChatClient:
    """Sends one persona + user message pair, retrying server-side failures."""

    def __init__(self, config: Optional[GptConfig] = None):
        self.config = config or GptConfig()
        self.url = self.config.base_url.rstrip("/") + "/chat/completions"
        self.max_attempts = max(1, self.config.max_attempts)
        self.backoff_base = self.config.backoff_base_seconds
        self._timeout = aiohttp.ClientTimeout(total=self.config.http_timeout_seconds)
        if not self.config.api_key.strip():
            _log("OPENAI_API_KEY not set; chat completion calls will fail.")

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        body = ChatCompletionRequest(
            model=self.config.model,
            messages=[
                ChatMessage(role="system", content=truncate(request.persona_prompt, SYSTEM_PROMPT_MAX_CHARS)),
                ChatMessage(role="user", content=truncate(request.user_message, USER_MESSAGE_MAX_CHARS)),
            ],
        )
        return body.model_dump(exclude_none=True)

    @staticmethod
    def extract_text(data: Any) -> str:
        """First choice's message content, or "" when there is none."""
        parsed = ChatCompletionResponse.model_validate(data)
        if not parsed.choices:
            return ""
        message = parsed.choices[0].message
        if message is None or message.content is None:
            return ""
        return message.content

    async def generate(self, request: GenerationRequest) -> GenerationResponse:
        payload = self.build_payload(request)
        headers = {"Authorization": f"Bearer {self.config.api_key}"}

        last_error: Optional[UpstreamError] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with aiohttp.ClientSession(timeout=self._timeout) as session:
                    async with session.post(self.url, json=payload, headers=headers) as resp:
                        if resp.status >= 500:
                            body = await resp.text(errors="replace")
                            last_error = UpstreamError(body[:200], status=resp.status)
                        elif resp.status >= 400:
                            body = await resp.text(errors="replace")
                            raise UpstreamError(body[:200], status=resp.status)
                        else:
                            try:
                                data = await resp.json(content_type=None)
                            except ValueError as e:
                                raise UpstreamError(f"Invalid JSON response: {e}") from e
                            try:
                                text = self.extract_text(data)
                            except ValueError as e:
                                raise UpstreamError(f"Unexpected response body: {e}") from e
                            return GenerationResponse(
                                text=text,
                                conversation_id=request.conversation_id,
                                message_id=request.message_id,
                            )
            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                last_error = UpstreamError(f"Transport failure: {e!r}")

            if attempt < self.max_attempts:
                _log(f"[openai] attempt {attempt}/{self.max_attempts} failed ({last_error}), retrying")
                await asyncio.sleep(self.backoff_base * attempt)

        raise last_error
