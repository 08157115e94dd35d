"""
Streaming coaching relay.

Forwards the completion gateway's output to the caller chunk by chunk and
finishes the stream with exactly one terminal event: a ``[DONE]`` marker on
success, or a single error unit when generation fails.

Server-sent event framing:
    data: {"text": "Good "}
    data: {"text": "morning"}
    data: [DONE]
"""

import json
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol

from Tools.adapters.errors import GatewayUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 400
DONE_MARKER = "[DONE]"


class CompletionGateway(Protocol):
    """What the relay needs from a prompt completion service."""

    @property
    def available(self) -> bool: ...

    def stream_completion(self, prompt: str, max_tokens: int) -> AsyncIterator[str]: ...

    async def complete(self, prompt: str, max_tokens: int) -> str: ...


@dataclass(frozen=True)
class StreamUnit:
    """One event on the coaching stream."""
    text: Optional[str] = None
    error: Optional[str] = None
    done: bool = False

    @classmethod
    def content(cls, text: str) -> "StreamUnit":
        return cls(text=text)

    @classmethod
    def failure(cls, message: str) -> "StreamUnit":
        return cls(error=message)

    @classmethod
    def terminal(cls) -> "StreamUnit":
        return cls(done=True)

    def to_dict(self) -> dict:
        if self.error is not None:
            return {"error": self.error}
        return {"text": self.text}

    def to_sse(self) -> str:
        """Render as a server-sent event frame."""
        if self.done:
            return f"data: {DONE_MARKER}\n\n"
        return f"data: {json.dumps(self.to_dict())}\n\n"


def ensure_available(gateway: CompletionGateway) -> None:
    """
    Fail fast before a stream is opened.

    Raises:
        GatewayUnavailableError: The gateway has no credentials configured
    """
    if not gateway.available:
        raise GatewayUnavailableError(
            "ANTHROPIC_API_KEY not set in .env - add your key and restart the server."
        )


async def relay(
    gateway: CompletionGateway,
    prompt: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> AsyncIterator[StreamUnit]:
    """
    Relay completion chunks as stream units.

    Yields one content unit per chunk, then a terminal unit. A failure at any
    point yields a single error unit instead and ends the stream. The
    gateway stream is closed however the relay ends, including when the
    consumer stops iterating (client disconnect).
    """
    chunks = None
    try:
        chunks = gateway.stream_completion(prompt, max_tokens)
        async for text in chunks:
            yield StreamUnit.content(text)
    except Exception as e:
        logger.error(f"Coaching stream failed: {e}", exc_info=True)
        yield StreamUnit.failure(str(e))
        return
    finally:
        if chunks is not None:
            await chunks.aclose()

    yield StreamUnit.terminal()


async def relay_sse(
    gateway: CompletionGateway,
    prompt: str,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> AsyncIterator[str]:
    """The relay rendered as server-sent event frames."""
    units = relay(gateway, prompt, max_tokens)
    try:
        async for unit in units:
            yield unit.to_sse()
    finally:
        await units.aclose()
