"""
Claude completion gateway.

Thin wrapper over the Anthropic SDK used by the coaching features: a
streaming completion for the long-form brief and a one-shot completion for
the single coaching line on the plain-text brief.
"""

import logging
import os
from typing import AsyncIterator, Optional

import anthropic

from Tools.adapters.errors import GatewayRequestError, GatewayUnavailableError

logger = logging.getLogger(__name__)


class ClaudeGateway:
    """Prompt completion gateway backed by Claude."""

    DEFAULT_MODEL = "claude-sonnet-4-6"

    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL):
        """
        Initialize the gateway.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Claude model used for every completion.
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        self.model = model
        self._client: Optional[anthropic.AsyncAnthropic] = None

        if not self.api_key:
            logger.warning("No ANTHROPIC_API_KEY found - coaching features are disabled")

    @property
    def available(self) -> bool:
        """True when an API key is configured."""
        return bool(self.api_key)

    @property
    def client(self) -> anthropic.AsyncAnthropic:
        """Lazy-load the Anthropic client."""
        if not self.available:
            raise GatewayUnavailableError(
                "ANTHROPIC_API_KEY not set in .env - add your key and restart the server."
            )
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def stream_completion(self, prompt: str, max_tokens: int) -> AsyncIterator[str]:
        """
        Stream the completion text chunk by chunk.

        Closing the generator early closes the upstream stream as well.

        Raises:
            GatewayUnavailableError: No API key configured
            GatewayRequestError: The request failed before or during generation
        """
        client = self.client
        try:
            async with client.messages.stream(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            ) as stream:
                async for text in stream.text_stream:
                    yield text
        except anthropic.APIError as e:
            raise GatewayRequestError(f"Claude request failed: {e}") from e

    async def complete(self, prompt: str, max_tokens: int) -> str:
        """
        Return the whole completion in one response.

        Raises:
            GatewayUnavailableError: No API key configured
            GatewayRequestError: The request failed
        """
        client = self.client
        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise GatewayRequestError(f"Claude request failed: {e}") from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
