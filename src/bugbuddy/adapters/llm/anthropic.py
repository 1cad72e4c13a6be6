"""Anthropic Claude completion adapter.

This module implements the CompletionProvider protocol for Anthropic's
Messages API. SDK-level retries are disabled: a simplify request makes
exactly one call.
"""

from __future__ import annotations

import anthropic
import structlog

from ...config.schema import AnthropicConfig
from ...utils.async_helpers import (
    InvalidCredentialError,
    LLMRequestError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
)
from ...utils.logging import LogEventNames

log = structlog.get_logger()

# Maximum response length in characters
MAX_RESPONSE_LENGTH = 50000


class AnthropicAdapter:
    """Anthropic adapter implementing the CompletionProvider protocol.

    Example:
        adapter = AnthropicAdapter(AnthropicConfig(), api_key="sk-ant-...")
        text = await adapter.complete(prompt)
    """

    def __init__(self, config: AnthropicConfig, api_key: str) -> None:
        """Initialize the Anthropic adapter.

        Args:
            config: Anthropic-specific configuration.
            api_key: Anthropic API key.

        Raises:
            MissingCredentialError: If the API key is empty.
        """
        if not api_key:
            raise MissingCredentialError("Anthropic API key not found")

        self._config = config
        if config.timeout is not None:
            self._client = anthropic.AsyncAnthropic(
                api_key=api_key, max_retries=0, timeout=config.timeout
            )
        else:
            self._client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    async def complete(self, prompt: str) -> str:
        """Send the prompt as a single user message and return the reply text.

        Raises:
            InvalidCredentialError: If the key is rejected.
            RateLimitError: If rate limit exceeded.
            LLMRequestError: On other API or transport errors.
            MalformedResponseError: If the reply holds no text.
        """
        log.info(LogEventNames.LLM_REQUEST_START, provider="anthropic", model=self.model_name)

        try:
            response = await self._client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except (anthropic.AuthenticationError, anthropic.PermissionDeniedError) as e:
            log.error(LogEventNames.LLM_REQUEST_ERROR, provider="anthropic", error=str(e))
            raise InvalidCredentialError(
                "Invalid Anthropic API key. Please update your API key."
            ) from e
        except anthropic.RateLimitError as e:
            log.warning("anthropic_rate_limit", error=str(e))
            raise RateLimitError(
                "Anthropic API rate limit exceeded. Please try again later."
            ) from e
        except anthropic.APIError as e:
            log.error(LogEventNames.LLM_REQUEST_ERROR, provider="anthropic", error=str(e))
            raise LLMRequestError(f"Anthropic API error: {e}") from e

        response_text = ""
        for block in response.content or []:
            if hasattr(block, "text"):
                response_text += block.text

        if not response_text:
            raise MalformedResponseError("Invalid response from Anthropic API")

        if len(response_text) > MAX_RESPONSE_LENGTH:
            response_text = response_text[:MAX_RESPONSE_LENGTH] + "\n\n(truncated)"

        log.info(
            LogEventNames.LLM_REQUEST_COMPLETE,
            provider="anthropic",
            response_chars=len(response_text),
        )
        return response_text

    async def aclose(self) -> None:
        """Close the underlying SDK client."""
        await self._client.close()
