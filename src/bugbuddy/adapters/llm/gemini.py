"""Google Gemini completion adapter.

This module implements the CompletionProvider protocol for the Gemini
``generateContent`` REST endpoint using httpx.

- Exactly one POST per call, no retry
- API key sent in the ``x-goog-api-key`` header, never in the URL
- Response validated against a Pydantic schema
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from ...config.schema import GeminiConfig
from ...utils.async_helpers import (
    InvalidCredentialError,
    LLMRequestError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
)
from ...utils.logging import LogEventNames

log = structlog.get_logger()

INVALID_RESPONSE_MESSAGE = "Invalid response from Gemini API"


class GeminiPart(BaseModel):
    """One part of a candidate's content."""

    text: str


class GeminiContent(BaseModel):
    """Content block of a candidate."""

    parts: list[GeminiPart] = Field(min_length=1)


class GeminiCandidate(BaseModel):
    """A single generated candidate."""

    content: GeminiContent


class GenerateContentResponse(BaseModel):
    """Validated ``generateContent`` response."""

    candidates: list[GeminiCandidate] = Field(min_length=1)


class GeminiAdapter:
    """Gemini adapter implementing the CompletionProvider protocol.

    Example:
        adapter = GeminiAdapter(GeminiConfig(), api_key="AIza...")
        text = await adapter.complete(prompt)
    """

    def __init__(
        self,
        config: GeminiConfig,
        api_key: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Gemini adapter.

        Args:
            config: Gemini-specific configuration.
            api_key: Gemini API key.
            client: HTTP client to use. If None, one is created and owned.

        Raises:
            MissingCredentialError: If the API key is empty.
        """
        if not api_key:
            raise MissingCredentialError("Gemini API key not found")

        self._config = config
        self._api_key = api_key
        self._owns_client = client is None
        if client is None:
            client = (
                httpx.AsyncClient(timeout=config.timeout)
                if config.timeout is not None
                else httpx.AsyncClient()
            )
        self._client = client

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    @property
    def endpoint(self) -> str:
        """URL of the generateContent method for the configured model."""
        return f"{self._config.base_url}/models/{self._config.model}:generateContent"

    def build_request_body(self, prompt: str) -> dict[str, Any]:
        """Build the JSON body for a single-turn request."""
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_tokens,
            },
        }

    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the first candidate's text.

        Raises:
            InvalidCredentialError: On 401/403.
            RateLimitError: On 429.
            LLMRequestError: On transport errors or other non-2xx statuses.
            MalformedResponseError: If the body is not the expected JSON.
        """
        log.info(LogEventNames.LLM_REQUEST_START, provider="gemini", model=self.model_name)

        try:
            response = await self._client.post(
                self.endpoint,
                json=self.build_request_body(prompt),
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self._api_key,
                },
            )
        except httpx.HTTPError as e:
            log.error(LogEventNames.LLM_REQUEST_ERROR, provider="gemini", error=str(e))
            raise LLMRequestError(f"Gemini API request failed: {e}") from e

        self._raise_for_status(response)
        text = self._extract_text(response)

        log.info(
            LogEventNames.LLM_REQUEST_COMPLETE,
            provider="gemini",
            response_chars=len(text),
        )
        return text

    def _raise_for_status(self, response: httpx.Response) -> None:
        status = response.status_code
        if response.is_success:
            return

        log.error(
            LogEventNames.LLM_REQUEST_ERROR,
            provider="gemini",
            status=status,
            body=response.text[:500],
        )
        if status in (401, 403):
            raise InvalidCredentialError("Invalid Gemini API key. Please update your API key.")
        if status == 429:
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                "Gemini API rate limit exceeded. Please try again later.",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        raise LLMRequestError(f"Gemini API returned HTTP {status}")

    def _extract_text(self, response: httpx.Response) -> str:
        try:
            data = GenerateContentResponse.model_validate_json(response.content)
        except ValidationError as e:
            log.error("gemini_response_invalid", error=str(e), body=response.text[:200])
            raise MalformedResponseError(INVALID_RESPONSE_MESSAGE) from e

        return data.candidates[0].content.parts[0].text

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()
