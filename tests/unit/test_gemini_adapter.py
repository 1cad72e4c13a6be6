"""Tests for Gemini LLM adapter."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from bugbuddy.adapters.llm.gemini import GeminiAdapter
from bugbuddy.config.schema import GeminiConfig
from bugbuddy.utils.async_helpers import (
    InvalidCredentialError,
    LLMRequestError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
)

API_KEY = "AIza-test-key"

SUCCESS_BODY = {
    "candidates": [
        {
            "content": {
                "role": "model",
                "parts": [{"text": "🔍 ERROR SUMMARY: count is zero."}],
            },
            "finishReason": "STOP",
        }
    ]
}


def make_adapter(
    handler: Callable[[httpx.Request], httpx.Response],
    config: GeminiConfig | None = None,
) -> GeminiAdapter:
    """Build an adapter whose client answers with the given handler."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiAdapter(config or GeminiConfig(), API_KEY, client=client)


class TestGeminiAdapterInit:
    """Test GeminiAdapter initialization."""

    def test_empty_key_rejected(self) -> None:
        """Test that an empty key is a missing credential."""
        with pytest.raises(MissingCredentialError):
            GeminiAdapter(GeminiConfig(), "")

    def test_model_name_property(self) -> None:
        """Test model_name property."""
        adapter = GeminiAdapter(GeminiConfig(model="gemini-1.5-pro"), API_KEY)
        assert adapter.model_name == "gemini-1.5-pro"

    def test_endpoint(self) -> None:
        """Test the generateContent URL."""
        adapter = GeminiAdapter(GeminiConfig(), API_KEY)
        assert adapter.endpoint == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.0-flash:generateContent"
        )

    def test_request_body(self) -> None:
        """Test the single-turn body and generation settings."""
        adapter = GeminiAdapter(GeminiConfig(), API_KEY)

        body = adapter.build_request_body("explain")

        assert body == {
            "contents": [{"role": "user", "parts": [{"text": "explain"}]}],
            "generationConfig": {"temperature": 0.7, "maxOutputTokens": 1000},
        }


class TestGeminiAdapterComplete:
    """Test the complete method."""

    @pytest.mark.asyncio
    async def test_returns_first_candidate_text(self) -> None:
        """Test a successful request."""
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json=SUCCESS_BODY)

        adapter = make_adapter(handler)

        text = await adapter.complete("explain this")

        assert text == "🔍 ERROR SUMMARY: count is zero."
        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path.endswith("/models/gemini-2.0-flash:generateContent")
        assert request.headers["x-goog-api-key"] == API_KEY
        assert API_KEY not in str(request.url)
        sent = json.loads(request.content)
        assert sent["contents"][0]["parts"][0]["text"] == "explain this"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_key(self, status: int) -> None:
        """Test that auth failures ask for a new key."""
        adapter = make_adapter(lambda request: httpx.Response(status, json={"error": {}}))

        with pytest.raises(InvalidCredentialError, match="Invalid Gemini API key"):
            await adapter.complete("explain")

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        """Test that 429 maps to RateLimitError with retry-after."""
        adapter = make_adapter(
            lambda request: httpx.Response(429, headers={"retry-after": "30"}, json={})
        )

        with pytest.raises(RateLimitError) as exc_info:
            await adapter.complete("explain")

        assert str(exc_info.value) == "Gemini API rate limit exceeded. Please try again later."
        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self) -> None:
        """Test that other statuses fail after one request."""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(503, text="unavailable")

        adapter = make_adapter(handler)

        with pytest.raises(LLMRequestError, match="HTTP 503"):
            await adapter.complete("explain")
        assert calls == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"not json",
            b"{}",
            b'{"candidates": []}',
            b'{"candidates": [{"content": {"parts": []}}]}',
            b'{"candidates": [{"content": {"parts": [{"inlineData": {}}]}}]}',
        ],
    )
    async def test_malformed_body(self, body: bytes) -> None:
        """Test that unexpected bodies raise the generic invalid-response error."""
        adapter = make_adapter(lambda request: httpx.Response(200, content=body))

        with pytest.raises(MalformedResponseError, match="^Invalid response from Gemini API$"):
            await adapter.complete("explain")

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        """Test that connection failures become LLMRequestError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        adapter = make_adapter(handler)

        with pytest.raises(LLMRequestError, match="request failed"):
            await adapter.complete("explain")

    @pytest.mark.asyncio
    async def test_custom_base_url(self) -> None:
        """Test that the configured base URL is used."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=SUCCESS_BODY)

        config = GeminiConfig(base_url="https://proxy.example.com/v1/", model="gemini-pro")
        adapter = make_adapter(handler, config)

        await adapter.complete("explain")

        assert seen == ["https://proxy.example.com/v1/models/gemini-pro:generateContent"]


class TestGeminiAdapterClose:
    """Test client ownership."""

    @pytest.mark.asyncio
    async def test_borrowed_client_left_open(self) -> None:
        """Test that a passed-in client is not closed."""
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200))
        )
        adapter = GeminiAdapter(GeminiConfig(), API_KEY, client=client)

        await adapter.aclose()

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        """Test that an adapter-created client is closed."""
        adapter = GeminiAdapter(GeminiConfig(), API_KEY)

        await adapter.aclose()

        assert adapter._client.is_closed is True
