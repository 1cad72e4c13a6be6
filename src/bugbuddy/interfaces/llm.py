"""Abstract interface for completion endpoint integrations."""

from typing import Protocol


class CompletionProvider(Protocol):
    """Abstract interface for hosted text-generation APIs.

    This protocol defines the contract that all completion adapters
    (Gemini, Anthropic, ...) must implement. An adapter sends exactly one
    request per call and never retries.
    """

    async def complete(self, prompt: str) -> str:
        """
        Turn a prompt into natural-language text.

        Security: The prompt MUST be redacted using SecretRedactor
        before being passed to this method.

        Args:
            prompt: Fully rendered prompt (must be redacted)

        Returns:
            The generated text

        Raises:
            InvalidCredentialError: If the API key is rejected
            RateLimitError: If rate limit exceeded
            LLMRequestError: On transport failures or other non-2xx responses
            MalformedResponseError: If the response lacks the expected fields
        """
        ...

    @property
    def model_name(self) -> str:
        """
        Return the model identifier being used.

        Examples:
            - "gemini-2.0-flash"
            - "claude-3-5-haiku-20241022"
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        ...
