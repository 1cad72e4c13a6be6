"""Turning a detected error into a plain-language explanation.

This module implements the ErrorSimplifier class, which renders a fixed
prompt from the error and its code context, sends it to the configured
completion provider once, and returns the reply text.

Every failure is surfaced as a SimplifyError whose message starts with
"Failed to simplify error:"; there is no retry and no backoff.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from bugbuddy.adapters.llm.anthropic import AnthropicAdapter
from bugbuddy.adapters.llm.gemini import GeminiAdapter
from bugbuddy.config.credentials import PROVIDER_LABELS
from bugbuddy.config.schema import LLMConfig
from bugbuddy.interfaces.llm import CompletionProvider
from bugbuddy.models.context import CodeContext
from bugbuddy.utils.async_helpers import (
    BugBuddyError,
    InvalidCredentialError,
    MissingCredentialError,
    SimplifyError,
)
from bugbuddy.utils.logging import LogEventNames
from bugbuddy.utils.security import RedactionError, SecretRedactor

log = structlog.get_logger()

FAILURE_PREFIX = "Failed to simplify error"

PROMPT_TEMPLATE = """\
Please analyze this error as an expert programmer. Format your response in the following sections:
1. 🔍 ERROR SUMMARY: Brief, clear explanation of what went wrong
2. 💡 SOLUTION: Step-by-step fix
3. 🔮 PREVENTION: How to prevent this error in the future

ERROR MESSAGE:
{error_message}

CODE CONTEXT:
Language: {language}
File: {file_name}
Error Line: {error_line}

RELEVANT CODE:
```{language}
{code}
```
{imports_section}"""


def construct_prompt(error_message: str, context: CodeContext) -> str:
    """Render the explanation prompt for an error and its context.

    Args:
        error_message: Detected error text
        context: Gathered code context

    Returns:
        The prompt string
    """
    imports_section = ""
    if context.imports:
        imports_section = "\nIMPORTS/DEPENDENCIES:\n" + "\n".join(context.imports) + "\n"

    return PROMPT_TEMPLATE.format(
        error_message=error_message,
        language=context.language,
        file_name=context.file_name,
        error_line=context.error_line,
        code=context.code,
        imports_section=imports_section,
    )


def create_provider(config: LLMConfig, api_key: str) -> CompletionProvider:
    """Build the adapter for the configured provider."""
    if config.provider == "anthropic":
        return AnthropicAdapter(config.anthropic, api_key)
    return GeminiAdapter(config.gemini, api_key)


ProviderFactory = Callable[[LLMConfig, str], CompletionProvider]


class ErrorSimplifier:
    """Explains errors through a hosted completion endpoint.

    Example:
        simplifier = ErrorSimplifier(config.llm, api_key)
        explanation = await simplifier.simplify_error(match.message, context)
    """

    def __init__(
        self,
        config: LLMConfig,
        api_key: str | None,
        redactor: SecretRedactor | None = None,
        provider_factory: ProviderFactory = create_provider,
    ) -> None:
        """Initialize the simplifier.

        Args:
            config: Completion provider configuration
            api_key: API key for the configured provider; may be None until set
            redactor: Secret redactor applied to the prompt. If None, creates default.
            provider_factory: Builds the provider adapter from config and key
        """
        self._config = config
        self._api_key = api_key or None
        self._redactor = redactor or SecretRedactor()
        self._provider_factory = provider_factory
        self._provider: CompletionProvider | None = None

        if not self._api_key:
            log.info(LogEventNames.CREDENTIAL_MISSING, provider=config.provider)

    @property
    def provider_name(self) -> str:
        """Configured provider, e.g. "gemini"."""
        return self._config.provider

    @property
    def provider_label(self) -> str:
        """Human-readable provider name."""
        return PROVIDER_LABELS.get(self._config.provider, self._config.provider.title())

    @property
    def api_key(self) -> str | None:
        """Current API key."""
        return self._api_key

    @property
    def has_api_key(self) -> bool:
        """True when a non-empty API key is set."""
        return bool(self._api_key)

    async def set_api_key(self, api_key: str) -> None:
        """Replace the API key, dropping any provider built with the old one."""
        self._api_key = api_key or None
        await self.aclose()

    def _get_provider(self) -> CompletionProvider:
        if self._provider is None:
            assert self._api_key is not None
            self._provider = self._provider_factory(self._config, self._api_key)
        return self._provider

    async def simplify_error(self, error_message: str, context: CodeContext) -> str:
        """Ask the completion provider to explain an error.

        Args:
            error_message: Detected error text
            context: Code context around the error

        Returns:
            The explanation text

        Raises:
            MissingCredentialError: If no API key is set; no request is made.
            SimplifyError: If the request fails or the reply is malformed.
        """
        if not self._api_key:
            raise MissingCredentialError(f"{self.provider_label} API key not found")

        log.info(
            LogEventNames.SIMPLIFY_START,
            provider=self.provider_name,
            file_name=context.file_name,
            error_line=context.error_line,
        )

        try:
            prompt = self._redactor.redact(construct_prompt(error_message, context))
        except RedactionError as e:
            raise SimplifyError(f"{FAILURE_PREFIX}: {e}") from e

        try:
            explanation = await self._get_provider().complete(prompt)
        except InvalidCredentialError as e:
            log.warning(LogEventNames.SIMPLIFY_FAILED, error=str(e))
            raise SimplifyError(f"{FAILURE_PREFIX}: {e}", credential_problem=True) from e
        except BugBuddyError as e:
            log.warning(LogEventNames.SIMPLIFY_FAILED, error=str(e))
            raise SimplifyError(f"{FAILURE_PREFIX}: {e}") from e

        log.info(LogEventNames.SIMPLIFY_COMPLETE, response_chars=len(explanation))
        return explanation

    async def aclose(self) -> None:
        """Release the provider's network resources."""
        if self._provider is not None:
            provider, self._provider = self._provider, None
            await provider.aclose()
