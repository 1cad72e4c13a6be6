"""Protocol definitions for pluggable adapters."""

from .llm import CompletionProvider

__all__ = ["CompletionProvider"]
