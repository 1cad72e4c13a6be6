"""Concrete implementations of provider interfaces."""

from .llm.anthropic import AnthropicAdapter
from .llm.gemini import GeminiAdapter

__all__ = [
    "AnthropicAdapter",
    "GeminiAdapter",
]
