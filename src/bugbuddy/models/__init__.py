"""Data models and transfer objects."""

from .context import CodeContext
from .document import SourceDocument, language_for_path
from .error import ErrorMatch
from .result import SimplifyOutcome, SimplifyReport

__all__ = [
    # Document models
    "SourceDocument",
    "language_for_path",
    # Detection models
    "ErrorMatch",
    # Context models
    "CodeContext",
    # Result models
    "SimplifyOutcome",
    "SimplifyReport",
]
