"""Data models for the outcome of a simplify request."""

from dataclasses import dataclass
from enum import Enum


class SimplifyOutcome(Enum):
    """Outcome of a simplify request."""

    SUCCESS = "success"
    MISSING_CREDENTIAL = "missing_credential"
    NO_ACTIVE_DOCUMENT = "no_active_document"
    NO_CONTEXT = "no_context"
    FAILED = "failed"


@dataclass(frozen=True)
class SimplifyReport:
    """What happened when the user asked for an explanation."""

    outcome: SimplifyOutcome
    message: str  # User-facing status or error message
    explanation: str | None = None

    @property
    def ok(self) -> bool:
        """True if an explanation was produced."""
        return self.outcome is SimplifyOutcome.SUCCESS
