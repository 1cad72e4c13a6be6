"""Core pipeline components.

This module exports the main classes:
- ErrorDetector: Finds error signatures in editor/terminal text
- CodeContextGatherer: Slices the code window around an error line
- ErrorSimplifier: Asks a completion provider to explain an error
- BugBuddySession: Wires detection, context, explanation and display together
- DocumentWatcher: Debounced detection on file changes
"""

from bugbuddy.core.context_gatherer import CodeContextGatherer, extract_imports
from bugbuddy.core.error_detector import ErrorDetector
from bugbuddy.core.session import BugBuddySession
from bugbuddy.core.simplifier import ErrorSimplifier, construct_prompt
from bugbuddy.core.watcher import DocumentWatcher

__all__ = [
    "BugBuddySession",
    "CodeContextGatherer",
    "DocumentWatcher",
    "ErrorDetector",
    "ErrorSimplifier",
    "construct_prompt",
    "extract_imports",
]
