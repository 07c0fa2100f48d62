"""
Exception types raised at load/authoring time.

Runtime operations (commands, conditions, dialogue flow) never raise;
they log and degrade. These exceptions only surface when content is
loaded or validated explicitly.
"""

from __future__ import annotations


class WhisperError(Exception):
    """Base class for all engine errors."""


class ContentError(WhisperError):
    """A content file could not be read, parsed or validated."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message if path is None else f"{path}: {message}")
        self.path = path


class DialogueValidationError(WhisperError):
    """A dialogue tree failed structural validation."""

    def __init__(self, tree_id: str, problems: list[str]):
        summary = "; ".join(problems)
        super().__init__(f"Dialogue tree '{tree_id}' is invalid: {summary}")
        self.tree_id = tree_id
        self.problems = list(problems)
