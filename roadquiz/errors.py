from __future__ import annotations

"""Error kinds raised across the quiz engine."""


class QuizError(Exception):
    """Base class for every error raised by roadquiz."""


class DataLoadError(QuizError):
    """Question source missing, unreadable, or empty."""


class MalformedRowError(QuizError):
    """A single source row could not be turned into a question."""

    def __init__(self, line: int, reason: str) -> None:
        super().__init__(f"row {line}: {reason}")
        self.line = line
        self.reason = reason


class OutOfRangeError(QuizError, IndexError):
    """Stage or chapter number outside the configured layout."""


class EmptyRunError(QuizError):
    """No questions are available for a run."""


class PersistenceError(QuizError):
    """The key-value store failed to load or save a value."""


class InvalidTransitionError(QuizError):
    """Engine call not allowed in the current run state."""


class DevToolsDisabledError(QuizError):
    """A developer-only operation was requested without dev tools enabled."""
