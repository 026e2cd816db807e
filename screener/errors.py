"""Error taxonomy for the screening engine.

Unknown is never an error: "not enough information" is an evaluation outcome.
These exceptions cover broken configuration, bad caller input, and broken
invariants during recomputation.
"""

from __future__ import annotations


class ScreenerError(Exception):
    """Base class for every error raised by the screener."""


class ConfigError(ScreenerError):
    """The rule configuration is malformed or inconsistent.

    Raised only while loading. A model that failed to load is never returned.
    """


class UnknownQuestionError(ScreenerError):
    """The caller referenced a question id that is not part of the model."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(f"Unknown question: {question_id!r}")


class InvalidAnswerError(ScreenerError):
    """The supplied value cannot be an answer to the given question."""

    def __init__(self, question_id: str, reason: str) -> None:
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"Invalid answer for {question_id!r}: {reason}")


class EvaluationError(ScreenerError):
    """An invariant broke while re-evaluating programs.

    The session that raised it keeps its pre-call answers and verdicts.
    """

    def __init__(self, message: str, program_id: str | None = None) -> None:
        self.program_id = program_id
        super().__init__(message)
