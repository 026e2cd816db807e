"""Benefit screener — rule-based eligibility evaluation for incremental interviews."""

from screener.errors import (
    ConfigError,
    EvaluationError,
    InvalidAnswerError,
    ScreenerError,
    UnknownQuestionError,
)
from screener.rules import RuleModel, load_default_model, load_model, load_model_file
from screener.schemas.enums import Completion, Outcome, SessionState, Verdict
from screener.schemas.session import AnswerOutcome, ProgramSummary, Progress, ScreeningResult
from screener.session import InterviewSession, get_verdicts, record_answer, start_session

__all__ = [
    "load_model",
    "load_model_file",
    "load_default_model",
    "start_session",
    "record_answer",
    "get_verdicts",
    "RuleModel",
    "InterviewSession",
    "AnswerOutcome",
    "ScreeningResult",
    "ProgramSummary",
    "Progress",
    "Outcome",
    "Verdict",
    "Completion",
    "SessionState",
    "ScreenerError",
    "ConfigError",
    "UnknownQuestionError",
    "InvalidAnswerError",
    "EvaluationError",
]
