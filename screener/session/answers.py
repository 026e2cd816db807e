"""Answer normalization — turns raw host input into the values evaluators compare.

Host widgets hand over strings for numbers and booleans; criteria compare
Decimals and configured choice values. Anything that cannot be an answer to
the question is rejected before it reaches the answer set.
"""

from __future__ import annotations

import logging
from typing import Any

from screener.errors import InvalidAnswerError
from screener.rules.model import Question
from screener.rules.values import to_decimal
from screener.schemas.enums import InputKind

logger = logging.getLogger(__name__)


def _reject(question: Question, reason: str) -> InvalidAnswerError:
    logger.warning("Rejected answer for %r: %s", question.id, reason)
    return InvalidAnswerError(question.id, reason)


def _normalize_number(question: Question, value: Any) -> Any:
    number = to_decimal(value)
    if number is None:
        raise _reject(question, f"expected a finite number, got {value!r}")
    return number


def _normalize_boolean(question: Question, value: Any) -> Any:
    choices = question.choices or ()
    if isinstance(value, bool):
        if len(choices) < 2:
            raise _reject(question, "boolean question has no yes/no choices configured")
        return choices[0] if value else choices[1]
    if value not in choices:
        raise _reject(question, f"expected one of {list(choices)}, got {value!r}")
    return value


def _normalize_single(question: Question, value: Any) -> Any:
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        raise _reject(question, f"expected a single value, got {type(value).__name__}")
    if question.choices is not None and value not in question.choices:
        raise _reject(question, f"expected one of {list(question.choices)}, got {value!r}")
    return value


def _normalize_multi(question: Question, value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        selected = sorted(value, key=str)
    elif isinstance(value, (list, tuple)):
        selected = list(value)
    else:
        raise _reject(question, f"expected a list of choices, got {type(value).__name__}")

    if question.choices is not None:
        invalid = [item for item in selected if item not in question.choices]
        if invalid:
            raise _reject(question, f"unknown choices {invalid} (valid: {list(question.choices)})")
    try:
        return tuple(dict.fromkeys(selected))
    except TypeError:
        raise _reject(question, "choices must be plain values") from None


_NORMALIZERS = {
    InputKind.NUMBER: _normalize_number,
    InputKind.BOOLEAN: _normalize_boolean,
    InputKind.SINGLE_CHOICE: _normalize_single,
    InputKind.MULTI_CHOICE: _normalize_multi,
}


def normalize_answer(question: Question, value: Any) -> Any:
    """Validate and normalize a raw answer for ``question``.

    Args:
        question: The question being answered.
        value: Raw value from the host application.

    Returns:
        Decimal for numbers, a configured choice for boolean and single-choice
        questions, a tuple of distinct choices (input order) for multi-choice.

    Raises:
        InvalidAnswerError: If the value is not acceptable for the question.
    """
    if value is None:
        raise _reject(question, "an answer is required")
    return _NORMALIZERS[question.kind](question, value)
