"""Criterion evaluator — one atomic rule against the current answers.

Pure function of (criterion, answers). Missing information is reported as
Outcome.UNKNOWN, never as a failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from screener.errors import EvaluationError
from screener.rules.model import (
    Criterion,
    OptionCriterion,
    ThresholdCriterion,
    VariableThresholdCriterion,
)
from screener.rules.values import index_key, to_decimal
from screener.schemas.enums import Comparison, Outcome

logger = logging.getLogger(__name__)


def _outcome(passed: bool) -> Outcome:
    return Outcome.PASS if passed else Outcome.FAIL


def _compare(criterion_id: str, answer: Any, comparison: Comparison, bound: Decimal) -> Outcome:
    """Compare a numeric answer against a bound."""
    value = to_decimal(answer)
    if value is None:
        msg = f"Criterion {criterion_id!r} received non-numeric answer {answer!r}"
        raise EvaluationError(msg)
    if comparison == Comparison.LE:
        return _outcome(value <= bound)
    if comparison == Comparison.GE:
        return _outcome(value >= bound)
    msg = f"Criterion {criterion_id!r} has unsupported comparison {comparison!r}"
    raise EvaluationError(msg)


def _evaluate_threshold(criterion: ThresholdCriterion, answers: Mapping[str, Any]) -> Outcome:
    if criterion.question_id not in answers:
        return Outcome.UNKNOWN
    return _compare(criterion.id, answers[criterion.question_id], criterion.comparison, criterion.bound)


def _evaluate_variable_threshold(
    criterion: VariableThresholdCriterion,
    answers: Mapping[str, Any],
) -> Outcome:
    if criterion.question_id not in answers or criterion.index_question_id not in answers:
        return Outcome.UNKNOWN

    index_value = answers[criterion.index_question_id]
    bound = criterion.table.get(index_key(index_value))
    if bound is None:
        # No bound for this index value: not enough information to decide.
        logger.debug(
            "Criterion %s: no threshold for %s=%r",
            criterion.id,
            criterion.variable,
            index_value,
        )
        return Outcome.UNKNOWN
    return _compare(criterion.id, answers[criterion.question_id], criterion.comparison, bound)


def _evaluate_options(criterion: OptionCriterion, answers: Mapping[str, Any]) -> Outcome:
    if criterion.question_id not in answers:
        return Outcome.UNKNOWN
    answer = answers[criterion.question_id]
    if isinstance(answer, (list, tuple, set, frozenset)):
        # Multi-choice: any acceptable selection passes.
        return _outcome(any(selected in criterion.options for selected in answer))
    return _outcome(answer in criterion.options)


def evaluate_criterion(criterion: Criterion, answers: Mapping[str, Any]) -> Outcome:
    """Evaluate one criterion.

    Args:
        criterion: A compiled criterion from the RuleModel.
        answers: Question id -> normalized answer.

    Returns:
        PASS or FAIL when the answers decide the criterion, UNKNOWN otherwise.

    Raises:
        EvaluationError: If the criterion is not a known kind or a stored
            answer cannot be compared.
    """
    if isinstance(criterion, ThresholdCriterion):
        result = _evaluate_threshold(criterion, answers)
    elif isinstance(criterion, VariableThresholdCriterion):
        result = _evaluate_variable_threshold(criterion, answers)
    elif isinstance(criterion, OptionCriterion):
        result = _evaluate_options(criterion, answers)
    else:
        msg = f"Unsupported criterion kind: {type(criterion).__name__}"
        raise EvaluationError(msg)

    logger.debug("Criterion %s -> %s", criterion.id, result.value)
    return result
