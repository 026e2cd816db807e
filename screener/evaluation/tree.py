"""Criteria-tree evaluator — Kleene three-valued logic over criteria groups.

all_of: FAIL dominates, then UNKNOWN, else PASS.
any_of: PASS dominates, then UNKNOWN, else FAIL.

Every child is evaluated; UNKNOWN never short-circuits to a decision.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from screener.errors import EvaluationError
from screener.evaluation.criterion import evaluate_criterion
from screener.rules.model import CriteriaTree, CriterionNode, GroupNode, Program
from screener.schemas.enums import Combinator, GroupKind, Outcome, Verdict

VERDICT_BY_OUTCOME: dict[Outcome, Verdict] = {
    Outcome.PASS: Verdict.ELIGIBLE,
    Outcome.FAIL: Verdict.INELIGIBLE,
    Outcome.UNKNOWN: Verdict.UNDETERMINED,
}


def all_of_outcome(outcomes: Iterable[Outcome]) -> Outcome:
    """Kleene conjunction."""
    seen = set(outcomes)
    if Outcome.FAIL in seen:
        return Outcome.FAIL
    if Outcome.UNKNOWN in seen:
        return Outcome.UNKNOWN
    return Outcome.PASS


def any_of_outcome(outcomes: Iterable[Outcome]) -> Outcome:
    """Kleene disjunction."""
    seen = set(outcomes)
    if Outcome.PASS in seen:
        return Outcome.PASS
    if Outcome.UNKNOWN in seen:
        return Outcome.UNKNOWN
    return Outcome.FAIL


# income_based and program_participation are any_of under another name.
GROUP_COMBINATORS = {
    GroupKind.ALL_OF: all_of_outcome,
    GroupKind.ANY_OF: any_of_outcome,
    GroupKind.INCOME_BASED: any_of_outcome,
    GroupKind.PROGRAM_PARTICIPATION: any_of_outcome,
}

PROGRAM_COMBINATORS = {
    Combinator.AND: all_of_outcome,
    Combinator.OR: any_of_outcome,
}


def evaluate_group(node: CriteriaTree, answers: Mapping[str, Any]) -> Outcome:
    """Evaluate a criteria tree node recursively."""
    if isinstance(node, CriterionNode):
        return evaluate_criterion(node.criterion, answers)
    if isinstance(node, GroupNode):
        combine = GROUP_COMBINATORS.get(node.kind)
        if combine is None:
            msg = f"Unsupported criteria group kind: {node.kind!r}"
            raise EvaluationError(msg)
        return combine([evaluate_group(child, answers) for child in node.children])
    msg = f"Unsupported criteria tree node: {type(node).__name__}"
    raise EvaluationError(msg)


def evaluate_program(program: Program, answers: Mapping[str, Any]) -> Verdict:
    """Combine a program's groups with its top-level combinator.

    Raises:
        EvaluationError: Tagged with the program id, whatever failed inside.
    """
    combine = PROGRAM_COMBINATORS.get(program.combinator)
    if combine is None:
        msg = f"Program {program.id!r} has unsupported combinator {program.combinator!r}"
        raise EvaluationError(msg, program_id=program.id)

    try:
        outcome = combine([evaluate_group(group, answers) for group in program.groups])
    except EvaluationError as exc:
        if exc.program_id is None:
            exc.program_id = program.id
        raise
    return VERDICT_BY_OUTCOME[outcome]
