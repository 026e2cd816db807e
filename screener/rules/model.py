"""Immutable rule model: questions, criteria, criteria trees and programs.

Built once by ``screener.rules.loader.load_model``. Every reference in here
has already been resolved and validated, so evaluators never look anything
up by string.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from screener.errors import UnknownQuestionError
from screener.schemas.enums import Combinator, Comparison, GroupKind, InputKind


@dataclass(frozen=True)
class CriteriaImpact:
    """A question's answer can affect ``criteria_id`` of ``program_id``."""

    criteria_id: str
    program_id: str


@dataclass(frozen=True)
class Question:
    """A question the host application can ask."""

    id: str
    kind: InputKind
    choices: tuple[Any, ...] | None
    variable: str | None
    criteria_impact: tuple[CriteriaImpact, ...]
    position: int  # index in configured order, used for tie-breaks


# ── Criteria (closed variant) ────────────────────────────────────────


@dataclass(frozen=True)
class ThresholdCriterion:
    """``answer <comparison> bound`` against a numeric answer."""

    id: str
    question_id: str
    comparison: Comparison
    bound: Decimal

    @property
    def question_ids(self) -> tuple[str, ...]:
        return (self.question_id,)


@dataclass(frozen=True)
class VariableThresholdCriterion:
    """Threshold whose bound is looked up by another question's answer.

    ``table`` keys are normalized index values (see ``index_key``).
    """

    id: str
    question_id: str
    comparison: Comparison
    variable: str
    index_question_id: str
    table: Mapping[Any, Decimal]

    @property
    def question_ids(self) -> tuple[str, ...]:
        return (self.question_id, self.index_question_id)


@dataclass(frozen=True)
class OptionCriterion:
    """Passes when the answer is one of ``options``."""

    id: str
    question_id: str
    options: tuple[Any, ...]

    @property
    def question_ids(self) -> tuple[str, ...]:
        return (self.question_id,)


Criterion = ThresholdCriterion | VariableThresholdCriterion | OptionCriterion


# ── Criteria trees ───────────────────────────────────────────────────


@dataclass(frozen=True)
class CriterionNode:
    """Leaf of a criteria tree."""

    criterion: Criterion


@dataclass(frozen=True)
class GroupNode:
    """Internal node combining its children with ``kind``."""

    kind: GroupKind
    children: tuple[CriteriaTree, ...]
    id: str | None = None


CriteriaTree = CriterionNode | GroupNode


def walk_criteria(node: CriteriaTree) -> Iterator[Criterion]:
    """Yield every criterion reachable from ``node``, depth first."""
    if isinstance(node, CriterionNode):
        yield node.criterion
        return
    for child in node.children:
        yield from walk_criteria(child)


@dataclass(frozen=True)
class Program:
    """A benefit program and the criteria trees that decide it."""

    id: str
    name: str
    combinator: Combinator
    groups: tuple[CriteriaTree, ...]
    estimated_savings: str | None = None
    application_link: str | None = None
    description: str | None = None

    def criteria(self) -> Iterator[Criterion]:
        for group in self.groups:
            yield from walk_criteria(group)


# ── Model ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RuleModel:
    """Everything the engine needs, with dependency maps precomputed.

    Mappings preserve configured order.
    """

    programs: Mapping[str, Program]
    criteria: Mapping[str, Criterion]
    questions: Mapping[str, Question]
    program_dependencies: Mapping[str, frozenset[str]]  # program id -> question ids
    question_programs: Mapping[str, frozenset[str]]     # question id -> program ids
    title: str | None = None
    description: str | None = None

    @property
    def program_ids(self) -> tuple[str, ...]:
        return tuple(self.programs)

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(self.questions)

    def question(self, question_id: str) -> Question:
        """Return a question by id.

        Raises:
            UnknownQuestionError: If the id is not part of this model.
        """
        try:
            return self.questions[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    def programs_affected_by(self, question_id: str) -> frozenset[str]:
        """Programs whose verdict can change when ``question_id`` is answered."""
        return self.question_programs.get(question_id, frozenset())
