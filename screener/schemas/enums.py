"""Domain enums shared by the rule model, evaluators and session schemas.

All enums use str mixin so results serialize straight to JSON.
"""

from __future__ import annotations

from enum import Enum


class Outcome(str, Enum):
    """Three-valued result of evaluating a criterion or a criteria group."""

    PASS = "pass"
    FAIL = "fail"
    UNKNOWN = "unknown"


class Verdict(str, Enum):
    """Reported eligibility of one program."""

    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    UNDETERMINED = "undetermined"


class InputKind(str, Enum):
    """How a question is answered."""

    BOOLEAN = "boolean"
    NUMBER = "number"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"


class Comparison(str, Enum):
    """Operator of a threshold criterion: ``answer <op> bound``."""

    LE = "<="
    GE = ">="


class GroupKind(str, Enum):
    """Combinator of an internal criteria-group node."""

    ALL_OF = "all_of"
    ANY_OF = "any_of"
    INCOME_BASED = "income_based"                    # any_of semantics
    PROGRAM_PARTICIPATION = "program_participation"  # any_of semantics


class Combinator(str, Enum):
    """Top-level combinator of a program over its criteria groups."""

    AND = "AND"
    OR = "OR"


class SessionState(str, Enum):
    """Flow controller states for one interview."""

    COLLECTING = "collecting"
    COMPLETED = "completed"


class Completion(str, Enum):
    """How (and whether) an interview has finished."""

    NONE = "none"                    # still collecting
    NONE_ELIGIBLE = "none_eligible"
    ELIGIBLE_SET = "eligible_set"
