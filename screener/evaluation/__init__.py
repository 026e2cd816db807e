"""Evaluators — three-valued criterion and criteria-tree evaluation."""

from screener.evaluation.criterion import evaluate_criterion
from screener.evaluation.tree import all_of_outcome, any_of_outcome, evaluate_group, evaluate_program

__all__ = [
    "evaluate_criterion",
    "evaluate_group",
    "evaluate_program",
    "all_of_outcome",
    "any_of_outcome",
]
