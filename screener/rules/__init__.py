"""Rule model — immutable programs, criteria and questions, plus the loader."""

from screener.rules.loader import load_default_model, load_model, load_model_file
from screener.rules.model import (
    CriteriaImpact,
    CriterionNode,
    GroupNode,
    OptionCriterion,
    Program,
    Question,
    RuleModel,
    ThresholdCriterion,
    VariableThresholdCriterion,
)

__all__ = [
    "load_model",
    "load_model_file",
    "load_default_model",
    "RuleModel",
    "Program",
    "Question",
    "CriteriaImpact",
    "CriterionNode",
    "GroupNode",
    "ThresholdCriterion",
    "VariableThresholdCriterion",
    "OptionCriterion",
]
