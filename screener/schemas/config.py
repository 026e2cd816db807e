"""Pydantic schemas for the raw rule configuration document.

These mirror the JSON document as authors write it (string ids, inline
groups, ``threshold_by_<variable>`` keys). The loader turns a validated
ConfigDocument into the immutable RuleModel; nothing else reads these.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

THRESHOLD_TABLE_PREFIX = "threshold_by_"


class CriteriaImpactSpec(BaseModel):
    """Declares that a question's answer feeds a criterion of a program."""

    criteria_id: str
    program_id: str


class QuestionSpec(BaseModel):
    """One question as configured."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    question: str                       # prompt text, doubles as the id
    type: str                           # boolean, number, dropdown, checkbox, ...
    input_type: str | None = None       # widget hint, e.g. "radio"
    options: list[Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("options", "choices"),
    )
    variable: str | None = None         # e.g. "household_size"
    criteria_impact: list[CriteriaImpactSpec] = Field(default_factory=list)


class CriterionSpec(BaseModel):
    """One criterion as configured.

    Extra keys are kept so ``threshold_by_<variable>`` tables survive parsing.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    comparison: str | None = None
    threshold: Decimal | None = None
    options: list[Any] | None = None
    description: str | None = None

    @property
    def threshold_tables(self) -> dict[str, Any]:
        """``{variable: table}`` for every ``threshold_by_*`` key."""
        extra = self.model_extra or {}
        return {
            key[len(THRESHOLD_TABLE_PREFIX):]: value
            for key, value in extra.items()
            if key.startswith(THRESHOLD_TABLE_PREFIX)
        }


class GroupSpec(BaseModel):
    """A criteria group, inline in a program or declared in ``criteria_groups``."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str
    criteria_ids: list[str | GroupSpec]


class ProgramSpec(BaseModel):
    """One benefit program as configured."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str | None = None
    criteria_logic: str = "AND"
    criteria_ids: list[str | GroupSpec]
    estimated_savings: str | int | float | None = None
    application_link: str | None = None
    description: str | None = None


class ConfigDocument(BaseModel):
    """The whole configuration document."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    description: str | None = None
    programs: list[ProgramSpec]
    criteria: list[CriterionSpec]
    questions: list[QuestionSpec]
    criteria_groups: list[GroupSpec] = Field(default_factory=list)


GroupSpec.model_rebuild()
