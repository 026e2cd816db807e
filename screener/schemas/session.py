"""Pydantic schemas returned to the host application.

Pure data classes — what the UI needs to show the next question or the
final result page.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from screener.schemas.enums import Completion, Verdict


class AnswerOutcome(BaseModel):
    """Result of delivering one answer to an interview session."""

    changed_verdicts: dict[str, Verdict] = Field(default_factory=dict)
    next_question_id: str | None = None
    completion: Completion = Completion.NONE
    eligible_program_ids: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.completion != Completion.NONE


class ProgramSummary(BaseModel):
    """Display data for one eligible program."""

    id: str
    name: str
    estimated_savings: str | None = None
    application_link: str | None = None
    description: str | None = None


class ScreeningResult(BaseModel):
    """Eligibility snapshot for the results page."""

    completion: Completion
    eligible: list[ProgramSummary] = Field(default_factory=list)
    ineligible_program_ids: list[str] = Field(default_factory=list)
    undetermined_program_ids: list[str] = Field(default_factory=list)


class Progress(BaseModel):
    """How far the interview has come."""

    answered: int
    pending_question_ids: list[str] = Field(default_factory=list)

    @property
    def pending(self) -> int:
        return len(self.pending_question_ids)
