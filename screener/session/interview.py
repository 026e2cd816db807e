"""Interview session — the host application's single entry point.

Wires the tracker and the flow controller together. The host delivers one
answer at a time and renders whatever the returned AnswerOutcome asks for.

Usage:
    model = load_model(config)
    session = start_session(model)
    while session.next_question_id:
        outcome = record_answer(session, session.next_question_id, ask(...))
    session.result()
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from screener.rules.model import Question, RuleModel
from screener.schemas.enums import Completion, SessionState, Verdict
from screener.schemas.session import AnswerOutcome, ProgramSummary, Progress, ScreeningResult
from screener.session.answers import normalize_answer
from screener.session.flow import FlowController
from screener.session.tracker import EligibilityTracker

logger = logging.getLogger(__name__)


class InterviewSession:
    """One screening interview over a RuleModel."""

    def __init__(self, model: RuleModel, session_id: uuid.UUID | None = None) -> None:
        self.model = model
        self.session_id = session_id or uuid.uuid4()
        self.tracker = EligibilityTracker(model)
        self.flow = FlowController(model, session_id=self.session_id)
        self._advance()
        logger.info(
            "Session %s started: %d programs, first question %r",
            self.session_id,
            len(model.programs),
            self.flow.next_question_id,
        )

    # ── Read-only views ──────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self.flow.current_state

    @property
    def completion(self) -> Completion:
        return self.flow.completion

    @property
    def is_complete(self) -> bool:
        return self.flow.is_terminal

    @property
    def next_question_id(self) -> str | None:
        return self.flow.next_question_id

    def next_question(self) -> Question | None:
        """The question to show next, or None when the interview is over."""
        if self.flow.next_question_id is None:
            return None
        return self.model.question(self.flow.next_question_id)

    def get_verdicts(self) -> dict[str, Verdict]:
        """Snapshot of the verdict table."""
        return self.tracker.get_verdicts()

    def progress(self) -> Progress:
        """Answered count and the questions that could still matter."""
        answered = self.tracker.answers
        pending = [] if self.is_complete else self.flow.rank_questions(self.tracker.get_verdicts(), answered)
        return Progress(answered=len(answered), pending_question_ids=pending)

    def result(self) -> ScreeningResult:
        """Eligibility snapshot for display (valid at any point of the interview)."""
        verdicts = self.tracker.get_verdicts()
        eligible = [
            ProgramSummary(
                id=program.id,
                name=program.name,
                estimated_savings=program.estimated_savings,
                application_link=program.application_link,
                description=program.description,
            )
            for program in self.model.programs.values()
            if verdicts[program.id] == Verdict.ELIGIBLE
        ]
        return ScreeningResult(
            completion=self.completion,
            eligible=eligible,
            ineligible_program_ids=[pid for pid, v in verdicts.items() if v == Verdict.INELIGIBLE],
            undetermined_program_ids=[pid for pid, v in verdicts.items() if v == Verdict.UNDETERMINED],
        )

    # ── Mutations ────────────────────────────────────────────────────

    def record_answer(self, question_id: str, value: Any) -> AnswerOutcome:
        """Deliver one answer.

        Answers arriving after completion are discarded.

        Args:
            question_id: Id (prompt text) of the answered question.
            value: Raw answer from the host application.

        Returns:
            Changed verdicts, the next question to show, and the completion status.

        Raises:
            UnknownQuestionError: If the question is not in the model.
            InvalidAnswerError: If the value is not a valid answer to the question.
            EvaluationError: If recomputation failed. Session state is unchanged.
        """
        question = self.model.question(question_id)

        if self.is_complete:
            logger.info(
                "Session %s already completed; ignoring answer to %r",
                self.session_id,
                question_id,
            )
            return self._outcome({})

        normalized = normalize_answer(question, value)
        changed = self.tracker.record_answer(question_id, normalized)
        self._advance()
        return self._outcome(changed)

    def restart(self) -> None:
        """Clear all answers and start the interview over."""
        self.tracker.reset()
        self.flow.restart()
        self._advance()
        logger.info("Session %s restarted", self.session_id)

    def _advance(self) -> None:
        self.flow.advance(self.tracker.get_verdicts(), self.tracker.answers)

    def _outcome(self, changed: dict[str, Verdict]) -> AnswerOutcome:
        return AnswerOutcome(
            changed_verdicts=changed,
            next_question_id=self.flow.next_question_id,
            completion=self.flow.completion,
            eligible_program_ids=self.tracker.programs_with(Verdict.ELIGIBLE),
        )


# ---------------------------------------------------------------------------
# Functional API
# ---------------------------------------------------------------------------


def start_session(model: RuleModel, session_id: uuid.UUID | None = None) -> InterviewSession:
    """Open a new interview over ``model``."""
    return InterviewSession(model, session_id=session_id)


def record_answer(session: InterviewSession, question_id: str, value: Any) -> AnswerOutcome:
    """Deliver one answer to ``session``. See InterviewSession.record_answer."""
    return session.record_answer(question_id, value)


def get_verdicts(session: InterviewSession) -> dict[str, Verdict]:
    """Read-only snapshot of ``session``'s verdict table."""
    return session.get_verdicts()
