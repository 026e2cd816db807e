"""Flow controller — finite state machine deciding what the interview does next.

After every recomputation, advance() looks at the verdict table and either
picks the next question or completes the interview. The question picked is
the unanswered one touching the most still-undetermined programs, ties going
to the question configured first.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Collection, Mapping

from screener.rules.model import RuleModel
from screener.schemas.enums import Completion, SessionState, Verdict
from screener.session.states import TRANSITIONS, UNIVERSAL_TRANSITIONS

logger = logging.getLogger(__name__)


class FlowController:
    """Manages interview state transitions for a single session."""

    def __init__(
        self,
        model: RuleModel,
        session_id: uuid.UUID | None = None,
        initial_state: SessionState = SessionState.COLLECTING,
    ) -> None:
        self.model = model
        self.session_id = session_id or uuid.uuid4()
        self.current_state = initial_state
        self.completion = Completion.NONE
        self.next_question_id: str | None = None

    def can_transition(self, trigger: str) -> bool:
        """Check if a trigger is valid from the current state."""
        if trigger in UNIVERSAL_TRANSITIONS:
            return True
        return trigger in TRANSITIONS.get(self.current_state, {})

    def get_valid_triggers(self) -> list[str]:
        """Return all valid trigger names for the current state."""
        triggers = list(TRANSITIONS.get(self.current_state, {}).keys())
        triggers.extend(UNIVERSAL_TRANSITIONS.keys())
        return triggers

    def transition(self, trigger: str) -> SessionState:
        """Execute a state transition.

        Raises:
            ValueError: If the trigger is not valid from the current state.
        """
        old_state = self.current_state

        if trigger in UNIVERSAL_TRANSITIONS:
            self.current_state = UNIVERSAL_TRANSITIONS[trigger]
        else:
            state_transitions = TRANSITIONS.get(self.current_state, {})
            if trigger not in state_transitions:
                msg = (
                    f"Invalid transition: {self.current_state.value} --{trigger}--> ??? "
                    f"(valid: {list(state_transitions.keys())})"
                )
                raise ValueError(msg)
            self.current_state = state_transitions[trigger]

        if old_state != self.current_state:
            logger.info(
                "State transition: %s --%s--> %s (session=%s)",
                old_state.value,
                trigger,
                self.current_state.value,
                self.session_id,
            )
        return self.current_state

    @property
    def is_terminal(self) -> bool:
        """Check if the current state is a terminal state."""
        return len(TRANSITIONS.get(self.current_state, {})) == 0

    # ── Question selection ───────────────────────────────────────────

    def rank_questions(
        self,
        verdicts: Mapping[str, Verdict],
        answered: Collection[str],
    ) -> list[str]:
        """Unanswered questions that can still move an undetermined program.

        Ordered by number of undetermined programs touched (desc), then by
        configured position.
        """
        remaining = frozenset(pid for pid, v in verdicts.items() if v == Verdict.UNDETERMINED)
        scored: list[tuple[int, int, str]] = []
        for question in self.model.questions.values():
            if question.id in answered:
                continue
            touched = len(self.model.programs_affected_by(question.id) & remaining)
            if touched:
                scored.append((-touched, question.position, question.id))
        scored.sort()
        return [question_id for _, _, question_id in scored]

    def select_next_question(
        self,
        verdicts: Mapping[str, Verdict],
        answered: Collection[str],
    ) -> str | None:
        """The most informative unanswered question, or None if none helps."""
        ranked = self.rank_questions(verdicts, answered)
        return ranked[0] if ranked else None

    # ── Driving the machine ──────────────────────────────────────────

    def advance(self, verdicts: Mapping[str, Verdict], answered: Collection[str]) -> Completion:
        """Decide the next step from the current verdict table.

        Returns:
            The completion status after this step (Completion.NONE while collecting).
        """
        if self.is_terminal:
            return self.completion

        remaining = [pid for pid, v in verdicts.items() if v == Verdict.UNDETERMINED]
        next_question_id = self.select_next_question(verdicts, answered) if remaining else None

        if not remaining:
            self._complete("decided", verdicts)
        elif next_question_id is None:
            logger.info(
                "No remaining question can decide %s (session=%s)",
                remaining,
                self.session_id,
            )
            self._complete("exhausted", verdicts)
        else:
            self.transition("continue")
            self.next_question_id = next_question_id
            logger.debug("Next question: %r (%d programs undetermined)", next_question_id, len(remaining))
        return self.completion

    def restart(self) -> None:
        """Return to COLLECTING with no pending question."""
        self.transition("restart")
        self.completion = Completion.NONE
        self.next_question_id = None

    def _complete(self, trigger: str, verdicts: Mapping[str, Verdict]) -> None:
        self.transition(trigger)
        self.next_question_id = None
        eligible = [pid for pid, v in verdicts.items() if v == Verdict.ELIGIBLE]
        self.completion = Completion.ELIGIBLE_SET if eligible else Completion.NONE_ELIGIBLE
        logger.info(
            "Interview completed: %s, eligible=%s (session=%s)",
            self.completion.value,
            eligible,
            self.session_id,
        )
