"""Eligibility tracker — owns the answer set and the program verdict table.

Verdicts are always derived from the answers; nothing is locked in. Only
programs that depend on the answered question are recomputed, which yields
the same table as recomputing everything.

record_answer() is atomic: the new answer and the new verdicts are computed
on copies and swapped in only when every affected program evaluated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from screener.errors import EvaluationError
from screener.evaluation.tree import evaluate_program
from screener.rules.model import RuleModel
from screener.schemas.enums import Verdict

logger = logging.getLogger(__name__)


class EligibilityTracker:
    """Running verdict table for one interview."""

    def __init__(self, model: RuleModel) -> None:
        self.model = model
        self._answers: dict[str, Any] = {}
        self._verdicts: dict[str, Verdict] = {pid: Verdict.UNDETERMINED for pid in model.programs}

    @property
    def answers(self) -> Mapping[str, Any]:
        """Read-only snapshot of the answer set."""
        return MappingProxyType(dict(self._answers))

    def get_verdicts(self) -> dict[str, Verdict]:
        """Snapshot of the verdict table, in configured program order."""
        return dict(self._verdicts)

    def programs_with(self, verdict: Verdict) -> list[str]:
        return [pid for pid, v in self._verdicts.items() if v == verdict]

    def record_answer(self, question_id: str, value: Any) -> dict[str, Verdict]:
        """Store an (already normalized) answer and recompute affected programs.

        Re-answering a question replaces its previous value.

        Args:
            question_id: Id of a question in the model.
            value: Normalized answer value.

        Returns:
            ``{program_id: new_verdict}`` for programs whose verdict changed.

        Raises:
            UnknownQuestionError: If the question is not in the model.
            EvaluationError: If a program cannot be evaluated. Nothing is committed.
        """
        self.model.question(question_id)

        answers = dict(self._answers)
        answers[question_id] = value
        affected = self.model.programs_affected_by(question_id)

        recomputed = self._evaluate(affected, answers)

        changed = {pid: v for pid, v in recomputed.items() if self._verdicts[pid] != v}
        self._answers = answers
        self._verdicts.update(recomputed)

        logger.debug(
            "Answer recorded for %r: %d programs recomputed, %d changed",
            question_id,
            len(recomputed),
            len(changed),
        )
        for pid, verdict in changed.items():
            logger.info("Program %s is now %s", pid, verdict.value)
        return changed

    def recompute_all(self) -> dict[str, Verdict]:
        """Recompute every program from the current answers.

        Returns the programs whose verdict differs from the table. With a
        consistent dependency map this is always empty.
        """
        recomputed = self._evaluate(self.model.programs, self._answers)
        changed = {pid: v for pid, v in recomputed.items() if self._verdicts[pid] != v}
        if changed:
            logger.warning("Full recomputation changed verdicts: %s", changed)
        self._verdicts.update(recomputed)
        return changed

    def reset(self) -> None:
        """Clear all answers; every program goes back to UNDETERMINED."""
        self._answers = {}
        self._verdicts = {pid: Verdict.UNDETERMINED for pid in self.model.programs}

    def _evaluate(self, program_ids: Iterable[str], answers: Mapping[str, Any]) -> dict[str, Verdict]:
        """Evaluate programs against ``answers`` without touching state."""
        results: dict[str, Verdict] = {}
        for pid in program_ids:
            program = self.model.programs[pid]
            try:
                results[pid] = evaluate_program(program, answers)
            except EvaluationError:
                logger.exception("Evaluation failed for program %s", pid)
                raise
            except (ArithmeticError, LookupError, TypeError, ValueError) as exc:
                logger.exception("Evaluation failed for program %s", pid)
                msg = f"Program {pid!r} could not be evaluated: {exc}"
                raise EvaluationError(msg, program_id=pid) from exc
        # Keep configured order regardless of the iteration order of program_ids.
        return {pid: results[pid] for pid in self.model.programs if pid in results}
