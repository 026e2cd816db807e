"""End-to-end interview tests.

Covers: the Lifeline scenario, early stop, exhaustion, all-ineligible
completion, answers after completion, rejected answers, restart, progress
and result snapshots, and a walkthrough of the bundled configuration.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from screener.errors import InvalidAnswerError, UnknownQuestionError
from screener.rules.loader import load_default_model, load_model
from screener.schemas.enums import Completion, SessionState, Verdict
from screener.session import get_verdicts, record_answer, start_session

VETERAN = "Are you a veteran?"
HOUSEHOLD = "What is your household size?"
INCOME = "What is your monthly income?"
AGE = "How old are you?"
DISABLED = "Do you have a disability?"


class TestLifeline:
    """household size → monthly income → eligible or ineligible."""

    def test_first_question_is_household(self, lifeline_model):
        session = start_session(lifeline_model)
        assert session.next_question_id == HOUSEHOLD
        assert session.state == SessionState.COLLECTING

    def test_eligible(self, lifeline_model):
        session = start_session(lifeline_model)
        record_answer(session, HOUSEHOLD, "2")
        outcome = record_answer(session, INCOME, "1800")

        assert outcome.changed_verdicts == {"lifeline": Verdict.ELIGIBLE}
        assert outcome.completion == Completion.ELIGIBLE_SET
        assert outcome.is_complete
        assert outcome.next_question_id is None
        assert outcome.eligible_program_ids == ["lifeline"]

    def test_ineligible(self, lifeline_model):
        session = start_session(lifeline_model)
        record_answer(session, HOUSEHOLD, 2)
        outcome = record_answer(session, INCOME, 2100)

        assert outcome.changed_verdicts == {"lifeline": Verdict.INELIGIBLE}
        assert outcome.completion == Completion.NONE_ELIGIBLE

    def test_income_before_household(self, lifeline_model):
        session = start_session(lifeline_model)
        outcome = record_answer(session, INCOME, 1800)

        assert outcome.changed_verdicts == {}
        assert get_verdicts(session) == {"lifeline": Verdict.UNDETERMINED}
        assert outcome.next_question_id == HOUSEHOLD
        assert not outcome.is_complete


class TestScreenerFlow:
    """Three programs: ordering, early stop, exhaustion, restart."""

    def test_question_order(self, screener_model):
        session = start_session(screener_model)
        assert session.next_question_id == AGE

        outcome = session.record_answer(AGE, 30)
        assert outcome.changed_verdicts == {}
        assert outcome.next_question_id == VETERAN

    def test_all_ineligible(self, screener_model):
        session = start_session(screener_model)
        asked = []
        for answer in {AGE: 30, VETERAN: "No", HOUSEHOLD: 2, INCOME: 2500, DISABLED: False}.values():
            asked.append(session.next_question_id)
            outcome = session.record_answer(session.next_question_id, answer)

        assert asked == [AGE, VETERAN, HOUSEHOLD, INCOME, DISABLED]
        assert outcome.completion == Completion.NONE_ELIGIBLE
        assert outcome.next_question_id is None
        assert set(session.get_verdicts().values()) == {Verdict.INELIGIBLE}

        outcome = session.record_answer(AGE, 70)

        assert outcome.changed_verdicts == {}
        assert outcome.next_question_id is None
        assert outcome.completion == Completion.NONE_ELIGIBLE
        assert set(session.get_verdicts().values()) == {Verdict.INELIGIBLE}

    def test_custom_boolean_labels(self, screener_config):
        screener_config["questions"][0]["options"] = ["Sí", "No"]
        screener_config["criteria"][1]["options"] = [True]
        session = start_session(load_model(screener_config))

        session.record_answer(AGE, 30)
        outcome = session.record_answer(VETERAN, True)

        assert session.tracker.answers[VETERAN] == "Sí"
        assert outcome.changed_verdicts == {"veterans": Verdict.ELIGIBLE}

    def test_early_stop_skips_irrelevant_questions(self, screener_model):
        session = start_session(screener_model)
        asked = []
        for answer in (70, True, 1, 1000):
            asked.append(session.next_question_id)
            outcome = session.record_answer(session.next_question_id, answer)

        assert asked == [AGE, VETERAN, HOUSEHOLD, INCOME]
        assert outcome.completion == Completion.ELIGIBLE_SET
        assert outcome.eligible_program_ids == ["lifeline", "veterans", "seniors"]
        assert DISABLED not in session.tracker.answers

    def test_exhausted_leaves_program_undetermined(self, screener_model):
        session = start_session(screener_model)
        for question_id, answer in [(AGE, 30), (VETERAN, "No"), (HOUSEHOLD, 3), (INCOME, 1000)]:
            outcome = session.record_answer(question_id, answer)
        assert outcome.next_question_id == DISABLED

        outcome = session.record_answer(DISABLED, "No")

        assert session.state == SessionState.COMPLETED
        assert outcome.completion == Completion.NONE_ELIGIBLE
        assert session.get_verdicts()["lifeline"] == Verdict.UNDETERMINED

    def test_answers_after_completion_ignored(self, screener_model):
        session = start_session(screener_model)
        for question_id, answer in [(AGE, 70), (VETERAN, "Yes"), (HOUSEHOLD, 1), (INCOME, 1000)]:
            session.record_answer(question_id, answer)
        assert session.is_complete
        before = session.get_verdicts()

        outcome = session.record_answer(INCOME, 99999)

        assert outcome.changed_verdicts == {}
        assert outcome.completion == Completion.ELIGIBLE_SET
        assert session.get_verdicts() == before
        assert session.tracker.answers[INCOME] == Decimal("1000")

    def test_unknown_question_after_completion_raises(self, screener_model):
        session = start_session(screener_model)
        session.flow.advance(dict.fromkeys(screener_model.programs, Verdict.INELIGIBLE), answered=())
        assert session.is_complete

        with pytest.raises(UnknownQuestionError):
            session.record_answer("Where do you live?", "Nowhere")

    def test_invalid_answer_leaves_state_unchanged(self, screener_model):
        session = start_session(screener_model)
        session.record_answer(AGE, 30)

        with pytest.raises(InvalidAnswerError):
            session.record_answer(INCOME, "a lot")

        assert dict(session.tracker.answers) == {AGE: Decimal("30")}
        assert session.next_question_id == VETERAN

    def test_restart(self, screener_model):
        session = start_session(screener_model)
        for question_id, answer in [(AGE, 70), (VETERAN, "Yes"), (HOUSEHOLD, 1), (INCOME, 1000)]:
            session.record_answer(question_id, answer)

        session.restart()

        assert session.state == SessionState.COLLECTING
        assert session.completion == Completion.NONE
        assert session.next_question_id == AGE
        assert session.tracker.answers == {}


class TestSnapshots:
    """progress() and result() at any point of the interview."""

    def test_progress(self, screener_model):
        session = start_session(screener_model)
        session.record_answer(AGE, 70)

        progress = session.progress()

        assert progress.answered == 1
        # seniors is decided, so the disability question no longer matters
        assert progress.pending_question_ids == [VETERAN, HOUSEHOLD, INCOME]
        assert progress.pending == 3

    def test_progress_after_completion(self, lifeline_model):
        session = start_session(lifeline_model)
        session.record_answer(HOUSEHOLD, 1)
        session.record_answer(INCOME, 900)
        assert session.progress().pending == 0

    def test_result_mid_interview(self, screener_model):
        session = start_session(screener_model)
        session.record_answer(AGE, 70)
        session.record_answer(VETERAN, "No")

        result = session.result()

        assert result.completion == Completion.NONE
        assert [program.id for program in result.eligible] == ["seniors"]
        assert result.eligible[0].name == "Senior Support"
        assert result.ineligible_program_ids == ["veterans"]
        assert result.undetermined_program_ids == ["lifeline"]

    def test_next_question(self, lifeline_model):
        session = start_session(lifeline_model)
        question = session.next_question()
        assert question is not None
        assert question.variable == "household_size"


class TestBundledConfiguration:
    """The rule file shipped in data/."""

    def test_walkthrough(self):
        session = start_session(load_default_model())
        answers = {
            "What is your household size?": 2,
            "What is your total monthly household income?": 2000,
            "Do you live in California?": "Yes",
            "Are you a U.S. citizen or qualified non-citizen?": "Yes",
        }

        asked = []
        while session.next_question_id is not None:
            asked.append(session.next_question_id)
            outcome = session.record_answer(session.next_question_id, answers[session.next_question_id])

        assert asked == list(answers)
        assert outcome.completion == Completion.ELIGIBLE_SET
        assert set(session.get_verdicts().values()) == {Verdict.ELIGIBLE}
        assert session.progress().answered == 4

    def test_participation_alone_qualifies_for_lifeline(self):
        session = start_session(load_default_model())
        outcome = session.record_answer("Which of these programs do you currently participate in?", ["SSI"])
        assert outcome.changed_verdicts == {"lifeline": Verdict.ELIGIBLE}
