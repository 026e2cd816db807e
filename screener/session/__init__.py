"""Interview sessions — eligibility tracking and flow control."""

from screener.session.flow import FlowController
from screener.session.interview import InterviewSession, get_verdicts, record_answer, start_session
from screener.session.tracker import EligibilityTracker

__all__ = [
    "InterviewSession",
    "EligibilityTracker",
    "FlowController",
    "start_session",
    "record_answer",
    "get_verdicts",
]
