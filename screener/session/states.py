"""Flow controller state definitions and transition map.

An interview collects answers until every program is decided (or no
remaining question can decide anything), then completes. Completed is
terminal except for an explicit restart.
"""

from __future__ import annotations

from screener.schemas.enums import SessionState

# Transition map: {current_state: {trigger_name: next_state}}
# Triggers are chosen by FlowController.advance() after each recomputation.
TRANSITIONS: dict[SessionState, dict[str, SessionState]] = {
    SessionState.COLLECTING: {
        "continue": SessionState.COLLECTING,   # ask another question
        "decided": SessionState.COMPLETED,     # no program left undetermined
        "exhausted": SessionState.COMPLETED,   # no question can decide the rest
    },
    SessionState.COMPLETED: {},
}

# Every state can go back to the start via an explicit restart
UNIVERSAL_TRANSITIONS: dict[str, SessionState] = {
    "restart": SessionState.COLLECTING,
}
