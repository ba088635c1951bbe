"""Race one request across several endpoints: dispatch, deadline and coordination."""

from .context import DeadlineContext, deadline_scope
from .dispatcher import (
    Dispatcher,
    Outcome,
    OutcomeStream,
    Response,
    send_or_abandon,
)
from .coordinator import RaceState, race, race_sync, race_targets

__all__ = [
    "DeadlineContext",
    "deadline_scope",
    "Dispatcher",
    "Outcome",
    "OutcomeStream",
    "Response",
    "send_or_abandon",
    "RaceState",
    "race",
    "race_sync",
    "race_targets",
]
