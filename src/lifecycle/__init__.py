"""Content lifecycle — legal transitions and the state machine driving them."""

from contentq.lifecycle.machine import LifecycleStateMachine, Reviser
from contentq.lifecycle.transitions import (
    TERMINAL_STATES,
    TRANSITIONS,
    advance,
    can_transition,
)

__all__ = [
    "LifecycleStateMachine",
    "Reviser",
    "TERMINAL_STATES",
    "TRANSITIONS",
    "advance",
    "can_transition",
]
