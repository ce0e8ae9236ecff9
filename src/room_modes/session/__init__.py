"""Session layer: immutable room state, input parsing, coalesced recompute."""

from room_modes.session.inputs import (
    FIELD_MINIMUMS,
    MIN_LISTENER_HEIGHT,
    apply_room_inputs,
    parse_flag,
    parse_listener_height,
    parse_value,
)
from room_modes.session.scheduler import CoalescingScheduler
from room_modes.session.session import RoomSession
from room_modes.session.state import (
    Analysis,
    Listener,
    RoomState,
    Subwoofer,
    clamp_listener,
    clamp_subwoofers,
    default_subwoofers,
    new_subwoofer_position,
    recompute,
)

__all__ = [
    "RoomState",
    "Listener",
    "Subwoofer",
    "Analysis",
    "recompute",
    "clamp_listener",
    "clamp_subwoofers",
    "default_subwoofers",
    "new_subwoofer_position",
    "RoomSession",
    "CoalescingScheduler",
    "parse_value",
    "parse_flag",
    "parse_listener_height",
    "apply_room_inputs",
    "FIELD_MINIMUMS",
    "MIN_LISTENER_HEIGHT",
]
