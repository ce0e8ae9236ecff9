"""Interactive room session.

RoomSession is the entry point for presentation layers. It holds the
current RoomState snapshot and the latest Analysis, turns user edits into
new snapshots, and recomputes through a CoalescingScheduler so a burst of
edits costs one pipeline run.

Example:
    >>> session = RoomSession()
    >>> session.update_inputs(length_a="7,2", height="2.8")
    >>> sub = session.add_subwoofer()
    >>> moved = session.move_subwoofer(sub.id, 1.0, 1.0)
    >>> analysis = session.tick()  # one recompute for all three edits
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from room_modes.geometry.room import clamp_to_nearest, contains_point
from room_modes.session.inputs import apply_room_inputs, parse_listener_height
from room_modes.session.scheduler import CoalescingScheduler
from room_modes.session.state import (
    Analysis,
    RoomState,
    Subwoofer,
    new_subwoofer_position,
    recompute,
)

log = logging.getLogger(__name__)


class RoomSession:
    """Current room state plus its most recent analysis.

    Every edit replaces the state snapshot and requests a recompute. The
    recompute runs on the next tick() and swaps in the new state and
    analysis together, so observers never see a half-updated result.

    Args:
        state: Initial snapshot (default: RoomState.default())
        on_update: Optional callback invoked with each new Analysis
    """

    def __init__(
        self,
        state: RoomState | None = None,
        on_update: Callable[[Analysis], None] | None = None,
    ):
        self._state = state if state is not None else RoomState.default()
        self._analysis: Analysis | None = None
        self._on_update = on_update
        self._scheduler = CoalescingScheduler(self.recompute)
        self._scheduler.request()

    @property
    def state(self) -> RoomState:
        return self._state

    @property
    def analysis(self) -> Analysis | None:
        """Latest analysis, or None before the first tick."""
        return self._analysis

    @property
    def scheduler(self) -> CoalescingScheduler:
        return self._scheduler

    @property
    def pending(self) -> bool:
        """Whether edits are waiting for a recompute."""
        return self._scheduler.pending

    def _set_state(self, state: RoomState) -> None:
        if state != self._state:
            self._state = state
            self._scheduler.request()

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def update_inputs(self, **raw: Any) -> None:
        """Apply raw form values.

        Accepts the RoomConfig dimension fields, "orientation", "l_shape"
        and "listener_height". Invalid values keep their previous setting.
        """
        room = apply_room_inputs(self._state.room, raw)
        listener = self._state.listener
        if "listener_height" in raw:
            z = parse_listener_height(raw["listener_height"], listener.z)
            listener = replace(listener, z=z)
        self._set_state(replace(self._state, room=room, listener=listener))

    def set_l_shape(self, enabled: bool) -> None:
        self.update_inputs(l_shape=enabled)

    def set_resolution(self, resolution: int) -> None:
        """Change the heatmap resolution (cells per axis)."""
        self._set_state(replace(self._state, resolution=int(resolution)))

    def set_listener_position(self, x: float, y: float) -> None:
        """Move the listener; positions outside the room are clamped."""
        segments = self._state.segments
        if not contains_point(x, y, segments):
            x, y = clamp_to_nearest(x, y, segments)
        listener = replace(self._state.listener, x=x, y=y)
        self._set_state(replace(self._state, listener=listener))

    def add_subwoofer(self) -> Subwoofer:
        """Add a subwoofer in the last segment and return it."""
        position = new_subwoofer_position(self._state.segments)
        sub = Subwoofer(x=position.x, y=position.y)
        self._set_state(replace(self._state, subwoofers=self._state.subwoofers + (sub,)))
        return sub

    def remove_subwoofer(self, sub_id: str) -> None:
        """Remove a subwoofer by id.

        Raises:
            KeyError: If no subwoofer has this id
        """
        self._state.find_subwoofer(sub_id)
        remaining = tuple(sub for sub in self._state.subwoofers if sub.id != sub_id)
        self._set_state(replace(self._state, subwoofers=remaining))

    def move_subwoofer(self, sub_id: str, x: float, y: float) -> Subwoofer:
        """Move a subwoofer by id, clamping to the room.

        Raises:
            KeyError: If no subwoofer has this id
        """
        current = self._state.find_subwoofer(sub_id)
        segments = self._state.segments
        if not contains_point(x, y, segments):
            x, y = clamp_to_nearest(x, y, segments)
        moved = replace(current, x=x, y=y)
        subwoofers = tuple(moved if sub.id == sub_id else sub for sub in self._state.subwoofers)
        self._set_state(replace(self._state, subwoofers=subwoofers))
        return moved

    # -------------------------------------------------------------------------
    # Recompute
    # -------------------------------------------------------------------------

    def request_recompute(self) -> bool:
        return self._scheduler.request()

    def tick(self) -> Analysis | None:
        """Run the pending recompute, if any.

        Returns:
            The new Analysis, or None if nothing changed since the last tick
        """
        return self._scheduler.tick()

    def recompute(self) -> Analysis:
        """Run the pipeline on the current snapshot immediately."""
        self._scheduler.cancel()
        analysis = recompute(self._state)
        self._state, self._analysis = analysis.state, analysis
        log.debug("Session updated (%d modes)", len(analysis.modes))
        if self._on_update is not None:
            self._on_update(analysis)
        return analysis
