"""
Room state snapshots and the recompute pipeline.

A RoomState is an immutable snapshot of everything the user controls: the
room parameters, the listening position, the subwoofer placements and the
heatmap resolution. Edits produce new snapshots (dataclasses.replace); the
pipeline turns a snapshot into an Analysis in one ordered pass:

    geometry -> clamp listener/subwoofers -> modes -> heatmap -> response

Example:
    >>> state = RoomState.default()
    >>> analysis = recompute(state)
    >>> len(analysis.modes) > 0
    True
"""

from __future__ import annotations

import logging
import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from room_modes.core.constants import DEFAULT_RESOLUTION, FREQ_MAX, FREQ_MIN
from room_modes.core.field import ModeTable
from room_modes.core.heatmap import Heatmap, sample_grid
from room_modes.core.modes import Mode, compute_modes
from room_modes.core.response import FrequencyResponse, frequency_response
from room_modes.geometry.room import (
    Point2D,
    RoomConfig,
    RoomSegment,
    clamp_to_nearest,
    contains_point,
    resolve_geometry,
)

log = logging.getLogger(__name__)


def generate_id() -> str:
    """Opaque identifier for a new subwoofer."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Listener:
    """Listening position: floor-plan point plus ear height (m)."""

    x: float = 3.0
    y: float = 2.25
    z: float = 1.2

    @property
    def point(self) -> Point2D:
        return Point2D(self.x, self.y)


@dataclass(frozen=True)
class Subwoofer:
    """Subwoofer placement on the floor plan.

    The id identifies the subwoofer across moves and removals; list
    position carries no meaning.
    """

    x: float
    y: float
    id: str = field(default_factory=generate_id)

    @property
    def point(self) -> Point2D:
        return Point2D(self.x, self.y)


@dataclass(frozen=True)
class RoomState:
    """Immutable snapshot of the user-controlled inputs.

    Args:
        room: Room parameters
        listener: Listening position
        subwoofers: Subwoofer placements
        resolution: Heatmap cells per axis
        freq_min: Lower edge of the analysis band (Hz)
        freq_max: Upper edge of the analysis band (Hz)
    """

    room: RoomConfig = field(default_factory=RoomConfig)
    listener: Listener = field(default_factory=Listener)
    subwoofers: tuple[Subwoofer, ...] = ()
    resolution: int = DEFAULT_RESOLUTION
    freq_min: float = FREQ_MIN
    freq_max: float = FREQ_MAX

    def __post_init__(self):
        """Validate parameters."""
        if self.resolution < 1:
            raise ValueError("resolution must be >= 1")
        if self.freq_max <= self.freq_min:
            raise ValueError("freq_max must be greater than freq_min")

    @classmethod
    def default(cls, room: RoomConfig | None = None) -> RoomState:
        """Initial state: default room with the two default subwoofers."""
        room = room or RoomConfig()
        segments = resolve_geometry(room)
        return cls(room=room, subwoofers=default_subwoofers(segments))

    @property
    def segments(self) -> list[RoomSegment]:
        return resolve_geometry(self.room)

    def find_subwoofer(self, sub_id: str) -> Subwoofer:
        """Get a subwoofer by id.

        Raises:
            KeyError: If no subwoofer has this id
        """
        for sub in self.subwoofers:
            if sub.id == sub_id:
                return sub
        raise KeyError(f"Subwoofer '{sub_id}' not found")


@dataclass(frozen=True)
class Analysis:
    """Result of one pipeline run.

    Attributes:
        state: The input snapshot after clamping listener and subwoofers
        segments: Resolved room segments
        modes: Modes sorted by frequency
        heatmap: Pressure field sampled at the listener height
        response: Frequency response at the listener
    """

    state: RoomState
    segments: list[RoomSegment]
    modes: list[Mode]
    heatmap: Heatmap
    response: FrequencyResponse


# =============================================================================
# Placement
# =============================================================================


def default_subwoofers(segments: Sequence[RoomSegment]) -> tuple[Subwoofer, ...]:
    """Two subwoofers along the front of segment A (20% and 80% of its length)."""
    if not segments:
        return ()
    seg = segments[0]
    return (
        Subwoofer(x=seg.origin.x + seg.length * 0.2, y=seg.origin.y + seg.width * 0.2),
        Subwoofer(x=seg.origin.x + seg.length * 0.8, y=seg.origin.y + seg.width * 0.2),
    )


def new_subwoofer_position(segments: Sequence[RoomSegment]) -> Point2D:
    """Placement for an added subwoofer: mid-length, 70% depth of the last segment."""
    seg = segments[-1]
    x = seg.origin.x + seg.length * 0.5
    y = seg.origin.y + seg.width * 0.7
    if not contains_point(x, y, segments):
        return clamp_to_nearest(x, y, segments)
    return Point2D(x, y)


def _missing(value: float | None) -> bool:
    return value is None or math.isnan(value)


def clamp_listener(listener: Listener, segments: Sequence[RoomSegment]) -> Listener:
    """Keep the listener inside the room.

    A listener without a usable position (None or NaN) is moved to the
    center of segment A. The ear height is left unchanged.
    """
    if not segments:
        return listener
    if _missing(listener.x) or _missing(listener.y):
        center = segments[0].center
        return replace(listener, x=center.x, y=center.y)
    if contains_point(listener.x, listener.y, segments):
        return listener
    clamped = clamp_to_nearest(listener.x, listener.y, segments)
    return replace(listener, x=clamped.x, y=clamped.y)


def clamp_subwoofers(
    subwoofers: Sequence[Subwoofer], segments: Sequence[RoomSegment]
) -> tuple[Subwoofer, ...]:
    """Keep every subwoofer inside the room, preserving ids and order."""
    result = []
    for sub in subwoofers:
        if contains_point(sub.x, sub.y, segments):
            result.append(sub)
        else:
            clamped = clamp_to_nearest(sub.x, sub.y, segments)
            result.append(replace(sub, x=clamped.x, y=clamped.y))
    return tuple(result)


def clamp_state(state: RoomState, segments: Sequence[RoomSegment]) -> RoomState:
    """Apply listener and subwoofer clamping to a snapshot."""
    listener = clamp_listener(state.listener, segments)
    subwoofers = clamp_subwoofers(state.subwoofers, segments)
    if listener == state.listener and subwoofers == state.subwoofers:
        return state
    return replace(state, listener=listener, subwoofers=subwoofers)


# =============================================================================
# Pipeline
# =============================================================================


def recompute(state: RoomState) -> Analysis:
    """Run the full analysis pipeline on a snapshot.

    Args:
        state: Input snapshot

    Returns:
        Analysis with the clamped snapshot and all derived data
    """
    segments = resolve_geometry(state.room)
    state = clamp_state(state, segments)
    modes = compute_modes(segments, state.freq_min, state.freq_max)
    table = ModeTable.from_modes(modes)
    listener = state.listener
    heatmap = sample_grid(segments, table, listener.z, state.resolution)
    response = frequency_response(
        listener.point, listener.z, table, freq_min=state.freq_min, freq_max=state.freq_max
    )
    log.debug(
        "Recomputed %s room: %d segment(s), %d modes, %d subwoofer(s)",
        state.room.room_type,
        len(segments),
        len(modes),
        len(state.subwoofers),
    )
    return Analysis(
        state=state,
        segments=segments,
        modes=modes,
        heatmap=heatmap,
        response=response,
    )
