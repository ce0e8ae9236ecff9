"""Room geometry: segments, containment and clamping."""

from room_modes.geometry.room import (
    Bounds,
    Point2D,
    RoomConfig,
    RoomSegment,
    clamp_to_nearest,
    contains_point,
    resolve_geometry,
    room_bounds,
    segment_containing,
)

__all__ = [
    "RoomConfig",
    "RoomSegment",
    "Point2D",
    "Bounds",
    "resolve_geometry",
    "contains_point",
    "clamp_to_nearest",
    "room_bounds",
    "segment_containing",
]
