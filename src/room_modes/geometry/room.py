"""
Room geometry for modal analysis.

A room is modeled as one axis-aligned rectangular volume (rectangular room)
or two volumes sharing a height (L-shaped room). Segment B of an L-shaped
room is placed flush against segment A, either continuing along the x-axis
or along the y-axis:

    orientation="x"                 orientation="y"

    +---------+-----+               +---------+
    |         |  B  |               |         |
    |    A    +-----+               |    A    |
    |         |                     |         |
    +---------+                     +----+----+
                                    |  B |
                                    +----+

(y grows downward in the sketch, matching the top view.)

Classes:
    RoomConfig: User-editable room parameters
    RoomSegment: One resolved rectangular volume with absolute origin
    Point2D: Floor-plan coordinate
    Bounds: Axis-aligned bounding box of a room

Example:
    >>> from room_modes.geometry import RoomConfig, resolve_geometry
    >>> room = RoomConfig(room_type="lshape", orientation="y")
    >>> [seg.origin for seg in resolve_geometry(room)]
    [Point2D(x=0.0, y=0.0), Point2D(x=0.0, y=4.5)]
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, NamedTuple

RoomType = Literal["rect", "lshape"]
Orientation = Literal["x", "y"]

ROOM_TYPES = ("rect", "lshape")
ORIENTATIONS = ("x", "y")


class Point2D(NamedTuple):
    """Floor-plan coordinate in meters."""

    x: float
    y: float


class Bounds(NamedTuple):
    """Axis-aligned bounding box of a room footprint in meters."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        """Extent along x."""
        return self.max_x - self.min_x

    @property
    def depth(self) -> float:
        """Extent along y."""
        return self.max_y - self.min_y


@dataclass(frozen=True)
class RoomConfig:
    """Room parameters as edited by the user.

    Args:
        room_type: "rect" for a single segment, "lshape" for two segments
        length_a: Segment A extent along x (m)
        width_a: Segment A extent along y (m)
        height: Ceiling height shared by all segments (m)
        length_b: Segment B extent along x (m), used for "lshape" only
        width_b: Segment B extent along y (m), used for "lshape" only
        orientation: Axis along which segment B continues segment A

    Example:
        >>> RoomConfig(length_a=5.0, width_a=4.0, height=2.5).is_lshape
        False
    """

    room_type: RoomType = "rect"
    length_a: float = 6.0
    width_a: float = 4.5
    height: float = 2.6
    length_b: float = 3.0
    width_b: float = 2.5
    orientation: Orientation = "x"

    def __post_init__(self):
        """Validate parameters."""
        if self.room_type not in ROOM_TYPES:
            raise ValueError(f"room_type must be one of {ROOM_TYPES}, got {self.room_type!r}")
        if self.orientation not in ORIENTATIONS:
            raise ValueError(
                f"orientation must be one of {ORIENTATIONS}, got {self.orientation!r}"
            )
        for name in ("length_a", "width_a", "height", "length_b", "width_b"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def is_lshape(self) -> bool:
        """Whether the room has a second segment."""
        return self.room_type == "lshape"


@dataclass(frozen=True)
class RoomSegment:
    """One axis-aligned rectangular volume of a room.

    Segments are derived from a RoomConfig on every resolution and carry no
    state of their own.

    Args:
        id: Segment label ("A" or "B")
        length: Extent along x (m)
        width: Extent along y (m)
        height: Extent along z (m)
        origin: Floor-plan position of the segment's minimum corner
    """

    id: str
    length: float
    width: float
    height: float
    origin: Point2D = Point2D(0.0, 0.0)

    @property
    def max_x(self) -> float:
        return self.origin.x + self.length

    @property
    def max_y(self) -> float:
        return self.origin.y + self.width

    @property
    def center(self) -> Point2D:
        """Floor-plan center of the segment."""
        return Point2D(self.origin.x + self.length / 2, self.origin.y + self.width / 2)

    @property
    def is_degenerate(self) -> bool:
        """True if any dimension is non-positive."""
        return self.length <= 0 or self.width <= 0 or self.height <= 0

    def contains(self, x: float, y: float) -> bool:
        """Check if (x, y) lies within the closed footprint rectangle."""
        return self.origin.x <= x <= self.max_x and self.origin.y <= y <= self.max_y

    def clamp(self, x: float, y: float) -> Point2D:
        """Clamp (x, y) into the footprint rectangle, each axis independently."""
        return Point2D(
            min(max(x, self.origin.x), self.max_x),
            min(max(y, self.origin.y), self.max_y),
        )


def resolve_geometry(config: RoomConfig) -> list[RoomSegment]:
    """Resolve room parameters into segments with absolute origins.

    Args:
        config: Room parameters

    Returns:
        [segment A] for a rectangular room, [segment A, segment B] for an
        L-shaped room. Segment B starts where segment A ends along the
        configured orientation axis.
    """
    segments = [
        RoomSegment(
            id="A",
            length=config.length_a,
            width=config.width_a,
            height=config.height,
            origin=Point2D(0.0, 0.0),
        )
    ]
    if config.is_lshape:
        if config.orientation == "x":
            origin = Point2D(float(config.length_a), 0.0)
        else:
            origin = Point2D(0.0, float(config.width_a))
        segments.append(
            RoomSegment(
                id="B",
                length=config.length_b,
                width=config.width_b,
                height=config.height,
                origin=origin,
            )
        )
    return segments


def contains_point(x: float | None, y: float | None, segments: Sequence[RoomSegment]) -> bool:
    """Check if a floor-plan point lies within any segment.

    Missing or NaN coordinates are never inside the room.
    """
    if x is None or y is None or math.isnan(x) or math.isnan(y):
        return False
    return any(seg.contains(x, y) for seg in segments)


def segment_containing(
    x: float, y: float, segments: Sequence[RoomSegment]
) -> RoomSegment | None:
    """Get the first segment whose footprint holds (x, y), if any."""
    for seg in segments:
        if seg.contains(x, y):
            return seg
    return None


def clamp_to_nearest(x: float, y: float, segments: Sequence[RoomSegment]) -> Point2D:
    """Move a point to the nearest location inside the room.

    Each segment clamps the point independently; the candidate with the
    smallest squared distance to the original point wins. On equal
    distances the earlier segment wins, so segment A is preferred over B.
    Points already inside the room are returned unchanged.

    Args:
        x: Floor-plan x-coordinate (m)
        y: Floor-plan y-coordinate (m)
        segments: Resolved room segments

    Returns:
        Clamped point, or the original point if there are no segments
    """
    best: Point2D | None = None
    best_dist = math.inf
    for seg in segments:
        candidate = seg.clamp(x, y)
        dist = (candidate.x - x) ** 2 + (candidate.y - y) ** 2
        if dist < best_dist:
            best_dist = dist
            best = candidate
    if best is None:
        return Point2D(x, y)
    return best


def room_bounds(segments: Sequence[RoomSegment]) -> Bounds:
    """Compute the bounding box over all segment footprints."""
    return Bounds(
        min_x=min(seg.origin.x for seg in segments),
        min_y=min(seg.origin.y for seg in segments),
        max_x=max(seg.max_x for seg in segments),
        max_y=max(seg.max_y for seg in segments),
    )
