"""
Pressure heatmap over the room footprint.

The bounding box of the room is divided into resolution × resolution cells
and the pressure field is evaluated at every cell center that lies inside
the room. Cells outside the footprint (the notch of an L-shaped room) are
NaN so renderers can make them transparent.

Example:
    >>> room = resolve_geometry(RoomConfig(room_type="lshape"))
    >>> heatmap = sample_grid(room, compute_modes(room), z=1.2, resolution=60)
    >>> heatmap.data.shape
    (60, 60)
    >>> rgba = heatmap.to_rgba()  # (60, 60, 4) uint8 image
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from room_modes.core.constants import (
    DAMPING_FREQUENCY,
    FIELD_OUTSIDE_ATTENUATION,
    FLAT_FIELD_TOLERANCE,
    MIN_EXPORT_RESOLUTION,
)
from room_modes.core.field import ModeTable, as_mode_table, pressure_field
from room_modes.core.modes import Mode
from room_modes.geometry.room import Bounds, RoomSegment, room_bounds

log = logging.getLogger(__name__)

# Color ramp anchors (RGB): low -> mid -> high
LOW_COLOR = (37, 99, 235)
MID_COLOR = (34, 197, 94)
HIGH_COLOR = (239, 68, 68)


@dataclass(frozen=True)
class Heatmap:
    """Sampled pressure field over the room bounding box.

    Attributes:
        data: (resolution, resolution) array indexed [iy, ix]; NaN outside
            the room footprint
        vmin: Color scale minimum (smallest in-room value, or -1 if the
            field is flat or empty)
        vmax: Color scale maximum (largest in-room value, or +1)
        bounds: Bounding box the grid covers
        resolution: Cells per axis
    """

    data: NDArray[np.float64]
    vmin: float
    vmax: float
    bounds: Bounds
    resolution: int

    @property
    def cell_size(self) -> tuple[float, float]:
        """Cell extent (dx, dy) in meters."""
        return (
            self.bounds.width / self.resolution,
            self.bounds.depth / self.resolution,
        )

    def cell_centers(self) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Get 1D arrays of cell center x- and y-coordinates."""
        return _cell_centers(self.bounds, self.resolution)

    @property
    def inside_mask(self) -> NDArray[np.bool_]:
        """True for cells whose center lies inside the room."""
        return ~np.isnan(self.data)

    def normalized(self) -> NDArray[np.float64]:
        """Values mapped to [0, 1] on the color scale (NaN stays NaN)."""
        return np.clip((self.data - self.vmin) / (self.vmax - self.vmin), 0.0, 1.0)

    def to_rgba(self) -> NDArray[np.uint8]:
        """Render the heatmap as an RGBA image, transparent outside the room."""
        rgba = np.zeros(self.data.shape + (4,), dtype=np.uint8)
        mask = self.inside_mask
        rgba[mask, :3] = interpolate_color(self.data[mask], self.vmin, self.vmax)
        rgba[mask, 3] = 255
        return rgba


def _cell_centers(bounds: Bounds, resolution: int) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    dx = bounds.width / resolution
    dy = bounds.depth / resolution
    xs = bounds.min_x + np.arange(resolution) * dx + dx / 2
    ys = bounds.min_y + np.arange(resolution) * dy + dy / 2
    return xs, ys


def footprint_mask(
    xs: ArrayLike, ys: ArrayLike, segments: Sequence[RoomSegment]
) -> NDArray[np.bool_]:
    """Vectorized contains_point over arrays of coordinates."""
    x = np.asarray(xs, dtype=np.float64)
    y = np.asarray(ys, dtype=np.float64)
    mask = np.zeros(np.broadcast(x, y).shape, dtype=bool)
    for seg in segments:
        mask |= (x >= seg.origin.x) & (x <= seg.max_x) & (y >= seg.origin.y) & (y <= seg.max_y)
    return mask


def sample_grid(
    segments: Sequence[RoomSegment],
    modes: Sequence[Mode] | ModeTable,
    z: float,
    resolution: int,
    callback: Callable[[int], None] | None = None,
    outside_attenuation: float = FIELD_OUTSIDE_ATTENUATION,
    damping_frequency: float = DAMPING_FREQUENCY,
) -> Heatmap:
    """Sample the pressure field on a regular grid over the room.

    The grid is evaluated one row at a time. If the field has no finite
    in-room values, or its span is below FLAT_FIELD_TOLERANCE, the color
    scale falls back to [-1, 1].

    Args:
        segments: Resolved room segments
        modes: Mode list or pre-built ModeTable
        z: Evaluation height above the floor (m)
        resolution: Cells per axis
        callback: Optional function called with the row index after each row

    Returns:
        Heatmap with data, color range and bounds
    """
    if resolution < 1:
        raise ValueError("resolution must be >= 1")

    table = as_mode_table(modes)
    bounds = room_bounds(segments)
    xs, ys = _cell_centers(bounds, resolution)
    values = np.full((resolution, resolution), np.nan, dtype=np.float64)

    for iy, y in enumerate(ys):
        row_y = np.full_like(xs, y)
        inside = footprint_mask(xs, row_y, segments)
        if np.any(inside):
            values[iy, inside] = pressure_field(
                xs[inside],
                row_y[inside],
                z,
                table,
                outside_attenuation=outside_attenuation,
                damping_frequency=damping_frequency,
            )
        if callback is not None:
            callback(iy)

    finite = values[np.isfinite(values)]
    if finite.size == 0:
        vmin, vmax = -1.0, 1.0
    else:
        vmin, vmax = float(finite.min()), float(finite.max())
        if abs(vmax - vmin) < FLAT_FIELD_TOLERANCE:
            vmin, vmax = -1.0, 1.0

    log.debug(
        "Sampled %dx%d grid (%d in-room cells), range [%.3g, %.3g]",
        resolution,
        resolution,
        finite.size,
        vmin,
        vmax,
    )
    return Heatmap(data=values, vmin=vmin, vmax=vmax, bounds=bounds, resolution=resolution)


def export_resolution(resolution: int) -> int:
    """Grid resolution used for report images: double, and at least 120."""
    return max(MIN_EXPORT_RESOLUTION, resolution * 2)


def sample_export_grid(
    segments: Sequence[RoomSegment],
    modes: Sequence[Mode] | ModeTable,
    z: float,
    resolution: int,
    callback: Callable[[int], None] | None = None,
) -> Heatmap:
    """Sample a higher-resolution heatmap for exported reports."""
    return sample_grid(segments, modes, z, export_resolution(resolution), callback=callback)


def interpolate_color(values: ArrayLike, vmin: float, vmax: float) -> NDArray[np.uint8]:
    """Map values onto the blue-green-red ramp.

    Values are normalized to [0, 1] over [vmin, vmax] (clipped). The lower
    half blends LOW_COLOR into MID_COLOR, the upper half MID_COLOR into
    HIGH_COLOR.

    Args:
        values: Finite values (any shape)
        vmin: Value mapped to LOW_COLOR
        vmax: Value mapped to HIGH_COLOR

    Returns:
        uint8 array of shape values.shape + (3,)
    """
    t = np.clip((np.asarray(values, dtype=np.float64) - vmin) / (vmax - vmin), 0.0, 1.0)
    low = np.array(LOW_COLOR, dtype=np.float64)
    mid = np.array(MID_COLOR, dtype=np.float64)
    high = np.array(HIGH_COLOR, dtype=np.float64)

    t = t[..., np.newaxis]
    lower = low + (mid - low) * (t / 0.5)
    upper = mid + (high - mid) * ((t - 0.5) / 0.5)
    rgb = np.where(t < 0.5, lower, upper)
    return np.round(rgb).astype(np.uint8)
