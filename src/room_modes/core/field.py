"""
Modal pressure field evaluation.

The relative pressure amplitude at a point is a weighted superposition of
the cosine standing-wave shapes of all modes:

    p(x, y, z) = Σ  w_m · a_m(x, y) · φx · φy · φz / (1 + f_m / 40)

    φx = cos(nx·π·(x - x0) / L)    (1 if nx = 0)
    φy = cos(ny·π·(y - y0) / W)    (1 if ny = 0)
    φz = cos(nz·π·z / H)           (1 if nz = 0)

where (x0, y0) is the origin of the mode's own segment and a_m is 1 inside
that segment's footprint and FIELD_OUTSIDE_ATTENUATION outside it. The
result is a unitless relative amplitude, not a calibrated SPL.

Modes are packed into flat numpy arrays (ModeTable) so that a whole row of
grid points is evaluated against all modes in one broadcast.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from room_modes.core.constants import DAMPING_FREQUENCY, FIELD_OUTSIDE_ATTENUATION
from room_modes.core.modes import Mode
from room_modes.geometry.room import RoomSegment


@dataclass(frozen=True)
class ModeTable:
    """Column-oriented view of a mode list.

    All arrays have one entry per mode. Modes from degenerate segments are
    kept in the table but flagged invalid so they contribute zero.
    """

    nx: NDArray[np.float64]
    ny: NDArray[np.float64]
    nz: NDArray[np.float64]
    frequency: NDArray[np.float64]
    weight: NDArray[np.float64]
    length: NDArray[np.float64]
    width: NDArray[np.float64]
    height: NDArray[np.float64]
    origin_x: NDArray[np.float64]
    origin_y: NDArray[np.float64]
    valid: NDArray[np.bool_]

    @classmethod
    def from_modes(cls, modes: Sequence[Mode]) -> ModeTable:
        """Pack a list of modes into arrays."""

        def column(values) -> NDArray[np.float64]:
            return np.fromiter(values, dtype=np.float64, count=len(modes))

        length = column(m.dimensions[0] for m in modes)
        width = column(m.dimensions[1] for m in modes)
        height = column(m.dimensions[2] for m in modes)
        return cls(
            nx=column(m.nx for m in modes),
            ny=column(m.ny for m in modes),
            nz=column(m.nz for m in modes),
            frequency=column(m.frequency for m in modes),
            weight=column(m.weight for m in modes),
            length=length,
            width=width,
            height=height,
            origin_x=column(m.origin.x for m in modes),
            origin_y=column(m.origin.y for m in modes),
            valid=(length > 0) & (width > 0) & (height > 0),
        )

    def __len__(self) -> int:
        return len(self.frequency)


def as_mode_table(modes: Sequence[Mode] | ModeTable) -> ModeTable:
    """Get a ModeTable for a mode list, passing tables through unchanged."""
    if isinstance(modes, ModeTable):
        return modes
    return ModeTable.from_modes(modes)


def spatial_weights(
    xs: ArrayLike,
    ys: ArrayLike,
    z: float,
    modes: Sequence[Mode] | ModeTable,
    outside_attenuation: float = FIELD_OUTSIDE_ATTENUATION,
) -> NDArray[np.float64]:
    """Weighted spatial basis of every mode at every point.

    Computes w_m · a_m(x, y) · φx · φy · φz without any frequency term. This
    is shared by the pressure field and the frequency response.

    Args:
        xs: Floor-plan x-coordinates (any shape, flattened)
        ys: Floor-plan y-coordinates, same size as xs
        z: Evaluation height above the floor (m)
        modes: Mode list or pre-built ModeTable
        outside_attenuation: Scale for points outside a mode's own segment

    Returns:
        Array of shape (n_points, n_modes)
    """
    table = as_mode_table(modes)
    x = np.asarray(xs, dtype=np.float64).reshape(-1, 1)
    y = np.asarray(ys, dtype=np.float64).reshape(-1, 1)

    # Substitute 1 for degenerate extents; those modes are zeroed below
    length = np.where(table.valid, table.length, 1.0)
    width = np.where(table.valid, table.width, 1.0)
    height = np.where(table.valid, table.height, 1.0)

    phi_x = np.where(table.nx == 0, 1.0, np.cos(table.nx * np.pi * (x - table.origin_x) / length))
    phi_y = np.where(table.ny == 0, 1.0, np.cos(table.ny * np.pi * (y - table.origin_y) / width))
    phi_z = np.where(table.nz == 0, 1.0, np.cos(table.nz * np.pi * z / height))

    inside = (
        (x >= table.origin_x)
        & (x <= table.origin_x + table.length)
        & (y >= table.origin_y)
        & (y <= table.origin_y + table.width)
    )
    attenuation = np.where(inside, 1.0, outside_attenuation)

    basis = table.weight * attenuation * phi_x * phi_y * phi_z
    return np.where(table.valid, basis, 0.0)


def pressure_field(
    xs: ArrayLike,
    ys: ArrayLike,
    z: float,
    modes: Sequence[Mode] | ModeTable,
    outside_attenuation: float = FIELD_OUTSIDE_ATTENUATION,
    damping_frequency: float = DAMPING_FREQUENCY,
) -> NDArray[np.float64]:
    """Evaluate the relative pressure amplitude at many points.

    Args:
        xs: Floor-plan x-coordinates
        ys: Floor-plan y-coordinates, same shape as xs
        z: Evaluation height above the floor (m)
        modes: Mode list or pre-built ModeTable
        outside_attenuation: Scale for points outside a mode's own segment
        damping_frequency: f_d in the per-mode damping 1 / (1 + f / f_d)

    Returns:
        Pressure values with the shape of xs
    """
    table = as_mode_table(modes)
    shape = np.shape(xs)
    basis = spatial_weights(xs, ys, z, table, outside_attenuation)
    damping = 1.0 / (1.0 + table.frequency / damping_frequency)
    return (basis @ damping).reshape(shape)


def pressure_at(
    point: tuple[float, float],
    z: float,
    segments: Sequence[RoomSegment],
    modes: Sequence[Mode] | ModeTable,
    outside_attenuation: float = FIELD_OUTSIDE_ATTENUATION,
    damping_frequency: float = DAMPING_FREQUENCY,
) -> float:
    """Relative pressure amplitude at a single point.

    Args:
        point: Floor-plan position (x, y) in meters
        z: Evaluation height above the floor (m)
        segments: Resolved room segments. Each mode already carries its own
            segment footprint, so the segments only complete the call
            signature shared with sample_grid.
        modes: Mode list or pre-built ModeTable

    Returns:
        Sum of all mode contributions (0.0 for an empty mode list)

    Example:
        >>> room = resolve_geometry(RoomConfig())
        >>> modes = compute_modes(room)
        >>> p = pressure_at((0.5, 0.5), 1.2, room, modes)
    """
    x, y = point
    value = pressure_field([x], [y], z, modes, outside_attenuation, damping_frequency)
    return float(value[0])
