"""
Standing-wave mode enumeration for rectangular room segments.

Each segment is treated as an ideal rigid-walled rectangular cavity. Its
eigenfrequencies are

    f(nx, ny, nz) = (c / 2) * sqrt((nx/L)² + (ny/W)² + (nz/H)²)

for non-negative integer indices, excluding the trivial (0, 0, 0). Modes
are classified by how many indices are non-zero:

    axial       one axis       weight 1.0
    tangential  two axes       weight 0.65
    oblique     three axes     weight 0.4

Axial modes carry the most energy, oblique modes the least.

Example:
    >>> from room_modes import RoomConfig, compute_modes, resolve_geometry
    >>> modes = compute_modes(resolve_geometry(RoomConfig()))
    >>> modes[0].label
    'f=28.6 Hz Axial (1,0,0) Segment A'
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from room_modes.core.constants import (
    FREQ_MAX,
    FREQ_MIN,
    LOWER_FREQ_MARGIN,
    MODE_WEIGHTS,
    SPEED_OF_SOUND,
    UPPER_FREQ_MARGIN,
)
from room_modes.geometry.room import Point2D, RoomSegment

log = logging.getLogger(__name__)


class ModeType(str, Enum):
    """Mode classification by number of participating axes."""

    AXIAL = "axial"
    TANGENTIAL = "tangential"
    OBLIQUE = "oblique"

    @property
    def weight(self) -> float:
        """Perceptual weight of this mode type."""
        return MODE_WEIGHTS[self.value]


@dataclass(frozen=True)
class Mode:
    """A single standing-wave mode of one room segment.

    The segment's dimensions and origin are copied onto the mode so the
    spatial basis can be evaluated without resolving geometry again.

    Attributes:
        segment_id: Id of the segment the mode belongs to
        nx, ny, nz: Half-wavelength counts along x, y, z
        frequency: Eigenfrequency in Hz
        type: Axial, tangential or oblique
        weight: Perceptual weight in [0, 1]
        dimensions: (length, width, height) of the segment in meters
        origin: Floor-plan origin of the segment
    """

    segment_id: str
    nx: int
    ny: int
    nz: int
    frequency: float
    type: ModeType
    weight: float
    dimensions: tuple[float, float, float]
    origin: Point2D

    @property
    def indices(self) -> tuple[int, int, int]:
        return (self.nx, self.ny, self.nz)

    @property
    def is_degenerate(self) -> bool:
        """True if the source segment had a non-positive dimension."""
        return any(d <= 0 for d in self.dimensions)

    @property
    def label(self) -> str:
        """Short description, e.g. 'f=28.6 Hz Axial (1,0,0) Segment A'."""
        return (
            f"f={self.frequency:.1f} Hz {self.type.value.capitalize()} "
            f"({self.nx},{self.ny},{self.nz}) Segment {self.segment_id}"
        )


def classify_mode(nx: int, ny: int, nz: int) -> ModeType:
    """Classify a mode by its number of non-zero indices."""
    non_zero = (nx != 0) + (ny != 0) + (nz != 0)
    if non_zero == 1:
        return ModeType.AXIAL
    if non_zero == 2:
        return ModeType.TANGENTIAL
    return ModeType.OBLIQUE


def modal_frequency(
    nx: int,
    ny: int,
    nz: int,
    length: float,
    width: float,
    height: float,
    c: float = SPEED_OF_SOUND,
) -> float:
    """Eigenfrequency of mode (nx, ny, nz) in a rigid rectangular cavity."""
    return (c / 2) * math.sqrt((nx / length) ** 2 + (ny / width) ** 2 + (nz / height) ** 2)


def max_mode_index(extent: float, freq_max: float, c: float = SPEED_OF_SOUND) -> int:
    """Number of half-wavelengths at freq_max that fit along an extent (at least 1)."""
    return max(1, math.ceil((2 * freq_max / c) * extent))


def compute_modes(
    segments: Sequence[RoomSegment],
    freq_min: float = FREQ_MIN,
    freq_max: float = FREQ_MAX,
    c: float = SPEED_OF_SOUND,
) -> list[Mode]:
    """Enumerate the modes of every segment within a frequency band.

    Modes are kept if their frequency lies in
    [freq_min - LOWER_FREQ_MARGIN, freq_max + UPPER_FREQ_MARGIN]. The upper
    margin keeps modes just above the band whose resonance tails still
    shape the in-band response. Segments with a non-positive dimension
    contribute no modes.

    Args:
        segments: Resolved room segments
        freq_min: Lower edge of the nominal band (Hz)
        freq_max: Upper edge of the nominal band (Hz)
        c: Speed of sound (m/s)

    Returns:
        Modes of all segments, sorted by ascending frequency
    """
    lower = freq_min - LOWER_FREQ_MARGIN
    upper = freq_max + UPPER_FREQ_MARGIN
    modes: list[Mode] = []

    for segment in segments:
        if segment.is_degenerate:
            log.debug("Skipping degenerate segment %s", segment.id)
            continue

        length, width, height = segment.length, segment.width, segment.height
        nx_max = max_mode_index(length, freq_max, c)
        ny_max = max_mode_index(width, freq_max, c)
        nz_max = max_mode_index(height, freq_max, c)

        for nx in range(nx_max + 1):
            for ny in range(ny_max + 1):
                for nz in range(nz_max + 1):
                    if nx == 0 and ny == 0 and nz == 0:
                        continue
                    freq = modal_frequency(nx, ny, nz, length, width, height, c)
                    if freq < lower or freq > upper:
                        continue
                    mode_type = classify_mode(nx, ny, nz)
                    modes.append(
                        Mode(
                            segment_id=segment.id,
                            nx=nx,
                            ny=ny,
                            nz=nz,
                            frequency=freq,
                            type=mode_type,
                            weight=mode_type.weight,
                            dimensions=(length, width, height),
                            origin=Point2D(*segment.origin),
                        )
                    )

    modes.sort(key=lambda mode: mode.frequency)
    log.debug("Enumerated %d modes for %d segment(s)", len(modes), len(segments))
    return modes


def modes_in_band(
    modes: Iterable[Mode], freq_min: float = FREQ_MIN, freq_max: float = FREQ_MAX
) -> list[Mode]:
    """Get the modes inside the nominal band, dropping the margin modes."""
    return [mode for mode in modes if freq_min <= mode.frequency <= freq_max]


def mode_distribution(
    modes: Iterable[Mode], freq_min: float = FREQ_MIN, freq_max: float = FREQ_MAX
) -> dict[ModeType, list[Mode]]:
    """Group in-band modes by type, in axial/tangential/oblique order.

    Every type is present in the result, possibly with an empty list.
    """
    distribution: dict[ModeType, list[Mode]] = {mode_type: [] for mode_type in ModeType}
    for mode in modes_in_band(modes, freq_min, freq_max):
        distribution[mode.type].append(mode)
    return distribution
