"""
Frequency response at the listening position.

Every mode is modeled as a Lorentzian resonance of fixed half-width B
centered on its eigenfrequency, scaled by the mode's weighted spatial basis
at the listener (see field.spatial_weights). The complex contributions are
summed per swept frequency:

    Re += s_m · B / ((f - f_m)² + B²)
    Im += s_m · (f - f_m) / ((f - f_m)² + B²)

and the magnitude is reported in dB, floored at MAGNITUDE_FLOOR so that a
listener on a node of every mode still yields a finite curve.

Example:
    >>> room = resolve_geometry(RoomConfig())
    >>> response = frequency_response((0.5, 0.5), 1.2, compute_modes(room))
    >>> response.peaks()[:2]
    array([27., 38.])
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray
from scipy import signal

from room_modes.core.constants import (
    FREQ_MAX,
    FREQ_MIN,
    MAGNITUDE_FLOOR,
    RESONANCE_BANDWIDTH,
    RESPONSE_OUTSIDE_ATTENUATION,
    RESPONSE_STEPS,
)
from room_modes.core.field import ModeTable, as_mode_table, spatial_weights
from room_modes.core.modes import Mode


class ResponsePoint(NamedTuple):
    """One sample of a frequency response curve."""

    freq: float
    db: float


@dataclass(frozen=True)
class FrequencyResponse:
    """Magnitude response sampled on an evenly spaced frequency sweep.

    Attributes:
        frequencies: Swept frequencies in Hz
        db: Response magnitude in dB (relative)
    """

    frequencies: NDArray[np.float64]
    db: NDArray[np.float64]

    def __len__(self) -> int:
        return len(self.frequencies)

    def __iter__(self) -> Iterator[ResponsePoint]:
        for freq, db in zip(self.frequencies, self.db):
            yield ResponsePoint(float(freq), float(db))

    def points(self) -> list[ResponsePoint]:
        """Get the curve as a list of (freq, db) points."""
        return list(self)

    def peaks(self, prominence: float | None = None) -> NDArray[np.float64]:
        """Frequencies of local maxima of the curve.

        Args:
            prominence: Minimum peak prominence in dB (None keeps every
                local maximum)

        Returns:
            Peak frequencies in ascending order
        """
        indices, _ = signal.find_peaks(self.db, prominence=prominence)
        return self.frequencies[indices]

    def value_at(self, freq: float) -> float:
        """Linearly interpolated dB value at a frequency inside the sweep."""
        return float(np.interp(freq, self.frequencies, self.db))


def frequency_response(
    listener_point: tuple[float, float],
    listener_z: float,
    modes: Sequence[Mode] | ModeTable,
    freq_min: float = FREQ_MIN,
    freq_max: float = FREQ_MAX,
    steps: int = RESPONSE_STEPS,
    bandwidth: float = RESONANCE_BANDWIDTH,
    outside_attenuation: float = RESPONSE_OUTSIDE_ATTENUATION,
) -> FrequencyResponse:
    """Synthesize the modal frequency response at the listener.

    Args:
        listener_point: Listener floor-plan position (x, y) in meters
        listener_z: Listener ear height (m)
        modes: Mode list or pre-built ModeTable
        freq_min: First swept frequency (Hz)
        freq_max: Last swept frequency (Hz)
        steps: Number of swept frequencies (>= 2)
        bandwidth: Lorentzian half-width of every resonance (Hz)
        outside_attenuation: Scale for modes of a segment the listener is
            not standing in

    Returns:
        FrequencyResponse with `steps` evenly spaced points
    """
    if steps < 2:
        raise ValueError("steps must be >= 2")
    if bandwidth <= 0:
        raise ValueError("bandwidth must be positive")

    table = as_mode_table(modes)
    x, y = listener_point
    freqs = np.linspace(freq_min, freq_max, steps)

    # (n_modes,) spatial factor at the listener
    strength = spatial_weights([x], [y], listener_z, table, outside_attenuation)[0]

    delta = freqs[:, np.newaxis] - table.frequency[np.newaxis, :]
    denom = delta**2 + bandwidth**2
    real = np.sum(strength * bandwidth / denom, axis=1)
    imag = np.sum(strength * delta / denom, axis=1)

    magnitude = np.sqrt(real**2 + imag**2)
    db = 20 * np.log10(np.maximum(magnitude, MAGNITUDE_FLOOR))
    return FrequencyResponse(frequencies=freqs, db=db)
