"""
Room Modes - low-frequency room mode analysis.

Models the standing waves of rectangular and L-shaped rooms to help place
a listening position and subwoofers.

Main exports:
- RoomConfig, resolve_geometry: Room parameters and segment layout
- compute_modes: Axial, tangential and oblique modes in a frequency band
- pressure_at, sample_grid: Modal pressure field and heatmap
- frequency_response: Modal response at the listening position
- RoomState, RoomSession, recompute: Immutable state and recompute pipeline
- AnalysisWriter, AnalysisReader: HDF5 result files
"""

from room_modes._version import __version__
from room_modes.core import (
    FrequencyResponse,
    Heatmap,
    Mode,
    ModeType,
    classify_mode,
    compute_modes,
    frequency_response,
    mode_distribution,
    modes_in_band,
    pressure_at,
    pressure_field,
    sample_export_grid,
    sample_grid,
)
from room_modes.geometry import (
    Bounds,
    Point2D,
    RoomConfig,
    RoomSegment,
    clamp_to_nearest,
    contains_point,
    resolve_geometry,
    room_bounds,
)
from room_modes.io import AnalysisReader, AnalysisWriter, write_analysis
from room_modes.session import (
    Analysis,
    CoalescingScheduler,
    Listener,
    RoomSession,
    RoomState,
    Subwoofer,
    parse_value,
    recompute,
)

# Submodules for more specific imports
from . import core, geometry, io, session

__all__ = [
    "__version__",
    # Geometry
    "RoomConfig",
    "RoomSegment",
    "Point2D",
    "Bounds",
    "resolve_geometry",
    "contains_point",
    "clamp_to_nearest",
    "room_bounds",
    # Modal model
    "Mode",
    "ModeType",
    "classify_mode",
    "compute_modes",
    "modes_in_band",
    "mode_distribution",
    "pressure_at",
    "pressure_field",
    "sample_grid",
    "sample_export_grid",
    "Heatmap",
    "frequency_response",
    "FrequencyResponse",
    # Session
    "RoomState",
    "Listener",
    "Subwoofer",
    "Analysis",
    "recompute",
    "RoomSession",
    "CoalescingScheduler",
    "parse_value",
    # I/O
    "AnalysisWriter",
    "AnalysisReader",
    "write_analysis",
    # Submodules
    "core",
    "geometry",
    "io",
    "session",
]
