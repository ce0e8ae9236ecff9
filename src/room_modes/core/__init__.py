"""Core modal acoustics: mode enumeration, pressure field, response, heatmap."""

from room_modes.core.field import ModeTable, pressure_at, pressure_field, spatial_weights
from room_modes.core.heatmap import (
    Heatmap,
    export_resolution,
    interpolate_color,
    sample_export_grid,
    sample_grid,
)
from room_modes.core.modes import (
    Mode,
    ModeType,
    classify_mode,
    compute_modes,
    mode_distribution,
    modes_in_band,
)
from room_modes.core.response import FrequencyResponse, ResponsePoint, frequency_response

__all__ = [
    "Mode",
    "ModeType",
    "ModeTable",
    "classify_mode",
    "compute_modes",
    "modes_in_band",
    "mode_distribution",
    "pressure_at",
    "pressure_field",
    "spatial_weights",
    "FrequencyResponse",
    "ResponsePoint",
    "frequency_response",
    "Heatmap",
    "sample_grid",
    "sample_export_grid",
    "export_resolution",
    "interpolate_color",
]
