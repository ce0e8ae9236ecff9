"""I/O for room analysis results."""

from room_modes.io.hdf5 import (
    AnalysisReader,
    AnalysisWriter,
    write_analysis,
)

__all__ = [
    "AnalysisWriter",
    "AnalysisReader",
    "write_analysis",
]
