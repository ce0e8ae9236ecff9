"""HDF5 output format for room mode analyses.

An analysis file stores everything needed to redraw a report without
recomputing:

    /metadata     created_at, package version (attrs)
    /room         RoomConfig fields (attrs)
    /segments/A   length, width, height, origin (attrs), one group per segment
    /listener     x, y, z (attrs)
    /subwoofers   ids, positions (N x 2)
    /modes        indices (N x 3), frequency, weight, type, segment_id
    /heatmap      data (res x res, NaN outside the room); vmin, vmax, bounds
    /response     frequencies, db

Example:
    >>> analysis = recompute(RoomState.default())
    >>> write_analysis("room.h5", analysis)
    >>> with AnalysisReader("room.h5") as reader:
    ...     modes = reader.load_modes()
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import h5py
import numpy as np

from room_modes._version import __version__
from room_modes.core.heatmap import Heatmap
from room_modes.core.modes import Mode, ModeType
from room_modes.core.response import FrequencyResponse
from room_modes.geometry.room import Bounds, Point2D, RoomConfig, resolve_geometry
from room_modes.session.state import Analysis, Listener, RoomState, Subwoofer

_ROOM_FIELDS = ("room_type", "length_a", "width_a", "height", "length_b", "width_b", "orientation")


def _encode(values: list[str]) -> np.ndarray:
    """Fixed-length byte strings for HDF5 storage."""
    width = max((len(v) for v in values), default=1)
    return np.array([v.encode() for v in values], dtype=f"S{width}")


def _decode(values: np.ndarray) -> list[str]:
    return [v.decode() if isinstance(v, bytes) else str(v) for v in values]


def _attr_str(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else str(value)


class AnalysisWriter:
    """Writer for a complete room analysis.

    Args:
        filename: Output file path
        analysis: Pipeline result to store
        compression: Compression algorithm for array datasets ('gzip', 'lzf', None)
        compression_level: Compression level (0-9 for gzip)

    Example:
        >>> with AnalysisWriter("room.h5", analysis) as writer:
        ...     writer.write()
    """

    def __init__(
        self,
        filename: str | Path,
        analysis: Analysis,
        compression: str | None = "gzip",
        compression_level: int = 4,
    ):
        self.filename = Path(filename)
        self.analysis = analysis
        self.compression = compression
        self.compression_opts = compression_level if compression == "gzip" else None
        self.file = h5py.File(self.filename, "w")

    def _dataset(self, group: h5py.Group, name: str, data: np.ndarray) -> h5py.Dataset:
        # Compression needs chunking, which h5py cannot do for empty datasets
        if self.compression is None or data.size == 0:
            return group.create_dataset(name, data=data)
        return group.create_dataset(
            name,
            data=data,
            compression=self.compression,
            compression_opts=self.compression_opts,
        )

    def write(self, **extra_metadata) -> None:
        """Write all groups.

        Args:
            **extra_metadata: Additional attributes for /metadata
        """
        self._write_metadata(extra_metadata)
        self._write_room()
        self._write_placements()
        self._write_modes()
        self._write_heatmap()
        self._write_response()

    def _write_metadata(self, extra: dict[str, Any]):
        meta = self.file.create_group("metadata")
        meta.attrs["created_at"] = datetime.now(timezone.utc).isoformat()
        meta.attrs["version"] = __version__
        meta.attrs["freq_min"] = self.analysis.state.freq_min
        meta.attrs["freq_max"] = self.analysis.state.freq_max
        meta.attrs["resolution"] = self.analysis.state.resolution
        for key, value in extra.items():
            meta.attrs[key] = value

    def _write_room(self):
        room = self.analysis.state.room
        room_group = self.file.create_group("room")
        for name in _ROOM_FIELDS:
            room_group.attrs[name] = getattr(room, name)

        segments_group = self.file.create_group("segments")
        for seg in self.analysis.segments:
            seg_group = segments_group.create_group(seg.id)
            seg_group.attrs["length"] = seg.length
            seg_group.attrs["width"] = seg.width
            seg_group.attrs["height"] = seg.height
            seg_group.attrs["origin"] = [seg.origin.x, seg.origin.y]

    def _write_placements(self):
        state = self.analysis.state
        listener = self.file.create_group("listener")
        listener.attrs["x"] = state.listener.x
        listener.attrs["y"] = state.listener.y
        listener.attrs["z"] = state.listener.z

        subs = self.file.create_group("subwoofers")
        subs.create_dataset("ids", data=_encode([sub.id for sub in state.subwoofers]))
        positions = np.array([[sub.x, sub.y] for sub in state.subwoofers], dtype=np.float64)
        subs.create_dataset("positions", data=positions.reshape(-1, 2))

    def _write_modes(self):
        modes = self.analysis.modes
        group = self.file.create_group("modes")
        indices = np.array([mode.indices for mode in modes], dtype=np.int32).reshape(-1, 3)
        self._dataset(group, "indices", indices)
        freq = self._dataset(
            group, "frequency", np.array([mode.frequency for mode in modes], dtype=np.float64)
        )
        freq.attrs["units"] = "Hz"
        self._dataset(group, "weight", np.array([mode.weight for mode in modes], dtype=np.float64))
        group.create_dataset("type", data=_encode([mode.type.value for mode in modes]))
        group.create_dataset("segment_id", data=_encode([mode.segment_id for mode in modes]))

    def _write_heatmap(self):
        heatmap = self.analysis.heatmap
        group = self.file.create_group("heatmap")
        data = self._dataset(group, "data", np.asarray(heatmap.data, dtype=np.float64))
        data.attrs["z"] = self.analysis.state.listener.z
        group.attrs["vmin"] = heatmap.vmin
        group.attrs["vmax"] = heatmap.vmax
        group.attrs["bounds"] = list(heatmap.bounds)
        group.attrs["resolution"] = heatmap.resolution

    def _write_response(self):
        response = self.analysis.response
        group = self.file.create_group("response")
        freqs = self._dataset(group, "frequencies", response.frequencies)
        freqs.attrs["units"] = "Hz"
        db = self._dataset(group, "db", response.db)
        db.attrs["units"] = "dB"

    def close(self):
        """Flush and close the file."""
        if self.file:
            self.file.flush()
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def write_analysis(filename: str | Path, analysis: Analysis, **kwargs) -> Path:
    """Write an analysis to an HDF5 file in one call.

    Args:
        filename: Output file path
        analysis: Pipeline result to store
        **kwargs: Passed to AnalysisWriter (compression, compression_level)

    Returns:
        Path of the written file
    """
    with AnalysisWriter(filename, analysis, **kwargs) as writer:
        writer.write()
    return writer.filename


class AnalysisReader:
    """Reader for room analyses written by AnalysisWriter.

    Example:
        >>> with AnalysisReader("room.h5") as reader:
        ...     response = reader.load_response()
        ...     heatmap = reader.load_heatmap()
    """

    def __init__(self, filename: str | Path):
        self.filename = Path(filename)
        self.file = h5py.File(self.filename, "r")

    def get_metadata(self) -> dict[str, Any]:
        """Get file metadata and room parameters as plain dicts."""
        metadata = {}
        if "metadata" in self.file:
            metadata["metadata"] = dict(self.file["metadata"].attrs)
        if "room" in self.file:
            metadata["room"] = dict(self.file["room"].attrs)
        if "listener" in self.file:
            metadata["listener"] = dict(self.file["listener"].attrs)
        return metadata

    def load_state(self) -> RoomState:
        """Rebuild the (clamped) input snapshot."""
        room_attrs = self.file["room"].attrs
        room = RoomConfig(
            room_type=_attr_str(room_attrs["room_type"]),
            length_a=float(room_attrs["length_a"]),
            width_a=float(room_attrs["width_a"]),
            height=float(room_attrs["height"]),
            length_b=float(room_attrs["length_b"]),
            width_b=float(room_attrs["width_b"]),
            orientation=_attr_str(room_attrs["orientation"]),
        )
        listener_attrs = self.file["listener"].attrs
        listener = Listener(
            x=float(listener_attrs["x"]),
            y=float(listener_attrs["y"]),
            z=float(listener_attrs["z"]),
        )
        ids = _decode(self.file["subwoofers/ids"][:])
        positions = self.file["subwoofers/positions"][:]
        subwoofers = tuple(
            Subwoofer(x=float(pos[0]), y=float(pos[1]), id=sub_id)
            for sub_id, pos in zip(ids, positions)
        )
        meta = self.file["metadata"].attrs
        return RoomState(
            room=room,
            listener=listener,
            subwoofers=subwoofers,
            resolution=int(meta["resolution"]),
            freq_min=float(meta["freq_min"]),
            freq_max=float(meta["freq_max"]),
        )

    def load_modes(self) -> list[Mode]:
        """Rebuild the mode list, including segment dimensions and origins."""
        segments = {}
        for seg_id, seg_group in self.file["segments"].items():
            attrs = seg_group.attrs
            origin = attrs["origin"]
            segments[seg_id] = (
                (float(attrs["length"]), float(attrs["width"]), float(attrs["height"])),
                Point2D(float(origin[0]), float(origin[1])),
            )

        group = self.file["modes"]
        indices = group["indices"][:]
        frequency = group["frequency"][:]
        weight = group["weight"][:]
        types = _decode(group["type"][:])
        segment_ids = _decode(group["segment_id"][:])

        modes = []
        for i, seg_id in enumerate(segment_ids):
            dimensions, origin = segments[seg_id]
            nx, ny, nz = (int(n) for n in indices[i])
            modes.append(
                Mode(
                    segment_id=seg_id,
                    nx=nx,
                    ny=ny,
                    nz=nz,
                    frequency=float(frequency[i]),
                    type=ModeType(types[i]),
                    weight=float(weight[i]),
                    dimensions=dimensions,
                    origin=origin,
                )
            )
        return modes

    def load_heatmap(self) -> Heatmap:
        group = self.file["heatmap"]
        return Heatmap(
            data=group["data"][:],
            vmin=float(group.attrs["vmin"]),
            vmax=float(group.attrs["vmax"]),
            bounds=Bounds(*(float(v) for v in group.attrs["bounds"])),
            resolution=int(group.attrs["resolution"]),
        )

    def load_response(self) -> FrequencyResponse:
        group = self.file["response"]
        return FrequencyResponse(frequencies=group["frequencies"][:], db=group["db"][:])

    def load_analysis(self) -> Analysis:
        """Rebuild the full Analysis stored in the file."""
        state = self.load_state()
        return Analysis(
            state=state,
            segments=resolve_geometry(state.room),
            modes=self.load_modes(),
            heatmap=self.load_heatmap(),
            response=self.load_response(),
        )

    def close(self):
        """Close the HDF5 file."""
        if self.file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
