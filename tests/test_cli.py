"""Tests for the room-modes command line report."""

import io
import tempfile
from pathlib import Path

import h5py
from click.testing import CliRunner
from rich.console import Console

from room_modes.cli.analyze import build_state, main
from room_modes.cli.progress import GridProgress, format_time


def run(*args):
    return CliRunner().invoke(main, list(args))


def test_default_report():
    """Test a default run prints modes, counts and subwoofers."""
    result = run("--resolution", "10")

    assert result.exit_code == 0, result.output
    assert "Room mode analysis" in result.output
    assert "Modes" in result.output
    assert "Mode count:" in result.output
    assert "Sub 1: x=1.20 m, y=0.90 m" in result.output
    assert "Sub 2: x=4.80 m, y=0.90 m" in result.output


def test_lshape_report_saved():
    """Test an L-shaped run with -o writes an analysis file."""
    with tempfile.NamedTemporaryFile(suffix=".h5", delete=False) as f:
        output_path = Path(f.name)

    try:
        result = run(
            "--l-shape",
            "--orientation", "y",
            "--sub", "1", "1",
            "--sub", "2", "6.5",
            "--resolution", "10",
            "-o", str(output_path),
        )

        assert result.exit_code == 0, result.output
        assert "Saved" in result.output
        assert "L-shaped" in result.output

        with h5py.File(output_path, "r") as f:
            assert set(f["segments"]) == {"A", "B"}
            assert f["room"].attrs["orientation"] == "y"
            assert f["subwoofers/positions"].shape == (2, 2)
    finally:
        if output_path.exists():
            output_path.unlink()


def test_export_resolution():
    with tempfile.NamedTemporaryFile(suffix=".h5", delete=False) as f:
        output_path = Path(f.name)

    try:
        result = run("--resolution", "10", "--export", "-o", str(output_path))

        assert result.exit_code == 0, result.output
        with h5py.File(output_path, "r") as f:
            assert f["heatmap/data"].shape == (120, 120)
    finally:
        if output_path.exists():
            output_path.unlink()


def test_comma_decimal_dimensions():
    result = run("--length-a", "5,2", "--height", "2,4", "--resolution", "10")

    assert result.exit_code == 0, result.output
    assert "5.20 m × 4.50 m × 2.40 m" in result.output


def test_invalid_dimension_warns():
    """Test an unreadable dimension falls back to the default with a warning."""
    result = run("--length-a", "abc", "--resolution", "10")

    assert result.exit_code == 0, result.output
    assert "Ignoring length_a" in result.output
    assert "6.00 m × 4.50 m" in result.output


def test_invalid_band_fails():
    result = run("--freq-min", "100", "--freq-max", "50", "--resolution", "10")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_invalid_resolution_rejected():
    result = run("--resolution", "0")
    assert result.exit_code == 2


def test_build_state_defaults():
    """Test the listener defaults to the center of segment A."""
    state = build_state({"length_a": "8", "l_shape": True}, None, None, (), 60, 20.0, 200.0)

    assert state.room.room_type == "lshape"
    assert (state.listener.x, state.listener.y) == (4.0, 2.25)
    assert len(state.subwoofers) == 2


def test_build_state_listener_height():
    state = build_state({}, (1.0, 2.0), "0,5", (), 60, 20.0, 200.0)

    # Below the 0.8 m minimum: keeps the default height
    assert state.listener.z == 1.2
    assert (state.listener.x, state.listener.y) == (1.0, 2.0)


def test_grid_progress_reports_peak_memory():
    """Test the progress summary includes the peak memory seen during updates."""
    console = Console(file=io.StringIO(), width=120)

    with GridProgress(console, 4, update_interval=0.0) as progress:
        for row in range(4):
            progress.update(row)

    assert progress.peak_memory > 0
    output = console.file.getvalue()
    assert "Sampled 4 × 4 cells" in output
    assert f"peak memory {progress.peak_memory:.0f} MB" in output


def test_format_time():
    assert format_time(0.25) == "250ms"
    assert format_time(12.4) == "12s"
    assert format_time(83) == "1m 23s"
