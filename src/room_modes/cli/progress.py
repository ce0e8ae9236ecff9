"""Progress display for heatmap sampling.

Provides rich terminal UI for long grid evaluations (export-resolution
heatmaps) including:
- Progress bar over grid rows
- Elapsed time and ETA
- Evaluation throughput (kcells/s)
- Memory usage
"""

import time

import psutil
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from room_modes.session.state import Analysis


def format_time(seconds: float) -> str:
    """Format time duration for display.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string like "850ms", "12s" or "1m 23s"
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.0f}s"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}m {secs:02d}s"


class GridProgress:
    """Real-time progress display for heatmap sampling.

    Pass update() as the callback of sample_grid; it receives the index of
    each finished row.

    Example:
        >>> with GridProgress(console, resolution) as progress:
        ...     heatmap = sample_grid(segments, modes, z, resolution, callback=progress.update)
    """

    def __init__(self, console: Console, resolution: int, update_interval: float = 0.1):
        """Initialize progress display.

        Args:
            console: Rich console instance
            resolution: Grid cells per axis (rows to evaluate)
            update_interval: Minimum time between stats updates (seconds)
        """
        self.console = console
        self.resolution = resolution
        self.update_interval = update_interval

        self.start_time = time.time()
        self.last_update = 0.0
        self.peak_memory = 0.0

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TextColumn("•"),
            TimeRemainingColumn(),
            console=console,
        )
        self.task = self.progress.add_task("Sampling heatmap", total=resolution)
        self.progress.start()

    def update(self, row: int):
        """Record a finished grid row.

        Args:
            row: Index of the row just evaluated (0-indexed)
        """
        self.progress.update(self.task, completed=row + 1)

        current_time = time.time()
        if current_time - self.last_update < self.update_interval:
            return

        elapsed = current_time - self.start_time
        cells = (row + 1) * self.resolution
        throughput = cells / elapsed / 1e3 if elapsed > 0 else 0.0

        memory = psutil.Process().memory_info().rss / (1024**2)  # MB
        self.peak_memory = max(self.peak_memory, memory)
        self.progress.update(
            self.task,
            description=f"Sampling heatmap ({throughput:.0f} kcells/s, {memory:.0f} MB)",
        )
        self.last_update = current_time

    def finish(self):
        """Stop the progress bar and print the sampling summary."""
        self.progress.stop()

        elapsed = time.time() - self.start_time
        self.console.print(
            f"Sampled {self.resolution} × {self.resolution} cells in {format_time(elapsed)}"
            f" (peak memory {self.peak_memory:.0f} MB)",
            style="dim",
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finish()


def print_room_info(console: Console, analysis: Analysis, output_path=None):
    """Print room and analysis parameters.

    Args:
        console: Rich console instance
        analysis: Pipeline result
        output_path: HDF5 output file, if any
    """
    state = analysis.state
    room = state.room

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Room type", "L-shaped" if room.is_lshape else "Rectangular")
    table.add_row(
        "Segment A",
        f"{room.length_a:.2f} m × {room.width_a:.2f} m × {room.height:.2f} m",
    )
    if room.is_lshape:
        table.add_row(
            f"Segment B ({room.orientation.upper()})",
            f"{room.length_b:.2f} m × {room.width_b:.2f} m",
        )
    listener = state.listener
    table.add_row("Listener", f"x={listener.x:.2f} m, y={listener.y:.2f} m, z={listener.z:.2f} m")
    table.add_row("Band", f"{state.freq_min:.0f}–{state.freq_max:.0f} Hz")
    heatmap = analysis.heatmap
    table.add_row("Heatmap", f"{heatmap.resolution} × {heatmap.resolution} cells")
    if output_path is not None:
        table.add_row("Output", str(output_path))

    console.print(table)
    console.print()
