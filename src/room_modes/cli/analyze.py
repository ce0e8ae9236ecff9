"""Command-line room mode report.

The room-modes CLI computes a full analysis for one room configuration and
prints the in-band mode list, the response peaks at the listening position
and the subwoofer placements. The analysis can be saved to HDF5 for
plotting elsewhere.
"""

import logging
import math
import sys
import time
from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from room_modes._version import __version__
from room_modes.core.constants import DEFAULT_RESOLUTION, FREQ_MAX, FREQ_MIN
from room_modes.core.heatmap import export_resolution, sample_export_grid
from room_modes.core.modes import ModeType, mode_distribution, modes_in_band
from room_modes.geometry.room import RoomConfig, resolve_geometry
from room_modes.io.hdf5 import write_analysis
from room_modes.session.inputs import (
    FIELD_MINIMUMS,
    apply_room_inputs,
    parse_listener_height,
    parse_value,
)
from room_modes.session.state import (
    Analysis,
    Listener,
    RoomState,
    Subwoofer,
    default_subwoofers,
    recompute,
)

from .progress import GridProgress, format_time, print_room_info

console = Console()
log = logging.getLogger(__name__)

MODE_COLORS = {
    ModeType.AXIAL: "red",
    ModeType.TANGENTIAL: "yellow",
    ModeType.OBLIQUE: "green",
}


def configure_logging(verbose: bool):
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


def build_state(
    raw_room: dict,
    listener: tuple[float, float] | None,
    listener_height: str | None,
    subs: tuple[tuple[float, float], ...],
    resolution: int,
    freq_min: float,
    freq_max: float,
) -> RoomState:
    """Turn CLI options into a RoomState.

    Dimension options are parsed leniently; rejected values fall back to
    the defaults and are reported as warnings.
    """
    defaults = RoomConfig()
    room = apply_room_inputs(defaults, raw_room)
    for name, minimum in FIELD_MINIMUMS.items():
        raw = raw_room.get(name)
        if raw is not None and math.isnan(parse_value(raw, math.nan, minimum)):
            log.warning("Ignoring %s=%r, using %s m", name, raw, getattr(defaults, name))

    position = Listener()
    z = parse_listener_height(listener_height, position.z) if listener_height else position.z
    if listener is not None:
        position = Listener(x=listener[0], y=listener[1], z=z)
    else:
        center = resolve_geometry(room)[0].center
        position = Listener(x=center.x, y=center.y, z=z)

    if subs:
        subwoofers = tuple(Subwoofer(x=x, y=y) for x, y in subs)
    else:
        subwoofers = default_subwoofers(resolve_geometry(room))

    return RoomState(
        room=room,
        listener=position,
        subwoofers=subwoofers,
        resolution=resolution,
        freq_min=freq_min,
        freq_max=freq_max,
    )


def print_modes(analysis: Analysis, max_modes: int):
    """Print the in-band modes and the per-type counts."""
    state = analysis.state
    modes = modes_in_band(analysis.modes, state.freq_min, state.freq_max)

    table = Table(title=f"Modes ({state.freq_min:.0f}–{state.freq_max:.0f} Hz)")
    table.add_column("f (Hz)", justify="right")
    table.add_column("Type")
    table.add_column("(nx,ny,nz)")
    table.add_column("Segment", justify="center")
    for mode in modes[:max_modes]:
        color = MODE_COLORS[mode.type]
        table.add_row(
            f"{mode.frequency:.1f}",
            f"[{color}]{mode.type.value.capitalize()}[/{color}]",
            f"({mode.nx},{mode.ny},{mode.nz})",
            mode.segment_id,
        )
    console.print(table)
    if len(modes) > max_modes:
        console.print(f"[dim]… {len(modes) - max_modes} more[/dim]")

    counts = mode_distribution(analysis.modes, state.freq_min, state.freq_max)
    summary = ", ".join(f"{len(group)} {mode_type.value}" for mode_type, group in counts.items())
    console.print(f"Mode count: {summary}")
    console.print()


def print_response(analysis: Analysis):
    """Print the response peaks at the listening position."""
    response = analysis.response
    peaks = response.peaks()
    if len(peaks) == 0:
        console.print("No response peaks in band")
        return
    table = Table(title="Response peaks at listener")
    table.add_column("f (Hz)", justify="right")
    table.add_column("Level (dB)", justify="right")
    for freq in peaks:
        table.add_row(f"{freq:.1f}", f"{response.value_at(freq):.2f}")
    console.print(table)
    console.print()


def print_subwoofers(analysis: Analysis):
    """Print subwoofer positions after clamping."""
    console.print("[bold]Subwoofer positions:[/bold]")
    if not analysis.state.subwoofers:
        console.print("  none")
    for idx, sub in enumerate(analysis.state.subwoofers, start=1):
        console.print(f"  Sub {idx}: x={sub.x:.2f} m, y={sub.y:.2f} m")
    console.print()


@click.command()
@click.option("--length-a", default="6", help="Segment A length along x (m, min 1)")
@click.option("--width-a", default="4.5", help="Segment A width along y (m, min 1)")
@click.option("--height", default="2.6", help="Ceiling height (m, min 2)")
@click.option("--l-shape", is_flag=True, help="Add segment B for an L-shaped room")
@click.option("--length-b", default="3", help="Segment B length along x (m, min 0.5)")
@click.option("--width-b", default="2.5", help="Segment B width along y (m, min 0.5)")
@click.option(
    "--orientation",
    type=click.Choice(["x", "y"]),
    default="x",
    help="Axis along which segment B continues segment A",
)
@click.option(
    "--listener",
    type=(float, float),
    default=None,
    help="Listener position X Y (m, default: center of segment A)",
)
@click.option("--listener-height", default=None, help="Listener ear height (m, min 0.8)")
@click.option(
    "--sub",
    "subs",
    type=(float, float),
    multiple=True,
    help="Subwoofer position X Y (m), repeatable",
)
@click.option("--resolution", type=click.IntRange(min=1), default=DEFAULT_RESOLUTION,
              help="Heatmap cells per axis")
@click.option("--freq-min", type=float, default=FREQ_MIN, help="Lower band edge (Hz)")
@click.option("--freq-max", type=float, default=FREQ_MAX, help="Upper band edge (Hz)")
@click.option("--max-modes", type=click.IntRange(min=0), default=25, help="Modes to list")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Save the analysis to an HDF5 file",
)
@click.option("--export", "export", is_flag=True, help="Sample the heatmap at export resolution")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output with debug info")
@click.version_option(version=__version__, prog_name="room-modes")
def main(
    length_a: str,
    width_a: str,
    height: str,
    l_shape: bool,
    length_b: str,
    width_b: str,
    orientation: str,
    listener: tuple[float, float] | None,
    listener_height: str | None,
    subs: tuple[tuple[float, float], ...],
    resolution: int,
    freq_min: float,
    freq_max: float,
    max_modes: int,
    output: Path | None,
    export: bool,
    verbose: bool,
):
    """Analyze the low-frequency room modes of a listening room.

    Dimensions accept a comma or a dot as decimal separator:

    \b
        room-modes --length-a 5,2 --width-a 3,9 --height 2,5
        room-modes --l-shape --orientation y --sub 0.5 0.5 --sub 4.5 0.5
        room-modes --export -o room.h5
    """
    configure_logging(verbose)
    try:
        state = build_state(
            {
                "length_a": length_a,
                "width_a": width_a,
                "height": height,
                "length_b": length_b,
                "width_b": width_b,
                "orientation": orientation,
                "l_shape": l_shape,
            },
            listener,
            listener_height,
            subs,
            resolution,
            freq_min,
            freq_max,
        )

        console.print("\n[bold]Room mode analysis[/bold]", style="blue")
        console.print("─" * 60)

        start_time = time.time()
        analysis = recompute(state)

        if export:
            with GridProgress(console, export_resolution(resolution)) as progress:
                heatmap = sample_export_grid(
                    analysis.segments,
                    analysis.modes,
                    analysis.state.listener.z,
                    resolution,
                    callback=progress.update,
                )
            analysis = replace(analysis, heatmap=heatmap)

        runtime = time.time() - start_time

        print_room_info(console, analysis, output)
        print_modes(analysis, max_modes)
        print_response(analysis)
        print_subwoofers(analysis)

        if output is not None:
            write_analysis(output, analysis)
            console.print(f"✓ [bold green]Saved[/bold green] {output}")

        console.print(f"Runtime: {format_time(runtime)}", style="dim")

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        if verbose:
            console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
