#!/usr/bin/env python3
"""
Example: Listening Position Survey in an L-Shaped Room
======================================================

Compares candidate listening positions in an L-shaped living room by the
smoothness of the modal response at each seat. The room is the default
6 m x 4.5 m main area with a 3 m x 2.5 m dining alcove along x:

    +-----------------+
    |                 |
    |        A        +--------+
    |                 |   B    |
    +-----------------+--------+

For each seat the script reports the response spread (highest minus
lowest level in 20-200 Hz) and the two strongest peaks. A smaller spread
means fewer audible booms and holes. The best seat is then analyzed in
full and saved to HDF5.

Output: lshape_listening_room.h5
"""

import argparse

import numpy as np

from room_modes import (
    Listener,
    RoomConfig,
    RoomState,
    compute_modes,
    frequency_response,
    recompute,
    resolve_geometry,
    write_analysis,
)

# Candidate seats (x, y) in meters
SEATS = {
    "sofa, back wall": (3.0, 4.2),
    "sofa, 38% rule": (3.0, 2.8),
    "room center": (3.0, 2.25),
    "armchair, corner": (0.8, 3.8),
    "dining table": (7.5, 1.25),
}


def survey_seats(room: RoomConfig, ear_height: float):
    """Rank the candidate seats by response spread.

    Args:
        room: Room configuration
        ear_height: Listener ear height in meters

    Returns:
        List of (name, spread_db, peaks) sorted from smoothest to roughest
    """
    segments = resolve_geometry(room)
    modes = compute_modes(segments)

    results = []
    for name, point in SEATS.items():
        response = frequency_response(point, ear_height, modes)
        spread = float(np.max(response.db) - np.min(response.db))
        # Strongest two peaks by level
        peaks = sorted(response.peaks(), key=response.value_at, reverse=True)[:2]
        results.append((name, spread, peaks))

    return sorted(results, key=lambda item: item[1])


def main():
    """Main entry point for the seat survey."""
    parser = argparse.ArgumentParser(
        description="Rank listening positions in an L-shaped room",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python examples/lshape_listening_room.py
    python examples/lshape_listening_room.py --height 2.8 --ear-height 1.0
    python examples/lshape_listening_room.py --output my_room.h5
        """,
    )
    parser.add_argument(
        "--height",
        type=float,
        default=2.6,
        help="Ceiling height in meters (default: 2.6)",
    )
    parser.add_argument(
        "--ear-height",
        type=float,
        default=1.2,
        help="Listener ear height in meters (default: 1.2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="lshape_listening_room.h5",
        help="Output HDF5 file (default: lshape_listening_room.h5)",
    )
    args = parser.parse_args()

    room = RoomConfig(room_type="lshape", height=args.height)

    print("=" * 60)
    print("L-Shaped Room Seat Survey")
    print("=" * 60)
    print()
    print("Room:")
    print(f"  Main area (A): {room.length_a:.1f} m x {room.width_a:.1f} m")
    print(f"  Alcove (B):    {room.length_b:.1f} m x {room.width_b:.1f} m along {room.orientation}")
    print(f"  Ceiling:       {room.height:.2f} m")
    print()

    results = survey_seats(room, args.ear_height)

    print(f"{'Seat':<20} {'Spread':>8}   Strongest peaks")
    print("-" * 60)
    for name, spread, peaks in results:
        peak_text = ", ".join(f"{freq:.0f} Hz" for freq in peaks) or "none"
        print(f"{name:<20} {spread:7.1f} dB  {peak_text}")
    print()

    best_name = results[0][0]
    x, y = SEATS[best_name]
    print(f"Smoothest seat: {best_name} ({x:.2f} m, {y:.2f} m)")

    state = RoomState.default(room)
    state = RoomState(
        room=room,
        listener=Listener(x=x, y=y, z=args.ear_height),
        subwoofers=state.subwoofers,
    )
    analysis = recompute(state)
    path = write_analysis(args.output, analysis)

    print(f"  Modes analyzed: {len(analysis.modes)}")
    print(f"  Heatmap range: {analysis.heatmap.vmin:.3f} to {analysis.heatmap.vmax:.3f}")
    print(f"  Saved: {path}")


if __name__ == "__main__":
    main()
