"""Tolerant parsing of user-entered room parameters.

Form fields deliver raw text such as "4,5" or "3.2 m". Values that cannot
be read, are not finite, or fall below the field's minimum are rejected by
returning the previous value, so an edit in progress never breaks the
model.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from room_modes.geometry.room import ORIENTATIONS, RoomConfig

# Leading decimal number, optionally signed, with optional exponent
_NUMBER_PREFIX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Smallest accepted value per room field (m)
FIELD_MINIMUMS = {
    "length_a": 1.0,
    "width_a": 1.0,
    "height": 2.0,
    "length_b": 0.5,
    "width_b": 0.5,
}

MIN_LISTENER_HEIGHT = 0.8

_TRUE_WORDS = ("1", "true", "yes", "on", "lshape")
_FALSE_WORDS = ("0", "false", "no", "off", "", "rect")


def parse_value(raw: Any, previous: float, minimum: float | None = None) -> float:
    """Parse a numeric input, falling back to the previous value.

    A comma is accepted as decimal separator. Trailing text after the
    leading number is ignored ("3.5 m" -> 3.5).

    Args:
        raw: Raw input (string or number)
        previous: Value to keep if raw is rejected
        minimum: Smallest accepted value; None or 0 disables the check

    Returns:
        The parsed value, or previous
    """
    if isinstance(raw, bool) or raw is None:
        return previous
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _NUMBER_PREFIX.match(str(raw).replace(",", ".", 1))
        if match is None:
            return previous
        value = float(match.group(1))

    if not math.isfinite(value):
        return previous
    if minimum and value < minimum:
        return previous
    return value


def parse_flag(raw: Any, previous: bool) -> bool:
    """Parse a checkbox-style input, falling back to the previous value.

    Booleans and numbers are taken by truth value. Strings are matched
    case-insensitively against _TRUE_WORDS and _FALSE_WORDS; anything else
    keeps previous.
    """
    if isinstance(raw, (bool, int, float)):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return previous


def apply_room_inputs(room: RoomConfig, raw: Mapping[str, Any]) -> RoomConfig:
    """Apply raw form values to a room configuration.

    Recognized keys are the RoomConfig dimension fields, "orientation" and
    "l_shape" (a bool or a checkbox string, see parse_flag). Unknown keys
    are ignored.

    Args:
        room: Current configuration
        raw: Raw input values by field name

    Returns:
        Updated configuration (room itself if nothing changed)
    """
    changes: dict[str, Any] = {}
    for name, minimum in FIELD_MINIMUMS.items():
        if name in raw:
            changes[name] = parse_value(raw[name], getattr(room, name), minimum)

    orientation = raw.get("orientation")
    if isinstance(orientation, str) and orientation.strip().lower() in ORIENTATIONS:
        changes["orientation"] = orientation.strip().lower()

    if "l_shape" in raw:
        l_shape = parse_flag(raw["l_shape"], room.is_lshape)
        changes["room_type"] = "lshape" if l_shape else "rect"

    if not changes:
        return room
    return replace(room, **changes)


def parse_listener_height(raw: Any, previous: float) -> float:
    """Parse the listener ear height (minimum 0.8 m)."""
    return parse_value(raw, previous, MIN_LISTENER_HEIGHT)
