"""Pytest configuration for the room-modes test suite.

Shared fixtures build the reference rooms used across modules:
- rect_room: 6 m × 4.5 m × 2.6 m rectangular room
- lshape_room: the same room with a 3 m × 2.5 m segment B along x
"""

import pytest

from room_modes import RoomConfig, compute_modes, resolve_geometry


@pytest.fixture
def rect_config():
    return RoomConfig(room_type="rect", length_a=6.0, width_a=4.5, height=2.6)


@pytest.fixture
def lshape_config():
    return RoomConfig(
        room_type="lshape",
        length_a=6.0,
        width_a=4.5,
        height=2.6,
        length_b=3.0,
        width_b=2.5,
        orientation="x",
    )


@pytest.fixture
def rect_room(rect_config):
    return resolve_geometry(rect_config)


@pytest.fixture
def lshape_room(lshape_config):
    return resolve_geometry(lshape_config)


@pytest.fixture
def rect_modes(rect_room):
    return compute_modes(rect_room)


@pytest.fixture
def lshape_modes(lshape_room):
    return compute_modes(lshape_room)
