"""
Unit tests for the session layer.

Tests verify:
- Tolerant parsing of form inputs
- RoomState validation and the recompute pipeline
- Listener and subwoofer clamping
- Coalesced recomputes in RoomSession
"""

import math
from dataclasses import replace

import pytest

from room_modes import (
    CoalescingScheduler,
    Listener,
    RoomConfig,
    RoomSession,
    RoomState,
    Subwoofer,
    parse_value,
    recompute,
)
from room_modes.session import (
    apply_room_inputs,
    clamp_listener,
    clamp_subwoofers,
    default_subwoofers,
    new_subwoofer_position,
    parse_listener_height,
)

# =============================================================================
# Input Parsing Tests
# =============================================================================


class TestParseValue:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("4,5", 4.5),
            ("3.5 m", 3.5),
            (" 2,75m ", 2.75),
            ("1,2,3", 1.2),
            ("1e1", 10.0),
            (".5", 0.5),
            (7, 7.0),
            (2.5, 2.5),
        ],
    )
    def test_accepted(self, raw, expected):
        assert parse_value(raw, 99.0) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "m 3", "inf", "nan", math.inf, math.nan, None, True])
    def test_rejected_keeps_previous(self, raw):
        assert parse_value(raw, 6.0) == 6.0

    def test_below_minimum_keeps_previous(self):
        assert parse_value("0,5", 4.5, minimum=1.0) == 4.5
        assert parse_value("1", 4.5, minimum=1.0) == 1.0

    def test_zero_minimum_disables_check(self):
        assert parse_value("-2", 1.0, minimum=0) == -2.0
        assert parse_value("-2", 1.0) == -2.0

    def test_listener_height_minimum(self):
        assert parse_listener_height("0,5", 1.2) == 1.2
        assert parse_listener_height("1,1", 1.2) == 1.1


class TestApplyRoomInputs:
    def test_dimensions(self):
        room = apply_room_inputs(RoomConfig(), {"length_a": "5,2", "height": "2.4 m"})

        assert room.length_a == 5.2
        assert room.height == 2.4
        assert room.width_a == 4.5

    def test_invalid_dimension_keeps_previous(self):
        room = apply_room_inputs(RoomConfig(), {"height": "1.5", "width_b": "x"})

        assert room.height == 2.6
        assert room.width_b == 2.5

    def test_orientation_case_insensitive(self):
        assert apply_room_inputs(RoomConfig(), {"orientation": " Y "}).orientation == "y"

    def test_unknown_orientation_ignored(self):
        assert apply_room_inputs(RoomConfig(), {"orientation": "z"}).orientation == "x"

    def test_l_shape_toggle(self):
        room = apply_room_inputs(RoomConfig(), {"l_shape": True})
        assert room.room_type == "lshape"
        assert apply_room_inputs(room, {"l_shape": False}).room_type == "rect"

    @pytest.mark.parametrize("raw", ["false", "0", "no", "off", "False", "", 0])
    def test_l_shape_false_strings_keep_rect(self, raw):
        """Test form strings meaning "unchecked" do not select the L-shape."""
        assert apply_room_inputs(RoomConfig(), {"l_shape": raw}).room_type == "rect"

    @pytest.mark.parametrize("raw", ["true", "1", "yes", " ON ", 1])
    def test_l_shape_true_strings(self, raw):
        assert apply_room_inputs(RoomConfig(), {"l_shape": raw}).room_type == "lshape"

    def test_l_shape_unreadable_keeps_previous(self):
        room = RoomConfig(room_type="lshape")
        assert apply_room_inputs(room, {"l_shape": "maybe"}).room_type == "lshape"
        assert apply_room_inputs(RoomConfig(), {"l_shape": None}).room_type == "rect"

    def test_no_changes_returns_same_object(self):
        room = RoomConfig()
        assert apply_room_inputs(room, {"unrelated": "1"}) is room


# =============================================================================
# State Tests
# =============================================================================


class TestRoomState:
    def test_default_state(self):
        state = RoomState.default()

        assert state.listener == Listener(3.0, 2.25, 1.2)
        assert [(sub.x, sub.y) for sub in state.subwoofers] == [
            pytest.approx((1.2, 0.9)),
            pytest.approx((4.8, 0.9)),
        ]
        assert state.resolution == 60
        assert (state.freq_min, state.freq_max) == (20.0, 200.0)

    def test_invalid_resolution(self):
        with pytest.raises(ValueError, match="resolution"):
            RoomState(resolution=0)

    def test_invalid_band(self):
        with pytest.raises(ValueError, match="freq_max"):
            RoomState(freq_min=100.0, freq_max=100.0)

    def test_subwoofer_ids_unique(self):
        ids = {Subwoofer(1.0, 1.0).id for _ in range(20)}
        assert len(ids) == 20

    def test_find_subwoofer(self):
        state = RoomState.default()
        sub = state.subwoofers[1]

        assert state.find_subwoofer(sub.id) is sub
        with pytest.raises(KeyError):
            state.find_subwoofer("missing")


class TestPlacement:
    def test_default_subwoofers_empty_room(self):
        assert default_subwoofers([]) == ()

    def test_new_subwoofer_rect(self, rect_room):
        assert new_subwoofer_position(rect_room) == pytest.approx((3.0, 3.15))

    def test_new_subwoofer_lshape(self, lshape_room):
        """Test added subwoofers go into the last segment."""
        assert new_subwoofer_position(lshape_room) == pytest.approx((7.5, 1.75))

    def test_clamp_listener_outside(self, rect_room):
        listener = clamp_listener(Listener(x=10.0, y=-1.0, z=1.5), rect_room)
        assert listener == Listener(x=6.0, y=0.0, z=1.5)

    def test_clamp_listener_nan_goes_to_center(self, lshape_room):
        listener = clamp_listener(Listener(x=math.nan, y=1.0), lshape_room)
        assert (listener.x, listener.y) == (3.0, 2.25)

    def test_clamp_listener_missing_goes_to_center(self, rect_room):
        """Test a listener without coordinates is placed at segment A's center."""
        listener = clamp_listener(Listener(x=None, y=None, z=1.0), rect_room)
        assert listener == Listener(x=3.0, y=2.25, z=1.0)

        listener = clamp_listener(Listener(x=1.0, y=None), rect_room)
        assert (listener.x, listener.y) == (3.0, 2.25)

    def test_recompute_with_missing_listener(self):
        analysis = recompute(RoomState(listener=Listener(x=None, y=None), resolution=8))

        assert analysis.state.listener.point == (3.0, 2.25)
        assert len(analysis.response) == 181

    def test_clamp_listener_inside_unchanged(self, rect_room):
        listener = Listener(x=1.0, y=1.0)
        assert clamp_listener(listener, rect_room) is listener

    def test_clamp_subwoofers_keeps_ids(self, rect_room):
        subs = (Subwoofer(1.0, 1.0, id="a"), Subwoofer(9.0, 1.0, id="b"))

        clamped = clamp_subwoofers(subs, rect_room)

        assert [sub.id for sub in clamped] == ["a", "b"]
        assert clamped[0] is subs[0]
        assert (clamped[1].x, clamped[1].y) == (6.0, 1.0)


# =============================================================================
# Pipeline Tests
# =============================================================================


class TestRecompute:
    def test_default_analysis(self):
        analysis = recompute(RoomState.default())

        assert len(analysis.segments) == 1
        assert analysis.modes[0].indices == (1, 0, 0)
        assert analysis.heatmap.data.shape == (60, 60)
        assert len(analysis.response) == 181

    def test_state_is_clamped(self):
        state = RoomState(
            listener=Listener(x=20.0, y=20.0),
            subwoofers=(Subwoofer(-3.0, 2.0, id="s"),),
            resolution=10,
        )

        analysis = recompute(state)

        assert analysis.state.listener.point == (6.0, 4.5)
        assert analysis.state.subwoofers[0].point == (0.0, 2.0)
        assert analysis.state.subwoofers[0].id == "s"

    def test_band_follows_state(self):
        analysis = recompute(RoomState(resolution=10, freq_min=40.0, freq_max=120.0))

        assert analysis.response.frequencies[0] == 40.0
        assert analysis.response.frequencies[-1] == 120.0
        assert all(39.0 <= mode.frequency <= 130.0 for mode in analysis.modes)

    def test_heatmap_uses_listener_height(self):
        low = recompute(RoomState(listener=Listener(z=0.8), resolution=8))
        high = recompute(RoomState(listener=Listener(z=2.0), resolution=8))

        assert not (low.heatmap.data == high.heatmap.data).all()


# =============================================================================
# Scheduler Tests
# =============================================================================


class TestCoalescingScheduler:
    def test_requests_coalesce(self):
        runs = []
        scheduler = CoalescingScheduler(lambda: runs.append(1))

        assert scheduler.request() is True
        assert scheduler.request() is False
        assert scheduler.request() is False
        scheduler.tick()

        assert len(runs) == 1
        assert scheduler.run_count == 1
        assert not scheduler.pending

    def test_run_sees_latest_value(self):
        state = {"value": 0}
        scheduler = CoalescingScheduler(lambda: state["value"])

        for value in range(1, 6):
            state["value"] = value
            scheduler.request()

        assert scheduler.tick() == 5

    def test_tick_without_request(self):
        scheduler = CoalescingScheduler(lambda: "ran")
        assert scheduler.tick() is None
        assert scheduler.run_count == 0

    def test_cancel(self):
        scheduler = CoalescingScheduler(lambda: "ran")
        scheduler.request()
        scheduler.cancel()
        assert scheduler.tick() is None

    def test_request_during_run_schedules_next_tick(self):
        scheduler = None

        def task():
            scheduler.request()
            return scheduler.run_count

        scheduler = CoalescingScheduler(task)
        scheduler.request()

        assert scheduler.tick() == 1
        assert scheduler.pending
        assert scheduler.tick() == 2


# =============================================================================
# Session Tests
# =============================================================================


@pytest.fixture
def session():
    session = RoomSession(replace(RoomState.default(), resolution=12))
    session.tick()
    return session


class TestRoomSession:
    def test_first_tick_computes(self):
        updates = []
        session = RoomSession(RoomState(resolution=8), on_update=updates.append)

        assert session.analysis is None
        assert session.pending

        analysis = session.tick()

        assert analysis is not None
        assert session.analysis is analysis
        assert updates == [analysis]

    def test_idle_tick_returns_none(self, session):
        assert session.tick() is None

    def test_burst_of_edits_runs_once(self, session):
        runs_before = session.scheduler.run_count

        session.update_inputs(length_a="7")
        session.update_inputs(width_a="5")
        session.set_listener_position(2.0, 2.0)
        sub = session.add_subwoofer()
        session.move_subwoofer(sub.id, 1.0, 4.0)

        analysis = session.tick()

        assert session.scheduler.run_count == runs_before + 1
        assert analysis.state.room.length_a == 7.0
        assert analysis.state.room.width_a == 5.0
        assert analysis.state.listener.point == (2.0, 2.0)
        assert analysis.state.find_subwoofer(sub.id).point == (1.0, 4.0)
        assert session.tick() is None

    def test_rejected_input_does_not_recompute(self, session):
        session.update_inputs(length_a="abc", height="1.0")
        assert not session.pending

    def test_listener_height(self, session):
        session.update_inputs(listener_height="1,5")
        assert session.state.listener.z == 1.5

        session.update_inputs(listener_height="0.2")
        assert session.state.listener.z == 1.5

    def test_subwoofers_clamped_after_room_shrinks(self, session):
        """Test subwoofers outside a smaller room are pulled back inside."""
        ids = [sub.id for sub in session.state.subwoofers]

        session.update_inputs(length_a="4")
        analysis = session.tick()

        subs = analysis.state.subwoofers
        assert [sub.id for sub in subs] == ids
        assert subs[0].point == pytest.approx((1.2, 0.9))
        assert subs[1].point == pytest.approx((4.0, 0.9))
        assert session.state is analysis.state

    def test_listener_clamped_on_move(self, session):
        session.set_listener_position(50.0, 1.0)
        assert session.state.listener.point == (6.0, 1.0)

    def test_add_subwoofer(self, session):
        sub = session.add_subwoofer()

        assert len(session.state.subwoofers) == 3
        assert session.state.subwoofers[-1] is sub
        assert sub.point == pytest.approx((3.0, 3.15))

    def test_add_subwoofer_lshape(self, session):
        session.set_l_shape(True)
        sub = session.add_subwoofer()
        assert sub.point == pytest.approx((7.5, 1.75))

    def test_remove_subwoofer(self, session):
        first, second = session.state.subwoofers

        session.remove_subwoofer(first.id)

        assert session.state.subwoofers == (second,)

    def test_move_subwoofer_clamps(self, session):
        sub = session.state.subwoofers[0]

        moved = session.move_subwoofer(sub.id, -2.0, 2.0)

        assert moved.id == sub.id
        assert moved.point == (0.0, 2.0)

    def test_unknown_subwoofer(self, session):
        with pytest.raises(KeyError):
            session.remove_subwoofer("missing")
        with pytest.raises(KeyError):
            session.move_subwoofer("missing", 1.0, 1.0)

    def test_set_resolution(self, session):
        session.set_resolution(6)
        assert session.tick().heatmap.resolution == 6

    def test_recompute_now_cancels_pending(self, session):
        session.update_inputs(height="3")

        analysis = session.recompute()

        assert analysis.state.room.height == 3.0
        assert not session.pending
        assert session.tick() is None
