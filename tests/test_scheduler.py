"""Unit tests for framescript.scheduler – holds, presses, releases, latching."""
import itertools

import pytest
from framescript.buttons import Button
from framescript.clock import FrameClock
from framescript.errors import ConfigurationError
from framescript.scheduler import HoldRequest, InputScheduler


def _make_scheduler(**kwargs):
    clock = FrameClock()
    return clock, InputScheduler(clock, **kwargs)


def _pressed_frames(clock, scheduler, button, frames):
    """Latch `frames` frames and return those on which `button` was asserted."""
    pressed = []
    for _ in range(frames):
        if scheduler.latch().is_pressed(button):
            pressed.append(clock.frame)
        clock.advance()
    return pressed


class TestHoldRequest:
    def test_window(self):
        req = HoldRequest(Button.A, 10, 3)
        assert req.end_frame == 13
        assert not req.covers(9)
        assert req.covers(10) and req.covers(12)
        assert not req.covers(13)
        assert req.expired(13)

    def test_zero_duration_is_one_shot(self):
        req = HoldRequest(Button.A, 4, 0)
        assert req.covers(4)
        assert not req.covers(5)

    def test_until_released(self):
        req = HoldRequest(Button.A, 0, None)
        assert req.end_frame is None
        assert req.covers(10_000)
        assert not req.expired(10_000)


class TestHold:
    def test_hold_asserts_for_duration(self):
        clock, s = _make_scheduler()
        s.hold(["A"], 5)
        assert _pressed_frames(clock, s, Button.A, 10) == [0, 1, 2, 3, 4]

    def test_hold_multiple_buttons_same_frame(self):
        clock, s = _make_scheduler()
        s.hold(["R", "A"], 1)
        state = s.latch()
        assert state.buttons == frozenset({Button.RIGHT, Button.A})

    def test_zero_duration_asserts_one_frame(self):
        clock, s = _make_scheduler()
        s.hold(["B"], 0)
        assert _pressed_frames(clock, s, Button.B, 3) == [0]

    def test_hold_without_duration_until_release(self):
        clock, s = _make_scheduler()
        s.hold(["B"], None)
        assert _pressed_frames(clock, s, Button.B, 50) == list(range(50))
        s.release("B")
        assert not s.latch().is_pressed("B")

    def test_shorter_rehold_keeps_running_hold(self):
        clock, s = _make_scheduler()
        s.hold(["A"], 10)
        for _ in range(5):
            s.latch()
            clock.advance()
        s.hold(["A"], 2)
        assert _pressed_frames(clock, s, Button.A, 10) == [5, 6, 7, 8, 9]

    def test_rehold_extends_when_longer(self):
        clock, s = _make_scheduler()
        s.hold(["A"], 2)
        s.latch()
        clock.advance()
        s.hold(["A"], 4)
        assert _pressed_frames(clock, s, Button.A, 10) == [1, 2, 3, 4]

    def test_negative_duration_rejected(self):
        clock, s = _make_scheduler()
        with pytest.raises(ConfigurationError):
            s.hold(["A"], -1)

    def test_unknown_button_rejected(self):
        clock, s = _make_scheduler()
        with pytest.raises(ConfigurationError):
            s.hold(["X"], 1)
        assert s.pending == 0


class TestPress:
    def test_press_is_one_frame(self):
        clock, s = _make_scheduler()
        s.press("A")
        assert _pressed_frames(clock, s, Button.A, 3) == [0]

    def test_press_equals_hold_one(self):
        clock_a, pressed = _make_scheduler()
        clock_b, held = _make_scheduler()
        pressed.press("B")
        held.hold(["B"], 1)
        for _ in range(3):
            assert pressed.latch() == held.latch()
            clock_a.advance()
            clock_b.advance()

    def test_press_on_held_button_is_noop(self):
        clock, s = _make_scheduler()
        s.hold(["R"], 30)
        s.press("R")
        assert s.pending == 1
        assert _pressed_frames(clock, s, Button.RIGHT, 40) == list(range(30))

    def test_press_on_button_held_until_release(self):
        clock, s = _make_scheduler()
        s.hold(["B"], None)
        s.press("B")
        assert _pressed_frames(clock, s, Button.B, 20) == list(range(20))

    def test_press_several_buttons_same_frame(self):
        clock, s = _make_scheduler()
        s.press("R", "B")
        assert s.latch().mask == Button.RIGHT.bit | Button.B.bit


class TestRelease:
    def test_release_cuts_hold_short(self):
        clock, s = _make_scheduler()
        s.hold(["A"], 30)
        for _ in range(3):
            s.latch()
            clock.advance()
        assert s.release("A") == 1
        assert _pressed_frames(clock, s, Button.A, 5) == []

    def test_release_after_hold_same_frame_wins(self):
        clock, s = _make_scheduler()
        s.hold(["A"], 5)
        s.release("A")
        assert not s.latch().is_pressed("A")

    def test_hold_after_release_same_frame_applies(self):
        clock, s = _make_scheduler()
        s.release("A")
        s.hold(["A"], 5)
        assert s.latch().is_pressed("A")

    def test_release_unheld_is_noop(self):
        clock, s = _make_scheduler()
        assert s.release("DOWN") == 0

    def test_release_cancels_scheduled(self):
        clock, s = _make_scheduler()
        s.schedule("START", 3)
        s.release("START")
        assert _pressed_frames(clock, s, Button.START, 5) == []

    def test_release_all(self):
        clock, s = _make_scheduler()
        s.hold(["A", "B", "RIGHT"], None)
        s.release_all()
        assert s.latch().mask == 0


class TestOrderIndependence:
    def test_holds_and_releases_of_distinct_buttons_commute(self):
        ops = [
            lambda s: s.hold(["A"], 5),
            lambda s: s.hold(["B"], 3),
            lambda s: s.press("RIGHT"),
            lambda s: s.release("START"),
        ]
        results = set()
        for perm in itertools.permutations(ops):
            clock, s = _make_scheduler()
            for op in perm:
                op(s)
            results.add(s.latch().buttons)
        assert len(results) == 1
        assert results.pop() == frozenset({Button.A, Button.B, Button.RIGHT})


class TestToggleAndSchedule:
    def test_toggle_holds_then_releases(self):
        clock, s = _make_scheduler()
        s.toggle("R")
        assert _pressed_frames(clock, s, Button.RIGHT, 3) == [0, 1, 2]
        s.toggle("R")
        assert not s.latch().is_pressed("R")

    def test_schedule_future(self):
        clock, s = _make_scheduler()
        s.schedule(Button.START, 2, 2)
        assert _pressed_frames(clock, s, Button.START, 6) == [2, 3]

    def test_schedule_in_past_rejected(self):
        clock, s = _make_scheduler()
        clock.advance()
        clock.advance()
        with pytest.raises(ConfigurationError):
            s.schedule("A", 1)


class TestLatch:
    def test_latch_once_per_frame(self):
        clock, s = _make_scheduler()
        s.latch()
        with pytest.raises(RuntimeError, match="already latched"):
            s.latch()
        clock.advance()
        s.latch()

    def test_peek_does_not_consume(self):
        clock, s = _make_scheduler()
        s.press("A")
        assert s.peek().is_pressed("A")
        assert s.latch().is_pressed("A")

    def test_latch_reports_frame(self):
        clock, s = _make_scheduler()
        clock.advance()
        assert s.latch().frame == 1


class TestExclusiveDirections:
    def test_opposites_allowed_by_default(self):
        clock, s = _make_scheduler()
        s.hold(["LEFT", "RIGHT"], 2)
        assert s.latch().buttons == frozenset({Button.LEFT, Button.RIGHT})

    def test_latest_direction_wins(self):
        clock, s = _make_scheduler(exclusive_directions=True)
        s.hold(["UP"], 5)
        s.hold(["DOWN"], 5)
        assert s.latch().buttons == frozenset({Button.DOWN})

    def test_unrelated_buttons_unaffected(self):
        clock, s = _make_scheduler(exclusive_directions=True)
        s.hold(["R", "A"], 5)
        s.hold(["L"], 1)
        assert s.latch().buttons == frozenset({Button.LEFT, Button.A})
        clock.advance()
        assert s.latch().buttons == frozenset({Button.RIGHT, Button.A})
