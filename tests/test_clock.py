"""Unit tests for framescript.clock – frame counter and real-time pacing."""
import itertools
import time
from unittest.mock import patch

import pytest
from framescript.clock import FrameClock, FramePacer
from framescript.errors import ConfigurationError


class TestFrameClock:
    def test_starts_at_zero(self):
        assert FrameClock().frame == 0

    def test_advance_returns_new_frame(self):
        clock = FrameClock()
        assert clock.advance() == 1
        assert clock.advance() == 2
        assert clock.frame == 2

    def test_monotonic(self):
        clock = FrameClock()
        seen = [clock.advance() for _ in range(100)]
        assert seen == list(range(1, 101))


class TestFramePacer:
    def test_max_speed_sets_zero_budget(self):
        pacer = FramePacer(speed=0)
        assert pacer.frame_budget == 0.0

    def test_1x_speed_sets_correct_budget(self):
        pacer = FramePacer(frame_rate=60, speed=1)
        assert abs(pacer.frame_budget - (1.0 / 60.0)) < 1e-9

    def test_2x_speed_sets_correct_budget(self):
        pacer = FramePacer(frame_rate=60, speed=2)
        assert abs(pacer.frame_budget - (1.0 / 120.0)) < 1e-9

    def test_negative_speed_rejected(self):
        with pytest.raises(ConfigurationError):
            FramePacer(speed=-1)

    def test_zero_frame_rate_rejected(self):
        with pytest.raises(ConfigurationError):
            FramePacer(frame_rate=0)

    def test_throttle_sleeps_when_budget_set(self):
        pacer = FramePacer(speed=1)
        sleep_calls = []
        with patch("time.sleep", side_effect=lambda s: sleep_calls.append(s)):
            pacer._last_frame_time = time.perf_counter() + 10  # force remaining > 0
            pacer.tick()
        assert len(sleep_calls) == 1
        assert sleep_calls[0] > 0

    def test_no_sleep_when_max_speed(self):
        pacer = FramePacer(speed=0)
        sleep_calls = []
        with patch("time.sleep", side_effect=lambda s: sleep_calls.append(s)):
            for _ in range(10):
                pacer.tick()
        assert sleep_calls == []

    def test_real_fps_measured_every_60_frames(self):
        with patch("time.perf_counter", side_effect=itertools.count(0.0, 0.01)):
            pacer = FramePacer(speed=0)
            for _ in range(59):
                pacer.tick()
            assert pacer.real_fps == 0.0
            pacer.tick()
        assert pacer.real_fps > 0
