"""
clock – Frame counter and real-time frame pacing.

FrameClock is the runtime's only notion of time.  FramePacer optionally
throttles the host loop to the console's frame rate by sleeping between
frames; it never touches the frame counter.
"""

from __future__ import annotations

import logging
import time

from framescript.config import DEFAULT_SPEED, FPS_SAMPLE_FRAMES, FRAME_RATE
from framescript.errors import ConfigurationError

logger = logging.getLogger(__name__)


class FrameClock:
    """Monotonic frame counter, starting at 0."""

    def __init__(self) -> None:
        self._frame = 0

    @property
    def frame(self) -> int:
        return self._frame

    def advance(self) -> int:
        """Step exactly one frame and return the new frame number."""
        self._frame += 1
        return self._frame

    def __repr__(self) -> str:
        return f"FrameClock(frame={self._frame})"


class FramePacer:
    """
    Sleep-based throttle for the host loop.

    speed=0 → unthrottled
    speed=1 → frame_rate fps
    speed=N → N × frame_rate fps
    """

    def __init__(self, frame_rate: int = FRAME_RATE, speed: int = DEFAULT_SPEED) -> None:
        if frame_rate < 1:
            raise ConfigurationError(f"frame_rate must be >= 1, got {frame_rate}")
        self.frame_rate = frame_rate
        self._speed = 0
        self._frame_budget: float = 0.0  # seconds per frame; 0 = unthrottled
        self._last_frame_time: float = 0.0
        self._fps_wall_t0: float = 0.0
        self._fps_frames: int = 0
        self.real_fps: float = 0.0
        self.sleep_overrun_ms: float = 0.0
        self.set_speed(speed)

    @property
    def speed(self) -> int:
        return self._speed

    @property
    def frame_budget(self) -> float:
        return self._frame_budget

    def set_speed(self, speed: int) -> None:
        if speed < 0:
            raise ConfigurationError(f"speed must be >= 0, got {speed}")
        self._speed = speed
        self._frame_budget = 1.0 / (self.frame_rate * speed) if speed > 0 else 0.0
        # Start the timer now so the first frame is not measured against 0.0
        now = time.perf_counter()
        self._last_frame_time = now
        self._fps_wall_t0 = now
        self._fps_frames = 0
        self.real_fps = 0.0
        logger.debug("Frame pacing: speed=%s budget=%.4fs",
                     f"{speed}x" if speed > 0 else "max", self._frame_budget)

    def tick(self) -> None:
        """Call once after every emulated frame."""
        if self._frame_budget > 0:
            now = time.perf_counter()
            remaining = self._frame_budget - (now - self._last_frame_time)
            if remaining > 0:
                time.sleep(remaining)
                actual = time.perf_counter() - now
                self.sleep_overrun_ms = (actual - remaining) * 1000.0
            else:
                self.sleep_overrun_ms = 0.0
            self._last_frame_time = time.perf_counter()

        self._fps_frames += 1
        if self._fps_frames >= FPS_SAMPLE_FRAMES:
            now = time.perf_counter()
            elapsed = now - self._fps_wall_t0
            if elapsed > 0:
                self.real_fps = self._fps_frames / elapsed
            self._fps_wall_t0 = now
            self._fps_frames = 0
