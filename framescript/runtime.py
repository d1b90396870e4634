"""
runtime – Frame-synchronous host loop.

Owns the frame clock, input scheduler, memory oracle and script driver, and
advances them in strict alternation with a host emulator:

    driver applies immediate actions
    → scheduler latches one ControllerState
    → host receives it and runs exactly one frame
    → clock advances
    → driver re-evaluates its wait

Usage::

    runtime = Runtime(MemoryHost())
    runtime.load(Script().hold("A", 5).wait(5).release("A"))
    runtime.run()
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from framescript.buttons import ControllerState
from framescript.clock import FrameClock, FramePacer
from framescript.config import RuntimeConfig
from framescript.driver import DriverEvent, DriverState, ScriptDriver
from framescript.errors import ConfigurationError, RuntimeStallError
from framescript.memory import MemoryOracle
from framescript.scheduler import InputScheduler
from framescript.script import Script
from framescript.timeline import InputTimeline

logger = logging.getLogger(__name__)


class Host(Protocol):
    """What the runtime needs from an emulator."""

    def set_buttons(self, mask: int) -> None: ...

    def run_frame(self) -> None: ...

    def read_byte(self, address: int) -> int: ...


class Runtime:
    """Drives one script against one host, one frame per step()."""

    def __init__(
        self,
        host: Host,
        config: Optional[RuntimeConfig] = None,
        pacer: Optional[FramePacer] = None,
    ) -> None:
        self.host = host
        self.config = config or RuntimeConfig()
        self.clock = FrameClock()
        self.scheduler = InputScheduler(self.clock, self.config.exclusive_directions)
        self.oracle = MemoryOracle(host.read_byte, self.config.address_bits)
        self.pacer = pacer or FramePacer(self.config.frame_rate, self.config.speed)
        self.timeline = InputTimeline()
        self.driver: Optional[ScriptDriver] = None
        self.script: Optional[Script] = None

    # ── Loading ──────────────────────────────────────────────────────────

    def load(self, script: Script) -> None:
        """
        Validate `script` against this runtime's config and make it current.
        Nothing is applied if validation fails.
        """
        if self.driver is not None and not self.driver.is_done:
            raise RuntimeError(f"Cannot load {script.name}: {self.script.name} is still running")
        try:
            script.validate(self.config)
        except ConfigurationError:
            logger.error("Rejected %s", script.name)
            raise
        self.script = script
        self.driver = ScriptDriver(
            script.actions, self.scheduler, self.oracle, self.config.stall_budget,
        )
        logger.info("Loaded %s: %d actions at frame %d", script.name, len(script), self.clock.frame)

    # ── State ────────────────────────────────────────────────────────────

    @property
    def frame(self) -> int:
        return self.clock.frame

    @property
    def state(self) -> Optional[DriverState]:
        return self.driver.state if self.driver else None

    @property
    def is_done(self) -> bool:
        return self.driver is None or self.driver.is_done

    @property
    def events(self) -> List[DriverEvent]:
        return list(self.driver.events) if self.driver else []

    # ── Stepping ─────────────────────────────────────────────────────────

    def step(self) -> ControllerState:
        """Run exactly one emulated frame and return the input it received."""
        if self.driver is None:
            raise RuntimeError("No script loaded")
        try:
            self.driver.run_immediate()
            state = self.scheduler.latch()
            self.host.set_buttons(state.mask)
            with self.oracle.frame_in_progress():
                self.host.run_frame()
            self.timeline.record(state)
            self.clock.advance()
            self.pacer.tick()
            self.driver.on_frame_advanced()
        except RuntimeStallError as exc:
            logger.error("%s", exc)
            self.abort()
            raise
        except Exception:
            logger.exception("Aborting %s at frame %d", self.script.name, self.clock.frame)
            self.abort()
            raise
        return state

    def run(self, max_frames: Optional[int] = None) -> int:
        """Step until the script is done (or `max_frames`).  Returns frames run."""
        if self.driver is None:
            raise RuntimeError("No script loaded")
        frames = 0
        while not self.driver.is_done:
            if max_frames is not None and frames >= max_frames:
                logger.warning("Stopped after %d frames with %s still %s",
                               frames, self.script.name, self.driver.state.value)
                break
            self.step()
            frames += 1
        return frames

    def run_frames(self, count: int) -> None:
        """Step `count` frames regardless of script state; holds expire naturally."""
        for _ in range(count):
            self.step()

    def abort(self) -> None:
        """Stop the script and deassert every button immediately."""
        if self.driver is not None:
            self.driver.abort()
        self.scheduler.release_all()
        self.host.set_buttons(0)
