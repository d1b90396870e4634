"""
driver – Script Driver state machine.

  RUNNING  – applying immediate actions on the current frame
  WAITING  – suspended on a Resumption (frame target or polled condition)
  DONE     – past the last action (or aborted); frame advances are no-ops

The host loop owns frame pacing: it calls run_immediate() before latching
a frame and on_frame_advanced() after the clock has moved on.  Conditions are
evaluated exactly once per advance, never within a frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from framescript.actions import (
    Condition, Hold, Press, Release, Replay, Toggle, Wait, WaitUntil,
)
from framescript.buttons import from_mask
from framescript.config import STALL_BUDGET_FRAMES
from framescript.errors import RuntimeStallError
from framescript.memory import MemoryOracle
from framescript.scheduler import InputScheduler
from framescript.script import Action

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    RUNNING = "running"
    WAITING = "waiting"
    DONE = "done"


@dataclass
class Resumption:
    """The condition a WAITING driver resumes on."""
    action: Action
    started_frame: int
    frame_target: Optional[int] = None
    condition: Optional[Condition] = None
    budget: int = STALL_BUDGET_FRAMES
    checks: int = 0

    def __str__(self) -> str:
        if self.condition is not None:
            return f"{self.condition} (checked {self.checks}/{self.budget})"
        return f"frame >= {self.frame_target}"


@dataclass(frozen=True)
class DriverEvent:
    """An action applied by the driver."""
    frame: int
    cursor: int
    action: Action

    def __str__(self) -> str:
        return f"#{self.frame} [{self.cursor}] {self.action}"


class ScriptDriver:
    """Executes a validated action list against the scheduler and oracle."""

    def __init__(
        self,
        actions: Sequence[Action],
        scheduler: InputScheduler,
        oracle: MemoryOracle,
        stall_budget: int = STALL_BUDGET_FRAMES,
    ) -> None:
        self._actions = tuple(actions)
        self.scheduler = scheduler
        self.clock = scheduler.clock
        self.oracle = oracle
        self.stall_budget = stall_budget
        self.cursor = 0
        self.state = DriverState.RUNNING if self._actions else DriverState.DONE
        self.waiting: Optional[Resumption] = None
        self.events: List[DriverEvent] = []

    @property
    def is_done(self) -> bool:
        return self.state is DriverState.DONE

    def __len__(self) -> int:
        return len(self._actions)

    # ── Stepping ─────────────────────────────────────────────────────────

    def run_immediate(self) -> int:
        """
        Apply actions on the current frame until one suspends the driver or
        the script ends.  Returns the number of actions applied.
        """
        if self.state is not DriverState.RUNNING:
            return 0
        frame = self.clock.frame
        applied = 0
        while self.cursor < len(self._actions):
            action = self._actions[self.cursor]
            self.events.append(DriverEvent(frame, self.cursor, action))
            applied += 1

            if isinstance(action, Hold):
                self.scheduler.hold(action.buttons, action.duration)
            elif isinstance(action, Press):
                self.scheduler.press(*action.buttons)
            elif isinstance(action, Release):
                self.scheduler.release(*action.buttons)
            elif isinstance(action, Toggle):
                self.scheduler.toggle(*action.buttons)
            elif isinstance(action, Wait):
                if action.frames > 0:
                    self._suspend(Resumption(action, frame, frame_target=frame + action.frames))
                    return applied
            elif isinstance(action, WaitUntil):
                budget = action.max_frames or self.stall_budget
                self._suspend(Resumption(action, frame, condition=action.condition, budget=budget))
                return applied
            elif isinstance(action, Replay):
                for offset, mask in enumerate(action.masks):
                    for button in from_mask(mask):
                        self.scheduler.schedule(button, frame + offset, 1)
                if action.masks:
                    self._suspend(Resumption(action, frame, frame_target=frame + len(action.masks)))
                    return applied
            else:
                raise TypeError(f"Unsupported action: {action!r}")
            self.cursor += 1

        self._finish()
        return applied

    def on_frame_advanced(self) -> bool:
        """Re-evaluate the pending wait once.  Returns True if the driver resumed."""
        if self.state is not DriverState.WAITING:
            return False
        waiting = self.waiting
        frame = self.clock.frame

        if waiting.condition is None:
            ready = frame >= waiting.frame_target
        else:
            waiting.checks += 1
            ready = waiting.condition.evaluate(self.oracle)
            if not ready and waiting.checks >= waiting.budget:
                cursor = self.cursor
                self.abort()
                raise RuntimeStallError(waiting.condition, frame, waiting.checks, cursor)

        if ready:
            logger.debug("Resumed at #%d after %d frames: %s",
                         frame, frame - waiting.started_frame, waiting)
            self.waiting = None
            self.cursor += 1
            self.state = DriverState.RUNNING
            if self.cursor >= len(self._actions):
                self._finish()
        return ready

    def abort(self) -> None:
        """Stop executing; remaining actions are skipped."""
        if self.state is not DriverState.DONE:
            logger.warning("Driver aborted at action #%d (frame %d)", self.cursor, self.clock.frame)
        self.waiting = None
        self.state = DriverState.DONE

    # ── Internals ────────────────────────────────────────────────────────

    def _suspend(self, resumption: Resumption) -> None:
        self.waiting = resumption
        self.state = DriverState.WAITING
        logger.debug("Waiting at #%d: %s", resumption.started_frame, resumption)

    def _finish(self) -> None:
        self.state = DriverState.DONE
        logger.info("Script finished at frame %d (%d actions)", self.clock.frame, len(self._actions))
