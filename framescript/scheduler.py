"""
scheduler – Frame-timed controller input.

Holds are recorded as HoldRequests against the FrameClock.  Once per frame
the scheduler latches the union of every request covering that frame into a
ControllerState for the controller port.

Policies:
  • Re-holding a held button extends it when the new request runs longer;
    otherwise the running request is kept, so press() on a held button is a
    no-op.
  • release() cancels every unexpired request for the button, so a release
    issued after a hold always wins, even within the same frame.
  • Duration 0 is the one-shot convention: asserted on its start frame only.
  • Duration None holds until released.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from framescript.buttons import OPPOSITE_DIRECTION, Button, ButtonLike, ControllerState, resolve_button
from framescript.clock import FrameClock
from framescript.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoldRequest:
    """A button asserted for `duration` frames starting at `start_frame`."""
    button: Button
    start_frame: int
    duration: Optional[int]  # None = until released
    seq: int = field(default=0, compare=False)

    @property
    def end_frame(self) -> Optional[int]:
        """First frame on which the request no longer applies (exclusive)."""
        if self.duration is None:
            return None
        return self.start_frame + max(self.duration, 1)

    def covers(self, frame: int) -> bool:
        end = self.end_frame
        return self.start_frame <= frame and (end is None or frame < end)

    def expired(self, frame: int) -> bool:
        end = self.end_frame
        return end is not None and end <= frame


def validate_duration(duration: Optional[int], allow_none: bool = True) -> Optional[int]:
    if duration is None and allow_none:
        return None
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise ConfigurationError(f"Duration must be a non-negative frame count, got {duration!r}")
    return duration


def _outlasts(current: HoldRequest, new: HoldRequest) -> bool:
    """True if `current` stays asserted at least as long as `new` would."""
    if current.end_frame is None:
        return True
    if new.end_frame is None:
        return False
    return current.end_frame >= new.end_frame


class InputScheduler:
    """Single writer of the controller state; read once per frame via latch()."""

    def __init__(self, clock: FrameClock, exclusive_directions: bool = False) -> None:
        self.clock = clock
        self.exclusive_directions = exclusive_directions
        self._requests: List[HoldRequest] = []
        self._seq = itertools.count(1)
        self._latched_frame: Optional[int] = None

    # ── Mutations ────────────────────────────────────────────────────────

    def hold(self, buttons: Iterable[ButtonLike], duration: Optional[int]) -> List[HoldRequest]:
        """Assert every button for `duration` frames starting on the current frame."""
        duration = validate_duration(duration)
        resolved = [resolve_button(b) for b in buttons]
        frame = self.clock.frame
        self._prune(frame)
        issued = []
        for button in resolved:
            req = HoldRequest(button, frame, duration, next(self._seq))
            running = [r for r in self._requests if r.button == button and r.covers(frame)]
            kept = next((r for r in running if _outlasts(r, req)), None)
            if kept is not None:
                issued.append(kept)
                continue
            self._requests = [r for r in self._requests if r not in running]
            self._requests.append(req)
            issued.append(req)
        logger.debug("hold %s for %s frames at #%d",
                     "+".join(b.name for b in resolved),
                     "∞" if duration is None else duration, frame)
        return issued

    def press(self, *buttons: ButtonLike) -> List[HoldRequest]:
        """Assert each button for exactly one frame (same as hold(button, 1))."""
        return self.hold(buttons, 1)

    def release(self, *buttons: ButtonLike) -> int:
        """Cancel every unexpired request for the buttons; returns how many were cut."""
        resolved = {resolve_button(b) for b in buttons}
        frame = self.clock.frame
        self._prune(frame)
        before = len(self._requests)
        self._requests = [r for r in self._requests if r.button not in resolved]
        cut = before - len(self._requests)
        logger.debug("release %s at #%d (%d cut)",
                     "+".join(b.name for b in sorted(resolved)), frame, cut)
        return cut

    def toggle(self, *buttons: ButtonLike) -> None:
        """Release each button that is held now, hold the others until released."""
        for button in (resolve_button(b) for b in buttons):
            if self.is_held(button):
                self.release(button)
            else:
                self.hold([button], None)

    def schedule(self, button: ButtonLike, start_frame: int, duration: int = 1) -> HoldRequest:
        """Queue a request that starts on a future (or the current) frame."""
        duration = validate_duration(duration, allow_none=False)
        if start_frame < self.clock.frame:
            raise ConfigurationError(
                f"Cannot schedule input in the past (frame {start_frame} < {self.clock.frame})"
            )
        req = HoldRequest(resolve_button(button), start_frame, duration, next(self._seq))
        self._requests.append(req)
        return req

    def release_all(self) -> None:
        if self._requests:
            logger.debug("release all (%d requests) at #%d", len(self._requests), self.clock.frame)
        self._requests.clear()

    # ── Queries ──────────────────────────────────────────────────────────

    def active(self, frame: Optional[int] = None) -> List[HoldRequest]:
        frame = self.clock.frame if frame is None else frame
        return [r for r in self._requests if r.covers(frame)]

    def is_held(self, button: ButtonLike, frame: Optional[int] = None) -> bool:
        button = resolve_button(button)
        return any(r.button == button for r in self.active(frame))

    def peek(self) -> ControllerState:
        """The state the port would receive this frame, without consuming it."""
        return self._snapshot(self.clock.frame)

    def latch(self) -> ControllerState:
        """Produce this frame's controller state.  Exactly once per frame."""
        frame = self.clock.frame
        if self._latched_frame == frame:
            raise RuntimeError(f"Controller state for frame {frame} was already latched")
        state = self._snapshot(frame)
        self._latched_frame = frame
        return state

    @property
    def pending(self) -> int:
        return len(self._requests)

    # ── Internals ────────────────────────────────────────────────────────

    def _prune(self, frame: int) -> None:
        self._requests = [r for r in self._requests if not r.expired(frame)]

    def _snapshot(self, frame: int) -> ControllerState:
        self._prune(frame)
        newest = {}
        for req in self._requests:
            if req.covers(frame) and req.seq > newest.get(req.button, 0):
                newest[req.button] = req.seq
        if self.exclusive_directions:
            for button, opposite in OPPOSITE_DIRECTION.items():
                if button in newest and opposite in newest and newest[button] < newest[opposite]:
                    del newest[button]
        return ControllerState(frame, frozenset(newest))
