"""
script – Fluent builder for frame scripts.

Every call validates its arguments immediately, so a bad button name,
duration or address raises ConfigurationError while the script is being
built, long before any frame is played.

Usage::

    script = Script()
    script.hold("R", "B", 120)
    script.wait(60)
    script.jump(30)
    script.jumps(2, 30)
    script.ground().wait(5).release("R")
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from framescript.actions import (
    Condition, Hold, MemoryEquals, Predicate, Press, Release, Replay, Toggle, Wait, WaitUntil,
)
from framescript.buttons import Button, from_mask, resolve_buttons
from framescript.config import RuntimeConfig
from framescript.errors import ConfigurationError
from framescript.memory import validate_address
from framescript.scheduler import validate_duration

logger = logging.getLogger(__name__)

Action = Union[Hold, Press, Release, Toggle, Wait, WaitUntil, Replay]


def _validate_frames(frames: int, what: str) -> int:
    if isinstance(frames, bool) or not isinstance(frames, int) or frames < 0:
        raise ConfigurationError(f"{what} must be a non-negative frame count, got {frames!r}")
    return frames


class Script:
    """An ordered, validated list of actions."""

    def __init__(self, config: Optional[RuntimeConfig] = None, name: str = "script") -> None:
        self.config = config or RuntimeConfig()
        self.name = name
        self._actions: List[Action] = []

    @property
    def actions(self) -> Tuple[Action, ...]:
        return tuple(self._actions)

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __repr__(self) -> str:
        return f"Script(name={self.name!r}, actions={len(self._actions)})"

    def _add(self, action: Action) -> Script:
        self._actions.append(action)
        return self

    # ── Input primitives ─────────────────────────────────────────────────

    def hold(self, *args) -> Script:
        """
        hold(button, [button...], duration)

        Asserts every listed button for `duration` frames starting now.
        Without a trailing duration the buttons stay held until released.
        """
        if args and not isinstance(args[-1], (str, Button)):
            *names, duration = args
            duration = validate_duration(duration)
        else:
            names, duration = list(args), None
        return self._add(Hold(resolve_buttons(names), duration))

    def press(self, *buttons) -> Script:
        """Assert each button for exactly one frame, now."""
        return self._add(Press(resolve_buttons(buttons)))

    def release(self, *buttons) -> Script:
        return self._add(Release(resolve_buttons(buttons)))

    def toggle(self, *buttons) -> Script:
        """Flip each button between released and held-until-released."""
        return self._add(Toggle(resolve_buttons(buttons)))

    # ── Waits ────────────────────────────────────────────────────────────

    def wait(self, frames: int) -> Script:
        return self._add(Wait(_validate_frames(frames, "wait")))

    def wait_until(
        self,
        condition: Union[Condition, Callable[[Callable[[int], int]], bool]],
        max_frames: Optional[int] = None,
    ) -> Script:
        """Suspend until `condition` holds, re-checked once per frame."""
        if not isinstance(condition, Condition):
            if not callable(condition):
                raise ConfigurationError(f"Not a condition: {condition!r}")
            condition = Predicate(condition)
        if max_frames is not None:
            _validate_frames(max_frames, "max_frames")
            if max_frames < 1:
                raise ConfigurationError("max_frames must be at least 1")
        for address in condition.addresses():
            validate_address(address, self.config.address_bits)
        return self._add(WaitUntil(condition, max_frames))

    def wait_until_equal(self, address: int, value: int, max_frames: Optional[int] = None) -> Script:
        return self.wait_until(MemoryEquals(address, value), max_frames)

    def replay(self, masks: Iterable[int]) -> Script:
        """Play raw controller masks back, one per frame."""
        masks = tuple(masks)
        for mask in masks:
            from_mask(mask)
        return self._add(Replay(masks))

    # ── Composite helpers ────────────────────────────────────────────────

    def ground(self, max_frames: Optional[int] = None) -> Script:
        """Wait until the player is standing on solid ground."""
        return self.wait_until(
            MemoryEquals(self.config.player_state_address, self.config.grounded_value),
            max_frames,
        )

    def jump(self, height: int) -> Script:
        """Hold A for `height` frames; longer holds jump higher."""
        return self.hold(Button.A, height)

    def jumps(self, n: int, height: int) -> Script:
        """Jump `n` times, each only once the player is grounded again."""
        _validate_frames(n, "jump count")
        for _ in range(n):
            self.ground()
            self.jump(height)
        return self

    def extend(self, other: Script) -> Script:
        self._actions.extend(other.actions)
        return self

    # ── Validation ───────────────────────────────────────────────────────

    def validate(self, config: Optional[RuntimeConfig] = None) -> None:
        """Re-check every literal against `config` (defaults to the script's own)."""
        config = config or self.config
        for index, action in enumerate(self._actions):
            try:
                if isinstance(action, WaitUntil):
                    for address in action.condition.addresses():
                        validate_address(address, config.address_bits)
                elif isinstance(action, (Hold, Press, Release, Toggle)):
                    resolve_buttons(action.buttons)
                    if isinstance(action, Hold):
                        validate_duration(action.duration)
                elif isinstance(action, Wait):
                    _validate_frames(action.frames, "wait")
                elif isinstance(action, Replay):
                    for mask in action.masks:
                        from_mask(mask)
                else:
                    raise ConfigurationError(f"Unknown action {action!r}")
            except ConfigurationError as exc:
                raise ConfigurationError(f"{self.name} action #{index} ({action}): {exc}") from exc
        logger.debug("Validated %s: %d actions", self.name, len(self._actions))
