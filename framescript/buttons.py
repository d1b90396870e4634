"""
buttons – NES controller buttons, name resolution and controller snapshots.

Bit positions follow the NES standard controller shift order
(A, B, Select, Start, Up, Down, Left, Right).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, FrozenSet, Iterable, Tuple, Union

from framescript.errors import ConfigurationError


class Button(IntEnum):
    A = 0
    B = 1
    SELECT = 2
    START = 3
    UP = 4
    DOWN = 5
    LEFT = 6
    RIGHT = 7

    @property
    def bit(self) -> int:
        return 1 << self.value


# Upper-cased name → button.  Short d-pad letters and the SMB verbs are aliases.
BUTTON_ALIASES: Dict[str, Button] = {
    "A": Button.A, "JUMP": Button.A,
    "B": Button.B, "RUN": Button.B,
    "SELECT": Button.SELECT,
    "START": Button.START,
    "U": Button.UP, "UP": Button.UP,
    "D": Button.DOWN, "DOWN": Button.DOWN,
    "L": Button.LEFT, "LEFT": Button.LEFT,
    "R": Button.RIGHT, "RIGHT": Button.RIGHT,
}

OPPOSITE_DIRECTION: Dict[Button, Button] = {
    Button.UP: Button.DOWN,
    Button.DOWN: Button.UP,
    Button.LEFT: Button.RIGHT,
    Button.RIGHT: Button.LEFT,
}

ButtonLike = Union[Button, str]


def resolve_button(name: ButtonLike) -> Button:
    """Resolve a button symbol (case-insensitive, aliases allowed)."""
    if isinstance(name, Button):
        return name
    if not isinstance(name, str):
        raise ConfigurationError(f"Button must be a name, got {name!r}")
    try:
        return BUTTON_ALIASES[name.strip().upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown button: {name!r}") from None


def resolve_buttons(names: Iterable[ButtonLike]) -> Tuple[Button, ...]:
    """Resolve every name; at least one is required."""
    buttons = tuple(resolve_button(n) for n in names)
    if not buttons:
        raise ConfigurationError("At least one button is required")
    return buttons


def to_mask(buttons: Iterable[Button]) -> int:
    mask = 0
    for button in buttons:
        mask |= button.bit
    return mask


def from_mask(mask: int) -> FrozenSet[Button]:
    """Decode an 8-bit controller mask."""
    if isinstance(mask, bool) or not isinstance(mask, int) or not 0 <= mask <= 0xFF:
        raise ConfigurationError(f"Controller mask must be 0..255, got {mask!r}")
    return frozenset(b for b in Button if mask & b.bit)


@dataclass(frozen=True)
class ControllerState:
    """Buttons asserted on the controller port for one frame."""
    frame: int
    buttons: FrozenSet[Button] = frozenset()

    @property
    def mask(self) -> int:
        return to_mask(self.buttons)

    def is_pressed(self, button: ButtonLike) -> bool:
        return resolve_button(button) in self.buttons

    def __str__(self) -> str:
        names = "+".join(b.name for b in sorted(self.buttons)) or "-"
        return f"#{self.frame} {names}"
