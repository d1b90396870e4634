"""
actions – Script actions and polling conditions.

Immediate actions (Hold, Press, Release, Toggle) mutate the input scheduler
without advancing time.  Blocking actions (Wait, WaitUntil, Replay) suspend
the driver until their resumption condition is met.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from framescript.buttons import Button
from framescript.memory import MemoryOracle, validate_address, validate_byte

ReadFn = Callable[[int], int]


# ── Conditions ──────────────────────────────────────────────────────────────

class Condition:
    """A predicate over emulated memory, evaluated once per frame."""

    def evaluate(self, oracle: MemoryOracle) -> bool:
        raise NotImplementedError

    def addresses(self) -> Tuple[int, ...]:
        """Literal addresses the condition reads (validated at load time)."""
        return ()


@dataclass(frozen=True)
class MemoryEquals(Condition):
    address: int
    value: int

    def __post_init__(self) -> None:
        validate_address(self.address, 32)
        validate_byte(self.value)

    def evaluate(self, oracle: MemoryOracle) -> bool:
        return oracle.read(self.address) == self.value

    def addresses(self) -> Tuple[int, ...]:
        return (self.address,)

    def __str__(self) -> str:
        return f"read(0x{self.address:04X}) == {self.value}"


@dataclass(frozen=True)
class MemoryNotEquals(Condition):
    address: int
    value: int

    def __post_init__(self) -> None:
        validate_address(self.address, 32)
        validate_byte(self.value)

    def evaluate(self, oracle: MemoryOracle) -> bool:
        return oracle.read(self.address) != self.value

    def addresses(self) -> Tuple[int, ...]:
        return (self.address,)

    def __str__(self) -> str:
        return f"read(0x{self.address:04X}) != {self.value}"


@dataclass(frozen=True)
class MemoryBitsSet(Condition):
    """All bits of `mask` are set in the byte at `address`."""
    address: int
    mask: int

    def __post_init__(self) -> None:
        validate_address(self.address, 32)
        validate_byte(self.mask)

    def evaluate(self, oracle: MemoryOracle) -> bool:
        return oracle.read(self.address) & self.mask == self.mask

    def addresses(self) -> Tuple[int, ...]:
        return (self.address,)

    def __str__(self) -> str:
        return f"read(0x{self.address:04X}) & 0x{self.mask:02X}"


@dataclass(frozen=True)
class Predicate(Condition):
    """Arbitrary condition; `func` receives the oracle's read function."""
    func: Callable[[ReadFn], bool]
    description: str = ""

    def evaluate(self, oracle: MemoryOracle) -> bool:
        return bool(self.func(oracle.read))

    def __str__(self) -> str:
        return self.description or getattr(self.func, "__name__", "predicate")


# ── Actions ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Hold:
    buttons: Tuple[Button, ...]
    duration: Optional[int]  # None = until released

    def __str__(self) -> str:
        frames = "until released" if self.duration is None else f"{self.duration}"
        return f"hold({', '.join(b.name for b in self.buttons)}, {frames})"


@dataclass(frozen=True)
class Press:
    buttons: Tuple[Button, ...]

    def __str__(self) -> str:
        return f"press({', '.join(b.name for b in self.buttons)})"


@dataclass(frozen=True)
class Release:
    buttons: Tuple[Button, ...]

    def __str__(self) -> str:
        return f"release({', '.join(b.name for b in self.buttons)})"


@dataclass(frozen=True)
class Toggle:
    buttons: Tuple[Button, ...]

    def __str__(self) -> str:
        return f"toggle({', '.join(b.name for b in self.buttons)})"


@dataclass(frozen=True)
class Wait:
    frames: int

    def __str__(self) -> str:
        return f"wait({self.frames})"


@dataclass(frozen=True)
class WaitUntil:
    condition: Condition
    max_frames: Optional[int] = None  # None = runtime stall budget

    def __str__(self) -> str:
        return f"wait_until({self.condition})"


@dataclass(frozen=True)
class Replay:
    """Raw controller masks, one per frame, starting on the current frame."""
    masks: Tuple[int, ...]

    def __str__(self) -> str:
        return f"replay({len(self.masks)} frames)"


IMMEDIATE_ACTIONS = (Hold, Press, Release, Toggle)
BLOCKING_ACTIONS = (Wait, WaitUntil, Replay)
