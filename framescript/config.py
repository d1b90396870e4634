"""
Global configuration for framescript.
Constants and tunable defaults live here; per-run values travel in RuntimeConfig.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from framescript.errors import ConfigurationError

# ── Paths ────────────────────────────────────────────────────────────────────
ROOT_DIR = Path(__file__).resolve().parent.parent
EXPORT_DIR = ROOT_DIR / "exports"

# ── Timing ───────────────────────────────────────────────────────────────────
FRAME_RATE = 60  # NES logic frames per second (pacing target at speed=1)
FPS_SAMPLE_FRAMES = 60  # real_fps is re-measured every N frames

# ── Memory ───────────────────────────────────────────────────────────────────
ADDRESS_BITS = 16  # NES CPU address space
BYTE_MAX = 0xFF

# ── Super Mario Bros. RAM ────────────────────────────────────────────────────
# Player float state: 0 = on the ground, non-zero = jumping / falling.
PLAYER_STATE = 0x1D
GROUNDED = 0

# ── Runtime defaults ─────────────────────────────────────────────────────────
STALL_BUDGET_FRAMES = 600  # 10 s at 60 fps
DEFAULT_SPEED = 0  # 0 = unthrottled, N = N× real time


@dataclass(frozen=True)
class RuntimeConfig:
    """Explicit per-runtime settings (no process-wide globals)."""
    address_bits: int = ADDRESS_BITS
    player_state_address: int = PLAYER_STATE
    grounded_value: int = GROUNDED
    stall_budget: int = STALL_BUDGET_FRAMES
    frame_rate: int = FRAME_RATE
    speed: int = DEFAULT_SPEED
    exclusive_directions: bool = False

    def __post_init__(self) -> None:
        if not _is_int(self.address_bits) or not 1 <= self.address_bits <= 32:
            raise ConfigurationError(f"address_bits must be 1..32, got {self.address_bits!r}")
        if not _is_int(self.player_state_address):
            raise ConfigurationError(
                f"player_state_address must be an integer, got {self.player_state_address!r}"
            )
        if not 0 <= self.player_state_address < self.address_limit:
            raise ConfigurationError(
                f"player_state_address 0x{self.player_state_address:X} outside "
                f"{self.address_bits}-bit address space"
            )
        if not _is_int(self.grounded_value) or not 0 <= self.grounded_value <= BYTE_MAX:
            raise ConfigurationError(f"grounded_value must be a byte, got {self.grounded_value!r}")
        if not _is_int(self.stall_budget) or self.stall_budget < 1:
            raise ConfigurationError(f"stall_budget must be >= 1 frame, got {self.stall_budget!r}")
        if not _is_int(self.frame_rate) or self.frame_rate < 1:
            raise ConfigurationError(f"frame_rate must be >= 1, got {self.frame_rate!r}")
        if not _is_int(self.speed) or self.speed < 0:
            raise ConfigurationError(f"speed must be >= 0, got {self.speed!r}")

    @property
    def address_limit(self) -> int:
        """One past the highest valid address."""
        return 1 << self.address_bits


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
