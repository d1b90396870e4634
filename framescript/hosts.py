"""
hosts – Emulator adapters for the runtime.

  MemoryHost – in-process RAM + recorded controller log; headless runs and tests
  MgbaHost   – libmgba-py core (GB / GBA), inputs via setKeys, reads via the bus

Both expose the Host protocol: set_buttons(mask), run_frame(), read_byte(addr).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from framescript.buttons import Button, from_mask
from framescript.config import ADDRESS_BITS, BYTE_MAX

logger = logging.getLogger(__name__)


# ── In-memory host ──────────────────────────────────────────────────────────

FrameHook = Callable[["MemoryHost", int], None]


class MemoryHost:
    """
    A stand-in console: a flat RAM array and the mask delivered on each frame.

    Frame hooks run after every frame with (host, frame_index) and may poke
    RAM to simulate game logic.
    """

    def __init__(self, address_bits: int = ADDRESS_BITS) -> None:
        self.ram = bytearray(1 << address_bits)
        self.inputs: List[int] = []
        self.read_log: List[Tuple[int, int]] = []  # (frame, address)
        self._hooks: List[FrameHook] = []
        self._buttons = 0

    @property
    def frame(self) -> int:
        """Frames run so far."""
        return len(self.inputs)

    @property
    def buttons(self) -> int:
        return self._buttons

    def add_frame_hook(self, hook: FrameHook) -> None:
        self._hooks.append(hook)

    def poke(self, address: int, value: int) -> None:
        self.ram[address] = value & BYTE_MAX

    # Host protocol

    def set_buttons(self, mask: int) -> None:
        self._buttons = mask & BYTE_MAX

    def run_frame(self) -> None:
        frame = len(self.inputs)
        self.inputs.append(self._buttons)
        for hook in self._hooks:
            hook(self, frame)

    def read_byte(self, address: int) -> int:
        self.read_log.append((self.frame, address))
        return self.ram[address]


# ── mGBA host ───────────────────────────────────────────────────────────────

# Button → libmgba key bit (A, B, Select, Start, Right, Left, Up, Down, R, L)
MGBA_KEYS: Dict[Button, int] = {
    Button.A: 0,
    Button.B: 1,
    Button.SELECT: 2,
    Button.START: 3,
    Button.RIGHT: 4,
    Button.LEFT: 5,
    Button.UP: 6,
    Button.DOWN: 7,
}


class MgbaHost:
    """
    Runs a libmgba-py core one frame at a time.

    The core's key state is replaced on every set_buttons() call, so the
    runtime's latched ControllerState is the only input source.

    Reads go through the GBA system bus, so the NES-oriented defaults in
    RuntimeConfig do not apply: use address_bits=32 and point
    player_state_address at the game's WRAM (0x02000000 / 0x03000000).
    Address 0x1D on this bus is BIOS.
    """

    def __init__(self, core, screen=None) -> None:
        self._core = core
        self._screen = screen
        self._keys = 0
        self.frames = 0

    @classmethod
    def from_rom(cls, rom_path: Path) -> MgbaHost:
        """Load a ROM into a headless libmgba core."""
        if not rom_path.exists():
            raise FileNotFoundError(f"ROM not found at {rom_path}")

        import mgba.core   # type: ignore[import-untyped]
        import mgba.image  # type: ignore[import-untyped]
        import mgba.log    # type: ignore[import-untyped]

        mgba.log.silence()
        core = mgba.core.load_path(str(rom_path))
        if core is None:
            raise RuntimeError(f"libmgba failed to load ROM: {rom_path}")

        # A video buffer is required even when nothing is displayed
        screen = mgba.image.Image(*core.desired_video_dimensions())
        core.set_video_buffer(screen)
        core.reset()
        logger.info("Launched headless mGBA core for %s", rom_path)
        return cls(core, screen)

    @staticmethod
    def keys_for(mask: int) -> int:
        """Translate a controller mask into libmgba key bits."""
        keys = 0
        for button in from_mask(mask):
            keys |= 1 << MGBA_KEYS[button]
        return keys

    @property
    def keys(self) -> int:
        return self._keys

    def set_buttons(self, mask: int) -> None:
        self._keys = self.keys_for(mask)
        self._core._core.setKeys(self._core._core, self._keys)

    def run_frame(self) -> None:
        self._core.run_frame()
        self.frames += 1

    def read_byte(self, address: int) -> int:
        return self._core.memory.u8[address]

    def screenshot(self) -> Optional[object]:
        """Current frame as a PIL image, or None without a video buffer."""
        if self._screen is None:
            return None
        return self._screen.to_pil().convert("RGB")
