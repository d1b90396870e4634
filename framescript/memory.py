"""
memory – Read-only view of emulated RAM at frame boundaries.

Every read goes straight to the host; nothing is cached, so a read after a
frame advance always reflects the new frame.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from framescript.config import ADDRESS_BITS, BYTE_MAX
from framescript.errors import ConfigurationError

logger = logging.getLogger(__name__)


def validate_address(address: int, address_bits: int = ADDRESS_BITS) -> int:
    """Return `address` if it fits the address space, else ConfigurationError."""
    if isinstance(address, bool) or not isinstance(address, int):
        raise ConfigurationError(f"Address must be an integer, got {address!r}")
    if not 0 <= address < (1 << address_bits):
        raise ConfigurationError(f"Address {address:#x} outside {address_bits}-bit address space")
    return address


def validate_byte(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= BYTE_MAX:
        raise ConfigurationError(f"Value must be a byte (0..255), got {value!r}")
    return value


class MemoryOracle:
    """
    Byte reads against a host's `read_byte(address)`.

    The runtime wraps each emulated frame in `frame_in_progress()`; reads
    attempted inside it raise RuntimeError.
    """

    def __init__(self, read_byte: Callable[[int], int], address_bits: int = ADDRESS_BITS) -> None:
        self._read_byte = read_byte
        self.address_bits = address_bits
        self._at_boundary = True
        self.reads = 0

    @property
    def at_boundary(self) -> bool:
        return self._at_boundary

    @contextmanager
    def frame_in_progress(self) -> Iterator[None]:
        self._at_boundary = False
        try:
            yield
        finally:
            self._at_boundary = True

    def read(self, address: int) -> int:
        """Return the byte at `address`."""
        validate_address(address, self.address_bits)
        if not self._at_boundary:
            raise RuntimeError(f"Memory read of 0x{address:04X} outside a frame boundary")
        self.reads += 1
        return int(self._read_byte(address)) & BYTE_MAX

    __call__ = read
