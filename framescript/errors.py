"""
errors – Exception hierarchy for script building and playback.

  ConfigurationError – bad button / duration / address, raised before playback
  RuntimeStallError  – a polling wait that never came true within its budget
"""

from __future__ import annotations

from typing import Optional


class FrameScriptError(Exception):
    """Base class for every error raised by framescript."""


class ConfigurationError(FrameScriptError, ValueError):
    """A script or runtime setting is invalid. Raised at build / load time."""


class RuntimeStallError(FrameScriptError, RuntimeError):
    """A polling wait exhausted its frame budget without its condition holding."""

    def __init__(self, condition: object, frame: int, waited: int, cursor: Optional[int] = None):
        self.condition = condition
        self.frame = frame
        self.waited = waited
        self.cursor = cursor
        where = f" (action #{cursor})" if cursor is not None else ""
        super().__init__(
            f"Stalled waiting for {condition}{where}: "
            f"not satisfied after {waited} frames (frame {frame})"
        )
