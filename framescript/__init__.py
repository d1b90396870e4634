"""framescript – frame-accurate input scheduling and memory polling for emulator scripts."""

from framescript.buttons import Button, ControllerState
from framescript.config import RuntimeConfig
from framescript.errors import ConfigurationError, FrameScriptError, RuntimeStallError
from framescript.hosts import MemoryHost, MgbaHost
from framescript.runtime import Runtime
from framescript.script import Script

__all__ = [
    "Button",
    "ConfigurationError",
    "ControllerState",
    "FrameScriptError",
    "MemoryHost",
    "MgbaHost",
    "Runtime",
    "RuntimeConfig",
    "RuntimeStallError",
    "Script",
]
