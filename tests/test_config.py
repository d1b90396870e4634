"""Unit tests for framescript.config – defaults and RuntimeConfig validation."""
import pytest
from framescript.config import GROUNDED, PLAYER_STATE, STALL_BUDGET_FRAMES, RuntimeConfig
from framescript.errors import ConfigurationError, FrameScriptError, RuntimeStallError


class TestRuntimeConfig:
    def test_defaults(self):
        c = RuntimeConfig()
        assert c.address_bits == 16
        assert c.player_state_address == PLAYER_STATE == 0x1D
        assert c.grounded_value == GROUNDED == 0
        assert c.stall_budget == STALL_BUDGET_FRAMES
        assert c.speed == 0
        assert c.exclusive_directions is False

    def test_address_limit(self):
        assert RuntimeConfig().address_limit == 0x10000
        assert RuntimeConfig(address_bits=32).address_limit == 1 << 32

    def test_frozen(self):
        with pytest.raises(Exception):
            RuntimeConfig().speed = 2

    @pytest.mark.parametrize("kwargs", [
        {"address_bits": 0},
        {"address_bits": 33},
        {"player_state_address": 0x10000},
        {"player_state_address": -1},
        {"player_state_address": "0x1D"},
        {"grounded_value": 256},
        {"stall_budget": 0},
        {"frame_rate": 0},
        {"speed": -1},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            RuntimeConfig(**kwargs)


class TestErrors:
    def test_hierarchy(self):
        assert issubclass(ConfigurationError, FrameScriptError)
        assert issubclass(ConfigurationError, ValueError)
        assert issubclass(RuntimeStallError, FrameScriptError)
        assert issubclass(RuntimeStallError, RuntimeError)

    def test_stall_message(self):
        err = RuntimeStallError("read(0x001D) == 0", frame=610, waited=600, cursor=3)
        assert "600 frames" in str(err)
        assert "action #3" in str(err)
        assert err.frame == 610
