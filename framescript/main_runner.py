"""
main_runner – Command-line entry point.

Builds a route from a Python callable, loads a ROM into a headless mGBA
core and plays the route frame by frame:

  1. Import the route builder (``package.module:function``).
  2. Call it with the RuntimeConfig to obtain a Script.
  3. Validate and load the script (bad buttons / addresses abort here).
  4. Run until the script is done, then optionally keep the emulator going.
  5. Export the input timeline and a final screenshot if asked.
"""

from __future__ import annotations

import argparse
import importlib
import logging
from pathlib import Path
from typing import Callable, List, Optional

from framescript.config import (
    ADDRESS_BITS,
    DEFAULT_SPEED,
    GROUNDED,
    PLAYER_STATE,
    STALL_BUDGET_FRAMES,
    RuntimeConfig,
)
from framescript.errors import ConfigurationError, RuntimeStallError
from framescript.hosts import MgbaHost
from framescript.runtime import Runtime
from framescript.script import Script
from framescript.timeline import export_csv, export_json, generate_timeline_chart

logger = logging.getLogger(__name__)

RouteBuilder = Callable[[RuntimeConfig], Script]


def load_route(target: str) -> RouteBuilder:
    """Resolve ``package.module:function`` to a route builder."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Route must look like 'package.module:function', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import route module {module_name!r}: {exc}") from exc
    builder = getattr(module, attr, None)
    if not callable(builder):
        raise ConfigurationError(f"{module_name!r} has no callable {attr!r}")
    return builder


def build_script(builder: RouteBuilder, config: RuntimeConfig, name: str) -> Script:
    script = builder(config)
    if not isinstance(script, Script):
        raise ConfigurationError(f"Route {name} returned {type(script).__name__}, not a Script")
    script.name = name
    return script


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="framescript – frame-accurate scripted input for emulators",
    )
    parser.add_argument("rom", type=Path, help="Path to the ROM file")
    parser.add_argument(
        "--route", "-r",
        required=True,
        help="Route builder as package.module:function (receives RuntimeConfig, returns Script)",
    )
    parser.add_argument(
        "--speed", "-s",
        type=int,
        default=DEFAULT_SPEED,
        help="Speed multiplier: 1=real time, 0=unthrottled (default: %(default)s)",
    )
    parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop the script after N frames even if it has not finished",
    )
    parser.add_argument(
        "--after-frames",
        type=int,
        default=0,
        help="Keep emulating N frames after the script finishes (default: 0)",
    )
    parser.add_argument(
        "--stall-budget",
        type=int,
        default=STALL_BUDGET_FRAMES,
        help="Frames a polling wait may take before aborting (default: %(default)s)",
    )
    parser.add_argument(
        "--address-bits",
        type=int,
        default=ADDRESS_BITS,
        help=(
            "Width of the memory address space (default: %(default)s, the NES CPU bus); "
            "use 32 for GBA addresses such as IWRAM at 0x03000000"
        ),
    )
    parser.add_argument(
        "--player-state",
        type=lambda x: int(x, 0),
        default=PLAYER_STATE,
        help=(
            f"Player state address (default: 0x{PLAYER_STATE:X}, Super Mario Bros. on NES); "
            "set this for the game actually loaded"
        ),
    )
    parser.add_argument(
        "--grounded",
        type=lambda x: int(x, 0),
        default=GROUNDED,
        help=f"Player state value meaning 'on the ground' (default: {GROUNDED})",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Directory for timeline CSV / JSON / chart and final screenshot",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def export_results(runtime: Runtime, host: MgbaHost, directory: Path) -> List[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    written = [
        export_csv(runtime.timeline, directory / "input_timeline.csv"),
        export_json(runtime.timeline, runtime.events, directory / "input_timeline.json"),
    ]
    chart = generate_timeline_chart(runtime.timeline, directory / "input_timeline.png")
    if chart is not None:
        written.append(chart)
    image = host.screenshot()
    if image is not None:
        shot = directory / "final_frame.png"
        image.save(shot)
        written.append(shot)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        config = RuntimeConfig(
            address_bits=args.address_bits,
            player_state_address=args.player_state,
            grounded_value=args.grounded,
            stall_budget=args.stall_budget,
            speed=args.speed,
        )
        script = build_script(load_route(args.route), config, args.route)
        host = MgbaHost.from_rom(args.rom)
        runtime = Runtime(host, config)
        runtime.load(script)
    except (ConfigurationError, FileNotFoundError, ImportError, RuntimeError) as exc:
        logger.error("%s", exc)
        return 1

    status = 0
    try:
        frames = runtime.run(max_frames=args.max_frames)
        runtime.run_frames(args.after_frames)
    except RuntimeStallError:
        frames = runtime.frame
        status = 2

    if args.export is not None:
        for path in export_results(runtime, host, args.export):
            logger.info("Wrote %s", path)

    print("\n" + "=" * 60)
    print("  framescript - Run Summary")
    print("=" * 60)
    summary = {
        "route": args.route,
        "script_frames": frames,
        "total_frames": runtime.frame,
        "actions_applied": len(runtime.events),
        "driver_state": runtime.state.value if runtime.state else "none",
        "stalled": status == 2,
    }
    for key, val in summary.items():
        print(f"  {key:.<40} {val}")
    print("=" * 60)
    return status


if __name__ == "__main__":
    raise SystemExit(main())
