"""
timeline – Per-frame record of delivered controller input.

Provides:
  - InputTimeline: the ControllerState latched on every frame
  - CSV / JSON export of the timeline and the driver's action events
  - Matplotlib piano-roll chart of button activity
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from framescript.buttons import Button, ButtonLike, ControllerState, resolve_button
from framescript.config import EXPORT_DIR

logger = logging.getLogger(__name__)


class InputTimeline:
    """Controller states in frame order, one per emulated frame."""

    def __init__(self) -> None:
        self._states: List[ControllerState] = []

    def record(self, state: ControllerState) -> None:
        self._states.append(state)

    @property
    def states(self) -> List[ControllerState]:
        return list(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def masks(self) -> List[int]:
        return [s.mask for s in self._states]

    def frames_pressed(self, button: ButtonLike) -> List[int]:
        """Frames on which `button` was asserted."""
        button = resolve_button(button)
        return [s.frame for s in self._states if button in s.buttons]

    def state_at(self, frame: int) -> Optional[ControllerState]:
        for state in self._states:
            if state.frame == frame:
                return state
        return None

    def button_counts(self) -> Dict[str, int]:
        """Number of frames each button was held."""
        counts = {b.name: 0 for b in Button}
        for state in self._states:
            for button in state.buttons:
                counts[button.name] += 1
        return counts


# ── Export ──────────────────────────────────────────────────────────────────

def export_csv(timeline: InputTimeline, filepath: Optional[Path] = None) -> Path:
    """One row per frame: frame, mask and a 0/1 column per button."""
    if filepath is None:
        EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        filepath = EXPORT_DIR / "input_timeline.csv"

    with open(filepath, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["frame", "mask"] + [b.name for b in Button])
        for state in timeline.states:
            writer.writerow(
                [state.frame, state.mask] + [int(b in state.buttons) for b in Button]
            )

    logger.info("Exported %d frames to %s", len(timeline), filepath)
    return filepath


def export_json(
    timeline: InputTimeline,
    events: Sequence[object] = (),
    filepath: Optional[Path] = None,
) -> Path:
    """Timeline masks plus the driver's action events."""
    if filepath is None:
        EXPORT_DIR.mkdir(parents=True, exist_ok=True)
        filepath = EXPORT_DIR / "input_timeline.json"

    data = {
        "frames": len(timeline),
        "masks": timeline.masks(),
        "button_frames": timeline.button_counts(),
        "events": [
            {"frame": e.frame, "cursor": e.cursor, "action": str(e.action)}
            for e in events
        ],
    }
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)

    logger.info("Exported timeline (%d frames, %d events) to %s",
                len(timeline), len(data["events"]), filepath)
    return filepath


# ── Chart Generation (matplotlib) ───────────────────────────────────────────

def generate_timeline_chart(
    timeline: InputTimeline,
    filepath: Optional[Path] = None,
) -> Optional[Path]:
    """Piano-roll of button activity: one lane per button, frames on the x axis."""
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        if not len(timeline):
            return None

        if filepath is None:
            EXPORT_DIR.mkdir(parents=True, exist_ok=True)
            filepath = EXPORT_DIR / "input_timeline.png"

        fig, ax = plt.subplots(figsize=(12, 3.5))
        for lane, button in enumerate(Button):
            spans = _spans(timeline.frames_pressed(button))
            if spans:
                ax.broken_barh(spans, (lane - 0.4, 0.8), color="#7c3aed")
        ax.set_yticks(range(len(Button)))
        ax.set_yticklabels([b.name for b in Button])
        ax.set_xlabel("Frame")
        ax.set_title("Controller Input Timeline")
        ax.set_facecolor("#0f0f0f")
        fig.patch.set_facecolor("#0f0f0f")
        ax.tick_params(colors="#94a3b8")
        ax.xaxis.label.set_color("#94a3b8")
        ax.title.set_color("#e2e8f0")
        for spine in ax.spines.values():
            spine.set_color("#334155")

        fig.tight_layout()
        fig.savefig(filepath, dpi=100, facecolor="#0f0f0f")
        plt.close(fig)
        return filepath

    except ImportError:
        logger.warning("matplotlib not installed; chart generation skipped")
        return None


def _spans(frames: List[int]) -> List[tuple]:
    """Collapse sorted frame numbers into (start, length) runs."""
    spans: List[tuple] = []
    for frame in frames:
        if spans and spans[-1][0] + spans[-1][1] == frame:
            start, length = spans[-1]
            spans[-1] = (start, length + 1)
        else:
            spans.append((frame, 1))
    return spans
