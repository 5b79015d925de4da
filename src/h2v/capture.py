"""
Frame capture.

`CaptureDriver.capture_frame` is the only place the run yields: render, write,
then sleep for the pause that lets the current CSS transition advance. Nothing
else happens while it sleeps and captures never overlap.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from h2v.errors import SetupError, TransitionError
from h2v.state import RunState
from h2v.surface import Surface

logger = logging.getLogger(__name__)

FRAME_NAME = "frame-{index:05d}.png"
FRAME_GLOB = "frame-*.png"


class Clock(Protocol):
    def sleep(self, ms: int) -> None: ...


class SystemClock:
    """Blocks the calling thread for real wall-clock time."""

    def sleep(self, ms: int) -> None:
        time.sleep(ms / 1000)


@dataclass(frozen=True)
class Cadence:
    """
    How many frames to sample across a transition, and how far apart.

    ``transition_ms`` is the CSS transition duration the burst is sampling.
    A burst that ends before the transition settles leaves visibly unfinished
    motion in the video, so ``frames * pause_ms`` must cover it.
    """

    frames: int
    pause_ms: int
    transition_ms: int = 0

    def __post_init__(self) -> None:
        if self.frames < 1:
            raise ValueError(f"Cadence needs at least one frame, got {self.frames}")
        if self.pause_ms < 0:
            raise ValueError(f"Pause must be non-negative, got {self.pause_ms}ms")
        if self.span_ms < self.transition_ms:
            raise ValueError(
                f"{self.frames} frames x {self.pause_ms}ms = {self.span_ms}ms "
                f"does not cover a {self.transition_ms}ms transition"
            )

    @property
    def span_ms(self) -> int:
        return self.frames * self.pause_ms


class FrameSink:
    """Writes numbered PNG frames into one directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def prepare(self) -> None:
        """Create the directory and clear frames left by an earlier run."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            stale = sorted(self.directory.glob(FRAME_GLOB))
            for path in stale:
                path.unlink()
        except OSError as e:
            raise SetupError(f"Cannot prepare frames directory '{self.directory}': {e}") from e
        if stale:
            logger.info(f"Removed {len(stale)} stale frame(s) from {self.directory}")

    def path_for(self, index: int) -> Path:
        if index < 0:
            raise ValueError(f"Frame index must be non-negative, got {index}")
        return self.directory / FRAME_NAME.format(index=index)

    def write(self, index: int, data: bytes) -> None:
        path = self.path_for(index)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise TransitionError(f"Cannot write frame {index} to '{path}': {e}") from e


class CaptureDriver:
    def __init__(self, surface: Surface, sink: FrameSink, clock: Clock | None = None):
        self.surface = surface
        self.sink = sink
        self.clock = clock or SystemClock()

    def capture_frame(self, state: RunState, pause_ms: int) -> int:
        """Capture the current surface at the next index and return that index."""
        data = self.surface.render_to_image()
        index = state.frame_index
        self.sink.write(index, data)
        state.frame_index = index + 1
        self.clock.sleep(pause_ms)
        return index

    def burst(self, state: RunState, cadence: Cadence) -> int:
        for _ in range(cadence.frames):
            self.capture_frame(state, cadence.pause_ms)
        return cadence.frames
