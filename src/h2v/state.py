"""Run state threaded through every timeline operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Phase(Enum):
    INTRO = "intro"
    MAIN = "main"
    OUTRO = "outro"


@dataclass(frozen=True)
class StepRecord:
    """One completed transition and the frames it produced."""

    phase: Phase | None
    operation: str
    first_frame: int
    frames: int


@dataclass(frozen=True)
class LayerChange:
    layer: str
    before: Any
    after: Any


@dataclass
class RunState:
    """
    Mutable state owned by the sequencer for the length of one run.

    ``frame_index`` is the index the next capture will be written at, which is
    also the number of frames captured so far. It only ever increases by one
    per capture.
    """

    frame_index: int = 0
    phase: Phase | None = None
    steps: list[StepRecord] = field(default_factory=list)
    layer_changes: list[LayerChange] = field(default_factory=list)

    def record_step(self, operation: str, first_frame: int) -> StepRecord:
        step = StepRecord(
            phase=self.phase,
            operation=operation,
            first_frame=first_frame,
            frames=self.frame_index - first_frame,
        )
        self.steps.append(step)
        return step

    def record_change(self, layer: str, before: Any, after: Any) -> None:
        self.layer_changes.append(LayerChange(layer, before, after))

    def frames_in(self, phase: Phase) -> int:
        return sum(step.frames for step in self.steps if step.phase is phase)

    def count(self, operation: str, phase: Phase | None = None) -> int:
        """Number of completed steps named ``operation``, optionally within a phase."""
        return sum(
            1 for step in self.steps
            if step.operation == operation and (phase is None or step.phase is phase)
        )
