"""
Timeline sequencer.

A run is three phases in fixed order:

    INTRO   fade in, background, title, subtitle, then everything back out
    MAIN    for each section: fade in, scroll to it behind the mask, fade out,
            highlight it, then pan the page before moving to the next one
    OUTRO   same shape as INTRO with the closing banners

Every step finishes its frame bursts before the next one starts, so the total
frame count depends only on the number of sections.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from h2v.capture import CaptureDriver, Clock, FrameSink
from h2v.errors import TransitionError
from h2v.overlay import OverlayStateMachine
from h2v.sections import DEFAULT_SELECTOR, discover_sections
from h2v.state import Phase, RunState
from h2v.surface import Surface

logger = logging.getLogger(__name__)

# Time the smooth scroll gets to finish while the fade mask hides it
SETTLE_MS = 1500

SCROLL_INTO_VIEW = "([[el]]) => el.scrollIntoView({ behavior: 'smooth', block: 'center' })"


@dataclass(frozen=True)
class RunReport:
    total_frames: int
    sections: int
    phase_frames: dict[Phase, int] = field(default_factory=dict)


class TimelineSequencer:
    """Runs one intro/main/outro timeline against a surface.

    A sequencer is single-use: `run` may be called once.
    """

    def __init__(
        self,
        surface: Surface,
        sink: FrameSink,
        intro_banners: tuple[str, str],
        outro_banners: tuple[str, str],
        selector: str = DEFAULT_SELECTOR,
        clock: Clock | None = None,
        settle_ms: int = SETTLE_MS,
    ):
        self.surface = surface
        self.intro_banners = intro_banners
        self.outro_banners = outro_banners
        self.selector = selector
        self.settle_ms = settle_ms

        self.driver = CaptureDriver(surface, sink, clock)
        self.overlay = OverlayStateMachine(surface, self.driver)
        self.state = RunState()
        self.sections: tuple[Any, ...] = ()

    def run(self) -> RunReport:
        if self.state.phase is not None:
            raise RuntimeError("TimelineSequencer.run() can only be called once")

        self.sections = discover_sections(self.surface, self.selector)
        self.overlay.setup()

        self._enter(Phase.INTRO)
        self._bookend(self.intro_banners)

        self._enter(Phase.MAIN)
        self._visit_sections()

        self._enter(Phase.OUTRO)
        self._bookend(self.outro_banners)

        report = RunReport(
            total_frames=self.state.frame_index,
            sections=len(self.sections),
            phase_frames={phase: self.state.frames_in(phase) for phase in Phase},
        )
        logger.info(f"Timeline complete: {report.total_frames} frames")
        return report

    def _enter(self, phase: Phase) -> None:
        if self.state.phase is not None:
            logger.info(
                f"{self.state.phase.name} finished with "
                f"{self.state.frames_in(self.state.phase)} frames"
            )
        self.state.phase = phase
        logger.info(f"Entering {phase.name} at frame {self.state.frame_index}")

    def _bookend(self, banners: tuple[str, str]) -> None:
        """Intro and outro: both banner texts over the background, no hide in between."""
        title, subtitle = banners
        overlay, state = self.overlay, self.state

        overlay.fade_in(state)
        overlay.show_background(state)
        overlay.show_banner(state, title)
        overlay.show_banner(state, subtitle)
        overlay.hide_banner(state)
        overlay.hide_background(state)
        overlay.fade_out(state)

    def _visit_sections(self) -> None:
        overlay, state = self.overlay, self.state
        last = len(self.sections) - 1

        for i, section in enumerate(self.sections):
            logger.debug(f"Section {i + 1}/{len(self.sections)}")
            overlay.fade_in(state)
            self._scroll_to(section)
            overlay.fade_out(state)
            overlay.highlight_section(state, section)
            if i < last:
                overlay.pan_and_zoom(state)

    def _scroll_to(self, section: Any) -> None:
        if section is None:
            raise TransitionError("Cannot scroll to a missing section")
        first = self.state.frame_index
        self.surface.apply_mutation(SCROLL_INTO_VIEW, [section])
        self.driver.clock.sleep(self.settle_ms)
        self.state.record_step("scroll_to_section", first)
