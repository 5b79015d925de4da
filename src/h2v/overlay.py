"""
Overlay layers and the transitions between their states.

Four fixed-position elements are injected into the page once and then mutated
in place for the rest of the run:

    background  animated gradient        (z 8000)
    circuit     pulsing dot grid         (z 8500)
    banner      centered title text      (z 9000)
    fade_mask   black full-screen cover  (z 9999)

Two more targets have no element of their own: the section being highlighted,
and the document body, which is panned and zoomed as a whole.

Every transition sets CSS properties that the browser animates over a fixed
duration, then samples that animation with one or two frame bursts. The
`Cadence` of each burst declares the duration it covers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from h2v.capture import Cadence, CaptureDriver
from h2v.errors import TransitionError
from h2v.state import RunState
from h2v.surface import Surface

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Cadences
# ─────────────────────────────────────────────────────────────────────────────

FADE = Cadence(frames=5, pause_ms=200, transition_ms=1000)
BACKGROUND = Cadence(frames=5, pause_ms=200, transition_ms=1000)
BANNER_SHOW = Cadence(frames=10, pause_ms=300, transition_ms=1000)
BANNER_HIDE = Cadence(frames=5, pause_ms=300, transition_ms=1000)
HIGHLIGHT_IN = Cadence(frames=12, pause_ms=250, transition_ms=2000)
HIGHLIGHT_OUT = Cadence(frames=8, pause_ms=250, transition_ms=2000)
PAN_OUT = Cadence(frames=20, pause_ms=300, transition_ms=6000)
PAN_BACK = Cadence(frames=10, pause_ms=300, transition_ms=3000)

# ─────────────────────────────────────────────────────────────────────────────
# Layer definitions
# ─────────────────────────────────────────────────────────────────────────────

KEYFRAMES_CSS = """
@keyframes gradientShift {
  0% { background-position: 0% 50%; }
  50% { background-position: 100% 50%; }
  100% { background-position: 0% 50%; }
}
@keyframes circuitPulse {
  0% { opacity: 0.2; }
  50% { opacity: 0.6; }
  100% { opacity: 0.2; }
}
"""

_FULLSCREEN = {
    "position": "fixed",
    "top": "0",
    "left": "0",
    "width": "100%",
    "height": "100%",
    "opacity": "0",
    "transition": "opacity 1s ease",
}

LAYER_IDS = {
    "background": "bg-overlay",
    "circuit": "circuit-overlay",
    "fade_mask": "fade-overlay",
    "banner": "banner-overlay",
}

LAYER_STYLES: dict[str, dict[str, str]] = {
    "background": {
        **_FULLSCREEN,
        "background": "linear-gradient(135deg, #0f0f23, #1a1a40, #292973)",
        "backgroundSize": "400% 400%",
        "animation": "gradientShift 15s ease infinite",
        "zIndex": "8000",
    },
    "circuit": {
        **_FULLSCREEN,
        "backgroundImage": "radial-gradient(circle, rgba(0,255,255,0.2) 1px, transparent 1px)",
        "backgroundSize": "40px 40px",
        "animation": "circuitPulse 4s infinite",
        "zIndex": "8500",
    },
    "fade_mask": {
        **_FULLSCREEN,
        "background": "black",
        "pointerEvents": "none",
        "zIndex": "9999",
    },
    "banner": {
        "position": "fixed",
        "top": "40%",
        "width": "100%",
        "textAlign": "center",
        "color": "white",
        "fontFamily": "Orbitron, sans-serif",
        "fontSize": "60px",
        "fontWeight": "bold",
        "textShadow": "0px 0px 20px rgba(0,255,255,0.8)",
        "opacity": "0",
        "transition": "opacity 1s ease",
        "zIndex": "9000",
    },
}

HIGHLIGHT_STYLE = {
    "transition": "transform 2s ease-in-out, background 2s ease-in-out",
    "transform": "scale(1.25)",
    "background": "rgba(0,255,255,0.2)",
}
UNHIGHLIGHT_STYLE = {"transform": "scale(1)", "background": "transparent"}

PAN_STYLE = {
    "transition": "transform 6s ease-in-out",
    "transformOrigin": "center center",
    "transform": "scale(1.1) translate(-20px, -10px)",
}
PAN_BACK_STYLE = {
    "transition": "transform 3s ease-in-out",
    "transform": "scale(1) translate(0,0)",
}

# ─────────────────────────────────────────────────────────────────────────────
# Page scripts (see h2v.surface for the calling convention)
# ─────────────────────────────────────────────────────────────────────────────

INSTALL_LAYERS = """([, install]) => {
  if (!document.getElementById("h2v-keyframes")) {
    const style = document.createElement("style");
    style.id = "h2v-keyframes";
    style.textContent = install.keyframes;
    document.head.appendChild(style);
  }
  for (const layer of install.layers) {
    if (document.getElementById(layer.id)) continue;
    const el = document.createElement("div");
    el.id = layer.id;
    Object.assign(el.style, layer.style);
    document.body.appendChild(el);
  }
}"""

APPLY_STYLE = "([els, style]) => els.forEach(el => Object.assign(el.style, style))"

APPLY_ROOT_STYLE = "([, style]) => Object.assign(document.body.style, style)"

SHOW_BANNER = """([[banner], text]) => {
  banner.innerText = text;
  banner.style.opacity = "1";
}"""


@dataclass(frozen=True)
class OverlayLayers:
    """Handles to the injected overlay elements."""

    background: Any
    circuit: Any
    fade_mask: Any
    banner: Any


class OverlayStateMachine:
    """
    Owns the overlay layers and their logical state.

    Each operation applies one atomic mutation, samples the resulting CSS
    transition with a frame burst, and records the step on the run state.
    Operations that revert (highlight, pan) do so with a second mutation and
    a second burst.
    """

    def __init__(self, surface: Surface, driver: CaptureDriver):
        self.surface = surface
        self.driver = driver
        self._layers: OverlayLayers | None = None

        self.fade_visible = False
        self.background_visible = False
        self.banner_text: str | None = None
        self.highlighted: Any = None
        self.page_zoomed = False

    # ─────────────────────────────────────────────────────────────────────────
    # Setup
    # ─────────────────────────────────────────────────────────────────────────

    def setup(self) -> OverlayLayers:
        """Inject the overlay elements and resolve their handles.

        Safe to call more than once: elements are created only if absent and
        the same handles are returned on every call.
        """
        if self._layers is not None:
            return self._layers

        install = {
            "keyframes": KEYFRAMES_CSS,
            "layers": [
                {"id": LAYER_IDS[name], "style": LAYER_STYLES[name]}
                for name in LAYER_IDS
            ],
        }
        self.surface.apply_mutation(INSTALL_LAYERS, arg=install)

        handles = {name: self._resolve(element_id) for name, element_id in LAYER_IDS.items()}
        self._layers = OverlayLayers(**handles)
        logger.debug(f"Overlay layers installed: {', '.join(LAYER_IDS.values())}")
        return self._layers

    def _resolve(self, element_id: str) -> Any:
        found = self.surface.query_selector_all(f"#{element_id}")
        if not found:
            raise TransitionError(f"Overlay element '#{element_id}' not found")
        return found[0]

    @property
    def layers(self) -> OverlayLayers:
        if self._layers is None:
            raise TransitionError("Overlay layers used before setup()")
        return self._layers

    # ─────────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────────

    def _transition(
        self,
        state: RunState,
        operation: str,
        bursts: list[tuple[Callable[[], None], Cadence]],
    ) -> int:
        """Run each (mutation, cadence) pair in order and record one step."""
        first = state.frame_index
        for mutate, cadence in bursts:
            mutate()
            self.driver.burst(state, cadence)
        step = state.record_step(operation, first)
        logger.debug(f"{operation}: frames {first}..{state.frame_index - 1}")
        return step.frames

    def _set_fade(self, state: RunState, visible: bool) -> None:
        self.surface.apply_mutation(
            APPLY_STYLE, [self.layers.fade_mask], {"opacity": "1" if visible else "0"}
        )
        state.record_change("fade_mask", self.fade_visible, visible)
        self.fade_visible = visible

    def fade_in(self, state: RunState, cadence: Cadence = FADE) -> int:
        return self._transition(state, "fade_in", [(lambda: self._set_fade(state, True), cadence)])

    def fade_out(self, state: RunState, cadence: Cadence = FADE) -> int:
        return self._transition(state, "fade_out", [(lambda: self._set_fade(state, False), cadence)])

    def _set_background(self, state: RunState, visible: bool) -> None:
        # Background and circuit always move together in one mutation
        layers = self.layers
        self.surface.apply_mutation(
            APPLY_STYLE,
            [layers.background, layers.circuit],
            {"opacity": "1" if visible else "0"},
        )
        state.record_change("background", self.background_visible, visible)
        self.background_visible = visible

    def show_background(self, state: RunState, cadence: Cadence = BACKGROUND) -> int:
        return self._transition(
            state, "show_background", [(lambda: self._set_background(state, True), cadence)]
        )

    def hide_background(self, state: RunState, cadence: Cadence = BACKGROUND) -> int:
        return self._transition(
            state, "hide_background", [(lambda: self._set_background(state, False), cadence)]
        )

    def show_banner(self, state: RunState, text: str, cadence: Cadence = BANNER_SHOW) -> int:
        """Set the banner text and make it visible.

        Calling this while the banner is already visible only swaps the text.
        """
        def mutate() -> None:
            self.surface.apply_mutation(SHOW_BANNER, [self.layers.banner], text)
            state.record_change("banner", self.banner_text, text)
            self.banner_text = text

        return self._transition(state, "show_banner", [(mutate, cadence)])

    def hide_banner(self, state: RunState, cadence: Cadence = BANNER_HIDE) -> int:
        def mutate() -> None:
            self.surface.apply_mutation(APPLY_STYLE, [self.layers.banner], {"opacity": "0"})
            state.record_change("banner", self.banner_text, None)
            self.banner_text = None

        return self._transition(state, "hide_banner", [(mutate, cadence)])

    def highlight_section(
        self,
        state: RunState,
        section: Any,
        cadence_in: Cadence = HIGHLIGHT_IN,
        cadence_out: Cadence = HIGHLIGHT_OUT,
    ) -> int:
        """Scale and tint ``section``, hold, then return it to normal."""
        if section is None:
            raise TransitionError("Cannot highlight a missing section")

        def scale_up() -> None:
            self.surface.apply_mutation(APPLY_STYLE, [section], HIGHLIGHT_STYLE)
            state.record_change("highlight", self.highlighted, section)
            self.highlighted = section

        def revert() -> None:
            self.surface.apply_mutation(APPLY_STYLE, [section], UNHIGHLIGHT_STYLE)
            state.record_change("highlight", section, None)
            self.highlighted = None

        return self._transition(
            state, "highlight_section", [(scale_up, cadence_in), (revert, cadence_out)]
        )

    def pan_and_zoom(
        self,
        state: RunState,
        cadence_out: Cadence = PAN_OUT,
        cadence_back: Cadence = PAN_BACK,
    ) -> int:
        """Zoom and shift the whole page, then bring it back to rest."""
        def zoom() -> None:
            self.surface.apply_mutation(APPLY_ROOT_STYLE, arg=PAN_STYLE)
            state.record_change("page", self.page_zoomed, True)
            self.page_zoomed = True

        def rest() -> None:
            self.surface.apply_mutation(APPLY_ROOT_STYLE, arg=PAN_BACK_STYLE)
            state.record_change("page", self.page_zoomed, False)
            self.page_zoomed = False

        return self._transition(
            state, "pan_and_zoom", [(zoom, cadence_out), (rest, cadence_back)]
        )
