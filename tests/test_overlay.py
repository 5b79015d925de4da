"""Tests for the overlay state machine."""

import pytest

from conftest import FakeSurface
from h2v.capture import CaptureDriver
from h2v.errors import TransitionError
from h2v.overlay import (
    APPLY_ROOT_STYLE,
    APPLY_STYLE,
    HIGHLIGHT_STYLE,
    INSTALL_LAYERS,
    LAYER_IDS,
    PAN_BACK_STYLE,
    PAN_STYLE,
    SHOW_BANNER,
    UNHIGHLIGHT_STYLE,
    OverlayStateMachine,
)
from h2v.state import RunState


@pytest.fixture
def surface():
    return FakeSurface(sections=2)


@pytest.fixture
def machine(surface, sink, clock):
    machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
    machine.setup()
    surface.mutations.clear()
    return machine


@pytest.fixture
def state():
    return RunState()


# ─────────────────────────────────────────────────────────────────────────────
# Setup
# ─────────────────────────────────────────────────────────────────────────────


class TestSetup:
    """Tests for layer installation."""

    def test_installs_all_layers(self, surface, sink, clock):
        machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
        layers = machine.setup()

        assert set(surface.elements) == set(LAYER_IDS.values())
        assert layers.fade_mask is surface.elements["fade-overlay"]
        assert layers.banner is surface.elements["banner-overlay"]
        assert layers.background is surface.elements["bg-overlay"]
        assert layers.circuit is surface.elements["circuit-overlay"]

    def test_setup_is_idempotent(self, surface, sink, clock):
        machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
        first = machine.setup()
        second = machine.setup()

        assert first is second
        installs = [m for m in surface.mutations if m[0] == INSTALL_LAYERS]
        assert len(installs) == 1

    def test_layers_start_hidden(self, surface):
        OverlayStateMachine(surface, None).setup()
        _, _, install = surface.mutations[0]
        assert all(layer["style"]["opacity"] == "0" for layer in install["layers"])

    def test_missing_layer_is_transition_error(self, sink, clock):
        surface = FakeSurface(missing=("banner-overlay",))
        machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
        with pytest.raises(TransitionError, match="banner-overlay"):
            machine.setup()

    def test_use_before_setup_is_transition_error(self, surface, sink, clock, state):
        machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
        with pytest.raises(TransitionError, match="before setup"):
            machine.fade_in(state)
        assert state.frame_index == 0


# ─────────────────────────────────────────────────────────────────────────────
# Transitions
# ─────────────────────────────────────────────────────────────────────────────


class TestFade:
    def test_fade_in(self, machine, surface, state, clock):
        assert machine.fade_in(state) == 5
        assert surface.mutations == [
            (APPLY_STYLE, [machine.layers.fade_mask], {"opacity": "1"}),
        ]
        assert clock.sleeps == [200] * 5
        assert machine.fade_visible is True

    def test_fade_out(self, machine, surface, state):
        machine.fade_in(state)
        assert machine.fade_out(state) == 5
        assert surface.mutations[-1][2] == {"opacity": "0"}
        assert machine.fade_visible is False
        assert state.frame_index == 10


class TestBackground:
    def test_background_and_circuit_change_in_one_mutation(self, machine, surface, state):
        machine.show_background(state)

        assert len(surface.mutations) == 1
        script, targets, arg = surface.mutations[0]
        assert script == APPLY_STYLE
        assert targets == [machine.layers.background, machine.layers.circuit]
        assert arg == {"opacity": "1"}

    def test_hide_background(self, machine, surface, state):
        machine.show_background(state)
        assert machine.hide_background(state) == 5
        assert surface.mutations[-1][2] == {"opacity": "0"}
        assert machine.background_visible is False


class TestBanner:
    def test_show_banner(self, machine, surface, state, clock):
        assert machine.show_banner(state, "Hello") == 10
        assert surface.mutations == [(SHOW_BANNER, [machine.layers.banner], "Hello")]
        assert clock.sleeps == [300] * 10
        assert machine.banner_text == "Hello"

    def test_second_show_only_swaps_text(self, machine, state):
        machine.show_banner(state, "Title")
        machine.show_banner(state, "Subtitle")

        changes = [c for c in state.layer_changes if c.layer == "banner"]
        assert [(c.before, c.after) for c in changes] == [
            (None, "Title"),
            ("Title", "Subtitle"),
        ]

    def test_hide_banner(self, machine, state, clock):
        machine.show_banner(state, "Title")
        assert machine.hide_banner(state) == 5
        assert machine.banner_text is None
        assert clock.sleeps[-5:] == [300] * 5


class TestHighlight:
    def test_two_bursts(self, machine, surface, state, clock):
        section = surface.sections[0]
        assert machine.highlight_section(state, section) == 20

        assert surface.mutations == [
            (APPLY_STYLE, [section], HIGHLIGHT_STYLE),
            (APPLY_STYLE, [section], UNHIGHLIGHT_STYLE),
        ]
        assert clock.sleeps == [250] * 20
        assert machine.highlighted is None

    def test_highlight_scale(self):
        assert HIGHLIGHT_STYLE["transform"] == "scale(1.25)"
        assert UNHIGHLIGHT_STYLE["transform"] == "scale(1)"

    def test_revert_happens_after_first_burst(self, machine, surface, state):
        calls = []
        original = surface.apply_mutation

        def tracking(script, targets=(), arg=None):
            calls.append((arg, surface.renders))
            original(script, targets, arg)

        surface.apply_mutation = tracking
        machine.highlight_section(state, surface.sections[1])
        assert calls == [(HIGHLIGHT_STYLE, 0), (UNHIGHLIGHT_STYLE, 12)]

    def test_missing_section(self, machine, state):
        with pytest.raises(TransitionError):
            machine.highlight_section(state, None)
        assert state.frame_index == 0

    def test_failed_mutation_propagates(self, sink, clock, state):
        surface = FakeSurface(sections=1, fail_on_arg=UNHIGHLIGHT_STYLE)
        machine = OverlayStateMachine(surface, CaptureDriver(surface, sink, clock))
        machine.setup()

        with pytest.raises(TransitionError):
            machine.highlight_section(state, surface.sections[0])
        # The first burst completed before the revert failed
        assert state.frame_index == 12
        assert state.steps == []


class TestPanAndZoom:
    def test_two_bursts_on_document_root(self, machine, surface, state, clock):
        assert machine.pan_and_zoom(state) == 30

        assert surface.mutations == [
            (APPLY_ROOT_STYLE, [], PAN_STYLE),
            (APPLY_ROOT_STYLE, [], PAN_BACK_STYLE),
        ]
        assert clock.sleeps == [300] * 30
        assert machine.page_zoomed is False

    def test_step_recorded(self, machine, state):
        machine.pan_and_zoom(state)
        assert len(state.steps) == 1
        step = state.steps[0]
        assert step.operation == "pan_and_zoom"
        assert (step.first_frame, step.frames) == (0, 30)
