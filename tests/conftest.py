"""Shared fakes for timeline tests (no browser required)."""

from __future__ import annotations

from typing import Any

import pytest

from h2v.capture import FrameSink
from h2v.errors import TransitionError
from h2v.overlay import INSTALL_LAYERS


class FakeElement:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"FakeElement({self.name!r})"


class FakeSurface:
    """
    In-memory stand-in for a rendered page.

    Records every mutation, creates overlay elements when the install script
    runs, and raises TransitionError for any mutation whose arg equals
    ``fail_on_arg``.
    """

    def __init__(
        self,
        sections: int = 0,
        missing: tuple[str, ...] = (),
        fail_on_arg: Any = None,
    ):
        self.sections = [FakeElement(f"section-{i}") for i in range(sections)]
        self.elements: dict[str, FakeElement] = {}
        self.missing = set(missing)
        self.fail_on_arg = fail_on_arg
        self.mutations: list[tuple[str, list[Any], Any]] = []
        self.queries: list[str] = []
        self.renders = 0
        self.closed = False

    def query_selector_all(self, selector: str) -> list[Any]:
        self.queries.append(selector)
        if selector.startswith("#"):
            element = self.elements.get(selector[1:])
            return [element] if element is not None else []
        return list(self.sections)

    def apply_mutation(self, script: str, targets=(), arg: Any = None) -> None:
        if self.fail_on_arg is not None and arg == self.fail_on_arg:
            raise TransitionError(f"Mutation failed: {arg}")
        self.mutations.append((script, list(targets), arg))
        if script == INSTALL_LAYERS:
            for layer in arg["layers"]:
                if layer["id"] not in self.missing:
                    self.elements.setdefault(layer["id"], FakeElement(layer["id"]))

    def render_to_image(self) -> bytes:
        self.renders += 1
        return b"\x89PNG\r\n\x1a\n" + self.renders.to_bytes(4, "big")

    def close(self) -> None:
        self.closed = True


class RecordingClock:
    """Clock that records requested pauses instead of sleeping."""

    def __init__(self):
        self.sleeps: list[int] = []

    def sleep(self, ms: int) -> None:
        self.sleeps.append(ms)

    @property
    def total_ms(self) -> int:
        return sum(self.sleeps)


@pytest.fixture
def clock() -> RecordingClock:
    return RecordingClock()


@pytest.fixture
def sink(tmp_path) -> FrameSink:
    sink = FrameSink(tmp_path / "frames")
    sink.prepare()
    return sink
