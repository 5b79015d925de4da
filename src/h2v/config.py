"""
Run configuration.

Settings come from ``H2V_*`` environment variables (a ``.env`` file in the
working directory is loaded first) and can be overridden per call, which is
how the CLI applies its flags.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

from h2v.errors import SetupError
from h2v.sections import DEFAULT_SELECTOR

DEFAULT_SOURCE = "./index.html"
DEFAULT_FRAMES_DIR = Path("./frames")
DEFAULT_VIEWPORT = (1920, 1080)

INTRO_BANNERS = ("🚀 The Rust Adventure", "A Curriculum for Fearless Coders")
OUTRO_BANNERS = ("🎉 Thanks for Watching!", "👉 Subscribe for More Rust Adventures!")


@dataclass(frozen=True)
class Settings:
    source: str = DEFAULT_SOURCE
    frames_dir: Path = DEFAULT_FRAMES_DIR
    section_selector: str = DEFAULT_SELECTOR
    viewport: tuple[int, int] = DEFAULT_VIEWPORT
    headless: bool = True
    intro_banners: tuple[str, str] = INTRO_BANNERS
    outro_banners: tuple[str, str] = OUTRO_BANNERS

    @property
    def location(self) -> str:
        return to_location(self.source)


def to_location(source: str) -> str:
    """Turn a filesystem path into a file:// URI; leave URLs untouched."""
    if "://" in source:
        return source
    return Path(source).expanduser().resolve().as_uri()


def parse_positive_int(value: str, name: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise SetupError(f"{name} must be an integer, got '{value}'") from e
    if number <= 0:
        raise SetupError(f"{name} must be positive, got {number}")
    return number


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return parse_positive_int(value, name)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment, then apply non-None overrides."""
    load_dotenv(find_dotenv(usecwd=True))

    settings = Settings(
        source=os.getenv("H2V_SOURCE", DEFAULT_SOURCE),
        frames_dir=Path(os.getenv("H2V_FRAMES_DIR", str(DEFAULT_FRAMES_DIR))),
        section_selector=os.getenv("H2V_SECTION_SELECTOR", DEFAULT_SELECTOR),
        viewport=(
            _env_int("H2V_VIEWPORT_WIDTH", DEFAULT_VIEWPORT[0]),
            _env_int("H2V_VIEWPORT_HEIGHT", DEFAULT_VIEWPORT[1]),
        ),
        headless=_env_bool("H2V_HEADLESS", True),
        intro_banners=(
            os.getenv("H2V_INTRO_TITLE", INTRO_BANNERS[0]),
            os.getenv("H2V_INTRO_SUBTITLE", INTRO_BANNERS[1]),
        ),
        outro_banners=(
            os.getenv("H2V_OUTRO_TITLE", OUTRO_BANNERS[0]),
            os.getenv("H2V_OUTRO_SUBTITLE", OUTRO_BANNERS[1]),
        ),
    )

    changes = {key: value for key, value in overrides.items() if value is not None}
    return dataclasses.replace(settings, **changes)
