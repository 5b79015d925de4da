"""
h2v command line entry point.

Run:
    h2v                          # ./index.html -> ./frames
    h2v docs/course.html --frames-dir out/frames --headed
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

from h2v import __version__
from h2v.capture import Clock, FrameSink
from h2v.config import Settings, load_settings, parse_positive_int
from h2v.errors import H2VError, SetupError
from h2v.surface import PlaywrightSurface
from h2v.timeline import RunReport, TimelineSequencer

logger = logging.getLogger("h2v")


def _pixels(value: str) -> int:
    try:
        return parse_positive_int(value, "size")
    except SetupError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def render(settings: Settings, clock: Clock | None = None) -> RunReport:
    """Capture a full timeline for ``settings.source`` into ``settings.frames_dir``.

    The frames directory is prepared before the browser starts, so a
    SetupError here never leaves a partial run behind.
    """
    sink = FrameSink(settings.frames_dir)
    sink.prepare()

    with PlaywrightSurface.open(
        settings.location,
        viewport=settings.viewport,
        headless=settings.headless,
    ) as surface:
        sequencer = TimelineSequencer(
            surface,
            sink,
            intro_banners=settings.intro_banners,
            outro_banners=settings.outro_banners,
            selector=settings.section_selector,
            clock=clock,
        )
        return sequencer.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="h2v - capture an HTML page as a sequence of video frames"
    )
    parser.add_argument(
        "source",
        nargs="?",
        help="HTML file or URL to render (default: H2V_SOURCE or ./index.html)",
    )
    parser.add_argument(
        "--frames-dir",
        type=Path,
        help="Directory to write frame-NNNNN.png files into (default: ./frames)",
    )
    parser.add_argument(
        "--selector",
        help="CSS selector for section headings to visit",
    )
    parser.add_argument("--width", type=_pixels, help="Viewport width in pixels")
    parser.add_argument("--height", type=_pixels, help="Viewport height in pixels")
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window while capturing",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("--version", action="version", version=f"h2v {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = build_parser().parse_args(argv)

    if args.debug:
        logging.getLogger("h2v").setLevel(logging.DEBUG)

    try:
        settings = load_settings(
            source=args.source,
            frames_dir=args.frames_dir,
            section_selector=args.selector,
            headless=False if args.headed else None,
        )
        if args.width is not None or args.height is not None:
            width, height = settings.viewport
            settings = dataclasses.replace(
                settings,
                viewport=(
                    width if args.width is None else args.width,
                    height if args.height is None else args.height,
                ),
            )

        logger.info(f"Rendering {settings.location} into {settings.frames_dir}")
        report = render(settings)
    except H2VError as e:
        logger.error(f"Run aborted: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Captured {report.total_frames} frames")


if __name__ == "__main__":
    main()
