"""Section discovery."""

from __future__ import annotations

import logging
from typing import Any

from h2v.surface import Surface

logger = logging.getLogger(__name__)

DEFAULT_SELECTOR = "summary .day-info h3"


def discover_sections(surface: Surface, selector: str = DEFAULT_SELECTOR) -> tuple[Any, ...]:
    """Return every element matching ``selector``, in document order.

    Runs once per timeline. An empty result is valid and simply means the
    main phase has nothing to visit.
    """
    sections = tuple(surface.query_selector_all(selector))
    logger.info(f"Discovered {len(sections)} section(s) matching '{selector}'")
    return sections
