"""Error types raised by h2v."""


class H2VError(Exception):
    """Base exception for all h2v errors."""


class SetupError(H2VError):
    """The document, browser, or output directory could not be prepared.

    Raised before any frame is captured.
    """


class TransitionError(H2VError):
    """An overlay or section element is missing or could not be mutated.

    Raised mid-run. Frames captured before the failure are left in place.
    """
