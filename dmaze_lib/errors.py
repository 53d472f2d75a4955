"""
dmaze_lib/errors.py: Recoverable error conditions raised at the caller boundary.

Every error carries a human-readable message. None of them is fatal: callers
report the message and return to a ready state. Nothing is retried
automatically.
"""


class MazeError(Exception):
    """Base class for all dmaze errors."""


class NoGeneratorBound(MazeError):
    """A generation or export was requested without a bound maze generator."""

    def __init__(self, message="No maze generator is bound to this session."):
        super().__init__(message)


class EmptyGrid(MazeError):
    """An export or layout was requested before any maze was generated."""

    def __init__(self, message="No maze has been generated yet."):
        super().__init__(message)


class InvalidStyle(MazeError):
    """The selected style enables neither passages nor walls."""

    def __init__(self, style_name: str):
        self.style_name = style_name
        super().__init__(
            f"Style '{style_name}' enables neither passages nor walls; nothing to render."
        )


class SurfaceReadbackFailure(MazeError):
    """The offscreen surface did not yield a pixel buffer."""


class EncodeOrWriteFailure(MazeError):
    """The image could not be encoded or written to disk."""


class ExportBusy(MazeError):
    """An export was requested while another one is still rendering."""

    def __init__(self, message="An export is already in progress."):
        super().__init__(message)
