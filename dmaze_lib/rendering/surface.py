# --- dmaze_lib/rendering/surface.py ---
"""
Offscreen drawing surfaces with deferred, frame-based execution.

Draw commands submitted to an OffscreenSurface are not executed immediately:
the surface performs them on the next frame boundary of its FrameClock and only
guarantees fully drawn, readable content MIN_READBACK_FRAMES boundaries after
the submission. Callers model that wait explicitly by yielding once per frame.
"""

import logging
from typing import Callable, List, Optional, Tuple

from PIL import Image, ImageDraw

log = logging.getLogger("dmaze.render")

MIN_READBACK_FRAMES = 2

DrawCommand = Callable[[ImageDraw.ImageDraw], None]


class FrameClock:
    """Counts frame boundaries and advances every live surface on each tick."""

    def __init__(self):
        self.frame = 0
        self._surfaces: List["OffscreenSurface"] = []

    @property
    def live_surfaces(self) -> int:
        return len(self._surfaces)

    def register(self, surface: "OffscreenSurface"):
        self._surfaces.append(surface)

    def unregister(self, surface: "OffscreenSurface"):
        if surface in self._surfaces:
            self._surfaces.remove(surface)

    def tick(self):
        self.frame += 1
        for surface in list(self._surfaces):
            surface._on_frame(self.frame)


class OffscreenSurface:
    """An RGB canvas whose draws land on frame boundaries of a FrameClock."""

    def __init__(
        self,
        clock: FrameClock,
        size: Tuple[int, int],
        background: Tuple[int, int, int] = (255, 255, 255),
    ):
        self.clock = clock
        self.size = size
        self.background = background
        self._image: Optional[Image.Image] = None
        self._pending: List[DrawCommand] = []
        self._submitted_frame: Optional[int] = None
        self._release_requested = False
        self.released = False
        clock.register(self)
        log.debug("Allocated %dx%d offscreen surface.", *size)

    def submit(self, commands: List[DrawCommand]):
        """Queues draw commands for the next frame."""
        if self.released or self._release_requested:
            raise RuntimeError("Cannot draw on a released surface.")
        self._pending.extend(commands)
        self._submitted_frame = self.clock.frame

    def frames_since_submit(self) -> int:
        if self._submitted_frame is None:
            return 0
        return self.clock.frame - self._submitted_frame

    def is_ready(self) -> bool:
        return (
            not self.released
            and self._submitted_frame is not None
            and self.frames_since_submit() >= MIN_READBACK_FRAMES
        )

    def read_back(self) -> Optional[Image.Image]:
        """Returns a copy of the drawn pixels, or None if not yet readable."""
        if not self.is_ready() or self._image is None:
            return None
        return self._image.copy()

    def release(self):
        """
        Frees the surface. If the readback delay has not elapsed the release
        is deferred until it has, so in-flight draws never hit freed memory.
        """
        if self.released:
            return
        if self._submitted_frame is not None and not self.is_ready():
            log.debug("Deferring surface release until drawing completes.")
            self._release_requested = True
            return
        self._destroy()

    def _on_frame(self, frame: int):
        if self._submitted_frame is not None and (self._pending or self._image is None):
            self._execute_pending()
        if self._release_requested and self.frames_since_submit() >= MIN_READBACK_FRAMES:
            self._destroy()

    def _execute_pending(self):
        if self._image is None:
            self._image = Image.new("RGB", self.size, self.background)
        draw = ImageDraw.Draw(self._image)
        for command in self._pending:
            command(draw)
        log.debug("Executed %d draw commands.", len(self._pending))
        self._pending = []

    def _destroy(self):
        self._image = None
        self._pending = []
        self.released = True
        self.clock.unregister(self)
        log.debug("Released offscreen surface.")
