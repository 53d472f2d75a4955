# --- dmaze_lib/export.py ---
"""
dmaze_lib/export.py: Renders a resolved maze to a PNG page.

An export is a small state machine (IDLE -> RENDERING -> IDLE). The render step
submits draw commands to an OffscreenSurface and then yields once per frame
until the surface can be read back, so `MazeExporter.export()` is a generator
that a caller drives against a FrameClock. `run_export()` does that for callers
that have no frame loop of their own.
"""

import enum
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Generator, Optional, Tuple

from PIL import Image

from dmaze_lib.errors import (
    EmptyGrid,
    EncodeOrWriteFailure,
    ExportBusy,
    MazeError,
    SurfaceReadbackFailure,
)
from dmaze_lib.rendering.constants import BACKGROUND_COLOR, TILE_SIZE
from dmaze_lib.rendering.geometry import cell_to_world, compute_bounds, fit_transform
from dmaze_lib.rendering.raster_renderer import RasterRenderer
from dmaze_lib.rendering.surface import FrameClock, OffscreenSurface
from dmaze_lib.schema import Grid, PlacementSet

log = logging.getLogger("dmaze.export")

EXPORT_MARGIN = 0.10
FILENAME_PREFIX = "maze_export_"


@dataclass(frozen=True)
class ExportPreset:
    """A fixed landscape A4 page at a given sampling density."""

    name: str
    size: Tuple[int, int]
    dpi: int


PRESETS: Dict[str, ExportPreset] = {
    "draft": ExportPreset("draft", (1754, 1240), 150),
    "print": ExportPreset("print", (3508, 2480), 300),
}


def get_preset(name: str) -> ExportPreset:
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown export preset '{name}'. Available: {', '.join(PRESETS)}") from None


class ExportState(enum.Enum):
    IDLE = "idle"
    RENDERING = "rendering"


@dataclass(frozen=True)
class ExportEvent:
    """One of started(format), completed(format, path) or failed(format, reason)."""

    kind: str
    format: str
    path: Optional[str] = None
    reason: Optional[str] = None

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def started(cls, fmt: str) -> "ExportEvent":
        return cls(cls.STARTED, fmt)

    @classmethod
    def completed(cls, fmt: str, path: str) -> "ExportEvent":
        return cls(cls.COMPLETED, fmt, path=path)

    @classmethod
    def failed(cls, fmt: str, reason: str) -> "ExportEvent":
        return cls(cls.FAILED, fmt, reason=reason)

    @property
    def ok(self) -> bool:
        return self.kind == self.COMPLETED


ExportListener = Callable[[ExportEvent], None]


def export_filename(now: Optional[datetime] = None, ext: str = "png") -> str:
    """Returns maze_export_YYYYMMDD_HHMMSS.<ext> for the given time."""
    now = now or datetime.now()
    return f"{FILENAME_PREFIX}{now:%Y%m%d_%H%M%S}.{ext}"


class MazeExporter:
    """Renders placement sets onto offscreen surfaces and writes PNG files."""

    def __init__(
        self,
        export_dir: str = ".",
        renderer: Optional[RasterRenderer] = None,
        margin: float = EXPORT_MARGIN,
        tile_size: Tuple[float, float] = TILE_SIZE,
    ):
        self.export_dir = export_dir
        self.renderer = renderer or RasterRenderer(tile_size=tile_size)
        self.margin = margin
        self.tile_size = tile_size
        self.state = ExportState.IDLE

    @property
    def busy(self) -> bool:
        return self.state is ExportState.RENDERING

    def _emit(self, listener: Optional[ExportListener], event: ExportEvent) -> ExportEvent:
        if event.kind == ExportEvent.FAILED:
            log.error("Export (%s) failed: %s", event.format, event.reason)
        else:
            log.info("Export (%s) %s%s", event.format, event.kind,
                     f": {event.path}" if event.path else ".")
        if listener:
            listener(event)
        return event

    def _write(self, image: Image.Image, preset: ExportPreset) -> str:
        path = os.path.join(self.export_dir, export_filename())
        try:
            os.makedirs(self.export_dir, exist_ok=True)
            image.save(path, "PNG", dpi=(preset.dpi, preset.dpi))
        except (OSError, ValueError) as e:
            raise EncodeOrWriteFailure(f"Could not write '{path}': {e}") from e
        return path

    def export(
        self,
        grid: Optional[Grid],
        placements: PlacementSet,
        preset: ExportPreset,
        clock: FrameClock,
        listener: Optional[ExportListener] = None,
    ) -> Generator[None, None, ExportEvent]:
        """
        Render-then-read export task.

        Yields once per frame the caller must let elapse (at least
        MIN_READBACK_FRAMES) and returns the terminal ExportEvent. Closing the
        generator early still defers the surface release until the pending
        frames have been ticked.
        """
        fmt = preset.name
        if self.busy:
            return self._emit(listener, ExportEvent.failed(fmt, str(ExportBusy())))
        if grid is None or grid.is_empty():
            return self._emit(listener, ExportEvent.failed(fmt, str(EmptyGrid())))

        self.state = ExportState.RENDERING
        self._emit(listener, ExportEvent.started(fmt))
        surface = None
        try:
            cells = placements.occupied_cells()
            bounds = compute_bounds(cell_to_world(cells, self.tile_size), self.tile_size)
            xfm = fit_transform(bounds, preset.size, self.margin)

            surface = OffscreenSurface(clock, preset.size, BACKGROUND_COLOR)
            surface.submit(self.renderer.draw_commands(placements, xfm))
            while not surface.is_ready():
                yield

            image = surface.read_back()
            if image is None:
                raise SurfaceReadbackFailure("Offscreen surface returned no pixel data.")
            path = self._write(image, preset)
            event = ExportEvent.completed(fmt, path)
        except MazeError as e:
            event = ExportEvent.failed(fmt, str(e))
        except Exception as e:
            log.error("Unexpected error while rendering export: %s", e, exc_info=True)
            event = ExportEvent.failed(fmt, f"Unexpected rendering error: {e}")
        finally:
            if surface is not None:
                surface.release()
            self.state = ExportState.IDLE
        return self._emit(listener, event)

    def run_export(
        self,
        grid: Optional[Grid],
        placements: PlacementSet,
        preset: ExportPreset,
        listener: Optional[ExportListener] = None,
        clock: Optional[FrameClock] = None,
    ) -> ExportEvent:
        """Drives export() to completion, ticking the clock at every yield."""
        clock = clock or FrameClock()
        task = self.export(grid, placements, preset, clock, listener)
        while True:
            try:
                next(task)
            except StopIteration as done:
                return done.value
            clock.tick()
