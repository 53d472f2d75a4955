# --- dmaze_lib/session.py ---
import logging
from typing import Optional, Tuple

from dmaze_lib import styles
from dmaze_lib.errors import EmptyGrid, NoGeneratorBound
from dmaze_lib.export import ExportEvent, ExportListener, MazeExporter, get_preset
from dmaze_lib.generation import MazeGenerator
from dmaze_lib.layout import LayoutResult, resolve_layout
from dmaze_lib.rendering.constants import TILE_SIZE
from dmaze_lib.rendering.geometry import CAMERA_PADDING, CameraFrame, camera_fit, placement_bounds
from dmaze_lib.rendering.surface import FrameClock
from dmaze_lib.schema import Grid, Style

log = logging.getLogger("dmaze.main")


class MazeSession:
    """
    Holds the current maze, its style and the collaborators that act on it.

    This is the single caller-facing entry point: generate, clear, resolve,
    frame a camera and export are plain method calls. Every error is reported
    with a descriptive message and leaves the session ready for the next call.
    """

    def __init__(
        self,
        generator: Optional[MazeGenerator] = None,
        exporter: Optional[MazeExporter] = None,
        style: Optional[Style] = None,
        tile_size: Tuple[float, float] = TILE_SIZE,
    ):
        self.generator = generator
        self.exporter = exporter or MazeExporter(tile_size=tile_size)
        self.style = style or styles.get_style(styles.DEFAULT_STYLE)
        self.tile_size = tile_size
        self.grid: Optional[Grid] = None
        self.clock = FrameClock()

    def bind_generator(self, generator: MazeGenerator):
        self.generator = generator

    def select_style(self, style: Style):
        log.debug("Selected style '%s'.", style.name)
        self.style = style

    @property
    def has_maze(self) -> bool:
        return self.grid is not None and not self.grid.is_empty()

    def generate(self, width: int, height: int) -> Grid:
        """Replaces the current maze with a freshly generated one."""
        if self.generator is None:
            raise NoGeneratorBound()
        self.grid = self.generator.generate(width, height)
        return self.grid

    def load(self, grid: Grid, style: Optional[Style] = None):
        self.grid = grid
        if style is not None:
            self.style = style

    def clear(self):
        log.info("Clearing current maze.")
        self.grid = None

    def resolve(self) -> LayoutResult:
        if not self.has_maze:
            return resolve_layout(Grid.empty(), self.style)
        return resolve_layout(self.grid, self.style)

    def fit_camera(
        self, viewport_size: Tuple[float, float], padding: float = CAMERA_PADDING
    ) -> CameraFrame:
        """Zoom and centre that frame the current maze in the viewport."""
        result = self.resolve()
        if not result.ok:
            raise result.error
        cells = [p for _, layer in result.placements.layers() for p in layer]
        frame = camera_fit(placement_bounds(cells, self.tile_size), viewport_size, padding)
        log.debug("Camera frame: zoom=%.3f centre=%s", frame.zoom, frame.center)
        return frame

    def export(self, preset_name: str, listener: Optional[ExportListener] = None) -> ExportEvent:
        """Exports the current maze; returns the terminal started/completed/failed event."""
        preset = get_preset(preset_name)
        if self.generator is None and self.grid is None:
            event = ExportEvent.failed(preset.name, str(NoGeneratorBound()))
        elif not self.has_maze:
            event = ExportEvent.failed(preset.name, str(EmptyGrid()))
        else:
            result = self.resolve()
            if not result.ok:
                event = ExportEvent.failed(preset.name, str(result.error))
            else:
                return self.exporter.run_export(
                    self.grid, result.placements, preset, listener, self.clock
                )
        log.error("Export (%s) failed: %s", event.format, event.reason)
        if listener:
            listener(event)
        return event
