# --- dmaze_lib/rendering/raster_renderer.py ---
import logging
from typing import Dict, List, Optional, Tuple

from PIL import ImageDraw

from dmaze_lib.schema import FitTransform, Placement, PlacementSet
from .constants import FALLBACK_COLOR, TERRAIN_COLORS, TILE_INSET, TILE_SIZE
from .geometry import polygon_pixels, tile_shape, transform_shape
from .surface import DrawCommand

log = logging.getLogger("dmaze.render")

Color = Tuple[int, int, int]


class RasterRenderer:
    """Turns a placement set into layered draw commands for a surface."""

    def __init__(
        self,
        tile_size: Tuple[float, float] = TILE_SIZE,
        inset: float = TILE_INSET,
        palette: Optional[Dict[str, Color]] = None,
    ):
        self.tile_size = tile_size
        self.inset = inset
        self.palette = dict(TERRAIN_COLORS)
        self.palette.update(palette or {})

    def color_for(self, terrain: str) -> Color:
        color = self.palette.get(terrain)
        if color is None:
            log.warning("No color for terrain '%s'; using fallback.", terrain)
            return FALLBACK_COLOR
        return color

    def _tile_command(self, tiles: List[Placement], xfm: FitTransform) -> DrawCommand:
        polygons = [
            (polygon_pixels(transform_shape(tile_shape(t, self.tile_size, self.inset), xfm)),
             self.color_for(t.terrain))
            for t in tiles
        ]

        def draw_tiles(draw: ImageDraw.ImageDraw):
            for points, color in polygons:
                if len(points) >= 3:
                    draw.polygon(points, fill=color)

        return draw_tiles

    def _marker_command(self, markers: List[Placement], xfm: FitTransform) -> DrawCommand:
        tw, th = self.tile_size
        ellipses = []
        for m in markers:
            x0, y0 = xfm.apply(m.cell[0] * tw + tw * 0.2, m.cell[1] * th + th * 0.2)
            x1, y1 = xfm.apply(m.cell[0] * tw + tw * 0.8, m.cell[1] * th + th * 0.8)
            ellipses.append(([x0, y0, x1, y1], self.color_for(m.terrain)))

        def draw_markers(draw: ImageDraw.ImageDraw):
            for rect, color in ellipses:
                draw.ellipse(rect, fill=color)

        return draw_markers

    def draw_commands(self, placements: PlacementSet, xfm: FitTransform) -> List[DrawCommand]:
        """Builds commands in draw order: passages, walls, then markers."""
        commands = []
        if placements.passages:
            commands.append(self._tile_command(placements.passages, xfm))
        if placements.walls:
            commands.append(self._tile_command(placements.walls, xfm))
        if placements.markers:
            commands.append(self._marker_command(placements.markers, xfm))
        log.debug("Prepared %d layer commands (scale %.3f).", len(commands), xfm.scale)
        return commands
