# --- dmaze_lib/layout.py ---
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from dmaze_lib.errors import InvalidStyle
from dmaze_lib.schema import (
    DIRECTIONS,
    END,
    PASSAGE,
    START,
    WALL,
    Cell,
    Grid,
    Placement,
    PlacementSet,
    Style,
)

log = logging.getLogger("dmaze.layout")


@dataclass
class LayoutResult:
    """Outcome of resolving a grid: either placements or an InvalidStyle."""

    placements: PlacementSet = field(default_factory=PlacementSet)
    error: Optional[InvalidStyle] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def find_start(grid: Grid) -> Optional[Cell]:
    """First passage scanning rows top-to-bottom, columns left-to-right."""
    for y in range(grid.height):
        for x in range(grid.width):
            if grid.cells[y, x]:
                return x, y
    return None


def find_end(grid: Grid) -> Optional[Cell]:
    """First passage scanning rows bottom-to-top, columns right-to-left."""
    for y in range(grid.height - 1, -1, -1):
        for x in range(grid.width - 1, -1, -1):
            if grid.cells[y, x]:
                return x, y
    return None


def connection_masks(cells: List[Cell]) -> Dict[Cell, int]:
    """Computes, for each cell, the bitmask of axis neighbours in the same set.

    The full set must be known up front; masks built while cells are still
    being added would only see neighbours placed earlier.
    """
    members: Set[Cell] = set(cells)
    masks = {}
    for x, y in cells:
        mask = 0
        for bit, (dx, dy) in DIRECTIONS.items():
            if (x + dx, y + dy) in members:
                mask |= bit
        masks[(x, y)] = mask
    return masks


def _placements(cells: List[Cell], element: str, terrain: str) -> List[Placement]:
    masks = connection_masks(cells)
    return [Placement(cell, element, terrain, masks[cell]) for cell in cells]


def resolve_layout(grid: Grid, style: Style) -> LayoutResult:
    """
    Converts a maze grid into tile placements for the given style.

    An invalid style is reported through the result rather than raised so the
    caller can show the message and skip rendering.
    """
    if not style.is_valid:
        log.warning("Style '%s' has no passages or walls enabled.", style.name)
        return LayoutResult(error=InvalidStyle(style.name))

    placements = PlacementSet()
    if grid.is_empty():
        log.debug("Empty grid; nothing to place.")
        return LayoutResult(placements)

    if style.has_passages:
        placements.passages = _placements(
            list(grid.passage_cells()), PASSAGE, style.passage_terrain
        )
    if style.has_walls:
        placements.walls = _placements(list(grid.wall_cells()), WALL, style.wall_terrain)

    if style.has_markers:
        start, end = find_start(grid), find_end(grid)
        if start is not None:
            placements.markers.append(Placement(start, START, style.start_terrain))
        if end is not None and end != start:
            placements.markers.append(Placement(end, END, style.end_terrain))

    log.info(
        "Resolved layout '%s': %d passages, %d walls, %d markers.",
        style.name,
        len(placements.passages),
        len(placements.walls),
        len(placements.markers),
    )
    return LayoutResult(placements)
