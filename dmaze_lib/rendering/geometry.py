# --- dmaze_lib/rendering/geometry.py ---
import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from shapely import affinity
from shapely.geometry import Polygon, box
from shapely.ops import unary_union

from dmaze_lib.schema import DIRECTIONS, BoundingRect, Cell, FitTransform, Placement

log = logging.getLogger("dmaze.geometry")

Size = Tuple[float, float]

# Camera framing uses 60% of the viewport.
CAMERA_PADDING = 0.4


@dataclass(frozen=True)
class CameraFrame:
    """Zoom factor and world-space centre for a camera showing the bounds."""

    zoom: float
    center: Tuple[float, float]


def cell_to_world(cells: Iterable[Cell], tile_size: Size) -> np.ndarray:
    """Converts cell indices to world-space tile origins, shape (N, 2)."""
    arr = np.asarray(list(cells), dtype=float).reshape((-1, 2))
    return arr * np.asarray(tile_size, dtype=float)


def compute_bounds(world_positions: np.ndarray, tile_size: Size) -> BoundingRect:
    """Bounding rectangle of tile origins, grown by one tile on the max corner."""
    positions = np.asarray(world_positions, dtype=float).reshape((-1, 2))
    if positions.shape[0] == 0:
        return BoundingRect.empty()

    min_x, min_y = positions.min(axis=0)
    max_x, max_y = positions.max(axis=0) + np.asarray(tile_size, dtype=float)
    bounds = BoundingRect(float(min_x), float(min_y), float(max_x - min_x), float(max_y - min_y))
    log.debug("Content bounds: %s", bounds)
    return bounds


def fit_transform(bounds: BoundingRect, canvas_size: Size, margin: float) -> FitTransform:
    """
    Computes the uniform scale and offset that centre the bounds on a canvas.

    Args:
        bounds: Content bounds in world space.
        canvas_size: Target (width, height).
        margin: Fraction of the canvas reserved on each side, e.g. 0.1.

    Returns:
        The FitTransform, or the identity for empty bounds.

    Raises:
        ValueError: If the margin leaves no room on the canvas.
    """
    if not 0 <= margin < 0.5:
        raise ValueError(f"Margin must be in [0, 0.5), got {margin}")
    if bounds.is_empty:
        log.debug("Empty bounds; using identity transform.")
        return FitTransform.IDENTITY

    canvas = np.asarray(canvas_size, dtype=float)
    available = canvas - 2 * (canvas * margin)
    size = np.asarray(bounds.size, dtype=float)
    scale = float(min(available / size))
    offset = (canvas - size * scale) / 2 - np.asarray(bounds.origin, dtype=float) * scale
    xfm = FitTransform(scale, float(offset[0]), float(offset[1]))
    log.debug("Fit %s into %s (margin %.2f): %s", bounds.size, canvas_size, margin, xfm)
    return xfm


def camera_fit(
    bounds: BoundingRect, viewport_size: Size, padding: float = CAMERA_PADDING
) -> CameraFrame:
    """Frames the bounds in a viewport, leaving `padding` of it empty."""
    xfm = fit_transform(bounds, viewport_size, padding / 2)
    if bounds.is_empty:
        return CameraFrame(zoom=1.0, center=(0.0, 0.0))
    return CameraFrame(zoom=xfm.scale, center=bounds.center)


def placement_bounds(placements: Sequence[Placement], tile_size: Size) -> BoundingRect:
    return compute_bounds(cell_to_world((p.cell for p in placements), tile_size), tile_size)


def tile_shape(placement: Placement, tile_size: Size, inset: float = 0.0) -> Polygon:
    """
    World-space outline of a tile, using its connection mask.

    With an inset, the tile body shrinks away from the cell edges and a bridge
    is added toward every connected neighbour, so connected tiles read as one
    continuous shape.
    """
    tw, th = tile_size
    x0, y0 = placement.cell[0] * tw, placement.cell[1] * th
    ix, iy = tw * inset, th * inset
    parts = [box(x0 + ix, y0 + iy, x0 + tw - ix, y0 + th - iy)]
    if inset > 0:
        for bit, (dx, dy) in DIRECTIONS.items():
            if not placement.connects(bit):
                continue
            if dx:
                bx0 = x0 + tw - ix if dx > 0 else x0
                parts.append(box(bx0, y0 + iy, bx0 + ix, y0 + th - iy))
            else:
                by0 = y0 + th - iy if dy > 0 else y0
                parts.append(box(x0 + ix, by0, x0 + tw - ix, by0 + iy))
    return unary_union(parts) if len(parts) > 1 else parts[0]


def transform_shape(shape: Polygon, xfm: FitTransform) -> Polygon:
    return affinity.affine_transform(shape, xfm.affine_params())


def polygon_pixels(polygon: Polygon) -> List[Tuple[float, float]]:
    """Exterior ring of a polygon as a list of pixel coordinates."""
    if polygon.is_empty:
        return []
    return [(float(x), float(y)) for x, y in polygon.exterior.coords]
