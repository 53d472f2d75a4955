# --- dmaze_lib/schema.py ---
import json
from dataclasses import asdict, dataclass, field, fields
from typing import Iterator, List, Optional, Tuple

import numpy as np

Cell = Tuple[int, int]

# Connectivity bits for terrain connection, one per axis neighbour.
NORTH, EAST, SOUTH, WEST = 1, 2, 4, 8
DIRECTIONS = {NORTH: (0, -1), EAST: (1, 0), SOUTH: (0, 1), WEST: (-1, 0)}

PASSAGE = "passage"
WALL = "wall"
START = "start"
END = "end"

DMAZE_FORMAT_VERSION = "1.0"


@dataclass
class Grid:
    """A width x height boolean grid; cells[y, x] is True for a passage."""

    width: int
    height: int
    cells: np.ndarray

    @classmethod
    def walls(cls, width: int, height: int) -> "Grid":
        return cls(width, height, np.zeros((height, width), dtype=bool))

    @classmethod
    def empty(cls) -> "Grid":
        return cls.walls(0, 0)

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_passage(self, x: int, y: int) -> bool:
        return bool(self.cells[y, x])

    def passage_count(self) -> int:
        return int(np.count_nonzero(self.cells))

    def passage_cells(self) -> Iterator[Cell]:
        """Yields passage cells in row-major order."""
        for y, x in zip(*np.nonzero(self.cells)):
            yield int(x), int(y)

    def wall_cells(self) -> Iterator[Cell]:
        """Yields wall cells in row-major order."""
        for y, x in zip(*np.nonzero(~self.cells)):
            yield int(x), int(y)

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.cells, other.cells)
        )


@dataclass(frozen=True)
class Style:
    """Which structural layers are drawn and the terrain used for each."""

    name: str
    has_passages: bool = True
    has_walls: bool = True
    has_markers: bool = True
    passage_terrain: str = "floor"
    wall_terrain: str = "stone"
    start_terrain: str = "start_flag"
    end_terrain: str = "end_flag"

    @property
    def is_valid(self) -> bool:
        return self.has_passages or self.has_walls


@dataclass(frozen=True)
class Placement:
    """A single tile to place: its cell, structural element and terrain."""

    cell: Cell
    element: str
    terrain: str
    connections: int = 0

    def connects(self, direction: int) -> bool:
        return bool(self.connections & direction)


@dataclass
class PlacementSet:
    """The disjoint passage, wall and marker placements for one maze."""

    passages: List[Placement] = field(default_factory=list)
    walls: List[Placement] = field(default_factory=list)
    markers: List[Placement] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.passages or self.walls or self.markers)

    def layers(self) -> List[Tuple[str, List[Placement]]]:
        """Layers in draw order."""
        return [(PASSAGE, self.passages), (WALL, self.walls), ("marker", self.markers)]

    def occupied_cells(self) -> List[Cell]:
        cells = {p.cell for _, layer in self.layers() for p in layer}
        return sorted(cells, key=lambda c: (c[1], c[0]))

    def marker(self, element: str) -> Optional[Placement]:
        return next((m for m in self.markers if m.element == element), None)


@dataclass(frozen=True)
class BoundingRect:
    """Axis-aligned rectangle in world space."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def empty(cls) -> "BoundingRect":
        return cls(0.0, 0.0, 0.0, 0.0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def origin(self) -> Tuple[float, float]:
        return self.x, self.y

    @property
    def size(self) -> Tuple[float, float]:
        return self.width, self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2


@dataclass(frozen=True)
class FitTransform:
    """Uniform scale followed by a translation."""

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.offset_x == 0.0 and self.offset_y == 0.0

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale + self.offset_x, y * self.scale + self.offset_y

    def affine_params(self) -> List[float]:
        """The [a, b, d, e, xoff, yoff] matrix used by shapely.affinity."""
        return [self.scale, 0.0, 0.0, self.scale, self.offset_x, self.offset_y]


FitTransform.IDENTITY = FitTransform()


def save_json(grid: Grid, style: Style, output_path: str) -> None:
    """
    Serializes a generated maze and the style it was resolved with.

    Args:
        grid: The generated Grid.
        style: The Style selected for it.
        output_path: The path to the output .json file.
    """
    data = {
        "dmazeVersion": DMAZE_FORMAT_VERSION,
        "width": grid.width,
        "height": grid.height,
        # One string per row, '.' for passage and '#' for wall.
        "rows": ["".join("." if c else "#" for c in row) for row in grid.cells],
        "style": asdict(style),
    }
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def load_json(input_path: str) -> Tuple[Grid, Style]:
    """
    Deserializes a maze file written by save_json.

    Returns:
        The Grid and Style stored in the file.

    Raises:
        ValueError: If the rows or the style block are malformed.
    """
    with open(input_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    width, height = data["width"], data["height"]
    rows = data.get("rows", [])
    if not isinstance(rows, list) or not all(isinstance(r, str) for r in rows):
        raise ValueError(f"Maze rows must be a list of strings in {input_path}")
    if len(rows) != height or any(len(r) != width for r in rows):
        raise ValueError(
            f"Maze rows do not match declared size {width}x{height} in {input_path}"
        )
    cells = np.array([[ch == "." for ch in row] for row in rows], dtype=bool)
    grid = Grid(width, height, cells.reshape((height, width)))
    return grid, _style_from_dict(data.get("style"), input_path)


def _style_from_dict(raw, input_path: str) -> Style:
    if not isinstance(raw, dict):
        raise ValueError(f"Missing or malformed style block in {input_path}")
    known = {f.name for f in fields(Style)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown style keys {unknown} in {input_path}")
    if "name" not in raw:
        raise ValueError(f"Style block has no name in {input_path}")
    return Style(**raw)
