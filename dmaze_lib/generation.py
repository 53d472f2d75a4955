# --- dmaze_lib/generation.py ---
import logging
import random
from typing import List, Optional, Tuple

from dmaze_lib.schema import Cell, Grid

log = logging.getLogger("dmaze.generate")

MIN_DIMENSION = 3
START_CELL = (1, 1)

# Carving moves two cells at a time so walls stay on even coordinates.
_STEPS = [(0, -2), (2, 0), (0, 2), (-2, 0)]


def normalize_dimension(value: int, name: str = "dimension") -> int:
    """Rounds an even dimension up to the next odd value.

    Raises:
        ValueError: If the value is below the 3-cell minimum.
    """
    if value < MIN_DIMENSION:
        raise ValueError(f"Maze {name} must be at least {MIN_DIMENSION}, got {value}")
    if value % 2 == 0:
        log.debug("Adjusting even %s %d to %d.", name, value, value + 1)
        value += 1
    return value


def _unvisited_neighbors(grid: Grid, x: int, y: int) -> List[Tuple[Cell, Cell]]:
    """Returns (between, candidate) pairs for the walls two steps away."""
    found = []
    for dx, dy in _STEPS:
        nx, ny = x + dx, y + dy
        if 0 < nx < grid.width - 1 and 0 < ny < grid.height - 1 and not grid.cells[ny, nx]:
            found.append(((x + dx // 2, y + dy // 2), (nx, ny)))
    return found


def generate_maze(
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Grid:
    """
    Carves a perfect maze with a randomized iterative depth-first search.

    Both dimensions must already be odd and at least 3; use
    normalize_dimension() on raw input first.

    Args:
        width: Grid width in cells.
        height: Grid height in cells.
        rng: Random source. A new one seeded with `seed` is used if omitted.
        seed: Seed for the default random source.

    Returns:
        A Grid whose passage cells form a spanning tree rooted at (1, 1).
    """
    if width % 2 == 0 or height % 2 == 0 or min(width, height) < MIN_DIMENSION:
        raise ValueError(f"Maze dimensions must be odd and >= 3, got {width}x{height}")
    rng = rng or random.Random(seed)

    grid = Grid.walls(width, height)
    x, y = START_CELL
    grid.cells[y, x] = True
    stack = [START_CELL]
    current = START_CELL
    carved = 1

    while True:
        candidates = _unvisited_neighbors(grid, *current)
        if candidates:
            (bx, by), (nx, ny) = rng.choice(candidates)
            grid.cells[by, bx] = True
            grid.cells[ny, nx] = True
            stack.append(current)
            current = (nx, ny)
            carved += 1
        elif stack:
            current = stack.pop()
        else:
            break

    log.debug("Carved %d lattice cells in a %dx%d grid.", carved, width, height)
    return grid


class MazeGenerator:
    """Produces fresh maze grids from raw (possibly even) dimensions."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self.rng = random.Random(seed)

    def reseed(self, seed: Optional[int]):
        self.seed = seed
        self.rng = random.Random(seed)

    def generate(self, width: int, height: int) -> Grid:
        width = normalize_dimension(width, "width")
        height = normalize_dimension(height, "height")
        log.info("Generating %dx%d maze (seed=%s)...", width, height, self.seed)
        grid = generate_maze(width, height, rng=self.rng)
        log.info("Maze generated with %d passage cells.", grid.passage_count())
        return grid
