from typing import Dict, List

from dmaze_lib.schema import END, START, PlacementSet


class ASCIIRenderer:
    """Renders a compact ASCII diagram of a resolved maze for debugging."""

    GLYPHS: Dict[str, str] = {
        "empty": " ",
        "passage": ".",
        "wall": "#",
        START: "S",
        END: "E",
    }

    def __init__(self):
        self.canvas: List[List[str]] = []
        self.width = 0
        self.height = 0

    def render(self, placements: PlacementSet):
        cells = placements.occupied_cells()
        if not cells:
            self.canvas = []
            return

        self.width = max(x for x, _ in cells) + 1
        self.height = max(y for _, y in cells) + 1
        self.canvas = [[self.GLYPHS["empty"]] * self.width for _ in range(self.height)]

        for p in placements.passages + placements.walls + placements.markers:
            x, y = p.cell
            self.canvas[y][x] = self.GLYPHS.get(p.element, "?")

    def get_output(self) -> str:
        return "\n".join("".join(row) for row in self.canvas)
