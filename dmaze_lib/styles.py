# --- dmaze_lib/styles.py ---
from typing import Dict, List

from dmaze_lib.schema import Style

DEFAULT_STYLE = "classic"

# Each former scene variant is expressed as capability flags on one Style.
BUILTIN_STYLES: Dict[str, Style] = {
    s.name: s
    for s in [
        Style("classic"),
        Style("open", has_walls=False, passage_terrain="grass"),
        Style("hedge", has_passages=False, wall_terrain="hedge"),
        Style("plain", has_markers=False, passage_terrain="sand", wall_terrain="brick"),
        Style("dungeon", passage_terrain="flagstone", wall_terrain="rock"),
        Style("none", has_passages=False, has_walls=False),
    ]
}


def get_style(name: str) -> Style:
    """Looks up a built-in style by name.

    Raises:
        KeyError: If no style has that name.
    """
    try:
        return BUILTIN_STYLES[name]
    except KeyError:
        raise KeyError(
            f"Unknown style '{name}'. Available: {', '.join(list_styles())}"
        ) from None


def list_styles() -> List[str]:
    return sorted(BUILTIN_STYLES)
