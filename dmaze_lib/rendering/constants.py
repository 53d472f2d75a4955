# Shared constants for the rendering package.

# World-space size of one maze cell.
TILE_SIZE = (16.0, 16.0)

# Fraction of a tile trimmed from each edge before connection bridges are added.
TILE_INSET = 0.12

BACKGROUND_COLOR = (237, 224, 206)
FALLBACK_COLOR = (128, 128, 128)

# Terrain identifier -> RGB fill.
TERRAIN_COLORS = {
    "floor": (255, 255, 255),
    "stone": (40, 40, 40),
    "grass": (150, 200, 120),
    "hedge": (46, 110, 52),
    "sand": (230, 210, 160),
    "brick": (150, 70, 50),
    "flagstone": (200, 196, 186),
    "rock": (90, 80, 72),
    "start_flag": (40, 170, 60),
    "end_flag": (200, 40, 40),
}
