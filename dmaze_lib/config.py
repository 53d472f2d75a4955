# --- dmaze_lib/config.py ---
import configparser
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

log = logging.getLogger("dmaze.config")

DEFAULT_CONFIG_PATH = "dmaze.cfg"

DEFAULT_SETTINGS = {
    "Maze": {"width": "21", "height": "15", "style": "classic", "seed": "", "tile_size": "16"},
    "Export": {"directory": "exports", "preset": "draft", "margin": "0.1"},
    "Camera": {"viewport_width": "1280", "viewport_height": "720", "padding": "0.4"},
}


class ConfigService:
    """INI-backed maze settings; missing keys fall back to DEFAULT_SETTINGS."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path

    def _parser(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser()
        parser.read_dict(DEFAULT_SETTINGS)
        return parser

    def get_settings(self) -> dict:
        """Returns {section: {key: str}}, writing a default file on first use."""
        parser = self._parser()
        if not parser.read(self.config_path):
            log.info("No settings at %s; writing defaults.", self.config_path)
            self.save_settings(DEFAULT_SETTINGS)
        return {name: dict(parser[name]) for name in parser.sections()}

    def save_settings(self, settings: dict):
        parser = configparser.ConfigParser()
        parser.read_dict({s: {k: str(v) for k, v in kv.items()} for s, kv in settings.items()})
        try:
            with open(self.config_path, "w") as fh:
                parser.write(fh)
        except IOError as e:
            log.error("Cannot write settings to %s: %s", self.config_path, e)
            return
        log.debug("Wrote settings to %s", self.config_path)


def parse_seed(value: str):
    """An empty seed means 'random'."""
    value = (value or "").strip()
    return int(value) if value else None


@dataclass
class MazeSettings:
    """Typed view over the Maze, Export and Camera config sections."""

    width: int
    height: int
    style: str
    seed: Optional[int]
    tile_size: float
    export_dir: str
    preset: str
    margin: float
    viewport: Tuple[float, float]
    camera_padding: float

    @classmethod
    def from_dict(cls, settings: dict) -> "MazeSettings":
        maze, export, camera = settings["Maze"], settings["Export"], settings["Camera"]
        try:
            parsed = cls(
                width=int(maze["width"]),
                height=int(maze["height"]),
                style=maze["style"],
                seed=parse_seed(maze.get("seed", "")),
                tile_size=float(maze["tile_size"]),
                export_dir=export["directory"],
                preset=export["preset"],
                margin=float(export["margin"]),
                viewport=(float(camera["viewport_width"]), float(camera["viewport_height"])),
                camera_padding=float(camera["padding"]),
            )
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid dmaze configuration: {e}") from e

        # Each margin is taken from both sides, so it must stay under half the page.
        if not 0 <= parsed.margin < 0.5:
            raise ValueError(
                f"Invalid dmaze configuration: Export margin must be in [0, 0.5), got {parsed.margin}"
            )
        if not 0 <= parsed.camera_padding < 1:
            raise ValueError(
                "Invalid dmaze configuration: Camera padding must be in [0, 1), "
                f"got {parsed.camera_padding}"
            )
        if parsed.tile_size <= 0:
            raise ValueError(
                f"Invalid dmaze configuration: Tile size must be positive, got {parsed.tile_size}"
            )
        return parsed


def load_settings(config_path: str = DEFAULT_CONFIG_PATH) -> MazeSettings:
    return MazeSettings.from_dict(ConfigService(config_path).get_settings())
