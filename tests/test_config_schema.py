import configparser
import json

import pytest

from dmaze_lib import schema, styles
from dmaze_lib.config import ConfigService, MazeSettings, load_settings, parse_seed
from dmaze_lib.generation import generate_maze


def test_missing_config_is_created_with_defaults(tmp_path):
    path = tmp_path / "dmaze.cfg"
    settings = ConfigService(str(path)).get_settings()

    assert path.exists()
    assert settings["Maze"]["style"] == "classic"
    assert settings["Export"]["preset"] == "draft"


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "dmaze.cfg"
    path.write_text("[Maze]\nwidth = 31\nseed = 5\n\n[Export]\npreset = print\n")

    settings = load_settings(str(path))

    assert isinstance(settings, MazeSettings)
    assert settings.width == 31
    assert settings.height == 15
    assert settings.seed == 5
    assert settings.preset == "print"
    assert settings.viewport == (1280.0, 720.0)
    assert settings.camera_padding == pytest.approx(0.4)


def test_invalid_config_value_is_rejected(tmp_path):
    path = tmp_path / "dmaze.cfg"
    path.write_text("[Maze]\nwidth = wide\n")
    with pytest.raises(ValueError, match="Invalid dmaze configuration"):
        load_settings(str(path))


def test_save_settings_writes_ini(tmp_path):
    path = tmp_path / "dmaze.cfg"
    service = ConfigService(str(path))
    settings = service.get_settings()
    settings["Camera"]["padding"] = 0.25
    service.save_settings(settings)

    parser = configparser.ConfigParser()
    parser.read(path)
    assert parser["Camera"]["padding"] == "0.25"


@pytest.mark.parametrize("raw,expected", [("", None), ("  ", None), ("42", 42)])
def test_parse_seed(raw, expected):
    assert parse_seed(raw) == expected


def test_maze_json_preserves_grid_and_style(tmp_path):
    path = tmp_path / "maze.json"
    grid = generate_maze(9, 7, seed=3)
    style = styles.get_style("dungeon")

    schema.save_json(grid, style, str(path))
    data = json.loads(path.read_text())
    loaded_grid, loaded_style = schema.load_json(str(path))

    assert data["rows"][0] == "#########"
    assert data["rows"][1][1] == "."
    assert loaded_grid == grid
    assert loaded_style == style


def test_maze_json_with_wrong_size_is_rejected(tmp_path):
    path = tmp_path / "maze.json"
    path.write_text(json.dumps({
        "dmazeVersion": "1.0",
        "width": 5,
        "height": 3,
        "rows": ["#####", "#.#"],
        "style": {"name": "classic"},
    }))
    with pytest.raises(ValueError, match="do not match"):
        schema.load_json(str(path))


def test_grid_helpers():
    grid = schema.Grid.walls(3, 2)
    grid.cells[1, 2] = True
    assert grid.passage_count() == 1
    assert list(grid.passage_cells()) == [(2, 1)]
    assert len(list(grid.wall_cells())) == 5
    assert grid.in_bounds(2, 1) and not grid.in_bounds(3, 0)
    assert schema.Grid.empty().is_empty()


def _write_maze(path, **overrides):
    data = {
        "dmazeVersion": "1.0",
        "width": 3,
        "height": 3,
        "rows": ["###", "#.#", "###"],
        "style": {"name": "classic"},
    }
    data.update(overrides)
    path.write_text(json.dumps(data))


@pytest.mark.parametrize(
    "style,message",
    [
        ({"name": "classic", "colour": "red"}, "Unknown style keys"),
        ({"has_walls": False}, "no name"),
        ("classic", "malformed style"),
        (None, "malformed style"),
    ],
)
def test_maze_json_with_corrupt_style_is_rejected(tmp_path, style, message):
    path = tmp_path / "maze.json"
    _write_maze(path, style=style)
    with pytest.raises(ValueError, match=message):
        schema.load_json(str(path))


@pytest.mark.parametrize("rows", [[111, "#.#", "###"], "###", None])
def test_maze_json_with_non_string_rows_is_rejected(tmp_path, rows):
    path = tmp_path / "maze.json"
    _write_maze(path, rows=rows)
    with pytest.raises(ValueError, match="list of strings"):
        schema.load_json(str(path))


@pytest.mark.parametrize(
    "section,key,value",
    [
        ("Export", "margin", "0.5"),
        ("Export", "margin", "-0.1"),
        ("Camera", "padding", "1.0"),
        ("Maze", "tile_size", "0"),
    ],
)
def test_out_of_range_values_are_rejected(tmp_path, section, key, value):
    path = tmp_path / "dmaze.cfg"
    path.write_text(f"[{section}]\n{key} = {value}\n")
    with pytest.raises(ValueError, match="Invalid dmaze configuration"):
        load_settings(str(path))
