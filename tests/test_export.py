import os
import re
from datetime import datetime

import pytest
from PIL import Image

from dmaze_lib import styles
from dmaze_lib.export import (
    PRESETS,
    ExportEvent,
    ExportState,
    MazeExporter,
    export_filename,
    get_preset,
)
from dmaze_lib.generation import MazeGenerator
from dmaze_lib.layout import resolve_layout
from dmaze_lib.rendering.constants import TERRAIN_COLORS
from dmaze_lib.rendering.surface import MIN_READBACK_FRAMES, FrameClock, OffscreenSurface
from dmaze_lib.schema import Grid, PlacementSet

NAME_RE = re.compile(r"maze_export_\d{8}_\d{6}\.png")


@pytest.fixture
def maze():
    grid = MazeGenerator(seed=11).generate(10, 10)
    return grid, resolve_layout(grid, styles.get_style("classic")).placements


@pytest.fixture
def exporter(tmp_path):
    return MazeExporter(export_dir=str(tmp_path / "out"))


def test_presets_are_a4_landscape():
    assert get_preset("draft").size == (1754, 1240)
    assert get_preset("draft").dpi == 150
    assert get_preset("print").size == (3508, 2480)
    assert get_preset("print").dpi == 300
    with pytest.raises(KeyError):
        get_preset("poster")


def test_export_filename_is_timestamped():
    assert export_filename(datetime(2024, 3, 5, 14, 7, 9)) == "maze_export_20240305_140709.png"
    assert NAME_RE.fullmatch(export_filename())


def test_draft_export_end_to_end(maze, exporter):
    grid, placements = maze
    events = []

    result = exporter.run_export(grid, placements, PRESETS["draft"], events.append)

    assert [e.kind for e in events] == [ExportEvent.STARTED, ExportEvent.COMPLETED]
    assert events[0].format == "draft"
    assert result == events[-1]
    assert result.ok
    assert NAME_RE.fullmatch(os.path.basename(result.path))
    assert os.path.dirname(result.path) == exporter.export_dir
    with Image.open(result.path) as img:
        assert img.size == (1754, 1240)
        assert img.info["dpi"] == pytest.approx((150, 150), abs=1)
    assert exporter.state is ExportState.IDLE


def test_marker_lands_on_canvas_centre(exporter):
    grid = MazeGenerator(seed=0).generate(3, 3)
    placements = resolve_layout(grid, styles.get_style("classic")).placements

    result = exporter.run_export(grid, placements, PRESETS["draft"])

    with Image.open(result.path) as img:
        assert img.convert("RGB").getpixel((877, 620)) == TERRAIN_COLORS["start_flag"]


def test_export_waits_for_readback_frames(maze, exporter):
    grid, placements = maze
    clock = FrameClock()
    task = exporter.export(grid, placements, PRESETS["draft"], clock)
    yields = 0
    with pytest.raises(StopIteration) as done:
        while True:
            next(task)
            yields += 1
            clock.tick()
    assert yields == MIN_READBACK_FRAMES
    assert done.value.value.ok


@pytest.mark.parametrize("grid", [None, Grid.empty()])
def test_export_without_maze_fails_immediately(grid, exporter):
    events = []
    result = exporter.run_export(grid, PlacementSet(), PRESETS["draft"], events.append)
    assert events == [result]
    assert result.kind == ExportEvent.FAILED
    assert "No maze" in result.reason
    assert exporter.state is ExportState.IDLE


def test_second_export_is_rejected_while_rendering(maze, exporter):
    grid, placements = maze
    clock = FrameClock()
    first = exporter.export(grid, placements, PRESETS["draft"], clock)
    next(first)
    assert exporter.busy

    rejected = exporter.run_export(grid, placements, PRESETS["print"])
    assert rejected.kind == ExportEvent.FAILED
    assert "already in progress" in rejected.reason
    assert exporter.busy

    clock.tick()
    next(first)
    clock.tick()
    with pytest.raises(StopIteration) as done:
        next(first)
    assert done.value.value.ok
    assert not exporter.busy


def test_readback_failure_is_reported(maze, exporter, mocker):
    grid, placements = maze
    mocker.patch.object(OffscreenSurface, "read_back", return_value=None)
    clock = FrameClock()
    events = []

    result = exporter.run_export(grid, placements, PRESETS["draft"], events.append, clock)

    assert [e.kind for e in events] == [ExportEvent.STARTED, ExportEvent.FAILED]
    assert "pixel data" in result.reason
    assert clock.live_surfaces == 0
    assert exporter.state is ExportState.IDLE


def test_write_failure_is_reported(maze, exporter, mocker):
    grid, placements = maze
    mocker.patch("dmaze_lib.export.Image.Image.save", side_effect=OSError("disk full"))
    clock = FrameClock()

    result = exporter.run_export(grid, placements, PRESETS["draft"], clock=clock)

    assert result.kind == ExportEvent.FAILED
    assert "disk full" in result.reason
    assert clock.live_surfaces == 0
    assert not os.listdir(exporter.export_dir)


def test_abandoned_export_still_lets_frames_elapse(maze, exporter):
    grid, placements = maze
    clock = FrameClock()
    task = exporter.export(grid, placements, PRESETS["draft"], clock)
    next(task)
    task.close()

    assert exporter.state is ExportState.IDLE
    assert clock.live_surfaces == 1
    for _ in range(MIN_READBACK_FRAMES):
        clock.tick()
    assert clock.live_surfaces == 0


def test_failed_export_can_be_retriggered(maze, exporter, mocker):
    grid, placements = maze
    mocker.patch.object(OffscreenSurface, "read_back", return_value=None)
    assert not exporter.run_export(grid, placements, PRESETS["draft"]).ok
    mocker.stopall()
    assert exporter.run_export(grid, placements, PRESETS["draft"]).ok


def test_unexpected_render_error_still_ends_with_failed(maze, exporter, mocker):
    grid, placements = maze
    mocker.patch.object(exporter.renderer, "draw_commands", side_effect=RuntimeError("bad polygon"))
    clock = FrameClock()
    events = []

    result = exporter.run_export(grid, placements, PRESETS["draft"], events.append, clock)

    assert [e.kind for e in events] == [ExportEvent.STARTED, ExportEvent.FAILED]
    assert "bad polygon" in result.reason
    assert clock.live_surfaces == 0
    assert exporter.state is ExportState.IDLE
