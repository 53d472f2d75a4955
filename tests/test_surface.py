import pytest

from dmaze_lib.rendering.surface import MIN_READBACK_FRAMES, FrameClock, OffscreenSurface

RED = (255, 0, 0)


def _fill(draw):
    draw.rectangle([0, 0, 3, 3], fill=RED)


@pytest.fixture
def clock():
    return FrameClock()


def test_pixels_are_readable_only_after_two_frames(clock):
    surface = OffscreenSurface(clock, (8, 6))
    surface.submit([_fill])

    for _ in range(MIN_READBACK_FRAMES):
        assert not surface.is_ready()
        assert surface.read_back() is None
        clock.tick()

    image = surface.read_back()
    assert surface.is_ready()
    assert image.size == (8, 6)
    assert image.getpixel((1, 1)) == RED
    assert image.getpixel((6, 5)) == (255, 255, 255)


def test_draws_run_on_the_next_frame(clock, mocker):
    command = mocker.Mock()
    surface = OffscreenSurface(clock, (4, 4))
    surface.submit([command])
    command.assert_not_called()
    clock.tick()
    command.assert_called_once()
    clock.tick()
    command.assert_called_once()


def test_empty_submission_reads_back_background(clock):
    surface = OffscreenSurface(clock, (4, 4), background=(1, 2, 3))
    surface.submit([])
    clock.tick()
    clock.tick()
    assert surface.read_back().getpixel((0, 0)) == (1, 2, 3)


def test_nothing_submitted_is_never_ready(clock):
    surface = OffscreenSurface(clock, (4, 4))
    clock.tick()
    clock.tick()
    assert not surface.is_ready()
    assert surface.read_back() is None


def test_early_release_waits_for_pending_frames(clock):
    surface = OffscreenSurface(clock, (4, 4))
    surface.submit([_fill])
    surface.release()

    assert not surface.released
    assert clock.live_surfaces == 1
    clock.tick()
    assert not surface.released
    clock.tick()
    assert surface.released
    assert clock.live_surfaces == 0


def test_release_after_readback_is_immediate(clock):
    surface = OffscreenSurface(clock, (4, 4))
    surface.submit([_fill])
    clock.tick()
    clock.tick()
    surface.release()
    assert surface.released
    assert clock.live_surfaces == 0
    assert surface.read_back() is None


def test_released_surface_rejects_draws(clock):
    surface = OffscreenSurface(clock, (4, 4))
    surface.release()
    with pytest.raises(RuntimeError):
        surface.submit([_fill])


def test_each_surface_owns_its_pixels(clock):
    a = OffscreenSurface(clock, (4, 4))
    b = OffscreenSurface(clock, (4, 4))
    a.submit([_fill])
    b.submit([])
    clock.tick()
    clock.tick()
    assert a.read_back().getpixel((0, 0)) == RED
    assert b.read_back().getpixel((0, 0)) == (255, 255, 255)
