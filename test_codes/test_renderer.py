"""PygameRenderer blit geometry and Animation.draw end to end."""

import math

import pygame
import pytest

from atlas_animation import (Animation, AnimationParamInjection, DefaultLogger,
                             FrameCache, Grid, PygameRenderer, RenderError,
                             ValidationError)

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
BLACK = (0, 0, 0)


@pytest.fixture
def target() -> pygame.Surface:
    surface = pygame.Surface((100, 100))
    surface.fill(BLACK)
    return surface


@pytest.fixture
def atlas_grid(frame_cache: FrameCache) -> Grid:
    return Grid(32, 32, 64, 32, cache=frame_cache)


def _color(surface: pygame.Surface, position: tuple[int, int]) -> tuple[int, int, int]:
    return tuple(surface.get_at(position))[:3]


def test_draw_blits_the_frame(target, atlas, atlas_grid: Grid, logger) -> None:
    renderer = PygameRenderer(target, logger)
    rect = renderer.draw(atlas, atlas_grid.get_frame(2, 1), 10, 20)
    assert rect == pygame.Rect(10, 20, 32, 32)
    assert _color(target, (10, 20)) == BLUE
    assert _color(target, (41, 51)) == BLUE
    assert _color(target, (9, 20)) == BLACK
    assert _color(target, (42, 20)) == BLACK


def test_draw_defaults_to_origin(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1))
    assert rect == pygame.Rect(0, 0, 32, 32)
    assert _color(target, (0, 0)) == RED


def test_draw_origin_offsets_the_frame(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1), 50, 50, ox=16, oy=16)
    assert rect.topleft == (34, 34)


def test_draw_scale(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1), 0, 0, sx=2, sy=0.5)
    assert rect.size == (64, 16)


def test_sy_defaults_to_sx(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1), 0, 0, sx=1.5)
    assert rect.size == (48, 48)


def test_zero_scale_draws_nothing(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1), 5, 5, sx=0)
    assert rect.size == (0, 0)
    assert _color(target, (5, 5)) == BLACK


def test_draw_rotation_about_origin(target, atlas, atlas_grid: Grid, frame_cache, logger) -> None:
    frame = Grid(32, 16, 64, 32, cache=frame_cache).get_frame(1, 1)
    rect = PygameRenderer(target, logger).draw(atlas, frame, 50, 50, math.pi / 2)
    assert rect.size == (16, 32)
    assert abs(rect.left - 34) <= 1
    assert abs(rect.top - 50) <= 1


def test_shear_is_ignored_with_warning(target, atlas, atlas_grid: Grid, logger) -> None:
    rect = PygameRenderer(target, logger).draw(atlas, atlas_grid.get_frame(1, 1), 0, 0, kx=0.5)
    assert rect.size == (32, 32)
    assert [message for level, message in logger.records if level == "warning"] == [
        "Shear is not supported by pygame, ignoring kx=0.5, ky=None"
    ]


def test_missing_target(atlas, atlas_grid: Grid, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(pygame.display, "get_surface", lambda: None)
    with pytest.raises(RenderError):
        PygameRenderer().draw(atlas, atlas_grid.get_frame(1, 1))


def test_display_surface_is_the_default_target(atlas, atlas_grid: Grid, target, monkeypatch) -> None:
    monkeypatch.setattr(pygame.display, "get_surface", lambda: target)
    PygameRenderer().draw(atlas, atlas_grid.get_frame(2, 1), 1, 1)
    assert _color(target, (1, 1)) == BLUE


@pytest.fixture
def split_atlas() -> pygame.Surface:
    """32x32 single frame: left half red, right half green"""
    surface = pygame.Surface((32, 32), pygame.SRCALPHA)
    surface.fill((*RED, 255), pygame.Rect(0, 0, 16, 32))
    surface.fill((*GREEN, 255), pygame.Rect(16, 0, 16, 32))
    return surface


def test_animation_draw_flipped(target, split_atlas, frame_cache, logger) -> None:
    frame = Grid(32, 32, 32, 32, cache=frame_cache).get_frame(1, 1)
    animation = Animation(
        [frame], 1,
        injection=AnimationParamInjection(logger_instance=logger, renderer=PygameRenderer(target, logger)),
    )
    animation.draw(split_atlas, 10, 10)
    assert _color(target, (10, 10)) == RED

    animation.flip_h().draw(split_atlas, 50, 50)
    assert _color(target, (50, 50)) == GREEN
    assert _color(target, (81, 50)) == RED
    assert _color(target, (49, 50)) == BLACK


def test_animation_draw_follows_playback(target, atlas, atlas_grid: Grid, logger) -> None:
    animation = Animation(
        atlas_grid("1-2", 1), 0.1,
        injection=AnimationParamInjection(logger_instance=logger, renderer=PygameRenderer(target, logger)),
    )
    animation.update(0.15)
    animation.draw(atlas, 0, 0)
    assert _color(target, (0, 0)) == BLUE


def test_default_logger_filters_levels(capsys: pytest.CaptureFixture[str]) -> None:
    quiet = DefaultLogger()
    quiet.debug("hidden")
    quiet.warning("shown")
    DefaultLogger("DEBUG").debug("verbose")
    assert capsys.readouterr().out == "[WARNING] shown\n[DEBUG] verbose\n"


def test_default_logger_rejects_unknown_level() -> None:
    with pytest.raises(ValidationError):
        DefaultLogger("LOUD")
