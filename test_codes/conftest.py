import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pygame
import pytest
from hypothesis import HealthCheck, settings

from atlas_animation import AbstractLogger, FrameCache, Grid

settings.register_profile(
    "default",
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("default")


class RecordingLogger(AbstractLogger):
    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def critical(self, message: str) -> None:
        self.records.append(("critical", message))


@pytest.fixture(autouse=True)
def dummy_sdl_video_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SDL_VIDEODRIVER", "dummy")
    yield


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def frame_cache(logger: RecordingLogger) -> FrameCache:
    return FrameCache(logger=logger)


@pytest.fixture
def grid(frame_cache: FrameCache) -> Grid:
    """4 columns, 2 rows of 32x32 frames"""
    return Grid(32, 32, 128, 64, cache=frame_cache)


@pytest.fixture
def atlas() -> pygame.Surface:
    """64x32 atlas: left frame red, right frame blue"""
    surface = pygame.Surface((64, 32), pygame.SRCALPHA)
    surface.fill((255, 0, 0, 255), pygame.Rect(0, 0, 32, 32))
    surface.fill((0, 0, 255, 255), pygame.Rect(32, 0, 32, 32))
    return surface
