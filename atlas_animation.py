from __future__ import annotations
from typing import (Dict, List, Tuple, NoReturn, Union, Literal, TypeAlias, Optional, Final, NamedTuple)
from collections.abc import Callable, Hashable, Mapping, Sequence
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import RLock
import math
import re
import pygame

__version__ = "2.3.1"

Status: TypeAlias = Literal["playing", "paused"]
IntervalToken: TypeAlias = Union[int, str]
Interval: TypeAlias = Tuple[int, int, int]    # (min, max, step)
GridSignature: TypeAlias = Tuple[int, int, int, int, int, int, int]

DurationsSpec: TypeAlias = Union[int, float, Mapping[IntervalToken, Union[int, float]]]
OnLoop: TypeAlias = "Callable[[Animation, int], object]"

_INTERVAL_PATTERN: Final = re.compile(r"^(\d+)-(\d+)$")
_WHITESPACE: Final = re.compile(r"\s")


# region #################### errors ####################
class AnimationError(Exception):
    """Base class for every error raised by this module"""


class ValidationError(AnimationError, ValueError):
    """Bad constructor argument, malformed duration spec or duration-count mismatch"""


class ParseError(AnimationError, ValueError):
    """Malformed interval token"""


class OutOfRangeError(AnimationError, IndexError):
    """Frame coordinate outside the grid bounds"""


class RenderError(AnimationError, RuntimeError):
    """The renderer has nothing to draw on"""
# endregion


# region #################### logging ####################
class AbstractLogger(ABC):
    """logger abstract base class, define unified interface for all"""

    @abstractmethod
    def debug(self, message: str) -> None:
        """debug log"""
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        """info log"""
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        """warning log"""
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        """error log"""
        pass

    @abstractmethod
    def critical(self, message: str) -> None:
        """critical log"""
        pass


class DefaultLogger(AbstractLogger):
    """A concise logger implementation that only logs messages to console

    Messages below `min_level` are dropped; `update` logs every loop at debug
    level, so debug output is off unless asked for.
    """

    LEVELS: Final[Tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(self, min_level: str = "INFO") -> None:
        if min_level not in self.LEVELS:
            raise ValidationError(
                f"Invalid log level: {min_level}, must be one of {self.LEVELS}"
            )
        self._threshold = self.LEVELS.index(min_level)

    def _emit(self, level: str, message: str) -> None:
        if self.LEVELS.index(level) >= self._threshold:
            print(f"[{level}] {message}")

    def debug(self, message: str) -> None:
        self._emit("DEBUG", message)

    def info(self, message: str) -> None:
        self._emit("INFO", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", message)

    def critical(self, message: str) -> None:
        self._emit("CRITICAL", message)
# endregion


class _FrozenConstants(type):
    """Metaclass that turns class attributes into read-only constants"""

    def __setattr__(cls, name, value) -> NoReturn:
        raise AttributeError(f"Cannot modify immutable attribute '{name}'")

    def __delattr__(cls, name) -> NoReturn:
        raise AttributeError(f"Cannot delete immutable attribute '{name}'")


class _AnimationMagicNumber(metaclass=_FrozenConstants):
    DEFAULT_LEFT: Final[int] = 0
    DEFAULT_TOP: Final[int] = 0
    DEFAULT_BORDER: Final[int] = 0
    SAMPLE_DISPLAY_COUNT: Final[int] = 3

    STATUS_PLAYING: Final[Status] = "playing"
    STATUS_PAUSED: Final[Status] = "paused"

    # applied to unset draw parameters once any flip is active
    DEFAULT_ROTATION: Final[float] = 0
    DEFAULT_SCALE: Final[float] = 1
    DEFAULT_ORIGIN: Final[float] = 0
    DEFAULT_SHEAR: Final[float] = 0


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_interval(token: IntervalToken) -> Interval:
    """Parse a single frame index or an "A-B" range

    Args:
        token: an integer index, or a range string like "1-4" / "4 - 1"

    Returns:
        (min, max, step) where step is 1 for ascending ranges and -1 for descending ones

    Raises:
        ParseError: the token is neither an integer nor a range string
    """
    if isinstance(token, int) and not isinstance(token, bool):
        return token, token, 1
    if not isinstance(token, str):
        raise ParseError(f"Could not parse interval from {token!r}")

    compact = _WHITESPACE.sub("", token)
    matched = _INTERVAL_PATTERN.match(compact)
    if matched is None:
        raise ParseError(f"Could not parse interval from {token!r}")
    low, high = int(matched.group(1)), int(matched.group(2))
    return low, high, 1 if low <= high else -1


def _interval_range(interval: Interval) -> range:
    low, high, step = interval
    return range(low, high + step, step)


# region #################### frames & cache ####################
@dataclass(frozen=True)
class FrameRect:
    """One frame of an atlas, in atlas pixel space

    `atlas_width`/`atlas_height` travel with the rectangle so a renderer can
    build normalized texture coordinates from it.
    """
    x: int
    y: int
    width: int
    height: int
    atlas_width: int
    atlas_height: int

    def get_viewport(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    def get_size(self) -> Tuple[int, int]:
        return self.width, self.height

    def to_rect(self) -> pygame.Rect:
        return pygame.Rect(self.x, self.y, self.width, self.height)


class FrameCache:
    """Cache of frame rectangles shared by every `Grid` with the same geometry

    Frames are built lazily, one cell at a time, and never evicted. Grids use
    the module-wide instance returned by `default_frame_cache()` unless
    another cache is injected.

    Keys hold the geometry only, not the renderer: the first grid to build a
    cell decides which `new_quad` made it. Grids whose renderers build
    different quad types need separate caches.

    ## Thread Safety:
        get-or-create runs under a reentrant lock, so two grids with the same
        geometry on different threads still end up with one rectangle per cell.
    """

    __slots__ = ("_cache_lock", "_frames", "_logger")

    def __init__(self, logger: Optional[AbstractLogger] = None) -> None:
        self._cache_lock = RLock()
        self._frames: Dict[Tuple[Hashable, int, int], FrameRect] = {}
        self._logger: AbstractLogger = logger or DefaultLogger()

    def get_or_create(
        self,
        signature: Hashable,
        x: int,
        y: int,
        factory: Callable[[], FrameRect]
    ) -> FrameRect:
        """Return the cached frame for a cell, building it on first use

        Args:
            signature: grid geometry signature
            x: 1-based column
            y: 1-based row
            factory: builds the frame when the cell is not cached yet

        Returns:
            The one FrameRect stored for (signature, x, y)
        """
        cache_key = (signature, x, y)
        with self._cache_lock:
            frame = self._frames.get(cache_key)
            if frame is None:
                frame = factory()
                self._frames[cache_key] = frame
                self._logger.debug(f"Cached new frame: {cache_key}")
            return frame

    def clear(self) -> None:
        """Clear the cache"""
        with self._cache_lock:
            self._frames.clear()
        self._logger.info("Frame cache cleared")

    def __len__(self) -> int:
        return len(self._frames)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._frames

    @property
    def lock(self) -> RLock:
        """Return the cache Rlock"""
        return self._cache_lock

    @property
    def info(self) -> Dict[str, Union[int, List[Tuple[Hashable, int, int]]]]:
        with self.lock:
            sample_keys = list(self._frames.keys())[
                :_AnimationMagicNumber.SAMPLE_DISPLAY_COUNT
            ]
            return {
                "cache_size": len(self._frames),
                "grid_count": len({key[0] for key in self._frames}),
                "sample_keys": sample_keys
            }


_DEFAULT_FRAME_CACHE: Final[FrameCache] = FrameCache()


def default_frame_cache() -> FrameCache:
    """Return the process-wide cache used by grids built without an explicit one"""
    return _DEFAULT_FRAME_CACHE
# endregion


# region #################### renderer ####################
class FrameInfo(NamedTuple):
    """What `Animation.get_frame_info` hands to the renderer"""
    frame: FrameRect
    x: Optional[float] = None
    y: Optional[float] = None
    r: Optional[float] = None
    sx: Optional[float] = None
    sy: Optional[float] = None
    ox: Optional[float] = None
    oy: Optional[float] = None
    kx: Optional[float] = None
    ky: Optional[float] = None


class AbstractRenderer(ABC):
    """renderer abstract base class: builds frame rectangles and draws them"""

    def new_quad(self,
                 x: int,
                 y: int,
                 width: int,
                 height: int,
                 atlas_width: int,
                 atlas_height: int) -> FrameRect:
        """build the rectangle handle for one atlas cell"""
        return FrameRect(x, y, width, height, atlas_width, atlas_height)

    @abstractmethod
    def draw(self,
             image: pygame.Surface,
             frame: FrameRect,
             x: Optional[float] = None,
             y: Optional[float] = None,
             r: Optional[float] = None,
             sx: Optional[float] = None,
             sy: Optional[float] = None,
             ox: Optional[float] = None,
             oy: Optional[float] = None,
             kx: Optional[float] = None,
             ky: Optional[float] = None) -> object:
        """draw `frame` of `image`"""
        pass


class PygameRenderer(AbstractRenderer):
    """Blit atlas frames onto a pygame surface

    Parameters follow the usual sprite-batch conventions: `r` is a clockwise
    rotation in radians about the origin `(ox, oy)`, `sx`/`sy` scale (negative
    values mirror), and `(x, y)` is where the origin lands on the target.
    Unset `sy` falls back to `sx`.

    pygame has no shear transform, so `kx`/`ky` are ignored (with a warning
    when they are non-zero).
    """

    __slots__ = ("_target", "_logger")

    def __init__(
        self,
        target: Optional[pygame.Surface] = None,
        logger: Optional[AbstractLogger] = None
    ) -> None:
        """
        Args:
            target: Surface to draw on; when None the current display surface is used
            logger: logger instance, DefaultLogger when None
        """
        self._target = target
        self._logger: AbstractLogger = logger or DefaultLogger()

    @property
    def target(self) -> pygame.Surface:
        """Surface that `draw` blits onto

        Raises:
            RenderError: no target given and no display mode set
        """
        target = self._target if self._target is not None else pygame.display.get_surface()
        if target is None:
            raise RenderError("No target surface: pass one or call pygame.display.set_mode() first")
        return target

    def draw(self,
             image: pygame.Surface,
             frame: FrameRect,
             x: Optional[float] = None,
             y: Optional[float] = None,
             r: Optional[float] = None,
             sx: Optional[float] = None,
             sy: Optional[float] = None,
             ox: Optional[float] = None,
             oy: Optional[float] = None,
             kx: Optional[float] = None,
             ky: Optional[float] = None) -> pygame.Rect:
        """Draw one frame

        Args:
            image: the atlas surface the frame was sliced from
            frame: rectangle of the frame inside `image`

        Returns:
            The area of the target that was affected
        """
        target = self.target
        x = 0 if x is None else x
        y = 0 if y is None else y
        r = 0 if r is None else r
        sx = 1 if sx is None else sx
        sy = sx if sy is None else sy
        ox = 0 if ox is None else ox
        oy = 0 if oy is None else oy
        if kx or ky:
            self._logger.warning(f"Shear is not supported by pygame, ignoring kx={kx}, ky={ky}")

        width, height = frame.get_size()
        scaled_size = (round(width * abs(sx)), round(height * abs(sy)))
        if 0 in scaled_size:
            return pygame.Rect(round(x), round(y), 0, 0)

        flip_x, flip_y = sx < 0, sy < 0
        surf = image.subsurface(frame.to_rect())
        if flip_x or flip_y:
            surf = pygame.transform.flip(surf, flip_x, flip_y)
        if scaled_size != (width, height):
            surf = pygame.transform.scale(surf, scaled_size)

        # the origin, located in the flipped and scaled surface
        pivot_x = ((width - ox) if flip_x else ox) * abs(sx)
        pivot_y = ((height - oy) if flip_y else oy) * abs(sy)

        angle = -math.degrees(r)
        if angle % 360 == 0:
            return target.blit(surf, (round(x - pivot_x), round(y - pivot_y)))

        image_rect = surf.get_rect(topleft=(x - pivot_x, y - pivot_y))
        offset = pygame.math.Vector2(x, y) - image_rect.center
        rotated_offset = offset.rotate(-angle)
        rotated = pygame.transform.rotate(surf, angle)
        rotated_rect = rotated.get_rect(center=(x - rotated_offset.x, y - rotated_offset.y))
        return target.blit(rotated, rotated_rect)
# endregion


# region #################### grid ####################
def _validate_positive_integer(value: object, name: str) -> None:
    if not _is_number(value):
        raise ValidationError(f"{name} should be a number, was {value!r}")
    if value < 1:
        raise ValidationError(f"{name} should be a positive number, was {value}")
    if not math.isfinite(value) or value != math.floor(value):
        raise ValidationError(f"{name} should be an integer, was {value}")


def _validate_offset(value: object, name: str) -> None:
    if (not _is_number(value) or value < 0 or not math.isfinite(value)
            or value != math.floor(value)):
        raise ValidationError(f"{name} should be a non-negative integer, was {value!r}")


class Grid:
    """Slices an atlas into equally sized frames

    Columns and rows come from integer division, so a partial cell at the
    right or bottom edge of the atlas is never addressable.

    ## Examples:
        ### Basic usage::

            grid = Grid(32, 32, atlas.get_width(), atlas.get_height())
            walk = grid.get_frames("1-4", 1)
            walk_back = grid("4-1", 1)
    """

    __slots__ = (
        "frame_width", "frame_height", "atlas_width", "atlas_height",
        "left", "top", "border", "columns", "rows", "_signature",
        "_cache", "_renderer"
    )

    def __init__(
        self,
        frame_width: int,
        frame_height: int,
        atlas_width: int,
        atlas_height: int,
        left: int = _AnimationMagicNumber.DEFAULT_LEFT,
        top: int = _AnimationMagicNumber.DEFAULT_TOP,
        border: int = _AnimationMagicNumber.DEFAULT_BORDER,
        *,
        cache: Optional[FrameCache] = None,
        renderer: Optional[AbstractRenderer] = None
    ) -> None:
        """
        Args:
            frame_width: width of one frame in pixels
            frame_height: height of one frame in pixels
            atlas_width: width of the whole atlas in pixels
            atlas_height: height of the whole atlas in pixels
            left: horizontal offset of the first column
            top: vertical offset of the first row
            border: gap between frames, also applied before the first frame
            cache: frame cache to use, `default_frame_cache()` when None
            renderer: supplies `new_quad`, PygameRenderer when None; frames
                already in `cache` for this geometry are reused as they are

        Raises:
            ValidationError: a size is not a positive integer, or an offset is negative
        """
        _validate_positive_integer(frame_width, "frame_width")
        _validate_positive_integer(frame_height, "frame_height")
        _validate_positive_integer(atlas_width, "atlas_width")
        _validate_positive_integer(atlas_height, "atlas_height")
        _validate_offset(left, "left")
        _validate_offset(top, "top")
        _validate_offset(border, "border")

        self.frame_width = int(frame_width)
        self.frame_height = int(frame_height)
        self.atlas_width = int(atlas_width)
        self.atlas_height = int(atlas_height)
        self.left = int(left)
        self.top = int(top)
        self.border = int(border)
        self.columns = self.atlas_width // self.frame_width
        self.rows = self.atlas_height // self.frame_height
        self._signature: GridSignature = (
            self.frame_width, self.frame_height,
            self.atlas_width, self.atlas_height,
            self.left, self.top, self.border
        )
        self._cache = cache if cache is not None else default_frame_cache()
        self._renderer = renderer if renderer is not None else PygameRenderer()

    @property
    def signature(self) -> GridSignature:
        """The seven geometry parameters, used as the cache key"""
        return self._signature

    @property
    def cache(self) -> FrameCache:
        return self._cache

    def _create_frame(self, x: int, y: int) -> FrameRect:
        return self._renderer.new_quad(
            self.left + (x - 1) * self.frame_width + x * self.border,
            self.top + (y - 1) * self.frame_height + y * self.border,
            self.frame_width,
            self.frame_height,
            self.atlas_width,
            self.atlas_height
        )

    def get_frame(self, x: int, y: int) -> FrameRect:
        """Get the frame at column `x`, row `y` (both 1-based)

        Raises:
            OutOfRangeError: the cell is outside the grid, or x/y is not an integer
        """
        if (not isinstance(x, int) or isinstance(x, bool)
                or not isinstance(y, int) or isinstance(y, bool)):
            raise OutOfRangeError(f"There is no frame for x={x!r}, y={y!r}")
        if not (1 <= x <= self.columns and 1 <= y <= self.rows):
            raise OutOfRangeError(f"There is no frame for x={x}, y={y}")
        return self._cache.get_or_create(
            self._signature, x, y, lambda: self._create_frame(x, y)
        )

    def get_frames(self, *specs: IntervalToken) -> List[FrameRect]:
        """Expand (x, y) interval pairs into a frame list

        Each pair is walked row by row: the outer loop runs over the y range,
        the inner one over the x range, each in its own direction. Results of
        consecutive pairs are concatenated, so

            grid.get_frames("1-3", 1, 2, "2-1")

        gives (1,1) (2,1) (3,1) (2,2) (2,1).

        Args:
            specs: x and y interval tokens, alternating

        Raises:
            ValidationError: odd number of tokens
            ParseError: malformed token
            OutOfRangeError: a cell outside the grid
        """
        if len(specs) % 2:
            raise ValidationError(
                f"Frames must be given as (x, y) pairs, got {len(specs)} values"
            )
        result: List[FrameRect] = []
        for x_spec, y_spec in zip(specs[::2], specs[1::2]):
            x_interval, y_interval = parse_interval(x_spec), parse_interval(y_spec)
            for y in _interval_range(y_interval):
                for x in _interval_range(x_interval):
                    result.append(self.get_frame(x, y))
        return result

    __call__ = get_frames

    def __repr__(self) -> str:
        return (
            f"Grid(frame={self.frame_width}x{self.frame_height}, "
            f"atlas={self.atlas_width}x{self.atlas_height}, "
            f"cells={self.columns}x{self.rows})"
        )


def new_grid(
    frame_width: int,
    frame_height: int,
    atlas_width: int,
    atlas_height: int,
    left: int = _AnimationMagicNumber.DEFAULT_LEFT,
    top: int = _AnimationMagicNumber.DEFAULT_TOP,
    border: int = _AnimationMagicNumber.DEFAULT_BORDER
) -> Grid:
    """Create a Grid backed by the shared frame cache"""
    return Grid(frame_width, frame_height, atlas_width, atlas_height, left, top, border)
# endregion


# region #################### animation ####################
def _parse_durations(durations: DurationsSpec, frame_count: int) -> Tuple[Union[int, float], ...]:
    """Expand a duration spec into one duration per frame

    Mapping entries are applied in ascending order of their range
    (low index first, then high index, then insertion order); where ranges
    overlap the entry applied last wins.

    Raises:
        ValidationError: bad shape, non-positive duration, or coverage other than 1..frame_count
        ParseError: malformed mapping key
    """
    if _is_number(durations):
        if not durations > 0:
            raise ValidationError(f"durations must be a positive number. Was {durations!r}")
        return tuple(durations for _ in range(frame_count))

    if not isinstance(durations, Mapping):
        raise ValidationError(
            f"durations must be a positive number or a mapping. Was {durations!r}"
        )

    entries = []
    for key, duration in durations.items():
        if not _is_number(duration) or not duration > 0:
            raise ValidationError(f"The value [{duration!r}] for {key!r} should be a positive number")
        entries.append((parse_interval(key), duration))
    entries.sort(key=lambda entry: (min(entry[0][:2]), max(entry[0][:2])))

    table: Dict[int, Union[int, float]] = {}
    for interval, duration in entries:
        for index in _interval_range(interval):
            table[index] = duration

    expected = set(range(1, frame_count + 1))
    missing = sorted(expected - table.keys())
    unexpected = sorted(table.keys() - expected)
    if missing or unexpected:
        raise ValidationError(
            f"The durations table covers {len(table)} frame(s), but it should cover "
            f"exactly frames 1-{frame_count}; missing: {missing}, unexpected: {unexpected}"
        )
    return tuple(table[index] for index in range(1, frame_count + 1))


def _parse_intervals(durations: Sequence[Union[int, float]]) -> Tuple[Tuple[Union[int, float], ...], Union[int, float]]:
    result, time = [0], 0
    for duration in durations:
        time = time + duration
        result.append(time)
    return tuple(result), time


def seek_frame_index(intervals: Sequence[Union[int, float]], timer: float) -> int:
    """Binary search for the frame shown at `timer`

    Args:
        intervals: cumulative start times, N + 1 entries starting at 0
        timer: time into the loop, expected in [0, intervals[-1])

    Returns:
        The 1-based position i with intervals[i - 1] <= timer < intervals[i];
        a timer at or past the end resolves to the last frame
    """
    low, high, i = 1, len(intervals) - 1, 1
    while low <= high:
        i = (low + high) // 2
        if timer >= intervals[i]:
            low = i + 1
        elif timer < intervals[i - 1]:
            high = i - 1
        else:
            return i
    return i


def _nop(animation: Animation, loops: int) -> None:
    pass


_NAMED_LOOP_HANDLERS: Final[Dict[str, OnLoop]] = {
    "pause": lambda animation, loops: animation.pause(),
    "resume": lambda animation, loops: animation.resume(),
    "pause_at_start": lambda animation, loops: animation.pause_at_start(),
    "pause_at_end": lambda animation, loops: animation.pause_at_end(),
    "pauseAtStart": lambda animation, loops: animation.pause_at_start(),
    "pauseAtEnd": lambda animation, loops: animation.pause_at_end(),
}


def _resolve_on_loop(on_loop: Union[None, str, OnLoop]) -> OnLoop:
    if on_loop is None:
        return _nop
    if isinstance(on_loop, str):
        try:
            return _NAMED_LOOP_HANDLERS[on_loop]
        except KeyError:
            raise ValidationError(
                f"Unknown on_loop handler: {on_loop!r}, "
                f"must be one of {sorted(_NAMED_LOOP_HANDLERS)}"
            ) from None
    if not callable(on_loop):
        raise ValidationError(f"on_loop must be callable or a handler name, got {type(on_loop).__name__}")
    return on_loop


@dataclass
class AnimationParamInjection:
    logger_instance: Optional[AbstractLogger] = None
    renderer: Optional[AbstractRenderer] = None


class Animation:
    """Plays a frame sequence against a per-frame timeline

    The timeline is the cumulative sum of the frame durations; `update`
    moves a timer along it, wraps the timer at the end (calling `on_loop`
    with the number of wraps) and binary-searches the frame under it.

    ## Examples:
        ### Basic usage::

            grid = Grid(32, 32, 128, 64)
            walk = Animation(grid("1-4", 1), 0.1)
            walk.update(dt)
            walk.draw(atlas, 100, 80)

        ### Per-frame durations::

            attack = Animation(grid("1-4", 2), {"1-3": 0.08, 4: 0.3}, on_loop="pause_at_end")

    ## Note:
        `frames`, `durations` and `intervals` are immutable tuples shared with
        clones; playback state (`timer`, `position`, `status`, flips) is per instance.
    """

    __slots__ = (
        "frames", "durations", "intervals", "total_duration", "on_loop",
        "timer", "position", "status", "flipped_h", "flipped_v",
        "_logger", "_renderer"
    )

    def __init__(
        self,
        frames: Sequence[FrameRect],
        durations: DurationsSpec,
        on_loop: Union[None, str, OnLoop] = None,
        *,
        injection: Optional[AnimationParamInjection] = None
    ) -> None:
        """
        Args:
            frames: frame sequence, copied on construction
            durations: one positive duration for every frame, or a mapping
                from interval token ("1-3", 4, ...) to duration covering
                frames 1..N exactly
            on_loop: called as on_loop(animation, loops) whenever the timer
                wraps; may also name a built-in handler ("pause",
                "pause_at_end", ...)
            injection: `AnimationParamInjection` with optional logger and renderer

        Raises:
            ValidationError: empty frames, bad durations, bad on_loop or injection
            ParseError: malformed duration key
        """
        injection = injection if injection is not None else AnimationParamInjection()
        self._validate_injection(injection)
        if isinstance(frames, (str, bytes)) or not isinstance(frames, Sequence):
            raise ValidationError(f"frames must be a sequence, got {type(frames).__name__}")
        if len(frames) == 0:
            raise ValidationError("frames must not be empty")

        self.frames: Tuple[FrameRect, ...] = tuple(frames)
        self.durations = _parse_durations(durations, len(self.frames))
        self.intervals, self.total_duration = _parse_intervals(self.durations)
        self.on_loop: OnLoop = _resolve_on_loop(on_loop)
        self._logger: AbstractLogger = injection.logger_instance or DefaultLogger()
        self._renderer: AbstractRenderer = injection.renderer or PygameRenderer(logger=self._logger)
        self.flipped_h = False
        self.flipped_v = False
        self._reset_playback()

    @staticmethod
    def _validate_injection(injection: AnimationParamInjection) -> None:
        if not isinstance(injection, AnimationParamInjection):
            raise ValidationError("injection must be AnimationParamInjection")
        if (injection.logger_instance is not None and
            not isinstance(injection.logger_instance, AbstractLogger)):
            raise ValidationError("logger_instance must be a AbstractLogger")
        if (injection.renderer is not None and
            not isinstance(injection.renderer, AbstractRenderer)):
            raise ValidationError("renderer must be a AbstractRenderer")

    def _reset_playback(self) -> None:
        self.timer: float = 0
        self.position: int = 1
        self.status: Status = _AnimationMagicNumber.STATUS_PLAYING

    def clone(self) -> Animation:
        """Copy sharing frames, durations, intervals and on_loop, with fresh playback state

        Flip flags are copied from this animation.
        """
        twin = Animation.__new__(Animation)
        twin.frames = self.frames
        twin.durations = self.durations
        twin.intervals = self.intervals
        twin.total_duration = self.total_duration
        twin.on_loop = self.on_loop
        twin._logger = self._logger
        twin._renderer = self._renderer
        twin.flipped_h = self.flipped_h
        twin.flipped_v = self.flipped_v
        twin._reset_playback()
        return twin

    # region #################### flips ####################
    def flip_h(self) -> Animation:
        """Toggle horizontal mirroring, returns self for chaining"""
        self.flipped_h = not self.flipped_h
        return self

    def flip_v(self) -> Animation:
        """Toggle vertical mirroring, returns self for chaining"""
        self.flipped_v = not self.flipped_v
        return self
    # endregion

    # region #################### core update logic ####################
    def update(self, dt: float) -> None:
        """Advance the timer by `dt` (negative values rewind)

        Does nothing while paused. When the timer leaves [0, total_duration)
        it is wrapped back and `on_loop(self, loops)` is called with the
        (possibly negative) number of wraps before the frame is looked up,
        so state changes made by the callback are taken into account.

        Raises:
            ValidationError: dt is not a number
        """
        if self.status != _AnimationMagicNumber.STATUS_PLAYING:
            return
        if not _is_number(dt):
            raise ValidationError(f"dt must be a number, was {dt!r}")

        self.timer = self.timer + dt
        loops = math.floor(self.timer / self.total_duration)
        if loops != 0:
            self.timer = self.timer - self.total_duration * loops
            if not 0 <= self.timer < self.total_duration:
                # rounding left the remainder an ulp outside the loop
                self.timer = min(max(self.timer, 0), math.nextafter(self.total_duration, 0))
            self._logger.debug(f"Animation looped {loops} time(s)")
            self.on_loop(self, loops)

        self.position = seek_frame_index(self.intervals, self.timer)

    def pause(self) -> None:
        """Pause animation"""
        self.status = _AnimationMagicNumber.STATUS_PAUSED

    def resume(self) -> None:
        """Resume playback (Resume from the current frame)"""
        self.status = _AnimationMagicNumber.STATUS_PLAYING

    def goto_frame(self, position: int) -> None:
        """Jump to a 1-based frame and align the timer with its start

        Raises:
            ValidationError: position is not an integer in 1..len(frames)
        """
        if (not isinstance(position, int) or isinstance(position, bool)
                or not 1 <= position <= len(self.frames)):
            raise ValidationError(
                f"position must be an integer between 1 and {len(self.frames)}, was {position!r}"
            )
        self.position = position
        self.timer = self.intervals[position - 1]

    def pause_at_end(self) -> None:
        self.position = len(self.frames)
        self.timer = self.total_duration
        self.pause()

    def pause_at_start(self) -> None:
        self.position = 1
        self.timer = 0
        self.pause()
    # endregion

    # region #################### draw ####################
    def get_frame_info(self,
                       x: Optional[float] = None,
                       y: Optional[float] = None,
                       r: Optional[float] = None,
                       sx: Optional[float] = None,
                       sy: Optional[float] = None,
                       ox: Optional[float] = None,
                       oy: Optional[float] = None,
                       kx: Optional[float] = None,
                       ky: Optional[float] = None) -> FrameInfo:
        """Current frame plus draw parameters adjusted for the flip flags

        Without flips the parameters are returned untouched, None included.
        With any flip, unset parameters get their defaults first; a horizontal
        flip then negates sx, mirrors ox against the frame width and negates
        both shear factors, and a vertical flip does the same with sy, oy and
        the frame height.
        """
        frame = self.frames[self.position - 1]
        if self.flipped_h or self.flipped_v:
            r = _AnimationMagicNumber.DEFAULT_ROTATION if r is None else r
            sx = _AnimationMagicNumber.DEFAULT_SCALE if sx is None else sx
            sy = _AnimationMagicNumber.DEFAULT_SCALE if sy is None else sy
            ox = _AnimationMagicNumber.DEFAULT_ORIGIN if ox is None else ox
            oy = _AnimationMagicNumber.DEFAULT_ORIGIN if oy is None else oy
            kx = _AnimationMagicNumber.DEFAULT_SHEAR if kx is None else kx
            ky = _AnimationMagicNumber.DEFAULT_SHEAR if ky is None else ky
            _, _, width, height = frame.get_viewport()

            if self.flipped_h:
                sx = sx * -1
                ox = width - ox
                kx = kx * -1
                ky = ky * -1

            if self.flipped_v:
                sy = sy * -1
                oy = height - oy
                kx = kx * -1
                ky = ky * -1
        return FrameInfo(frame, x, y, r, sx, sy, ox, oy, kx, ky)

    def draw(self,
             image: pygame.Surface,
             x: Optional[float] = None,
             y: Optional[float] = None,
             r: Optional[float] = None,
             sx: Optional[float] = None,
             sy: Optional[float] = None,
             ox: Optional[float] = None,
             oy: Optional[float] = None,
             kx: Optional[float] = None,
             ky: Optional[float] = None) -> object:
        """Draw the current frame of `image` through the renderer

        Returns:
            Whatever the renderer returns (PygameRenderer: the affected pygame.Rect)
        """
        return self._renderer.draw(image, *self.get_frame_info(x, y, r, sx, sy, ox, oy, kx, ky))

    def get_dimensions(self) -> Tuple[int, int]:
        _, _, width, height = self.frames[self.position - 1].get_viewport()
        return width, height
    # endregion

    @property
    def is_playing(self) -> bool:
        """Return True if the animation is playing"""
        return self.status == _AnimationMagicNumber.STATUS_PLAYING

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    @property
    def current_frame(self) -> FrameRect:
        return self.frames[self.position - 1]

    @property
    def renderer(self) -> AbstractRenderer:
        return self._renderer

    def __repr__(self) -> str:
        return (
            f"Animation(position={self.position}/{len(self.frames)}, "
            f"timer={self.timer}/{self.total_duration}, status={self.status!r})"
        )


def new_animation(
    frames: Sequence[FrameRect],
    durations: DurationsSpec,
    on_loop: Union[None, str, OnLoop] = None
) -> Animation:
    """Create an Animation with the default logger and renderer"""
    return Animation(frames, durations, on_loop)
# endregion
