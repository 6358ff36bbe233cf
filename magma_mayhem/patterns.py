"""Hazard pattern library: time-parameterised lava shapes.

Each pattern kind is a small dataclass carrying only its own parameters and
exposing ``evaluate(now_ms, base_speed_ms, grid) -> set[Coord]``. Evaluation
never touches session state; the only kind that keeps state between ticks is
the snake (head, heading and trail). Output is always clipped to the playable
part of the grid, so callers never see out-of-range coordinates.
"""

from __future__ import annotations

import enum
import math
import random
from dataclasses import dataclass, field
from typing import ClassVar

from magma_mayhem.constants import SNAKE_TURN_PROBABILITY
from magma_mayhem.models import Coord, Grid


class PatternKind(enum.Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    WAVE = "wave"
    RING = "ring"
    SNAKE = "snake"
    BLINKER = "blinker"
    DIAGONAL_SWEEP = "diagonal_sweep"
    ROW_MARCH = "row_march"
    COLUMN_MARCH = "column_march"
    ROTATING_CROSS = "rotating_cross"
    SPIRAL = "spiral"
    GRAY_PULSE = "gray_pulse"
    CHECKERBOARD_PULSE = "checkerboard_pulse"
    ROLLING_X = "rolling_x"


# Snake headings, clockwise from +x
SNAKE_DIRECTIONS = [(1, 0), (0, 1), (-1, 0), (0, -1)]


def round_half_up(value: float) -> int:
    """Round .5 away from the floor, the way the tile maths was tuned."""
    return math.floor(value + 0.5)


def _add(cells: set[Coord], grid: Grid, x: int, z: int) -> None:
    if grid.in_playable(x, z):
        cells.add((x, z))


class HazardPattern:
    """Base for all pattern kinds."""

    kind: ClassVar[PatternKind]

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        raise NotImplementedError


# ------------------------------------ Bars --------------------------------------------

@dataclass
class HorizontalBar(HazardPattern):
    """A ``width``-cell bar sliding along one row."""
    kind: ClassVar[PatternKind] = PatternKind.HORIZONTAL

    row: int
    width: int
    direction: int
    speed: float
    offset: float = 0.0

    @classmethod
    def create(cls, grid: Grid, rng: random.Random, row: int, width: int,
               direction: int, speed: float) -> HorizontalBar:
        return cls(row=min(row, grid.height - 4), width=width, direction=direction,
                   speed=speed, offset=rng.random() * grid.width)

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / base_speed_ms) * self.speed
        current = (progress + self.offset) % (grid.width + self.width)
        cells: set[Coord] = set()
        for i in range(self.width):
            x = math.floor(current + i) % grid.width
            if self.direction < 0:
                x = grid.width - 1 - x
            _add(cells, grid, x, self.row)
        return cells


@dataclass
class VerticalBar(HazardPattern):
    """A ``height``-cell bar sliding along one column, above the start zone."""
    kind: ClassVar[PatternKind] = PatternKind.VERTICAL

    col: int
    height: int
    direction: int
    speed: float
    offset: float = 0.0

    @classmethod
    def create(cls, grid: Grid, rng: random.Random, col: int, height: int,
               direction: int, speed: float) -> VerticalBar:
        return cls(col=min(col, grid.width - 1), height=height, direction=direction,
                   speed=speed, offset=rng.random() * grid.height)

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / base_speed_ms) * self.speed
        current = (progress + self.offset) % (grid.height + self.height)
        span = grid.playable_height
        cells: set[Coord] = set()
        for i in range(self.height):
            z = math.floor(current + i) % span
            if self.direction < 0:
                z = span - 1 - z
            _add(cells, grid, self.col, z)
        return cells


@dataclass
class Wave(HazardPattern):
    """A sine band across the full width."""
    kind: ClassVar[PatternKind] = PatternKind.WAVE

    speed: float
    amplitude: float = 2.5
    frequency: float = 0.4
    width: int = 2

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / base_speed_ms) * self.speed
        middle = grid.height / 2 - 2
        cells: set[Coord] = set()
        for x in range(grid.width):
            z = math.floor(middle + math.sin(x * self.frequency + progress) * self.amplitude)
            for w in range(self.width):
                _add(cells, grid, x, z + w)
        return cells


@dataclass
class ExpandingRing(HazardPattern):
    """A circle outline whose radius grows and wraps back to zero."""
    kind: ClassVar[PatternKind] = PatternKind.RING

    center_x: int
    center_z: int
    speed: float
    max_radius: float = 6
    angle_step: float = 0.15

    @classmethod
    def create(cls, grid: Grid, speed: float) -> ExpandingRing:
        return cls(center_x=grid.width // 2, center_z=grid.height // 2 - 2, speed=speed)

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        radius = ((now_ms / 2000) * self.speed) % self.max_radius
        cells: set[Coord] = set()
        angle = 0.0
        while angle < math.pi * 2:
            x = round_half_up(self.center_x + math.cos(angle) * radius)
            z = round_half_up(self.center_z + math.sin(angle) * radius)
            _add(cells, grid, x, z)
            angle += self.angle_step
        return cells


# ------------------------------------ Stateful ----------------------------------------

@dataclass
class Snake(HazardPattern):
    """
    A trail that steps one cell every ``step_ms`` and turns at random.

    Heading changes with probability ``turn_probability`` per step (left or
    right with equal odds); hitting a wall reverses the heading and the head
    stays put for that step.
    """
    kind: ClassVar[PatternKind] = PatternKind.SNAKE

    head_x: int
    head_z: int
    length: int
    step_ms: float
    direction: int = 0
    turn_probability: float = SNAKE_TURN_PROBABILITY
    trail: list[Coord] = field(default_factory=list)
    last_step_ms: float | None = None
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)

    @classmethod
    def create(cls, grid: Grid, rng: random.Random, length: int, step_ms: float) -> Snake:
        return cls(head_x=grid.width // 2, head_z=grid.height // 2, length=length,
                   step_ms=step_ms, rng=rng)

    def step(self, grid: Grid) -> None:
        if self.rng.random() < self.turn_probability:
            self.direction = (self.direction + (1 if self.rng.random() > 0.5 else 3)) % 4

        dx, dz = SNAKE_DIRECTIONS[self.direction]
        new_x = self.head_x + dx
        new_z = self.head_z + dz

        if new_x < 0 or new_x >= grid.width:
            self.direction = (self.direction + 2) % 4
            new_x = self.head_x
        if new_z < 0 or new_z >= grid.playable_height:
            self.direction = (self.direction + 2) % 4
            new_z = self.head_z

        self.trail.insert(0, (new_x, new_z))
        self.head_x, self.head_z = new_x, new_z
        del self.trail[self.length:]

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        if self.last_step_ms is None or now_ms - self.last_step_ms > self.step_ms:
            self.last_step_ms = now_ms
            self.step(grid)
        cells: set[Coord] = set()
        for x, z in self.trail:
            _add(cells, grid, x, z)
        return cells


@dataclass(frozen=True)
class BlinkSpot:
    x: int
    z: int
    phase: float


@dataclass
class Blinker(HazardPattern):
    """Scattered single cells that blink on a shared interval, each with its own phase."""
    kind: ClassVar[PatternKind] = PatternKind.BLINKER

    spots: list[BlinkSpot]
    interval: float
    threshold: float = 0.3

    @classmethod
    def create(cls, grid: Grid, rng: random.Random, count: int, interval: float) -> Blinker:
        spots = [
            BlinkSpot(x=math.floor(rng.random() * grid.width),
                      z=math.floor(rng.random() * (grid.height - 4)),
                      phase=rng.random() * math.pi * 2)
            for _ in range(count)
        ]
        return cls(spots=spots, interval=interval)

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        cells: set[Coord] = set()
        for spot in self.spots:
            if math.sin(now_ms / self.interval + spot.phase) > self.threshold:
                _add(cells, grid, spot.x, spot.z)
        return cells


# ------------------------------------ Sweeps ------------------------------------------

@dataclass
class DiagonalSweep(HazardPattern):
    """Filled diagonal wedge sweeping from one top corner across the grid."""
    kind: ClassVar[PatternKind] = PatternKind.DIAGONAL_SWEEP

    direction: int
    speed: float
    width: int = 2

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / base_speed_ms) * self.speed
        total = grid.width + grid.height
        current = math.floor(progress) % total
        cells: set[Coord] = set()
        for w in range(self.width):
            diagonal = (current + w) % total
            for i in range(diagonal + 1):
                x = i if self.direction > 0 else grid.width - 1 - i
                _add(cells, grid, x, diagonal - i)
        return cells


@dataclass
class RowMarch(HazardPattern):
    """Full rows lighting up one after another, top to bottom."""
    kind: ClassVar[PatternKind] = PatternKind.ROW_MARCH

    speed: float
    width: int = 2
    divisor: ClassVar[float] = 1.5

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / (base_speed_ms * self.divisor)) * self.speed
        span = grid.playable_height
        current = math.floor(progress) % span
        cells: set[Coord] = set()
        for w in range(self.width):
            row = (current + w) % span
            for x in range(grid.width):
                cells.add((x, row))
        return cells


@dataclass
class ColumnMarch(HazardPattern):
    """Full columns (above the start zone) marching left to right."""
    kind: ClassVar[PatternKind] = PatternKind.COLUMN_MARCH

    speed: float
    width: int = 2
    divisor: ClassVar[float] = 1.2

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        progress = (now_ms / (base_speed_ms * self.divisor)) * self.speed
        current = math.floor(progress) % grid.width
        cells: set[Coord] = set()
        for w in range(self.width):
            col = (current + w) % grid.width
            for z in range(grid.playable_height):
                cells.add((col, z))
        return cells


@dataclass
class RollingX(HazardPattern):
    """An X of two crossing diagonals rolling sideways along the middle of the field."""
    kind: ClassVar[PatternKind] = PatternKind.ROLLING_X

    direction: int
    speed: float
    arm_length: int = 3
    offset: float = 0.0

    @classmethod
    def create(cls, grid: Grid, rng: random.Random, direction: int, speed: float) -> RollingX:
        return cls(direction=direction, speed=speed, offset=rng.random() * grid.width)

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        arm = self.arm_length
        progress = (now_ms / base_speed_ms) * self.speed
        position = (progress + self.offset) % (grid.width + 2 * arm)
        center_x = math.floor(position) - arm
        if self.direction < 0:
            center_x = grid.width - 1 - center_x
        center_z = grid.playable_height // 2
        cells: set[Coord] = set()
        for i in range(-arm, arm + 1):
            _add(cells, grid, center_x + i, center_z + i)
            _add(cells, grid, center_x + i, center_z - i)
        return cells


# ------------------------------------ Rotating ----------------------------------------

@dataclass
class RotatingCross(HazardPattern):
    """Two perpendicular arms spinning about the centre of the playable field."""
    kind: ClassVar[PatternKind] = PatternKind.ROTATING_CROSS

    speed: float
    arm_length: int = 5

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        center_x = grid.width // 2
        center_z = grid.playable_height // 2
        angle = (now_ms / 3000) * self.speed * math.pi * 2
        cells: set[Coord] = set()
        for i in range(-self.arm_length, self.arm_length + 1):
            _add(cells, grid,
                 round_half_up(center_x + math.cos(angle) * i),
                 round_half_up(center_z + math.sin(angle) * i))
            _add(cells, grid,
                 round_half_up(center_x + math.cos(angle + math.pi / 2) * i),
                 round_half_up(center_z + math.sin(angle + math.pi / 2) * i))
        return cells


@dataclass
class Spiral(HazardPattern):
    """Twenty samples along an Archimedean spiral turning about the centre."""
    kind: ClassVar[PatternKind] = PatternKind.SPIRAL

    speed: float
    samples: int = 20

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        center_x = grid.width // 2
        center_z = grid.playable_height // 2
        progress = (now_ms / 2000) * self.speed
        cells: set[Coord] = set()
        for t in range(self.samples):
            angle = progress + t * 0.3
            radius = t * 0.4
            _add(cells, grid,
                 round_half_up(center_x + math.cos(angle) * radius),
                 round_half_up(center_z + math.sin(angle) * radius))
        return cells


# ------------------------------------ Pulses ------------------------------------------

@dataclass
class GrayPulse(HazardPattern):
    """
    All-or-nothing: the whole playable field is lava while
    ``sin(t / interval * pi) > 0`` and clear otherwise.
    """
    kind: ClassVar[PatternKind] = PatternKind.GRAY_PULSE

    interval: float = 800

    def is_on(self, now_ms: float) -> bool:
        return math.sin(now_ms / self.interval * math.pi) > 0

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        if not self.is_on(now_ms):
            return set()
        return set(grid.playable_cells())


@dataclass
class CheckerboardPulse(HazardPattern):
    """Cells with ``(x + z) % 2 == phase`` are lava; the phase flips every ``interval`` ms."""
    kind: ClassVar[PatternKind] = PatternKind.CHECKERBOARD_PULSE

    interval: float = 1500

    def phase(self, now_ms: float) -> int:
        return math.floor(now_ms / self.interval) % 2

    def evaluate(self, now_ms: float, base_speed_ms: float, grid: Grid) -> set[Coord]:
        phase = self.phase(now_ms)
        return {(x, z) for x, z in grid.playable_cells() if (x + z) % 2 == phase}


PATTERN_TYPES: dict[PatternKind, type[HazardPattern]] = {
    cls.kind: cls
    for cls in (HorizontalBar, VerticalBar, Wave, ExpandingRing, Snake, Blinker,
                DiagonalSweep, RowMarch, ColumnMarch, RollingX, RotatingCross,
                Spiral, GrayPulse, CheckerboardPulse)
}
