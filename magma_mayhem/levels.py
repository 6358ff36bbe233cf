from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from magma_mayhem.constants import (
    BASE_SPEED_MS, SPEED_DECREASE_MS, TOTAL_LEVELS, COLLECTIBLES_PER_LEVEL,
    COLLECTIBLE_PLACEMENT_ATTEMPTS, SCATTER_PLACEMENT_ATTEMPTS, SPAWN_CELL
)
from magma_mayhem.models import Coord, Grid
from magma_mayhem.patterns import (
    PATTERN_TYPES, PatternKind, HazardPattern, HorizontalBar, VerticalBar,
    ExpandingRing, Snake, Blinker, RollingX
)

K = PatternKind

# Safe-island recipes per level, applied in order; the start zone is always added.
SAFE_ISLAND_SCRIPT: dict[int, list[tuple[str, tuple]]] = {
    1: [("corners", ()), ("center_cross", ())],
    2: [("corners", ()), ("center_cross", ())],
    3: [("corners", ()), ("center_cross", ())],
    4: [("perimeter", ())],
    5: [("diagonal", ()), ("corners", ())],
    6: [("diagonal", ()), ("corners", ())],
    7: [("scattered", (6,))],
    8: [("corners", ())],
    9: [("diagonal", ()), ("scattered", (4,))],
    10: [("scattered", (5,))],
    11: [("corners", ()), ("scattered", (3,))],
    12: [("corners", ())],
}

# Hazard line-up per level, hand-tuned and increasing in challenge.
PATTERN_SCRIPT: dict[int, list[tuple[PatternKind, dict]]] = {
    1: [
        (K.HORIZONTAL, dict(row=4, width=3, direction=1, speed=0.5)),
        (K.HORIZONTAL, dict(row=9, width=3, direction=-1, speed=0.5)),
    ],
    2: [
        (K.HORIZONTAL, dict(row=3, width=3, direction=1, speed=0.6)),
        (K.HORIZONTAL, dict(row=10, width=3, direction=-1, speed=0.6)),
        (K.VERTICAL, dict(col=5, height=3, direction=1, speed=0.5)),
    ],
    3: [
        (K.HORIZONTAL, dict(row=3, width=4, direction=1, speed=0.7)),
        (K.HORIZONTAL, dict(row=8, width=4, direction=-1, speed=0.7)),
        (K.VERTICAL, dict(col=3, height=4, direction=1, speed=0.6)),
        (K.VERTICAL, dict(col=8, height=4, direction=-1, speed=0.6)),
    ],
    4: [
        (K.DIAGONAL_SWEEP, dict(direction=1, speed=0.7)),
        (K.DIAGONAL_SWEEP, dict(direction=-1, speed=0.7)),
    ],
    5: [
        (K.ROW_MARCH, dict(speed=0.8)),
        (K.HORIZONTAL, dict(row=5, width=3, direction=1, speed=0.8)),
    ],
    6: [
        (K.ROW_MARCH, dict(speed=0.9)),
        (K.COLUMN_MARCH, dict(speed=0.7)),
    ],
    7: [
        (K.GRAY_PULSE, dict(interval=2400)),
    ],
    8: [
        (K.ROTATING_CROSS, dict(speed=0.3)),
        (K.HORIZONTAL, dict(row=2, width=2, direction=1, speed=0.7)),
        (K.HORIZONTAL, dict(row=10, width=2, direction=-1, speed=0.7)),
    ],
    9: [
        (K.SPIRAL, dict(speed=0.4)),
        (K.VERTICAL, dict(col=4, height=2, direction=1, speed=0.7)),
        (K.VERTICAL, dict(col=7, height=2, direction=-1, speed=0.7)),
    ],
    10: [
        (K.GRAY_PULSE, dict(interval=1600)),
        (K.HORIZONTAL, dict(row=3, width=2, direction=1, speed=0.7)),
        (K.HORIZONTAL, dict(row=9, width=2, direction=-1, speed=0.7)),
    ],
    11: [
        (K.ROW_MARCH, dict(speed=0.7)),
        (K.COLUMN_MARCH, dict(speed=0.5)),
        (K.HORIZONTAL, dict(row=5, width=2, direction=1, speed=0.8)),
    ],
    12: [
        (K.ROTATING_CROSS, dict(speed=0.35)),
        (K.DIAGONAL_SWEEP, dict(direction=1, speed=0.6)),
        (K.HORIZONTAL, dict(row=2, width=2, direction=1, speed=0.8)),
        (K.HORIZONTAL, dict(row=10, width=2, direction=-1, speed=0.8)),
        (K.VERTICAL, dict(col=3, height=2, direction=1, speed=0.7)),
        (K.VERTICAL, dict(col=8, height=2, direction=-1, speed=0.7)),
    ],
}


def base_speed(level: int) -> int:
    """Milliseconds per sweep step for a level; lower is faster."""
    return BASE_SPEED_MS - (level - 1) * SPEED_DECREASE_MS


def check_level(level: int) -> None:
    if not 1 <= level <= TOTAL_LEVELS:
        raise ValueError(f"Level must be between 1 and {TOTAL_LEVELS}, got {level}")


def build_pattern(kind: PatternKind, params: dict, grid: Grid, rng: random.Random) -> HazardPattern:
    """Instantiate one pattern, drawing per-instance random offsets from ``rng``."""
    if kind is K.HORIZONTAL:
        return HorizontalBar.create(grid, rng, **params)
    if kind is K.VERTICAL:
        return VerticalBar.create(grid, rng, **params)
    if kind is K.RING:
        return ExpandingRing.create(grid, **params)
    if kind is K.SNAKE:
        return Snake.create(grid, rng, **params)
    if kind is K.BLINKER:
        return Blinker.create(grid, rng, **params)
    if kind is K.ROLLING_X:
        return RollingX.create(grid, rng, **params)
    return PATTERN_TYPES[kind](**params)


@dataclass
class LevelLayout:
    """
    Everything a level starts with.

    Attributes
    ----------
    level : int
        Level number, 1-based.
    safe_islands : set[Coord]
        Cells hazards never apply to this level.
    collectibles : set[Coord]
        Cells the player must visit; disjoint from ``safe_islands``.
    patterns : list[HazardPattern]
        Active hazard patterns; order has no effect on the union.
    collectible_count : int
        Target count from the level table (placement may fall short).
    """
    level: int
    safe_islands: set[Coord] = field(default_factory=set)
    collectibles: set[Coord] = field(default_factory=set)
    patterns: list[HazardPattern] = field(default_factory=list)
    collectible_count: int = 0


class LevelGenerator:
    """
    Builds the safe islands, collectibles and hazard line-up for a level.

    Notes
    - Island recipes and hazard line-ups come from fixed per-level tables.
    - Randomness (scattered islands, collectible spots, bar offsets) comes
      only from the injected ``rng``.
    """

    def __init__(self, grid: Grid | None = None, rng: random.Random | None = None,
                 spawn: Coord = SPAWN_CELL) -> None:
        self.grid = grid or Grid()
        self.rng = rng or random.Random()
        self.spawn = spawn

    # ------------------------------- Safe islands ------------------------------------

    def corner_islands(self) -> set[Coord]:
        """2x2 islands inset one tile from each corner of the playable field."""
        far_x = self.grid.width - 2
        far_z = self.grid.playable_height - 4
        cells = set()
        for cx, cz in ((1, 1), (far_x, 1), (1, far_z), (far_x, far_z)):
            for dx in (0, 1):
                for dz in (0, 1):
                    if self.grid.in_playable(cx + dx, cz + dz):
                        cells.add((cx + dx, cz + dz))
        return cells

    def center_cross(self) -> set[Coord]:
        center_x = self.grid.width // 2
        center_z = self.grid.height // 2 - 1
        cells = set()
        for d in range(-2, 3):
            if self.grid.in_bounds(center_x + d, center_z):
                cells.add((center_x + d, center_z))
            if self.grid.in_playable(center_x, center_z + d):
                cells.add((center_x, center_z + d))
        return cells

    def diagonal_islands(self) -> set[Coord]:
        """Four two-wide stepping stones running down-right."""
        cells = set()
        for i in range(4):
            x, z = 2 + i * 3, 2 + i * 2
            if x < self.grid.width and z < self.grid.playable_height:
                cells.add((x, z))
                if x + 1 < self.grid.width:
                    cells.add((x + 1, z))
        return cells

    def scattered_islands(self, count: int) -> set[Coord]:
        placed: set[Coord] = set()
        for _ in range(count):
            attempts = 0
            while True:
                x = 1 + math.floor(self.rng.random() * (self.grid.width - 2))
                z = 1 + math.floor(self.rng.random() * (self.grid.height - 5))
                attempts += 1
                if (x, z) not in placed or attempts >= SCATTER_PLACEMENT_ATTEMPTS:
                    break
            placed.add((x, z))
        return placed

    def perimeter(self) -> set[Coord]:
        """The whole outer edge of the playable field."""
        bottom = self.grid.playable_height - 1
        cells = set()
        for x in range(self.grid.width):
            cells.add((x, 0))
            cells.add((x, bottom))
        for z in range(self.grid.playable_height):
            cells.add((0, z))
            cells.add((self.grid.width - 1, z))
        return cells

    def starting_zone(self) -> set[Coord]:
        """3x3 block centred on the spawn cell."""
        sx, sz = self.spawn
        return {
            (sx + dx, sz + dz)
            for dx in (-1, 0, 1)
            for dz in (-1, 0, 1)
            if self.grid.in_bounds(sx + dx, sz + dz)
        }

    def safe_islands(self, level: int) -> set[Coord]:
        check_level(level)
        recipes = {
            "corners": self.corner_islands,
            "center_cross": self.center_cross,
            "diagonal": self.diagonal_islands,
            "scattered": self.scattered_islands,
            "perimeter": self.perimeter,
        }
        cells: set[Coord] = set()
        for name, args in SAFE_ISLAND_SCRIPT[level]:
            cells |= recipes[name](*args)
        return cells | self.starting_zone()

    # ------------------------------- Collectibles ------------------------------------

    def in_spawn_box(self, x: int, z: int) -> bool:
        sx, sz = self.spawn
        return abs(x - sx) <= 1 and abs(z - sz) <= 1

    def place_collectibles(self, count: int, safe_islands: set[Coord]) -> set[Coord]:
        """
        Reject-and-retry sampling of ``count`` collectible cells.

        Parameters
        ----------
        count : int
            Number of cells wanted.
        safe_islands : set[Coord]
            Cells that may not hold a collectible.

        Returns
        -------
        set[Coord]
            Up to ``count`` cells; fewer only if the attempt cap runs out.
        """
        cells: set[Coord] = set()
        attempts = 0
        while len(cells) < count and attempts < COLLECTIBLE_PLACEMENT_ATTEMPTS:
            x = math.floor(self.rng.random() * self.grid.width)
            z = math.floor(self.rng.random() * (self.grid.height - 3))
            if (x, z) not in safe_islands and (x, z) not in cells and not self.in_spawn_box(x, z):
                cells.add((x, z))
            attempts += 1
        return cells

    # ------------------------------- Hazards -----------------------------------------

    def patterns(self, level: int) -> list[HazardPattern]:
        check_level(level)
        return [build_pattern(kind, params, self.grid, self.rng)
                for kind, params in PATTERN_SCRIPT[level]]

    def generate(self, level: int) -> LevelLayout:
        check_level(level)
        safe = self.safe_islands(level)
        count = COLLECTIBLES_PER_LEVEL[level - 1]
        return LevelLayout(
            level=level,
            safe_islands=safe,
            collectibles=self.place_collectibles(count, safe),
            patterns=self.patterns(level),
            collectible_count=count,
        )
