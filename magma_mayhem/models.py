"""Lightweight data models used across the game."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from magma_mayhem.constants import GRID_WIDTH, GRID_HEIGHT, START_ZONE_ROWS

Coord = tuple[int, int]


@dataclass(frozen=True)
class Grid:
    """
    The addressable tile space of one session.

    Holds no hazard or safe state itself; every generator and pattern reads
    ``width``/``height`` from here.

    Attributes
    ----------
    width : int
        Number of columns (x axis).
    height : int
        Number of rows (z axis).
    reserved_rows : int
        Bottom rows kept free of hazards for the start zone.
    """
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    reserved_rows: int = START_ZONE_ROWS

    def __post_init__(self) -> None:
        if self.width < 12 or self.height < 16:
            raise ValueError(f"Grid must be at least 12x16, got {self.width}x{self.height}")

    @property
    def playable_height(self) -> int:
        """Rows hazards may occupy (everything above the start zone)."""
        return self.height - self.reserved_rows

    def in_bounds(self, x: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= z < self.height

    def in_playable(self, x: int, z: int) -> bool:
        return 0 <= x < self.width and 0 <= z < self.playable_height

    def cells(self) -> list[Coord]:
        return [(x, z) for x in range(self.width) for z in range(self.height)]

    def playable_cells(self) -> list[Coord]:
        return [(x, z) for x in range(self.width) for z in range(self.playable_height)]


@dataclass(frozen=True)
class HopState:
    """
    One hop in progress.

    Attributes
    ----------
    start : Coord
        Cell the hop left from.
    end : Coord
        Destination cell (already the authoritative player position).
    started_at : float
        Game time in ms when the hop began.
    """
    start: Coord
    end: Coord
    started_at: float


class EventType(enum.Enum):
    """Discrete outcomes the renderer, audio and log collaborators react to."""

    COUNTDOWN_TICK = "countdown_tick"
    GO = "go"
    LEVEL_START = "level_start"
    HOP = "hop"
    COLLECT = "collect"
    HIT = "hit"
    RESPAWN = "respawn"
    LEVEL_CLEARED = "level_cleared"
    LEVEL_COMPLETE = "level_complete"
    WIN = "win"
    GAME_OVER = "game_over"
    PAUSED = "paused"
    RESUMED = "resumed"


@dataclass(frozen=True)
class GameEvent:
    kind: EventType
    at_ms: float
    cell: Coord | None = None
    value: int = 0
