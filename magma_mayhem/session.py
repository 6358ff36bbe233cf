"""Session state and progression: countdown, play, collisions, scoring, level flow.

A ``Session`` owns every piece of per-game state (level, score, coordinate
sets, player) and advances it when the host calls ``tick`` once per frame.
All waits (countdown steps, level-complete delay, invincibility) are
deadlines on a pause-aware game clock checked each tick, so nothing runs
between ticks and no locking is needed.
"""

from __future__ import annotations

import enum
import math
import random

from magma_mayhem.constants import (
    SPAWN_CELL, START_LIVES, TOTAL_LEVELS, MAX_LEVEL_SCORE, MIN_LEVEL_SCORE,
    GRACE_PERIOD_MS, SCORE_DECAY_MS, COUNTDOWN_FROM, COUNTDOWN_STEP_MS, COUNTDOWN_GO_MS,
    LEVEL_COMPLETE_DELAY_MS, LEVEL_TRANSITION_MS, DEFAULT_CHARACTER, CHARACTERS
)
from magma_mayhem.levels import LevelGenerator, base_speed
from magma_mayhem.logger import GameLogger
from magma_mayhem.models import Coord, EventType, GameEvent, Grid
from magma_mayhem.occupancy import OccupancyResolver
from magma_mayhem.patterns import HazardPattern
from magma_mayhem.player import Player


class GamePhase(enum.Enum):
    IDLE = "idle"
    TUTORIAL = "tutorial"
    COUNTING_DOWN = "counting_down"
    PLAYING = "playing"
    PAUSED = "paused"
    LEVEL_COMPLETE = "level_complete"
    WON = "won"
    GAME_OVER = "game_over"


class CellState(enum.Enum):
    """What a tile should look like this frame; derived, never stored."""

    DEFAULT = "default"
    SAFE_ISLAND = "safe_island"
    COLLECTIBLE = "collectible"
    LAVA = "lava"
    COUNTDOWN = "countdown"


# 7x10 floor digits shown during the countdown
COUNTDOWN_DIGITS = {
    3: [
        "1111111",
        "1111111",
        "0000011",
        "0000011",
        "1111111",
        "1111111",
        "0000011",
        "0000011",
        "1111111",
        "1111111",
    ],
    2: [
        "1111111",
        "1111111",
        "0000011",
        "0000011",
        "1111111",
        "1111111",
        "1100000",
        "1100000",
        "1111111",
        "1111111",
    ],
    1: [
        "0001100",
        "0011100",
        "0111100",
        "0001100",
        "0001100",
        "0001100",
        "0001100",
        "0001100",
        "1111111",
        "1111111",
    ],
}


def potential_score(elapsed_ms: float, max_score: int = MAX_LEVEL_SCORE,
                    grace_ms: float = GRACE_PERIOD_MS, decay_ms: float = SCORE_DECAY_MS) -> int:
    """
    Points a level is worth if cleared ``elapsed_ms`` after it started.

    Full marks through the grace period, then a linear slide over
    ``decay_ms`` down to a floor of MIN_LEVEL_SCORE.
    """
    if elapsed_ms <= grace_ms:
        return max_score
    progress = min((elapsed_ms - grace_ms) / decay_ms, 1.0)
    return max(MIN_LEVEL_SCORE, math.floor(max_score * (1 - progress) + 0.5))


class GameClock:
    """Wall-clock milliseconds minus time spent paused."""

    def __init__(self) -> None:
        self.total_pause_time = 0.0      # Cumulative time spent paused (in ms)
        self.pause_start_time: float | None = None

    @property
    def paused(self) -> bool:
        return self.pause_start_time is not None

    def pause(self, wall_ms: float) -> None:
        if self.pause_start_time is None:
            self.pause_start_time = wall_ms

    def resume(self, wall_ms: float) -> None:
        if self.pause_start_time is not None:
            self.total_pause_time += wall_ms - self.pause_start_time
            self.pause_start_time = None

    def time(self, wall_ms: float) -> float:
        """
        Get the current game time in milliseconds, excluding time spent paused.

        Parameters
        ----------
        wall_ms : float
            Host wall clock in milliseconds

        Returns
        -------
        float
            Wall time minus total pause time, frozen while paused
        """
        # The pause in progress is only folded into the total on resume
        if self.pause_start_time is not None:
            return self.pause_start_time - self.total_pause_time
        return wall_ms - self.total_pause_time

    def reset(self) -> None:
        self.total_pause_time = 0.0
        self.pause_start_time = None


class Session:
    """
    One player's run through the sectors.

    Phases: IDLE -> (TUTORIAL) -> COUNTING_DOWN -> PLAYING <-> PAUSED ->
    LEVEL_COMPLETE -> COUNTING_DOWN ... -> WON, or PLAYING -> GAME_OVER.
    Moves and hazard hits only apply in PLAYING.

    Every public method takes the host's wall clock in ms; the session turns
    it into game time itself.
    """

    def __init__(self, grid: Grid | None = None, rng: random.Random | None = None,
                 logger: GameLogger | None = None, spawn: Coord = SPAWN_CELL,
                 show_tutorial: bool = True) -> None:
        self.grid = grid or Grid()
        self.rng = rng or random.Random()
        self.logger = logger
        self.generator = LevelGenerator(self.grid, self.rng, spawn)
        self.resolver = OccupancyResolver(self.grid)
        self.player = Player(self.grid, spawn)
        self.clock = GameClock()
        self.show_tutorial = show_tutorial
        self.tutorial_shown = False
        self.character = DEFAULT_CHARACTER

        self.phase = GamePhase.IDLE
        self.events: list[GameEvent] = []
        self.reset()

    def reset(self) -> None:
        """Wipe all per-game state."""
        self.level = 1
        self.total_score = 0
        self.level_score = MAX_LEVEL_SCORE
        self.level_started_at = 0.0
        self.last_award = 0
        self.safe_islands: set[Coord] = set()
        self.collectibles: set[Coord] = set()
        self.patterns: list[HazardPattern] = []
        self.cleared = False
        self.complete_at: float | None = None
        self.countdown_starts_at: float | None = None
        self.countdown_shown: int | None = None
        self.resolver.clear()
        self.player.reset(lives=START_LIVES)
        self.clock.reset()

    # ------------------------------- Queries -----------------------------------------

    @property
    def lava(self) -> frozenset[Coord]:
        return self.resolver.occupied

    @property
    def lives(self) -> int:
        return self.player.lives

    @property
    def is_playing(self) -> bool:
        return self.phase is GamePhase.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.phase is GamePhase.PAUSED

    @property
    def is_counting_down(self) -> bool:
        return self.phase is GamePhase.COUNTING_DOWN

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER

    @property
    def base_speed(self) -> int:
        return base_speed(self.level)

    def now(self, wall_ms: float) -> float:
        return self.clock.time(wall_ms)

    def countdown_number(self, wall_ms: float) -> int | None:
        """3, 2, 1, then 0 for GO; None outside the countdown or during the lead-in banner."""
        if self.phase is not GamePhase.COUNTING_DOWN or self.countdown_starts_at is None:
            return None
        elapsed = self.now(wall_ms) - self.countdown_starts_at
        if elapsed < 0:
            return None
        step = int(elapsed // COUNTDOWN_STEP_MS)
        return COUNTDOWN_FROM - step if step < COUNTDOWN_FROM else 0

    def countdown_cells(self, number: int) -> set[Coord]:
        digit = COUNTDOWN_DIGITS.get(number)
        if digit is None:
            return set()
        offset_x = (self.grid.width - len(digit[0])) // 2
        offset_z = (self.grid.height - len(digit)) // 2
        return {
            (offset_x + px, offset_z + pz)
            for pz, row in enumerate(digit)
            for px, bit in enumerate(row)
            if bit == "1" and self.grid.in_bounds(offset_x + px, offset_z + pz)
        }

    def cell_state(self, cell: Coord, wall_ms: float) -> CellState:
        """Display state with safe > collectible > lava precedence."""
        if self.phase is GamePhase.COUNTING_DOWN:
            number = self.countdown_number(wall_ms)
            if number == 0:
                return CellState.SAFE_ISLAND
            if number is not None and cell in self.countdown_cells(number):
                return CellState.COUNTDOWN
            return CellState.DEFAULT
        if cell in self.safe_islands:
            return CellState.SAFE_ISLAND
        if cell in self.collectibles:
            return CellState.COLLECTIBLE
        if cell in self.lava:
            return CellState.LAVA
        return CellState.DEFAULT

    # ------------------------------- Events ------------------------------------------

    def emit(self, kind: EventType, at_ms: float, cell: Coord | None = None, value: int = 0) -> None:
        self.events.append(GameEvent(kind, at_ms, cell, value))

    def drain_events(self) -> list[GameEvent]:
        events, self.events = self.events, []
        return events

    # ------------------------------- Progression -------------------------------------

    def start_game(self, wall_ms: float, character: str | None = None) -> None:
        """Reset everything and head for the first countdown (via the tutorial once)."""
        self.reset()
        if character in CHARACTERS:
            self.character = character
        if self.show_tutorial and not self.tutorial_shown:
            self.phase = GamePhase.TUTORIAL
            return
        self.begin_countdown(wall_ms)

    def restart_game(self, wall_ms: float) -> None:
        self.start_game(wall_ms)

    def dismiss_tutorial(self, wall_ms: float) -> None:
        if self.phase is GamePhase.TUTORIAL:
            self.tutorial_shown = True
            self.begin_countdown(wall_ms)

    def begin_countdown(self, wall_ms: float, lead_in_ms: float = 0) -> None:
        self.phase = GamePhase.COUNTING_DOWN
        self.countdown_starts_at = self.now(wall_ms) + lead_in_ms
        self.countdown_shown = None

    def update_countdown(self, now_ms: float) -> None:
        elapsed = now_ms - self.countdown_starts_at
        if elapsed < 0:
            return
        step = int(elapsed // COUNTDOWN_STEP_MS)
        number = COUNTDOWN_FROM - step if step < COUNTDOWN_FROM else 0
        if number != self.countdown_shown:
            self.countdown_shown = number
            if number:
                self.emit(EventType.COUNTDOWN_TICK, now_ms, value=number)
            else:
                self.emit(EventType.GO, now_ms)
        if elapsed >= COUNTDOWN_FROM * COUNTDOWN_STEP_MS + COUNTDOWN_GO_MS:
            self.initialize_level(now_ms)

    def initialize_level(self, now_ms: float) -> None:
        """Lay out the current level and start play and the score-decay timer."""
        layout = self.generator.generate(self.level)
        self.safe_islands = layout.safe_islands
        self.collectibles = layout.collectibles
        self.patterns = layout.patterns
        self.resolver.clear()
        self.player.reset()
        self.level_started_at = now_ms
        self.level_score = MAX_LEVEL_SCORE
        self.cleared = False
        self.complete_at = None
        self.countdown_starts_at = None
        self.phase = GamePhase.PLAYING
        self.emit(EventType.LEVEL_START, now_ms, value=self.level)
        if self.logger:
            self.logger.log_level_start(self.level, len(self.collectibles), len(self.patterns))

    def next_level(self, wall_ms: float) -> None:
        """Advance from the level-complete screen: refill lives, clear the board, count down."""
        if self.phase is not GamePhase.LEVEL_COMPLETE:
            return
        self.level += 1
        self.player.reset(lives=START_LIVES)
        self.safe_islands = set()
        self.collectibles = set()
        self.patterns = []
        self.resolver.clear()
        self.begin_countdown(wall_ms, LEVEL_TRANSITION_MS)

    def toggle_pause(self, wall_ms: float) -> None:
        if self.phase is GamePhase.PLAYING:
            self.clock.pause(wall_ms)
            self.phase = GamePhase.PAUSED
            self.emit(EventType.PAUSED, self.now(wall_ms))
        elif self.phase is GamePhase.PAUSED:
            self.clock.resume(wall_ms)
            self.phase = GamePhase.PLAYING
            self.emit(EventType.RESUMED, self.now(wall_ms))

    def level_complete(self, now_ms: float) -> None:
        self.complete_at = None
        if self.level >= TOTAL_LEVELS:
            self.phase = GamePhase.WON
            self.emit(EventType.WIN, now_ms, value=self.total_score)
            if self.logger:
                self.logger.log_win(self.total_score)
        else:
            self.phase = GamePhase.LEVEL_COMPLETE
            self.emit(EventType.LEVEL_COMPLETE, now_ms, value=self.last_award)
            if self.logger:
                self.logger.log_level_complete(self.level, self.last_award, self.total_score)

    def game_over(self, now_ms: float) -> None:
        self.phase = GamePhase.GAME_OVER
        self.complete_at = None
        self.emit(EventType.GAME_OVER, now_ms, value=self.total_score)
        if self.logger:
            self.logger.log_game_over(self.level, self.total_score)

    def leaderboard_entry(self, name: str) -> tuple[str, int, int, str]:
        return (name, self.total_score, self.level, self.character)

    # ------------------------------- Play --------------------------------------------

    def move(self, dx: int, dz: int, wall_ms: float) -> bool:
        """Request a one-cell hop; silently refused outside active play."""
        if self.phase is not GamePhase.PLAYING or self.cleared:
            return False
        now_ms = self.now(wall_ms)
        if not self.player.start_hop(dx, dz, now_ms):
            return False
        self.emit(EventType.HOP, now_ms, self.player.position)
        return True

    def update_score(self, now_ms: float) -> int:
        if self.phase is GamePhase.PLAYING:
            self.level_score = potential_score(now_ms - self.level_started_at)
        return self.level_score

    def resolve_hazards(self, now_ms: float) -> frozenset[Coord]:
        return self.resolver.resolve(self.patterns, now_ms, self.base_speed,
                                     self.safe_islands, self.collectibles)

    def player_hit(self, now_ms: float) -> bool:
        """
        Take a hit unless hopping, invincible, or not in live play.

        Returns
        -------
        bool
            True if a life was lost.
        """
        if self.phase is not GamePhase.PLAYING or self.cleared:
            return False
        if self.player.is_hopping or self.player.is_invincible(now_ms):
            return False

        lives = self.player.lose_life()
        cell = self.player.position
        self.emit(EventType.HIT, now_ms, cell, lives)
        if self.logger:
            self.logger.log_hit(cell, lives)

        if lives <= 0:
            self.game_over(now_ms)
        else:
            self.player.respawn(now_ms)
            self.emit(EventType.RESPAWN, now_ms, self.player.position)
        return True

    def check_collision(self, now_ms: float) -> bool:
        cell = self.player.position
        if cell in self.safe_islands or cell not in self.lava:
            return False
        return self.player_hit(now_ms)

    def collect_item(self, now_ms: float) -> bool:
        """Pick up the collectible under the player; clearing the last one banks the level score."""
        cell = self.player.position
        if cell not in self.collectibles:
            return False
        self.collectibles.discard(cell)
        self.emit(EventType.COLLECT, now_ms, cell, len(self.collectibles))
        if self.logger:
            self.logger.log_collect(cell, len(self.collectibles))

        if not self.collectibles:
            self.last_award = max(MIN_LEVEL_SCORE, self.level_score)
            self.total_score += self.last_award
            self.cleared = True
            self.complete_at = now_ms + LEVEL_COMPLETE_DELAY_MS
            self.emit(EventType.LEVEL_CLEARED, now_ms, cell, self.last_award)
        return True

    def tick(self, wall_ms: float) -> None:
        """
        Advance one frame.

        Order within a tick: countdown deadline, invincibility expiry, hazard
        recompute, collision at rest, score decay, hop landing (pickup first,
        then collision), level-complete deadline.
        """
        now_ms = self.now(wall_ms)

        if self.phase is GamePhase.COUNTING_DOWN:
            self.update_countdown(now_ms)
            return
        if self.phase is not GamePhase.PLAYING:
            return

        self.player.expire_invincibility(now_ms)
        self.resolve_hazards(now_ms)
        self.check_collision(now_ms)
        if self.phase is not GamePhase.PLAYING:
            return

        self.update_score(now_ms)

        if self.player.update_hop(now_ms):
            self.collect_item(now_ms)
            self.check_collision(now_ms)
            if self.phase is not GamePhase.PLAYING:
                return

        if self.complete_at is not None and now_ms >= self.complete_at:
            self.level_complete(now_ms)
