"""Player entity: grid position, hop animation, lives, and invincibility.

The grid position is authoritative and jumps to the destination as soon as a
hop starts; the hop itself is a short timed interpolation the renderer reads
back through ``pose``. Timings are game-time milliseconds supplied by the
caller (frame-rate independent).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from magma_mayhem.constants import (
    SPAWN_CELL, START_LIVES, HOP_DURATION_MS, HOP_HEIGHT, INVINCIBILITY_MS, BLINK_INTERVAL_MS
)
from magma_mayhem.models import Coord, Grid, HopState

# Facing (radians about the vertical axis) for each move direction
FACING = {
    (0, -1): 0.0,
    (0, 1): math.pi,
    (-1, 0): math.pi / 2,
    (1, 0): -math.pi / 2,
}


@dataclass(frozen=True)
class HopPose:
    """Interpolated presentation state: tile coords, lift, and squash/stretch scale."""
    x: float
    y: float
    z: float
    squash: float = 1.0
    stretch: float = 1.0


class Player:
    """
    The hopping character.

    Lifecycle:
    - IDLE:    standing on ``position``; moves accepted.
    - HOPPING: ``hop`` is set for HOP_DURATION_MS; further moves rejected.
    - RESPAWN: after a hit, back on the spawn cell and invincible for
      INVINCIBILITY_MS, blinking every BLINK_INTERVAL_MS.
    """

    def __init__(self, grid: Grid, spawn: Coord = SPAWN_CELL, lives: int = START_LIVES) -> None:
        self.grid = grid
        self.spawn = spawn
        self.position: Coord = spawn
        self.lives = lives
        self.hop: HopState | None = None
        self.invincible_until: float | None = None
        self.facing = 0.0

    # ------------------------------- Update & State ----------------------------------

    @property
    def is_hopping(self) -> bool:
        return self.hop is not None

    def is_invincible(self, now_ms: float) -> bool:
        return self.invincible_until is not None and now_ms <= self.invincible_until

    def expire_invincibility(self, now_ms: float) -> None:
        if self.invincible_until is not None and now_ms > self.invincible_until:
            self.invincible_until = None

    def reset(self, lives: int | None = None) -> None:
        """Put the player back on spawn with no hop and no invincibility."""
        self.position = self.spawn
        self.hop = None
        self.invincible_until = None
        self.facing = 0.0
        if lives is not None:
            self.lives = lives

    def start_hop(self, dx: int, dz: int, now_ms: float) -> bool:
        """
        Begin a one-cell hop.

        Returns
        -------
        bool
            False (and nothing changes) for a non-unit step, a hop already in
            progress, or a destination off the grid.
        """
        if abs(dx) + abs(dz) != 1 or self.is_hopping:
            return False
        x, z = self.position
        target = (x + dx, z + dz)
        if not self.grid.in_bounds(*target):
            return False

        self.hop = HopState(start=self.position, end=target, started_at=now_ms)
        self.position = target
        self.facing = FACING[(dx, dz)]
        return True

    def hop_progress(self, now_ms: float) -> float:
        if self.hop is None:
            return 1.0
        return max(0.0, min((now_ms - self.hop.started_at) / HOP_DURATION_MS, 1.0))

    def update_hop(self, now_ms: float) -> bool:
        """Advance the hop; True exactly on the tick it lands."""
        if self.hop is None:
            return False
        if self.hop_progress(now_ms) >= 1.0:
            self.hop = None
            return True
        return False

    def lose_life(self) -> int:
        self.lives = max(0, self.lives - 1)
        return self.lives

    def respawn(self, now_ms: float) -> None:
        self.position = self.spawn
        self.hop = None
        self.facing = 0.0
        self.invincible_until = now_ms + INVINCIBILITY_MS

    # ------------------------------- Rendering ---------------------------------------

    def pose(self, now_ms: float) -> HopPose:
        """Ease-out position along the hop with a sine arc and squash/stretch."""
        if self.hop is None:
            x, z = self.position
            return HopPose(float(x), 0.0, float(z))

        progress = self.hop_progress(now_ms)
        ease = progress * (2 - progress)
        arc = math.sin(progress * math.pi)
        (x0, z0), (x1, z1) = self.hop.start, self.hop.end
        return HopPose(
            x=x0 + (x1 - x0) * ease,
            y=arc * HOP_HEIGHT,
            z=z0 + (z1 - z0) * ease,
            squash=1 + arc * 0.15,
            stretch=1 - arc * 0.1,
        )

    def is_visible(self, now_ms: float) -> bool:
        """Blink while invincible."""
        if not self.is_invincible(now_ms):
            return True
        since_respawn = now_ms - (self.invincible_until - INVINCIBILITY_MS)
        return int(since_respawn // BLINK_INTERVAL_MS) % 2 == 0
