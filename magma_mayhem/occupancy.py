"""Per-tick hazard occupancy: union of all active patterns, minus protected cells."""

from __future__ import annotations

from collections.abc import Iterable

from magma_mayhem.models import Coord, Grid
from magma_mayhem.patterns import HazardPattern


class OccupancyResolver:
    """
    Recomputes the lava set from scratch every tick.

    Precedence is safe island > collectible > hazard: a coordinate any
    pattern produces is dropped if it is protected, so the resolved set is
    always disjoint from both protected sets.
    """

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.occupied: frozenset[Coord] = frozenset()

    def clear(self) -> None:
        self.occupied = frozenset()

    def raw(self, patterns: Iterable[HazardPattern], now_ms: float, base_speed_ms: float) -> set[Coord]:
        """Union of every pattern's output before protection is applied."""
        cells: set[Coord] = set()
        for pattern in patterns:
            cells |= pattern.evaluate(now_ms, base_speed_ms, self.grid)
        return {(x, z) for x, z in cells if self.grid.in_bounds(x, z)}

    def resolve(self, patterns: Iterable[HazardPattern], now_ms: float, base_speed_ms: float,
                safe_islands: set[Coord], collectibles: set[Coord]) -> frozenset[Coord]:
        """
        Replace the occupancy with a fresh evaluation at ``now_ms``.

        Parameters
        ----------
        patterns : Iterable[HazardPattern]
            Active patterns for the current level.
        now_ms : float
            Game time in milliseconds.
        base_speed_ms : float
            Level speed; see ``levels.base_speed``.
        safe_islands, collectibles : set[Coord]
            Protected cells.

        Returns
        -------
        frozenset[Coord]
            The new occupancy, also kept on ``self.occupied``.
        """
        self.clear()
        cells = self.raw(patterns, now_ms, base_speed_ms)
        self.occupied = frozenset(cells - safe_islands - collectibles)
        return self.occupied

    def is_hazard(self, cell: Coord) -> bool:
        return cell in self.occupied
