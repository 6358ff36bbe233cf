import math
import random

import pytest

from magma_mayhem.levels import PATTERN_SCRIPT, build_pattern
from magma_mayhem.patterns import (
    PATTERN_TYPES, PatternKind, HorizontalBar, VerticalBar, Wave, ExpandingRing, Snake,
    BlinkSpot, Blinker, DiagonalSweep, RowMarch, ColumnMarch, RollingX, RotatingCross,
    Spiral, GrayPulse, CheckerboardPulse, round_half_up
)


def every_kind(grid, rng):
    patterns = [build_pattern(kind, params, grid, rng)
                for level in PATTERN_SCRIPT for kind, params in PATTERN_SCRIPT[level]]
    patterns += [
        Wave(speed=0.6),
        ExpandingRing.create(grid, speed=1.0),
        Snake.create(grid, rng, length=6, step_ms=150),
        Blinker.create(grid, rng, count=8, interval=400),
        RollingX.create(grid, rng, direction=1, speed=0.8),
        RollingX.create(grid, rng, direction=-1, speed=0.8),
        CheckerboardPulse(),
    ]
    return patterns


def test_every_kind_registered():
    assert set(PATTERN_TYPES) == set(PatternKind)


def test_output_stays_in_playable_area(grid, rng):
    patterns = every_kind(grid, rng)
    for now in range(0, 60000, 137):
        for pattern in patterns:
            for x, z in pattern.evaluate(now, 700, grid):
                assert grid.in_playable(x, z), (pattern, now, (x, z))


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(2.49) == 2


def test_horizontal_bar_at_zero(grid):
    bar = HorizontalBar(row=4, width=3, direction=1, speed=0.5)
    assert bar.evaluate(0, 900, grid) == {(0, 4), (1, 4), (2, 4)}

    mirrored = HorizontalBar(row=4, width=3, direction=-1, speed=0.5)
    assert mirrored.evaluate(0, 900, grid) == {(11, 4), (10, 4), (9, 4)}


def test_horizontal_bar_moves_with_time(grid):
    bar = HorizontalBar(row=2, width=1, direction=1, speed=1.0)
    assert bar.evaluate(900, 900, grid) == {(1, 2)}
    assert bar.evaluate(1800, 900, grid) == {(2, 2)}


def test_horizontal_bar_create_clamps_row(grid, rng):
    bar = HorizontalBar.create(grid, rng, row=40, width=2, direction=1, speed=0.5)
    assert bar.row == grid.height - 4
    assert 0 <= bar.offset < grid.width


def test_vertical_bar_wraps_within_playable_rows(grid):
    bar = VerticalBar(col=5, height=3, direction=1, speed=1.0, offset=12)
    assert bar.evaluate(0, 900, grid) == {(5, 12), (5, 13), (5, 0)}


def test_expanding_ring_starts_at_centre(grid):
    ring = ExpandingRing.create(grid, speed=1.0)
    assert ring.evaluate(0, 900, grid) == {(6, 6)}
    assert len(ring.evaluate(4000, 900, grid)) > 1


def test_snake_steps_on_first_evaluate(grid):
    snake = Snake(head_x=6, head_z=8, length=4, step_ms=200, turn_probability=0)
    assert snake.evaluate(0, 900, grid) == {(7, 8)}
    assert snake.evaluate(100, 900, grid) == {(7, 8)}
    assert snake.evaluate(201, 900, grid) == {(8, 8), (7, 8)}


def test_snake_bounces_off_wall(grid):
    snake = Snake(head_x=11, head_z=3, length=3, step_ms=100, turn_probability=0)
    snake.step(grid)
    assert (snake.head_x, snake.head_z) == (11, 3)
    assert snake.direction == 2
    snake.step(grid)
    assert (snake.head_x, snake.head_z) == (10, 3)


def test_snake_trail_never_exceeds_length(grid):
    snake = Snake(head_x=6, head_z=6, length=5, step_ms=10, rng=random.Random(7))
    for now in range(0, 5000, 11):
        cells = snake.evaluate(now, 900, grid)
        assert len(snake.trail) <= 5
        assert len(cells) <= 5


def test_blinker_threshold(grid):
    blinker = Blinker(spots=[BlinkSpot(2, 3, math.pi / 2), BlinkSpot(4, 5, -math.pi / 2)], interval=500)
    assert blinker.evaluate(0, 900, grid) == {(2, 3)}


def test_diagonal_sweep_at_zero(grid):
    assert DiagonalSweep(direction=1, speed=0.7).evaluate(0, 900, grid) == {(0, 0), (0, 1), (1, 0)}
    assert DiagonalSweep(direction=-1, speed=0.7).evaluate(0, 900, grid) == {(11, 0), (11, 1), (10, 0)}


def test_row_march_covers_full_rows(grid):
    cells = RowMarch(speed=0.8).evaluate(0, 900, grid)
    assert cells == {(x, z) for x in range(12) for z in (0, 1)}


def test_column_march_skips_start_zone(grid):
    cells = ColumnMarch(speed=0.7).evaluate(0, 900, grid)
    assert cells == {(x, z) for x in (0, 1) for z in range(14)}


def test_rolling_x_enters_from_the_edge(grid):
    entering = RollingX(direction=1, speed=1.0)
    assert entering.evaluate(0, 900, grid) == {(0, 4), (0, 10)}

    centred = RollingX(direction=1, speed=1.0, offset=9)
    cells = centred.evaluate(0, 900, grid)
    assert len(cells) == 13
    assert (6, 7) in cells
    assert {(3, 4), (9, 10), (3, 10), (9, 4)} <= cells


def test_rotating_cross_at_zero(grid):
    cells = RotatingCross(speed=0.3).evaluate(0, 900, grid)
    assert len(cells) == 21
    assert {(1, 7), (11, 7), (6, 2), (6, 12)} <= cells


def test_spiral_sample_count(grid):
    cells = Spiral(speed=0.4).evaluate(0, 900, grid)
    assert 0 < len(cells) <= 20
    assert (6, 7) in cells


def test_gray_pulse_all_or_nothing(grid):
    pulse = GrayPulse(interval=800)
    assert pulse.evaluate(0, 900, grid) == set()
    assert pulse.evaluate(400, 900, grid) == set(grid.playable_cells())
    assert pulse.evaluate(1200, 900, grid) == set()


@pytest.mark.parametrize("now,phase", [(0, 0), (1499, 0), (1500, 1), (3000, 0)])
def test_checkerboard_phase(now, phase):
    assert CheckerboardPulse().phase(now) == phase


def test_checkerboard_cells(grid):
    pulse = CheckerboardPulse()
    even = pulse.evaluate(0, 900, grid)
    odd = pulse.evaluate(1500, 900, grid)
    assert (0, 0) in even and (1, 0) not in even
    assert (1, 0) in odd and (0, 0) not in odd
    assert len(even) == len(odd) == 84
    assert even.isdisjoint(odd)


def test_stateless_patterns_are_pure(grid):
    bar = DiagonalSweep(direction=1, speed=0.7)
    assert bar.evaluate(12345, 700, grid) == bar.evaluate(12345, 700, grid)
