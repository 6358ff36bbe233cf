import math

import pytest

from magma_mayhem.player import Player


@pytest.fixture
def player(grid):
    return Player(grid, spawn=(6, 14))


@pytest.mark.parametrize("dx,dz", [(0, 0), (1, 1), (2, 0), (0, -2)])
def test_rejects_non_unit_steps(player, dx, dz):
    assert not player.start_hop(dx, dz, 0)
    assert player.position == (6, 14)


def test_rejects_off_grid(grid):
    player = Player(grid, spawn=(0, 15))
    assert not player.start_hop(-1, 0, 0)
    assert not player.start_hop(0, 1, 0)
    assert player.start_hop(0, -1, 0)


def test_position_moves_immediately(player):
    assert player.start_hop(0, -1, 1000)
    assert player.position == (6, 13)
    assert player.is_hopping
    assert player.facing == 0.0


def test_one_hop_at_a_time(player):
    player.start_hop(1, 0, 0)
    assert not player.start_hop(1, 0, 50)
    assert player.position == (7, 14)
    assert player.facing == -math.pi / 2


def test_hop_lands_after_duration(player):
    player.start_hop(-1, 0, 0)
    assert not player.update_hop(99)
    assert player.update_hop(100)
    assert not player.is_hopping
    assert not player.update_hop(150)
    assert player.start_hop(-1, 0, 150)


def test_pose_mid_hop(player):
    player.start_hop(0, -1, 0)
    pose = player.pose(50)
    assert pose.x == pytest.approx(6.0)
    assert pose.z == pytest.approx(14 - 0.75)
    assert pose.y == pytest.approx(0.7)
    assert pose.squash == pytest.approx(1.15)
    assert pose.stretch == pytest.approx(0.9)


def test_pose_at_rest(player):
    pose = player.pose(0)
    assert (pose.x, pose.y, pose.z) == (6.0, 0.0, 14.0)


def test_respawn_grants_invincibility(player):
    player.start_hop(0, -1, 0)
    player.respawn(1000)
    assert player.position == (6, 14)
    assert not player.is_hopping
    assert player.is_invincible(1000)
    assert player.is_invincible(3500)
    assert not player.is_invincible(3501)
    player.expire_invincibility(3501)
    assert player.invincible_until is None


def test_blinks_while_invincible(player):
    player.respawn(1000)
    assert player.is_visible(1000)
    assert not player.is_visible(1150)
    assert player.is_visible(1300)
    assert player.is_visible(4000)


def test_lives_floor_at_zero(player):
    assert [player.lose_life() for _ in range(4)] == [2, 1, 0, 0]


def test_reset(player):
    player.start_hop(1, 0, 0)
    player.lose_life()
    player.reset(lives=3)
    assert player.position == (6, 14)
    assert player.lives == 3
    assert not player.is_hopping
