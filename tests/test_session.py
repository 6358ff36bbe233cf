import pytest

from magma_mayhem.models import EventType
from magma_mayhem.session import CellState, GameClock, GamePhase, Session, potential_score


def kinds(session):
    return [event.kind for event in session.drain_events()]


def flood_board(session, flood, collectibles=((0, 0),), safe=()):
    """Replace the generated level with lava everywhere except the given cells."""
    session.patterns = [flood]
    session.collectibles = set(collectibles)
    session.safe_islands = set(safe)


# ------------------------------- Scoring -------------------------------------------

@pytest.mark.parametrize("elapsed,expected", [
    (0, 10), (10000, 10), (15000, 8), (20000, 5), (25000, 3), (30000, 1), (90000, 1),
])
def test_potential_score(elapsed, expected):
    assert potential_score(elapsed) == expected


def test_potential_score_never_increases():
    scores = [potential_score(t) for t in range(0, 40000, 250)]
    assert scores == sorted(scores, reverse=True)
    assert min(scores) == 1


def test_score_decays_during_play(playing):
    playing.patterns = []
    playing.tick(2800 + 20000)
    assert playing.level_score == 5


# ------------------------------- Clock ---------------------------------------------

def test_clock_excludes_pauses():
    clock = GameClock()
    assert clock.time(1000) == 1000
    clock.pause(3000)
    assert clock.time(4500) == 3000
    clock.resume(5000)
    assert clock.time(6000) == 4000


def test_pause_freezes_score(playing):
    playing.patterns = []
    playing.toggle_pause(2800 + 5000)
    assert playing.is_paused
    playing.tick(2800 + 60000)
    playing.toggle_pause(2800 + 60000)
    playing.tick(2800 + 60000)
    assert playing.level_score == 10
    assert kinds(playing) == [EventType.PAUSED, EventType.RESUMED]


# ------------------------------- Countdown -----------------------------------------

def test_countdown_sequence(session):
    session.start_game(0)
    assert session.phase is GamePhase.COUNTING_DOWN
    assert [session.countdown_number(t) for t in (0, 800, 1600, 2400)] == [3, 2, 1, 0]

    for t in (0, 800, 1600, 2400):
        session.tick(t)
    events = session.drain_events()
    assert [e.kind for e in events] == [EventType.COUNTDOWN_TICK] * 3 + [EventType.GO]
    assert [e.value for e in events[:3]] == [3, 2, 1]

    session.tick(2799)
    assert session.is_counting_down
    session.tick(2800)
    assert session.is_playing
    assert kinds(session) == [EventType.LEVEL_START]


def test_countdown_floor_cells(session):
    session.start_game(0)
    assert session.cell_state((0, 0), 0) is CellState.DEFAULT
    lit = session.countdown_cells(3)
    assert (2, 3) in lit and (8, 12) in lit
    assert (0, 0) not in lit
    assert all(session.cell_state(cell, 0) is CellState.COUNTDOWN for cell in lit)
    assert session.cell_state((0, 0), 2500) is CellState.SAFE_ISLAND


def test_tutorial_shown_once(rng):
    session = Session(rng=rng)
    session.start_game(0)
    assert session.phase is GamePhase.TUTORIAL
    session.tick(5000)
    assert session.phase is GamePhase.TUTORIAL
    session.dismiss_tutorial(5000)
    assert session.is_counting_down
    session.restart_game(9000)
    assert session.is_counting_down


def test_character_choice(session):
    session.start_game(0, "turtle")
    assert session.character == "turtle"
    session.start_game(0, "dragon")
    assert session.character == "turtle"


# ------------------------------- Movement & collisions -----------------------------

def test_moves_ignored_outside_play(session):
    assert not session.move(0, -1, 0)
    session.start_game(0)
    assert not session.move(0, -1, 100)
    assert session.player.position == (6, 14)


def test_move_emits_hop(playing):
    assert playing.move(0, -1, 3000)
    assert playing.player.position == (6, 13)
    events = playing.drain_events()
    assert events[0].kind is EventType.HOP
    assert events[0].cell == (6, 13)


def test_safe_cell_never_hit(playing, flood):
    flood_board(playing, flood, safe={(6, 14)})
    for t in range(2800, 12800, 100):
        playing.tick(t)
    assert playing.lives == 3
    assert playing.is_playing
    assert (6, 14) not in playing.lava


def test_no_hit_mid_hop(playing, flood):
    flood_board(playing, flood)
    playing.move(0, -1, 3000)
    playing.tick(3050)
    assert playing.lives == 3
    playing.tick(3100)
    assert playing.lives == 2
    assert playing.player.position == (6, 14)


def test_hit_respawns_with_invincibility(playing, flood):
    flood_board(playing, flood)
    playing.tick(3000)
    assert playing.lives == 2
    assert playing.player.position == (6, 14)
    assert kinds(playing) == [EventType.HIT, EventType.RESPAWN]

    playing.tick(5500)
    assert playing.lives == 2
    playing.tick(5501)
    assert playing.lives == 1


def test_three_hits_end_the_game(playing, flood):
    flood_board(playing, flood)
    playing.tick(3000)
    playing.tick(5501)
    assert playing.is_playing
    playing.tick(8002)
    assert playing.lives == 0
    assert playing.is_game_over
    assert EventType.GAME_OVER in kinds(playing)

    playing.tick(20000)
    assert playing.lives == 0
    assert not playing.move(0, -1, 20000)


def test_player_hit_gating(playing):
    playing.player.respawn(3000)
    assert not playing.player_hit(3000)
    playing.player.invincible_until = None
    playing.player.start_hop(0, -1, 3000)
    assert not playing.player_hit(3050)
    playing.player.update_hop(3100)
    assert playing.player_hit(3100)


# ------------------------------- Collecting & progression --------------------------

def test_collect_last_item_completes_level(playing):
    playing.patterns = []
    playing.collectibles = {(6, 13)}
    playing.move(0, -1, 3000)
    playing.tick(3100)
    assert playing.collectibles == set()
    assert playing.total_score == 10
    assert playing.cleared
    assert playing.is_playing

    assert not playing.move(0, 1, 3200)
    playing.tick(3399)
    assert playing.is_playing
    playing.tick(3400)
    assert playing.phase is GamePhase.LEVEL_COMPLETE
    assert kinds(playing) == [EventType.HOP, EventType.COLLECT, EventType.LEVEL_CLEARED,
                              EventType.LEVEL_COMPLETE]


def test_late_clear_scores_at_least_one(playing):
    playing.patterns = []
    playing.collectibles = {(6, 13)}
    playing.move(0, -1, 2800 + 100000)
    playing.tick(2800 + 100100)
    assert playing.last_award == 1
    assert playing.total_score == 1


def test_collect_without_clearing(playing):
    playing.patterns = []
    playing.collectibles = {(6, 13), (0, 0)}
    playing.move(0, -1, 3000)
    playing.tick(3100)
    assert playing.collectibles == {(0, 0)}
    assert playing.total_score == 0
    assert not playing.cleared


def test_next_level_refills_and_counts_down(playing, flood):
    flood_board(playing, flood)
    playing.tick(3000)
    playing.patterns = []
    playing.collectibles = {(6, 13)}
    playing.player.invincible_until = None
    playing.move(0, -1, 6000)
    playing.tick(6100)
    playing.tick(6400)
    assert playing.phase is GamePhase.LEVEL_COMPLETE

    playing.next_level(7000)
    assert playing.level == 2
    assert playing.lives == 3
    assert playing.collectibles == set()
    assert playing.is_counting_down
    assert playing.countdown_number(7500) is None
    assert playing.countdown_number(8000) == 3

    playing.tick(8000 + 2800)
    assert playing.is_playing
    assert playing.base_speed == 860


def test_next_level_only_after_completion(playing):
    playing.next_level(3000)
    assert playing.level == 1
    assert playing.is_playing


def test_clearing_final_level_wins(session):
    session.level = 12
    session.initialize_level(0)
    session.patterns = []
    session.collectibles = {(6, 13)}
    session.total_score = 100
    session.move(0, -1, 1000)
    session.tick(1100)
    session.tick(1400)
    assert session.phase is GamePhase.WON
    assert session.total_score == 110
    assert kinds(session)[-1] is EventType.WIN
    assert session.leaderboard_entry("ada") == ("ada", 110, 12, "chicken")


# ------------------------------- Display -------------------------------------------

def test_cell_state_precedence(playing):
    playing.safe_islands = {(1, 1)}
    playing.collectibles = {(2, 2)}
    playing.resolver.occupied = frozenset({(1, 1), (2, 2), (3, 3)})
    assert playing.cell_state((1, 1), 3000) is CellState.SAFE_ISLAND
    assert playing.cell_state((2, 2), 3000) is CellState.COLLECTIBLE
    assert playing.cell_state((3, 3), 3000) is CellState.LAVA
    assert playing.cell_state((4, 4), 3000) is CellState.DEFAULT


def test_lava_disjoint_from_protected_cells_every_tick(playing):
    for t in range(2800, 30000, 97):
        playing.tick(t)
        if not playing.is_playing:
            break
        assert playing.lava.isdisjoint(playing.safe_islands)
        assert playing.lava.isdisjoint(playing.collectibles)
