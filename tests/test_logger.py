from magma_mayhem.logger import GameLogger
from magma_mayhem.session import Session


def read(path):
    return path.read_text(encoding="utf-8")


def test_header_written(tmp_path):
    log_file = tmp_path / "log.md"
    GameLogger(str(log_file))
    text = read(log_file)
    assert text.startswith("# Magma Mayhem Game Log")
    assert "| Timestamp | Event | Cell (x,z) | Details |" in text


def test_rows_appended(tmp_path):
    log_file = tmp_path / "log.md"
    logger = GameLogger(str(log_file))
    logger.log_hit((3, 4), 2)
    logger.log_collect((5, 6), 0)
    logger.log_submission("ada", 42, None)
    text = read(log_file)
    assert "| HIT | (3, 4) | 2 lives left |" in text
    assert "| COLLECT | (5, 6) | 0 remaining |" in text
    assert "ada: 42 points, submission failed" in text


def test_unwritable_path_does_not_raise(tmp_path, capsys):
    logger = GameLogger(str(tmp_path / "missing" / "log.md"))
    logger.log_event("HIT", (0, 0))
    assert "Failed" in capsys.readouterr().out


def test_session_logs_level_flow(tmp_path, rng, flood):
    log_file = tmp_path / "log.md"
    session = Session(rng=rng, logger=GameLogger(str(log_file)), show_tutorial=False)
    session.start_game(0)
    session.tick(2800)
    session.patterns = [flood]
    session.safe_islands = set()
    session.tick(3000)
    text = read(log_file)
    assert "| LEVEL START | - | Sector 1:" in text
    assert "| HIT | (6, 14) | 2 lives left |" in text
