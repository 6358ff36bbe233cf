"""Markdown logger for gameplay events (hits, pickups, level transitions)."""

from __future__ import annotations

import datetime

from magma_mayhem.models import Coord


class GameLogger:
    """Handles logging of game events to markdown file."""

    def __init__(self, log_file: str):
        """
        Initialize the game logger.

        Parameters
        ----------
        log_file : str
            Path to the log file
        """
        self.log_file = log_file
        self.setup_log()

    def setup_log(self) -> None:
        """Initialize the log file with headers."""
        try:
            with open(self.log_file, 'w', encoding='utf-8') as f:
                f.write("# Magma Mayhem Game Log\n\n")
                f.write(f"Log started at: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n")
                f.write("## Gameplay Events\n\n")
                f.write("| Timestamp | Event | Cell (x,z) | Details |\n")
                f.write("|-----------|-------|------------|---------|\n")
        except OSError as e:
            print(f"Failed to initialize log file: {e}")

    def log_event(self, event: str, cell: Coord | None = None, details: str = "") -> None:
        """
        Append one row to the event table.

        Parameters
        ----------
        event : str
            Short upper-case event name
        cell : Coord | None
            Grid cell the event happened on, if any
        details : str, optional
            Free-form details
        """
        try:
            timestamp = datetime.datetime.now().strftime('%H:%M:%S.%f')[:-3]  # Include milliseconds
            where = f"({cell[0]}, {cell[1]})" if cell is not None else "-"

            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(f"| {timestamp} | {event} | {where} | {details} |\n")

        except OSError as e:
            print(f"Failed to log {event.lower()}: {e}")

    def log_level_start(self, level: int, collectibles: int, patterns: int) -> None:
        self.log_event("LEVEL START", None, f"Sector {level}: {collectibles} items, {patterns} hazard patterns")

    def log_hit(self, cell: Coord, lives: int) -> None:
        self.log_event("HIT", cell, f"{lives} lives left")

    def log_collect(self, cell: Coord, remaining: int) -> None:
        self.log_event("COLLECT", cell, f"{remaining} remaining")

    def log_level_complete(self, level: int, points: int, total: int) -> None:
        self.log_event("LEVEL COMPLETE", None, f"Sector {level} cleared for +{points} (total {total})")

    def log_game_over(self, level: int, total: int) -> None:
        self.log_event("GAME OVER", None, f"Reached sector {level} with {total} points")

    def log_win(self, total: int) -> None:
        self.log_event("WIN", None, f"All sectors cleared with {total} points")

    def log_submission(self, name: str, score: int, rank: int | None) -> None:
        result = f"rank #{rank}" if rank else "submission failed"
        self.log_event("LEADERBOARD", None, f"{name}: {score} points, {result}")
