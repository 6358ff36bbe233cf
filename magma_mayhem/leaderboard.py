"""
Leaderboard store: a single JSON file of best scores plus a tiny HTTP front.

The file holds ``{"entries": [...], "nextId": n}``. There is no locking; the
store is meant for one small server process.

Run
---
python -m magma_mayhem.leaderboard
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from magma_mayhem.constants import (
    LEADERBOARD_FILE, LEADERBOARD_PORT, LEADERBOARD_TOP_N, LEADERBOARD_RETAIN,
    MAX_NAME_LENGTH, MAX_SUBMITTED_SCORE, TOTAL_LEVELS, CHARACTERS, DEFAULT_CHARACTER
)


class LeaderboardError(ValueError):
    """A submission failed validation."""


@dataclass
class LeaderboardEntry:
    id: int
    name: str
    score: int
    level: int
    character: str
    created_at: str


@dataclass(frozen=True)
class Submission:
    name: str
    score: int
    level: int
    character: str


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_submission(payload: dict) -> Submission:
    """
    Check and normalise a submitted score.

    Names are trimmed and cut to MAX_NAME_LENGTH; an unknown character falls
    back to DEFAULT_CHARACTER.

    Raises
    ------
    LeaderboardError
        Empty name, score outside 0..MAX_SUBMITTED_SCORE, or level outside
        1..TOTAL_LEVELS.
    """
    name = payload.get("name")
    score = payload.get("score")
    level = payload.get("level")
    character = payload.get("character")

    if not isinstance(name, str) or not name.strip():
        raise LeaderboardError("Name is required")
    if not _is_number(score) or score < 0 or score > MAX_SUBMITTED_SCORE:
        raise LeaderboardError("Invalid score")
    if not _is_number(level) or level < 1 or level > TOTAL_LEVELS:
        raise LeaderboardError("Invalid level")

    return Submission(
        name=name.strip()[:MAX_NAME_LENGTH],
        score=score,
        level=level,
        character=character if character in CHARACTERS else DEFAULT_CHARACTER,
    )


class LeaderboardStore:
    """JSON-file backed score table."""

    def __init__(self, path: str = LEADERBOARD_FILE) -> None:
        self.path = path

    def init_file(self) -> None:
        if not os.path.exists(self.path):
            self.write({"entries": [], "nextId": 1})

    def read(self) -> dict:
        self.init_file()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Error reading leaderboard file: {e}")
            return {"entries": [], "nextId": 1}

    def write(self, data: dict) -> bool:
        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            print(f"Error writing leaderboard file: {e}")
            return False

    def top(self, limit: int = LEADERBOARD_TOP_N) -> list[dict]:
        """Best scores first; equal scores keep the earliest submission first."""
        entries = self.read()["entries"]
        entries.sort(key=lambda e: e["created_at"])
        entries.sort(key=lambda e: e["score"], reverse=True)
        return entries[:limit]

    def submit(self, submission: Submission) -> dict:
        """
        Record a validated submission.

        Returns
        -------
        dict
            ``{"success": True, "id": ..., "rank": ...}``; rank is 0 when the
            entry did not make the retained table.
        """
        data = self.read()
        entry = LeaderboardEntry(
            id=data["nextId"],
            name=submission.name,
            score=submission.score,
            level=submission.level,
            character=submission.character,
            created_at=datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )
        data["nextId"] += 1
        data["entries"].append(asdict(entry))

        # Stable sort, then keep the top slice only
        data["entries"].sort(key=lambda e: e["score"], reverse=True)
        del data["entries"][LEADERBOARD_RETAIN:]
        self.write(data)

        ids = [e["id"] for e in data["entries"]]
        rank = ids.index(entry.id) + 1 if entry.id in ids else 0
        return {"success": True, "id": entry.id, "rank": rank}

    def submit_score(self, name: str, score: int, level: int, character: str) -> dict:
        return self.submit(validate_submission(
            {"name": name, "score": score, "level": level, "character": character}
        ))

    def rank_for_score(self, score: int) -> int:
        return 1 + sum(1 for e in self.read()["entries"] if e["score"] > score)


# ------------------------------------ HTTP --------------------------------------------

RANK_PATH = re.compile(r"^/api/leaderboard/rank/(-?\d+)$")


class LeaderboardRequestHandler(BaseHTTPRequestHandler):
    """``GET/POST /api/leaderboard`` and ``GET /api/leaderboard/rank/<score>``."""

    store: LeaderboardStore = LeaderboardStore()

    def send_json(self, status: int, body: Any) -> None:
        payload = json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(payload)

    def do_OPTIONS(self) -> None:
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_GET(self) -> None:
        if self.path == "/api/leaderboard":
            self.send_json(200, self.store.top())
            return
        match = RANK_PATH.match(self.path)
        if match:
            self.send_json(200, {"rank": self.store.rank_for_score(int(match.group(1)))})
            return
        if self.path.startswith("/api/leaderboard/rank/"):
            self.send_json(400, {"error": "Invalid score"})
            return
        self.send_json(404, {"error": "Not found"})

    def do_POST(self) -> None:
        if self.path != "/api/leaderboard":
            self.send_json(404, {"error": "Not found"})
            return
        try:
            length = int(self.headers.get("Content-Length", 0))
            payload = json.loads(self.rfile.read(length) or b"{}")
            if not isinstance(payload, dict):
                raise LeaderboardError("Name is required")
            result = self.store.submit(validate_submission(payload))
        except (LeaderboardError, ValueError) as e:
            message = str(e) if isinstance(e, LeaderboardError) else "Invalid request body"
            self.send_json(400, {"error": message})
            return
        except OSError as e:
            print(f"Error saving score: {e}")
            self.send_json(500, {"error": "Failed to save score"})
            return
        self.send_json(200, result)


def serve(port: int = LEADERBOARD_PORT, path: str = LEADERBOARD_FILE) -> None:
    LeaderboardRequestHandler.store = LeaderboardStore(path)
    LeaderboardRequestHandler.store.init_file()
    server = ThreadingHTTPServer(("", port), LeaderboardRequestHandler)
    print(f"Leaderboard server running on http://localhost:{port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    serve()
