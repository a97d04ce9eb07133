"""
Repository interfaces for dream league entities.
No business logic, only read/write operations. Repositories never commit;
callers wrap a whole operation in `transaction(conn)` so it lands atomically.
"""
from __future__ import annotations

import json
import sqlite3
import time
import uuid
from typing import Any

from dreamleague.models import Athlete, AthleteSnapshot, Creator, Team, Tournament, TournamentStatus, User


def _dumps(d: dict[str, Any]) -> str:
    return json.dumps(d, separators=(",", ":"), sort_keys=True)


def _now() -> int:
    return int(time.time())


# ---------- UserRepository ----------


class UserRepository:
    """CRUD for API users."""

    def create(self, conn: sqlite3.Connection, username: str, password_hash: str, id: str | None = None) -> User:
        uid = id or str(uuid.uuid4())
        now = _now()
        conn.execute(
            "INSERT INTO users (id, username, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (uid, username, password_hash, now),
        )
        return User(id=uid, username=username, password_hash=password_hash, created_at=now)

    def get_by_username(self, conn: sqlite3.Connection, username: str) -> User | None:
        row = conn.execute(
            "SELECT id, username, password_hash, created_at FROM users WHERE username = ?", (username,)
        ).fetchone()
        if row is None:
            return None
        return User(id=row["id"], username=row["username"], password_hash=row["password_hash"], created_at=row["created_at"])


# ---------- CreatorRepository ----------


class CreatorRepository:
    """Keyed store for creators. One creator per authority."""

    def save(self, conn: sqlite3.Connection, creator: Creator) -> None:
        conn.execute(
            "INSERT INTO creators (id, authority_id, data, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at",
            (creator.id, creator.authority_id, _dumps(creator.to_dict()), _now()),
        )

    def get(self, conn: sqlite3.Connection, creator_id: str) -> Creator | None:
        row = conn.execute("SELECT data FROM creators WHERE id = ?", (creator_id,)).fetchone()
        return Creator.from_dict(json.loads(row["data"])) if row else None

    def get_by_authority(self, conn: sqlite3.Connection, authority_id: str) -> Creator | None:
        row = conn.execute("SELECT data FROM creators WHERE authority_id = ?", (authority_id,)).fetchone()
        return Creator.from_dict(json.loads(row["data"])) if row else None


# ---------- AthleteRepository ----------


class AthleteRepository:
    """Keyed store for athletes. collectible_id is unique."""

    def save(self, conn: sqlite3.Connection, athlete: Athlete) -> None:
        conn.execute(
            "INSERT INTO athletes (id, owner_id, collectible_id, team_id, data, updated_at) VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET owner_id = excluded.owner_id, team_id = excluded.team_id, "
            "data = excluded.data, updated_at = excluded.updated_at",
            (
                athlete.id,
                athlete.owner_id,
                athlete.collectible_id,
                athlete.team_id,
                _dumps(athlete.to_dict()),
                athlete.last_updated,
            ),
        )

    def get(self, conn: sqlite3.Connection, athlete_id: str) -> Athlete | None:
        row = conn.execute("SELECT data FROM athletes WHERE id = ?", (athlete_id,)).fetchone()
        return Athlete.from_dict(json.loads(row["data"])) if row else None

    def get_by_collectible(self, conn: sqlite3.Connection, collectible_id: str) -> Athlete | None:
        row = conn.execute("SELECT data FROM athletes WHERE collectible_id = ?", (collectible_id,)).fetchone()
        return Athlete.from_dict(json.loads(row["data"])) if row else None

    def get_snapshot(self, conn: sqlite3.Connection, athlete_id: str) -> AthleteSnapshot | None:
        athlete = self.get(conn, athlete_id)
        return athlete.snapshot() if athlete else None

    def list_by_owner(self, conn: sqlite3.Connection, owner_id: str) -> list[Athlete]:
        rows = conn.execute(
            "SELECT data FROM athletes WHERE owner_id = ? ORDER BY rowid", (owner_id,)
        ).fetchall()
        return [Athlete.from_dict(json.loads(r["data"])) for r in rows]

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[Athlete]:
        rows = conn.execute(
            "SELECT data FROM athletes WHERE team_id = ? ORDER BY rowid", (team_id,)
        ).fetchall()
        return [Athlete.from_dict(json.loads(r["data"])) for r in rows]


# ---------- TeamRepository ----------


class TeamRepository:
    """Keyed store for teams. Names are unique per owner."""

    def save(self, conn: sqlite3.Connection, team: Team) -> None:
        conn.execute(
            "INSERT INTO teams (id, owner_id, name, data, updated_at) VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET data = excluded.data, updated_at = excluded.updated_at",
            (team.id, team.owner_id, team.name, _dumps(team.to_dict()), team.last_updated),
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute("SELECT data FROM teams WHERE id = ?", (team_id,)).fetchone()
        return Team.from_dict(json.loads(row["data"])) if row else None

    def get_by_owner_and_name(self, conn: sqlite3.Connection, owner_id: str, name: str) -> Team | None:
        row = conn.execute(
            "SELECT data FROM teams WHERE owner_id = ? AND name = ?", (owner_id, name)
        ).fetchone()
        return Team.from_dict(json.loads(row["data"])) if row else None

    def list_by_owner(self, conn: sqlite3.Connection, owner_id: str) -> list[Team]:
        rows = conn.execute(
            "SELECT data FROM teams WHERE owner_id = ? ORDER BY rowid", (owner_id,)
        ).fetchall()
        return [Team.from_dict(json.loads(r["data"])) for r in rows]


# ---------- TournamentRepository ----------


class TournamentRepository:
    """Keyed store for tournaments. Names are unique per authority."""

    def save(self, conn: sqlite3.Connection, tournament: Tournament) -> None:
        conn.execute(
            "INSERT INTO tournaments (id, authority_id, name, status, data, updated_at) VALUES (?, ?, ?, ?, ?, ?) "
            "ON CONFLICT(id) DO UPDATE SET status = excluded.status, data = excluded.data, "
            "updated_at = excluded.updated_at",
            (
                tournament.id,
                tournament.authority_id,
                tournament.name,
                tournament.status.value,
                _dumps(tournament.to_dict()),
                tournament.last_updated,
            ),
        )

    def get(self, conn: sqlite3.Connection, tournament_id: str) -> Tournament | None:
        row = conn.execute("SELECT data FROM tournaments WHERE id = ?", (tournament_id,)).fetchone()
        return Tournament.from_dict(json.loads(row["data"])) if row else None

    def get_by_authority_and_name(self, conn: sqlite3.Connection, authority_id: str, name: str) -> Tournament | None:
        row = conn.execute(
            "SELECT data FROM tournaments WHERE authority_id = ? AND name = ?", (authority_id, name)
        ).fetchone()
        return Tournament.from_dict(json.loads(row["data"])) if row else None

    def list_all(self, conn: sqlite3.Connection, status: TournamentStatus | None = None) -> list[Tournament]:
        if status is None:
            rows = conn.execute("SELECT data FROM tournaments ORDER BY rowid DESC").fetchall()
        else:
            rows = conn.execute(
                "SELECT data FROM tournaments WHERE status = ? ORDER BY rowid DESC", (TournamentStatus(status).value,)
            ).fetchall()
        return [Tournament.from_dict(json.loads(r["data"])) for r in rows]
