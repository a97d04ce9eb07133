"""
Data models for the dream league engine.
Domain objects only; no persistence or API logic.

Entities reference each other by id (athlete.team_id, roster entries,
tournament registrations); no entity holds another entity object.
Timestamps are integer seconds since the epoch.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


ATTRIBUTE_NAMES: tuple[str, ...] = (
    "mechanical",
    "game_knowledge",
    "team_communication",
    "adaptability",
    "consistency",
)

MAX_PERFORMANCE_HISTORY = 5
MAX_TEAM_HISTORY = 10
MAX_ROSTER_SIZE = 5


# ---------- Enums ----------
class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class TrainingType(str, Enum):
    """Which core attribute a training session targets."""
    MECHANICAL = "mechanical"
    GAME_KNOWLEDGE = "game_knowledge"
    TEAM_COMMUNICATION = "team_communication"
    ADAPTABILITY = "adaptability"
    CONSISTENCY = "consistency"


class TournamentStatus(str, Enum):
    """Tournament lifecycle: registration → in_progress → completed (or canceled)."""
    REGISTRATION = "registration"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"


def _hex(b: bytes) -> str:
    return bytes(b).hex()


def _unhex(s: str | None) -> bytes:
    return bytes.fromhex(s) if s else b""


# ---------- Athlete ----------
@dataclass
class SpecialAbility:
    name: str
    value: int

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SpecialAbility:
        return cls(name=d["name"], value=d["value"])


@dataclass
class MatchPerformance:
    """One entry of an athlete's recent-match window. stats is an opaque blob."""
    match_id: str
    timestamp: int
    win: bool
    mvp: bool
    exp_gained: int
    stats: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "timestamp": self.timestamp,
            "win": self.win,
            "mvp": self.mvp,
            "exp_gained": self.exp_gained,
            "stats": _hex(self.stats),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MatchPerformance:
        return cls(
            match_id=d["match_id"],
            timestamp=d["timestamp"],
            win=d["win"],
            mvp=d["mvp"],
            exp_gained=d["exp_gained"],
            stats=_unhex(d.get("stats")),
        )


@dataclass
class AthleteStats:
    """Creator-supplied starting values for an exclusive athlete."""
    mechanical: int
    game_knowledge: int
    team_communication: int
    adaptability: int
    consistency: int
    potential: int
    form: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "mechanical": self.mechanical,
            "game_knowledge": self.game_knowledge,
            "team_communication": self.team_communication,
            "adaptability": self.adaptability,
            "consistency": self.consistency,
            "potential": self.potential,
            "form": self.form,
        }


@dataclass(frozen=True)
class AthleteSnapshot:
    """Read-only view of the attributes a team aggregate needs."""
    athlete_id: str
    mechanical: int
    game_knowledge: int
    team_communication: int


@dataclass
class Athlete:
    """
    A collectible competitor. Attributes live in [1, 100], form in [0, 100].
    performance_history keeps the 5 most recent matches, oldest first.
    """
    id: str
    owner_id: str
    collectible_id: str
    name: str
    position: str
    uri: str
    created_at: int
    last_updated: int
    mechanical: int
    game_knowledge: int
    team_communication: int
    adaptability: int
    consistency: int
    form: int
    potential: int
    rarity: Rarity
    is_exclusive: bool = False
    creator_id: str | None = None
    team_id: str | None = None
    game_data: bytes = b""
    special_abilities: list[SpecialAbility] = field(default_factory=list)
    performance_history: list[MatchPerformance] = field(default_factory=list)
    experience: int = 0
    matches_played: int = 0
    wins: int = 0
    mvp_count: int = 0

    def has_ability(self, name: str) -> bool:
        return any(a.name == name for a in self.special_abilities)

    def attributes(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in ATTRIBUTE_NAMES}

    def snapshot(self) -> AthleteSnapshot:
        return AthleteSnapshot(
            athlete_id=self.id,
            mechanical=self.mechanical,
            game_knowledge=self.game_knowledge,
            team_communication=self.team_communication,
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "owner_id": self.owner_id,
            "collectible_id": self.collectible_id,
            "name": self.name,
            "position": self.position,
            "uri": self.uri,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
            **self.attributes(),
            "form": self.form,
            "potential": self.potential,
            "rarity": self.rarity.value,
            "is_exclusive": self.is_exclusive,
            "game_data": _hex(self.game_data),
            "special_abilities": [a.to_dict() for a in self.special_abilities],
            "performance_history": [p.to_dict() for p in self.performance_history],
            "experience": self.experience,
            "matches_played": self.matches_played,
            "wins": self.wins,
            "mvp_count": self.mvp_count,
        }
        if self.creator_id is not None:
            d["creator_id"] = self.creator_id
        if self.team_id is not None:
            d["team_id"] = self.team_id
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Athlete:
        return cls(
            id=d["id"],
            owner_id=d["owner_id"],
            collectible_id=d["collectible_id"],
            name=d["name"],
            position=d["position"],
            uri=d["uri"],
            created_at=d["created_at"],
            last_updated=d["last_updated"],
            mechanical=d["mechanical"],
            game_knowledge=d["game_knowledge"],
            team_communication=d["team_communication"],
            adaptability=d["adaptability"],
            consistency=d["consistency"],
            form=d["form"],
            potential=d["potential"],
            rarity=Rarity(d["rarity"]),
            is_exclusive=d.get("is_exclusive", False),
            creator_id=d.get("creator_id"),
            team_id=d.get("team_id"),
            game_data=_unhex(d.get("game_data")),
            special_abilities=[SpecialAbility.from_dict(a) for a in d.get("special_abilities", [])],
            performance_history=[MatchPerformance.from_dict(p) for p in d.get("performance_history", [])],
            experience=d.get("experience", 0),
            matches_played=d.get("matches_played", 0),
            wins=d.get("wins", 0),
            mvp_count=d.get("mvp_count", 0),
        )


# ---------- Team ----------
@dataclass
class RosterEntry:
    """Binds one athlete to one position on a team."""
    athlete_id: str
    position: str
    added_at: int

    def to_dict(self) -> dict[str, Any]:
        return {"athlete_id": self.athlete_id, "position": self.position, "added_at": self.added_at}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RosterEntry:
        return cls(athlete_id=d["athlete_id"], position=d["position"], added_at=d["added_at"])


@dataclass
class TeamStatistics:
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    tournament_wins: int = 0
    avg_mechanical: int = 0
    avg_game_knowledge: int = 0
    avg_team_communication: int = 0
    synergy_score: int = 0  # derived from average roster tenure

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches_played": self.matches_played,
            "wins": self.wins,
            "losses": self.losses,
            "tournament_wins": self.tournament_wins,
            "avg_mechanical": self.avg_mechanical,
            "avg_game_knowledge": self.avg_game_knowledge,
            "avg_team_communication": self.avg_team_communication,
            "synergy_score": self.synergy_score,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TeamStatistics:
        return cls(**{k: d.get(k, 0) for k in cls().to_dict()})


@dataclass
class TeamMatchResult:
    """score is [team_score, opponent_score]."""
    match_id: str
    timestamp: int
    opponent_id: str
    win: bool
    score: tuple[int, int]
    tournament_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "match_id": self.match_id,
            "timestamp": self.timestamp,
            "opponent_id": self.opponent_id,
            "win": self.win,
            "score": list(self.score),
        }
        if self.tournament_id is not None:
            d["tournament_id"] = self.tournament_id
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TeamMatchResult:
        return cls(
            match_id=d["match_id"],
            timestamp=d["timestamp"],
            opponent_id=d["opponent_id"],
            win=d["win"],
            score=tuple(d["score"]),
            tournament_id=d.get("tournament_id"),
        )


@dataclass
class Team:
    """
    A roster of at most 5 athletes, one per position.
    match_history keeps the 10 most recent results, oldest first.
    """
    id: str
    owner_id: str
    name: str
    logo_uri: str
    created_at: int
    last_updated: int
    roster: list[RosterEntry] = field(default_factory=list)
    statistics: TeamStatistics = field(default_factory=TeamStatistics)
    match_history: list[TeamMatchResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "logo_uri": self.logo_uri,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
            "roster": [r.to_dict() for r in self.roster],
            "statistics": self.statistics.to_dict(),
            "match_history": [m.to_dict() for m in self.match_history],
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Team:
        return cls(
            id=d["id"],
            owner_id=d["owner_id"],
            name=d["name"],
            logo_uri=d["logo_uri"],
            created_at=d["created_at"],
            last_updated=d["last_updated"],
            roster=[RosterEntry.from_dict(r) for r in d.get("roster", [])],
            statistics=TeamStatistics.from_dict(d.get("statistics", {})),
            match_history=[TeamMatchResult.from_dict(m) for m in d.get("match_history", [])],
        )


# ---------- Tournament ----------
@dataclass
class TournamentMatch:
    """
    One bracket match. winner_id is None until recorded.
    Immutable once completed.
    """
    match_id: str
    team_a_id: str
    team_b_id: str
    round: int
    winner_id: str | None = None
    score: tuple[int, int] = (0, 0)
    completed: bool = False
    timestamp: int = 0  # set when the result is recorded
    match_data: bytes = b""

    def involves(self, first: str, second: str) -> bool:
        return {self.team_a_id, self.team_b_id} == {first, second}

    def to_dict(self) -> dict[str, Any]:
        return {
            "match_id": self.match_id,
            "team_a_id": self.team_a_id,
            "team_b_id": self.team_b_id,
            "round": self.round,
            "winner_id": self.winner_id,
            "score": list(self.score),
            "completed": self.completed,
            "timestamp": self.timestamp,
            "match_data": _hex(self.match_data),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TournamentMatch:
        return cls(
            match_id=d["match_id"],
            team_a_id=d["team_a_id"],
            team_b_id=d["team_b_id"],
            round=d["round"],
            winner_id=d.get("winner_id"),
            score=tuple(d.get("score", (0, 0))),
            completed=d.get("completed", False),
            timestamp=d.get("timestamp", 0),
            match_data=_unhex(d.get("match_data")),
        )


@dataclass
class Tournament:
    """Single-elimination tournament. Seeded automatically once registration fills."""
    id: str
    authority_id: str
    name: str
    entry_fee: int
    start_time: int
    max_teams: int
    created_at: int
    prize_pool: int = 0
    last_updated: int = 0
    end_time: int | None = None
    status: TournamentStatus = TournamentStatus.REGISTRATION
    registered_teams: list[str] = field(default_factory=list)
    matches: list[TournamentMatch] = field(default_factory=list)

    def matches_in_round(self, round_number: int) -> list[TournamentMatch]:
        return [m for m in self.matches if m.round == round_number]

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "authority_id": self.authority_id,
            "name": self.name,
            "entry_fee": self.entry_fee,
            "prize_pool": self.prize_pool,
            "start_time": self.start_time,
            "max_teams": self.max_teams,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
            "status": self.status.value,
            "registered_teams": list(self.registered_teams),
            "matches": [m.to_dict() for m in self.matches],
        }
        if self.end_time is not None:
            d["end_time"] = self.end_time
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Tournament:
        return cls(
            id=d["id"],
            authority_id=d["authority_id"],
            name=d["name"],
            entry_fee=d["entry_fee"],
            start_time=d["start_time"],
            max_teams=d["max_teams"],
            created_at=d["created_at"],
            last_updated=d.get("last_updated", d["created_at"]),
            prize_pool=d.get("prize_pool", 0),
            end_time=d.get("end_time"),
            status=TournamentStatus(d.get("status", TournamentStatus.REGISTRATION.value)),
            registered_teams=list(d.get("registered_teams", [])),
            matches=[TournamentMatch.from_dict(m) for m in d.get("matches", [])],
        )


# ---------- Creator ----------
@dataclass
class Creator:
    """
    A registered creator allowed to mint exclusive athletes once verified.
    fee_basis_points: 0-1000 (0-10%).
    """
    id: str
    authority_id: str
    name: str
    fee_basis_points: int
    created_at: int
    verified: bool = False
    collections_created: list[str] = field(default_factory=list)
    total_athletes_created: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "authority_id": self.authority_id,
            "name": self.name,
            "fee_basis_points": self.fee_basis_points,
            "created_at": self.created_at,
            "verified": self.verified,
            "collections_created": list(self.collections_created),
            "total_athletes_created": self.total_athletes_created,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Creator:
        return cls(
            id=d["id"],
            authority_id=d["authority_id"],
            name=d["name"],
            fee_basis_points=d["fee_basis_points"],
            created_at=d["created_at"],
            verified=d.get("verified", False),
            collections_created=list(d.get("collections_created", [])),
            total_athletes_created=d.get("total_athletes_created", 0),
        )


# ---------- User ----------
@dataclass
class User:
    """An API account. password_hash is never plain text."""
    id: str
    username: str
    password_hash: str
    created_at: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "created_at": self.created_at}
