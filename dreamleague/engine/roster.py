"""
Roster composition and team aggregates.

Averaged attributes need each member's current values, which live on other
entities. They are read through an AthleteLookup; with no lookup configured
the manager falls back to fixed placeholder averages and says so through
aggregates_are_placeholder.
"""
from __future__ import annotations

import logging
import uuid
from typing import Callable, Optional

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.errors import (
    InvalidParametersError,
    NotOnTeamError,
    PositionFilledError,
    RosterFullError,
)
from dreamleague.models import (
    MAX_ROSTER_SIZE,
    MAX_TEAM_HISTORY,
    AthleteSnapshot,
    RosterEntry,
    Team,
    TeamMatchResult,
    TeamStatistics,
)

logger = logging.getLogger(__name__)

AthleteLookup = Callable[[str], Optional[AthleteSnapshot]]

SECONDS_PER_DAY = 86400
BASE_SYNERGY = 60
MAX_SYNERGY_BONUS = 20

# (avg_mechanical, avg_game_knowledge, avg_team_communication) when no lookup exists
PLACEHOLDER_AVERAGES = (70, 65, 75)


def synergy_score(roster: list[RosterEntry], now: int) -> int:
    """60 plus one point per two days of average tenure, capped at +20."""
    if not roster:
        return 0
    avg_seconds = sum(now - entry.added_at for entry in roster) // len(roster)
    days_together = max(0, avg_seconds // SECONDS_PER_DAY)
    return BASE_SYNERGY + min(MAX_SYNERGY_BONUS, days_together // 2)


def _is_byte(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def validate_score(score) -> tuple[int, int]:
    pair = tuple(score)
    if len(pair) != 2 or not all(_is_byte(s) for s in pair):
        raise InvalidParametersError("score must be two integers between 0 and 255")
    return pair[0], pair[1]


class RosterManager:
    """Owns a team's roster, its aggregate statistics and its match history."""

    def __init__(self, clock: Clock = system_clock, athlete_lookup: AthleteLookup | None = None) -> None:
        self._clock = clock
        self._athlete_lookup = athlete_lookup

    @property
    def aggregates_are_placeholder(self) -> bool:
        return self._athlete_lookup is None

    def create_team(self, owner_id: str, name: str, logo_uri: str, team_id: str | None = None) -> Team:
        now = self._clock()
        return Team(
            id=team_id or str(uuid.uuid4()),
            owner_id=owner_id,
            name=name,
            logo_uri=logo_uri,
            created_at=now,
            last_updated=now,
        )

    def add_athlete(self, team: Team, athlete_id: str, position: str) -> RosterEntry:
        """
        Append athlete at position. Setting athlete.team_id is the caller's job.
        """
        if len(team.roster) >= MAX_ROSTER_SIZE:
            raise RosterFullError(f"Team {team.id} roster is full ({MAX_ROSTER_SIZE})")
        if any(entry.position == position for entry in team.roster):
            raise PositionFilledError(f"Position '{position}' is already filled on team {team.id}")
        now = self._clock()
        entry = RosterEntry(athlete_id=athlete_id, position=position, added_at=now)
        team.roster.append(entry)
        self.recompute_statistics(team, now)
        team.last_updated = now
        return entry

    def remove_athlete(self, team: Team, athlete_id: str) -> RosterEntry:
        for index, entry in enumerate(team.roster):
            if entry.athlete_id == athlete_id:
                break
        else:
            raise NotOnTeamError(f"Athlete {athlete_id} is not on team {team.id}")
        now = self._clock()
        removed = team.roster.pop(index)
        self.recompute_statistics(team, now)
        team.last_updated = now
        return removed

    def recompute_statistics(self, team: Team, now: int | None = None) -> None:
        """Refresh averaged attributes and synergy from the current roster."""
        now = self._clock() if now is None else now
        stats = team.statistics
        if not team.roster:
            stats.avg_mechanical = 0
            stats.avg_game_knowledge = 0
            stats.avg_team_communication = 0
            stats.synergy_score = 0
            return
        stats.avg_mechanical, stats.avg_game_knowledge, stats.avg_team_communication = self._averages(team)
        stats.synergy_score = synergy_score(team.roster, now)

    def _averages(self, team: Team) -> tuple[int, int, int]:
        if self._athlete_lookup is None:
            logger.debug("No athlete lookup configured; team %s uses placeholder averages", team.id)
            return PLACEHOLDER_AVERAGES
        snapshots = [self._athlete_lookup(entry.athlete_id) for entry in team.roster]
        found = [s for s in snapshots if s is not None]
        if len(found) < len(snapshots):
            logger.warning("Team %s: %d roster athletes could not be read", team.id, len(snapshots) - len(found))
        if not found:
            return 0, 0, 0
        n = len(found)
        return (
            sum(s.mechanical for s in found) // n,
            sum(s.game_knowledge for s in found) // n,
            sum(s.team_communication for s in found) // n,
        )

    def record_match(
        self,
        team: Team,
        match_id: str,
        opponent_id: str,
        win: bool,
        score,
        tournament_id: str | None = None,
    ) -> TeamMatchResult:
        """score is [team_score, opponent_score]. Keeps the 10 most recent results."""
        pair = validate_score(score)
        now = self._clock()
        stats: TeamStatistics = team.statistics
        stats.matches_played += 1
        if win:
            stats.wins += 1
        else:
            stats.losses += 1
        result = TeamMatchResult(
            match_id=match_id,
            timestamp=now,
            opponent_id=opponent_id,
            win=win,
            score=pair,
            tournament_id=tournament_id,
        )
        team.match_history.append(result)
        if len(team.match_history) > MAX_TEAM_HISTORY:
            team.match_history.pop(0)
        team.last_updated = now
        return result
