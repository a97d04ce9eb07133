"""
Tournament state machine: registration, bracket seeding, results, completion.

registration -> in_progress   when the last slot is filled (round 1 is seeded)
in_progress  -> completed     when the single match of the highest round is recorded
registration | in_progress -> canceled   admin action only

Round advancement re-derives everything from the match list, so running it
again for a closed round changes nothing.
"""
from __future__ import annotations

import logging
import uuid

from dreamleague.engine.bracket import generate_round, unpaired_entrant
from dreamleague.engine.clock import Clock, system_clock
from dreamleague.engine.roster import RosterManager, validate_score
from dreamleague.errors import (
    AlreadyRecordedError,
    AlreadyRegisteredError,
    InvalidParametersError,
    MatchNotFoundError,
    TournamentClosedError,
    TournamentFullError,
    WrongStatusError,
)
from dreamleague.models import Team, Tournament, TournamentMatch, TournamentStatus

logger = logging.getLogger(__name__)

MIN_TEAMS = 2
MAX_TEAMS = 64

_VALID_TRANSITIONS: dict[TournamentStatus, set[TournamentStatus]] = {
    TournamentStatus.REGISTRATION: {TournamentStatus.IN_PROGRESS, TournamentStatus.CANCELED},
    TournamentStatus.IN_PROGRESS: {TournamentStatus.COMPLETED, TournamentStatus.CANCELED},
    TournamentStatus.COMPLETED: set(),
    TournamentStatus.CANCELED: set(),
}


class CompetitionEngine:
    """
    Owns a tournament's registrations, bracket and status.
    Team win/loss records are written through the RosterManager.
    """

    def __init__(self, clock: Clock = system_clock, roster: RosterManager | None = None) -> None:
        self._clock = clock
        self._roster = roster or RosterManager(clock=clock)

    # ---------- Status ----------

    def transition(self, tournament: Tournament, new_status: TournamentStatus) -> None:
        """Move to new_status if the transition table allows it."""
        current = tournament.status
        allowed = _VALID_TRANSITIONS.get(current, set())
        if new_status not in allowed:
            raise WrongStatusError(
                f"Invalid transition: {current.value} -> {new_status.value}. "
                f"Allowed from {current.value}: {sorted(s.value for s in allowed)}"
            )
        tournament.status = new_status
        logger.info("Tournament %s: %s -> %s", tournament.id, current.value, new_status.value)

    def cancel(self, tournament: Tournament) -> None:
        self.transition(tournament, TournamentStatus.CANCELED)
        tournament.end_time = tournament.last_updated = self._clock()

    # ---------- Creation & registration ----------

    def create_tournament(
        self,
        authority_id: str,
        name: str,
        entry_fee: int,
        start_time: int,
        max_teams: int,
        tournament_id: str | None = None,
    ) -> Tournament:
        now = self._clock()
        if not MIN_TEAMS <= max_teams <= MAX_TEAMS:
            raise InvalidParametersError(f"max_teams must be between {MIN_TEAMS} and {MAX_TEAMS}")
        if start_time <= now:
            raise InvalidParametersError("start_time must be in the future")
        if entry_fee < 0:
            raise InvalidParametersError("entry_fee cannot be negative")
        return Tournament(
            id=tournament_id or str(uuid.uuid4()),
            authority_id=authority_id,
            name=name,
            entry_fee=entry_fee,
            start_time=start_time,
            max_teams=max_teams,
            created_at=now,
            last_updated=now,
        )

    def register_team(self, tournament: Tournament, team_id: str) -> bool:
        """
        Add team_id and its entry fee to the pool. Returns True when this
        registration filled the tournament and round 1 was seeded.
        """
        if tournament.status != TournamentStatus.REGISTRATION:
            raise TournamentClosedError(
                f"Tournament {tournament.id} is not accepting registrations ({tournament.status.value})"
            )
        if len(tournament.registered_teams) >= tournament.max_teams:
            raise TournamentFullError(f"Tournament {tournament.id} is full ({tournament.max_teams})")
        if team_id in tournament.registered_teams:
            raise AlreadyRegisteredError(f"Team {team_id} is already registered")

        tournament.registered_teams.append(team_id)
        tournament.prize_pool += tournament.entry_fee
        tournament.last_updated = self._clock()

        if len(tournament.registered_teams) == tournament.max_teams:
            self._seed_first_round(tournament)
            return True
        return False

    def _seed_first_round(self, tournament: Tournament) -> None:
        self.transition(tournament, TournamentStatus.IN_PROGRESS)
        self._append_round(tournament, list(tournament.registered_teams), 1)

    def _append_round(self, tournament: Tournament, entrants: list[str], round_number: int) -> None:
        left_out = unpaired_entrant(entrants)
        if left_out is not None:
            logger.warning(
                "Tournament %s round %d: odd entrant count %d, team %s is unpaired",
                tournament.id, round_number, len(entrants), left_out,
            )
        for fixture in generate_round(entrants, round_number):
            tournament.matches.append(TournamentMatch(**fixture))

    # ---------- Results ----------

    def find_match(self, tournament: Tournament, first_id: str, second_id: str) -> TournamentMatch:
        for m in tournament.matches:
            if m.involves(first_id, second_id):
                return m
        raise MatchNotFoundError(f"No match between {first_id} and {second_id} in tournament {tournament.id}")

    def record_match_result(
        self,
        tournament: Tournament,
        match_id: str,
        winner: Team,
        loser: Team,
        score,
        match_data: bytes = b"",
    ) -> TournamentMatch:
        """
        Record the result of the match between winner and loser, credit both
        teams, seed the next round once this round is complete and detect
        completion. score is [winner_score, loser_score].
        """
        if tournament.status != TournamentStatus.IN_PROGRESS:
            raise WrongStatusError(
                f"Tournament {tournament.id} must be in progress to record results ({tournament.status.value})"
            )
        pair = validate_score(score)
        if winner.id == loser.id:
            raise InvalidParametersError("winner and loser must be different teams")
        match = self.find_match(tournament, winner.id, loser.id)
        if match.completed:
            raise AlreadyRecordedError(f"Match {match.match_id} has already been recorded")

        now = self._clock()
        match.winner_id = winner.id
        match.score = pair
        match.timestamp = now
        match.completed = True
        match.match_data = bytes(match_data)
        tournament.last_updated = now
        logger.info(
            "Match %s (%s) recorded: %s beat %s %d-%d",
            match_id, match.match_id, winner.id, loser.id, pair[0], pair[1],
        )

        self._roster.record_match(winner, match_id, loser.id, True, pair, tournament.id)
        self._roster.record_match(loser, match_id, winner.id, False, (pair[1], pair[0]), tournament.id)

        self.advance_round(tournament, match.round)
        if self.check_completion(tournament):
            winner.statistics.tournament_wins += 1
        return match

    def advance_round(self, tournament: Tournament, round_number: int) -> bool:
        """
        If every match of round_number is completed, pair its winners into the
        next round. Returns True if a round was generated.
        """
        round_matches = tournament.matches_in_round(round_number)
        if not round_matches or not all(m.completed for m in round_matches):
            return False
        if tournament.matches_in_round(round_number + 1):
            return False
        winners = [m.winner_id for m in round_matches]
        if len(winners) == 1:
            return False
        self._append_round(tournament, winners, round_number + 1)
        return True

    def check_completion(self, tournament: Tournament) -> bool:
        """
        Complete the tournament when the highest round holds exactly one match
        and it is recorded. Returns True only on the call that completes it.
        """
        if tournament.status != TournamentStatus.IN_PROGRESS or not tournament.matches:
            return False
        max_round = max(m.round for m in tournament.matches)
        final_matches = tournament.matches_in_round(max_round)
        if len(final_matches) == 1 and final_matches[0].completed:
            self.transition(tournament, TournamentStatus.COMPLETED)
            tournament.end_time = self._clock()
            logger.info("Tournament %s won by %s", tournament.id, final_matches[0].winner_id)
            return True
        return False

    @staticmethod
    def champion(tournament: Tournament) -> str | None:
        if tournament.status != TournamentStatus.COMPLETED:
            return None
        max_round = max(m.round for m in tournament.matches)
        return tournament.matches_in_round(max_round)[0].winner_id
