"""
Tournament operations over the store.
Recording a result saves the tournament and both teams in one transaction.
"""
from __future__ import annotations

import logging
import sqlite3

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.engine.competition import CompetitionEngine
from dreamleague.engine.roster import RosterManager
from dreamleague.errors import InvalidParametersError, UnauthorizedError
from dreamleague.models import Tournament, TournamentMatch, TournamentStatus
from dreamleague.persistence.db import transaction
from dreamleague.persistence.repositories import AthleteRepository, TeamRepository, TournamentRepository
from dreamleague.services.base import AdminCheck, default_admin_check, require_controller, require_found

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, clock: Clock = system_clock, is_admin: AdminCheck = default_admin_check) -> None:
        self._clock = clock
        self._is_admin = is_admin
        self._tournament_repo = TournamentRepository()
        self._team_repo = TeamRepository()
        self._athlete_repo = AthleteRepository()

    def _engine(self, conn: sqlite3.Connection) -> CompetitionEngine:
        roster = RosterManager(
            clock=self._clock,
            athlete_lookup=lambda athlete_id: self._athlete_repo.get_snapshot(conn, athlete_id),
        )
        return CompetitionEngine(clock=self._clock, roster=roster)

    def get_tournament(self, conn: sqlite3.Connection, tournament_id: str) -> Tournament:
        return require_found(self._tournament_repo.get(conn, tournament_id), "Tournament", tournament_id)

    def list_tournaments(self, conn: sqlite3.Connection, status: TournamentStatus | None = None) -> list[Tournament]:
        return self._tournament_repo.list_all(conn, status)

    def create_tournament(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        name: str,
        entry_fee: int,
        start_time: int,
        max_teams: int,
    ) -> Tournament:
        with transaction(conn):
            if self._tournament_repo.get_by_authority_and_name(conn, caller_id, name) is not None:
                raise InvalidParametersError(f"You already have a tournament named '{name}'")
            tournament = self._engine(conn).create_tournament(caller_id, name, entry_fee, start_time, max_teams)
            self._tournament_repo.save(conn, tournament)
        logger.info("Tournament %s created by %s (%d teams)", tournament.id, caller_id, max_teams)
        return tournament

    def register_team(self, conn: sqlite3.Connection, caller_id: str, tournament_id: str, team_id: str) -> Tournament:
        """The caller must own the team being registered."""
        with transaction(conn):
            tournament = self.get_tournament(conn, tournament_id)
            team = require_found(self._team_repo.get(conn, team_id), "Team", team_id)
            require_controller(team.owner_id, caller_id, "team", team_id)
            started = self._engine(conn).register_team(tournament, team.id)
            self._tournament_repo.save(conn, tournament)
        if started:
            logger.info("Tournament %s is full; round 1 seeded", tournament_id)
        return tournament

    def record_match_result(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        tournament_id: str,
        match_id: str,
        winner_id: str,
        loser_id: str,
        score,
        match_data: bytes = b"",
    ) -> TournamentMatch:
        """Only the tournament authority records results."""
        with transaction(conn):
            tournament = self.get_tournament(conn, tournament_id)
            require_controller(tournament.authority_id, caller_id, "tournament", tournament_id)
            winner = require_found(self._team_repo.get(conn, winner_id), "Team", winner_id)
            loser = require_found(self._team_repo.get(conn, loser_id), "Team", loser_id)
            match = self._engine(conn).record_match_result(tournament, match_id, winner, loser, score, match_data)
            self._tournament_repo.save(conn, tournament)
            self._team_repo.save(conn, winner)
            self._team_repo.save(conn, loser)
        return match

    def cancel_tournament(self, conn: sqlite3.Connection, caller_id: str, tournament_id: str) -> Tournament:
        """Admin action. Entry fees are not refunded here."""
        if not self._is_admin(caller_id):
            raise UnauthorizedError("Only an admin can cancel a tournament")
        with transaction(conn):
            tournament = self.get_tournament(conn, tournament_id)
            self._engine(conn).cancel(tournament)
            self._tournament_repo.save(conn, tournament)
        return tournament

    @staticmethod
    def champion(tournament: Tournament) -> str | None:
        return CompetitionEngine.champion(tournament)
