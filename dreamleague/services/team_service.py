"""
Team operations over the store: create, roster changes.
Roster changes write both the team and the athlete's team_id in one transaction.
"""
from __future__ import annotations

import logging
import sqlite3

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.engine.roster import RosterManager
from dreamleague.errors import AthleteAlreadyOnTeamError, InvalidParametersError
from dreamleague.models import Athlete, Team
from dreamleague.persistence.db import transaction
from dreamleague.persistence.repositories import AthleteRepository, TeamRepository
from dreamleague.services.base import require_controller, require_found

logger = logging.getLogger(__name__)


class TeamService:
    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock
        self._team_repo = TeamRepository()
        self._athlete_repo = AthleteRepository()

    def _roster(self, conn: sqlite3.Connection) -> RosterManager:
        """Roster manager whose averages read members from this connection."""
        return RosterManager(
            clock=self._clock,
            athlete_lookup=lambda athlete_id: self._athlete_repo.get_snapshot(conn, athlete_id),
        )

    def get_team(self, conn: sqlite3.Connection, team_id: str) -> Team:
        return require_found(self._team_repo.get(conn, team_id), "Team", team_id)

    def create_team(self, conn: sqlite3.Connection, caller_id: str, name: str, logo_uri: str) -> Team:
        with transaction(conn):
            if self._team_repo.get_by_owner_and_name(conn, caller_id, name) is not None:
                raise InvalidParametersError(f"You already have a team named '{name}'")
            team = self._roster(conn).create_team(caller_id, name, logo_uri)
            self._team_repo.save(conn, team)
        logger.info("Team %s created by %s", team.id, caller_id)
        return team

    def add_athlete(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        team_id: str,
        athlete_id: str,
        position: str,
    ) -> Team:
        with transaction(conn):
            team = self.get_team(conn, team_id)
            require_controller(team.owner_id, caller_id, "team", team_id)
            athlete = require_found(self._athlete_repo.get(conn, athlete_id), "Athlete", athlete_id)
            require_controller(athlete.owner_id, caller_id, "athlete", athlete_id)
            if athlete.team_id is not None:
                raise AthleteAlreadyOnTeamError(f"Athlete {athlete_id} is already on team {athlete.team_id}")
            self._roster(conn).add_athlete(team, athlete_id, position)
            athlete.team_id = team.id
            self._athlete_repo.save(conn, athlete)
            self._team_repo.save(conn, team)
        logger.info("Athlete %s joined team %s as %s", athlete_id, team_id, position)
        return team

    def remove_athlete(self, conn: sqlite3.Connection, caller_id: str, team_id: str, athlete_id: str) -> Team:
        with transaction(conn):
            team = self.get_team(conn, team_id)
            require_controller(team.owner_id, caller_id, "team", team_id)
            self._roster(conn).remove_athlete(team, athlete_id)
            athlete = self._athlete_repo.get(conn, athlete_id)
            if athlete is not None and athlete.team_id == team.id:
                athlete.team_id = None
                self._athlete_repo.save(conn, athlete)
            self._team_repo.save(conn, team)
        logger.info("Athlete %s left team %s", athlete_id, team_id)
        return team

    def list_owned(self, conn: sqlite3.Connection, owner_id: str) -> list[Team]:
        return self._team_repo.list_by_owner(conn, owner_id)

    def list_members(self, conn: sqlite3.Connection, team_id: str) -> list[Athlete]:
        """Athletes whose team_id points at this team, in mint order."""
        team = self.get_team(conn, team_id)
        return self._athlete_repo.list_by_team(conn, team.id)
