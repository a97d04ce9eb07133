"""
Athlete operations over the store: mint, match results, training, abilities.
Each call loads the athlete, checks the caller owns it, applies the
progression rule and saves inside one transaction.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Sequence

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.engine.progression import AthleteProgression
from dreamleague.errors import InvalidParametersError
from dreamleague.models import Athlete, AthleteStats, TrainingType
from dreamleague.persistence.db import transaction
from dreamleague.persistence.repositories import AthleteRepository, CreatorRepository
from dreamleague.services.base import require_controller, require_found

logger = logging.getLogger(__name__)


class AthleteService:
    def __init__(self, clock: Clock = system_clock) -> None:
        self._progression = AthleteProgression(clock=clock)
        self._athlete_repo = AthleteRepository()
        self._creator_repo = CreatorRepository()

    def get_athlete(self, conn: sqlite3.Connection, athlete_id: str) -> Athlete:
        return require_found(self._athlete_repo.get(conn, athlete_id), "Athlete", athlete_id)

    def _ensure_unused_collectible(self, conn: sqlite3.Connection, collectible_id: str) -> None:
        if self._athlete_repo.get_by_collectible(conn, collectible_id) is not None:
            raise InvalidParametersError(f"Collectible {collectible_id} already has an athlete")

    def mint_athlete(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        collectible_id: str,
        name: str,
        position: str,
        uri: str,
        game_data: bytes = b"",
    ) -> Athlete:
        """Standard athlete owned by the caller."""
        with transaction(conn):
            self._ensure_unused_collectible(conn, collectible_id)
            athlete = self._progression.initialize(caller_id, collectible_id, name, position, uri, game_data)
            self._athlete_repo.save(conn, athlete)
        return athlete

    def mint_exclusive_athlete(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        collectible_id: str,
        name: str,
        position: str,
        uri: str,
        predefined_stats: AthleteStats | None = None,
        collection_id: str | None = None,
        owner_id: str | None = None,
        game_data: bytes = b"",
    ) -> Athlete:
        """
        Exclusive athlete minted by the caller's (verified) creator profile.
        owner_id defaults to the caller.
        """
        with transaction(conn):
            creator = self._creator_repo.get_by_authority(conn, caller_id)
            creator = require_found(creator, "Creator for caller", caller_id)
            self._ensure_unused_collectible(conn, collectible_id)
            athlete = self._progression.initialize(
                owner_id or caller_id,
                collectible_id,
                name,
                position,
                uri,
                game_data,
                exclusive=True,
                creator=creator,
                predefined_stats=predefined_stats,
                collection_id=collection_id,
            )
            self._athlete_repo.save(conn, athlete)
            self._creator_repo.save(conn, creator)
        return athlete

    def apply_match_result(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        athlete_id: str,
        match_id: str,
        win: bool,
        mvp: bool,
        exp_gained: int,
        attribute_deltas: Sequence[int],
        form_delta: int,
        stats: bytes = b"",
    ) -> Athlete:
        with transaction(conn):
            athlete = self.get_athlete(conn, athlete_id)
            require_controller(athlete.owner_id, caller_id, "athlete", athlete_id)
            self._progression.apply_match_result(
                athlete, match_id, win, mvp, exp_gained, attribute_deltas, form_delta, stats
            )
            self._athlete_repo.save(conn, athlete)
        return athlete

    def train(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        athlete_id: str,
        training_type: TrainingType,
        intensity: int,
    ) -> tuple[Athlete, int]:
        """Returns the updated athlete and the improvement applied."""
        with transaction(conn):
            athlete = self.get_athlete(conn, athlete_id)
            require_controller(athlete.owner_id, caller_id, "athlete", athlete_id)
            improvement = self._progression.train(athlete, training_type, intensity)
            self._athlete_repo.save(conn, athlete)
        logger.debug("Athlete %s trained %s (+%d)", athlete_id, TrainingType(training_type).value, improvement)
        return athlete, improvement

    def grant_ability(
        self,
        conn: sqlite3.Connection,
        caller_id: str,
        athlete_id: str,
        name: str,
        value: int,
    ) -> Athlete:
        with transaction(conn):
            athlete = self.get_athlete(conn, athlete_id)
            require_controller(athlete.owner_id, caller_id, "athlete", athlete_id)
            self._progression.grant_ability(athlete, name, value)
            self._athlete_repo.save(conn, athlete)
        return athlete

    def list_owned(self, conn: sqlite3.Connection, owner_id: str) -> list[Athlete]:
        return self._athlete_repo.list_by_owner(conn, owner_id)
