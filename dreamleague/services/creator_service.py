"""
Creator registry: registration and admin verification.
Only verified creators can mint exclusive athletes.
"""
from __future__ import annotations

import logging
import sqlite3
import uuid

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.errors import InvalidFeeBasisPointsError, InvalidParametersError, UnauthorizedError
from dreamleague.models import Creator
from dreamleague.persistence.db import transaction
from dreamleague.persistence.repositories import CreatorRepository
from dreamleague.services.base import AdminCheck, default_admin_check, require_found

logger = logging.getLogger(__name__)

MAX_FEE_BASIS_POINTS = 1000  # 10%


class CreatorService:
    def __init__(self, clock: Clock = system_clock, is_admin: AdminCheck = default_admin_check) -> None:
        self._clock = clock
        self._is_admin = is_admin
        self._creator_repo = CreatorRepository()

    def get_creator(self, conn: sqlite3.Connection, creator_id: str) -> Creator:
        return require_found(self._creator_repo.get(conn, creator_id), "Creator", creator_id)

    def register_creator(self, conn: sqlite3.Connection, caller_id: str, name: str, fee_basis_points: int) -> Creator:
        """New creators start unverified."""
        if not 0 <= fee_basis_points <= MAX_FEE_BASIS_POINTS:
            raise InvalidFeeBasisPointsError("Fee basis points must be between 0-1000 (0-10%)")
        with transaction(conn):
            if self._creator_repo.get_by_authority(conn, caller_id) is not None:
                raise InvalidParametersError("You are already registered as a creator")
            creator = Creator(
                id=str(uuid.uuid4()),
                authority_id=caller_id,
                name=name,
                fee_basis_points=fee_basis_points,
                created_at=self._clock(),
            )
            self._creator_repo.save(conn, creator)
        logger.info("Creator %s registered by %s", creator.id, caller_id)
        return creator

    def verify_creator(self, conn: sqlite3.Connection, caller_id: str, creator_id: str) -> Creator:
        if not self._is_admin(caller_id):
            raise UnauthorizedError("Only an admin can verify creators")
        with transaction(conn):
            creator = self.get_creator(conn, creator_id)
            creator.verified = True
            self._creator_repo.save(conn, creator)
        logger.info("Creator %s verified by %s", creator_id, caller_id)
        return creator
