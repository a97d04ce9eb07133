"""
Persistence layer: keyed entity store on SQLite.
No business logic, only read/write interfaces.
"""
from .db import get_connection, init_db, set_db_path, get_db_path, transaction
from .repositories import (
    UserRepository,
    CreatorRepository,
    AthleteRepository,
    TeamRepository,
    TournamentRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "get_db_path",
    "transaction",
    "UserRepository",
    "CreatorRepository",
    "AthleteRepository",
    "TeamRepository",
    "TournamentRepository",
]
