"""
Service layer: loads entities, runs the capability check, applies engine
rules and persists the result. The engine itself never touches the store.
"""
from .athlete_service import AthleteService
from .team_service import TeamService
from .tournament_service import TournamentService
from .creator_service import CreatorService

__all__ = [
    "AthleteService",
    "TeamService",
    "TournamentService",
    "CreatorService",
]
