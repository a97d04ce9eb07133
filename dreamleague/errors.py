"""
Failure kinds raised by the engine and services.
Every operation either applies fully or raises one of these before mutating anything.
"""
from __future__ import annotations


class DreamLeagueError(ValueError):
    """Base class. code is a stable identifier for API clients."""
    code = "error"


# ---------- Athlete ----------


class DuplicateAbilityError(DreamLeagueError):
    """Athlete already has an ability with this name."""
    code = "duplicate_ability"


class AthleteAlreadyOnTeamError(DreamLeagueError):
    """Athlete is already on a team; remove it first."""
    code = "athlete_already_on_team"


# ---------- Roster ----------


class RosterFullError(DreamLeagueError):
    """Team roster already has the maximum number of athletes."""
    code = "roster_full"


class PositionFilledError(DreamLeagueError):
    """Another roster entry already holds this position."""
    code = "position_filled"


class NotOnTeamError(DreamLeagueError):
    """Athlete is not on this team."""
    code = "not_on_team"


# ---------- Parameters ----------


class InvalidParametersError(DreamLeagueError):
    """Arguments outside their allowed range."""
    code = "invalid_parameters"


class InvalidFeeBasisPointsError(InvalidParametersError):
    """Creator fee must be between 0 and 1000 basis points (0-10%)."""
    code = "invalid_fee_basis_points"


# ---------- Tournament ----------


class TournamentClosedError(DreamLeagueError):
    """Registration is over (tournament started, finished or canceled)."""
    code = "tournament_closed"


class TournamentFullError(DreamLeagueError):
    code = "tournament_full"


class AlreadyRegisteredError(DreamLeagueError):
    code = "already_registered"


class MatchNotFoundError(DreamLeagueError):
    """No bracket match between these two teams."""
    code = "match_not_found"


class AlreadyRecordedError(DreamLeagueError):
    code = "already_recorded"


class WrongStatusError(DreamLeagueError):
    """Operation not allowed in the tournament's current status."""
    code = "wrong_status"


# ---------- Collaborators ----------


class CreatorNotVerifiedError(DreamLeagueError):
    code = "creator_not_verified"


class UnauthorizedError(DreamLeagueError):
    """Caller is not the recorded controller of the target entity."""
    code = "unauthorized"


class EntityNotFoundError(DreamLeagueError):
    code = "not_found"
