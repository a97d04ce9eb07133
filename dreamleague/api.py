"""
REST API for the dream league engine.
Thin wrappers around the services; every mutating route needs a bearer token.
Byte payloads (game_data, stats, match_data) travel as hex strings.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from dreamleague.auth import create_access_token, decode_token, hash_password, verify_password
from dreamleague.config import configure_logging, get_settings
from dreamleague.errors import DreamLeagueError, EntityNotFoundError, UnauthorizedError
from dreamleague.models import AthleteStats, TournamentStatus, TrainingType
from dreamleague.persistence import UserRepository, get_connection, get_db_path, init_db, transaction
from dreamleague.services import AthleteService, CreatorService, TeamService, TournamentService

logger = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    init_db(db_path=get_db_path())
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="Dream League API",
    description="Athlete progression, team rosters and single-elimination tournaments",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DreamLeagueError)
async def dreamleague_error_handler(request: Request, exc: DreamLeagueError) -> JSONResponse:
    if isinstance(exc, EntityNotFoundError):
        status_code = 404
    elif isinstance(exc, UnauthorizedError):
        status_code = 403
    else:
        status_code = 400
    logger.debug("%s %s rejected: %s (%s)", request.method, request.url.path, exc, exc.code)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


# ---------- Auth ----------

security = HTTPBearer(auto_error=False)


def _get_current_user_id(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str | None:
    """Return user_id from JWT or None if no/invalid token."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


def _require_user(user_id: str | None = Depends(_get_current_user_id)) -> str:
    if user_id is None:
        raise HTTPException(status_code=401, detail="Login required")
    return user_id


def _hex(value: str, field_name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{field_name} must be a hex string")


# ---------- Request models ----------


class SignupRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterCreatorRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    fee_basis_points: int = Field(..., description="0-1000 (0-10%)")


class MintAthleteRequest(BaseModel):
    collectible_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    position: str = Field(..., min_length=1, max_length=50)
    uri: str = ""
    game_data: str = Field("", description="hex")


class PredefinedStats(BaseModel):
    mechanical: int
    game_knowledge: int
    team_communication: int
    adaptability: int
    consistency: int
    potential: int
    form: int


class MintExclusiveRequest(MintAthleteRequest):
    predefined_stats: PredefinedStats | None = None
    collection_id: str | None = None
    owner_id: str | None = Field(None, description="Recipient; default is the creator's own account")


class MatchResultRequest(BaseModel):
    match_id: str = Field(..., min_length=1)
    win: bool
    mvp: bool = False
    exp_gained: int = 0
    attribute_deltas: list[int] = Field(..., description="mechanical, game_knowledge, team_communication, adaptability, consistency")
    form_delta: int = 0
    stats: str = Field("", description="hex")


class TrainRequest(BaseModel):
    training_type: TrainingType
    intensity: int


class GrantAbilityRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: int


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    logo_uri: str = ""


class AddToRosterRequest(BaseModel):
    athlete_id: str
    position: str = Field(..., min_length=1, max_length=50)


class CreateTournamentRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    entry_fee: int
    start_time: int = Field(..., description="Unix seconds; must be in the future")
    max_teams: int


class RegisterTeamRequest(BaseModel):
    team_id: str


class RecordResultRequest(BaseModel):
    match_id: str
    winner_id: str
    loser_id: str
    score: list[int] = Field(..., description="[winner_score, loser_score]")
    match_data: str = Field("", description="hex")


# ---------- Users ----------


@app.post("/signup")
def signup(req: SignupRequest) -> dict[str, Any]:
    """Create account. Passwords hashed, never stored plain."""
    with db_conn() as conn:
        user_repo = UserRepository()
        with transaction(conn):
            if user_repo.get_by_username(conn, req.username):
                raise HTTPException(status_code=400, detail="Username already taken")
            user = user_repo.create(conn, req.username, hash_password(req.password))
        token = create_access_token(user.id)
        return {"user_id": user.id, "username": user.username, "token": token}


@app.post("/login")
def login(req: LoginRequest) -> dict[str, Any]:
    """Returns JWT token."""
    with db_conn() as conn:
        user = UserRepository().get_by_username(conn, req.username)
        if user is None or not verify_password(req.password, user.password_hash):
            raise HTTPException(status_code=401, detail="Invalid username or password")
        token = create_access_token(user.id)
        return {"user_id": user.id, "username": user.username, "token": token}


# ---------- Creators ----------


@app.post("/creators")
def register_creator(req: RegisterCreatorRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        creator = CreatorService().register_creator(conn, user_id, req.name, req.fee_basis_points)
        return creator.to_dict()


@app.get("/creators/{creator_id}")
def get_creator(creator_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return CreatorService().get_creator(conn, creator_id).to_dict()


@app.post("/creators/{creator_id}/verify")
def verify_creator(creator_id: str, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    """Admin only."""
    with db_conn() as conn:
        return CreatorService().verify_creator(conn, user_id, creator_id).to_dict()


# ---------- Athletes ----------


@app.post("/athletes")
def mint_athlete(req: MintAthleteRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    game_data = _hex(req.game_data, "game_data")
    with db_conn() as conn:
        athlete = AthleteService().mint_athlete(
            conn, user_id, req.collectible_id, req.name, req.position, req.uri, game_data
        )
        return athlete.to_dict()


@app.post("/athletes/exclusive")
def mint_exclusive_athlete(req: MintExclusiveRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    """Caller must be a verified creator."""
    game_data = _hex(req.game_data, "game_data")
    predefined = AthleteStats(**req.predefined_stats.model_dump()) if req.predefined_stats else None
    with db_conn() as conn:
        athlete = AthleteService().mint_exclusive_athlete(
            conn,
            user_id,
            req.collectible_id,
            req.name,
            req.position,
            req.uri,
            predefined_stats=predefined,
            collection_id=req.collection_id,
            owner_id=req.owner_id,
            game_data=game_data,
        )
        return athlete.to_dict()


@app.get("/athletes")
def list_my_athletes(user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        athletes = AthleteService().list_owned(conn, user_id)
        return {"athletes": [a.to_dict() for a in athletes]}


@app.get("/athletes/{athlete_id}")
def get_athlete(athlete_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return AthleteService().get_athlete(conn, athlete_id).to_dict()


@app.post("/athletes/{athlete_id}/match-result")
def apply_match_result(
    athlete_id: str, req: MatchResultRequest, user_id: str = Depends(_require_user)
) -> dict[str, Any]:
    stats = _hex(req.stats, "stats")
    with db_conn() as conn:
        athlete = AthleteService().apply_match_result(
            conn,
            user_id,
            athlete_id,
            req.match_id,
            req.win,
            req.mvp,
            req.exp_gained,
            req.attribute_deltas,
            req.form_delta,
            stats,
        )
        return athlete.to_dict()


@app.post("/athletes/{athlete_id}/train")
def train_athlete(athlete_id: str, req: TrainRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        athlete, improvement = AthleteService().train(conn, user_id, athlete_id, req.training_type, req.intensity)
        return {"athlete": athlete.to_dict(), "improvement": improvement}


@app.post("/athletes/{athlete_id}/abilities")
def grant_ability(athlete_id: str, req: GrantAbilityRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return AthleteService().grant_ability(conn, user_id, athlete_id, req.name, req.value).to_dict()


# ---------- Teams ----------


@app.post("/teams")
def create_team(req: CreateTeamRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return TeamService().create_team(conn, user_id, req.name, req.logo_uri).to_dict()


@app.get("/teams")
def list_my_teams(user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"teams": [t.to_dict() for t in TeamService().list_owned(conn, user_id)]}


@app.get("/teams/{team_id}")
def get_team(team_id: str) -> dict[str, Any]:
    """Team plus its member athletes."""
    with db_conn() as conn:
        svc = TeamService()
        out = svc.get_team(conn, team_id).to_dict()
        out["athletes"] = [a.to_dict() for a in svc.list_members(conn, team_id)]
        return out


@app.post("/teams/{team_id}/roster")
def add_to_roster(team_id: str, req: AddToRosterRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return TeamService().add_athlete(conn, user_id, team_id, req.athlete_id, req.position).to_dict()


@app.delete("/teams/{team_id}/roster/{athlete_id}")
def remove_from_roster(team_id: str, athlete_id: str, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        return TeamService().remove_athlete(conn, user_id, team_id, athlete_id).to_dict()


# ---------- Tournaments ----------


@app.post("/tournaments")
def create_tournament(req: CreateTournamentRequest, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    with db_conn() as conn:
        tournament = TournamentService().create_tournament(
            conn, user_id, req.name, req.entry_fee, req.start_time, req.max_teams
        )
        return tournament.to_dict()


@app.get("/tournaments")
def list_tournaments(status: TournamentStatus | None = None) -> dict[str, Any]:
    with db_conn() as conn:
        tournaments = TournamentService().list_tournaments(conn, status)
        return {"tournaments": [t.to_dict() for t in tournaments]}


@app.get("/tournaments/{tournament_id}")
def get_tournament(tournament_id: str) -> dict[str, Any]:
    """Includes the champion once completed."""
    with db_conn() as conn:
        svc = TournamentService()
        tournament = svc.get_tournament(conn, tournament_id)
        out = tournament.to_dict()
        out["champion_id"] = svc.champion(tournament)
        return out


@app.post("/tournaments/{tournament_id}/register")
def register_team(
    tournament_id: str, req: RegisterTeamRequest, user_id: str = Depends(_require_user)
) -> dict[str, Any]:
    with db_conn() as conn:
        return TournamentService().register_team(conn, user_id, tournament_id, req.team_id).to_dict()


@app.post("/tournaments/{tournament_id}/results")
def record_result(
    tournament_id: str, req: RecordResultRequest, user_id: str = Depends(_require_user)
) -> dict[str, Any]:
    match_data = _hex(req.match_data, "match_data")
    with db_conn() as conn:
        svc = TournamentService()
        match = svc.record_match_result(
            conn, user_id, tournament_id, req.match_id, req.winner_id, req.loser_id, req.score, match_data
        )
        tournament = svc.get_tournament(conn, tournament_id)
        return {"match": match.to_dict(), "tournament": tournament.to_dict()}


@app.post("/tournaments/{tournament_id}/cancel")
def cancel_tournament(tournament_id: str, user_id: str = Depends(_require_user)) -> dict[str, Any]:
    """Admin only."""
    with db_conn() as conn:
        return TournamentService().cancel_tournament(conn, user_id, tournament_id).to_dict()


# ---------- Run with: uvicorn dreamleague.api:app --reload ----------
