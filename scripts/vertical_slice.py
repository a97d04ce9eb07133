#!/usr/bin/env python3
"""
Vertical slice: Mint athletes -> Build rosters -> Run a 4-team cup -> Retrieve.
Run from project root: python3 scripts/vertical_slice.py
"""
from __future__ import annotations

import random
import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dreamleague.config import configure_logging
from dreamleague.engine import FixedClock
from dreamleague.persistence import get_connection, init_db, set_db_path
from dreamleague.services import AthleteService, TeamService, TournamentService

POSITIONS = ["top", "jungle", "mid", "carry", "support"]
ORGANIZER = "slice-organizer"


def main() -> None:
    configure_logging("INFO")
    # Use data/vertical_slice.db for demo (distinct from dreamleague.db)
    db_path = PROJECT_ROOT / "data" / "vertical_slice.db"
    if db_path.exists():
        db_path.unlink()
    set_db_path(db_path)
    init_db(db_path=db_path)

    clock = FixedClock(1_700_000_000)
    athletes = AthleteService(clock=clock)
    teams = TeamService(clock=clock)
    tournaments = TournamentService(clock=clock, is_admin=lambda user_id: user_id == ORGANIZER)
    rng = random.Random(99999)

    conn = get_connection()
    try:
        # 1. Four owners, each with a full roster
        team_ids = []
        owners = {}
        for t in range(4):
            owner = f"slice-owner-{t}"
            team = teams.create_team(conn, owner, f"Squad {t}", "")
            for p, position in enumerate(POSITIONS):
                clock.advance(7)
                athlete = athletes.mint_athlete(conn, owner, f"nft-{t}-{p}", f"Player {t}.{p}", position, "")
                teams.add_athlete(conn, owner, team.id, athlete.id, position)
            team = teams.get_team(conn, team.id)
            print(f"Created team {team.name} (id={team.id}) avg mechanical {team.statistics.avg_mechanical}")
            team_ids.append(team.id)
            owners[team.id] = owner

        # 2. Tournament fills and seeds itself
        cup = tournaments.create_tournament(conn, ORGANIZER, "Slice Cup", 25, clock() + 3600, 4)
        for team_id in team_ids:
            cup = tournaments.register_team(conn, owners[team_id], cup.id, team_id)
        print(f"Tournament {cup.name}: {cup.status.value}, prize pool {cup.prize_pool}")

        # 3. Play every pending match until a champion emerges
        while True:
            pending = [m for m in cup.matches if not m.completed]
            if not pending:
                break
            for m in pending:
                clock.advance(600)
                winner, loser = (m.team_a_id, m.team_b_id) if rng.random() < 0.5 else (m.team_b_id, m.team_a_id)
                tournaments.record_match_result(conn, ORGANIZER, cup.id, m.match_id, winner, loser, [2, rng.randint(0, 1)])
                print(f"  {m.match_id}: {winner[:8]} beat {loser[:8]}")
            cup = tournaments.get_tournament(conn, cup.id)

        # 4. Retrieve result
        champion_id = tournaments.champion(cup)
        champion = teams.get_team(conn, champion_id)
        print(f"Champion: {champion.name} ({champion.statistics.wins} wins, "
              f"{champion.statistics.tournament_wins} title)")

        print("\nVertical slice complete.")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
