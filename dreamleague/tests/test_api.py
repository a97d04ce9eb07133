"""
API integration tests.
Uses TestClient to avoid starting a server.
Requires: pip install httpx (for TestClient)
"""
from __future__ import annotations

import time

import pytest

try:
    from fastapi.testclient import TestClient
    HAS_HTTPX = True
except (ImportError, RuntimeError):
    HAS_HTTPX = False

pytestmark = pytest.mark.skipif(not HAS_HTTPX, reason="httpx required for TestClient")

from dreamleague.api import app
from dreamleague.config import reset_settings
from dreamleague.persistence.db import init_db, set_db_path


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Use a temporary DB for each test; nobody is admin until the admin fixture runs."""
    monkeypatch.setenv("DREAMLEAGUE_ADMIN_IDS", "placeholder")
    reset_settings()
    db_path = tmp_path / "test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    yield db_path
    reset_settings()


@pytest.fixture
def client():
    return TestClient(app)


def _signup(client, username):
    resp = client.post("/signup", json={"username": username, "password": "secret123"})
    assert resp.status_code == 200
    data = resp.json()
    return data["user_id"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def admin(client, monkeypatch):
    user_id, headers = _signup(client, "root")
    monkeypatch.setenv("DREAMLEAGUE_ADMIN_IDS", user_id)
    reset_settings()
    return user_id, headers


# ---------- Users ----------


def test_signup_and_login(client):
    user_id, _ = _signup(client, "alice")
    resp = client.post("/login", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["user_id"] == user_id
    assert client.post("/login", json={"username": "alice", "password": "wrong-pass"}).status_code == 401


def test_signup_duplicate_username(client):
    _signup(client, "alice")
    resp = client.post("/signup", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 400


def test_mutations_require_token(client):
    resp = client.post("/teams", json={"name": "Falcons"})
    assert resp.status_code == 401
    resp = client.post("/teams", json={"name": "Falcons"}, headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401


# ---------- Athletes ----------


def test_mint_and_get_athlete(client):
    _, headers = _signup(client, "alice")
    resp = client.post(
        "/athletes",
        json={"collectible_id": "nft-1", "name": "Ace", "position": "mid", "game_data": "0a0b"},
        headers=headers,
    )
    assert resp.status_code == 200
    athlete = resp.json()
    assert athlete["form"] == 70
    assert athlete["game_data"] == "0a0b"
    assert 50 <= athlete["mechanical"] <= 80

    resp = client.get(f"/athletes/{athlete['id']}")
    assert resp.status_code == 200
    assert resp.json()["collectible_id"] == "nft-1"
    assert [a["id"] for a in client.get("/athletes", headers=headers).json()["athletes"]] == [athlete["id"]]


def test_mint_rejects_bad_hex(client):
    _, headers = _signup(client, "alice")
    resp = client.post(
        "/athletes",
        json={"collectible_id": "nft-1", "name": "Ace", "position": "mid", "game_data": "zz"},
        headers=headers,
    )
    assert resp.status_code == 400


def test_get_missing_athlete(client):
    resp = client.get("/athletes/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_progress_athlete(client):
    _, headers = _signup(client, "alice")
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=headers
    ).json()
    url = f"/athletes/{athlete['id']}"

    resp = client.post(
        f"{url}/match-result",
        json={"match_id": "m-1", "win": True, "mvp": True, "exp_gained": 40,
              "attribute_deltas": [1, 1, 1, 1, 1], "form_delta": -5, "stats": "ff"},
        headers=headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["matches_played"] == 1
    assert body["form"] == 65
    assert body["performance_history"][0]["stats"] == "ff"

    resp = client.post(f"{url}/train", json={"training_type": "consistency", "intensity": 50}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["improvement"] >= 1

    resp = client.post(f"{url}/abilities", json={"name": "Iron Will", "value": 70}, headers=headers)
    assert resp.status_code == 200
    resp = client.post(f"{url}/abilities", json={"name": "Iron Will", "value": 70}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "duplicate_ability"


def test_other_user_cannot_train(client):
    _, alice = _signup(client, "alice")
    _, bob = _signup(client, "bob")
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=alice
    ).json()
    resp = client.post(
        f"/athletes/{athlete['id']}/train", json={"training_type": "mechanical", "intensity": 50}, headers=bob
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "unauthorized"


def test_train_intensity_out_of_range(client):
    _, headers = _signup(client, "alice")
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=headers
    ).json()
    resp = client.post(
        f"/athletes/{athlete['id']}/train", json={"training_type": "mechanical", "intensity": 300}, headers=headers
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_parameters"


# ---------- Creators ----------


def test_exclusive_mint_flow(client, admin):
    _, admin_headers = admin
    _, creator_headers = _signup(client, "nova")
    creator = client.post("/creators", json={"name": "Nova", "fee_basis_points": 500}, headers=creator_headers).json()
    assert creator["verified"] is False

    payload = {"collectible_id": "nft-x", "name": "Star", "position": "mid"}
    resp = client.post("/athletes/exclusive", json=payload, headers=creator_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "creator_not_verified"

    assert client.post(f"/creators/{creator['id']}/verify", headers=creator_headers).status_code == 403
    resp = client.post(f"/creators/{creator['id']}/verify", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["verified"] is True

    resp = client.post("/athletes/exclusive", json=payload, headers=creator_headers)
    assert resp.status_code == 200
    athlete = resp.json()
    assert athlete["form"] == 80
    assert athlete["special_abilities"][0]["name"] == "Nova Special"
    assert client.get(f"/creators/{creator['id']}").json()["total_athletes_created"] == 1


def test_creator_fee_out_of_range(client):
    _, headers = _signup(client, "nova")
    resp = client.post("/creators", json={"name": "Nova", "fee_basis_points": 1500}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_fee_basis_points"


# ---------- Teams ----------


def test_roster_endpoints(client):
    _, headers = _signup(client, "alice")
    team = client.post("/teams", json={"name": "Falcons"}, headers=headers).json()
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=headers
    ).json()

    resp = client.post(f"/teams/{team['id']}/roster", json={"athlete_id": athlete["id"], "position": "mid"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["statistics"]["avg_mechanical"] == athlete["mechanical"]
    assert client.get(f"/athletes/{athlete['id']}").json()["team_id"] == team["id"]

    resp = client.delete(f"/teams/{team['id']}/roster/{athlete['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["roster"] == []

    resp = client.delete(f"/teams/{team['id']}/roster/{athlete['id']}", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "not_on_team"
    assert [t["id"] for t in client.get("/teams", headers=headers).json()["teams"]] == [team["id"]]


# ---------- Tournaments ----------


def test_tournament_flow(client, admin):
    _, org = _signup(client, "organizer")
    players = [_signup(client, f"player{i}") for i in range(4)]
    team_ids = []
    for i, (_, headers) in enumerate(players):
        team_ids.append(client.post("/teams", json={"name": f"Team {i}"}, headers=headers).json()["id"])

    resp = client.post(
        "/tournaments",
        json={"name": "Spring Cup", "entry_fee": 10, "start_time": int(time.time()) + 3600, "max_teams": 4},
        headers=org,
    )
    assert resp.status_code == 200
    tid = resp.json()["id"]

    for team_id, (_, headers) in zip(team_ids, players):
        resp = client.post(f"/tournaments/{tid}/register", json={"team_id": team_id}, headers=headers)
        assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "in_progress"
    assert body["prize_pool"] == 40

    resp = client.post(f"/tournaments/{tid}/register", json={"team_id": team_ids[0]}, headers=players[0][1])
    assert resp.status_code == 400
    assert resp.json()["code"] == "tournament_closed"

    def record(match_id, winner, loser):
        return client.post(
            f"/tournaments/{tid}/results",
            json={"match_id": match_id, "winner_id": winner, "loser_id": loser, "score": [2, 1]},
            headers=org,
        )

    assert record("R1_M1", team_ids[0], team_ids[3]).status_code == 200
    assert record("R1_M1", team_ids[0], team_ids[3]).json()["code"] == "already_recorded"
    assert record("R1_M2", team_ids[1], team_ids[2]).status_code == 200
    resp = record("R2_M1", team_ids[1], team_ids[0])
    assert resp.status_code == 200
    assert resp.json()["tournament"]["status"] == "completed"

    body = client.get(f"/tournaments/{tid}").json()
    assert body["champion_id"] == team_ids[1]
    listed = client.get("/tournaments", params={"status": "completed"}).json()["tournaments"]
    assert [t["id"] for t in listed] == [tid]
    assert client.get(f"/teams/{team_ids[1]}").json()["statistics"]["tournament_wins"] == 1


def test_results_only_by_authority(client):
    _, org = _signup(client, "organizer")
    _, other = _signup(client, "mallory")
    tid = client.post(
        "/tournaments",
        json={"name": "Cup", "entry_fee": 0, "start_time": int(time.time()) + 3600, "max_teams": 2},
        headers=org,
    ).json()["id"]
    resp = client.post(
        f"/tournaments/{tid}/results",
        json={"match_id": "R1_M1", "winner_id": "a", "loser_id": "b", "score": [1, 0]},
        headers=other,
    )
    assert resp.status_code == 403


def test_cancel_requires_admin(client, admin):
    _, admin_headers = admin
    _, org = _signup(client, "organizer")
    tid = client.post(
        "/tournaments",
        json={"name": "Cup", "entry_fee": 0, "start_time": int(time.time()) + 3600, "max_teams": 2},
        headers=org,
    ).json()["id"]
    assert client.post(f"/tournaments/{tid}/cancel", headers=org).status_code == 403
    resp = client.post(f"/tournaments/{tid}/cancel", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "canceled"


def test_create_tournament_in_past(client):
    _, org = _signup(client, "organizer")
    resp = client.post(
        "/tournaments",
        json={"name": "Cup", "entry_fee": 0, "start_time": 1, "max_teams": 2},
        headers=org,
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_parameters"


def test_team_detail_lists_athletes(client):
    _, headers = _signup(client, "alice")
    team = client.post("/teams", json={"name": "Falcons"}, headers=headers).json()
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=headers
    ).json()
    assert client.get(f"/teams/{team['id']}").json()["athletes"] == []
    client.post(f"/teams/{team['id']}/roster", json={"athlete_id": athlete["id"], "position": "mid"}, headers=headers)
    body = client.get(f"/teams/{team['id']}").json()
    assert [a["id"] for a in body["athletes"]] == [athlete["id"]]
    assert body["athletes"][0]["team_id"] == team["id"]


def test_ability_value_out_of_range(client):
    _, headers = _signup(client, "alice")
    athlete = client.post(
        "/athletes", json={"collectible_id": "nft-1", "name": "Ace", "position": "mid"}, headers=headers
    ).json()
    resp = client.post(f"/athletes/{athlete['id']}/abilities", json={"name": "Overdrive", "value": 300}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "invalid_parameters"
