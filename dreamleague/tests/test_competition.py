"""
Tests for the tournament state machine: registration, seeding, results, completion.
"""
from __future__ import annotations

import pytest

from dreamleague.engine.clock import FixedClock
from dreamleague.engine.competition import CompetitionEngine
from dreamleague.engine.roster import RosterManager
from dreamleague.errors import (
    AlreadyRecordedError,
    AlreadyRegisteredError,
    InvalidParametersError,
    MatchNotFoundError,
    TournamentClosedError,
    TournamentFullError,
    WrongStatusError,
)
from dreamleague.models import TournamentStatus

T0 = 1_700_000_000


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def roster(clock):
    return RosterManager(clock=clock)


@pytest.fixture
def engine(clock, roster):
    return CompetitionEngine(clock=clock, roster=roster)


@pytest.fixture
def teams(roster):
    return {name: roster.create_team(f"owner-{name}", name, "", team_id=name) for name in "ABCD"}


def _tournament(engine, max_teams=4, entry_fee=100):
    return engine.create_tournament("org-1", "Spring Cup", entry_fee, T0 + 3600, max_teams)


def _full(engine, teams):
    t = _tournament(engine)
    for name in "ABCD":
        engine.register_team(t, teams[name].id)
    return t


# ---------- Creation ----------


@pytest.mark.parametrize("max_teams", [1, 65, 0])
def test_create_rejects_team_count(engine, max_teams):
    with pytest.raises(InvalidParametersError):
        engine.create_tournament("org-1", "Cup", 10, T0 + 10, max_teams)


def test_create_rejects_past_start(engine):
    with pytest.raises(InvalidParametersError):
        engine.create_tournament("org-1", "Cup", 10, T0, 4)


def test_create_rejects_negative_fee(engine):
    with pytest.raises(InvalidParametersError):
        engine.create_tournament("org-1", "Cup", -1, T0 + 10, 4)


def test_create_defaults(engine):
    t = _tournament(engine)
    assert t.status == TournamentStatus.REGISTRATION
    assert t.prize_pool == 0
    assert t.registered_teams == []
    assert t.matches == []
    assert t.end_time is None


# ---------- Registration ----------


def test_register_fills_and_seeds_round_one(engine, teams):
    t = _tournament(engine)
    started = [engine.register_team(t, teams[n].id) for n in "ABCD"]
    assert started == [False, False, False, True]
    assert t.status == TournamentStatus.IN_PROGRESS
    assert t.prize_pool == 400
    assert len(t.matches) == 2
    first, second = t.matches
    assert (first.match_id, first.team_a_id, first.team_b_id, first.round) == ("R1_M1", "A", "D", 1)
    assert (second.match_id, second.team_a_id, second.team_b_id, second.round) == ("R1_M2", "B", "C", 1)


def test_register_twice_keeps_prize_pool(engine, teams):
    t = _tournament(engine)
    engine.register_team(t, "A")
    with pytest.raises(AlreadyRegisteredError):
        engine.register_team(t, "A")
    assert t.prize_pool == 100
    assert t.registered_teams == ["A"]


def test_register_after_start_is_closed(engine, teams):
    t = _full(engine, teams)
    with pytest.raises(TournamentClosedError):
        engine.register_team(t, "E")


def test_register_when_full_but_still_registration(engine, teams):
    t = _tournament(engine, max_teams=2)
    t.registered_teams = ["A", "B"]
    with pytest.raises(TournamentFullError):
        engine.register_team(t, "C")


def test_odd_bracket_drops_middle_team(engine, roster):
    t = _tournament(engine, max_teams=3)
    for name in "XYZ":
        engine.register_team(t, name)
    assert [(m.team_a_id, m.team_b_id) for m in t.matches] == [("X", "Z")]


# ---------- Results ----------


def test_four_team_bracket_end_to_end(clock, engine, teams):
    t = _full(engine, teams)
    assert len(t.matches_in_round(1)) == 2

    clock.advance(600)
    engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [2, 1])
    assert t.matches_in_round(2) == []
    engine.record_match_result(t, "R1_M2", teams["C"], teams["B"], [2, 0])

    final = t.matches_in_round(2)
    assert len(final) == 1
    assert (final[0].match_id, final[0].team_a_id, final[0].team_b_id) == ("R2_M1", "A", "C")
    assert t.status == TournamentStatus.IN_PROGRESS

    clock.advance(600)
    engine.record_match_result(t, "R2_M1", teams["C"], teams["A"], [3, 2])
    assert t.status == TournamentStatus.COMPLETED
    assert t.end_time == T0 + 1200
    assert CompetitionEngine.champion(t) == "C"
    assert teams["C"].statistics.tournament_wins == 1
    assert teams["A"].statistics.tournament_wins == 0
    assert len(t.matches) == 3


def test_result_updates_both_team_records(engine, teams):
    t = _full(engine, teams)
    engine.record_match_result(t, "R1_M1", teams["D"], teams["A"], [2, 1], b"\xff")
    match = t.matches[0]
    assert match.winner_id == "D"
    assert match.score == (2, 1)
    assert match.completed
    assert match.match_data == b"\xff"
    d, a = teams["D"], teams["A"]
    assert (d.statistics.wins, d.statistics.losses) == (1, 0)
    assert (a.statistics.wins, a.statistics.losses) == (0, 1)
    assert d.match_history[-1].score == (2, 1)
    assert a.match_history[-1].score == (1, 2)
    assert a.match_history[-1].opponent_id == "D"
    assert a.match_history[-1].tournament_id == t.id


def test_record_twice_is_rejected_and_unchanged(engine, teams):
    t = _full(engine, teams)
    engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [2, 1])
    with pytest.raises(AlreadyRecordedError):
        engine.record_match_result(t, "R1_M1", teams["D"], teams["A"], [5, 0])
    match = t.matches[0]
    assert match.winner_id == "A"
    assert match.score == (2, 1)
    assert teams["D"].statistics.wins == 0


def test_record_unknown_pair(engine, teams):
    t = _full(engine, teams)
    with pytest.raises(MatchNotFoundError):
        engine.record_match_result(t, "R1_M1", teams["A"], teams["B"], [2, 1])


def test_record_requires_in_progress(engine, teams):
    t = _tournament(engine)
    with pytest.raises(WrongStatusError):
        engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [2, 1])


def test_record_rejects_bad_score(engine, teams):
    t = _full(engine, teams)
    with pytest.raises(InvalidParametersError):
        engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [300, 1])
    assert not t.matches[0].completed
    assert teams["A"].statistics.matches_played == 0


def test_record_rejects_same_team(engine, teams):
    t = _full(engine, teams)
    with pytest.raises(InvalidParametersError):
        engine.record_match_result(t, "R1_M1", teams["A"], teams["A"], [2, 1])


def test_advance_round_is_idempotent(engine, teams):
    t = _full(engine, teams)
    engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [2, 1])
    engine.record_match_result(t, "R1_M2", teams["B"], teams["C"], [2, 1])
    assert engine.advance_round(t, 1) is False
    assert len(t.matches_in_round(2)) == 1


def test_champion_none_until_completed(engine, teams):
    t = _full(engine, teams)
    assert CompetitionEngine.champion(t) is None


# ---------- Cancel ----------


def test_cancel_from_registration(clock, engine):
    t = _tournament(engine)
    engine.cancel(t)
    assert t.status == TournamentStatus.CANCELED
    assert t.end_time == T0
    with pytest.raises(TournamentClosedError):
        engine.register_team(t, "A")


def test_cancel_completed_rejected(engine, teams):
    t = _full(engine, teams)
    engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [2, 1])
    engine.record_match_result(t, "R1_M2", teams["B"], teams["C"], [2, 1])
    engine.record_match_result(t, "R2_M1", teams["A"], teams["B"], [2, 1])
    with pytest.raises(WrongStatusError):
        engine.cancel(t)
    assert t.status == TournamentStatus.COMPLETED


def test_record_rejects_non_integer_score(engine, teams):
    t = _full(engine, teams)
    with pytest.raises(InvalidParametersError):
        engine.record_match_result(t, "R1_M1", teams["A"], teams["D"], [True, 1.5])
    assert not t.matches[0].completed
    assert t.matches[0].score == (0, 0)


def test_last_updated_follows_clock(clock, engine, teams):
    t = _tournament(engine)
    assert t.last_updated == T0
    clock.advance(45)
    engine.register_team(t, "A")
    assert t.last_updated == T0 + 45
