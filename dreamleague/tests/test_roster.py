"""
Tests for roster composition, team aggregates and match history.
"""
from __future__ import annotations

import pytest

from dreamleague.engine.clock import FixedClock
from dreamleague.engine.roster import PLACEHOLDER_AVERAGES, RosterManager, synergy_score, validate_score
from dreamleague.errors import InvalidParametersError, NotOnTeamError, PositionFilledError, RosterFullError
from dreamleague.models import AthleteSnapshot, RosterEntry

T0 = 1_700_000_000
DAY = 86400

POSITIONS = ["top", "jungle", "mid", "carry", "support"]


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def manager(clock):
    return RosterManager(clock=clock)


@pytest.fixture
def team(manager):
    return manager.create_team("owner-1", "Falcons", "ipfs://falcons")


def _fill(manager, team, n=5):
    for i in range(n):
        manager.add_athlete(team, f"a-{i}", POSITIONS[i])


def test_create_team(team):
    assert team.owner_id == "owner-1"
    assert team.roster == []
    assert team.statistics.matches_played == 0
    assert team.created_at == team.last_updated == T0


def test_add_athlete_appends_and_touches(clock, manager, team):
    clock.advance(30)
    entry = manager.add_athlete(team, "a-0", "mid")
    assert entry.added_at == T0 + 30
    assert team.roster == [entry]
    assert team.last_updated == T0 + 30


def test_add_athlete_roster_full(manager, team):
    _fill(manager, team)
    with pytest.raises(RosterFullError):
        manager.add_athlete(team, "a-9", "coach")
    assert len(team.roster) == 5


def test_add_athlete_position_filled(manager, team):
    manager.add_athlete(team, "a-0", "mid")
    with pytest.raises(PositionFilledError):
        manager.add_athlete(team, "a-1", "mid")
    assert [e.athlete_id for e in team.roster] == ["a-0"]


def test_roster_full_checked_before_position(manager, team):
    _fill(manager, team)
    with pytest.raises(RosterFullError):
        manager.add_athlete(team, "a-9", "mid")


def test_remove_athlete(manager, team):
    _fill(manager, team, 3)
    removed = manager.remove_athlete(team, "a-1")
    assert removed.position == "jungle"
    assert [e.athlete_id for e in team.roster] == ["a-0", "a-2"]


def test_remove_missing_athlete(manager, team):
    _fill(manager, team, 2)
    with pytest.raises(NotOnTeamError):
        manager.remove_athlete(team, "nobody")
    assert len(team.roster) == 2


def test_placeholder_averages_without_lookup(manager, team):
    assert manager.aggregates_are_placeholder
    manager.add_athlete(team, "a-0", "mid")
    stats = team.statistics
    assert (stats.avg_mechanical, stats.avg_game_knowledge, stats.avg_team_communication) == PLACEHOLDER_AVERAGES
    assert stats.synergy_score == 60


def test_empty_roster_zeroes_aggregates(manager, team):
    manager.add_athlete(team, "a-0", "mid")
    manager.remove_athlete(team, "a-0")
    stats = team.statistics
    assert (stats.avg_mechanical, stats.avg_game_knowledge, stats.avg_team_communication, stats.synergy_score) == (
        0, 0, 0, 0,
    )


def test_averages_from_lookup(clock, team):
    snapshots = {
        "a-0": AthleteSnapshot("a-0", mechanical=80, game_knowledge=60, team_communication=51),
        "a-1": AthleteSnapshot("a-1", mechanical=71, game_knowledge=70, team_communication=50),
    }
    manager = RosterManager(clock=clock, athlete_lookup=snapshots.get)
    assert not manager.aggregates_are_placeholder
    manager.add_athlete(team, "a-0", "mid")
    manager.add_athlete(team, "a-1", "top")
    manager.add_athlete(team, "ghost", "support")  # unresolved ids are skipped
    stats = team.statistics
    assert stats.avg_mechanical == 75
    assert stats.avg_game_knowledge == 65
    assert stats.avg_team_communication == 50


def test_synergy_grows_with_tenure():
    roster = [RosterEntry("a", "mid", T0), RosterEntry("b", "top", T0 + 2 * DAY)]
    # avg tenure at T0 + 10 days: (10 + 8) / 2 = 9 days -> +4
    assert synergy_score(roster, T0 + 10 * DAY) == 64
    assert synergy_score(roster, T0 + 1000 * DAY) == 80
    assert synergy_score([], T0) == 0


def test_record_match_and_history_window(clock, manager, team):
    for i in range(12):
        clock.advance(1)
        manager.record_match(team, f"m-{i}", "rival", i % 3 != 0, [3, 1] if i % 3 else [1, 3])
    stats = team.statistics
    assert stats.matches_played == 12
    assert stats.wins == 8
    assert stats.losses == 4
    assert len(team.match_history) == 10
    assert team.match_history[0].match_id == "m-2"
    assert team.match_history[-1].match_id == "m-11"
    assert team.match_history[-1].score == (3, 1)
    assert team.last_updated == T0 + 12


def test_validate_score():
    assert validate_score([255, 0]) == (255, 0)
    for bad in ([256, 0], [0, -1], [1], [1, 2, 3], [True, 1], [1.5, 0], ["2", 1]):
        with pytest.raises(InvalidParametersError):
            validate_score(bad)
