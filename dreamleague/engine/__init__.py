"""
Progression and competition engine: pure, synchronous rules for athletes,
rosters and single-elimination tournaments. No persistence, no I/O.
"""
from .clock import Clock, FixedClock, system_clock
from .stat_policy import bounded_adjust, clamp_form, pseudo_random, draw
from .progression import AthleteProgression, rarity_for_potential
from .roster import AthleteLookup, RosterManager, synergy_score
from .bracket import generate_round, mirrored_pairings, match_id
from .competition import CompetitionEngine

__all__ = [
    "Clock",
    "FixedClock",
    "system_clock",
    "bounded_adjust",
    "clamp_form",
    "pseudo_random",
    "draw",
    "AthleteProgression",
    "rarity_for_potential",
    "AthleteLookup",
    "RosterManager",
    "synergy_score",
    "generate_round",
    "mirrored_pairings",
    "match_id",
    "CompetitionEngine",
]
