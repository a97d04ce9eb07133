"""
Single-elimination bracket pairing.

Mirrored pairing: slot i plays slot n-1-i for i < n/2, so with seeds in
registration order the first registrant meets the last. The same ordering
always yields the same bracket.

Odd entrant counts leave the middle slot unpaired; that entrant does not
advance. No bye rule is applied.
"""
from __future__ import annotations

from typing import Any


def match_id(round_number: int, index: int) -> str:
    """Deterministic id: R{round}_M{1-based index}."""
    return f"R{round_number}_M{index + 1}"


def mirrored_pairings(entrants: list[str]) -> list[tuple[str, str]]:
    """Pair entrants[i] with entrants[n-1-i]. Returns n // 2 pairs."""
    n = len(entrants)
    return [(entrants[i], entrants[n - 1 - i]) for i in range(n // 2)]


def unpaired_entrant(entrants: list[str]) -> str | None:
    """The middle entrant left out of mirrored pairing, if n is odd."""
    if len(entrants) % 2 == 1:
        return entrants[len(entrants) // 2]
    return None


def generate_round(entrants: list[str], round_number: int) -> list[dict[str, Any]]:
    """
    Return fixtures: { "match_id": str, "team_a_id": str, "team_b_id": str, "round": int }.
    """
    return [
        {"match_id": match_id(round_number, i), "team_a_id": a, "team_b_id": b, "round": round_number}
        for i, (a, b) in enumerate(mirrored_pairings(entrants))
    ]
