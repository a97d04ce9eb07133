"""
Bounded stat updates and the deterministic draw used for cosmetic randomness.

pseudo_random is a pure function of (timestamp, seed): there is no generator
state, so callers vary the seed per independent draw within one operation.
Not suitable for anything security-relevant.
"""
from __future__ import annotations

STAT_MIN = 1
STAT_MAX = 100
FORM_MIN = 0
FORM_MAX = 100

LCG_MULTIPLIER = 6364136223846793005
LCG_INCREMENT = 1
_U64_MASK = (1 << 64) - 1


def bounded_adjust(current: int, delta: int) -> int:
    """Apply delta to an attribute, saturating at [1, 100]."""
    if delta > 0:
        return min(STAT_MAX, current + delta)
    return max(STAT_MIN, current + delta)


def clamp_form(value: int) -> int:
    """Form may reach zero, unlike attributes."""
    return min(FORM_MAX, max(FORM_MIN, value))


def in_stat_range(value: int) -> bool:
    return STAT_MIN <= value <= STAT_MAX


def pseudo_random(timestamp: int, seed: int) -> int:
    """
    Mix a seed byte with the low 7 bytes of the timestamp (little-endian,
    two's complement) and run one 64-bit wrapping multiply-add.
    """
    ts_bytes = (timestamp & _U64_MASK).to_bytes(8, "little")
    raw = bytes([seed & 0xFF]) + ts_bytes[:7]
    value = int.from_bytes(raw, "little")
    return (value * LCG_MULTIPLIER + LCG_INCREMENT) & _U64_MASK


def draw(timestamp: int, seed: int, low: int, span: int) -> int:
    """low + pseudo_random % span, i.e. a value in [low, low + span - 1]."""
    return low + pseudo_random(timestamp, seed) % span
