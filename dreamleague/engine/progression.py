"""
Athlete progression: creation, match results, training, special abilities.

All methods mutate the Athlete passed in (and, for exclusive mints, the
Creator) only after every check has passed.
"""
from __future__ import annotations

import logging
import uuid
from typing import Sequence

from dreamleague.engine.clock import Clock, system_clock
from dreamleague.engine.stat_policy import (
    FORM_MAX,
    FORM_MIN,
    bounded_adjust,
    clamp_form,
    draw,
    in_stat_range,
    pseudo_random,
)
from dreamleague.errors import (
    CreatorNotVerifiedError,
    DuplicateAbilityError,
    InvalidParametersError,
)
from dreamleague.models import (
    ATTRIBUTE_NAMES,
    MAX_PERFORMANCE_HISTORY,
    Athlete,
    AthleteStats,
    Creator,
    MatchPerformance,
    Rarity,
    SpecialAbility,
    TrainingType,
)

logger = logging.getLogger(__name__)

# Seeds 0-4 are the attribute draws, 5 is potential, 6 the creator ability.
POTENTIAL_SEED = 5
CREATOR_ABILITY_SEED = 6

STANDARD_FORM = 70
EXCLUSIVE_FORM = 80

CLUTCH_FACTOR = "Clutch Factor"
PERFECT_EXECUTION = "Perfect Execution"
SHOT_CALLER = "Shot Caller"

HIGH_INTENSITY = 70
MAX_ABILITY_VALUE = 255


def rarity_for_potential(potential: int, exclusive: bool = False) -> Rarity:
    """Exclusive athletes never fall below Rare."""
    if potential >= 90:
        return Rarity.LEGENDARY
    if potential >= 80:
        return Rarity.EPIC
    if exclusive or potential >= 70:
        return Rarity.RARE
    if potential >= 60:
        return Rarity.UNCOMMON
    return Rarity.COMMON


def _validate_predefined(stats: AthleteStats) -> None:
    for name in ATTRIBUTE_NAMES:
        value = getattr(stats, name)
        if not in_stat_range(value):
            raise InvalidParametersError(f"{name} must be between 1 and 100 (got {value})")
    if not FORM_MIN <= stats.form <= FORM_MAX:
        raise InvalidParametersError(f"form must be between 0 and 100 (got {stats.form})")
    if not 0 <= stats.potential <= 100:
        raise InvalidParametersError(f"potential must be between 0 and 100 (got {stats.potential})")


class AthleteProgression:
    """Owns the rules for an athlete's attribute vector and unlocks."""

    def __init__(self, clock: Clock = system_clock) -> None:
        self._clock = clock

    # ---------- Creation ----------

    def initialize(
        self,
        owner_id: str,
        collectible_id: str,
        name: str,
        position: str,
        uri: str,
        game_data: bytes = b"",
        *,
        exclusive: bool = False,
        creator: Creator | None = None,
        predefined_stats: AthleteStats | None = None,
        collection_id: str | None = None,
        athlete_id: str | None = None,
    ) -> Athlete:
        """
        Mint a new athlete.

        Standard: attributes 50-80, form 70, potential 50-100.
        Exclusive (requires a verified creator): predefined stats copied verbatim,
        or attributes 60-90, form 80, potential 70-100. Every exclusive athlete
        starts with "<creator name> Special" (75-100) and is at least Rare.
        """
        now = self._clock()
        if exclusive:
            if creator is None:
                raise InvalidParametersError("Exclusive athletes require a creator")
            if not creator.verified:
                raise CreatorNotVerifiedError(f"Creator {creator.id} is not verified")
            if predefined_stats is not None:
                _validate_predefined(predefined_stats)

        if exclusive and predefined_stats is not None:
            attrs = {n: getattr(predefined_stats, n) for n in ATTRIBUTE_NAMES}
            form = predefined_stats.form
            potential = predefined_stats.potential
        elif exclusive:
            attrs = {n: draw(now, i, 60, 31) for i, n in enumerate(ATTRIBUTE_NAMES)}
            form = EXCLUSIVE_FORM
            potential = draw(now, POTENTIAL_SEED, 70, 31)
        else:
            attrs = {n: draw(now, i, 50, 31) for i, n in enumerate(ATTRIBUTE_NAMES)}
            form = STANDARD_FORM
            potential = draw(now, POTENTIAL_SEED, 50, 51)

        athlete = Athlete(
            id=athlete_id or str(uuid.uuid4()),
            owner_id=owner_id,
            collectible_id=collectible_id,
            name=name,
            position=position,
            uri=uri,
            created_at=now,
            last_updated=now,
            form=form,
            potential=potential,
            rarity=rarity_for_potential(potential, exclusive),
            is_exclusive=exclusive,
            game_data=bytes(game_data),
            **attrs,
        )
        if exclusive:
            athlete.creator_id = creator.id
            athlete.special_abilities.append(
                SpecialAbility(name=f"{creator.name} Special", value=draw(now, CREATOR_ABILITY_SEED, 75, 26))
            )
            creator.total_athletes_created += 1
            if collection_id is not None and collection_id not in creator.collections_created:
                creator.collections_created.append(collection_id)
        logger.info(
            "Minted %s athlete %s (%s, potential %d)",
            "exclusive" if exclusive else "standard", athlete.id, athlete.rarity.value, potential,
        )
        return athlete

    # ---------- Match results ----------

    def apply_match_result(
        self,
        athlete: Athlete,
        match_id: str,
        win: bool,
        mvp: bool,
        exp_gained: int,
        attribute_deltas: Sequence[int],
        form_delta: int,
        stats: bytes = b"",
    ) -> None:
        """
        Record one match: counters, bounded attribute changes, form, history
        (5 most recent), then level-up checks.
        attribute_deltas follows ATTRIBUTE_NAMES order.
        """
        if len(attribute_deltas) != len(ATTRIBUTE_NAMES):
            raise InvalidParametersError(
                f"Expected {len(ATTRIBUTE_NAMES)} attribute deltas, got {len(attribute_deltas)}"
            )
        if exp_gained < 0:
            raise InvalidParametersError("exp_gained cannot be negative")
        now = self._clock()

        athlete.matches_played += 1
        if win:
            athlete.wins += 1
        if mvp:
            athlete.mvp_count += 1
        athlete.experience += exp_gained

        for name, delta in zip(ATTRIBUTE_NAMES, attribute_deltas):
            setattr(athlete, name, bounded_adjust(getattr(athlete, name), delta))
        athlete.form = clamp_form(athlete.form + form_delta)

        athlete.performance_history.append(
            MatchPerformance(
                match_id=match_id,
                timestamp=now,
                win=win,
                mvp=mvp,
                exp_gained=exp_gained,
                stats=bytes(stats),
            )
        )
        if len(athlete.performance_history) > MAX_PERFORMANCE_HISTORY:
            athlete.performance_history.pop(0)

        self._check_level_ups(athlete)
        athlete.last_updated = now

    def _check_level_ups(self, athlete: Athlete) -> None:
        # Independent checks; any combination may fire on one call.
        if athlete.matches_played % 10 == 0 and athlete.wins > athlete.matches_played // 2:
            athlete.potential = min(100, athlete.potential + 1)

        if athlete.mvp_count >= 5 and not athlete.has_ability(CLUTCH_FACTOR):
            self._unlock(athlete, CLUTCH_FACTOR, 50 + athlete.mvp_count // 2)

        if athlete.mechanical >= 90 and not athlete.has_ability(PERFECT_EXECUTION):
            self._unlock(athlete, PERFECT_EXECUTION, athlete.mechanical - 30)

        if (
            athlete.team_communication >= 85
            and athlete.matches_played >= 20
            and not athlete.has_ability(SHOT_CALLER)
        ):
            self._unlock(athlete, SHOT_CALLER, 70 + (athlete.team_communication - 85) // 3)

    @staticmethod
    def _unlock(athlete: Athlete, name: str, value: int) -> None:
        athlete.special_abilities.append(SpecialAbility(name=name, value=value))
        logger.info("Athlete %s unlocked %s (%d)", athlete.id, name, value)

    # ---------- Training ----------

    def train(self, athlete: Athlete, training_type: TrainingType, intensity: int) -> int:
        """
        Improve the targeted attribute. Returns the improvement applied
        (before clamping). Intensity above 70 costs form, never below 1.
        """
        if not 0 <= intensity <= 255:
            raise InvalidParametersError("intensity must be between 0 and 255")
        training_type = TrainingType(training_type)
        now = self._clock()

        effectiveness = min(255, intensity * athlete.form // 100)
        random_factor = pseudo_random(now, 0) % 5 - 2
        improvement = max(1, effectiveness // 20 + max(0, random_factor))

        attr = training_type.value
        setattr(athlete, attr, bounded_adjust(getattr(athlete, attr), improvement))

        if intensity > HIGH_INTENSITY:
            fatigue = (intensity - HIGH_INTENSITY) // 10
            athlete.form = max(1, max(0, athlete.form - fatigue))

        athlete.last_updated = now
        return improvement

    # ---------- Abilities ----------

    def grant_ability(self, athlete: Athlete, name: str, value: int) -> None:
        if not 0 <= value <= MAX_ABILITY_VALUE:
            raise InvalidParametersError(f"ability value must be between 0 and {MAX_ABILITY_VALUE}")
        if athlete.has_ability(name):
            raise DuplicateAbilityError(f"Athlete {athlete.id} already has ability '{name}'")
        athlete.special_abilities.append(SpecialAbility(name=name, value=value))
