# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""At-bat resolution engine.

Resolves a whole plate appearance in one pass: a walk check, then pitch
selection, swing selection, a hit-chance computation from the pitcher's and
batter's effective ratings, and a single outcome roll.  The batter's recent
pitch memory and the pitcher's stamina are updated in place.

All randomness flows through an injected random source, so a seeded engine
replays identically.
"""

from __future__ import annotations

import logging

from dice import RandomSource, clamp, make_rng, pick, roll_d100
from models import AtBatOutcome, AtBatResult, Count, PitchType, SwingType
from player import (
    DEFAULT_ARSENAL,
    PITCH_HISTORY_LENGTH,
    RATING_MIN,
    PlayerRecord,
    effective_attribute,
    effective_pitch_rating,
    refresh_overall,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tuning constants
# ---------------------------------------------------------------------------

WALK_BASE_PCT = 20.0
WALK_CONTROL_SLOPE = 0.4
WALK_MIN_PCT = 2.0

TWO_STRIKE_OFFSPEED_PCT = 60
PRIMARY_PITCH_PCT = 70

BUNT_PCT = 20
POWER_SWING_SLOPE = 0.7

HIT_BASE = 50.0
PITCH_RATING_WEIGHT = 0.35
MOVEMENT_WEIGHT = 0.25
CONTACT_WEIGHT = 0.45
POWER_WEIGHT = 0.30
EYE_REPEAT_WEIGHT = 0.20
HIT_MIN_PCT = 5.0
HIT_MAX_PCT = 95.0

BUNT_HIT_FACTOR = 0.8
EXTRA_BASE_POWER_SLOPE = 0.15


class AtBatEngine:
    """Decides pitch, swing and outcome for one plate appearance.

    The engine holds only its random source; both player records are passed
    per call and must not be shared with another in-flight call.
    """

    def __init__(self, seed: int | None = None, rng: RandomSource | None = None):
        if rng is None:
            rng = make_rng(seed)
        self.seed = seed
        self.rng = rng

    # -------------------------------------------------------------------
    # Walk check
    # -------------------------------------------------------------------

    def walk_chance(self, pitcher: PlayerRecord) -> float:
        control = effective_attribute(pitcher, "control")
        return max(WALK_MIN_PCT, WALK_BASE_PCT - WALK_CONTROL_SLOPE * (control - 50))

    def check_walk(self, pitcher: PlayerRecord) -> bool:
        return roll_d100(self.rng) <= self.walk_chance(pitcher)

    # -------------------------------------------------------------------
    # Pitch selection
    # -------------------------------------------------------------------

    def primary_pitch(self, pitcher: PlayerRecord) -> str:
        """Highest-rated pitch; on a tie the later arsenal entry wins."""
        arsenal = pitcher.pitches or DEFAULT_ARSENAL
        keys = list(arsenal)
        best = keys[0]
        for k in keys[1:]:
            if not effective_pitch_rating(pitcher, best) > effective_pitch_rating(pitcher, k):
                best = k
        return best

    def select_pitch(self, pitcher: PlayerRecord, count: Count) -> str:
        arsenal = list(pitcher.pitches or DEFAULT_ARSENAL)
        roll = roll_d100(self.rng)
        if count.strikes == 2 and roll <= TWO_STRIKE_OFFSPEED_PCT:
            offspeed = [p for p in arsenal if p != PitchType.FASTBALL.value]
            if offspeed:
                return pick(self.rng, offspeed)
        if roll <= PRIMARY_PITCH_PCT:
            return self.primary_pitch(pitcher)
        return pick(self.rng, arsenal)

    # -------------------------------------------------------------------
    # Swing selection
    # -------------------------------------------------------------------

    def choose_swing(self, batter: PlayerRecord, count: Count, runners_on: int) -> SwingType:
        if runners_on > 0 and count.strikes < 2 and roll_d100(self.rng) <= BUNT_PCT:
            return SwingType.BUNT
        if count.strikes == 2:
            return SwingType.CONTACT
        if roll_d100(self.rng) <= POWER_SWING_SLOPE * effective_attribute(batter, "power"):
            return SwingType.POWER
        return SwingType.CONTACT

    # -------------------------------------------------------------------
    # Hit chance
    # -------------------------------------------------------------------

    def calculate_hit_chance(self, pitcher: PlayerRecord, batter: PlayerRecord,
                             pitch_type: str, swing_type: SwingType) -> float:
        """Percent chance the swing produces a hit, clamped to [5, 95].

        Seeing the same pitch again helps a batter with a good eye and hurts
        one with a poor eye, once per repeat in the last three pitches.
        """
        chance = HIT_BASE
        chance -= PITCH_RATING_WEIGHT * effective_pitch_rating(pitcher, pitch_type)
        chance -= MOVEMENT_WEIGHT * (effective_attribute(pitcher, "movement") - 50)
        if swing_type == SwingType.CONTACT:
            chance += CONTACT_WEIGHT * (effective_attribute(batter, "contact") - 50)
        elif swing_type == SwingType.POWER:
            chance += POWER_WEIGHT * (effective_attribute(batter, "power") - 50)
        repeats = batter.pitch_history[-PITCH_HISTORY_LENGTH:].count(pitch_type)
        chance += EYE_REPEAT_WEIGHT * repeats * (effective_attribute(batter, "eye") - 50)
        return clamp(chance, HIT_MIN_PCT, HIT_MAX_PCT)

    # -------------------------------------------------------------------
    # Outcome
    # -------------------------------------------------------------------

    def roll_outcome(self, batter: PlayerRecord, swing_type: SwingType,
                     hit_chance: float) -> AtBatOutcome:
        roll = roll_d100(self.rng)
        if swing_type == SwingType.BUNT:
            if roll <= BUNT_HIT_FACTOR * hit_chance:
                return AtBatOutcome.BUNT_HIT
            return AtBatOutcome.BUNT_OUT
        if roll > hit_chance:
            return AtBatOutcome.STRIKE
        if swing_type == SwingType.POWER:
            power = effective_attribute(batter, "power")
            if roll_d100(self.rng) <= EXTRA_BASE_POWER_SLOPE * power:
                return AtBatOutcome.EXTRA_BASE_HIT
        return AtBatOutcome.SINGLE

    def _record_pitch(self, pitcher: PlayerRecord, batter: PlayerRecord, pitch_type: str) -> None:
        batter.pitch_history = (batter.pitch_history + [pitch_type])[-PITCH_HISTORY_LENGTH:]
        pitcher.stamina = max(RATING_MIN, pitcher.stamina - 1)
        refresh_overall(pitcher)

    # -------------------------------------------------------------------
    # Full plate appearance
    # -------------------------------------------------------------------

    def resolve_at_bat(self, pitcher: PlayerRecord, batter: PlayerRecord,
                       count: Count | dict | None = None, runners_on: int = 0) -> AtBatResult:
        """Resolve one plate appearance between *pitcher* and *batter*.

        *count* may be a :class:`Count` or a plain ``{"balls", "strikes"}`` dict.
        """
        if not isinstance(count, Count):
            count = Count.model_validate(count or {})

        if self.check_walk(pitcher):
            logger.debug("%s walks %s", pitcher.id, batter.id)
            return AtBatResult(outcome=AtBatOutcome.WALK)

        pitch_type = self.select_pitch(pitcher, count)
        swing_type = self.choose_swing(batter, count, runners_on)
        hit_chance = self.calculate_hit_chance(pitcher, batter, pitch_type, swing_type)
        outcome = self.roll_outcome(batter, swing_type, hit_chance)
        self._record_pitch(pitcher, batter, pitch_type)

        logger.debug(
            "%s vs %s: %s/%s hit=%.1f%% -> %s",
            pitcher.id, batter.id, pitch_type, swing_type.value, hit_chance, outcome.value,
        )
        return AtBatResult(outcome=outcome, pitch_type=pitch_type, swing_type=swing_type)


def resolve_at_bat(pitcher: PlayerRecord, batter: PlayerRecord,
                   count: Count | dict | None = None, runners_on: int = 0,
                   rng: RandomSource | None = None) -> AtBatResult:
    """Function form of :meth:`AtBatEngine.resolve_at_bat`."""
    return AtBatEngine(rng=rng).resolve_at_bat(pitcher, batter, count, runners_on)
