# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Draft candidate generation.

A rarity picks an overall-rating band, a target overall is drawn from the
band, and the position's attributes are seeded around the target then
rebalanced so that they average to it exactly.  A weighted roll may then
apply one variance transform (spikes and tanks) to create outliers, after
which the attributes are rebalanced again.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from dice import RandomSource, clamp, make_rng, pick, sample_distinct
from models import Position, Rarity
from player import (
    CREATOR_PITCH_RANGES,
    CREATOR_RANGES,
    RATING_MAX,
    RATING_MIN,
    PlayerRecord,
    relevant_attributes,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Policy constants
# ---------------------------------------------------------------------------

# Inclusive overall bands per rarity.
RARITY_BANDS: dict[Rarity, tuple[int, int]] = {
    Rarity.COMMON: (50, 59),
    Rarity.BRONZE: (60, 69),
    Rarity.SILVER: (70, 79),
    Rarity.GOLD: (80, 89),
    Rarity.DIAMOND: (90, 98),
    Rarity.BLACK_DIAMOND: (99, 99),
}

SEED_SPREAD = 5
REBALANCE_MAX_ITERATIONS = 2000

# Cumulative thresholds on a single uniform roll.
BIG_VARIANCE_CHANCE = 0.01
DOUBLE_SPIKE_CHANCE = 0.06
SINGLE_SPIKE_CHANCE = 0.16

SWITCH_HITTER_CHANCE = 0.10
RIGHT_HANDED_BAT_CHANCE = 0.55  # cumulative

HAIR_STYLES = ["short", "long", "buzz", "mohawk", "bald", "curly"]
FACIAL_HAIR = ["none", "mustache", "goatee", "beard", "stubble"]
SKIN_TONES = ["#f1c27d", "#e0ac69", "#c68642", "#8d5524", "#ffdbac"]
TEAM_COLORS = ["#2a6dd6", "#d62a2a", "#2ad65b", "#d6a82a", "#7a2ad6", "#222222"]

FIRST_NAMES = [
    "Ace", "Buck", "Chip", "Dusty", "Eddie", "Flash", "Gus", "Hank",
    "Ike", "Jonny", "Kit", "Lefty", "Moose", "Nate", "Ozzie", "Pops",
]
LAST_NAMES = [
    "Baker", "Carter", "Diaz", "Ellis", "Fisher", "Gomez", "Hayes", "Irving",
    "Jensen", "Kowalski", "Lopez", "Morgan", "Novak", "Ortiz", "Parker", "Reyes",
]


# ---------------------------------------------------------------------------
# Rating helpers
# ---------------------------------------------------------------------------

def rarity_band(rarity: Rarity | str) -> tuple[int, int]:
    return RARITY_BANDS[Rarity(rarity)]


def _bounded(v: int) -> int:
    return int(clamp(v, RATING_MIN, RATING_MAX))


def seed_attributes(target: int, attrs: Iterable[str], rng: RandomSource) -> dict[str, int]:
    """Place each attribute within ``SEED_SPREAD`` of *target*."""
    return {a: _bounded(target + rng.randint(-SEED_SPREAD, SEED_SPREAD)) for a in attrs}


def rebalance(values: dict[str, int], target: int, rng: RandomSource,
              max_iterations: int = REBALANCE_MAX_ITERATIONS) -> dict[str, int]:
    """Nudge attributes by 1 until they sum to ``target * len(values)``.

    Each step moves a random attribute that still has room in the needed
    direction.  Stops early when no attribute can move, and always after
    *max_iterations* steps; the sum may then miss the target.
    """
    goal = target * len(values)
    for _ in range(max_iterations):
        diff = sum(values.values()) - goal
        if diff == 0:
            return values
        if diff > 0:
            movable = [a for a, v in values.items() if v > RATING_MIN]
            step = -1
        else:
            movable = [a for a, v in values.items() if v < RATING_MAX]
            step = 1
        if not movable:
            break
        values[pick(rng, movable)] += step

    off_by = sum(values.values()) - goal
    if off_by:
        logger.debug("rebalance stopped %+d off target %d", off_by, goal)
    return values


def apply_variance(values: dict[str, int], target: int, rng: RandomSource) -> str:
    """Apply at most one variance transform in place; return its name."""
    attrs = list(values)
    u = rng.random()
    if u < BIG_VARIANCE_CHANCE and len(attrs) >= 3:
        spike, tank_a, tank_b = sample_distinct(rng, attrs, 3)
        values[spike] = rng.randint(max(95, target), RATING_MAX)
        values[tank_a] = rng.randint(15, 35)
        values[tank_b] = rng.randint(15, 35)
        return "big"
    if u < DOUBLE_SPIKE_CHANCE and len(attrs) >= 2:
        for a in sample_distinct(rng, attrs, 2):
            values[a] = _bounded(values[a] + rng.randint(8, 15))
        return "double_spike"
    if u < SINGLE_SPIKE_CHANCE and len(attrs) >= 2:
        up, down = sample_distinct(rng, attrs, 2)
        delta = rng.randint(10, 20)
        values[up] = _bounded(values[up] + delta)
        values[down] = _bounded(values[down] - delta)
        return "spike_tank"
    return "none"


def roll_hands(position: Position, rng: RandomSource) -> tuple[str, str]:
    """Return (throw_hand, bat_hand)."""
    throw_hand = "R" if rng.random() < 0.5 else "L"
    if position == Position.P:
        return throw_hand, throw_hand
    u = rng.random()
    if u < SWITCH_HITTER_CHANCE:
        bat_hand = "S"
    elif u < RIGHT_HANDED_BAT_CHANCE:
        bat_hand = "R"
    else:
        bat_hand = "L"
    return throw_hand, bat_hand


# ---------------------------------------------------------------------------
# Draft generation
# ---------------------------------------------------------------------------

def generate_random_draft_player(position: Position | str, rarity: Rarity | str,
                                 team_color_hint: Optional[str] = None,
                                 rng: RandomSource | None = None) -> PlayerRecord:
    """Build one draft candidate whose overall sits in the rarity's band."""
    rng = rng or make_rng()
    position = Position(position)
    rarity = Rarity(rarity)

    lo, hi = rarity_band(rarity)
    target = rng.randint(lo, hi)
    attrs = relevant_attributes(position)

    values = rebalance(seed_attributes(target, attrs, rng), target, rng)
    variance = apply_variance(values, target, rng)
    if variance != "none":
        values = rebalance(values, target, rng)

    # Off-role ratings come from the character creator's ranges.
    off_role = {
        a: rng.randint(r[0], r[1] - 1) for a, r in CREATOR_RANGES.items() if a not in values
    }
    if position == Position.P:
        pitches = {p: seed_pitch(target, rng) for p in CREATOR_PITCH_RANGES}
    else:
        pitches = {p: rng.randint(r[0], r[1] - 1) for p, r in CREATOR_PITCH_RANGES.items()}

    throw_hand, bat_hand = roll_hands(position, rng)
    player = PlayerRecord(
        id=f"dr_{rng.randint(0, 16**8 - 1):08x}",
        name=f"{pick(rng, FIRST_NAMES)} {pick(rng, LAST_NAMES)}",
        position=position,
        role="pitcher" if position == Position.P else "hitter",
        rarity=rarity,
        throw_hand=throw_hand,
        bat_hand=bat_hand,
        hair=pick(rng, HAIR_STYLES),
        facial_hair=pick(rng, FACIAL_HAIR),
        skin=pick(rng, SKIN_TONES),
        team_color=team_color_hint or pick(rng, TEAM_COLORS),
        pitches=pitches,
        **values,
        **off_role,
    )
    logger.debug(
        "drafted %s %s %s target=%d ovr=%d variance=%s",
        player.id, rarity.value, position.value, target, player.overall, variance,
    )
    return player


def seed_pitch(target: int, rng: RandomSource) -> int:
    return _bounded(target + rng.randint(-SEED_SPREAD, SEED_SPREAD))


def generate_draft_pool(positions: Iterable[Position | str], rarity: Rarity | str,
                        team_color_hint: Optional[str] = None,
                        rng: RandomSource | None = None) -> list[PlayerRecord]:
    """One candidate per requested position, all of the same rarity."""
    rng = rng or make_rng()
    return [
        generate_random_draft_player(pos, rarity, team_color_hint, rng=rng)
        for pos in positions
    ]
