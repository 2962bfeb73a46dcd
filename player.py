# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Player records and the attribute model.

A :class:`PlayerRecord` is validated once, when it is built: missing or
malformed ratings fall back to a neutral 50, out-of-range ratings are clamped
to 1-99, an empty arsenal becomes a lone 60-rated fastball and perk overlays
are trimmed so that base + bonus never exceeds 99.  Functions in this module
keep those invariants on every later mutation.
"""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any, Iterable

from pydantic import BaseModel, Field, field_validator, model_validator

from dice import RandomSource, clamp, make_rng
from models import Hand, PitchType, Position, Rarity, ThrowHand

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Attribute constants
# ---------------------------------------------------------------------------

RATING_MIN = 1
RATING_MAX = 99
NEUTRAL_RATING = 50

HITTING_ATTRIBUTES = ("contact", "power", "eye", "speed", "fielding")
PITCHING_ATTRIBUTES = ("velocity", "movement", "control", "stamina")
ALL_ATTRIBUTES = HITTING_ATTRIBUTES + PITCHING_ATTRIBUTES

DEFAULT_ARSENAL = {PitchType.FASTBALL.value: 60}
PITCH_HISTORY_LENGTH = 3


def _is_number(value: Any) -> bool:
    """True for finite ints and floats; bools, NaN and infinities are unusable."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def clamp_rating(value: Any) -> int:
    """Coerce *value* to an int rating in [1, 99]; unusable values become 50."""
    if not _is_number(value):
        return NEUTRAL_RATING
    return int(clamp(int(value), RATING_MIN, RATING_MAX))


def relevant_attributes(position: Position | str) -> tuple[str, ...]:
    """Return the attribute subset that defines a player's overall."""
    if Position(position) == Position.P:
        return PITCHING_ATTRIBUTES
    return HITTING_ATTRIBUTES


# ---------------------------------------------------------------------------
# Player record
# ---------------------------------------------------------------------------

class PlayerRecord(BaseModel):
    """A created, drafted or transient player."""
    id: str = Field(default_factory=lambda: f"pl_{uuid.uuid4().hex[:12]}")
    name: str = "Player"
    position: Position = Position.P
    role: str = ""
    rarity: Rarity = Rarity.COMMON

    throw_hand: ThrowHand = ThrowHand.R
    bat_hand: Hand = Hand.R
    handedness: str = "R"  # legacy: throw hand for pitchers, bat hand otherwise

    # Hitting
    contact: int = NEUTRAL_RATING
    power: int = NEUTRAL_RATING
    eye: int = NEUTRAL_RATING
    speed: int = NEUTRAL_RATING
    fielding: int = NEUTRAL_RATING
    # Pitching
    velocity: int = NEUTRAL_RATING
    movement: int = NEUTRAL_RATING
    control: int = NEUTRAL_RATING
    stamina: int = NEUTRAL_RATING

    pitches: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_ARSENAL))

    perks_applied: dict[str, int] = Field(default_factory=dict)
    perks_owned: list[dict[str, Any]] = Field(default_factory=list)
    collection: list[dict[str, Any]] = Field(default_factory=list)

    level: int = Field(default=1, ge=1)
    xp: int = Field(default=0, ge=0)
    xp_to_next_level: int = Field(default=10, ge=1)
    currency: int = Field(default=0, ge=0)
    unlocked_max_rarity: Rarity = Rarity.BRONZE
    boss_count: int = Field(default=0, ge=0)

    hair: str = "short"
    facial_hair: str = "none"
    skin: str = "#f1c27d"
    team_color: str = "#2a6dd6"

    overall: int = 0
    pitch_history: list[str] = Field(default_factory=list)

    @field_validator(*ALL_ATTRIBUTES, mode="before")
    @classmethod
    def _clamp_attribute(cls, v: Any) -> int:
        return clamp_rating(v)

    @field_validator("pitches", mode="before")
    @classmethod
    def _normalise_arsenal(cls, v: Any) -> dict[str, int]:
        if not isinstance(v, dict) or not v:
            return dict(DEFAULT_ARSENAL)
        return {str(k): clamp_rating(r) for k, r in v.items()}

    @field_validator("perks_applied", mode="before")
    @classmethod
    def _normalise_perks(cls, v: Any) -> dict[str, int]:
        if not isinstance(v, dict):
            return {}
        return {
            str(k): max(0, int(b))
            for k, b in v.items()
            if _is_number(b)
        }

    @field_validator("pitch_history", mode="before")
    @classmethod
    def _trim_history(cls, v: Any) -> list[str]:
        if not isinstance(v, (list, tuple)):
            return []
        return [str(p) for p in v][-PITCH_HISTORY_LENGTH:]

    @model_validator(mode="after")
    def _derive(self) -> PlayerRecord:
        for attr in ALL_ATTRIBUTES:
            bonus = self.perks_applied.get(attr, 0)
            self.perks_applied[attr] = min(bonus, RATING_MAX - getattr(self, attr))
        sync_handedness(self)
        self.overall = compute_overall(self)
        return self

    # -- convenience -------------------------------------------------------

    @property
    def is_pitcher(self) -> bool:
        return self.position == Position.P

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PlayerRecord:
        """Build a record from a stored dict, applying the defaulting rules."""
        return cls.model_validate(d)


def sync_handedness(player: PlayerRecord) -> None:
    """Point the legacy ``handedness`` field at the position-appropriate hand."""
    if player.is_pitcher:
        player.handedness = player.throw_hand.value
    else:
        player.handedness = player.bat_hand.value


# ---------------------------------------------------------------------------
# Attribute model
# ---------------------------------------------------------------------------

def base_attribute(player: PlayerRecord, attr: str) -> int:
    value = getattr(player, attr, None) if attr in ALL_ATTRIBUTES else None
    return NEUTRAL_RATING if value is None else value


def effective_attribute(player: PlayerRecord, attr: str) -> int:
    """Base rating plus perk overlay, clamped to [1, 99].

    Unknown attributes read as a neutral 50.
    """
    if attr not in ALL_ATTRIBUTES:
        return NEUTRAL_RATING
    bonus = player.perks_applied.get(attr, 0)
    return int(clamp(base_attribute(player, attr) + bonus, RATING_MIN, RATING_MAX))


def effective_pitch_rating(pitcher: PlayerRecord, pitch_type: str) -> int:
    """Rating of one pitch in the arsenal; a pitch the pitcher lacks reads as 50."""
    return clamp_rating(pitcher.pitches.get(pitch_type, NEUTRAL_RATING))


def compute_overall(player: PlayerRecord) -> int:
    """Floored mean of the position-appropriate attributes."""
    attrs = relevant_attributes(player.position)
    values = [getattr(player, a) for a in attrs]
    return sum(values) // len(values)


def refresh_overall(player: PlayerRecord) -> int:
    player.overall = compute_overall(player)
    return player.overall


def perk_room(player: PlayerRecord, stat: str) -> int:
    """Points of overlay still available before base + bonus reaches 99."""
    return max(0, RATING_MAX - base_attribute(player, stat) - player.perks_applied.get(stat, 0))


def apply_perk_to_team(players: Iterable[PlayerRecord], stat: str, amount: int) -> None:
    """Add a team-wide overlay bonus, truncated at each player's 99 ceiling."""
    if stat not in ALL_ATTRIBUTES:
        logger.warning("ignoring perk for unknown attribute %r", stat)
        return
    for p in players:
        gain = min(max(0, amount), perk_room(p, stat))
        p.perks_applied[stat] = p.perks_applied.get(stat, 0) + gain
        logger.debug("perk %s +%d on %s (asked %d)", stat, gain, p.id, amount)


def apply_upgrade_to_custom(player: PlayerRecord, stat: str, amount: int) -> None:
    """Raise a player's base rating, keeping base + overlay at or below 99."""
    if stat not in ALL_ATTRIBUTES:
        logger.warning("ignoring upgrade for unknown attribute %r on %s", stat, player.id)
        return
    gain = min(max(0, amount), perk_room(player, stat))
    setattr(player, stat, getattr(player, stat) + gain)
    refresh_overall(player)
    logger.debug("upgrade %s +%d on %s (asked %d)", stat, gain, player.id, amount)


# ---------------------------------------------------------------------------
# Character creator
# ---------------------------------------------------------------------------

# Half-open ranges [lo, hi) rolled for a freshly created player.
CREATOR_RANGES: dict[str, tuple[int, int]] = {
    "velocity": (55, 75),
    "movement": (50, 70),
    "control": (50, 70),
    "stamina": (70, 95),
    "contact": (45, 70),
    "power": (40, 70),
    "eye": (45, 70),
    "speed": (45, 70),
    "fielding": (45, 70),
}

CREATOR_PITCH_RANGES: dict[str, tuple[int, int]] = {
    PitchType.FASTBALL.value: (60, 85),
    PitchType.CURVEBALL.value: (50, 75),
    PitchType.SLIDER.value: (50, 75),
    PitchType.CHANGEUP.value: (50, 75),
}

STARTING_CURRENCY = 50


def create_custom_player(
    name: str = "Player",
    position: Position | str = Position.P,
    handedness: str = "R",
    hair: str = "short",
    skin: str = "#f1c27d",
    facial_hair: str = "none",
    team_color: str = "#2a6dd6",
    rng: RandomSource | None = None,
) -> PlayerRecord:
    """Roll the starting ratings for a player made in the character creator."""
    rng = rng or make_rng()

    def roll(lo_hi: tuple[int, int]) -> int:
        lo, hi = lo_hi
        return rng.randint(lo, hi - 1)

    hand = "L" if handedness == "L" else "R"
    player = PlayerRecord(
        name=name or "Player",
        position=Position(position),
        role="custom",
        throw_hand=hand,
        bat_hand="S" if handedness == "S" else hand,
        hair=hair,
        skin=skin,
        facial_hair=facial_hair,
        team_color=team_color,
        currency=STARTING_CURRENCY,
        pitches={k: roll(r) for k, r in CREATOR_PITCH_RANGES.items()},
        **{attr: roll(r) for attr, r in CREATOR_RANGES.items()},
    )
    logger.info("created player %s (%s, OVR %d)", player.id, player.position.value, player.overall)
    return player
