# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Value models shared by the at-bat engine, the draft and the shop."""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Rarity(str, Enum):
    COMMON = "common"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"
    BLACK_DIAMOND = "blackDiamond"


# Strict ordering, lowest first.
RARITIES: list[Rarity] = list(Rarity)


def rarity_index(rarity: Rarity | str) -> int:
    """Return the rank of *rarity* (common = 0 ... blackDiamond = 5)."""
    return RARITIES.index(Rarity(rarity))


class Position(str, Enum):
    P = "P"
    C = "C"
    FIRST_BASE = "1B"
    SECOND_BASE = "2B"
    THIRD_BASE = "3B"
    SS = "SS"
    LF = "LF"
    CF = "CF"
    RF = "RF"
    DH = "DH"
    # Transient placeholders used by the field scene
    FIELDER = "F"
    BATTER = "B"
    RUNNER = "R"


class Hand(str, Enum):
    L = "L"
    R = "R"
    S = "S"  # switch-hitter


class ThrowHand(str, Enum):
    L = "L"
    R = "R"


class PitchType(str, Enum):
    FASTBALL = "fastball"
    SLIDER = "slider"
    CURVEBALL = "curveball"
    CHANGEUP = "changeup"


class SwingType(str, Enum):
    CONTACT = "contact"
    POWER = "power"
    BUNT = "bunt"


class AtBatOutcome(str, Enum):
    WALK = "walk"
    STRIKE = "strike"
    SINGLE = "single"
    EXTRA_BASE_HIT = "extraBaseHit"
    BUNT_HIT = "buntHit"
    BUNT_OUT = "buntOut"


class CardKind(str, Enum):
    PERK_TEAM = "perkTeam"
    UPGRADE_CUSTOM = "upgradeCustom"
    PLAYER_CARD = "playerCard"


class PackType(str, Enum):
    STANDARD = "standard"
    JUMBO = "jumbo"
    ULTRA = "ultra"


# ---------------------------------------------------------------------------
# At-bat context and result
# ---------------------------------------------------------------------------

MAX_BALLS = 3
MAX_STRIKES = 2


class Count(BaseModel):
    """Balls and strikes before the pitch; out-of-range values are clamped."""
    balls: int = Field(default=0, ge=0, le=MAX_BALLS)
    strikes: int = Field(default=0, ge=0, le=MAX_STRIKES)

    @field_validator("balls", "strikes", mode="before")
    @classmethod
    def _clamp_count(cls, v: Any, info: ValidationInfo) -> int:
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return 0
        top = MAX_BALLS if info.field_name == "balls" else MAX_STRIKES
        return max(0, min(top, int(v)))


class AtBatResult(BaseModel):
    """Outcome of one plate appearance.

    ``pitch_type`` and ``swing_type`` are set for every outcome except a
    walk, which is decided before a pitch is chosen.
    """
    outcome: AtBatOutcome
    pitch_type: Optional[str] = None
    swing_type: Optional[SwingType] = None

    @model_validator(mode="after")
    def _walk_has_no_pitch(self) -> AtBatResult:
        is_walk = self.outcome == AtBatOutcome.WALK
        if is_walk and (self.pitch_type is not None or self.swing_type is not None):
            raise ValueError("walk results carry no pitch_type or swing_type")
        if not is_walk and (self.pitch_type is None or self.swing_type is None):
            raise ValueError(f"{self.outcome.value} results need pitch_type and swing_type")
        return self

    @property
    def is_hit(self) -> bool:
        return self.outcome in (
            AtBatOutcome.SINGLE, AtBatOutcome.EXTRA_BASE_HIT, AtBatOutcome.BUNT_HIT,
        )

    @property
    def is_out(self) -> bool:
        return self.outcome in (AtBatOutcome.STRIKE, AtBatOutcome.BUNT_OUT)


# ---------------------------------------------------------------------------
# Shop offers
# ---------------------------------------------------------------------------

class CardPayload(BaseModel):
    """A card revealed from a pack or sold in a shop slot."""
    kind: CardKind
    rarity: Rarity
    stat: Optional[str] = Field(default=None, description="Attribute boosted (perk/upgrade only)")
    amount: Optional[int] = Field(default=None, ge=1, description="Boost size (perk/upgrade only)")
    display_name: str = ""


class ShopCardSlot(CardPayload):
    price: int = Field(ge=0)

    def to_card(self) -> CardPayload:
        return CardPayload(**self.model_dump(exclude={"price"}))


class PackSlot(BaseModel):
    pack_type: PackType
    pack_rarity: Rarity
    size: int = Field(ge=1)
    pick: int = Field(ge=1)
    price: int = Field(ge=0)


class ShopRound(BaseModel):
    """Everything on offer during one shop visit."""
    card_slots: list[ShopCardSlot] = Field(default_factory=list)
    pack_slots: list[PackSlot] = Field(default_factory=list)
