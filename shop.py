# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Shop economy: card and pack offers, pack opening and purchase effects.

Offers are generated fresh for each shop visit and never persisted.  The
``state`` argument of the generators is anything exposing
``unlocked_max_rarity`` (a :class:`~player.PlayerRecord` or a
:class:`~session.GameSession`).
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Any, Sequence

from dice import RandomSource, make_rng, pick, roll_d100
from models import (
    RARITIES,
    CardKind,
    CardPayload,
    PackSlot,
    PackType,
    Rarity,
    ShopCardSlot,
    ShopRound,
    rarity_index,
)
from player import ALL_ATTRIBUTES, apply_perk_to_team, apply_upgrade_to_custom

if TYPE_CHECKING:
    from session import GameSession

logger = logging.getLogger(__name__)


class InsufficientFundsError(ValueError):
    """The player cannot afford an offer."""

    def __init__(self, price: int, currency: int):
        self.price = price
        self.currency = currency
        super().__init__(f"Not enough coins: price {price}, have {currency}")


# ---------------------------------------------------------------------------
# Pricing and odds
# ---------------------------------------------------------------------------

# Cumulative thresholds on a 1-100 roll.
PERK_KIND_MAX_ROLL = 50
UPGRADE_KIND_MAX_ROLL = 80

CARD_BASE_PRICE = 10
CARD_PRICE_PER_RANK = 10
PACK_BASE_PRICE = 15
PACK_PRICE_PER_RANK = 12

# (size, pick, price multiplier)
PACK_TYPES: dict[PackType, tuple[int, int, float]] = {
    PackType.STANDARD: (3, 1, 1.0),
    PackType.JUMBO: (5, 1, 1.8),
    PackType.ULTRA: (5, 2, 2.3),
}

PACK_UPGRADE_ONE_CHANCE = 0.05
PACK_UPGRADE_TWO_CHANCE = 0.001

BOOST_BY_RARITY: dict[Rarity, int] = {
    Rarity.COMMON: 1,
    Rarity.BRONZE: 2,
    Rarity.SILVER: 3,
    Rarity.GOLD: 4,
    Rarity.DIAMOND: 5,
    Rarity.BLACK_DIAMOND: 6,
}

CARD_SLOTS_PER_ROUND = 3
PACK_SLOTS_PER_ROUND = 2


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def card_price(rarity: Rarity | str) -> int:
    return CARD_BASE_PRICE + CARD_PRICE_PER_RANK * rarity_index(rarity)


def pack_price(pack_type: PackType | str, rarity: Rarity | str) -> int:
    multiplier = PACK_TYPES[PackType(pack_type)][2]
    return _round_half_up((PACK_BASE_PRICE + PACK_PRICE_PER_RANK * rarity_index(rarity)) * multiplier)


def roll_offer_rarity(state: Any, rng: RandomSource) -> Rarity:
    """Uniform over every rank at or below the unlocked maximum."""
    top = rarity_index(state.unlocked_max_rarity)
    return pick(rng, RARITIES[: top + 1])


def roll_card_kind(rng: RandomSource) -> CardKind:
    roll = roll_d100(rng)
    if roll <= PERK_KIND_MAX_ROLL:
        return CardKind.PERK_TEAM
    if roll <= UPGRADE_KIND_MAX_ROLL:
        return CardKind.UPGRADE_CUSTOM
    return CardKind.PLAYER_CARD


# ---------------------------------------------------------------------------
# Card payloads
# ---------------------------------------------------------------------------

def generate_perk_card(rarity: Rarity | str, rng: RandomSource) -> CardPayload:
    rarity = Rarity(rarity)
    stat = pick(rng, ALL_ATTRIBUTES)
    amount = BOOST_BY_RARITY[rarity]
    return CardPayload(
        kind=CardKind.PERK_TEAM, rarity=rarity, stat=stat, amount=amount,
        display_name=f"{rarity.value} team perk: +{amount} {stat}",
    )


def generate_upgrade_card(rarity: Rarity | str, rng: RandomSource) -> CardPayload:
    rarity = Rarity(rarity)
    stat = pick(rng, ALL_ATTRIBUTES)
    amount = BOOST_BY_RARITY[rarity]
    return CardPayload(
        kind=CardKind.UPGRADE_CUSTOM, rarity=rarity, stat=stat, amount=amount,
        display_name=f"{rarity.value} upgrade: +{amount} {stat}",
    )


def generate_player_card(rarity: Rarity | str) -> CardPayload:
    rarity = Rarity(rarity)
    return CardPayload(
        kind=CardKind.PLAYER_CARD, rarity=rarity, display_name=f"{rarity.value} player",
    )


def generate_card(kind: CardKind, rarity: Rarity, rng: RandomSource) -> CardPayload:
    if kind == CardKind.PERK_TEAM:
        return generate_perk_card(rarity, rng)
    if kind == CardKind.UPGRADE_CUSTOM:
        return generate_upgrade_card(rarity, rng)
    return generate_player_card(rarity)


# ---------------------------------------------------------------------------
# Offers
# ---------------------------------------------------------------------------

def generate_shop_card_slot(state: Any, rng: RandomSource | None = None) -> ShopCardSlot:
    rng = rng or make_rng()
    rarity = roll_offer_rarity(state, rng)
    card = generate_card(roll_card_kind(rng), rarity, rng)
    return ShopCardSlot(**card.model_dump(), price=card_price(rarity))


def generate_shop_pack_slot(state: Any, rng: RandomSource | None = None) -> PackSlot:
    rng = rng or make_rng()
    rarity = roll_offer_rarity(state, rng)
    pack_type = pick(rng, list(PACK_TYPES))
    size, picks, _ = PACK_TYPES[pack_type]
    return PackSlot(
        pack_type=pack_type, pack_rarity=rarity, size=size, pick=picks,
        price=pack_price(pack_type, rarity),
    )


def generate_shop_round(state: Any, rng: RandomSource | None = None) -> ShopRound:
    """Offers for one shop visit: three cards and two packs."""
    rng = rng or make_rng()
    return ShopRound(
        card_slots=[generate_shop_card_slot(state, rng) for _ in range(CARD_SLOTS_PER_ROUND)],
        pack_slots=[generate_shop_pack_slot(state, rng) for _ in range(PACK_SLOTS_PER_ROUND)],
    )


def roll_pack_card_rarity(base: Rarity | str, rng: RandomSource) -> Rarity:
    """Rarity at or above *base*; the +1 and +2 bumps are rolled independently."""
    idx = rarity_index(base)
    if rng.random() < PACK_UPGRADE_ONE_CHANCE:
        idx += 1
    if rng.random() < PACK_UPGRADE_TWO_CHANCE:
        idx += 2
    return RARITIES[min(idx, len(RARITIES) - 1)]


def open_pack(pack: PackSlot, rng: RandomSource | None = None) -> list[CardPayload]:
    rng = rng or make_rng()
    cards = []
    for _ in range(pack.size):
        rarity = roll_pack_card_rarity(pack.pack_rarity, rng)
        cards.append(generate_card(roll_card_kind(rng), rarity, rng))
    return cards


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

def apply_card(session: GameSession, card: CardPayload) -> None:
    """Apply a bought or claimed card to the session."""
    record = card.model_dump(mode="json")
    if card.kind == CardKind.PERK_TEAM:
        apply_perk_to_team(session.team, card.stat, card.amount)
        session.player.perks_owned.append(record)
    elif card.kind == CardKind.UPGRADE_CUSTOM:
        apply_upgrade_to_custom(session.player, card.stat, card.amount)
        session.player.perks_owned.append(record)
    else:
        session.player.collection.append(record)
    logger.info("applied %s", card.display_name)


def _charge(session: GameSession, price: int) -> None:
    player = session.player
    if player.currency < price:
        raise InsufficientFundsError(price, player.currency)
    player.currency -= price


def buy_card_slot(session: GameSession, slot: ShopCardSlot) -> CardPayload:
    _charge(session, slot.price)
    card = slot.to_card()
    apply_card(session, card)
    return card


def buy_pack_slot(session: GameSession, pack: PackSlot) -> list[CardPayload]:
    """Pay for a pack and reveal its cards; nothing is applied until claimed."""
    _charge(session, pack.price)
    cards = open_pack(pack, session.rng)
    logger.info("opened %s %s pack (%d cards)", pack.pack_rarity.value, pack.pack_type.value, len(cards))
    return cards


def claim_pack_cards(session: GameSession, pack: PackSlot, revealed: Sequence[CardPayload],
                     chosen: Sequence[int]) -> list[CardPayload]:
    """Keep the revealed cards at the *chosen* indices, up to the pack's pick."""
    if len(set(chosen)) != len(chosen):
        raise ValueError("Each revealed card can only be claimed once")
    if len(chosen) > pack.pick:
        raise ValueError(f"{pack.pack_type.value} packs allow {pack.pick} pick(s), got {len(chosen)}")
    for i in chosen:
        if not 0 <= i < len(revealed):
            raise ValueError(f"No revealed card at index {i}")
    kept = [revealed[i] for i in chosen]
    for card in kept:
        apply_card(session, card)
    return kept
