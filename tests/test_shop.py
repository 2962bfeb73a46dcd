# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the shop economy: pricing, offer rolls, packs and purchases."""

import random
import sys
from pathlib import Path

# Ensure project root is on the path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from fakes import ScriptedRandom
from models import (
    RARITIES,
    CardKind,
    CardPayload,
    PackSlot,
    PackType,
    Rarity,
    ShopCardSlot,
    rarity_index,
)
from player import ALL_ATTRIBUTES, PlayerRecord
from session import GameSession
from shop import (
    InsufficientFundsError,
    buy_card_slot,
    buy_pack_slot,
    card_price,
    claim_pack_cards,
    generate_shop_card_slot,
    generate_shop_pack_slot,
    generate_shop_round,
    open_pack,
    pack_price,
    roll_pack_card_rarity,
)


def make_session(currency=100, unlocked=Rarity.BRONZE, teammates=1):
    player = PlayerRecord(name="Owner", currency=currency, unlocked_max_rarity=unlocked,
                          contact=60, stamina=70)
    team = [player] + [PlayerRecord(name=f"Mate {i}", contact=50) for i in range(teammates)]
    return GameSession(player=player, team=team, rng=random.Random(3))


def perk(stat="contact", amount=3, rarity=Rarity.SILVER):
    return CardPayload(kind=CardKind.PERK_TEAM, rarity=rarity, stat=stat, amount=amount)


def upgrade(stat="stamina", amount=2, rarity=Rarity.BRONZE):
    return CardPayload(kind=CardKind.UPGRADE_CUSTOM, rarity=rarity, stat=stat, amount=amount)


def player_card(rarity=Rarity.GOLD):
    return CardPayload(kind=CardKind.PLAYER_CARD, rarity=rarity)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

class TestPricing:

    @pytest.mark.parametrize("rarity,price", [
        (Rarity.COMMON, 10), (Rarity.BRONZE, 20), (Rarity.GOLD, 40), (Rarity.BLACK_DIAMOND, 60),
    ])
    def test_card_price(self, rarity, price):
        assert card_price(rarity) == price

    @pytest.mark.parametrize("pack_type,rarity,price", [
        (PackType.STANDARD, Rarity.COMMON, 15),
        (PackType.JUMBO, Rarity.COMMON, 27),
        (PackType.JUMBO, Rarity.BRONZE, 49),
        (PackType.ULTRA, Rarity.BRONZE, 62),
        (PackType.ULTRA, Rarity.SILVER, 90),
        (PackType.STANDARD, Rarity.BLACK_DIAMOND, 75),
    ])
    def test_pack_price(self, pack_type, rarity, price):
        assert pack_price(pack_type, rarity) == price


# ---------------------------------------------------------------------------
# Offer generation
# ---------------------------------------------------------------------------

class TestOffers:

    def test_gold_perk_slot(self):
        state = PlayerRecord(unlocked_max_rarity=Rarity.GOLD)
        slot = generate_shop_card_slot(state, ScriptedRandom(ints=[3, 50, 0]))
        assert slot.kind == CardKind.PERK_TEAM
        assert slot.rarity == Rarity.GOLD
        assert slot.stat == "contact"
        assert slot.amount == 4
        assert slot.price == 40

    def test_common_upgrade_slot(self):
        state = PlayerRecord(unlocked_max_rarity=Rarity.GOLD)
        slot = generate_shop_card_slot(state, ScriptedRandom(ints=[0, 51, 8]))
        assert slot.kind == CardKind.UPGRADE_CUSTOM
        assert slot.rarity == Rarity.COMMON
        assert slot.stat == "stamina"
        assert slot.amount == 1
        assert slot.price == 10

    def test_player_card_slot_draws_no_stat(self):
        rng = ScriptedRandom(ints=[1, 81])
        slot = generate_shop_card_slot(PlayerRecord(), rng)
        assert slot.kind == CardKind.PLAYER_CARD
        assert slot.rarity == Rarity.BRONZE
        assert slot.stat is None and slot.amount is None
        assert slot.price == 20
        assert rng.exhausted

    def test_offer_rarity_range_follows_unlock(self):
        rng = ScriptedRandom(ints=[0, 90])
        generate_shop_card_slot(PlayerRecord(unlocked_max_rarity=Rarity.DIAMOND), rng)
        assert rng.int_calls[0] == (0, 4)

    def test_ultra_pack_slot(self):
        state = PlayerRecord(unlocked_max_rarity=Rarity.SILVER)
        pack = generate_shop_pack_slot(state, ScriptedRandom(ints=[2, 2]))
        assert pack.pack_type == PackType.ULTRA
        assert pack.pack_rarity == Rarity.SILVER
        assert (pack.size, pack.pick, pack.price) == (5, 2, 90)

    def test_round_shape_and_rarity_cap(self):
        session = make_session(unlocked=Rarity.SILVER)
        rng = random.Random(17)
        for _ in range(50):
            shop = generate_shop_round(session, rng)
            assert len(shop.card_slots) == 3
            assert len(shop.pack_slots) == 2
            for slot in shop.card_slots:
                assert rarity_index(slot.rarity) <= 2
                assert slot.price == card_price(slot.rarity)
                if slot.kind != CardKind.PLAYER_CARD:
                    assert slot.stat in ALL_ATTRIBUTES
            for pack in shop.pack_slots:
                assert rarity_index(pack.pack_rarity) <= 2

    def test_kind_distribution(self):
        rng = random.Random(23)
        state = PlayerRecord()
        n = 6000
        kinds = [generate_shop_card_slot(state, rng).kind for _ in range(n)]
        assert 0.46 < kinds.count(CardKind.PERK_TEAM) / n < 0.54
        assert 0.27 < kinds.count(CardKind.UPGRADE_CUSTOM) / n < 0.33
        assert 0.17 < kinds.count(CardKind.PLAYER_CARD) / n < 0.23


# ---------------------------------------------------------------------------
# Packs
# ---------------------------------------------------------------------------

class TestPacks:

    @pytest.mark.parametrize("base,floats,expected", [
        (Rarity.COMMON, [0.5, 0.5], Rarity.COMMON),
        (Rarity.COMMON, [0.01, 0.5], Rarity.BRONZE),
        (Rarity.COMMON, [0.5, 0.0005], Rarity.SILVER),
        (Rarity.COMMON, [0.01, 0.0005], Rarity.GOLD),
        (Rarity.DIAMOND, [0.01, 0.0005], Rarity.BLACK_DIAMOND),
        (Rarity.BLACK_DIAMOND, [0.0, 0.0], Rarity.BLACK_DIAMOND),
    ])
    def test_pack_card_rarity(self, base, floats, expected):
        assert roll_pack_card_rarity(base, ScriptedRandom(floats=floats)) == expected

    def test_open_pack_size_and_floor(self):
        rng = random.Random(8)
        for pack_type, (size, picks) in {
            PackType.STANDARD: (3, 1), PackType.JUMBO: (5, 1), PackType.ULTRA: (5, 2),
        }.items():
            pack = PackSlot(pack_type=pack_type, pack_rarity=Rarity.SILVER, size=size,
                            pick=picks, price=0)
            cards = open_pack(pack, rng)
            assert len(cards) == size
            assert all(rarity_index(c.rarity) >= 2 for c in cards)

    def test_pack_upgrade_rate(self):
        rng = random.Random(41)
        n = 20000
        bumped = sum(roll_pack_card_rarity(Rarity.COMMON, rng) != Rarity.COMMON for _ in range(n))
        assert 0.04 < bumped / n < 0.06
        print(f"PASSED: {bumped}/{n} pack cards upgraded")


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------

class TestPurchases:

    def test_buy_perk_slot_applies_to_team(self):
        session = make_session(currency=50)
        slot = ShopCardSlot(**perk().model_dump(), price=30)
        card = buy_card_slot(session, slot)
        assert card == perk()
        assert session.player.currency == 20
        assert [p.perks_applied["contact"] for p in session.team] == [3, 3]
        assert session.player.contact == 60
        assert len(session.player.perks_owned) == 1

    def test_buy_upgrade_slot_raises_base(self):
        session = make_session(currency=20)
        buy_card_slot(session, ShopCardSlot(**upgrade().model_dump(), price=20))
        assert session.player.currency == 0
        assert session.player.stamina == 72
        assert session.team[1].stamina == 50
        assert session.player.perks_owned[0]["kind"] == "upgradeCustom"

    def test_buy_player_card_goes_to_collection(self):
        session = make_session()
        buy_card_slot(session, ShopCardSlot(**player_card().model_dump(), price=40))
        assert session.player.collection == [player_card().model_dump(mode="json")]
        assert session.player.perks_owned == []

    def test_insufficient_funds(self):
        session = make_session(currency=10)
        slot = ShopCardSlot(**perk().model_dump(), price=30)
        with pytest.raises(InsufficientFundsError) as exc:
            buy_card_slot(session, slot)
        assert isinstance(exc.value, ValueError)
        assert (exc.value.price, exc.value.currency) == (30, 10)
        assert session.player.currency == 10
        assert session.player.perks_applied["contact"] == 0

    def test_buy_pack_reveals_without_applying(self):
        session = make_session(currency=50)
        pack = PackSlot(pack_type=PackType.STANDARD, pack_rarity=Rarity.BRONZE,
                        size=3, pick=1, price=27)
        cards = buy_pack_slot(session, pack)
        assert len(cards) == 3
        assert session.player.currency == 23
        assert session.player.perks_owned == []
        assert session.player.collection == []

    def test_buy_pack_insufficient_funds(self):
        session = make_session(currency=5)
        pack = PackSlot(pack_type=PackType.JUMBO, pack_rarity=Rarity.COMMON,
                        size=5, pick=1, price=27)
        with pytest.raises(InsufficientFundsError):
            buy_pack_slot(session, pack)
        assert session.player.currency == 5

    def test_claim_pack_cards(self):
        session = make_session()
        pack = PackSlot(pack_type=PackType.ULTRA, pack_rarity=Rarity.SILVER,
                        size=5, pick=2, price=0)
        revealed = [perk(), upgrade(), player_card(), perk("eye", 1), upgrade("power", 1)]
        kept = claim_pack_cards(session, pack, revealed, [2, 0])
        assert kept == [player_card(), perk()]
        assert len(session.player.collection) == 1
        assert len(session.player.perks_owned) == 1
        assert session.team[1].perks_applied["contact"] == 3

    def test_claim_nothing(self):
        session = make_session()
        pack = PackSlot(pack_type=PackType.STANDARD, pack_rarity=Rarity.COMMON,
                        size=3, pick=1, price=0)
        assert claim_pack_cards(session, pack, [perk(), perk(), perk()], []) == []

    @pytest.mark.parametrize("pack_type,picks,chosen", [
        (PackType.ULTRA, 2, [1, 1]),
        (PackType.STANDARD, 1, [0, 1]),
        (PackType.STANDARD, 1, [5]),
        (PackType.STANDARD, 1, [-1]),
    ])
    def test_claim_rejected(self, pack_type, picks, chosen):
        session = make_session()
        pack = PackSlot(pack_type=pack_type, pack_rarity=Rarity.COMMON, size=3,
                        pick=picks, price=0)
        with pytest.raises(ValueError):
            claim_pack_cards(session, pack, [perk(), upgrade(), player_card()], chosen)
        assert session.player.perks_owned == []
        assert session.player.collection == []

    def test_all_rarities_have_boosts(self):
        rng = random.Random(2)
        for rarity in RARITIES:
            pack = PackSlot(pack_type=PackType.JUMBO, pack_rarity=rarity, size=5, pick=1, price=0)
            for card in open_pack(pack, rng):
                if card.kind != CardKind.PLAYER_CARD:
                    assert 1 <= card.amount <= 6
