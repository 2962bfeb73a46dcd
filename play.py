# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Play a short run from the command line.

Creates (or loads) a pitcher, drafts an opposing lineup, simulates
half-innings against it and then shows the shop the run would open.

Usage:
    uv run play.py --seed 42
    uv run play.py --seed 7 --half-innings 3 --rarity silver --verbose
    uv run play.py --player-id pl_1a2b3c --save
"""

from __future__ import annotations

import argparse
import logging
import sys

from config import get_data_dir, get_default_seed, get_log_level
from dice import make_rng
from draft import generate_draft_pool
from models import Position, Rarity
from player import create_custom_player
from session import GameSession
from shop import generate_shop_round
from store import JsonFileStore, ProfileStore

LINEUP_POSITIONS = [
    Position.CF, Position.SS, Position.FIRST_BASE, Position.DH, Position.RF,
    Position.THIRD_BASE, Position.LF, Position.C, Position.SECOND_BASE,
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate half-innings of the pixel-ball roguelike."
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for deterministic replay.",
    )
    parser.add_argument(
        "--half-innings", type=int, default=1,
        help="Number of half-innings to pitch (default: 1).",
    )
    parser.add_argument(
        "--rarity", default=Rarity.COMMON.value, choices=[r.value for r in Rarity],
        help="Rarity of the drafted opposing lineup (default: common).",
    )
    parser.add_argument(
        "--name", default="Player",
        help="Name for a newly created pitcher.",
    )
    parser.add_argument(
        "--player-id", default=None,
        help="Load this saved player instead of creating one.",
    )
    parser.add_argument(
        "--save", action="store_true",
        help="Save the player to the profile store after the run.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Print every plate appearance.",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    seed = args.seed if args.seed is not None else get_default_seed()
    rng = make_rng(seed)
    profiles = ProfileStore(JsonFileStore(get_data_dir()))

    if args.player_id:
        player = profiles.load_player(args.player_id)
        if player is None:
            print(f"Error: no saved player {args.player_id!r}", file=sys.stderr)
            return 1
    else:
        player = create_custom_player(args.name, Position.P, rng=rng)

    if args.half_innings < 1:
        raise ValueError("--half-innings must be at least 1")

    lineup = generate_draft_pool(LINEUP_POSITIONS, args.rarity, rng=rng)
    session = GameSession(player=player, team=[player], rng=rng)

    seed_note = f", seed {seed}" if seed is not None else ""
    print(f"{player.name} (OVR {player.overall}, {player.currency} coins) "
          f"vs a {args.rarity} lineup{seed_note}")
    print("=" * 60)

    idx = 0
    for half in range(1, args.half_innings + 1):
        start = len(session.log)
        idx = session.simulate_half_inning(player, lineup, idx)
        if args.verbose:
            print(f"\n--- Half-inning {half} ---")
            names = {p.id: p.name for p in lineup}
            for pa in session.log[start:]:
                r = pa.result
                detail = f" ({r.pitch_type}, {r.swing_type.value})" if r.pitch_type else ""
                coins = f" +{pa.currency_awarded}" if pa.currency_awarded else ""
                print(f"  {names.get(pa.batter_id, pa.batter_id):<18} {r.outcome.value:<13}{detail}{coins}")

    outcomes: dict[str, int] = {}
    for pa in session.log:
        outcomes[pa.result.outcome.value] = outcomes.get(pa.result.outcome.value, 0) + 1

    hits = sum(pa.result.is_hit for pa in session.log)
    print(f"\nPlate appearances: {len(session.log)}  Hits: {hits}")
    for name, n in sorted(outcomes.items()):
        print(f"  {name:<13} {n:>3}")
    print(f"Coins: {player.currency}  Stamina left: {player.stamina}")

    shop = generate_shop_round(session, rng)
    print("\nShop:")
    for slot in shop.card_slots:
        print(f"  {slot.display_name:<36} {slot.price:>4}")
    for pack in shop.pack_slots:
        label = f"{pack.pack_rarity.value} {pack.pack_type.value} pack ({pack.size}, pick {pack.pick})"
        print(f"  {label:<36} {pack.price:>4}")

    if args.save:
        profiles.save_player(player)
        profiles.set_current(player.id)
        print(f"\nSaved {player.id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=get_log_level(),
        format="%(levelname)s: %(message)s",
    )

    try:
        return run(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
