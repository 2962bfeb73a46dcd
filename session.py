# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Game session: the explicit owner of the economy and half-inning state.

The session holds the player being managed, the active roster that team
perks apply to, and the random source every roll uses.  It serialises plate
appearances and turns each at-bat outcome into its economy effect.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dice import RandomSource, make_rng
from models import AtBatOutcome, AtBatResult, Count, Rarity
from player import PlayerRecord
from simulation import AtBatEngine

logger = logging.getLogger(__name__)


CURRENCY_REWARDS: dict[AtBatOutcome, int] = {
    AtBatOutcome.WALK: 2,
    AtBatOutcome.SINGLE: 3,
    AtBatOutcome.BUNT_HIT: 3,
    AtBatOutcome.EXTRA_BASE_HIT: 6,
}

OUTS_PER_HALF_INNING = 3
MAX_RUNNERS = 3


class AtBatInProgressError(RuntimeError):
    """A plate appearance was triggered while another was still resolving."""


@dataclass
class PlateAppearance:
    """One resolved plate appearance, as the scene layer sees it."""
    result: AtBatResult
    pitcher_id: str
    batter_id: str
    currency_awarded: int = 0
    outs_after: int = 0
    runners_after: int = 0
    half_inning_over: bool = False


@dataclass
class GameSession:
    """Mutable state for one run of the game."""
    player: PlayerRecord
    team: list[PlayerRecord] = field(default_factory=list)
    rng: RandomSource = field(default_factory=make_rng)

    outs: int = 0
    runners_on: int = 0
    half_innings_completed: int = 0
    log: list[PlateAppearance] = field(default_factory=list)

    _in_progress: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.engine = AtBatEngine(rng=self.rng)

    @property
    def unlocked_max_rarity(self) -> Rarity:
        return self.player.unlocked_max_rarity

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    # -------------------------------------------------------------------
    # Plate appearances
    # -------------------------------------------------------------------

    def play_at_bat(self, pitcher: PlayerRecord, batter: PlayerRecord,
                    count: Count | dict | None = None) -> PlateAppearance:
        """Resolve a plate appearance and apply its effects.

        Raises:
            AtBatInProgressError: if called while another plate appearance
                is still being resolved.
        """
        if self._in_progress:
            raise AtBatInProgressError("A plate appearance is already in progress")
        self._in_progress = True
        try:
            result = self.engine.resolve_at_bat(pitcher, batter, count, self.runners_on)
            return self.apply_result(result, pitcher.id, batter.id)
        finally:
            self._in_progress = False

    def apply_result(self, result: AtBatResult, pitcher_id: str = "",
                     batter_id: str = "") -> PlateAppearance:
        """Apply the economy and out-counter effects of one outcome."""
        reward = CURRENCY_REWARDS.get(result.outcome, 0)
        self.player.currency += reward

        if result.is_out:
            self.outs += 1
        else:
            self.runners_on = min(MAX_RUNNERS, self.runners_on + 1)

        pa = PlateAppearance(
            result=result, pitcher_id=pitcher_id, batter_id=batter_id,
            currency_awarded=reward, outs_after=self.outs, runners_after=self.runners_on,
        )
        if self.outs >= OUTS_PER_HALF_INNING:
            self._end_half_inning()
            pa.half_inning_over = True
        self.log.append(pa)
        return pa

    def _end_half_inning(self) -> None:
        self.half_innings_completed += 1
        logger.info(
            "half-inning %d over, %s has %d coins",
            self.half_innings_completed, self.player.name, self.player.currency,
        )
        self.outs = 0
        self.runners_on = 0

    def simulate_half_inning(self, pitcher: PlayerRecord, lineup: list[PlayerRecord],
                             start_index: int = 0, max_plate_appearances: int = 100) -> int:
        """Play plate appearances until three outs; return the next lineup index.

        ``max_plate_appearances`` stops a half-inning that never reaches three
        outs (e.g. a pitcher who walks everyone).
        """
        if not lineup:
            raise ValueError("Lineup must contain at least one batter")
        idx = start_index
        completed = self.half_innings_completed
        for _ in range(max_plate_appearances):
            self.play_at_bat(pitcher, lineup[idx % len(lineup)])
            idx = (idx + 1) % len(lineup)
            if self.half_innings_completed > completed:
                break
        return idx
