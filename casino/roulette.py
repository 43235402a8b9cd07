from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_FLOOR, Decimal
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .errors import IllegalAction
from .game import CasinoGame
from .models import GameState, Player, PlayerResult, RouletteAction, RouletteSystem, Variant

LOGGER = logging.getLogger("casino.roulette")

CHAMBER_SIZE = 6
MAX_TURNS = 6

# Indexed by turns survived, capped at the last entry.
PAYOUT_MULTIPLIERS: Dict[RouletteSystem, Tuple[Decimal, ...]] = {
    RouletteSystem.FIXED_RISK: tuple(Decimal(m) for m in ("1.0", "1.1", "1.4", "1.9", "2.9", "5.9")),
    RouletteSystem.ESCALATING_RISK: tuple(Decimal(m) for m in ("1.0", "1.1", "1.65", "3.4", "10.4", "63.0")),
}


def multiplier_for(system: RouletteSystem, turns_survived: int) -> Decimal:
    if system == RouletteSystem.NONE:
        return Decimal("1.0")
    table = PAYOUT_MULTIPLIERS[system]
    return table[min(turns_survived, len(table) - 1)]


def winnings(wager: int, multiplier: Decimal) -> int:
    """Net gain for a cash-out, rounded down to whole tokens."""
    gross = (Decimal(wager) * multiplier).to_integral_value(rounding=ROUND_FLOOR)
    return int(gross) - wager


@dataclass
class RouletteSeat:
    system: RouletteSystem = RouletteSystem.NONE
    turns_survived: int = 0
    chamber: List[bool] = field(default_factory=list)
    ended: bool = False
    won: bool = False

    @property
    def has_selected_system(self) -> bool:
        return self.system != RouletteSystem.NONE


class RussianRoulette(CasinoGame[RouletteSeat]):
    """Single player against the house, escalating multiplier per survived pull.

    FIXED_RISK fails each pull with probability 1/6. ESCALATING_RISK loads one
    more chamber every turn (turn k has k of 6 loaded), so the sixth pull can
    never be survived and the table pays far more for each step.
    """

    variant = Variant.RUSSIAN_ROULETTE
    name = "Russian Roulette"
    action_type = RouletteAction
    min_players = 1
    max_players = 1
    supports_ai = False

    def create_player_data(self, player: Player) -> RouletteSeat:
        return RouletteSeat()

    def initialize_game(self) -> None:
        for player in self.players:
            self.data[player.player_id] = RouletteSeat()

    def current_player_locked(self) -> Optional[Player]:
        for player in self.players:
            if not self.data[player.player_id].ended:
                return player
        return None

    def perform_action(self, player: Player, action: Enum, index: Optional[int]) -> Optional[Enum]:
        seat = self.data[player.player_id]
        if action in (RouletteAction.SELECT_FIXED_RISK, RouletteAction.SELECT_ESCALATING_RISK):
            if seat.has_selected_system:
                raise IllegalAction("System already selected")
            if action == RouletteAction.SELECT_FIXED_RISK:
                seat.system = RouletteSystem.FIXED_RISK
            else:
                seat.system = RouletteSystem.ESCALATING_RISK
                self._load_chamber(seat)
            return None
        if not seat.has_selected_system:
            raise IllegalAction("Must select a system first")
        if action == RouletteAction.PULL_TRIGGER:
            self._pull_trigger(player, seat)
            return None
        if action == RouletteAction.CASH_OUT:
            if seat.turns_survived == 0:
                raise IllegalAction("Cannot cash out before surviving a turn")
            seat.ended = True
            seat.won = True
            return None
        raise IllegalAction(f"Unsupported action {action}")

    def _load_chamber(self, seat: RouletteSeat) -> None:
        loaded = seat.turns_survived + 1
        seat.chamber = [True] * loaded + [False] * (CHAMBER_SIZE - loaded)
        # Fisher-Yates from the back.
        for idx in range(len(seat.chamber) - 1, 0, -1):
            swap = self.rng.randrange(idx + 1)
            seat.chamber[idx], seat.chamber[swap] = seat.chamber[swap], seat.chamber[idx]

    def _pull_trigger(self, player: Player, seat: RouletteSeat) -> None:
        if seat.system == RouletteSystem.FIXED_RISK:
            hit = self.rng.randrange(CHAMBER_SIZE) == 0
        else:
            hit = seat.chamber[0]
        if hit:
            seat.ended = True
            seat.won = False
            LOGGER.debug("%s hit on turn %d", player.player_id, seat.turns_survived + 1)
            return
        seat.turns_survived += 1
        if seat.turns_survived >= MAX_TURNS:
            seat.ended = True
            seat.won = True
        elif seat.system == RouletteSystem.ESCALATING_RISK:
            self._load_chamber(seat)

    def should_finish(self) -> bool:
        return self.state == GameState.IN_PROGRESS and bool(self.players) and all(
            seat.ended for seat in self.data.values()
        )

    def timeout_action(self, player: Player) -> Optional[Tuple[Enum, Optional[int]]]:
        if self.data[player.player_id].turns_survived > 0:
            return RouletteAction.CASH_OUT, None
        return None

    # Payouts ---------------------------------------------------------

    def current_multiplier(self, player_id) -> Decimal:
        seat = self.data[player_id]
        return multiplier_for(seat.system, seat.turns_survived)

    def next_multiplier(self, player_id) -> Decimal:
        seat = self.data[player_id]
        return multiplier_for(seat.system, seat.turns_survived + 1)

    def player_result(self, player: Player) -> PlayerResult:
        seat = self.data[player.player_id]
        if not seat.ended:
            return PlayerResult.NO_RESULT
        return PlayerResult.WON if seat.won else PlayerResult.LOST

    def calculate_payout(self, player: Player, total_pot: int) -> int:
        if player.result == PlayerResult.WON:
            return winnings(player.wager, self.current_multiplier(player.player_id))
        if player.result == PlayerResult.LOST:
            return -player.wager
        return 0

    def render_view(self, viewer: Optional[Player]) -> str:
        if not self.players:
            return "No player seated."
        player = self.players[0]
        seat = self.data[player.player_id]
        if not seat.has_selected_system:
            return "Select your preferred game system to begin."
        turn = min(seat.turns_survived + 1, MAX_TURNS)
        status = (
            f"Turn {turn}/{MAX_TURNS} | Survived: {seat.turns_survived} | "
            f"Current payout: {self.current_multiplier(player.player_id):.2f}x"
        )
        if seat.ended:
            status += " | " + ("cashed out" if seat.won else "hit")
        return status
