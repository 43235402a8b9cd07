from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .game import CasinoGame
from .models import DeferredAction, GameState, Player, PlayerResult, RpsChoice, Variant
from .settlement import even_money

LOGGER = logging.getLogger("casino.rps")

BEATS = {
    RpsChoice.ROCK: RpsChoice.SCISSORS,
    RpsChoice.PAPER: RpsChoice.ROCK,
    RpsChoice.SCISSORS: RpsChoice.PAPER,
}
BEAT_DESCRIPTIONS = {
    RpsChoice.ROCK: "Rock crushes Scissors",
    RpsChoice.PAPER: "Paper covers Rock",
    RpsChoice.SCISSORS: "Scissors cuts Paper",
}


def resolve(choice: RpsChoice, opponent: RpsChoice) -> PlayerResult:
    if choice == opponent:
        return PlayerResult.TIE
    return PlayerResult.WON if BEATS[choice] == opponent else PlayerResult.LOST


@dataclass
class RpsHand:
    choice: Optional[RpsChoice] = None


class RockPaperScissors(CasinoGame[RpsHand]):
    variant = Variant.ROCK_PAPER_SCISSORS
    name = "Rock Paper Scissors"
    action_type = RpsChoice
    min_players = 2
    max_players = 2

    def create_player_data(self, player: Player) -> RpsHand:
        return RpsHand()

    def initialize_game(self) -> None:
        for hand in self.data.values():
            hand.choice = None

    def current_player_locked(self) -> Optional[Player]:
        for player in self.players:
            if self.data[player.player_id].choice is None:
                return player
        return None

    def can_act(self, player: Player) -> bool:
        # Either player may throw first.
        return self.data[player.player_id].choice is None

    def perform_action(self, player: Player, action: Enum, index: Optional[int]) -> Optional[Enum]:
        self.data[player.player_id].choice = RpsChoice(action)
        return None

    def should_finish(self) -> bool:
        return self.state == GameState.IN_PROGRESS and all(hand.choice is not None for hand in self.data.values())

    def opponent_of(self, player: Player) -> Player:
        return next(other for other in self.players if other is not player)

    def player_result(self, player: Player) -> PlayerResult:
        if len(self.players) != 2:
            return PlayerResult.NO_RESULT
        mine = self.data[player.player_id].choice
        theirs = self.data[self.opponent_of(player).player_id].choice
        if mine is None or theirs is None:
            return PlayerResult.NO_RESULT
        return resolve(mine, theirs)

    def calculate_payout(self, player: Player, total_pot: int) -> int:
        return even_money(player.result, player.wager)

    def ai_action_locked(self, player: Player) -> Optional[DeferredAction]:
        return self._deferred_player_action(player, self.rng.choice(list(RpsChoice)))

    def timeout_action(self, player: Player) -> Optional[Tuple[Enum, Optional[int]]]:
        return self.rng.choice(list(RpsChoice)), None

    def next_ai_action(self) -> Optional[DeferredAction]:
        # Turns are simultaneous, so any AI seat still to throw may go.
        with self._lock:
            if self.state != GameState.IN_PROGRESS:
                return None
            for player in self.players:
                if player.is_ai and self.can_act(player):
                    return self.ai_action_locked(player)
            return None

    def render_view(self, viewer: Optional[Player]) -> str:
        lines = []
        for player in self.players:
            choice = self.data[player.player_id].choice
            if self.state == GameState.COMPLETE and choice is not None:
                detail = f"{choice.value.title()} ({player.result.value.lower()})"
            elif choice is not None and player is viewer:
                detail = f"chose {choice.value.title()}"
            else:
                detail = "ready" if choice is not None else "thinking"
            lines.append(f"{player.player_id}: {detail}")
        if self.state == GameState.COMPLETE:
            winner = next((p for p in self.players if p.result == PlayerResult.WON), None)
            if winner is not None:
                lines.append(BEAT_DESCRIPTIONS[self.data[winner.player_id].choice])
            else:
                lines.append("It's a tie")
        return "\n".join(lines)
