from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card, Deck
from .errors import IllegalAction
from .evaluator import HAND_SIZE, PokerHand, determine_winners, evaluate_hand, poker_value
from .game import CasinoGame
from .models import DeferredAction, GameConfig, GameState, Player, PlayerId, PlayerResult, PokerAction, Variant
from .settlement import split_pot

LOGGER = logging.getLogger("casino.poker")


@dataclass
class PokerSeat:
    cards: List[Card] = field(default_factory=list)
    selected: List[bool] = field(default_factory=lambda: [False] * HAND_SIZE)
    has_discarded: bool = False
    final_hand: Optional[PokerHand] = None


class Poker(CasinoGame[PokerSeat]):
    """Five-card draw: one discard round, then showdown."""

    variant = Variant.POKER
    name = "Poker"
    action_type = PokerAction
    min_players = 2
    max_players = 8  # 8 x 5 cards fits in one deck
    has_private_hands = True

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        super().__init__(config, rng)
        self.deck = Deck(rng=self.rng)
        self._winners: Optional[List[PlayerId]] = None

    def create_player_data(self, player: Player) -> PokerSeat:
        return PokerSeat()

    def initialize_game(self) -> None:
        self.deck = Deck(joker_count=0, times=1, rng=self.rng)
        self.deck.shuffle()
        for _ in range(HAND_SIZE):
            for player in self.players:
                card = self.deck.draw()
                if card is not None:
                    self.data[player.player_id].cards.append(card)

    # Turns -----------------------------------------------------------

    def current_player_locked(self) -> Optional[Player]:
        for player in self.players:
            if not self.data[player.player_id].has_discarded:
                return player
        return None

    def perform_action(self, player: Player, action: Enum, index: Optional[int]) -> Optional[Enum]:
        seat = self.data[player.player_id]
        if action == PokerAction.SELECT_CARD:
            if index is None or not 0 <= index < len(seat.selected):
                raise IllegalAction(f"Card index must be between 0 and {HAND_SIZE - 1}, got {index}")
            seat.selected[index] = not seat.selected[index]
            return None
        if action == PokerAction.CONFIRM_DISCARD:
            self._confirm_discard(player, seat)
            return None
        raise IllegalAction(f"Unsupported action {action}")

    def _confirm_discard(self, player: Player, seat: PokerSeat) -> None:
        discarded: List[Card] = []
        for idx, selected in enumerate(seat.selected):
            if not selected or idx >= len(seat.cards):
                continue
            replacement = self.deck.draw()
            if replacement is None:
                # Deck ran out: this slot and any later ones keep their card.
                LOGGER.warning("Deck exhausted while %s was discarding", player.player_id)
                break
            discarded.append(seat.cards[idx])
            seat.cards[idx] = replacement
        self.deck.add_cards(discarded)
        seat.selected = [False] * HAND_SIZE
        seat.has_discarded = True
        LOGGER.debug("%s replaced %d card(s)", player.player_id, len(discarded))

    def should_finish(self) -> bool:
        return self.state == GameState.IN_PROGRESS and all(seat.has_discarded for seat in self.data.values())

    def ai_action_locked(self, player: Player) -> Optional[DeferredAction]:
        return self._deferred_player_action(player, PokerAction.CONFIRM_DISCARD)

    def timeout_action(self, player: Player) -> Optional[Tuple[Enum, Optional[int]]]:
        return PokerAction.CONFIRM_DISCARD, None

    # Showdown --------------------------------------------------------

    def final_hands(self) -> Dict[PlayerId, PokerHand]:
        hands: Dict[PlayerId, PokerHand] = {}
        for player in self.players:
            seat = self.data[player.player_id]
            if seat.final_hand is None and len(seat.cards) == HAND_SIZE:
                seat.final_hand = evaluate_hand(seat.cards)
            if seat.final_hand is not None:
                hands[player.player_id] = seat.final_hand
        return hands

    def winners(self) -> List[PlayerId]:
        if self._winners is None:
            self._winners = determine_winners(self.final_hands())
        return list(self._winners)

    def player_result(self, player: Player) -> PlayerResult:
        seat = self.data[player.player_id]
        if len(seat.cards) != HAND_SIZE:
            return PlayerResult.NO_RESULT
        winners = self.winners()
        if player.player_id not in winners:
            return PlayerResult.LOST
        contenders = len(self.final_hands())
        return PlayerResult.TIE if len(winners) == contenders and contenders > 1 else PlayerResult.WON

    def calculate_payout(self, player: Player, total_pot: int) -> int:
        if player.result == PlayerResult.NO_RESULT:
            return 0
        if player.result == PlayerResult.LOST:
            return -player.wager
        shares = split_pot(total_pot, self.winners())
        return shares[player.player_id] - player.wager

    # Views -----------------------------------------------------------

    def render_hand(self, player: Player) -> str:
        seat = self.data[player.player_id]
        if len(seat.cards) != HAND_SIZE:
            return "Hand incomplete."
        slots = []
        for idx, card in enumerate(seat.cards):
            label = f"[{idx + 1}] {card.label}"
            slots.append(f"~~{label}~~" if seat.selected[idx] else label)
        lines = [f"Your hand: {' '.join(slots)}", f"Hand rank: {evaluate_hand(seat.cards).description}"]
        if any(seat.selected):
            lines.append("(struck-through cards will be discarded)")
        return "\n".join(lines)

    def render_view(self, viewer: Optional[Player]) -> str:
        lines = []
        complete = self.state == GameState.COMPLETE
        for player in self.players:
            seat = self.data[player.player_id]
            if complete:
                hand = seat.final_hand or (evaluate_hand(seat.cards) if len(seat.cards) == HAND_SIZE else None)
                shown = " ".join(card.label for card in sorted(seat.cards, key=poker_value, reverse=True))
                detail = f"{shown} ({hand.description if hand else 'incomplete'}) {player.result.value.lower()}"
            else:
                detail = "discarded" if seat.has_discarded else "choosing"
            lines.append(f"{player.player_id}: {detail}")
        if viewer is not None and not complete and viewer.player_id in self.data:
            lines.append(self.render_hand(viewer))
        return "\n".join(lines)
