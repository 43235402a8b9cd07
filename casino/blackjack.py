from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .cards import Card, Deck
from .errors import IllegalAction
from .game import CasinoGame
from .models import BlackjackAction, DeferredAction, GameConfig, GameState, Player, PlayerResult, Variant
from .settlement import even_money

LOGGER = logging.getLogger("casino.blackjack")

BLACKJACK = 21
DEALER_STAND_ON = 17
TERMINAL_ACTIONS = (BlackjackAction.STAND, BlackjackAction.DOUBLE_DOWN)


def hand_value_with_aces(cards: Sequence[Card]) -> Tuple[int, int]:
    """Return ``(value, aces_still_counted_as_eleven)``."""
    value = 0
    soft_aces = 0
    for card in cards:
        if card.is_ace:
            soft_aces += 1
            value += 11
        elif card.rank > 10:
            value += 10
        else:
            value += card.rank
    while value > BLACKJACK and soft_aces > 0:
        value -= 10
        soft_aces -= 1
    return value, soft_aces


def hand_value(cards: Sequence[Card]) -> int:
    return hand_value_with_aces(cards)[0]


def is_soft_17(cards: Sequence[Card]) -> bool:
    value, soft_aces = hand_value_with_aces(cards)
    return value == DEALER_STAND_ON and soft_aces > 0


def is_blackjack(cards: Sequence[Card]) -> bool:
    return len(cards) == 2 and hand_value(cards) == BLACKJACK


def is_busted(cards: Sequence[Card]) -> bool:
    return hand_value(cards) > BLACKJACK


def dealer_should_hit(cards: Sequence[Card]) -> bool:
    return hand_value(cards) < DEALER_STAND_ON or is_soft_17(cards)


@dataclass
class BlackjackHand:
    cards: List[Card] = field(default_factory=list)


class Blackjack(CasinoGame[BlackjackHand]):
    """Every seat plays against the house dealer; the dealer hits soft 17."""

    variant = Variant.BLACKJACK
    name = "Blackjack"
    action_type = BlackjackAction
    min_players = 1
    max_players = 7
    has_dealer = True

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        super().__init__(config, rng)
        self.deck = Deck(rng=self.rng)
        self.dealer_cards: List[Card] = []
        self.dealer_actions: List[BlackjackAction] = []

    def create_player_data(self, player: Player) -> BlackjackHand:
        return BlackjackHand()

    def initialize_game(self) -> None:
        # One 52-card set per seat keeps the shoe from running dry.
        self.deck = Deck(
            joker_count=0,
            times=max(1, len(self.players) * self.config.decks_per_player),
            rng=self.rng,
        )
        self.deck.shuffle()
        self.dealer_cards.clear()
        self.dealer_actions.clear()
        for _ in range(2):
            for player in self.players:
                card = self.deck.draw()
                if card is not None:
                    self.data[player.player_id].cards.append(card)
            card = self.deck.draw()
            if card is not None:
                self.dealer_cards.append(card)

    # Hand helpers ----------------------------------------------------

    def cards_of(self, player: Player) -> List[Card]:
        return self.data[player.player_id].cards

    def player_value(self, player: Player) -> int:
        return hand_value(self.cards_of(player))

    def dealer_value(self) -> int:
        return hand_value(self.dealer_cards)

    def is_finished(self, player: Player) -> bool:
        cards = self.cards_of(player)
        last = player.actions[-1] if player.actions else None
        return last in TERMINAL_ACTIONS or is_busted(cards) or is_blackjack(cards)

    # Turns -----------------------------------------------------------

    def current_player_locked(self) -> Optional[Player]:
        # min() keeps the first seat among equal action counts.
        waiting = [player for player in self.players if not self.is_finished(player)]
        if not waiting:
            return None
        return min(waiting, key=lambda player: len(player.actions))

    def perform_action(self, player: Player, action: Enum, index: Optional[int]) -> Optional[Enum]:
        hand = self.data[player.player_id]
        if action == BlackjackAction.STAND:
            return None
        if action not in (BlackjackAction.HIT, BlackjackAction.DOUBLE_DOWN):
            raise IllegalAction(f"Unsupported action {action}")
        card = self.deck.draw()
        if card is None:
            LOGGER.warning("Shoe exhausted; %s stands on %d", player.player_id, hand_value(hand.cards))
            return BlackjackAction.STAND
        hand.cards.append(card)
        if action == BlackjackAction.DOUBLE_DOWN:
            # Funds for the doubled wager are checked by the host before this call.
            player.wager *= 2
        return None

    def should_finish(self) -> bool:
        return super().should_finish() and not self.can_dealer_act()

    # Dealer ----------------------------------------------------------

    def can_dealer_act(self) -> bool:
        if self.current_player_locked() is not None:
            return False
        if is_busted(self.dealer_cards):
            return False
        if self.dealer_actions and self.dealer_actions[-1] == BlackjackAction.STAND:
            return False
        return True

    def dealer_action_locked(self) -> Optional[DeferredAction]:
        if dealer_should_hit(self.dealer_cards):
            return DeferredAction(actor="dealer", description=BlackjackAction.HIT.value, execute=self._dealer_hit)
        return DeferredAction(actor="dealer", description=BlackjackAction.STAND.value, execute=self._dealer_stand)

    def _dealer_hit(self) -> bool:
        with self._lock:
            if not self._dealer_turn_open():
                return False
            card = self.deck.draw()
            if card is None:
                self.dealer_actions.append(BlackjackAction.STAND)
            else:
                self.dealer_cards.append(card)
                self.dealer_actions.append(BlackjackAction.HIT)
                LOGGER.debug("Dealer draws %s (value %d)", card.label, self.dealer_value())
            self._maybe_finish()
            return True

    def _dealer_stand(self) -> bool:
        with self._lock:
            if not self._dealer_turn_open():
                return False
            self.dealer_actions.append(BlackjackAction.STAND)
            LOGGER.debug("Dealer stands on %d", self.dealer_value())
            self._maybe_finish()
            return True

    def _dealer_turn_open(self) -> bool:
        return self.state == GameState.IN_PROGRESS and self.can_dealer_act()

    def ai_action_locked(self, player: Player) -> Optional[DeferredAction]:
        cards = self.cards_of(player)
        action = BlackjackAction.HIT if dealer_should_hit(cards) else BlackjackAction.STAND
        return self._deferred_player_action(player, action)

    def timeout_action(self, player: Player) -> Optional[Tuple[Enum, Optional[int]]]:
        return BlackjackAction.STAND, None

    # Results ---------------------------------------------------------

    def player_result(self, player: Player) -> PlayerResult:
        cards = self.cards_of(player)
        if is_blackjack(cards):
            return PlayerResult.WON
        if is_busted(cards):
            return PlayerResult.LOST
        if is_busted(self.dealer_cards):
            return PlayerResult.WON
        player_value = hand_value(cards)
        dealer_value = self.dealer_value()
        if player_value > dealer_value:
            return PlayerResult.WON
        if player_value < dealer_value:
            return PlayerResult.LOST
        return PlayerResult.TIE

    def calculate_payout(self, player: Player, total_pot: int) -> int:
        return even_money(player.result, player.wager)

    # Views -----------------------------------------------------------

    def dealer_revealed(self) -> bool:
        return self.state != GameState.IN_PROGRESS or self.current_player_locked() is None

    def render_view(self, viewer: Optional[Player]) -> str:
        if self.dealer_revealed():
            dealer = f"Dealer: {_format_cards(self.dealer_cards)} ({self.dealer_value()})"
        else:
            shown = self.dealer_cards[:1]
            dealer = f"Dealer: {_format_cards(shown)} ?? ({hand_value(shown)})"
        lines = [dealer]
        current = self.current_player_locked() if self.state == GameState.IN_PROGRESS else None
        for player in self.players:
            cards = self.cards_of(player)
            status = _status(cards, player)
            marker = "▶ " if player is current else ""
            you = " (you)" if player is viewer else ""
            lines.append(
                f"{marker}{player.player_id}{you}: {_format_cards(cards)} ({hand_value(cards)}) "
                f"bet {player.wager}{status}"
            )
        return "\n".join(lines)


def _format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.label for card in cards) or "-"


def _status(cards: Sequence[Card], player: Player) -> str:
    if player.result != PlayerResult.NO_RESULT:
        return f" {player.result.value.lower()}"
    if is_blackjack(cards):
        return " BLACKJACK"
    if is_busted(cards):
        return " BUST"
    if player.actions and player.actions[-1] == BlackjackAction.DOUBLE_DOWN:
        return " doubled"
    if player.actions and player.actions[-1] == BlackjackAction.STAND:
        return " stands"
    return ""
