from __future__ import annotations

import random
from typing import Dict, Sequence

from casino.blackjack import Blackjack
from casino.cards import Deck, parse_cards
from casino.game import CasinoGame
from casino.models import GameConfig
from casino.poker import Poker


class LastSlotRandom(random.Random):
    """``randrange`` always answers with the highest value in range."""

    def randrange(self, start, stop=None, step=1):
        if stop is None:
            start, stop = 0, start
        return stop - 1


class FirstSlotRandom(random.Random):
    """``randrange`` always answers with the lowest value in range."""

    def randrange(self, start, stop=None, step=1):
        if stop is None:
            return 0
        return start


def stacked_deck(labels: Sequence[str], rng: random.Random | None = None) -> Deck:
    return Deck.from_cards(parse_cards(labels), rng=rng)


def rig_blackjack(
    hands: Dict[str, Sequence[str]],
    dealer: Sequence[str],
    shoe: Sequence[str] = (),
    *,
    wager: int = 10,
    ai: Sequence[str] = (),
) -> Blackjack:
    """Start a blackjack game, then replace every hand and the shoe."""
    game = Blackjack(GameConfig(min_players=1, max_players=7), rng=random.Random(0))
    for player_id in hands:
        game.add_player(player_id, wager, is_ai=player_id in ai)
    game.start()
    for player_id, labels in hands.items():
        game.data[player_id].cards = parse_cards(labels)
    game.dealer_cards = parse_cards(dealer)
    game.deck = stacked_deck(shoe, rng=game.rng)
    return game


def rig_poker(
    hands: Dict[str, Sequence[str]],
    deck: Sequence[str] = (),
    *,
    wagers: Dict[str, int] | None = None,
    ai: Sequence[str] = (),
) -> Poker:
    game = Poker(GameConfig(min_players=2, max_players=8), rng=random.Random(0))
    for player_id in hands:
        wager = (wagers or {}).get(player_id, 10)
        game.add_player(player_id, wager, is_ai=player_id in ai)
    game.start()
    for player_id, labels in hands.items():
        game.data[player_id].cards = parse_cards(labels)
    game.deck = stacked_deck(deck, rng=game.rng)
    return game


def drain(game: CasinoGame) -> int:
    """Run dealer and AI moves until none are pending."""
    applied = 0
    while True:
        thunk = game.next_dealer_action() or game.next_ai_action()
        if thunk is None:
            return applied
        if thunk():
            applied += 1
