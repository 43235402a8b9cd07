#!/usr/bin/env python3
"""Estimate the player's return per variant by playing many seeded games.

Every game is driven straight through the engine (no session pacing), with a
simple fixed strategy for the human seat. The report is the average net
result per token wagered, so a negative number is the house edge.

Example:
    python scripts/house_edge_sim.py --games 5000 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import random
from typing import Callable, Dict, List

from casino import (
    BlackjackAction,
    CasinoGame,
    InMemoryLedger,
    PokerAction,
    RouletteAction,
    RpsChoice,
    Variant,
    new_game,
    settle,
)
from casino.blackjack import Blackjack, hand_value

LOGGER = logging.getLogger("house_edge_sim")

HUMAN = "sim"
WAGER = 100


def drain_automation(game: CasinoGame) -> None:
    while True:
        thunk = game.next_dealer_action() or game.next_ai_action()
        if thunk is None:
            return
        thunk()


def play_blackjack(rng: random.Random) -> CasinoGame:
    game = new_game(Variant.BLACKJACK, rng=rng)
    assert isinstance(game, Blackjack)
    game.add_player(HUMAN, WAGER)
    game.start()
    while game.current_player() == HUMAN:
        value = hand_value(game.cards_of(game.get_player(HUMAN)))
        if value in (10, 11) and not game.get_player(HUMAN).actions:
            game.apply_action(HUMAN, BlackjackAction.DOUBLE_DOWN)
        elif value < 17:
            game.apply_action(HUMAN, BlackjackAction.HIT)
        else:
            game.apply_action(HUMAN, BlackjackAction.STAND)
    drain_automation(game)
    return game


def play_poker(rng: random.Random) -> CasinoGame:
    game = new_game(Variant.POKER, min_players=2, max_players=2, rng=rng)
    game.add_player(HUMAN, WAGER)
    game.add_player("AI-1", WAGER, is_ai=True)
    game.start()
    for index in rng.sample(range(5), rng.randint(0, 3)):
        game.apply_action(HUMAN, PokerAction.SELECT_CARD, index)
    game.apply_action(HUMAN, PokerAction.CONFIRM_DISCARD)
    drain_automation(game)
    return game


def play_rps(rng: random.Random) -> CasinoGame:
    game = new_game(Variant.ROCK_PAPER_SCISSORS, rng=rng)
    game.add_player(HUMAN, WAGER)
    game.add_player("AI-1", WAGER, is_ai=True)
    game.start()
    game.apply_action(HUMAN, rng.choice(list(RpsChoice)))
    drain_automation(game)
    return game


def play_roulette(rng: random.Random) -> CasinoGame:
    game = new_game(Variant.RUSSIAN_ROULETTE, rng=rng)
    game.add_player(HUMAN, WAGER)
    game.start()
    system = rng.choice([RouletteAction.SELECT_FIXED_RISK, RouletteAction.SELECT_ESCALATING_RISK])
    game.apply_action(HUMAN, system)
    target = rng.randint(1, 5)
    survived = 0
    while not game.is_complete():
        if survived >= target:
            game.apply_action(HUMAN, RouletteAction.CASH_OUT)
        else:
            game.apply_action(HUMAN, RouletteAction.PULL_TRIGGER)
            survived += 1
    return game


PLAYERS: Dict[Variant, Callable[[random.Random], CasinoGame]] = {
    Variant.BLACKJACK: play_blackjack,
    Variant.POKER: play_poker,
    Variant.ROCK_PAPER_SCISSORS: play_rps,
    Variant.RUSSIAN_ROULETTE: play_roulette,
}


def simulate(variant: Variant, games: int, seed: int) -> float:
    ledger = InMemoryLedger()
    wagered = 0
    play = PLAYERS[variant]
    for idx in range(games):
        game = play(random.Random(seed + idx))
        wagered += game.get_player(HUMAN).wager
        settle(game, ledger)
    return ledger.balance(HUMAN) / wagered if wagered else 0.0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Measure empirical player return per casino variant")
    parser.add_argument("--games", type=int, default=2_000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--variant",
        action="append",
        choices=[variant.value for variant in Variant],
        help="Variant to simulate (repeatable; defaults to all)",
    )
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    variants: List[Variant] = [Variant(name) for name in args.variant] if args.variant else list(Variant)
    for variant in variants:
        edge = simulate(variant, args.games, args.seed)
        LOGGER.info("%s finished %d games", variant.value, args.games)
        print(f"{variant.value:<22} return per token: {edge:+.4f}")


if __name__ == "__main__":
    main()
