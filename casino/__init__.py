"""Turn-based casino games: rules, payouts and an async session host."""

from .blackjack import Blackjack
from .cards import Card, Deck, Suit, parse_cards
from .errors import (
    ActionError,
    CasinoError,
    GameNotComplete,
    GameNotInProgress,
    IllegalAction,
    InvalidHandSize,
    InvalidPlayerCount,
    NotPlayersTurn,
    RosterError,
    StartError,
)
from .evaluator import HandRank, PokerHand, compare_hands, determine_winners, evaluate_hand
from .game import CasinoGame
from .models import (
    BlackjackAction,
    DeferredAction,
    GameConfig,
    GameState,
    Player,
    PlayerResult,
    PokerAction,
    RouletteAction,
    RouletteSystem,
    RpsChoice,
    Variant,
)
from .poker import Poker
from .registry import GAME_TYPES, new_game
from .roulette import RussianRoulette
from .rps import RockPaperScissors
from .session import GameSession
from .settlement import InMemoryLedger, Ledger, settle, split_pot

__all__ = [
    "Blackjack",
    "Card",
    "Deck",
    "Suit",
    "parse_cards",
    "ActionError",
    "CasinoError",
    "GameNotComplete",
    "GameNotInProgress",
    "IllegalAction",
    "InvalidHandSize",
    "InvalidPlayerCount",
    "NotPlayersTurn",
    "RosterError",
    "StartError",
    "HandRank",
    "PokerHand",
    "compare_hands",
    "determine_winners",
    "evaluate_hand",
    "CasinoGame",
    "BlackjackAction",
    "DeferredAction",
    "GameConfig",
    "GameState",
    "Player",
    "PlayerResult",
    "PokerAction",
    "RouletteAction",
    "RouletteSystem",
    "RpsChoice",
    "Variant",
    "Poker",
    "GAME_TYPES",
    "new_game",
    "RussianRoulette",
    "RockPaperScissors",
    "GameSession",
    "InMemoryLedger",
    "Ledger",
    "settle",
    "split_pot",
]
