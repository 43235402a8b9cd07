from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Hashable, List, Optional


class GameState(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETE = "COMPLETE"
    ABANDONED = "ABANDONED"


class PlayerResult(str, Enum):
    NO_RESULT = "NO_RESULT"
    WON = "WON"
    LOST = "LOST"
    TIE = "TIE"


class Variant(str, Enum):
    BLACKJACK = "BLACKJACK"
    POKER = "POKER"
    ROCK_PAPER_SCISSORS = "ROCK_PAPER_SCISSORS"
    RUSSIAN_ROULETTE = "RUSSIAN_ROULETTE"


class BlackjackAction(str, Enum):
    HIT = "HIT"
    STAND = "STAND"
    DOUBLE_DOWN = "DOUBLE_DOWN"


class PokerAction(str, Enum):
    SELECT_CARD = "SELECT_CARD"
    CONFIRM_DISCARD = "CONFIRM_DISCARD"


class RpsChoice(str, Enum):
    ROCK = "ROCK"
    PAPER = "PAPER"
    SCISSORS = "SCISSORS"


class RouletteAction(str, Enum):
    SELECT_FIXED_RISK = "SELECT_FIXED_RISK"
    SELECT_ESCALATING_RISK = "SELECT_ESCALATING_RISK"
    PULL_TRIGGER = "PULL_TRIGGER"
    CASH_OUT = "CASH_OUT"


class RouletteSystem(str, Enum):
    NONE = "NONE"
    FIXED_RISK = "FIXED_RISK"
    ESCALATING_RISK = "ESCALATING_RISK"


PlayerId = Hashable


@dataclass
class GameConfig:
    min_players: int = 1
    max_players: int = 1
    decks_per_player: int = 1
    joker_count: int = 0
    turn_timeout_ms: int = 60_000
    dealer_delay_ms: int = 1_000


@dataclass
class Player:
    player_id: PlayerId
    wager: int
    is_ai: bool = False
    result: PlayerResult = PlayerResult.NO_RESULT
    actions: List[Enum] = field(default_factory=list)


@dataclass
class DeferredAction:
    """A dealer or AI move packaged for the host to run when it chooses.

    ``execute`` re-checks eligibility against the game at call time and returns
    ``False`` when the move no longer applies.
    """

    actor: str
    description: str
    execute: Callable[[], bool]
    player_id: Optional[PlayerId] = None

    def __call__(self) -> bool:
        return self.execute()
