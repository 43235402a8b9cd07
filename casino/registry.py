from __future__ import annotations

import random
from dataclasses import replace
from typing import Dict, Optional, Type

from .blackjack import Blackjack
from .game import CasinoGame
from .models import GameConfig, Variant
from .poker import Poker
from .roulette import RussianRoulette
from .rps import RockPaperScissors

GAME_TYPES: Dict[Variant, Type[CasinoGame]] = {
    Variant.BLACKJACK: Blackjack,
    Variant.POKER: Poker,
    Variant.ROCK_PAPER_SCISSORS: RockPaperScissors,
    Variant.RUSSIAN_ROULETTE: RussianRoulette,
}


def game_type(variant: Variant) -> Type[CasinoGame]:
    try:
        return GAME_TYPES[Variant(variant)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown variant {variant!r}") from None


def new_game(
    variant: Variant,
    min_players: Optional[int] = None,
    max_players: Optional[int] = None,
    rng: Optional[random.Random] = None,
    config: Optional[GameConfig] = None,
) -> CasinoGame:
    """Create an unstarted game, narrowing the variant's player bounds if asked.

    Raises ``ValueError`` when the requested range falls outside what the
    variant supports.
    """
    cls = game_type(variant)
    base = config or cls.default_config()
    config = replace(
        base,
        min_players=base.min_players if min_players is None else min_players,
        max_players=base.max_players if max_players is None else max_players,
    )
    return cls(config, rng=rng)
