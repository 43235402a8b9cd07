from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Hashable, List, Protocol, Sequence, Tuple

from .models import GameState, PlayerResult

if TYPE_CHECKING:
    from .game import CasinoGame

LOGGER = logging.getLogger("casino.settlement")


def split_pot(total_pot: int, winners: Sequence[Hashable]) -> Dict[Hashable, int]:
    """Split ``total_pot`` evenly; odd chips go to the earliest seats."""
    if not winners:
        return {}
    share, remainder = divmod(total_pot, len(winners))
    return {winner: share + (1 if idx < remainder else 0) for idx, winner in enumerate(winners)}


def even_money(result: PlayerResult, wager: int) -> int:
    """Net change for games paying 1:1 with pushes returned."""
    if result == PlayerResult.WON:
        return wager
    if result == PlayerResult.LOST:
        return -wager
    return 0


class Ledger(Protocol):
    def apply(self, player_id: Hashable, amount: int, reason: str) -> None:
        ...


@dataclass
class InMemoryLedger:
    balances: Dict[Hashable, int] = field(default_factory=dict)
    history: List[Tuple[Hashable, int, str]] = field(default_factory=list)

    def balance(self, player_id: Hashable) -> int:
        return self.balances.get(player_id, 0)

    def apply(self, player_id: Hashable, amount: int, reason: str) -> None:
        self.balances[player_id] = self.balance(player_id) + amount
        self.history.append((player_id, amount, reason))


def settle(game: "CasinoGame", ledger: Ledger) -> List[Tuple[Hashable, int]]:
    """Apply each human player's payout once the game is complete.

    Abandoned games settle nothing. AI seats never touch the ledger.
    """
    if game.state == GameState.ABANDONED:
        LOGGER.info("%s abandoned; nothing to settle", game.name)
        return []
    applied: List[Tuple[Hashable, int]] = []
    for player_id, amount in game.payouts():
        if game.get_player(player_id).is_ai:
            continue
        ledger.apply(player_id, amount, game.name)
        applied.append((player_id, amount))
    LOGGER.info("Settled %s: %s", game.name, applied)
    return applied
