from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .errors import ActionError, RosterError
from .game import CasinoGame
from .models import GameConfig, GameState, PlayerId, Variant
from .registry import new_game
from .settlement import Ledger, settle

LOGGER = logging.getLogger("casino.session")

# GameSession is the async host around one CasinoGame: it owns the lobby,
# the turn clock and the dealer/AI pacing. The game itself stays synchronous.


@dataclass
class PendingTurn:
    player_id: PlayerId
    started_at: float


class GameSession:
    def __init__(
        self,
        variant: Variant,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.game: CasinoGame = new_game(variant, rng=rng, config=config)
        self.lock = asyncio.Lock()
        self.clock = clock
        self.ready: Dict[PlayerId, bool] = {}
        self.pending_turn: Optional[PendingTurn] = None
        self.settled = False
        self._ai_count = 0

    @property
    def config(self) -> GameConfig:
        return self.game.config

    @property
    def max_seats(self) -> int:
        return self.config.max_players

    @property
    def state(self) -> GameState:
        return self.game.state

    @property
    def started(self) -> bool:
        return self.game.state != GameState.NOT_STARTED

    # Lobby -----------------------------------------------------------

    async def join(self, player_id: PlayerId, wager: int) -> None:
        async with self.lock:
            self._require_lobby_locked()
            self.game.add_player(player_id, wager)
            self.ready[player_id] = False
            LOGGER.info("%s joined %s (wager=%s)", player_id, self.game.name, wager)

    async def add_ai(self) -> PlayerId:
        async with self.lock:
            self._require_lobby_locked()
            if not self.game.supports_ai:
                raise RosterError(f"{self.game.name} cannot seat AI players", code="AI_NOT_SUPPORTED")
            self._ai_count += 1
            player_id = f"AI-{self._ai_count}"
            self.game.add_player(player_id, 0, is_ai=True)
            self.ready[player_id] = True
            LOGGER.info("%s seated at %s", player_id, self.game.name)
            self._maybe_start_locked()
            return player_id

    async def leave(self, player_id: PlayerId) -> None:
        async with self.lock:
            self._require_lobby_locked()
            self.game.remove_player(player_id)
            self.ready.pop(player_id, None)
            LOGGER.info("%s left %s", player_id, self.game.name)
            if not any(not player.is_ai for player in self.game.players):
                self.game.abandon()
                return
            self._maybe_start_locked()

    async def set_ready(self, player_id: PlayerId, ready: bool = True) -> None:
        async with self.lock:
            self._require_lobby_locked()
            self.game.get_player(player_id)
            self.ready[player_id] = ready
            self._maybe_start_locked()

    async def set_wager(self, player_id: PlayerId, wager: int) -> None:
        async with self.lock:
            self._require_lobby_locked()
            player = self.game.get_player(player_id)
            if player.is_ai:
                raise RosterError("AI players do not wager", code="INVALID_WAGER")
            if wager < 0:
                raise RosterError("Wager cannot be negative", code="INVALID_WAGER")
            player.wager = wager

    def _require_lobby_locked(self) -> None:
        if self.game.state != GameState.NOT_STARTED:
            raise RosterError("Game has already started", code="GAME_STARTED")

    def _maybe_start_locked(self) -> None:
        players = self.game.players
        if len(players) < self.config.min_players:
            return
        if not all(self.ready.get(player.player_id, False) for player in players):
            return
        self.game.start()
        self._reset_turn_clock_locked()

    # Turns -----------------------------------------------------------

    async def act(self, player_id: PlayerId, action: Enum, index: Optional[int] = None) -> None:
        async with self.lock:
            try:
                self.game.apply_action(player_id, action, index)
            except ActionError as exc:
                LOGGER.warning(
                    "Rejected action player=%s action=%s index=%s reason=%s",
                    player_id,
                    getattr(action, "value", action),
                    index,
                    exc,
                )
                raise
            self._reset_turn_clock_locked()

    async def run_automation(self) -> int:
        """Play dealer and AI moves until a human is up or the game ends."""
        applied = 0
        while True:
            async with self.lock:
                thunk = self.game.next_dealer_action() or self.game.next_ai_action()
            if thunk is None:
                return applied
            if self.config.dealer_delay_ms > 0:
                await asyncio.sleep(self.config.dealer_delay_ms / 1000)
            async with self.lock:
                # The move may have gone stale while we slept.
                if thunk():
                    applied += 1
                    LOGGER.debug("%s %s: %s", self.game.name, thunk.actor, thunk.description)
                self._reset_turn_clock_locked()

    def _reset_turn_clock_locked(self) -> None:
        current = self.game.current_player()
        if current is None:
            self.pending_turn = None
        elif self.pending_turn is None or self.pending_turn.player_id != current:
            self.pending_turn = PendingTurn(player_id=current, started_at=self.clock())
        else:
            self.pending_turn.started_at = self.clock()

    def is_current_player_timed_out(self, now: Optional[float] = None) -> bool:
        if self.pending_turn is None or self.config.turn_timeout_ms <= 0:
            return False
        now = self.clock() if now is None else now
        return (now - self.pending_turn.started_at) * 1000 >= self.config.turn_timeout_ms

    async def handle_timeout(self) -> Optional[Tuple[Enum, Optional[int]]]:
        """Apply the variant's fallback move for the player on the clock.

        Abandons the game when the variant has no safe fallback.
        """
        async with self.lock:
            current = self.game.current_player()
            if current is None:
                return None
            player = self.game.get_player(current)
            fallback = self.game.timeout_action(player)
            if fallback is None:
                LOGGER.warning("%s timed out with no fallback; abandoning %s", current, self.game.name)
                self.game.abandon()
                self.pending_turn = None
                return None
            action, index = fallback
            LOGGER.info("%s timed out; applying %s", current, action.value)
            self.game.apply_action(current, action, index)
            self._reset_turn_clock_locked()
            return fallback

    # Settlement ------------------------------------------------------

    async def finish(self, ledger: Ledger) -> List[Tuple[PlayerId, int]]:
        async with self.lock:
            if self.settled:
                return []
            applied = settle(self.game, ledger)
            self.settled = True
            return applied

    def committed_wager(self, player_id: PlayerId) -> int:
        """Tokens a player has riding on this session and not yet settled."""
        if self.settled or self.game.state == GameState.ABANDONED:
            return 0
        for player in self.game.players:
            if player.player_id == player_id:
                return player.wager
        return 0

    def view(self, player_id: PlayerId) -> str:
        return self.game.public_view(player_id)
