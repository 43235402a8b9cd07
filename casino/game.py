from __future__ import annotations

import logging
import random
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Generic, List, Optional, Tuple, Type, TypeVar

from .errors import (
    GameNotComplete,
    GameNotInProgress,
    IllegalAction,
    InvalidPlayerCount,
    NotPlayersTurn,
    RosterError,
    StartError,
)
from .models import DeferredAction, GameConfig, GameState, Player, PlayerId, PlayerResult, Variant

LOGGER = logging.getLogger("casino.game")

# CasinoGame owns the rules and nothing else: no sockets, no rendering, no
# balances. Hosts drive it through add_player/start/apply_action and read the
# outcome back through result/payout.

DataT = TypeVar("DataT")


class CasinoGame(ABC, Generic[DataT]):
    variant: Variant
    name: str = "Game"
    action_type: Type[Enum]
    # Hard bounds; GameConfig may narrow them but never widen them.
    min_players: int = 1
    max_players: int = 1
    has_private_hands: bool = False
    has_dealer: bool = False
    supports_ai: bool = True

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or self.default_config()
        if self.config.min_players < self.min_players or self.config.max_players > self.max_players:
            raise ValueError(
                f"{self.name} supports between {self.min_players} and {self.max_players} players"
            )
        if self.config.min_players > self.config.max_players:
            raise ValueError("min_players cannot exceed max_players")
        self.rng = rng or random.Random()
        self.state = GameState.NOT_STARTED
        self.players: List[Player] = []
        self.data: Dict[PlayerId, DataT] = {}
        self._lock = threading.RLock()
        self._payouts: Optional[Dict[PlayerId, int]] = None

    @classmethod
    def default_config(cls) -> GameConfig:
        return GameConfig(min_players=cls.min_players, max_players=cls.max_players)

    # Roster ----------------------------------------------------------

    def add_player(self, player_id: PlayerId, wager: int, is_ai: bool = False) -> Player:
        with self._lock:
            if self.state != GameState.NOT_STARTED:
                raise RosterError("Game has already started", code="GAME_STARTED")
            if len(self.players) >= self.config.max_players:
                raise RosterError("Table is full", code="ROSTER_FULL")
            if player_id in self.data:
                raise RosterError(f"Player {player_id} already joined", code="DUPLICATE_PLAYER")
            if wager < 0:
                raise RosterError("Wager cannot be negative", code="INVALID_WAGER")
            if is_ai and not self.supports_ai:
                raise RosterError(f"{self.name} cannot seat AI players", code="AI_NOT_SUPPORTED")
            player = Player(player_id=player_id, wager=wager, is_ai=is_ai)
            self.players.append(player)
            self.data[player_id] = self.create_player_data(player)
            return player

    def remove_player(self, player_id: PlayerId) -> None:
        with self._lock:
            if self.state != GameState.NOT_STARTED:
                raise RosterError("Game has already started", code="GAME_STARTED")
            player = self.get_player(player_id)
            self.players.remove(player)
            del self.data[player_id]

    def get_player(self, player_id: PlayerId) -> Player:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise RosterError(f"Unknown player {player_id}", code="UNKNOWN_PLAYER")

    def player_ids(self) -> List[PlayerId]:
        return [player.player_id for player in self.players]

    @property
    def total_pot(self) -> int:
        return sum(player.wager for player in self.players)

    # Lifecycle -------------------------------------------------------

    def start(self) -> None:
        with self._lock:
            if self.state != GameState.NOT_STARTED:
                raise StartError("Game has already started or is finished")
            count = len(self.players)
            if count < self.config.min_players or count > self.config.max_players:
                raise InvalidPlayerCount(
                    f"Player count must be between {self.config.min_players} and "
                    f"{self.config.max_players} for {self.name}, got {count}"
                )
            self.state = GameState.IN_PROGRESS
            self.initialize_game()
            LOGGER.info("%s started with %d player(s)", self.name, count)
            self._maybe_finish()

    def is_complete(self) -> bool:
        return self.state in (GameState.COMPLETE, GameState.ABANDONED)

    def abandon(self) -> None:
        """Mark the game abandoned. Called by hosts; the rules never do this."""
        with self._lock:
            if self.state == GameState.COMPLETE:
                return
            self.state = GameState.ABANDONED
            LOGGER.info("%s abandoned", self.name)

    def should_finish(self) -> bool:
        return self.state == GameState.IN_PROGRESS and self.current_player() is None

    def _maybe_finish(self) -> None:
        if self.state != GameState.IN_PROGRESS or not self.should_finish():
            return
        self.state = GameState.COMPLETE
        for player in self.players:
            player.result = self.player_result(player)
        pot = self.total_pot
        self._payouts = {player.player_id: self.calculate_payout(player, pot) for player in self.players}
        LOGGER.info(
            "%s complete; results=%s",
            self.name,
            {player.player_id: player.result.value for player in self.players},
        )

    # Turns -----------------------------------------------------------

    def current_player(self) -> Optional[PlayerId]:
        with self._lock:
            if self.state != GameState.IN_PROGRESS:
                return None
            player = self.current_player_locked()
            return player.player_id if player else None

    def can_act(self, player: Player) -> bool:
        return self.current_player_locked() is player

    def apply_action(self, player_id: PlayerId, action: Enum, index: Optional[int] = None) -> None:
        with self._lock:
            if self.state != GameState.IN_PROGRESS:
                raise GameNotInProgress("Game is not in progress")
            player = self._find_player(player_id)
            if player is None or not self.can_act(player):
                raise NotPlayersTurn(f"Player {player_id} cannot act right now")
            if not isinstance(action, self.action_type):
                raise IllegalAction(f"Unsupported action {action!r} for {self.name}")
            recorded = self.perform_action(player, action, index)
            player.actions.append(recorded or action)
            LOGGER.debug("%s: player=%s action=%s index=%s", self.name, player_id, action.value, index)
            self._maybe_finish()

    def _find_player(self, player_id: PlayerId) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    # Dealer / AI -----------------------------------------------------

    def can_dealer_act(self) -> bool:
        return False

    def next_dealer_action(self) -> Optional[DeferredAction]:
        with self._lock:
            if self.state != GameState.IN_PROGRESS or not self.has_dealer or not self.can_dealer_act():
                return None
            return self.dealer_action_locked()

    def next_ai_action(self) -> Optional[DeferredAction]:
        with self._lock:
            if self.state != GameState.IN_PROGRESS:
                return None
            player = self.current_player_locked()
            if player is None or not player.is_ai:
                return None
            return self.ai_action_locked(player)

    def dealer_action_locked(self) -> Optional[DeferredAction]:
        return None

    def ai_action_locked(self, player: Player) -> Optional[DeferredAction]:
        return None

    def _deferred_player_action(self, player: Player, action: Enum, index: Optional[int] = None) -> DeferredAction:
        def execute() -> bool:
            with self._lock:
                if self.state != GameState.IN_PROGRESS or not self.can_act(player):
                    return False
                self.apply_action(player.player_id, action, index)
                return True

        return DeferredAction(
            actor="ai",
            description=action.value,
            execute=execute,
            player_id=player.player_id,
        )

    def timeout_action(self, player: Player) -> Optional[Tuple[Enum, Optional[int]]]:
        """Fallback move when a human player runs out of time, if the game has one."""
        return None

    # Results ---------------------------------------------------------

    def result(self, player_id: PlayerId) -> PlayerResult:
        with self._lock:
            self._require_complete()
            return self.get_player(player_id).result

    def payout(self, player_id: PlayerId, total_pot: Optional[int] = None) -> int:
        with self._lock:
            self._require_complete()
            player = self.get_player(player_id)
            if total_pot is None:
                assert self._payouts is not None
                return self._payouts[player_id]
            return self.calculate_payout(player, total_pot)

    def payouts(self) -> List[Tuple[PlayerId, int]]:
        with self._lock:
            self._require_complete()
            assert self._payouts is not None
            return [(player.player_id, self._payouts[player.player_id]) for player in self.players]

    def _require_complete(self) -> None:
        if self.state != GameState.COMPLETE:
            raise GameNotComplete(f"{self.name} is not complete")

    # Views -----------------------------------------------------------

    def public_view(self, player_id: PlayerId) -> str:
        with self._lock:
            return self.render_view(self._find_player(player_id))

    def show_hand(self, player_id: PlayerId) -> str:
        with self._lock:
            player = self._find_player(player_id)
            if player is None:
                return "No hand available."
            return self.render_hand(player)

    def render_hand(self, player: Player) -> str:
        return f"{self.name} does not have private hands."

    # Variant hooks ---------------------------------------------------

    @abstractmethod
    def create_player_data(self, player: Player) -> DataT:
        ...

    @abstractmethod
    def initialize_game(self) -> None:
        ...

    @abstractmethod
    def current_player_locked(self) -> Optional[Player]:
        ...

    @abstractmethod
    def perform_action(self, player: Player, action: Enum, index: Optional[int]) -> Optional[Enum]:
        """Mutate variant data. May return the action actually taken, when it differs."""

    @abstractmethod
    def player_result(self, player: Player) -> PlayerResult:
        ...

    @abstractmethod
    def calculate_payout(self, player: Player, total_pot: int) -> int:
        ...

    @abstractmethod
    def render_view(self, viewer: Optional[Player]) -> str:
        ...
