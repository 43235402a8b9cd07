from __future__ import annotations


class CasinoError(Exception):
    """Recoverable engine error. ``code`` is stable for hosts to switch on."""

    code = "CASINO_ERROR"

    def __init__(self, msg: str, code: str | None = None) -> None:
        super().__init__(msg)
        self.msg = msg
        if code is not None:
            self.code = code


class RosterError(CasinoError):
    code = "ROSTER_ERROR"


class StartError(CasinoError):
    code = "ALREADY_STARTED"


class InvalidPlayerCount(StartError):
    code = "INVALID_PLAYER_COUNT"


class ActionError(CasinoError):
    code = "ACTION_ERROR"


class GameNotInProgress(ActionError):
    code = "GAME_NOT_IN_PROGRESS"


class NotPlayersTurn(ActionError):
    code = "NOT_PLAYERS_TURN"


class IllegalAction(ActionError):
    code = "ILLEGAL_ACTION"


class GameNotComplete(CasinoError):
    code = "GAME_NOT_COMPLETE"


class InvalidHandSize(ValueError):
    """Raised when the evaluator is handed anything but five cards."""
