import pytest

from casino import new_game
from casino.errors import GameNotComplete
from casino.models import PlayerResult, RpsChoice, Variant
from casino.settlement import InMemoryLedger, even_money, settle, split_pot


def finished_rps(ai: bool = False):
    game = new_game(Variant.ROCK_PAPER_SCISSORS)
    game.add_player("alice", 25)
    game.add_player("bob", 25, is_ai=ai)
    game.start()
    game.apply_action("alice", RpsChoice.ROCK)
    game.apply_action("bob", RpsChoice.SCISSORS)
    return game


def test_split_pot_gives_remainder_to_earliest_winners():
    assert split_pot(100, ["a", "b", "c"]) == {"a": 34, "b": 33, "c": 33}
    assert split_pot(101, ["a", "b", "c"]) == {"a": 34, "b": 34, "c": 33}
    assert split_pot(50, ["solo"]) == {"solo": 50}
    assert split_pot(50, []) == {}


@pytest.mark.parametrize(
    "result,expected",
    [(PlayerResult.WON, 40), (PlayerResult.LOST, -40), (PlayerResult.TIE, 0), (PlayerResult.NO_RESULT, 0)],
)
def test_even_money(result, expected):
    assert even_money(result, 40) == expected


def test_settle_applies_each_payout():
    ledger = InMemoryLedger(balances={"alice": 100, "bob": 100})
    applied = settle(finished_rps(), ledger)
    assert applied == [("alice", 25), ("bob", -25)]
    assert ledger.balance("alice") == 125
    assert ledger.balance("bob") == 75
    assert ledger.history == [("alice", 25, "Rock Paper Scissors"), ("bob", -25, "Rock Paper Scissors")]


def test_settle_skips_ai_players():
    ledger = InMemoryLedger()
    assert settle(finished_rps(ai=True), ledger) == [("alice", 25)]
    assert "bob" not in ledger.balances


def test_settle_abandoned_game_moves_nothing():
    game = new_game(Variant.ROCK_PAPER_SCISSORS)
    game.add_player("alice", 25)
    game.add_player("bob", 25)
    game.start()
    game.abandon()
    ledger = InMemoryLedger()
    assert settle(game, ledger) == []
    assert ledger.history == []


def test_settle_unfinished_game_raises():
    game = new_game(Variant.ROCK_PAPER_SCISSORS)
    game.add_player("alice", 25)
    game.add_player("bob", 25)
    game.start()
    with pytest.raises(GameNotComplete):
        settle(game, InMemoryLedger())
