import random

import pytest

from casino.errors import InvalidPlayerCount, NotPlayersTurn, RosterError
from casino.models import GameState, PlayerResult, RpsChoice
from casino.rps import RockPaperScissors, resolve

from .helpers import drain


def new_match(ai: bool = False, seed: int = 0) -> RockPaperScissors:
    game = RockPaperScissors(rng=random.Random(seed))
    game.add_player("p1", 10)
    game.add_player("p2", 10, is_ai=ai)
    game.start()
    return game


@pytest.mark.parametrize(
    "mine,theirs,expected",
    [
        (RpsChoice.ROCK, RpsChoice.SCISSORS, PlayerResult.WON),
        (RpsChoice.PAPER, RpsChoice.ROCK, PlayerResult.WON),
        (RpsChoice.SCISSORS, RpsChoice.PAPER, PlayerResult.WON),
        (RpsChoice.ROCK, RpsChoice.PAPER, PlayerResult.LOST),
        (RpsChoice.PAPER, RpsChoice.PAPER, PlayerResult.TIE),
    ],
)
def test_resolve(mine, theirs, expected):
    assert resolve(mine, theirs) == expected


def test_winner_takes_wager_from_loser():
    game = new_match()
    game.apply_action("p1", RpsChoice.PAPER)
    assert game.state == GameState.IN_PROGRESS
    game.apply_action("p2", RpsChoice.ROCK)
    assert game.state == GameState.COMPLETE
    assert game.result("p1") == PlayerResult.WON
    assert game.result("p2") == PlayerResult.LOST
    assert game.payouts() == [("p1", 10), ("p2", -10)]


def test_either_player_may_throw_first_but_only_once():
    game = new_match()
    game.apply_action("p2", RpsChoice.SCISSORS)
    with pytest.raises(NotPlayersTurn):
        game.apply_action("p2", RpsChoice.ROCK)
    game.apply_action("p1", RpsChoice.SCISSORS)
    assert game.result("p1") == PlayerResult.TIE
    assert game.payout("p1") == 0


def test_exactly_two_players():
    game = RockPaperScissors()
    game.add_player("p1", 10)
    with pytest.raises(InvalidPlayerCount):
        game.start()
    game.add_player("p2", 10)
    with pytest.raises(RosterError) as excinfo:
        game.add_player("p3", 10)
    assert excinfo.value.code == "ROSTER_FULL"


def test_choices_hidden_until_both_throw():
    game = new_match()
    game.apply_action("p1", RpsChoice.ROCK)
    assert "p1: ready" in game.public_view("p2")
    assert "Rock" not in game.public_view("p2")
    assert "chose Rock" in game.public_view("p1")
    game.apply_action("p2", RpsChoice.SCISSORS)
    final = game.public_view("p2")
    assert "Rock (won)" in final
    assert "Rock crushes Scissors" in final


def test_ai_throws_without_waiting_for_the_human():
    game = new_match(ai=True, seed=4)
    assert game.current_player() == "p1"
    thunk = game.next_ai_action()
    assert thunk is not None
    assert thunk.player_id == "p2"
    assert thunk()
    assert game.data["p2"].choice in set(RpsChoice)
    assert game.next_ai_action() is None
    game.apply_action("p1", RpsChoice.ROCK)
    assert game.state == GameState.COMPLETE
    assert drain(game) == 0


def test_timeout_picks_a_random_choice():
    game = new_match()
    action, index = game.timeout_action(game.get_player("p1"))
    assert isinstance(action, RpsChoice)
    assert index is None
