import random

import pytest

from casino.blackjack import Blackjack, dealer_should_hit, hand_value, is_blackjack, is_busted, is_soft_17
from casino.cards import parse_cards
from casino.errors import IllegalAction, NotPlayersTurn
from casino.models import BlackjackAction, GameConfig, GameState, PlayerResult, PokerAction

from .helpers import drain, rig_blackjack


def cards(*labels):
    return parse_cards(labels)


def test_hand_values():
    assert hand_value(cards("Ah", "6d")) == 17
    assert hand_value(cards("Ah", "Kd")) == 21
    assert hand_value(cards("Kh", "Qd", "5c")) == 25
    assert hand_value(cards("Ah", "Ad", "9c")) == 21
    assert hand_value(cards("Ah", "Ad", "Ac", "Kd")) == 13


def test_hand_predicates():
    assert is_soft_17(cards("Ah", "6d"))
    assert not is_soft_17(cards("Th", "7d"))
    assert is_blackjack(cards("Ah", "Kd"))
    assert not is_blackjack(cards("7h", "7d", "7c"))
    assert is_busted(cards("Kh", "Qd", "5c"))


def test_dealer_policy_hits_soft_17():
    assert dealer_should_hit(cards("Ah", "6d"))
    assert dealer_should_hit(cards("Th", "6d"))
    assert not dealer_should_hit(cards("Th", "7d"))
    assert not dealer_should_hit(cards("Ah", "7d"))


def test_stand_against_higher_dealer_loses():
    game = rig_blackjack({"p1": ["Th", "7d"]}, dealer=["Tc", "8s"])
    game.apply_action("p1", BlackjackAction.STAND)
    assert game.state == GameState.IN_PROGRESS
    assert drain(game) == 1
    assert game.state == GameState.COMPLETE
    assert game.result("p1") == PlayerResult.LOST
    assert game.payout("p1") == -10


def test_player_bust_loses_even_if_dealer_busts():
    game = rig_blackjack({"p1": ["Th", "6d"]}, dealer=["Tc", "6s"], shoe=["Kc", "9d"])
    game.apply_action("p1", BlackjackAction.HIT)
    assert game.current_player() is None
    drain(game)
    assert is_busted(game.dealer_cards)
    assert game.result("p1") == PlayerResult.LOST


def test_dealer_bust_pays_even_money():
    game = rig_blackjack({"p1": ["Th", "8d"]}, dealer=["Tc", "6s"], shoe=["9d"])
    game.apply_action("p1", BlackjackAction.STAND)
    drain(game)
    assert game.dealer_value() == 25
    assert game.result("p1") == PlayerResult.WON
    assert game.payout("p1") == 10


def test_dealer_hits_soft_17_then_stands():
    game = rig_blackjack({"p1": ["Th", "8d"]}, dealer=["Ah", "6d"], shoe=["2c", "5s"])
    game.apply_action("p1", BlackjackAction.STAND)
    drain(game)
    assert game.dealer_value() == 19
    assert game.dealer_actions == [BlackjackAction.HIT, BlackjackAction.STAND]
    assert game.result("p1") == PlayerResult.LOST


def test_push_returns_wager():
    game = rig_blackjack({"p1": ["Th", "8d"]}, dealer=["Tc", "8s"])
    game.apply_action("p1", BlackjackAction.STAND)
    drain(game)
    assert game.result("p1") == PlayerResult.TIE
    assert game.payout("p1") == 0


def test_natural_blackjack_beats_dealer_21():
    game = rig_blackjack({"p1": ["Ah", "Kd"]}, dealer=["7c", "7s"], shoe=["7d"])
    assert game.current_player() is None
    drain(game)
    assert game.dealer_value() == 21
    assert game.result("p1") == PlayerResult.WON


def test_double_down_doubles_wager_and_ends_turn():
    game = rig_blackjack({"p1": ["5h", "6d"]}, dealer=["Tc", "7s"], shoe=["Tc"])
    game.apply_action("p1", BlackjackAction.DOUBLE_DOWN)
    assert game.get_player("p1").wager == 20
    assert len(game.cards_of(game.get_player("p1"))) == 3
    assert game.current_player() is None
    drain(game)
    assert game.result("p1") == PlayerResult.WON
    assert game.payout("p1") == 20


def test_hit_on_empty_shoe_is_recorded_as_stand():
    game = rig_blackjack({"p1": ["Th", "5d"]}, dealer=["Tc", "8s"])
    game.apply_action("p1", BlackjackAction.HIT)
    player = game.get_player("p1")
    assert player.actions == [BlackjackAction.STAND]
    assert len(game.cards_of(player)) == 2
    drain(game)
    assert game.state == GameState.COMPLETE


def test_turns_rotate_by_fewest_actions():
    game = rig_blackjack(
        {"p1": ["2h", "3d"], "p2": ["4h", "5d"]},
        dealer=["Tc", "8s"],
        shoe=["2c", "3c", "4c"],
    )
    assert game.current_player() == "p1"
    with pytest.raises(NotPlayersTurn):
        game.apply_action("p2", BlackjackAction.HIT)
    game.apply_action("p1", BlackjackAction.HIT)
    assert game.current_player() == "p2"
    game.apply_action("p2", BlackjackAction.STAND)
    assert game.current_player() == "p1"


def test_rejects_foreign_action_type():
    game = rig_blackjack({"p1": ["Th", "7d"]}, dealer=["Tc", "8s"])
    with pytest.raises(IllegalAction):
        game.apply_action("p1", PokerAction.CONFIRM_DISCARD)


def test_ai_follows_dealer_policy():
    game = rig_blackjack(
        {"p1": ["Th", "9d"], "bot": ["Th", "5d"]},
        dealer=["Tc", "8s"],
        shoe=["2c", "Kd"],
        ai=["bot"],
    )
    assert game.next_ai_action() is None
    game.apply_action("p1", BlackjackAction.STAND)
    thunk = game.next_ai_action()
    assert thunk is not None
    assert thunk.description == BlackjackAction.HIT.value
    assert thunk()
    drain(game)
    bot = game.get_player("bot")
    assert bot.actions[-1] == BlackjackAction.STAND
    assert game.state == GameState.COMPLETE


def test_dealer_hole_card_hidden_until_players_finish():
    game = rig_blackjack({"p1": ["Th", "7d"]}, dealer=["Tc", "8s"])
    view = game.public_view("p1")
    assert "??" in view
    assert "8♠" not in view
    game.apply_action("p1", BlackjackAction.STAND)
    assert "8♠" in game.public_view("p1")


def test_timeout_fallback_is_stand():
    game = rig_blackjack({"p1": ["Th", "7d"]}, dealer=["Tc", "8s"])
    assert game.timeout_action(game.get_player("p1")) == (BlackjackAction.STAND, None)


def test_shoe_scales_with_players():
    game = Blackjack(GameConfig(min_players=1, max_players=7), rng=random.Random(4))
    for player_id in ("a", "b", "c"):
        game.add_player(player_id, 10)
    game.start()
    assert game.deck.initial_count == 3 * 52
    assert game.deck.remaining == 3 * 52 - 8
