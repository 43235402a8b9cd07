import random

import pytest

from casino.cards import Card, Deck, Suit, parse_cards, parse_label, standard_cards


def _sort_key(card: Card):
    return (card.suit.value, card.rank)


def test_standard_deck_has_52_unique_cards():
    deck = Deck()
    cards = deck.cards()
    assert len(cards) == 52
    assert len(set(cards)) == 52
    assert deck.initial_count == 52


def test_jokers_and_multiple_sets():
    deck = Deck(joker_count=2, times=2)
    cards = deck.cards()
    assert len(cards) == 108
    assert sum(1 for card in cards if card.suit is Suit.JOKER) == 4


def test_shuffle_is_a_permutation():
    deck = Deck(rng=random.Random(3))
    before = sorted(deck.cards(), key=_sort_key)
    deck.shuffle()
    assert deck.cards() != standard_cards()
    assert sorted(deck.cards(), key=_sort_key) == before


def test_seeded_shuffle_is_repeatable():
    first = Deck(rng=random.Random(11))
    second = Deck(rng=random.Random(11))
    first.shuffle()
    second.shuffle()
    assert first.cards() == second.cards()


def test_draw_conserves_cards():
    deck = Deck(rng=random.Random(1))
    deck.shuffle()
    drawn = [deck.draw() for _ in range(10)]
    drawn.extend(deck.draw_many(5))
    assert deck.drawn_count == 15
    assert deck.remaining + deck.drawn_count == deck.initial_count
    assert len(set(drawn) | set(deck.cards())) == 52


def test_empty_deck_returns_none_and_clamps():
    deck = Deck.from_cards(parse_cards(["Ah", "Kd"]))
    assert len(deck.draw_many(5)) == 2
    assert deck.is_empty
    assert deck.draw() is None
    assert deck.draw_many(3) == []


def test_add_cards_returns_them_to_the_bottom():
    deck = Deck.from_cards(parse_cards(["Ah", "Kd", "Qc"]))
    top = deck.draw()
    deck.add_card(top)
    assert deck.cards() == parse_cards(["Kd", "Qc", "Ah"])
    assert deck.drawn_count == 0


def test_reset_restores_full_deck():
    deck = Deck(rng=random.Random(5))
    deck.draw_many(20)
    deck.reset()
    assert deck.remaining == 52
    assert deck.drawn_count == 0
    deck.reset(shuffle=False)
    assert deck.cards() == standard_cards()


def test_peek_does_not_draw():
    deck = Deck.from_cards(parse_cards(["2c", "3c", "4c"]))
    assert deck.peek_top(2) == parse_cards(["2c", "3c"])
    assert deck.remaining == 3


def test_card_labels():
    assert Card(1, Suit.HEARTS).label == "A♥"
    assert Card(10, Suit.SPADES).label == "10♠"
    assert str(Card(12, Suit.DIAMONDS)) == "Q♦"
    assert Card(1, Suit.JOKER).label == "🃏"
    assert Card(1, Suit.HEARTS).is_ace
    assert not Card(1, Suit.JOKER).is_ace


@pytest.mark.parametrize(
    "label,expected",
    [("Ah", Card(1, Suit.HEARTS)), ("Td", Card(10, Suit.DIAMONDS)), ("10s", Card(10, Suit.SPADES)), ("kc", Card(13, Suit.CLUBS))],
)
def test_parse_label(label, expected):
    assert parse_label(label) == expected


@pytest.mark.parametrize("label", ["", "A", "Zh", "Ax", "15h"])
def test_parse_label_rejects_garbage(label):
    with pytest.raises(ValueError):
        parse_label(label)


def test_card_validates_rank_and_suit():
    with pytest.raises(ValueError):
        Card(0, Suit.HEARTS)
    with pytest.raises(ValueError):
        Card(14, Suit.CLUBS)
    with pytest.raises(ValueError):
        Card(3, "HEARTS")
