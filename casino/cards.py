from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence


class Suit(str, Enum):
    HEARTS = "HEARTS"
    DIAMONDS = "DIAMONDS"
    CLUBS = "CLUBS"
    SPADES = "SPADES"
    JOKER = "JOKER"

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
    Suit.JOKER: "🃏",
}
STANDARD_SUITS = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)
RANKS = tuple(range(1, 14))  # 1 = Ace, 11..13 = Jack/Queen/King
FACE_NAMES = {1: "A", 11: "J", 12: "Q", 13: "K"}
LABEL_SUITS = {"h": Suit.HEARTS, "d": Suit.DIAMONDS, "c": Suit.CLUBS, "s": Suit.SPADES}
LABEL_RANKS = {"A": 1, "T": 10, "J": 11, "Q": 12, "K": 13}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.suit, Suit):
            raise ValueError(f"Invalid suit: {self.suit}")
        if self.suit is not Suit.JOKER and self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")

    @property
    def is_ace(self) -> bool:
        return self.rank == 1 and self.suit is not Suit.JOKER

    @property
    def label(self) -> str:
        if self.suit is Suit.JOKER:
            return self.suit.symbol
        return f"{FACE_NAMES.get(self.rank, str(self.rank))}{self.suit.symbol}"

    def __str__(self) -> str:
        return self.label


def parse_label(label: str) -> Card:
    """Parse a compact label such as ``"Ah"``, ``"Td"`` or ``"10s"``."""
    if len(label) < 2:
        raise ValueError(f"Invalid card label: {label}")
    rank_part, suit_part = label[:-1], label[-1].lower()
    if suit_part not in LABEL_SUITS:
        raise ValueError(f"Invalid suit: {suit_part}")
    if rank_part.upper() in LABEL_RANKS:
        rank = LABEL_RANKS[rank_part.upper()]
    elif rank_part.isdigit():
        rank = int(rank_part)
    else:
        raise ValueError(f"Invalid rank: {rank_part}")
    return Card(rank, LABEL_SUITS[suit_part])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def standard_cards(joker_count: int = 0, times: int = 1) -> List[Card]:
    """Unshuffled 52-card set(s), each followed by ``joker_count`` jokers."""
    cards: List[Card] = []
    for _ in range(times):
        for suit in STANDARD_SUITS:
            cards.extend(Card(rank, suit) for rank in RANKS)
        cards.extend(Card(idx, Suit.JOKER) for idx in range(1, joker_count + 1))
    return cards


class Deck:
    """Ordered pile of cards with a snapshot of its starting composition.

    Drawing takes from the front. Nothing here raises on an empty deck:
    ``draw`` returns ``None`` and ``draw_many`` clamps to what is left.
    """

    def __init__(
        self,
        joker_count: int = 0,
        times: int = 1,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self._initial: tuple[Card, ...] = tuple(standard_cards(joker_count, times))
        self._cards: List[Card] = list(self._initial)
        self._drawn = 0

    @classmethod
    def from_cards(cls, cards: Iterable[Card], rng: Optional[random.Random] = None) -> "Deck":
        deck = cls(rng=rng)
        deck._initial = tuple(cards)
        deck._cards = list(deck._initial)
        return deck

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    @property
    def drawn_count(self) -> int:
        return self._drawn

    @property
    def initial_count(self) -> int:
        return len(self._initial)

    @property
    def is_empty(self) -> bool:
        return not self._cards

    def shuffle(self) -> None:
        # Fisher-Yates, walking forward and swapping with a random later slot.
        cards = self._cards
        for idx in range(len(cards) - 1):
            swap = self.rng.randrange(idx, len(cards))
            cards[idx], cards[swap] = cards[swap], cards[idx]

    def draw(self) -> Optional[Card]:
        if not self._cards:
            return None
        self._drawn += 1
        return self._cards.pop(0)

    def draw_many(self, count: int) -> List[Card]:
        count = max(0, min(count, len(self._cards)))
        drawn = self._cards[:count]
        del self._cards[:count]
        self._drawn += count
        return drawn

    def peek_top(self, count: int) -> List[Card]:
        return self._cards[: max(count, 0)]

    def add_card(self, card: Card) -> None:
        self.add_cards([card])

    def add_cards(self, cards: Iterable[Card]) -> None:
        returned = list(cards)
        self._cards.extend(returned)
        self._drawn = max(0, self._drawn - len(returned))

    def reset(self, shuffle: bool = True) -> None:
        self._cards = list(self._initial)
        self._drawn = 0
        if shuffle:
            self.shuffle()

    def cards(self) -> List[Card]:
        return list(self._cards)
