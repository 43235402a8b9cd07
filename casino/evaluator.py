from __future__ import annotations

import functools
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from .cards import Card
from .errors import InvalidHandSize

HAND_SIZE = 5
WHEEL_RANKS = [1, 2, 3, 4, 5]
VALUE_NAMES = {14: "Ace", 13: "King", 12: "Queen", 11: "Jack"}


class HandRank(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


@functools.total_ordering
@dataclass(frozen=True)
class PokerHand:
    rank: HandRank
    kickers: Tuple[int, ...]
    cards: Tuple[Card, ...]
    description: str

    @property
    def strength(self) -> Tuple[int, Tuple[int, ...]]:
        return (int(self.rank), self.kickers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PokerHand):
            return NotImplemented
        return compare_hands(self, other) == 0

    def __lt__(self, other: "PokerHand") -> bool:
        return compare_hands(self, other) < 0

    def __hash__(self) -> int:
        return hash(self.strength)


def poker_value(card: Card) -> int:
    return 14 if card.rank == 1 else card.rank


def value_name(value: int) -> str:
    return VALUE_NAMES.get(value, str(value))


def evaluate_hand(cards: Sequence[Card]) -> PokerHand:
    """Rank exactly five cards for five-card draw."""
    if len(cards) != HAND_SIZE:
        raise InvalidHandSize(f"Poker hand must contain exactly {HAND_SIZE} cards, got {len(cards)}")

    ordered = sorted(cards, key=poker_value, reverse=True)
    values = [poker_value(card) for card in ordered]

    is_flush = len({card.suit for card in cards}) == 1
    is_wheel = sorted(card.rank for card in cards) == WHEEL_RANKS
    is_straight = is_wheel or all(values[idx] == values[idx - 1] - 1 for idx in range(1, HAND_SIZE))
    if is_wheel:
        # Ace plays low: move it behind the five.
        ordered = ordered[1:] + ordered[:1]
    straight_high = 5 if is_wheel else values[0]

    counts = Counter(values)
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    group_values = [value for value, _ in groups]
    group_sizes = [size for _, size in groups]

    if is_flush and is_straight:
        if not is_wheel and min(values) >= 10:
            return _hand(HandRank.ROYAL_FLUSH, [], ordered, "Royal Flush")
        label = "Straight Flush (Wheel)" if is_wheel else "Straight Flush"
        return _hand(HandRank.STRAIGHT_FLUSH, [straight_high], ordered, label)
    if group_sizes[0] == 4:
        return _hand(
            HandRank.FOUR_OF_A_KIND,
            group_values[:2],
            ordered,
            f"Four of a Kind ({value_name(group_values[0])}s)",
        )
    if group_sizes[0] == 3 and group_sizes[1] == 2:
        return _hand(
            HandRank.FULL_HOUSE,
            group_values[:2],
            ordered,
            f"Full House ({value_name(group_values[0])}s over {value_name(group_values[1])}s)",
        )
    if is_flush:
        return _hand(HandRank.FLUSH, values, ordered, "Flush")
    if is_straight:
        label = "Straight (Wheel)" if is_wheel else "Straight"
        return _hand(HandRank.STRAIGHT, [straight_high], ordered, label)
    if group_sizes[0] == 3:
        return _hand(
            HandRank.THREE_OF_A_KIND,
            group_values[:3],
            ordered,
            f"Three of a Kind ({value_name(group_values[0])}s)",
        )
    if group_sizes[0] == 2 and group_sizes[1] == 2:
        high, low, kicker = group_values[:3]
        return _hand(
            HandRank.TWO_PAIR,
            [high, low, kicker],
            ordered,
            f"Two Pair ({value_name(high)}s and {value_name(low)}s)",
        )
    if group_sizes[0] == 2:
        return _hand(HandRank.ONE_PAIR, group_values[:4], ordered, f"Pair of {value_name(group_values[0])}s")
    return _hand(HandRank.HIGH_CARD, values, ordered, f"{value_name(values[0])} High")


def _hand(rank: HandRank, kickers: Sequence[int], ordered: Sequence[Card], description: str) -> PokerHand:
    return PokerHand(rank=rank, kickers=tuple(kickers), cards=tuple(ordered), description=description)


def compare_hands(first: Optional[PokerHand], second: Optional[PokerHand]) -> int:
    """Return 1, 0 or -1. A missing hand always loses to a present one."""
    if first is None and second is None:
        return 0
    if first is None:
        return -1
    if second is None:
        return 1
    if first.rank != second.rank:
        return 1 if first.rank > second.rank else -1
    for left, right in zip(first.kickers, second.kickers):
        if left != right:
            return 1 if left > right else -1
    return 0


def determine_winners(hands: Dict[Hashable, PokerHand]) -> List[Hashable]:
    """Every key whose hand ties the best hand, in the mapping's order."""
    if not hands:
        return []
    best = max(hands.values(), key=functools.cmp_to_key(compare_hands))
    return [key for key, hand in hands.items() if compare_hands(hand, best) == 0]
