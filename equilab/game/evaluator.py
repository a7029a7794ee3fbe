"""
Hand evaluation.

Maps 5, 6 or 7 cards to a HandStrength: a category plus a tiebreak tuple
of ranks, most significant first. HandStrength values are totally ordered
(category first, then tiebreak lexicographically) and compare equal only
when both parts match, so ties are exact.

The best five-card hand is read off rank counts, a rank bitmask and the
per-suit rank lists instead of scoring all 21 five-card subsets of a
seven-card hand.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

from equilab.errors import InvalidHand
from .cards import Card, check_disjoint


class HandCategory(IntEnum):
    """Hand categories, weakest first."""
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8


CATEGORY_LABELS = {
    HandCategory.HIGH_CARD: "High Card",
    HandCategory.PAIR: "Pair",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.FLUSH: "Flush",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
}

RANK_NAMES = {
    2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six", 7: "Seven",
    8: "Eight", 9: "Nine", 10: "Ten", 11: "Jack", 12: "Queen", 13: "King",
    14: "Ace",
}
RANK_PLURALS = {rank: f"{name}s" for rank, name in RANK_NAMES.items()}
RANK_PLURALS[6] = "Sixes"

ACE = 14
WHEEL_HIGH = 5
FIVE_IN_A_ROW = 0b11111


@dataclass(frozen=True, order=True)
class HandStrength:
    """Comparable strength of a made hand."""
    category: HandCategory
    tiebreak: tuple[int, ...]

    @property
    def label(self) -> str:
        """Category name, e.g. 'Full House'."""
        return CATEGORY_LABELS[self.category]

    def describe(self) -> str:
        """Short phrase for the hand, e.g. 'Kings full of Sevens'."""
        top = self.tiebreak[0]
        category = self.category

        if category == HandCategory.STRAIGHT_FLUSH:
            if top == ACE:
                return "Royal Flush"
            return f"{RANK_NAMES[top]}-high Straight Flush"
        if category == HandCategory.FOUR_OF_A_KIND:
            return f"Four {RANK_PLURALS[top]}"
        if category == HandCategory.FULL_HOUSE:
            return f"{RANK_PLURALS[top]} full of {RANK_PLURALS[self.tiebreak[1]]}"
        if category == HandCategory.FLUSH:
            return f"{RANK_NAMES[top]}-high Flush"
        if category == HandCategory.STRAIGHT:
            return f"{RANK_NAMES[top]}-high Straight"
        if category == HandCategory.THREE_OF_A_KIND:
            return f"Three {RANK_PLURALS[top]}"
        if category == HandCategory.TWO_PAIR:
            return f"{RANK_PLURALS[top]} and {RANK_PLURALS[self.tiebreak[1]]}"
        if category == HandCategory.PAIR:
            return f"Pair of {RANK_PLURALS[top]}"
        return f"{RANK_NAMES[top]} high"

    def __str__(self) -> str:
        return self.describe()


def _straight_high(ranks: Iterable[int]) -> int:
    """Top rank of the best straight in ranks, or 0 if there is none."""
    mask = 0
    for rank in ranks:
        mask |= 1 << rank
    if mask & (1 << ACE):
        mask |= 1 << 1  # ace plays low for the wheel

    for high in range(ACE, WHEEL_HIGH - 1, -1):
        if (mask >> (high - 4)) & FIVE_IN_A_ROW == FIVE_IN_A_ROW:
            return high
    return 0


def rank_hand(cards: Sequence[Card]) -> HandStrength:
    """
    Evaluate 5-7 cards without validating them.

    Callers must guarantee the cards are distinct; the equity engine
    does, which keeps validation out of the inner loop.
    """
    counts = [0] * 15
    by_suit: tuple[list[int], ...] = ([], [], [], [])
    for card in cards:
        counts[card.rank] += 1
        by_suit[card.suit].append(card.rank)

    flush_ranks = None
    for suited in by_suit:
        if len(suited) >= 5:
            flush_ranks = sorted(suited, reverse=True)
            break

    if flush_ranks:
        high = _straight_high(flush_ranks)
        if high:
            return HandStrength(HandCategory.STRAIGHT_FLUSH, (high,))

    quads: list[int] = []
    trips: list[int] = []
    pairs: list[int] = []
    singles: list[int] = []
    for rank in range(ACE, 1, -1):
        n = counts[rank]
        if n == 1:
            singles.append(rank)
        elif n == 2:
            pairs.append(rank)
        elif n == 3:
            trips.append(rank)
        elif n == 4:
            quads.append(rank)

    if quads:
        quad = quads[0]
        kicker = next(r for r in range(ACE, 1, -1) if counts[r] and r != quad)
        return HandStrength(HandCategory.FOUR_OF_A_KIND, (quad, kicker))

    if trips and (len(trips) > 1 or pairs):
        # Second trips can only play as the pair
        pair = max(trips[1:2] + pairs[:1])
        return HandStrength(HandCategory.FULL_HOUSE, (trips[0], pair))

    if flush_ranks:
        return HandStrength(HandCategory.FLUSH, tuple(flush_ranks[:5]))

    high = _straight_high(r for r in range(2, ACE + 1) if counts[r])
    if high:
        return HandStrength(HandCategory.STRAIGHT, (high,))

    if trips:
        return HandStrength(
            HandCategory.THREE_OF_A_KIND, (trips[0], *singles[:2])
        )

    if len(pairs) >= 2:
        # A third pair can still supply the kicker
        kicker = max(pairs[2:3] + singles[:1])
        return HandStrength(HandCategory.TWO_PAIR, (pairs[0], pairs[1], kicker))

    if pairs:
        return HandStrength(HandCategory.PAIR, (pairs[0], *singles[:3]))

    return HandStrength(HandCategory.HIGH_CARD, tuple(singles[:5]))


def evaluate(cards: Sequence[Card]) -> HandStrength:
    """
    Evaluate the best five-card hand among 5-7 distinct cards.

    Args:
        cards: Five, six or seven cards

    Returns:
        Strength of the best five-card hand

    Raises:
        InvalidHand: If fewer than 5 or more than 7 cards are given
        DuplicateCard: If a card is repeated
    """
    cards = list(cards)
    if not 5 <= len(cards) <= 7:
        raise InvalidHand(f"Can only evaluate 5 to 7 cards, got {len(cards)}")
    check_disjoint(cards)
    return rank_hand(cards)


def best_hand(hole: Sequence[Card], board: Sequence[Card]) -> HandStrength:
    """Evaluate a player's hole cards together with the board."""
    return evaluate([*hole, *board])
