"""Card representation and deck bookkeeping."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from treys import Card as TreysCard

from equilab.errors import DuplicateCard, InvalidCard


class Rank(IntEnum):
    """Card ranks (2-14 where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


# Mapping for string conversion
RANK_STR = {
    2: "2", 3: "3", 4: "4", 5: "5", 6: "6", 7: "7", 8: "8", 9: "9",
    10: "T", 11: "J", 12: "Q", 13: "K", 14: "A"
}
STR_RANK = {v: k for k, v in RANK_STR.items()}

SUIT_STR = {0: "c", 1: "d", 2: "h", 3: "s"}
STR_SUIT = {v: k for k, v in SUIT_STR.items()}

CARD_SEPARATORS = " ,;"


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: int  # 2-14
    suit: int  # 0-3

    def __post_init__(self):
        if self.rank not in RANK_STR:
            raise InvalidCard(f"Invalid rank: {self.rank!r}")
        if self.suit not in SUIT_STR:
            raise InvalidCard(f"Invalid suit: {self.suit!r}")

    def __str__(self) -> str:
        return f"{RANK_STR[self.rank]}{SUIT_STR[self.suit]}"

    def __repr__(self) -> str:
        return str(self)

    @property
    def index(self) -> int:
        """Dense 0-51 id, matching FULL_DECK order."""
        return (self.rank - 2) * 4 + self.suit

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'As', 'Th', '2c'."""
        if len(s) != 2:
            raise InvalidCard(f"Invalid card string: {s!r}")
        rank_char = s[0].upper()
        suit_char = s[1].lower()

        if rank_char not in STR_RANK:
            raise InvalidCard(f"Invalid rank: {rank_char}")
        if suit_char not in STR_SUIT:
            raise InvalidCard(f"Invalid suit: {suit_char}")

        return cls(rank=STR_RANK[rank_char], suit=STR_SUIT[suit_char])

    def to_treys(self) -> int:
        """Convert to treys library card format."""
        return TreysCard.new(str(self))


FULL_DECK: tuple[Card, ...] = tuple(
    Card(rank, suit)
    for rank in range(2, 15)
    for suit in range(4)
)


def parse_cards(text: str) -> list[Card]:
    """
    Parse a run of card tokens.

    Accepts 'AsKhTd', 'As Kh Td' or 'As,Kh,Td'. An empty string gives
    an empty list.
    """
    compact = "".join(ch for ch in text if ch not in CARD_SEPARATORS)
    if len(compact) % 2:
        raise InvalidCard(f"Invalid card string: {text!r}")
    return [Card.from_string(compact[i:i + 2]) for i in range(0, len(compact), 2)]


def check_disjoint(*groups: Iterable[Card]) -> None:
    """Raise DuplicateCard if any card appears twice across the groups."""
    seen: set[Card] = set()
    for group in groups:
        for card in group:
            if card in seen:
                raise DuplicateCard(card)
            seen.add(card)


def remaining_deck(*groups: Iterable[Card]) -> list[Card]:
    """
    Cards of the 52-card deck not used by any group, in deck order.

    Args:
        groups: Hole cards, board and any other assigned cards

    Returns:
        The complement of the union of the groups

    Raises:
        DuplicateCard: If the groups overlap
    """
    groups = [list(g) for g in groups]
    check_disjoint(*groups)
    used = {card for group in groups for card in group}
    return [card for card in FULL_DECK if card not in used]


def format_cards(cards: Iterable[Card]) -> str:
    """Space-separated card notation."""
    return " ".join(str(c) for c in cards)
