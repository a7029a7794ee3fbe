"""What is known about each player's hole cards."""

from dataclasses import dataclass
from typing import Union

from equilab.errors import InvalidCard, InvalidHand
from .cards import Card, check_disjoint, parse_cards
from .ranges import HandRange

UNKNOWN_TOKENS = {"", "-", "?", "??", "????"}


@dataclass(frozen=True)
class ExactHand:
    """
    Zero, one or two known hole cards.

    Missing cards are dealt uniformly from the unseen cards, so
    ExactHand() stands for a random hand.
    """
    cards: tuple[Card, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "cards", tuple(self.cards))
        if len(self.cards) > 2:
            raise InvalidHand(f"A player holds at most 2 cards, got {len(self.cards)}")
        check_disjoint(self.cards)

    @property
    def missing(self) -> int:
        """Number of hole cards still to be dealt."""
        return 2 - len(self.cards)

    @classmethod
    def from_string(cls, s: str) -> "ExactHand":
        """Parse 'AsKh', 'As' or 'As??'; '??' or '-' means unknown."""
        s = s.strip()
        if s in UNKNOWN_TOKENS:
            return cls()
        return cls(tuple(parse_cards(s.replace("?", ""))))

    def __str__(self) -> str:
        return "".join(str(c) for c in self.cards) + "??" * self.missing


@dataclass(frozen=True)
class RangeHand:
    """Hole cards drawn from a weighted range."""
    range: HandRange
    label: str = ""

    @classmethod
    def from_string(cls, s: str) -> "RangeHand":
        return cls(HandRange.from_string(s), label=s.strip())

    def __str__(self) -> str:
        return self.label or repr(self.range)


PlayerHand = Union[ExactHand, RangeHand]


def known_cards(player: PlayerHand) -> tuple[Card, ...]:
    """Hole cards already fixed for a player."""
    if isinstance(player, ExactHand):
        return player.cards
    return ()


def parse_player(token: str) -> PlayerHand:
    """
    Build a player from a command-line token.

    Card tokens ('AsKh', 'Ah', '??') give an ExactHand; anything else is
    read as a named range or range notation ('QQ+,AKs', 'premium').

    Raises:
        InvalidHand: More than two cards given
        InvalidRange: Token is neither cards nor a valid range
    """
    token = token.strip()
    if token in UNKNOWN_TOKENS:
        return ExactHand()
    if "," in token or ":" in token:
        return RangeHand.from_string(token)

    try:
        cards = parse_cards(token.replace("?", ""))
    except InvalidCard:
        return RangeHand.from_string(token)
    return ExactHand(tuple(cards))
