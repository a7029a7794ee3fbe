"""Typed failures raised by the equity core.

All errors subclass ValueError, so callers that only care about bad input
can catch that.
"""

from typing import Optional


class EquityError(ValueError):
    """Base class for invalid equity queries."""


class InvalidCard(EquityError):
    """A rank or suit outside the 52-card domain, or a malformed token."""


class DuplicateCard(EquityError):
    """The same card was assigned twice across hole cards and board."""

    def __init__(self, card, message: Optional[str] = None):
        self.card = card
        super().__init__(message or f"Duplicate card: {card}")


class InvalidHand(EquityError):
    """Wrong number of cards for a hand or for evaluation."""


class InvalidBoard(EquityError):
    """Board with more than five cards."""


class InvalidRange(EquityError):
    """Range notation that cannot be parsed."""


class EmptyRange(EquityError):
    """A range with no combination consistent with the dead cards."""


class InsufficientDeck(EquityError):
    """Not enough unseen cards to complete the deal."""

    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__(
            f"Need {needed} unseen cards but only {available} remain"
        )


class TooFewPlayers(EquityError):
    """Fewer than two players supplied."""


NoPlayers = TooFewPlayers


class SampleCountInvalid(EquityError):
    """Monte Carlo requested with a non-positive sample count."""


class CombinationSpaceTooLarge(EquityError):
    """Exact enumeration would exceed the configured ceiling."""

    def __init__(self, count: int, ceiling: int):
        self.count = count
        self.ceiling = ceiling
        super().__init__(
            f"Exact enumeration needs up to {count:,} deals "
            f"(ceiling {ceiling:,}); use Monte Carlo or raise the ceiling"
        )
