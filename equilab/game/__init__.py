"""Cards, hand evaluation and equity calculation."""

from .cards import Card, Rank, Suit, FULL_DECK, parse_cards, remaining_deck
from .evaluator import HandCategory, HandStrength, evaluate, best_hand
from .combos import Combinations, sample
from .ranges import HandRange, NAMED_RANGES, parse_range
from .players import ExactHand, RangeHand, parse_player
from .aggregator import EquityResult, EquityTally
from .equity import (
    EquityCalculator, EquityConfig, EquityReport, Exact, MonteCarlo,
    calculate_equity,
)

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "FULL_DECK",
    "parse_cards",
    "remaining_deck",
    "HandCategory",
    "HandStrength",
    "evaluate",
    "best_hand",
    "Combinations",
    "sample",
    "HandRange",
    "NAMED_RANGES",
    "parse_range",
    "ExactHand",
    "RangeHand",
    "parse_player",
    "EquityResult",
    "EquityTally",
    "EquityCalculator",
    "EquityConfig",
    "EquityReport",
    "Exact",
    "MonteCarlo",
    "calculate_equity",
]
