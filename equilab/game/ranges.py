"""
Weighted hand ranges.

A HandRange maps two-card combos to positive weights. Ranges are built
from the usual shorthand:

    "QQ"        one pocket pair (6 combos)
    "TT+"       tens or better
    "22-55"     pairs from deuces to fives
    "AKs"       suited (4 combos), "AKo" offsuit (12), "AK" both (16)
    "ATs+"      ATs, AJs, AQs, AKs
    "A2s-A5s"   A2s through A5s
    "AsKh"      a single specific combo
    "random"    every combo

Items are comma-separated and may carry a weight, "AKs:0.5" or "AKo:1/3".
Weights are kept as Fractions so exact enumeration stays exact.
"""

from fractions import Fraction
from itertools import combinations
from typing import Iterable, Iterator, Optional

from equilab.errors import InvalidCard, InvalidRange
from .cards import FULL_DECK, RANK_STR, STR_RANK, STR_SUIT, Card

Combo = tuple[Card, Card]

RANDOM_KEYWORDS = {"random", "any", "*"}

# Named presets, resolvable anywhere a range string is accepted
NAMED_RANGES = {
    "premium_pairs": "JJ+",
    "medium_pairs": "77-TT",
    "small_pairs": "22-66",
    "premium_broadway": "AKs,AKo,AQs,AQo,AJs",
    "suited_connectors": "54s,65s,76s,87s,98s,T9s,JTs",
    "suited_aces": "A2s-A5s",
    "suited_kings": "KTs+",
    "premium": "QQ+,AK",
    "broadway": "TT+,ATs+,KTs+,QTs+,JTs,ATo+,KTo+,QTo+,JTo",
}


def make_combo(card1: Card, card2: Card) -> Combo:
    """Normalise a two-card combo to deck order."""
    if card1 == card2:
        raise InvalidRange(f"Combo repeats a card: {card1}{card2}")
    if card1.index > card2.index:
        card1, card2 = card2, card1
    return (card1, card2)


def canonical_hand(card1: Card, card2: Card) -> str:
    """
    Canonical starting hand notation (e.g., 'AKs', 'QQ', '72o').

    Groups equivalent hands regardless of specific suits.
    """
    high, low = (card1, card2) if card1.rank >= card2.rank else (card2, card1)
    r1 = RANK_STR[high.rank]
    r2 = RANK_STR[low.rank]

    if high.rank == low.rank:
        return f"{r1}{r2}"
    elif high.suit == low.suit:
        return f"{r1}{r2}s"
    else:
        return f"{r1}{r2}o"


def pair_combos(rank: int) -> list[Combo]:
    cards = [c for c in FULL_DECK if c.rank == rank]
    return [make_combo(a, b) for a, b in combinations(cards, 2)]


def suited_combos(high: int, low: int) -> list[Combo]:
    return [make_combo(Card(high, s), Card(low, s)) for s in range(4)]


def offsuit_combos(high: int, low: int) -> list[Combo]:
    return [
        make_combo(Card(high, s1), Card(low, s2))
        for s1 in range(4)
        for s2 in range(4)
        if s1 != s2
    ]


def _class_combos(high: int, low: int, kind: str) -> list[Combo]:
    if high == low:
        return pair_combos(high)
    if kind == "s":
        return suited_combos(high, low)
    if kind == "o":
        return offsuit_combos(high, low)
    return suited_combos(high, low) + offsuit_combos(high, low)


def _parse_class(text: str) -> tuple[int, int, str]:
    """Parse 'AK', 'AKs', 'AKo' or 'QQ' into (high rank, low rank, kind)."""
    if len(text) not in (2, 3):
        raise InvalidRange(f"Invalid hand notation: {text!r}")

    try:
        r1 = STR_RANK[text[0].upper()]
        r2 = STR_RANK[text[1].upper()]
    except KeyError:
        raise InvalidRange(f"Invalid rank in {text!r}") from None

    kind = text[2].lower() if len(text) == 3 else ""
    if kind not in ("", "s", "o"):
        raise InvalidRange(f"Invalid suitedness in {text!r}")
    if r1 == r2 and kind:
        raise InvalidRange(f"A pair cannot be suited or offsuit: {text!r}")

    high, low = max(r1, r2), min(r1, r2)
    return high, low, kind


def _is_specific_combo(text: str) -> bool:
    return len(text) == 4 and text[1].lower() in STR_SUIT and text[3].lower() in STR_SUIT


def _expand(notation: str) -> list[Combo]:
    """Expand a single range item (without weight) into combos."""
    if notation.lower() in RANDOM_KEYWORDS:
        return [make_combo(a, b) for a, b in combinations(FULL_DECK, 2)]

    if _is_specific_combo(notation):
        try:
            return [make_combo(Card.from_string(notation[:2]), Card.from_string(notation[2:]))]
        except InvalidCard as e:
            raise InvalidRange(f"Invalid combo {notation!r}: {e}") from None

    # Span: "22-55" or "A2s-A5s"
    if "-" in notation:
        lo_text, _, hi_text = notation.partition("-")
        lo_high, lo_low, lo_kind = _parse_class(lo_text)
        hi_high, hi_low, hi_kind = _parse_class(hi_text)

        if lo_kind != hi_kind:
            raise InvalidRange(f"Mixed suitedness in span {notation!r}")

        combos = []
        if lo_high == lo_low and hi_high == hi_low:
            for rank in range(min(lo_high, hi_high), max(lo_high, hi_high) + 1):
                combos.extend(pair_combos(rank))
            return combos

        if lo_high != hi_high or lo_high == lo_low or hi_high == hi_low:
            raise InvalidRange(f"Span must share its top card: {notation!r}")
        for low in range(min(lo_low, hi_low), max(lo_low, hi_low) + 1):
            combos.extend(_class_combos(lo_high, low, lo_kind))
        return combos

    # Plus: "TT+" or "ATs+"
    if notation.endswith("+"):
        high, low, kind = _parse_class(notation[:-1])
        combos = []
        if high == low:
            for rank in range(high, 15):
                combos.extend(pair_combos(rank))
        else:
            for rank in range(low, high):
                combos.extend(_class_combos(high, rank, kind))
        return combos

    high, low, kind = _parse_class(notation)
    return _class_combos(high, low, kind)


def _parse_weight(text: str, item: str) -> Fraction:
    try:
        weight = Fraction(text.strip())
    except (ValueError, ZeroDivisionError):
        raise InvalidRange(f"Invalid weight in {item!r}") from None
    if weight <= 0:
        raise InvalidRange(f"Weight must be positive in {item!r}")
    return weight


class HandRange:
    """
    Sparse mapping from two-card combo to weight.

    Later assignments to the same combo replace earlier ones.
    """

    def __init__(self, weights: Optional[dict[Combo, Fraction]] = None):
        self.weights: dict[Combo, Fraction] = {}
        for combo, weight in (weights or {}).items():
            self.add(combo, weight)

    @classmethod
    def from_string(cls, range_str: str) -> "HandRange":
        """
        Parse range notation or a named preset.

        Examples:
            "AA,KK,QQ" - specific hands at full weight
            "AKs:0.5,AQs:0.75" - hands with weights
            "TT+" - pair range
            "premium_pairs" - a NAMED_RANGES entry
        """
        text = NAMED_RANGES.get(range_str.strip().lower(), range_str)

        hand_range = cls()
        for part in text.split(","):
            part = part.strip()
            if not part:
                continue

            if ":" in part:
                notation, weight_text = part.split(":", 1)
                weight = _parse_weight(weight_text, part)
            else:
                notation = part
                weight = Fraction(1)

            for combo in _expand(notation.strip()):
                hand_range.add(combo, weight)

        if not hand_range:
            raise InvalidRange(f"Range is empty: {range_str!r}")
        return hand_range

    @classmethod
    def from_combos(cls, combos: Iterable[Combo], weight=1) -> "HandRange":
        hand_range = cls()
        for combo in combos:
            hand_range.add(combo, weight)
        return hand_range

    def add(self, combo: Iterable[Card], weight=1) -> None:
        """Set the weight of a combo."""
        weight = Fraction(weight)
        if weight <= 0:
            raise InvalidRange(f"Weight must be positive, got {weight}")
        self.weights[make_combo(*combo)] = weight

    def weight(self, combo: Iterable[Card]) -> Fraction:
        """Weight of a combo, 0 if it is not in the range."""
        return self.weights.get(make_combo(*combo), Fraction(0))

    def available(self, dead: Iterable[Card]) -> list[tuple[Combo, Fraction]]:
        """
        Combos that avoid every dead card, in deck order.

        Args:
            dead: Cards already known to be elsewhere

        Returns:
            (combo, weight) pairs, sorted so results are deterministic
        """
        dead = set(dead)
        live = [
            (combo, weight)
            for combo, weight in self.weights.items()
            if combo[0] not in dead and combo[1] not in dead
        ]
        live.sort(key=lambda cw: (cw[0][0].index, cw[0][1].index))
        return live

    def class_weights(self) -> dict[str, float]:
        """
        Average weight per canonical starting hand.

        A class counts all of its combos, so 'AKs' holding two of its
        four suited combos at weight 1 reports 0.5.
        """
        totals: dict[str, Fraction] = {}
        for combo, weight in self.weights.items():
            name = canonical_hand(*combo)
            totals[name] = totals.get(name, Fraction(0)) + weight

        result = {}
        for name, total in totals.items():
            size = 6 if len(name) == 2 else 4 if name.endswith("s") else 12
            result[name] = float(total / size)
        return result

    def __len__(self) -> int:
        return len(self.weights)

    def __iter__(self) -> Iterator[Combo]:
        return iter(self.weights)

    def __contains__(self, combo) -> bool:
        return make_combo(*combo) in self.weights

    def __repr__(self) -> str:
        return f"HandRange({len(self)} combos)"


def parse_range(range_str: str) -> HandRange:
    """Convenience wrapper around HandRange.from_string."""
    return HandRange.from_string(range_str)
