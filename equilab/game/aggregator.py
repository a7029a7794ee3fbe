"""Folding per-deal outcomes into win/tie/loss tallies."""

from dataclasses import dataclass
from fractions import Fraction
from typing import Sequence, Union

Count = Union[int, Fraction]


@dataclass(frozen=True)
class EquityResult:
    """
    Final tally for one player.

    ties holds split-pot credit: a k-way tie adds 1/k of the deal's
    weight to each tied player.
    """
    wins: Count
    ties: Count
    losses: Count
    total_deals: Count

    @property
    def equity_fraction(self) -> Fraction:
        """Exact share of the pot, (wins + ties) / total_deals."""
        if not self.total_deals:
            return Fraction(0)
        return Fraction(self.wins + self.ties) / self.total_deals

    @property
    def equity(self) -> float:
        return float(self.equity_fraction)

    @property
    def win_rate(self) -> float:
        if not self.total_deals:
            return 0.0
        return float(Fraction(self.wins) / self.total_deals)

    @property
    def tie_rate(self) -> float:
        """Split-pot credit as a share of all deals."""
        if not self.total_deals:
            return 0.0
        return float(Fraction(self.ties) / self.total_deals)


class EquityTally:
    """
    Running win/tie/loss counts for a fixed set of players.

    Tie credit is kept as weight per tie size and only divided when
    results are built, so integer weights stay integers until then.
    """

    def __init__(self, num_players: int):
        self.num_players = num_players
        self.wins: list[Count] = [0] * num_players
        self.losses: list[Count] = [0] * num_players
        self.split: list[dict[int, Count]] = [{} for _ in range(num_players)]
        self.total: Count = 0

    def record(self, winners: Sequence[int], weight: Count = 1) -> None:
        """
        Fold one deal's outcome.

        Args:
            winners: Indices of every player holding the best hand
            weight: Weight of the deal (1 unless ranges are weighted)
        """
        self.total += weight
        if len(winners) == 1:
            winner = winners[0]
            self.wins[winner] += weight
            for i in range(self.num_players):
                if i != winner:
                    self.losses[i] += weight
            return

        k = len(winners)
        for i in range(self.num_players):
            if i in winners:
                split = self.split[i]
                split[k] = split.get(k, 0) + weight
            else:
                self.losses[i] += weight

    def merge(self, other: "EquityTally") -> "EquityTally":
        """Sum two tallies into a new one."""
        if other.num_players != self.num_players:
            raise ValueError(
                f"Cannot merge tallies for {self.num_players} and "
                f"{other.num_players} players"
            )
        merged = EquityTally(self.num_players)
        merged.total = self.total + other.total
        for i in range(self.num_players):
            merged.wins[i] = self.wins[i] + other.wins[i]
            merged.losses[i] = self.losses[i] + other.losses[i]
            split = dict(self.split[i])
            for k, weight in other.split[i].items():
                split[k] = split.get(k, 0) + weight
            merged.split[i] = split
        return merged

    def ties(self, player: int) -> Count:
        """Split-pot credit for a player."""
        credit = sum(
            (Fraction(weight) / k for k, weight in self.split[player].items()),
            Fraction(0),
        )
        return credit.numerator if credit.denominator == 1 else credit

    def results(self) -> list[EquityResult]:
        """One EquityResult per player, in player order."""
        return [
            EquityResult(
                wins=self.wins[i],
                ties=self.ties(i),
                losses=self.losses[i],
                total_deals=self.total,
            )
            for i in range(self.num_players)
        ]
