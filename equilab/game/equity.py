"""
Equity calculation.

Given two or more players and a board, walks every way the unseen cards
can fall (exact mode) or a seeded sample of them (Monte Carlo), evaluates
each showdown and tallies wins, split pots and losses.

The work is cut into partitions that are independent of each other and
of the worker count:
- exact mode keys partitions on the first board card of the runout, or
  on the first unknown player's hole combo when some hole cards are
  unknown;
- Monte Carlo splits the sample budget evenly and gives each partition
  its own numpy stream spawned from the master seed.
Partitions run inline or in a process pool and their tallies are summed,
so results depend only on the inputs and the seed.
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from fractions import Fraction
from itertools import product
from math import prod
from typing import Callable, Iterator, Optional, Sequence, Union

import numpy as np

from equilab.errors import (
    CombinationSpaceTooLarge, EmptyRange, InsufficientDeck, InvalidBoard,
    SampleCountInvalid, TooFewPlayers,
)
from .aggregator import Count, EquityResult, EquityTally
from .cards import Card, check_disjoint, parse_cards, remaining_deck
from .combos import Combinations, count_combinations, sample
from .evaluator import rank_hand
from .players import ExactHand, PlayerHand, RangeHand, known_cards, parse_player
from .ranges import Combo, make_combo

logger = logging.getLogger(__name__)

BOARD_SIZE = 5
BOARD_STREETS = (0, 3, 4, 5)  # preflop, flop, turn, river


@dataclass(frozen=True)
class Exact:
    """Enumerate every runout."""

    def __str__(self) -> str:
        return "exact"


@dataclass(frozen=True)
class MonteCarlo:
    """Sample a fixed number of random runouts."""
    samples: int = 100_000

    def __str__(self) -> str:
        return f"monte carlo ({self.samples:,} samples)"


Strategy = Union[Exact, MonteCarlo]


@dataclass
class EquityConfig:
    """Configuration for equity calculations."""
    exact_ceiling: int = 2_000_000   # Max deals for exact enumeration
    samples: int = 100_000           # Monte Carlo budget when no strategy is given
    workers: int = 1                 # Processes (1 = run inline)
    mc_partitions: int = 16          # Monte Carlo partitions, independent of workers
    seed: Optional[int] = None       # None = fresh entropy, reported back
    timeout: Optional[float] = None  # Seconds before stopping early
    check_interval: int = 2048       # Deals between deadline checks
    max_rejections: int = 10_000     # Range draws before giving up on a sample


@dataclass
class EquityReport:
    """Outcome of an equity query."""
    results: list[EquityResult]
    strategy: Strategy
    total_deals: Count
    partitions: int
    partitions_completed: int
    elapsed: float = 0.0
    seed: Optional[int] = None
    undersampled: bool = False  # Stopped early by the deadline

    @property
    def equities(self) -> list[float]:
        return [r.equity for r in self.results]

    @property
    def is_exact(self) -> bool:
        return isinstance(self.strategy, Exact) and not self.undersampled


@dataclass(frozen=True)
class DealSetup:
    """
    Everything a partition needs to deal and score runouts.

    fixed holds each player's hole cards when fully known (empty
    otherwise); variable lists, for every other player, the candidate
    hole combos with their weights.
    """
    board: tuple[Card, ...]
    fixed: tuple[tuple[Card, ...], ...]
    variable: tuple[tuple[int, tuple[tuple[Combo, Count], ...]], ...]
    unseen: tuple[Card, ...]
    needed_board: int

    @property
    def num_players(self) -> int:
        return len(self.fixed)

    def space_size(self) -> int:
        """Upper bound on the number of exact deals (ignores combo clashes)."""
        dealt_to_players = sum(2 - len(self.fixed[p]) for p, _ in self.variable)
        remaining = len(self.unseen) - dealt_to_players
        combos = prod(len(candidates) for _, candidates in self.variable)
        return combos * count_combinations(remaining, self.needed_board)


@dataclass(frozen=True)
class PartitionTask:
    """One independent slice of the work, picklable for worker processes."""
    setup: DealSetup
    key: Optional[int] = None
    samples: int = 0
    seed: Optional[np.random.SeedSequence] = None
    deadline: Optional[float] = None
    check_interval: int = 2048
    max_rejections: int = 10_000


class _Deadline:
    """Cooperative cancellation check, cheap enough for inner loops."""

    def __init__(self, deadline: Optional[float], interval: int):
        self.deadline = deadline
        self.interval = max(1, interval)
        self.ticks = 0

    def passed(self) -> bool:
        return self.deadline is not None and time.time() > self.deadline

    def tick(self) -> bool:
        """Count one deal; True once the deadline has passed."""
        self.ticks += 1
        if self.ticks % self.interval:
            return False
        return self.passed()


def _plain(weight: Fraction) -> Count:
    return weight.numerator if weight.denominator == 1 else weight


def _showdown(
    holes: Sequence[tuple[Card, ...]],
    board: tuple[Card, ...],
    tally: EquityTally,
    weight: Count,
) -> None:
    strengths = [rank_hand(hole + board) for hole in holes]
    best = max(strengths)
    winners = [i for i, s in enumerate(strengths) if s == best]
    tally.record(winners, weight)


def _assignments(
    setup: DealSetup,
    key: Optional[int],
) -> Iterator[tuple[tuple[tuple[Card, ...], ...], Count, tuple[Card, ...]]]:
    """Yield (holes, weight, cards left for the board) for an exact partition."""
    if not setup.variable:
        yield setup.fixed, 1, setup.unseen
        return

    holes = list(setup.fixed)
    first_player, first_candidates = setup.variable[0]
    first_combo, first_weight = first_candidates[key]
    holes[first_player] = first_combo

    rest = setup.variable[1:]
    for picks in product(*(candidates for _, candidates in rest)):
        used = set(first_combo)
        weight = first_weight
        for (player, _), (combo, w) in zip(rest, picks):
            if combo[0] in used or combo[1] in used:
                break
            used.update(combo)
            holes[player] = combo
            weight *= w
        else:
            remaining = tuple(c for c in setup.unseen if c not in used)
            yield tuple(holes), weight, remaining


def _run_exact(task: PartitionTask) -> tuple[EquityTally, bool]:
    setup = task.setup
    tally = EquityTally(setup.num_players)
    clock = _Deadline(task.deadline, task.check_interval)
    if clock.passed():
        return tally, False

    for holes, weight, remaining in _assignments(setup, task.key):
        runouts = Combinations(remaining, setup.needed_board)
        if setup.variable or setup.needed_board == 0:
            deals = iter(runouts)
        else:
            deals = runouts.starting_with(task.key)

        for runout in deals:
            _showdown(holes, setup.board + runout, tally, weight)
            if clock.tick():
                return tally, False
    return tally, True


def _draw_probabilities(setup: DealSetup) -> list[Optional[np.ndarray]]:
    """Per variable player: combo probabilities, or None when uniform."""
    probabilities = []
    for _, candidates in setup.variable:
        weights = [w for _, w in candidates]
        if all(w == weights[0] for w in weights):
            probabilities.append(None)
            continue
        p = np.array([float(w) for w in weights])
        probabilities.append(p / p.sum())
    return probabilities


def _sample_holes(
    setup: DealSetup,
    rng: np.random.Generator,
    probabilities: list[Optional[np.ndarray]],
    max_rejections: int,
) -> tuple[tuple[tuple[Card, ...], ...], set[Card]]:
    """Draw every unknown hand by weight, redrawing all of them on a clash."""
    for _ in range(max_rejections):
        holes = list(setup.fixed)
        used: set[Card] = set()
        for (player, candidates), p in zip(setup.variable, probabilities):
            combo, _ = candidates[rng.choice(len(candidates), p=p)]
            if combo[0] in used or combo[1] in used:
                break
            used.update(combo)
            holes[player] = combo
        else:
            return tuple(holes), used
    raise EmptyRange(
        f"No non-conflicting deal found in {max_rejections:,} draws; "
        "the ranges barely overlap with the remaining cards"
    )


def _run_monte_carlo(task: PartitionTask) -> tuple[EquityTally, bool]:
    setup = task.setup
    tally = EquityTally(setup.num_players)
    clock = _Deadline(task.deadline, task.check_interval)
    if clock.passed():
        return tally, False

    rng = np.random.default_rng(task.seed)
    probabilities = _draw_probabilities(setup)

    for _ in range(task.samples):
        if setup.variable:
            holes, used = _sample_holes(setup, rng, probabilities, task.max_rejections)
            remaining = [c for c in setup.unseen if c not in used]
        else:
            holes, remaining = setup.fixed, setup.unseen
        runout = sample(remaining, setup.needed_board, rng)
        _showdown(holes, setup.board + runout, tally, 1)
        if clock.tick():
            return tally, False
    return tally, True


def run_partition(task: PartitionTask) -> tuple[EquityTally, bool]:
    """Run one partition; returns its tally and whether it finished."""
    if task.seed is None:
        return _run_exact(task)
    return _run_monte_carlo(task)


def _coerce_player(player: Union[PlayerHand, str]) -> PlayerHand:
    if isinstance(player, str):
        return parse_player(player)
    return player


class EquityCalculator:
    """
    Hold'em equity for two or more players.

    Supports exact enumeration for small cases and
    Monte Carlo simulation for larger ones.
    """

    def __init__(self, config: Optional[EquityConfig] = None):
        self.config = config or EquityConfig()

    def prepare(
        self,
        players: Sequence[Union[PlayerHand, str]],
        board: Union[Sequence[Card], str] = (),
    ) -> DealSetup:
        """
        Validate a query and work out what remains to be dealt.

        Args:
            players: ExactHand/RangeHand per player, or tokens like 'AsKh'
            board: Board cards (0, 3, 4 or 5), or a string like 'Ks7d2c'

        Returns:
            The deal setup shared by every partition

        Raises:
            TooFewPlayers, InvalidBoard, DuplicateCard, InsufficientDeck,
            EmptyRange
        """
        if len(players) < 2:
            raise TooFewPlayers(f"Need at least 2 players, got {len(players)}")
        players = [_coerce_player(p) for p in players]

        board = tuple(parse_cards(board) if isinstance(board, str) else board)
        if len(board) not in BOARD_STREETS:
            raise InvalidBoard(f"Board must have 0, 3, 4 or 5 cards, got {len(board)}")

        known = [known_cards(p) for p in players]
        check_disjoint(board, *known)
        unseen = tuple(remaining_deck(board, *known))
        dead = set(board).union(*known)

        needed_board = BOARD_SIZE - len(board)
        needed_holes = sum(
            p.missing if isinstance(p, ExactHand) else 2 for p in players
        )
        if needed_board + needed_holes > len(unseen):
            raise InsufficientDeck(needed_board + needed_holes, len(unseen))

        fixed = []
        variable = []
        for index, player in enumerate(players):
            if isinstance(player, RangeHand):
                candidates = tuple(
                    (combo, _plain(weight))
                    for combo, weight in player.range.available(dead)
                )
                if not candidates:
                    raise EmptyRange(
                        f"Range of player {index + 1} ({player}) is blocked by the known cards"
                    )
                variable.append((index, candidates))
                fixed.append(())
            elif player.missing == 0:
                fixed.append(player.cards)
            elif player.missing == 1:
                held = player.cards[0]
                variable.append((index, tuple((make_combo(held, c), 1) for c in unseen)))
                fixed.append(player.cards)
            else:
                pairs = Combinations(unseen, 2)
                variable.append((index, tuple((make_combo(a, b), 1) for a, b in pairs)))
                fixed.append(())

        return DealSetup(
            board=board,
            fixed=tuple(fixed),
            variable=tuple(variable),
            unseen=unseen,
            needed_board=needed_board,
        )

    def calculate(
        self,
        players: Sequence[Union[PlayerHand, str]],
        board: Union[Sequence[Card], str] = (),
        strategy: Optional[Strategy] = None,
        callback: Optional[Callable[[int, int], None]] = None,
    ) -> EquityReport:
        """
        Calculate each player's equity.

        Args:
            players: ExactHand/RangeHand per player, or tokens like 'AsKh'
            board: Board cards (0-5)
            strategy: Exact() or MonteCarlo(samples); None picks exact
                when the space fits under the ceiling
            callback: Optional callback(done, total) after each partition

        Returns:
            Report with one EquityResult per player, in input order
        """
        config = self.config
        if isinstance(strategy, MonteCarlo) and (
            not isinstance(strategy.samples, int) or strategy.samples <= 0
        ):
            raise SampleCountInvalid(
                f"Sample count must be a positive integer, got {strategy.samples!r}"
            )

        setup = self.prepare(players, board)
        space = setup.space_size()

        if strategy is None:
            if space <= config.exact_ceiling:
                strategy = Exact()
            else:
                if config.samples <= 0:
                    raise SampleCountInvalid(
                        f"Sample count must be positive, got {config.samples}"
                    )
                strategy = MonteCarlo(config.samples)
        elif isinstance(strategy, Exact) and space > config.exact_ceiling:
            raise CombinationSpaceTooLarge(space, config.exact_ceiling)

        start = time.time()
        deadline = start + config.timeout if config.timeout is not None else None

        seed = None
        if isinstance(strategy, Exact):
            tasks = self._exact_tasks(setup, deadline)
        else:
            seed_seq = np.random.SeedSequence(config.seed)
            seed = seed_seq.entropy
            tasks = self._monte_carlo_tasks(setup, strategy.samples, seed_seq, deadline)

        logger.debug(
            "Running %s over %d partitions (%d workers, up to %s deals)",
            strategy, len(tasks), config.workers, f"{space:,}",
        )

        tally = EquityTally(setup.num_players)
        completed = 0
        for done, (partial, finished) in enumerate(self._execute(tasks), start=1):
            tally = tally.merge(partial)
            completed += finished
            if callback:
                callback(done, len(tasks))

        undersampled = completed < len(tasks)
        if not tally.total and not undersampled:
            raise EmptyRange("The ranges leave no deal without clashing cards")

        if undersampled:
            logger.info(
                "Deadline reached after %d of %d partitions; %s deals evaluated",
                completed, len(tasks), tally.total,
            )

        return EquityReport(
            results=tally.results(),
            strategy=strategy,
            total_deals=tally.total,
            partitions=len(tasks),
            partitions_completed=completed,
            elapsed=time.time() - start,
            seed=seed,
            undersampled=undersampled,
        )

    def _exact_tasks(
        self,
        setup: DealSetup,
        deadline: Optional[float],
    ) -> list[PartitionTask]:
        if setup.variable:
            keys = range(len(setup.variable[0][1]))
        elif setup.needed_board:
            keys = Combinations(setup.unseen, setup.needed_board).partition_keys()
        else:
            keys = [None]

        return [
            PartitionTask(
                setup=setup,
                key=key,
                deadline=deadline,
                check_interval=self.config.check_interval,
            )
            for key in keys
        ]

    def _monte_carlo_tasks(
        self,
        setup: DealSetup,
        samples: int,
        seed_seq: np.random.SeedSequence,
        deadline: Optional[float],
    ) -> list[PartitionTask]:
        count = max(1, min(self.config.mc_partitions, samples))
        base, extra = divmod(samples, count)
        return [
            PartitionTask(
                setup=setup,
                samples=base + (1 if i < extra else 0),
                seed=child,
                deadline=deadline,
                check_interval=self.config.check_interval,
                max_rejections=self.config.max_rejections,
            )
            for i, child in enumerate(seed_seq.spawn(count))
        ]

    def _execute(self, tasks: list[PartitionTask]) -> Iterator[tuple[EquityTally, bool]]:
        if self.config.workers <= 1 or len(tasks) == 1:
            yield from map(run_partition, tasks)
            return

        # Tasks in a chunk share one pickled DealSetup
        chunksize = max(1, len(tasks) // (self.config.workers * 4))
        with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
            yield from executor.map(run_partition, tasks, chunksize=chunksize)


def calculate_equity(
    players: Sequence[Union[PlayerHand, str]],
    board: Union[Sequence[Card], str] = (),
    strategy: Optional[Strategy] = None,
    config: Optional[EquityConfig] = None,
) -> EquityReport:
    """
    Calculate equities for a one-off query.

    Args:
        players: ExactHand/RangeHand per player, or tokens like 'AsKh'
        board: Board cards
        strategy: Exact() or MonteCarlo(samples); None chooses automatically
        config: Calculation settings

    Returns:
        EquityReport with results in player order
    """
    return EquityCalculator(config).calculate(players, board, strategy)
