"""
Lazy combination generation and uniform sampling.

Combinations yields every unordered k-subset of a card list exactly once,
in lexicographic index order, without building the whole space in
memory. The space can be split into disjoint slices keyed by the first
(lowest-index) element, which is how exact enumeration is partitioned
across workers.
"""

from itertools import combinations
from math import comb
from typing import Iterator, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def count_combinations(n: int, k: int) -> int:
    """Number of k-subsets of n items (0 when k > n)."""
    if k < 0:
        raise ValueError(f"Cannot choose a negative number of items: {k}")
    return comb(n, k)


class Combinations:
    """
    Restartable lazy sequence of k-subsets.

    Iterating twice produces the same subsets in the same order. k == 0
    yields a single empty tuple; k > len(items) yields nothing.
    """

    def __init__(self, items: Sequence[T], k: int):
        if k < 0:
            raise ValueError(f"Cannot choose a negative number of items: {k}")
        self.items = tuple(items)
        self.k = k

    def __iter__(self) -> Iterator[tuple[T, ...]]:
        return combinations(self.items, self.k)

    def __len__(self) -> int:
        return comb(len(self.items), self.k)

    def partition_keys(self) -> list[int]:
        """
        Indices whose slices cover the whole space exactly once.

        For k == 0 the only subset is empty and there is nothing to key
        on, so callers should iterate the whole sequence instead.
        """
        if self.k == 0:
            return []
        return list(range(len(self.items) - self.k + 1))

    def starting_with(self, first: int) -> Iterator[tuple[T, ...]]:
        """Subsets whose lowest-index element is items[first]."""
        if self.k == 0:
            raise ValueError("The empty subset has no first element")
        head = (self.items[first],)
        return (head + rest for rest in combinations(self.items[first + 1:], self.k - 1))

    def count_starting_with(self, first: int) -> int:
        """Size of the slice returned by starting_with(first)."""
        return comb(len(self.items) - first - 1, self.k - 1)


def sample(items: Sequence[T], k: int, rng: np.random.Generator) -> tuple[T, ...]:
    """
    Draw k distinct items uniformly without replacement.

    Args:
        items: Pool to draw from
        k: Number of items to draw
        rng: numpy Generator; the same seed reproduces the same draw

    Returns:
        Tuple of k items in draw order
    """
    if k < 0:
        raise ValueError(f"Cannot choose a negative number of items: {k}")
    if k > len(items):
        raise ValueError(f"Cannot draw {k} items from {len(items)}")
    if k == 0:
        return ()
    picks = rng.choice(len(items), size=k, replace=False)
    return tuple(items[i] for i in picks)
