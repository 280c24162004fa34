# trips/matching/ordering.py

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Sequence, Set


@dataclass(frozen=True)
class StopPair:
    """
    Indices (into the evaluation's coordinate list) of one rider's pickup and
    dropoff. The pickup must be visited before the dropoff.
    """
    pickup_index: int
    dropoff_index: int


def _validate_pairs(pairs: Sequence[StopPair]) -> None:
    seen: Set[int] = set()
    for pair in pairs:
        if pair.pickup_index == pair.dropoff_index:
            raise ValueError(f"pickup and dropoff share index {pair.pickup_index}")
        for index in (pair.pickup_index, pair.dropoff_index):
            if index in seen:
                raise ValueError(f"stop index {index} used by more than one rider")
            seen.add(index)


def iter_valid_orderings(pairs: Sequence[StopPair]) -> Iterator[List[int]]:
    """
    Yield every permutation of the riders' stop indices in which each rider's
    pickup comes before their own dropoff. Riders are otherwise independent,
    so any interleaving is allowed.

    Backtracking: at each step place any remaining index whose prerequisite
    (the paired pickup, for a dropoff) is already placed.

    Exhaustive by construction. The number of orderings is (2n)! / 2^n for
    n riders, so callers must keep n small.
    """
    _validate_pairs(pairs)

    indices: List[int] = []
    pickup_of: Dict[int, int] = {}
    for pair in pairs:
        indices.append(pair.pickup_index)
        indices.append(pair.dropoff_index)
        pickup_of[pair.dropoff_index] = pair.pickup_index

    current: List[int] = []
    placed: Set[int] = set()

    def permute(remaining: List[int]) -> Iterator[List[int]]:
        if not remaining:
            yield list(current)
            return

        for position, index in enumerate(remaining):
            prerequisite = pickup_of.get(index)
            if prerequisite is not None and prerequisite not in placed:
                continue

            current.append(index)
            placed.add(index)
            yield from permute(remaining[:position] + remaining[position + 1:])
            placed.discard(index)
            current.pop()

    yield from permute(indices)


def generate_valid_orderings(pairs: Sequence[StopPair]) -> List[List[int]]:
    return list(iter_valid_orderings(pairs))


def count_valid_orderings(rider_count: int) -> int:
    """Number of valid orderings for rider_count independent riders: (2n)! / 2^n."""
    if rider_count < 0:
        raise ValueError("rider_count must be >= 0")
    return math.factorial(2 * rider_count) // (2 ** rider_count)
