"""
Purpose: The matching "orchestrator" (single entry point).
What it does:

Coordinates the pipeline end-to-end for one rider:

- takes the candidate trips (from the storage layer)

- bounding box prefilter (prefilter.py) - no routing calls

- seat availability (prefilter.py)

- EITHER route-aware matching (route_match.py) for browsing
  OR detour evaluation (feasibility.py) using the time matrix provider

- returns the accepted trips plus the ids of trips that were rejected or
  skipped because their time lookup failed

Rule: Engine is the only file other modules should call directly for matching.
A lookup failure on one trip never aborts the batch.
"""

# trips/matching/engine.py

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from routing.geometry import LngLat
from routing.matrix_adapter import RoutingError, TimeMatrixProvider

from ..models import Trip
from .feasibility import DetourResult, TooManyRidersError, evaluate_detour
from .policy import MatchingPolicy, default_policy
from .prefilter import filter_by_seats, prefilter_trips
from .route_match import find_matching_trips

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    """
    Output of a search run for one rider.
    """
    trips: List[Trip]
    rejected_trip_ids: List[str] = field(default_factory=list)
    # trips whose evaluation failed (lookup error, too many riders); not yet evaluated
    skipped_trip_ids: List[str] = field(default_factory=list)


def _candidate_trips(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trips: Sequence[Trip],
    seats_requested: int,
    policy: MatchingPolicy,
) -> List[Trip]:
    boxed = prefilter_trips(rider_origin, rider_dest, trips, policy.bbox_padding_deg)
    candidates = filter_by_seats(boxed, seats_requested)
    logger.debug(
        f"{len(trips)} trips -> {len(boxed)} in bounding box -> {len(candidates)} with seats"
    )
    return candidates


def browse_trips(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trips: Sequence[Trip],
    *,
    seats_requested: int = 1,
    policy: Optional[MatchingPolicy] = None,
) -> List[Trip]:
    """
    Pure browse: prefilter, seats, then route-aware matching against each
    trip's polyline. Makes no routing calls.
    """
    policy = policy or default_policy()
    policy.validate()

    candidates = _candidate_trips(rider_origin, rider_dest, trips, seats_requested, policy)
    return find_matching_trips(
        rider_origin,
        rider_dest,
        candidates,
        threshold_km=policy.route_threshold_km,
        max_angle=policy.max_direction_angle_deg,
    )


def search_trips(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trips: Sequence[Trip],
    *,
    time_matrix_provider: TimeMatrixProvider,
    seats_requested: int = 1,
    policy: Optional[MatchingPolicy] = None,
) -> SearchResult:
    """
    Main search entry point.

    Parameters
    ----------
    rider_origin, rider_dest:
        (lng, lat) of the prospective rider.
    trips:
        Candidate trips (e.g. every trip departing today or later).
    time_matrix_provider:
        Signature: (coords: List[LngLat]) -> NxN matrix seconds.
        Raises RoutingError on failure.
    seats_requested:
        Seats the rider needs.
    policy:
        MatchingPolicy controlling padding, rider cap, parallelism.

    Returns
    -------
    SearchResult:
        trips: trips that can take the rider within their detour allowance,
               in input order
        rejected_trip_ids: evaluated, detour too large
        skipped_trip_ids: evaluation failed for that trip only
    """
    policy = policy or default_policy()
    policy.validate()

    candidates = _candidate_trips(rider_origin, rider_dest, trips, seats_requested, policy)
    if not candidates:
        return SearchResult(trips=[])

    def evaluate(trip: Trip) -> Optional[DetourResult]:
        try:
            return evaluate_detour(
                trip,
                rider_origin,
                rider_dest,
                time_matrix_provider,
                seats_requested=seats_requested,
                policy=policy,
            )
        except (RoutingError, TooManyRidersError) as exc:
            # If the lookup fails for one trip, skip it rather than failing all
            logger.warning(f"Detour check failed for trip {trip.id}: {exc}")
            return None

    if policy.max_workers > 1 and len(candidates) > 1:
        with ThreadPoolExecutor(max_workers=policy.max_workers) as executor:
            results = list(executor.map(evaluate, candidates))
    else:
        results = [evaluate(trip) for trip in candidates]

    feasible: List[Trip] = []
    rejected: List[str] = []
    skipped: List[str] = []
    for trip, result in zip(candidates, results):
        if result is None:
            skipped.append(trip.id)
        elif result.is_feasible:
            feasible.append(trip)
        else:
            rejected.append(trip.id)

    logger.info(
        f"Search: {len(feasible)} feasible, {len(rejected)} rejected, {len(skipped)} skipped "
        f"of {len(candidates)} candidates"
    )
    return SearchResult(trips=feasible, rejected_trip_ids=rejected, skipped_trip_ids=skipped)
