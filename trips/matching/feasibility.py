# trips/matching/feasibility.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from routing.geometry import LngLat
from routing.matrix_adapter import RoutingError, TimeMatrixProvider

from ..models import RiderSegment, Stop, StopType, Trip
from .ordering import StopPair, count_valid_orderings, iter_valid_orderings
from .policy import MatchingPolicy, default_policy

logger = logging.getLogger(__name__)

# Fixed anchors of every evaluation's coordinate list
DRIVER_ORIGIN_INDEX = 0
DRIVER_DESTINATION_INDEX = 1


class TooManyRidersError(ValueError):
    """The rider count exceeds what exhaustive ordering search can handle."""
    pass


@dataclass(frozen=True)
class StopPlan:
    """
    Flat coordinate list for one evaluation plus the stop each index stands for.

    Layout: [driver origin, driver destination, P1, D1, P2, D2, ...]
    """
    coordinates: List[LngLat]
    stops: List[Stop]
    pairs: List[StopPair]


@dataclass(frozen=True)
class OptimalRoute:
    """Cheapest valid ordering found for a StopPlan."""
    ordering: Tuple[int, ...]
    duration_seconds: float
    explored_sequences: int = 0


@dataclass(frozen=True)
class DetourResult:
    """
    Output of a detour evaluation for one prospective rider on one trip.
    """
    is_feasible: bool
    best_stops: List[Stop]
    best_duration_seconds: float
    max_allowed_seconds: float

    # Diagnostics
    added_seconds: float = 0.0
    explored_sequences: int = 0
    reason: Optional[str] = None


def build_stop_plan(trip: Trip, prospective: Optional[RiderSegment] = None) -> StopPlan:
    """
    Lay out the driver's endpoints, then every current passenger's pickup and
    dropoff, then the prospective rider (if any) last.
    """
    coordinates: List[LngLat] = [trip.origin, trip.destination]
    stops: List[Stop] = [
        Stop(stop_type=StopType.ORIGIN, coordinates=trip.origin, username=trip.driver),
        Stop(stop_type=StopType.DESTINATION, coordinates=trip.destination, username=trip.driver),
    ]
    pairs: List[StopPair] = []

    riders = list(trip.passengers)
    if prospective is not None:
        riders.append(prospective)

    for rider in riders:
        pickup_index = len(coordinates)
        coordinates.append(rider.pickup)
        stops.append(Stop(stop_type=StopType.PICKUP, coordinates=rider.pickup, username=rider.username))

        dropoff_index = len(coordinates)
        coordinates.append(rider.dropoff)
        stops.append(Stop(stop_type=StopType.DROPOFF, coordinates=rider.dropoff, username=rider.username))

        pairs.append(StopPair(pickup_index=pickup_index, dropoff_index=dropoff_index))

    return StopPlan(coordinates=coordinates, stops=stops, pairs=pairs)


def route_duration_seconds(ordering: Sequence[int], durations: List[List[float]]) -> float:
    """
    Sum durations along driver origin -> ordering... -> driver destination.
    """
    route = [DRIVER_ORIGIN_INDEX, *ordering, DRIVER_DESTINATION_INDEX]
    total = 0.0
    for a, b in zip(route[:-1], route[1:]):
        total += float(durations[a][b])
    return total


def find_optimal_route(
    plan: StopPlan,
    time_matrix_provider: TimeMatrixProvider,
    policy: Optional[MatchingPolicy] = None,
) -> OptimalRoute:
    """
    Minimum-duration route over every valid stop ordering of the plan.

    One time-matrix lookup per call. Raises RoutingError if the lookup fails
    or returns an unusable matrix, TooManyRidersError if the plan is too big
    to enumerate.
    """
    policy = policy or default_policy()
    if len(plan.pairs) > policy.max_riders:
        raise TooManyRidersError(
            f"{len(plan.pairs)} riders exceeds max_riders={policy.max_riders} "
            f"({count_valid_orderings(len(plan.pairs))} orderings)"
        )

    # Precompute durations between all stops
    durations = time_matrix_provider(plan.coordinates)
    _validate_matrix(durations, len(plan.coordinates))

    best_time = float("inf")
    best_ordering: Optional[Tuple[int, ...]] = None
    explored = 0

    for ordering in iter_valid_orderings(plan.pairs):
        explored += 1
        t = route_duration_seconds(ordering, durations)
        if t < best_time:
            best_time = t
            best_ordering = tuple(ordering)

    if best_ordering is None:
        raise RoutingError(f"no finite route over {explored} orderings")
    return OptimalRoute(ordering=best_ordering, duration_seconds=best_time, explored_sequences=explored)


def evaluate_detour(
    trip: Trip,
    rider_origin: LngLat,
    rider_dest: LngLat,
    time_matrix_provider: TimeMatrixProvider,
    *,
    seats_requested: int = 1,
    username: Optional[str] = None,
    policy: Optional[MatchingPolicy] = None,
) -> DetourResult:
    """
    Best route for the trip's current passengers plus one prospective rider,
    compared against base_trip_duration + max_detour_minutes * 60.
    """
    prospective = RiderSegment(
        username=username or "",
        pickup=rider_origin,
        dropoff=rider_dest,
        seats_requested=seats_requested,
    )
    plan = build_stop_plan(trip, prospective)
    best = find_optimal_route(plan, time_matrix_provider, policy)

    max_allowed = trip.max_route_duration
    is_feasible = best.duration_seconds <= max_allowed
    reason = None if is_feasible else "exceeds detour allowance"

    logger.debug(
        f"Trip {trip.id}: best {best.duration_seconds:.0f}s vs allowed {max_allowed:.0f}s "
        f"over {best.explored_sequences} orderings"
    )

    return DetourResult(
        is_feasible=is_feasible,
        best_stops=[plan.stops[i] for i in (DRIVER_ORIGIN_INDEX, *best.ordering, DRIVER_DESTINATION_INDEX)],
        best_duration_seconds=best.duration_seconds,
        max_allowed_seconds=max_allowed,
        added_seconds=best.duration_seconds - trip.base_trip_duration,
        explored_sequences=best.explored_sequences,
        reason=reason,
    )


def check_detour_feasible(
    trip: Trip,
    rider_origin: LngLat,
    rider_dest: LngLat,
    time_matrix_provider: TimeMatrixProvider,
    *,
    policy: Optional[MatchingPolicy] = None,
) -> bool:
    """
    True if adding the rider keeps the best route within the driver's
    detour allowance. Lookup failures propagate as RoutingError so the caller
    can skip this trip.
    """
    result = evaluate_detour(trip, rider_origin, rider_dest, time_matrix_provider, policy=policy)
    return result.is_feasible


def recompute_optimal_duration(
    trip: Trip,
    time_matrix_provider: TimeMatrixProvider,
    *,
    passengers: Optional[Sequence[RiderSegment]] = None,
    policy: Optional[MatchingPolicy] = None,
) -> float:
    """
    Optimal route duration (seconds) for the trip's passenger set.

    `passengers` overrides trip.passengers so a caller can price a change
    before committing it. With no passengers this is the base duration and
    no lookup is made.
    """
    riders = list(trip.passengers if passengers is None else passengers)
    if not riders:
        return trip.base_trip_duration

    plan = build_stop_plan(replace(trip, passengers=riders))
    return find_optimal_route(plan, time_matrix_provider, policy).duration_seconds


# -------------------------
# Internal helpers
# -------------------------

def _validate_matrix(durations: List[List[float]], size: int) -> None:
    if durations is None or len(durations) != size:
        raise RoutingError("invalid time matrix (row count)")
    for row in durations:
        if row is None or len(row) != size:
            raise RoutingError("invalid time matrix (col count)")
        for value in row:
            if value is None or not math.isfinite(value) or value < 0:
                raise RoutingError("invalid time matrix (missing, non-finite or negative duration)")
