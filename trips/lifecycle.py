"""
Purpose: In-memory trip lifecycle (request -> passenger -> leave).
What it does:
- create_trip: validate inputs, look up the driver's direct route once
  (base_trip_duration + geometry)
- request_to_join / reject_request: manage the pending request list
- accept_request / leave_trip: move riders in and out of the passenger list,
  adjust free seats, recompute current_route_duration

Applies state rules only (no persistence, no locking):
 - "is there a seat for this rider?"
 - "has this rider already asked / already joined?"

Rule: Lifecycle owns state transitions, matching owns optimization logic.
Route durations are priced BEFORE the trip is changed, so a failed lookup
leaves the trip untouched.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from routing.geometry import LngLat
from routing.matrix_adapter import TimeMatrixProvider

from .matching.feasibility import recompute_optimal_duration
from .matching.policy import MatchingPolicy, default_policy
from .models import RiderSegment, Trip

logger = logging.getLogger(__name__)


class TripStateError(ValueError):
    """The requested transition is not allowed in the trip's current state."""
    pass


class RiderNotFoundError(LookupError):
    """No passenger or pending request for the given username."""
    pass


def create_trip(
    driver: str,
    origin: LngLat,
    destination: LngLat,
    *,
    seats_available: int,
    max_detour_minutes: float,
    routing_client,
    departure_date: Optional[date] = None,
    today: Optional[date] = None,
    policy: Optional[MatchingPolicy] = None,
) -> Trip:
    """
    Build a new trip with its direct-route duration.

    routing_client must provide compute_route([origin, destination]) returning
    {"duration": seconds, "geometry": [(lng, lat), ...]} (see MapboxClient).
    Routing failures propagate; no trip is created.

    seats_available is capped at policy.max_riders: every rider takes at least
    one seat, so a full trip can still be priced.
    """
    policy = policy or default_policy()
    if not driver:
        raise ValueError("driver is required")
    if seats_available < 1:
        raise ValueError("seats_available must be >= 1")
    if seats_available > policy.max_riders:
        raise ValueError(f"seats_available must be <= {policy.max_riders} (max_riders)")
    if max_detour_minutes < 0:
        raise ValueError("max_detour_minutes must be >= 0")

    today = today or date.today()
    if departure_date is not None and departure_date < today:
        raise ValueError("departure_date cannot be in the past")

    route = routing_client.compute_route([origin, destination])
    geometry = route.get("geometry") or None

    trip = Trip.new(
        driver,
        origin,
        destination,
        seats_available=seats_available,
        max_detour_minutes=max_detour_minutes,
        base_trip_duration=float(route["duration"]),
        route_geometry=geometry,
        departure_date=departure_date,
    )
    logger.info(f"Created trip {trip.id} for {driver}: base {trip.base_trip_duration:.0f}s")
    return trip


def request_to_join(trip: Trip, rider: RiderSegment) -> None:
    """
    Add a pending request. One request per rider; riders already on board
    cannot ask again.
    """
    if trip.find_request(rider.username) is not None:
        raise TripStateError(f"{rider.username} already requested to join")
    if trip.find_passenger(rider.username) is not None:
        raise TripStateError(f"{rider.username} already joined")
    if rider.seats_requested > trip.seats_available:
        raise TripStateError("Not enough seats available.")

    trip.requests.append(rider)


def reject_request(trip: Trip, username: str) -> RiderSegment:
    request = trip.find_request(username)
    if request is None:
        raise RiderNotFoundError(f"No matching request from {username}")

    trip.requests = [r for r in trip.requests if r.username != username]
    return request


def accept_request(
    trip: Trip,
    username: str,
    time_matrix_provider: TimeMatrixProvider,
    *,
    policy: Optional[MatchingPolicy] = None,
) -> Trip:
    """
    Move a pending request into the passenger list, take its seats and
    recompute the optimal route duration for the new passenger set.
    """
    request = trip.find_request(username)
    if request is None:
        raise RiderNotFoundError(f"No matching request from {username}")

    # Check there are still enough seats
    if request.seats_requested > trip.seats_available:
        raise TripStateError("Not enough seats available.")

    passengers = trip.passengers + [request]
    duration = recompute_optimal_duration(
        trip, time_matrix_provider, passengers=passengers, policy=policy
    )

    trip.requests = [r for r in trip.requests if r.username != username]
    trip.passengers = passengers
    trip.seats_available -= request.seats_requested
    trip.current_route_duration = duration
    return trip


def leave_trip(
    trip: Trip,
    username: str,
    time_matrix_provider: TimeMatrixProvider,
    *,
    policy: Optional[MatchingPolicy] = None,
) -> Trip:
    """
    Remove a passenger, restore their seats and recompute the route.
    With no passengers left the route is back to base_trip_duration.
    """
    passenger = trip.find_passenger(username)
    if passenger is None:
        raise RiderNotFoundError(f"Passenger {username} not found")

    passengers = [p for p in trip.passengers if p.username != username]
    duration = recompute_optimal_duration(
        trip, time_matrix_provider, passengers=passengers, policy=policy
    )

    trip.passengers = passengers
    trip.seats_available += passenger.seats_requested
    trip.current_route_duration = duration
    return trip
