"""
Purpose: Route-aware matching of a rider against a trip's path (no routing calls).
What it does:

Decides whether a rider's origin and destination lie "on-route" and
"in-order" for a trip:

1. same general direction (bearing difference <= max angle)

2. pickup within threshold of the route polyline

3. destination within threshold of the route polyline

4. pickup projects before destination along the polyline

Legacy trips without route geometry fall back to a direct haversine check
of both endpoints.

Rule: Pure and total. Every rider/trip pair yields a boolean.
"""

from __future__ import annotations

from typing import List, Sequence

from routing.geometry import (
    LngLat,
    PolylineProjection,
    distance_along_polyline,
    haversine_distance,
    is_same_direction,
    point_to_polyline_distance,
)

from ..models import Trip

DEFAULT_THRESHOLD_KM = 2.0


def is_pickup_before_destination(
    polyline: Sequence[LngLat],
    pickup: PolylineProjection,
    destination: PolylineProjection,
) -> bool:
    """
    True if the rider's pickup projection comes strictly before the
    destination projection when walking the polyline from its start.
    """
    pickup_km = distance_along_polyline(polyline, pickup.segment_index, pickup.fraction)
    destination_km = distance_along_polyline(polyline, destination.segment_index, destination.fraction)
    return pickup_km < destination_km


def match_route(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trip: Trip,
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    max_angle: float = 90,
) -> bool:
    # Legacy trip: no geometry to project onto
    if not trip.has_route_geometry:
        return (
            haversine_distance(rider_origin, trip.origin) <= threshold_km
            and haversine_distance(rider_dest, trip.destination) <= threshold_km
        )

    polyline = trip.route_geometry

    if not is_same_direction(rider_origin, rider_dest, trip.origin, trip.destination, max_angle):
        return False

    pickup = point_to_polyline_distance(rider_origin, polyline)
    if pickup.distance_km > threshold_km:
        return False

    destination = point_to_polyline_distance(rider_dest, polyline)
    if destination.distance_km > threshold_km:
        return False

    return is_pickup_before_destination(polyline, pickup, destination)


def find_matching_trips(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trips: Sequence[Trip],
    threshold_km: float = DEFAULT_THRESHOLD_KM,
    max_angle: float = 90,
) -> List[Trip]:
    """Trips that pass match_route, in input order."""
    return [
        trip for trip in trips
        if match_route(rider_origin, rider_dest, trip, threshold_km, max_angle)
    ]
