"""
Purpose: Cheap rejection of trips before any routing call.
What it does:
- bounding box containment of the rider's endpoints against the trip's
  origin/destination box (padded)
- seat availability

False positives are expected here (the detour evaluator filters them later).
False negatives are bounded by the padding.
"""

from __future__ import annotations

from typing import List, Sequence

from routing.geometry import LngLat

from ..models import Trip

DEFAULT_PADDING_DEG = 0.045  # ~5 km


def is_within_bounding_box(
    point: LngLat,
    anchor1: LngLat,
    anchor2: LngLat,
    padding_deg: float = DEFAULT_PADDING_DEG,
) -> bool:
    """
    True if the point falls inside the box spanned by the two anchors,
    expanded by padding_deg on every side. Bounds are inclusive.
    """
    min_lng = min(anchor1[0], anchor2[0]) - padding_deg
    max_lng = max(anchor1[0], anchor2[0]) + padding_deg
    min_lat = min(anchor1[1], anchor2[1]) - padding_deg
    max_lat = max(anchor1[1], anchor2[1]) + padding_deg

    return min_lng <= point[0] <= max_lng and min_lat <= point[1] <= max_lat


def prefilter_trips(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trips: Sequence[Trip],
    padding_deg: float = DEFAULT_PADDING_DEG,
) -> List[Trip]:
    """
    Keep trips whose padded origin/destination box contains BOTH rider points.
    Input order is preserved.
    """
    return [
        trip for trip in trips
        if is_within_bounding_box(rider_origin, trip.origin, trip.destination, padding_deg)
        and is_within_bounding_box(rider_dest, trip.origin, trip.destination, padding_deg)
    ]


def filter_by_seats(trips: Sequence[Trip], seats_requested: int = 1) -> List[Trip]:
    """Keep trips with at least seats_requested free seats."""
    if seats_requested < 1:
        raise ValueError("seats_requested must be >= 1")
    return [trip for trip in trips if trip.seats_available >= seats_requested]
