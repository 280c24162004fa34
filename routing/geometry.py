"""
Purpose: Pure spherical geometry over (lng, lat) coordinates.
What it does:

- haversine great-circle distance (km)
- point -> segment projection (local flat approximation, clamped)
- point -> polyline nearest segment search
- cumulative distance along a polyline
- initial compass bearing and angular difference

Rule: No routing service calls, no trip logic. Functions here never fail on
well formed input; the only error is a polyline too short to project onto.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

#internal coordinate type : (lng, lat) - same order as the Mapbox wire format
LngLat = Tuple[float, float]
Polyline = List[LngLat]

EARTH_RADIUS_KM = 6371.0


class PolylineError(ValueError):
    """Raised when a polyline has fewer than two points."""
    pass


@dataclass(frozen=True)
class SegmentProjection:
    """
    Result of projecting a point onto one segment.
    fraction is the clamped position along the segment (0 = start, 1 = end).
    """
    distance_km: float
    fraction: float


@dataclass(frozen=True)
class PolylineProjection:
    """
    Result of projecting a point onto the nearest segment of a polyline.
    """
    distance_km: float
    segment_index: int
    fraction: float


def haversine_distance(a: LngLat, b: LngLat) -> float:
    """Great-circle distance between two (lng, lat) points in km."""
    lon1, lat1 = a
    lon2, lat2 = b
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def point_to_segment_distance(point: LngLat, seg_start: LngLat, seg_end: LngLat) -> SegmentProjection:
    """
    Minimum distance from a point to a segment.

    The segment is treated as locally flat: longitude deltas are scaled by the
    cosine of the mean latitude of the two endpoints. The projection parameter
    is clamped to [0, 1] so the result never extrapolates past an endpoint.
    The distance itself is the true haversine distance to the projected point.
    """
    cos_lat = math.cos(math.radians((seg_start[1] + seg_end[1]) / 2))
    px = (point[0] - seg_start[0]) * cos_lat
    py = point[1] - seg_start[1]
    sx = (seg_end[0] - seg_start[0]) * cos_lat
    sy = seg_end[1] - seg_start[1]

    length_sq = sx * sx + sy * sy
    fraction = 0.0
    # zero-length segment keeps fraction 0 -> distance to seg_start
    if length_sq > 0:
        fraction = max(0.0, min(1.0, (px * sx + py * sy) / length_sq))

    projected = (
        seg_start[0] + fraction * (seg_end[0] - seg_start[0]),
        seg_start[1] + fraction * (seg_end[1] - seg_start[1]),
    )
    return SegmentProjection(distance_km=haversine_distance(point, projected), fraction=fraction)


def point_to_polyline_distance(point: LngLat, polyline: Sequence[LngLat]) -> PolylineProjection:
    """
    Project a point onto every consecutive segment of the polyline and return
    the closest one. On ties the earliest segment wins.

    Raises:
        PolylineError: the polyline has fewer than 2 points.
    """
    if polyline is None or len(polyline) < 2:
        raise PolylineError("At least two points are required to project onto a polyline.")

    best_distance = math.inf
    best_segment = 0
    best_fraction = 0.0

    for index in range(len(polyline) - 1):
        projection = point_to_segment_distance(point, polyline[index], polyline[index + 1])
        if projection.distance_km < best_distance:
            best_distance = projection.distance_km
            best_segment = index
            best_fraction = projection.fraction

    return PolylineProjection(distance_km=best_distance, segment_index=best_segment, fraction=best_fraction)


def distance_along_polyline(polyline: Sequence[LngLat], segment_index: int, fraction: float) -> float:
    """
    Cumulative km from the start of the polyline to the point at `fraction`
    of segment `segment_index`.
    """
    total = 0.0
    for index in range(segment_index):
        total += haversine_distance(polyline[index], polyline[index + 1])
    if segment_index < len(polyline) - 1:
        total += fraction * haversine_distance(polyline[segment_index], polyline[segment_index + 1])
    return total


def bearing(a: LngLat, b: LngLat) -> float:
    """Initial compass bearing from a to b, degrees in [0, 360)."""
    lon1, lat1 = math.radians(a[0]), math.radians(a[1])
    lon2, lat2 = math.radians(b[0]), math.radians(b[1])
    d_lon = lon2 - lon1
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def angular_difference(first: float, second: float) -> float:
    """Smallest angle between two bearings, in [0, 180]."""
    diff = abs(first - second) % 360
    if diff > 180:
        diff = 360 - diff
    return diff


def is_same_direction(
    rider_origin: LngLat,
    rider_dest: LngLat,
    trip_origin: LngLat,
    trip_dest: LngLat,
    max_angle: float = 90,
) -> bool:
    """
    True when the overall rider heading is within max_angle degrees of the
    overall trip heading (origin -> destination for both).
    """
    rider_bearing = bearing(rider_origin, rider_dest)
    trip_bearing = bearing(trip_origin, trip_dest)
    return angular_difference(rider_bearing, trip_bearing) <= max_angle
