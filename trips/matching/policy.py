"""
Purpose: Central configuration for trip matching (single source of truth).
What it does:

Stores all tunable thresholds/caps:

BBOX_PADDING_DEG = 0.045 (~5 km)

ROUTE_THRESHOLD_KM = 2

MAX_DIRECTION_ANGLE_DEG = 90

MAX_RIDERS = 5 (ordering enumeration grows as (2n)! / 2^n)

MAX_WORKERS = 1 (sequential trip evaluation)

Rule: No logic here - just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchingPolicy:
    """
    Central configuration for matching riders to trips.

    Notes:
    - The bounding box and legacy haversine checks are cheap approximations.
      Widening them lets more trips reach the exact detour evaluation.
    - max_riders bounds the exhaustive ordering search: 5 riders is
      113,400 orderings per evaluation, 6 riders is 7,484,400.
    """

    # --- Cheap prefilter ---
    # Padding around the driver's origin/destination box, in degrees.
    bbox_padding_deg: float = 0.045

    # --- Route-aware matching ---
    # Max distance (km) from the route polyline (or endpoint, for legacy trips).
    route_threshold_km: float = 2.0

    # Max heading difference between rider and trip.
    max_direction_angle_deg: float = 90.0

    # --- Detour evaluation ---
    # Riders (existing + prospective) a single evaluation may enumerate.
    max_riders: int = 5

    # Trips evaluated in parallel by the search engine (1 = sequential).
    max_workers: int = 1

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        if self.bbox_padding_deg < 0:
            raise ValueError("bbox_padding_deg must be >= 0")

        if self.route_threshold_km <= 0:
            raise ValueError("route_threshold_km must be > 0")

        if not 0 <= self.max_direction_angle_deg <= 180:
            raise ValueError("max_direction_angle_deg must be within [0, 180]")

        if self.max_riders < 1:
            raise ValueError("max_riders must be >= 1")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")


def default_policy() -> MatchingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = MatchingPolicy()
    p.validate()
    return p


def strict_policy() -> MatchingPolicy:
    """
    Dense city centres: tighter corridor so riders are not offered trips that
    pass several blocks away.
    """
    p = MatchingPolicy(
        bbox_padding_deg=0.02,
        route_threshold_km=1.0,
        max_direction_angle_deg=60.0,
    )
    p.validate()
    return p


def relaxed_policy() -> MatchingPolicy:
    """
    Rural / intercity trips: wider corridor, evaluation spread over a few threads.
    """
    p = MatchingPolicy(
        bbox_padding_deg=0.09,
        route_threshold_km=5.0,
        max_direction_angle_deg=90.0,
        max_workers=4,
    )
    p.validate()
    return p
