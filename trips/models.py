"""
Purpose: Domain models for the Trips capability.
What it does:
- Defines core data structures:
- RiderSegment (username, pickup coords, dropoff coords, seats requested)
- Trip (driver endpoints, seats, detour tolerance, durations, passengers, requests, route geometry)
- Stop (type ORIGIN/DESTINATION/PICKUP/DROPOFF, username, lng/lat)

Rule: No routing calls, no matching logic. Models only.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from routing.geometry import LngLat, Polyline


class StopType(Enum):
    ORIGIN = "ORIGIN"
    DESTINATION = "DESTINATION"
    PICKUP = "PICKUP"
    DROPOFF = "DROPOFF"


@dataclass(frozen=True)
class Stop:
    """
    A stop on a driver's route. Every rider has a PICKUP stop that must occur
    before its corresponding DROPOFF stop; ORIGIN and DESTINATION belong to the
    driver and always open and close the route.
    """

    stop_type: StopType
    coordinates: LngLat
    username: Optional[str] = None


@dataclass(frozen=True)
class RiderSegment:
    """
    One rider's leg of a trip: where they get in, where they get out,
    and how many seats they take.
    """

    username: str
    pickup: LngLat
    dropoff: LngLat
    seats_requested: int = 1

    def __post_init__(self):
        if self.seats_requested < 1:
            raise ValueError("seats_requested must be >= 1")


@dataclass
class Trip:
    """
    A driver's trip that riders can join.

    seats_available counts the seats still free (accepting a rider
    decrements it). Durations are in seconds.
    """

    id: str
    driver: str
    origin: LngLat
    destination: LngLat
    seats_available: int
    max_detour_minutes: float
    base_trip_duration: float
    current_route_duration: float = 0.0

    passengers: List[RiderSegment] = field(default_factory=list)
    requests: List[RiderSegment] = field(default_factory=list)

    # legacy trips have no precomputed geometry
    route_geometry: Optional[Polyline] = None
    departure_date: Optional[date] = None

    @property
    def has_route_geometry(self) -> bool:
        return bool(self.route_geometry) and len(self.route_geometry) >= 2

    @property
    def max_route_duration(self) -> float:
        """Longest route the driver accepts: base duration plus the detour tolerance."""
        return self.base_trip_duration + self.max_detour_minutes * 60

    def find_passenger(self, username: str) -> Optional[RiderSegment]:
        return next((p for p in self.passengers if p.username == username), None)

    def find_request(self, username: str) -> Optional[RiderSegment]:
        return next((r for r in self.requests if r.username == username), None)

    @staticmethod
    def new(
        driver: str,
        origin: LngLat,
        destination: LngLat,
        *,
        seats_available: int,
        max_detour_minutes: float,
        base_trip_duration: float,
        route_geometry: Optional[Polyline] = None,
        departure_date: Optional[date] = None,
    ) -> Trip:
        #uuid for unique trip id generation
        return Trip(
            id=str(uuid.uuid4()),
            driver=driver,
            origin=origin,
            destination=destination,
            seats_available=seats_available,
            max_detour_minutes=max_detour_minutes,
            base_trip_duration=base_trip_duration,
            current_route_duration=base_trip_duration,
            route_geometry=route_geometry,
            departure_date=departure_date,
        )
